"""Photo Studio — FastAPI Application.

This module is the single entry point for the web application.  It defines
the FastAPI ``app`` instance, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
- **Configuration** comes from :data:`~photostudio.core.config.config`
  (``PHOTOSTUDIO_*`` environment variables).
- **Session state** (active characters and settings) is owned by one
  :class:`~photostudio.core.session.StudioSession` on ``app.state``.
- **Image generation** is delegated to
  :class:`~photostudio.core.orchestrator.GenerationOrchestrator`, which
  talks to the remote inference service through
  :class:`~photostudio.core.inference_client.InferenceClient`.
- **History persistence** uses one JSON slot in ``data_dir``; no database
  required.

Endpoints
---------
========  ================================  ==================================
Method    Path                              Purpose
========  ================================  ==================================
GET       ``/api/options``                  Enumerated options and limits
GET       ``/api/session``                  Active characters and settings
PUT       ``/api/session/settings``         Merge-update the settings
POST      ``/api/characters``               Add a default character
PATCH     ``/api/characters/{id}``          Merge-update a character
DELETE    ``/api/characters/{id}``          Remove a character
POST      ``/api/prompt/compile``           Preview the compiled prompt
POST      ``/api/generate``                 Generate ``image_count`` images
GET       ``/api/history``                  Generation history, newest first
GET       ``/api/history/{id}``             Single history entry
POST      ``/api/history/{id}/reprompt``    Restore an entry's configuration
DELETE    ``/api/history``                  Clear the history
POST      ``/api/edit/appearance``          Skin/hair/eye colour edit
POST      ``/api/edit/clothing``            Clothing replacement
POST      ``/api/edit/retouch``             Skin retouch (optional mask)
========  ================================  ==================================

Usage
-----
CLI (installed entry point)::

    photostudio

Direct invocation::

    python -m photostudio.api.main
"""

from __future__ import annotations

import logging
import typing
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import APIRouter, Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from photostudio import __version__
from photostudio.api.edit_prompts import (
    EYE_COLOR_LABELS,
    HAIR_COLOR_LABELS,
    MAX_CLOTHING_IMAGES,
    SKIN_COLORS,
    AppearanceEdit,
    ClothingEdit,
    build_appearance_prompt,
    build_clothing_prompt,
    build_retouch_prompt,
    collect_appearance_references,
    collect_clothing_references,
)
from photostudio.api.history_store import HistoryStore
from photostudio.api.models import (
    EditResponse,
    GenerateRequest,
    OutcomeResponse,
    RetouchRequest,
)
from photostudio.api.prompt_builder import build_prompt
from photostudio.api.references import collect_reference_images
from photostudio.core import models as studio_models
from photostudio.core.config import StudioConfig, config
from photostudio.core.exceptions import InferenceError, SessionError
from photostudio.core.images import image_size, normalize_mask
from photostudio.core.inference_client import InferenceClient
from photostudio.core.models import (
    HEIGHT_MAX_INCHES,
    HEIGHT_MIN_INCHES,
    SKIN_TONE_MAX,
    SKIN_TONE_MIN,
    CharacterConfig,
    GeneratedImage,
    GenerationSettings,
)
from photostudio.core.orchestrator import GenerationOrchestrator
from photostudio.core.session import StudioSession
from photostudio.core.storage import JsonFileStore, MemoryStore

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _options(literal_type) -> list[str]:
    return list(typing.get_args(literal_type))


# ---------------------------------------------------------------------------
# State accessors.
# ---------------------------------------------------------------------------


def _session(request: Request) -> StudioSession:
    return request.app.state.session


def _history(request: Request) -> HistoryStore:
    return request.app.state.history


def _client(request: Request) -> InferenceClient:
    return request.app.state.inference_client


def _orchestrator(request: Request) -> GenerationOrchestrator:
    return request.app.state.orchestrator


def _settings(request: Request) -> StudioConfig:
    return request.app.state.config


def _resolve_request(
    req: GenerateRequest, session: StudioSession
) -> tuple[list[CharacterConfig], GenerationSettings]:
    characters = req.characters if req.characters is not None else session.characters
    settings = req.settings if req.settings is not None else session.settings
    if not characters:
        raise HTTPException(status_code=400, detail="At least one character is required")
    return characters, settings


# ---------------------------------------------------------------------------
# Options and session routes.
# ---------------------------------------------------------------------------


@router.get("/options")
async def get_options(request: Request) -> dict:
    """Return every enumerated option and limit for building a UI."""
    cfg = _settings(request)
    return {
        "version": __version__,
        "models": _options(studio_models.ModelChoice),
        "aspect_ratios": _options(studio_models.AspectRatio),
        "camera_angles": _options(studio_models.CameraAngle),
        "lighting": _options(studio_models.LightingOption),
        "detail_levels": _options(studio_models.DetailLevel),
        "body_sizes": _options(studio_models.BodySize),
        "expressions": _options(studio_models.ExpressionPreset),
        "hairstyle_options": _options(studio_models.HairstyleOption),
        "poses": _options(studio_models.PosePreset),
        "mark_types": _options(studio_models.MarkType),
        "skin_colors": list(SKIN_COLORS),
        "hair_colors": HAIR_COLOR_LABELS,
        "eye_colors": EYE_COLOR_LABELS,
        "limits": {
            "max_characters": cfg.max_characters,
            "max_image_count": cfg.max_image_count,
            "max_clothing_images": MAX_CLOTHING_IMAGES,
            "skin_tone": [SKIN_TONE_MIN, SKIN_TONE_MAX],
            "height_inches": [HEIGHT_MIN_INCHES, HEIGHT_MAX_INCHES],
            "history": cfg.history_limit,
        },
    }


@router.get("/session")
async def get_session(request: Request) -> dict:
    """Return the active characters and settings."""
    session = _session(request)
    return {
        "characters": [c.model_dump(mode="json") for c in session.characters],
        "settings": session.settings.model_dump(mode="json"),
    }


@router.put("/session/settings")
async def update_settings(request: Request, changes: dict[str, Any] = Body(...)) -> dict:
    """Merge-update the active generation settings."""
    try:
        settings = _session(request).update_settings(**changes)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return settings.model_dump(mode="json")


@router.post("/characters")
async def add_character(request: Request) -> dict:
    """Append a character with default values.

    Raises:
        HTTPException: 400 when the session is full.
    """
    try:
        character = _session(request).add_character()
    except SessionError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return character.model_dump(mode="json")


@router.patch("/characters/{character_id}")
async def update_character(
    request: Request,
    character_id: str,
    changes: dict[str, Any] = Body(...),
) -> dict:
    """Merge-update one character.

    Raises:
        HTTPException: 404 for an unknown id, 422 for invalid values.
    """
    try:
        character = _session(request).update_character(character_id, **changes)
    except SessionError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return character.model_dump(mode="json")


@router.delete("/characters/{character_id}")
async def remove_character(request: Request, character_id: str) -> dict:
    """Remove one character; the last character cannot be removed."""
    session = _session(request)
    try:
        session.get_character(character_id)
    except SessionError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    try:
        session.remove_character(character_id)
    except SessionError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"success": True, "deleted": character_id}


# ---------------------------------------------------------------------------
# Prompt and generation routes.
# ---------------------------------------------------------------------------


@router.post("/prompt/compile")
async def compile_prompt(request: Request, req: GenerateRequest) -> dict:
    """Preview the compiled prompt without generating an image."""
    characters, settings = _resolve_request(req, _session(request))
    return {
        "compiled_prompt": build_prompt(characters, settings),
        "reference_count": len(collect_reference_images(characters, settings)),
    }


@router.post("/generate")
async def generate_images(request: Request, req: GenerateRequest) -> dict:
    """Generate ``settings.image_count`` images as independent requests.

    Each request succeeds or fails on its own; failures are reported per
    outcome and never affect the history.

    Raises:
        HTTPException: 400 for an empty character list or an image count
            above ``max_image_count``.
    """
    characters, settings = _resolve_request(req, _session(request))
    limit = _settings(request).max_image_count
    if settings.image_count > limit:
        raise HTTPException(
            status_code=400,
            detail=f"image_count must be between 1 and {limit}",
        )

    outcomes = await _orchestrator(request).generate_batch(characters, settings)
    return {
        "success": any(outcome.succeeded for outcome in outcomes),
        "compiled_prompt": build_prompt(characters, settings),
        "outcomes": [
            OutcomeResponse(
                success=outcome.succeeded,
                image=outcome.image,
                error=outcome.error,
                error_kind=outcome.error_kind,
            ).model_dump(mode="json")
            for outcome in outcomes
        ],
    }


# ---------------------------------------------------------------------------
# History routes.
# ---------------------------------------------------------------------------


def _find_history_entry(request: Request, image_id: str) -> GeneratedImage:
    entry = _history(request).find(image_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Image not found")
    return entry


@router.get("/history")
async def get_history(request: Request) -> dict:
    """Return the full history, newest first."""
    history = _history(request)
    return {
        "total": len(history),
        "images": [entry.model_dump(mode="json") for entry in history.entries],
    }


@router.get("/history/{image_id}")
async def get_history_entry(request: Request, image_id: str) -> dict:
    """Return one history entry by UUID."""
    return _find_history_entry(request, image_id).model_dump(mode="json")


@router.post("/history/{image_id}/reprompt")
async def reprompt(request: Request, image_id: str) -> dict:
    """Restore the configuration that produced a history entry."""
    entry = _find_history_entry(request, image_id)
    session = _session(request)
    session.reprompt(entry)
    return {
        "characters": [c.model_dump(mode="json") for c in session.characters],
        "settings": session.settings.model_dump(mode="json"),
    }


@router.delete("/history")
async def clear_history(request: Request) -> dict:
    """Remove every history entry."""
    _history(request).clear()
    return {"success": True}


# ---------------------------------------------------------------------------
# Editor routes.
# ---------------------------------------------------------------------------


def _raise_for_inference(e: InferenceError) -> typing.NoReturn:
    logger.warning("Edit request failed (%s): %s", e.kind, e.user_message)
    raise HTTPException(status_code=e.status_code, detail=e.user_message) from e


@router.post("/edit/appearance", response_model=EditResponse)
async def edit_appearance(request: Request, edit: AppearanceEdit) -> EditResponse:
    """Change skin, hair or eye colour of an existing photo."""
    if not edit.has_changes():
        raise HTTPException(status_code=400, detail="Select at least one change")

    prompt = build_appearance_prompt(edit)
    try:
        image_url = await _client(request).generate_image(
            prompt, "high-quality", collect_appearance_references(edit)
        )
    except InferenceError as e:
        _raise_for_inference(e)
    return EditResponse(image_url=image_url, prompt=prompt)


@router.post("/edit/clothing", response_model=EditResponse)
async def edit_clothing(request: Request, edit: ClothingEdit) -> EditResponse:
    """Replace the clothing in an existing photo."""
    if not edit.has_changes():
        raise HTTPException(
            status_code=400,
            detail="Provide clothing reference images or a description",
        )

    prompt = build_clothing_prompt(edit)
    try:
        image_url = await _client(request).edit_clothing(
            prompt, collect_clothing_references(edit)
        )
    except InferenceError as e:
        _raise_for_inference(e)
    return EditResponse(image_url=image_url, prompt=prompt)


@router.post("/edit/retouch", response_model=EditResponse)
async def edit_retouch(request: Request, req: RetouchRequest) -> EditResponse:
    """Retouch skin, optionally restricted to the white regions of a mask.

    Raises:
        HTTPException: 400 when the photo or mask cannot be decoded.
    """
    mask = None
    if req.mask_data:
        try:
            mask = normalize_mask(req.mask_data, size=image_size(req.image_data))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    prompt = build_retouch_prompt(masked=mask is not None)
    try:
        image_url = await _client(request).retouch_image(req.image_data, mask, prompt=prompt)
    except InferenceError as e:
        _raise_for_inference(e)
    return EditResponse(image_url=image_url, prompt=prompt)


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    app_config: StudioConfig | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        app_config: Configuration to use.  Defaults to the global ``config``.
        http_client: Optional ``httpx.AsyncClient`` for the inference
            service, mainly for tests.

    Returns:
        The configured application.
    """
    cfg = app_config or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create the client, stores, session and orchestrator; close the client."""
        # --- Startup -------------------------------------------------------
        client = InferenceClient(cfg, http_client=http_client)
        history = HistoryStore(
            JsonFileStore(cfg.data_dir), key=cfg.history_key, limit=cfg.history_limit
        )
        app.state.config = cfg
        app.state.inference_client = client
        app.state.history = history
        app.state.session = StudioSession(
            MemoryStore(), key=cfg.session_key, max_characters=cfg.max_characters
        )
        app.state.orchestrator = GenerationOrchestrator(client, history)
        logger.info("Photo Studio ready (%d history entries loaded).", len(history))

        yield  # Application runs here.

        # --- Shutdown ------------------------------------------------------
        await client.aclose()
        logger.info("Inference client closed on shutdown.")

    app = FastAPI(
        title="Photo Studio",
        description="Multi-character photo generation API.",
        version=__version__,
        lifespan=lifespan,
    )

    # Allow cross-origin requests so a frontend can be served from a
    # different port during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~photostudio.core.config.config`
    (``PHOTOSTUDIO_SERVER_HOST`` and ``PHOTOSTUDIO_SERVER_PORT``).

    This function is registered as the ``photostudio`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    uvicorn.run(
        "photostudio.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
