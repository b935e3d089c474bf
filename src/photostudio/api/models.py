"""Pydantic request and response models for the Photo Studio API.

These models define the JSON schema for the endpoints that are not simply
the configuration records themselves.  FastAPI uses them for automatic
request validation, serialisation, and OpenAPI documentation generation.

Models
------
GenerateRequest
    Payload for ``POST /api/generate`` and ``POST /api/prompt/compile``.
    Either field may be omitted to use the active session's value.
RetouchRequest
    Payload for ``POST /api/edit/retouch``.
OutcomeResponse
    One entry of the ``POST /api/generate`` result list.
EditResponse
    Result of any editor endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from photostudio.core.models import CharacterConfig, GeneratedImage, GenerationSettings


class GenerateRequest(BaseModel):
    """Request body for generation and prompt preview.

    Attributes:
        characters: Characters to depict.  ``None`` uses the session's
            characters.
        settings: Generation settings.  ``None`` uses the session's settings.
    """

    characters: list[CharacterConfig] | None = Field(
        default=None,
        description="Characters to depict (defaults to the active session).",
    )
    settings: GenerationSettings | None = Field(
        default=None,
        description="Generation settings (defaults to the active session).",
    )


class RetouchRequest(BaseModel):
    """Request body for the ``POST /api/edit/retouch`` endpoint.

    Attributes:
        image_data: Photo to retouch as a data URL.
        mask_data: Optional painted mask; white regions are retouched.
    """

    image_data: str = Field(..., description="Photo to retouch (data URL).")
    mask_data: str | None = Field(
        default=None,
        description="Optional black/white mask; only white regions are altered.",
    )


class OutcomeResponse(BaseModel):
    """Outcome of one request in a generation batch."""

    success: bool
    image: GeneratedImage | None = None
    error: str | None = None
    error_kind: str | None = None


class EditResponse(BaseModel):
    """Result of an editor request."""

    image_url: str
    prompt: str
