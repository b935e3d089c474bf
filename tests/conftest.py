"""Shared pytest fixtures for Photo Studio tests."""

import base64
import io
import json
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import httpx
import pytest
from PIL import Image

from photostudio.api.history_store import HistoryStore
from photostudio.core.config import StudioConfig
from photostudio.core.inference_client import InferenceClient
from photostudio.core.models import CharacterConfig, GenerationSettings, create_default_character
from photostudio.core.storage import MemoryStore


class FakeInferenceService:
    """Scripted stand-in for the remote inference service.

    Each call pops the next queued ``(status, body)`` pair; when the queue is
    empty a successful response is returned.  Every request body is recorded.
    """

    def __init__(self) -> None:
        self.requests: list[dict] = []
        self.paths: list[str] = []
        self.responses: list[tuple[int, object]] = []
        self._counter = 0

    def queue(self, status: int, body: object) -> None:
        self.responses.append((status, body))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        self.requests.append(json.loads(request.content))
        if self.responses:
            status, body = self.responses.pop(0)
        else:
            self._counter += 1
            status, body = 200, {"imageUrl": f"https://images.test/{self._counter}.png"}
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> StudioConfig:
    """Create a test configuration with a temporary data directory."""
    return StudioConfig(
        _env_file=None,
        inference_base_url="https://inference.test/functions/v1",
        api_key="test-key",
        data_dir=str(temp_dir / "data"),
    )


@pytest.fixture
def fake_service() -> FakeInferenceService:
    return FakeInferenceService()


@pytest.fixture
def http_client(fake_service: FakeInferenceService) -> httpx.AsyncClient:
    """An httpx client whose transport is the fake service."""
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_service.handler))


@pytest.fixture
def inference_client(test_config: StudioConfig, http_client: httpx.AsyncClient) -> InferenceClient:
    return InferenceClient(test_config, http_client=http_client)


@pytest.fixture
def history() -> HistoryStore:
    return HistoryStore(MemoryStore())


@pytest.fixture
def default_character() -> CharacterConfig:
    """A character with every field at its default, labelled "Person 1"."""
    return create_default_character(0, character_id="char-1")


@pytest.fixture
def default_settings() -> GenerationSettings:
    return GenerationSettings()


def _png_data_url(color, size=(8, 8), mode="RGB") -> str:
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture
def png_data_url():
    """Factory producing small solid-colour PNG data URLs."""
    return _png_data_url
