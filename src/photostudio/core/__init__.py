"""Core functionality for the Photo Studio.

- **Configuration Model** (models.py): characters, settings, history records
- **StudioConfig** (config.py): Pydantic Settings, ``PHOTOSTUDIO_`` prefix
- **InferenceClient** (inference_client.py): httpx client for the remote service
- **GenerationOrchestrator** (orchestrator.py): compile, dispatch, record
- **StudioSession** (session.py): explicit session state
- **Storage** (storage.py): keyed JSON slots
- **Images** (images.py): data URL and mask helpers

Usage Example
-------------
    from photostudio.core import GenerationOrchestrator, InferenceClient, config
    from photostudio.api.history_store import HistoryStore
    from photostudio.core.storage import JsonFileStore

    history = HistoryStore(JsonFileStore(config.data_dir))
    async with InferenceClient(config) as client:
        orchestrator = GenerationOrchestrator(client, history)
        outcomes = await orchestrator.generate_batch(characters, settings)
"""

from photostudio.core.config import StudioConfig, config
from photostudio.core.inference_client import InferenceClient
from photostudio.core.models import (
    CharacterConfig,
    DistinguishingMark,
    GeneratedImage,
    GenerationSettings,
    Prop,
    create_default_character,
)
from photostudio.core.orchestrator import GenerationOrchestrator, GenerationOutcome
from photostudio.core.session import StudioSession

__all__ = [
    "CharacterConfig",
    "DistinguishingMark",
    "GeneratedImage",
    "GenerationOrchestrator",
    "GenerationOutcome",
    "GenerationSettings",
    "InferenceClient",
    "Prop",
    "StudioConfig",
    "StudioSession",
    "config",
    "create_default_character",
]
