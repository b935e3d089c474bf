"""Configuration management for the Photo Studio.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PHOTOSTUDIO_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PHOTOSTUDIO_* prefix)
2. .env file in the project root
3. Default values defined in StudioConfig

Example .env file:
    PHOTOSTUDIO_INFERENCE_BASE_URL=https://example.functions.dev/v1
    PHOTOSTUDIO_API_KEY=sk-...
    PHOTOSTUDIO_DATA_DIR=data
    PHOTOSTUDIO_LOG_LEVEL=DEBUG

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from photostudio.core.config import config

    print(config.inference_base_url)
    print(config.history_limit)

Service Endpoints
-----------------
The inference service exposes three functions under ``inference_base_url``:
- ``generate_path``: multi-character photo generation
- ``clothing_path``: clothing replacement on an existing photo
- ``retouch_path``: skin retouching, optionally guided by a mask
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StudioConfig(BaseSettings):
    """Main configuration for the Photo Studio.

    Values are loaded from environment variables with the PHOTOSTUDIO_ prefix,
    with fallback to defaults defined here. ``data_dir`` is created on
    initialisation if it does not exist.

    Attributes
    ----------
    Inference Service:
        inference_base_url : str
            Base URL of the remote inference functions
        api_key : str | None
            Bearer token sent with every request (omitted when unset)
        generate_path, clothing_path, retouch_path : str
            Function names appended to the base URL
        high_quality_model, fast_model : str
            Backing model identifiers for the two model selector values
        request_timeout : float
            Per-request timeout in seconds

    Persistence:
        data_dir : Path
            Directory holding the JSON key/value slots
        history_key : str
            Slot name of the generation history
        history_limit : int
            Maximum number of history entries kept (most recent first)
        session_key : str
            Slot name of the cross-page character handoff

    Limits:
        max_characters : int
            Maximum characters per session
        max_image_count : int
            Maximum independent requests for one logical generation

    Server:
        server_host, server_port : bind address of the uvicorn server
        log_level : root logging level
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PHOTOSTUDIO_",
        case_sensitive=False,
    )

    # Inference service
    inference_base_url: str = Field(
        default="http://localhost:54321/functions/v1",
        description="Base URL of the remote inference functions",
    )
    api_key: str | None = Field(
        default=None,
        description="Bearer token for the inference service",
    )
    generate_path: str = Field(default="generate-image")
    clothing_path: str = Field(default="edit-clothing")
    retouch_path: str = Field(default="retouch-image")
    high_quality_model: str = Field(
        default="google/gemini-3-pro-image-preview",
        description="Model identifier used when the 'high-quality' model is selected",
    )
    fast_model: str = Field(
        default="google/gemini-2.5-flash-image",
        description="Model identifier used when the 'fast' model is selected",
    )
    request_timeout: float = Field(
        default=180.0,
        description="Timeout in seconds for a single inference request",
        gt=0,
    )

    # Persistence
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for history and session JSON slots",
    )
    history_key: str = Field(default="ai-studio-history")
    history_limit: int = Field(default=50, ge=1)
    session_key: str = Field(default="studio-characters")

    # Limits
    max_characters: int = Field(default=5, ge=1)
    max_image_count: int = Field(default=10, ge=1)

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: str = Field(default="INFO")

    def __init__(self, **kwargs):
        """Initialize configuration and create the data directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)

    def model_identifier(self, model: str) -> str:
        """Resolve a model selector value to its backing model identifier.

        Unknown selector values are passed through unchanged so that callers
        may address a backing model directly.
        """
        return {
            "high-quality": self.high_quality_model,
            "fast": self.fast_model,
        }.get(model, model)

    def endpoint(self, path: str) -> str:
        """Join a function name onto the inference base URL."""
        return f"{self.inference_base_url.rstrip('/')}/{path.lstrip('/')}"


# Global configuration instance
config = StudioConfig()
