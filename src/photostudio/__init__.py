"""Photo Studio - multi-character AI photo generation."""

__version__ = "0.1.0"

from photostudio.core.config import StudioConfig, config

__all__ = [
    "StudioConfig",
    "config",
]
