"""Keyed JSON slots used for history and the cross-page session handoff.

Each slot holds one JSON document under a string key.  Two backends exist:

- :class:`JsonFileStore` keeps one ``<key>.json`` file per slot in a
  directory; it backs the durable generation history.
- :class:`MemoryStore` keeps slots in a dictionary; it backs session-scoped
  state that should not outlive the process.

Reads are forgiving: a missing, empty or corrupt slot reads as ``None``
rather than raising, so every consumer bootstraps itself on first use.
Writes replace the whole slot.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class KeyValueStore:
    """Interface shared by the slot backends."""

    def get(self, key: str) -> Any | None:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Slots held in process memory.

    Values are stored as serialised JSON so that callers never share
    mutable objects with the store.
    """

    def __init__(self) -> None:
        self._slots: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        raw = self._slots.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        self._slots[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._slots.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Slots persisted as JSON files in a directory.

    Args:
        directory: Directory that holds the slot files.  Created if missing.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Return the file backing *key*; unsafe characters become ``_``."""
        return self.directory / f"{_SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> Any | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable slot '%s': %s", key, e)
            return None

    def set(self, key: str, value: Any) -> None:
        with open(self.path_for(key), "w", encoding="utf-8") as handle:
            json.dump(value, handle, indent=2)

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        if path.exists():
            path.unlink()
