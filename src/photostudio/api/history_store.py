"""Generation history storage for the Photo Studio.

This module isolates history persistence from ``photostudio.api.main`` and
the orchestrator so that the bounded, most-recent-first list stays testable
as a small unit.

The history is intentionally simple:

- the whole list lives in a single key/value slot as a JSON array
- list order is reverse-chronological (newest first)
- at most ``limit`` entries are kept; older ones fall off the end
- the slot is read once when the store is created and overwritten wholly
  on every change (last writer wins)

Because the slot may have been written by an older version or edited by
hand, entries that no longer validate as
:class:`~photostudio.core.models.GeneratedImage` are dropped on load.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from photostudio.core.models import GeneratedImage
from photostudio.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_KEY = "ai-studio-history"
DEFAULT_HISTORY_LIMIT = 50


class HistoryStore:
    """Bounded, most-recent-first list of generated images.

    Args:
        store: Backing key/value store.
        key: Slot name holding the history.
        limit: Maximum number of entries kept.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = DEFAULT_HISTORY_KEY,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._store = store
        self.key = key
        self.limit = limit
        self._entries: list[GeneratedImage] = self.load()

    @property
    def entries(self) -> list[GeneratedImage]:
        """A copy of the current entries, newest first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def load(self) -> list[GeneratedImage]:
        """Read and validate the persisted history.

        Returns:
            Surviving entries in persisted order, truncated to ``limit``.
        """
        raw_entries = self._store.get(self.key)
        if not isinstance(raw_entries, list):
            return []

        entries: list[GeneratedImage] = []
        for raw in raw_entries:
            try:
                entries.append(GeneratedImage.model_validate(raw))
            except ValidationError as e:
                logger.warning("Dropping invalid history entry: %s", e.error_count())
        return entries[: self.limit]

    def save(self, entries: list[GeneratedImage]) -> None:
        """Replace the history with *entries* (truncated to ``limit``)."""
        self._entries = list(entries[: self.limit])
        self._store.set(self.key, [entry.model_dump(mode="json") for entry in self._entries])

    def prepend(self, image: GeneratedImage) -> list[GeneratedImage]:
        """Insert *image* as the newest entry and persist.

        Returns:
            The updated history, newest first.
        """
        self.save([image, *self._entries])
        logger.debug("History now holds %d entries", len(self._entries))
        return self.entries

    def find(self, image_id: str) -> GeneratedImage | None:
        return next((entry for entry in self._entries if entry.id == image_id), None)

    def clear(self) -> None:
        """Remove every entry and delete the slot."""
        self._entries = []
        self._store.delete(self.key)
        logger.info("History cleared")
