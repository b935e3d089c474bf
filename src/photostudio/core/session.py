"""Session state: the active characters and generation settings.

:class:`StudioSession` owns the editable configuration explicitly so that
any UI (or the REST API) reads and mutates it through one object rather
than through module-level globals.

Invariants
----------
- between 1 and ``max_characters`` characters exist at all times
- character ids are unique within the session
- every mutation goes through a merge-update that re-validates the record,
  so slider clamping always applies

Cross-Page Handoff
------------------
Editors on other surfaces (appearance, clothing) read the current
characters from a session-scoped key/value slot.  When a store is given,
the character list is read from that slot on construction and written back
after every mutation.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from photostudio.core.exceptions import SessionError
from photostudio.core.models import (
    CharacterConfig,
    GeneratedImage,
    GenerationSettings,
    create_default_character,
)
from photostudio.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY = "studio-characters"
DEFAULT_MAX_CHARACTERS = 5


class StudioSession:
    """Editable configuration for one user session.

    Args:
        store: Optional slot store for the cross-page character handoff.
        key: Slot name for the character list.
        max_characters: Upper bound on characters in the session.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        *,
        key: str = DEFAULT_SESSION_KEY,
        max_characters: int = DEFAULT_MAX_CHARACTERS,
    ) -> None:
        self._store = store
        self.key = key
        self.max_characters = max_characters
        self.settings = GenerationSettings()
        self.characters: list[CharacterConfig] = self._restore() or [create_default_character(0)]
        self._persist()

    def __repr__(self) -> str:
        return (
            f"StudioSession(characters={len(self.characters)}, "
            f"model={self.settings.model}, image_count={self.settings.image_count})"
        )

    # -- Handoff ------------------------------------------------------------

    def _restore(self) -> list[CharacterConfig]:
        if self._store is None:
            return []
        raw = self._store.get(self.key)
        if not isinstance(raw, list):
            return []
        try:
            characters = [CharacterConfig.model_validate(item) for item in raw]
        except ValidationError as e:
            logger.warning("Ignoring invalid session handoff slot: %s", e.error_count())
            return []

        # Drop duplicate ids and anything beyond the limit.
        seen: set[str] = set()
        unique = []
        for character in characters:
            if character.id not in seen:
                seen.add(character.id)
                unique.append(character)
        return unique[: self.max_characters]

    def _persist(self) -> None:
        if self._store is not None:
            self._store.set(
                self.key, [character.model_dump(mode="json") for character in self.characters]
            )

    # -- Characters ---------------------------------------------------------

    def get_character(self, character_id: str) -> CharacterConfig:
        """Return the character with *character_id*.

        Raises:
            SessionError: If no such character exists.
        """
        for character in self.characters:
            if character.id == character_id:
                return character
        raise SessionError(f"Unknown character: {character_id}")

    def add_character(self) -> CharacterConfig:
        """Append a character with default values.

        Raises:
            SessionError: If the session already holds ``max_characters``.
        """
        if len(self.characters) >= self.max_characters:
            raise SessionError(f"A session can hold at most {self.max_characters} characters")
        character = create_default_character(len(self.characters))
        self.characters.append(character)
        self._persist()
        logger.debug("Added character %s", character.id)
        return character

    def remove_character(self, character_id: str) -> None:
        """Remove a character.

        Raises:
            SessionError: If the id is unknown or it is the last character.
        """
        self.get_character(character_id)
        if len(self.characters) <= 1:
            raise SessionError("At least one character must remain")
        self.characters = [c for c in self.characters if c.id != character_id]
        self._persist()

    def update_character(self, character_id: str, **changes: Any) -> CharacterConfig:
        """Merge *changes* into a character and re-validate it.

        The ``id`` field cannot be changed.

        Raises:
            SessionError: If the id is unknown.
            pydantic.ValidationError: If a changed value is invalid.
        """
        current = self.get_character(character_id)
        changes.pop("id", None)
        updated = CharacterConfig.model_validate({**current.model_dump(), **changes})
        self.characters = [updated if c.id == character_id else c for c in self.characters]
        self._persist()
        return updated

    # -- Settings -----------------------------------------------------------

    def update_settings(self, **changes: Any) -> GenerationSettings:
        """Merge *changes* into the settings and re-validate them."""
        self.settings = GenerationSettings.model_validate({**self.settings.model_dump(), **changes})
        return self.settings

    # -- Reprompt -----------------------------------------------------------

    def reprompt(self, image: GeneratedImage) -> None:
        """Restore the configuration that produced *image*.

        The session receives deep copies, so editing it afterwards never
        changes the history entry.
        """
        self.characters = [c.model_copy(deep=True) for c in image.characters]
        self.settings = image.settings.model_copy(deep=True)
        self._persist()
        logger.info("Restored configuration from history entry %s", image.id)
