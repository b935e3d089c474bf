"""Generation orchestration: compile, dispatch, record.

:class:`GenerationOrchestrator` ties the pure compiler functions to the
inference service and the history:

1. Compile the prompt and collect the reference images.
2. Send one request through :class:`~photostudio.core.inference_client.InferenceClient`.
3. On success, snapshot the configuration into a
   :class:`~photostudio.core.models.GeneratedImage` and prepend it to the
   history.  On failure, leave the history untouched.

Failures never propagate out of :meth:`GenerationOrchestrator.generate`;
they are logged, passed to the notifier and returned in the
:class:`GenerationOutcome`.  There are no automatic retries.

Batches
-------
``settings.image_count`` requests are dispatched concurrently by
:meth:`GenerationOrchestrator.generate_batch`.  Each request compiles and
dispatches on its own, so one failure never blocks or rolls back another.
History updates all happen on the event loop thread.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from photostudio.api.history_store import HistoryStore
from photostudio.api.prompt_builder import build_prompt
from photostudio.api.references import collect_reference_images
from photostudio.core.exceptions import InferenceError, TransportError
from photostudio.core.inference_client import InferenceClient
from photostudio.core.models import CharacterConfig, GeneratedImage, GenerationSettings

logger = logging.getLogger(__name__)

# Receives ("success" | "error", message) for every finished request.
Notifier = Callable[[str, str], None]


def _log_notifier(level: str, message: str) -> None:
    if level == "error":
        logger.warning("Generation failed: %s", message)
    else:
        logger.info("Generation succeeded: %s", message)


@dataclass
class GenerationOutcome:
    """Result of one generation request.

    Exactly one of ``image`` and ``error`` is set.
    """

    image: GeneratedImage | None = None
    error: str | None = None
    error_kind: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.image is not None


class GenerationOrchestrator:
    """Runs generation requests and records successes in the history.

    Args:
        client: Inference client used for every request.
        history: History receiving successful results.
        notifier: Optional callback for user-facing notifications.  Defaults
            to logging.
    """

    def __init__(
        self,
        client: InferenceClient,
        history: HistoryStore,
        notifier: Notifier | None = None,
    ) -> None:
        self.client = client
        self.history = history
        self._notify = notifier or _log_notifier

    async def generate(
        self,
        characters: Sequence[CharacterConfig],
        settings: GenerationSettings,
    ) -> GenerationOutcome:
        """Compile and dispatch one generation request.

        Args:
            characters: Characters to depict.  Must not be empty.
            settings: Shared generation settings.

        Returns:
            The outcome.  Service failures are reported here, not raised.

        Raises:
            ValueError: If ``characters`` is empty.
        """
        prompt = build_prompt(characters, settings)
        reference_images = collect_reference_images(characters, settings)
        # Snapshot before dispatch; in-flight edits never reach the history entry.
        snapshot = [character.model_copy(deep=True) for character in characters]
        settings_snapshot = settings.model_copy(deep=True)

        try:
            image_url = await self.client.generate_image(prompt, settings.model, reference_images)
        except InferenceError as e:
            self._notify("error", e.user_message)
            return GenerationOutcome(error=e.user_message, error_kind=e.kind)
        except Exception as e:
            logger.error("Unexpected generation error: %s", e, exc_info=True)
            failure = TransportError()
            self._notify("error", failure.user_message)
            return GenerationOutcome(error=failure.user_message, error_kind=failure.kind)

        image = GeneratedImage.create(image_url, prompt, snapshot, settings_snapshot)
        self.history.prepend(image)
        self._notify("success", "Image generated!")
        return GenerationOutcome(image=image)

    async def generate_batch(
        self,
        characters: Sequence[CharacterConfig],
        settings: GenerationSettings,
    ) -> list[GenerationOutcome]:
        """Dispatch ``settings.image_count`` independent requests concurrently.

        Returns:
            One outcome per request, in dispatch order.  Completion order is
            not guaranteed and the history reflects completion order.
        """
        count = settings.image_count
        logger.info("Dispatching %d generation request(s)", count)

        outcomes = await asyncio.gather(
            *(self.generate(characters, settings) for _ in range(count))
        )

        succeeded = sum(1 for outcome in outcomes if outcome.succeeded)
        logger.info("Batch finished: %d/%d succeeded", succeeded, count)
        return list(outcomes)
