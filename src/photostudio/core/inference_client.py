"""Async HTTP client for the remote inference service.

:class:`InferenceClient` is the only component that talks to the network.
It wraps an ``httpx.AsyncClient`` and exposes one coroutine per service
function:

- :meth:`InferenceClient.generate_image`: multi-character generation
- :meth:`InferenceClient.edit_clothing`: clothing replacement
- :meth:`InferenceClient.retouch_image`: skin retouching, optionally masked

All three share one response contract: ``{"imageUrl": ...}`` on success or
``{"error": ...}`` on a failure the service chose to explain.  Every other
outcome is classified into an :class:`~photostudio.core.exceptions.InferenceError`
subclass by :func:`interpret_response`.  No request is ever retried.

Usage
-----
::

    async with InferenceClient(config) as client:
        url = await client.generate_image(prompt, "fast", reference_images)
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from photostudio.core.config import StudioConfig
from photostudio.core.exceptions import (
    EmptyResultError,
    QuotaExceededError,
    RateLimitError,
    ServiceReportedError,
    TransportError,
)

logger = logging.getLogger(__name__)


def interpret_response(response: httpx.Response) -> str:
    """Extract the image URL from a service response or raise.

    Args:
        response: The raw HTTP response.

    Returns:
        The ``imageUrl`` value.

    Raises:
        RateLimitError: On HTTP 429.
        QuotaExceededError: On HTTP 402.
        TransportError: On any other non-2xx status or a malformed body.
        ServiceReportedError: When a 2xx body carries an ``error`` message.
        EmptyResultError: When a 2xx body has no ``imageUrl``.
    """
    try:
        body: Any = response.json()
    except ValueError:
        body = None
    reported = body.get("error") if isinstance(body, dict) else None

    if response.status_code == 429:
        raise RateLimitError(reported)
    if response.status_code == 402:
        raise QuotaExceededError(reported)
    if not response.is_success:
        logger.error(
            "Inference service returned %s: %s", response.status_code, response.text[:500]
        )
        raise TransportError(f"Service error: {response.status_code}")

    if not isinstance(body, dict):
        raise TransportError("Malformed response from the inference service")
    if reported:
        raise ServiceReportedError(str(reported))

    image_url = body.get("imageUrl")
    if not image_url:
        raise EmptyResultError()
    return image_url


class InferenceClient:
    """Client for the generate, clothing-edit and retouch functions.

    Args:
        config: Application configuration (base URL, paths, API key,
            timeout and model identifiers).
        http_client: Optional pre-built ``httpx.AsyncClient``.  Tests pass
            one with a ``MockTransport``.  A client supplied here is not
            closed by :meth:`aclose`.
    """

    def __init__(
        self,
        config: StudioConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=config.request_timeout)

    async def __aenter__(self) -> InferenceClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    async def _post(self, path: str, payload: dict[str, Any]) -> str:
        url = self._config.endpoint(path)
        try:
            response = await self._http.post(url, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error("Request to %s failed: %s", url, e)
            raise TransportError() from e
        return interpret_response(response)

    async def generate_image(
        self,
        prompt: str,
        model: str,
        reference_images: list[str],
    ) -> str:
        """Request one generated photo.

        Args:
            prompt: The compiled prompt.
            model: Model selector (``"high-quality"`` or ``"fast"``) or a
                backing model identifier.
            reference_images: Ordered reference image payloads.

        Returns:
            URL (or data URL) of the generated image.
        """
        model_id = self._config.model_identifier(model)
        logger.info(
            "Requesting generation (model=%s, references=%d, prompt_chars=%d)",
            model_id,
            len(reference_images),
            len(prompt),
        )
        return await self._post(
            self._config.generate_path,
            {"prompt": prompt, "model": model_id, "referenceImages": reference_images},
        )

    async def edit_clothing(self, prompt: str, reference_images: list[str]) -> str:
        """Request a clothing edit; the first reference is the source photo."""
        logger.info("Requesting clothing edit (references=%d)", len(reference_images))
        return await self._post(
            self._config.clothing_path,
            {"prompt": prompt, "referenceImages": reference_images},
        )

    async def retouch_image(
        self,
        image_data: str,
        mask_data: str | None = None,
        prompt: str | None = None,
    ) -> str:
        """Request a retouch of *image_data*.

        When *mask_data* is given only its light regions may be altered.
        """
        payload: dict[str, Any] = {"imageData": image_data}
        if mask_data:
            payload["maskData"] = mask_data
        if prompt:
            payload["prompt"] = prompt
        logger.info("Requesting retouch (masked=%s)", bool(mask_data))
        return await self._post(self._config.retouch_path, payload)
