"""Tests for the inference service client and response classification."""

import httpx
import pytest

from photostudio.core.exceptions import (
    EmptyResultError,
    QuotaExceededError,
    RateLimitError,
    ServiceReportedError,
    TransportError,
)
from photostudio.core.inference_client import InferenceClient, interpret_response


class TestInterpretResponse:
    def test_success(self):
        response = httpx.Response(200, json={"imageUrl": "https://images.test/a.png"})
        assert interpret_response(response) == "https://images.test/a.png"

    def test_rate_limit_uses_body_message(self):
        response = httpx.Response(429, json={"error": "Slow down"})
        with pytest.raises(RateLimitError) as excinfo:
            interpret_response(response)
        assert excinfo.value.user_message == "Slow down"
        assert excinfo.value.status_code == 429

    def test_rate_limit_default_message(self):
        with pytest.raises(RateLimitError) as excinfo:
            interpret_response(httpx.Response(429, text="too many"))
        assert "Rate limit" in excinfo.value.user_message

    def test_quota(self):
        with pytest.raises(QuotaExceededError) as excinfo:
            interpret_response(httpx.Response(402, json={}))
        assert excinfo.value.kind == "quota"

    def test_other_status(self):
        with pytest.raises(TransportError) as excinfo:
            interpret_response(httpx.Response(500, text="boom"))
        assert excinfo.value.user_message == "Service error: 500"

    def test_reported_error_verbatim(self):
        response = httpx.Response(200, json={"error": "Content policy violation"})
        with pytest.raises(ServiceReportedError) as excinfo:
            interpret_response(response)
        assert excinfo.value.user_message == "Content policy violation"

    def test_missing_image(self):
        with pytest.raises(EmptyResultError) as excinfo:
            interpret_response(httpx.Response(200, json={}))
        assert excinfo.value.user_message == "No image was returned. Try adjusting your prompt."

    def test_malformed_body(self):
        with pytest.raises(TransportError):
            interpret_response(httpx.Response(200, text="<html>"))


class TestInferenceClient:
    @pytest.mark.asyncio
    async def test_generate_payload(self, inference_client, fake_service, test_config):
        url = await inference_client.generate_image("a prompt", "fast", ["ref-1", "ref-2"])

        assert url == "https://images.test/1.png"
        assert fake_service.paths == ["/functions/v1/generate-image"]
        assert fake_service.requests == [
            {
                "prompt": "a prompt",
                "model": test_config.fast_model,
                "referenceImages": ["ref-1", "ref-2"],
            }
        ]

    @pytest.mark.asyncio
    async def test_bearer_header(self, test_config):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["authorization"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"imageUrl": "u"})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = InferenceClient(test_config, http_client=http)
        await client.generate_image("p", "high-quality", [])
        await http.aclose()

        assert seen["authorization"] == "Bearer test-key"

    @pytest.mark.asyncio
    async def test_network_failure(self, test_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = InferenceClient(test_config, http_client=http)

        with pytest.raises(TransportError) as excinfo:
            await client.generate_image("p", "fast", [])
        await http.aclose()
        assert excinfo.value.user_message == "Failed to generate image"

    @pytest.mark.asyncio
    async def test_edit_clothing(self, inference_client, fake_service):
        await inference_client.edit_clothing("dress", ["src", "shirt"])

        assert fake_service.paths == ["/functions/v1/edit-clothing"]
        assert fake_service.requests[0] == {"prompt": "dress", "referenceImages": ["src", "shirt"]}

    @pytest.mark.asyncio
    async def test_retouch_without_mask(self, inference_client, fake_service):
        await inference_client.retouch_image("img")

        assert fake_service.paths == ["/functions/v1/retouch-image"]
        assert fake_service.requests[0] == {"imageData": "img"}

    @pytest.mark.asyncio
    async def test_retouch_with_mask(self, inference_client, fake_service):
        await inference_client.retouch_image("img", mask_data="mask", prompt="fix")
        assert fake_service.requests[0] == {"imageData": "img", "maskData": "mask", "prompt": "fix"}

    @pytest.mark.asyncio
    async def test_supplied_client_not_closed(self, inference_client, http_client):
        async with inference_client:
            pass
        assert not http_client.is_closed
