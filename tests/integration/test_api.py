"""Integration tests for photostudio.api.main — FastAPI REST API endpoints.

All tests use the FastAPI TestClient with the inference service replaced by
an ``httpx.MockTransport`` so that no network access occurs.  Tests cover:

- ``GET /api/options`` — Enumerated options and limits.
- ``/api/session`` and ``/api/characters`` — Session editing.
- ``POST /api/prompt/compile`` — Prompt preview.
- ``POST /api/generate`` — Batch image generation.
- ``/api/history`` — History listing, lookup, reprompt and clearing.
- ``/api/edit/*`` — Appearance, clothing and retouch editors.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from photostudio.api.edit_prompts import RETOUCH_FULL_INSTRUCTION, RETOUCH_MASKED_INSTRUCTION
from photostudio.api.main import create_app
from photostudio.core.images import load_image


@pytest.fixture
def test_client(test_config, http_client):
    """TestClient running the full lifespan against the fake service."""
    app = create_app(test_config, http_client=http_client)
    with TestClient(app) as client:
        yield client


def _generate_payload(**settings) -> dict:
    return {
        "characters": [{"label": "Person 1", "clothing_text": "a red dress"}],
        "settings": settings,
    }


# ---------------------------------------------------------------------------
# Options and session tests.
# ---------------------------------------------------------------------------


class TestOptions:
    """Test GET /api/options — enumerated values."""

    def test_options(self, test_client):
        resp = test_client.get("/api/options")
        assert resp.status_code == 200
        data = resp.json()
        assert data["models"] == ["high-quality", "fast"]
        assert "crawling" in data["poses"]
        assert data["limits"]["max_characters"] == 5
        assert data["hair_colors"]["#DAA520"] == "Golden"


class TestSession:
    """Test the session and character endpoints."""

    def test_initial_session(self, test_client):
        data = test_client.get("/api/session").json()
        assert len(data["characters"]) == 1
        assert data["characters"][0]["label"] == "Person 1"
        assert data["settings"]["image_count"] == 1

    def test_add_until_full(self, test_client):
        for _ in range(4):
            assert test_client.post("/api/characters").status_code == 200
        resp = test_client.post("/api/characters")
        assert resp.status_code == 400

    def test_update_character(self, test_client):
        character_id = test_client.get("/api/session").json()["characters"][0]["id"]
        resp = test_client.patch(
            f"/api/characters/{character_id}", json={"skin_tone": 42, "pose_preset": "sitting"}
        )
        assert resp.status_code == 200
        assert resp.json()["skin_tone"] == 10
        assert resp.json()["pose_preset"] == "sitting"

    def test_update_invalid_value(self, test_client):
        character_id = test_client.get("/api/session").json()["characters"][0]["id"]
        resp = test_client.patch(f"/api/characters/{character_id}", json={"pose_preset": "flying"})
        assert resp.status_code == 422

    def test_update_unknown_character(self, test_client):
        resp = test_client.patch("/api/characters/missing", json={"label": "x"})
        assert resp.status_code == 404

    def test_cannot_remove_last(self, test_client):
        character_id = test_client.get("/api/session").json()["characters"][0]["id"]
        assert test_client.delete(f"/api/characters/{character_id}").status_code == 400

    def test_update_settings(self, test_client):
        resp = test_client.put("/api/session/settings", json={"lighting": "neon"})
        assert resp.status_code == 200
        assert test_client.get("/api/session").json()["settings"]["lighting"] == "neon"


# ---------------------------------------------------------------------------
# Prompt and generation tests.
# ---------------------------------------------------------------------------


class TestCompile:
    """Test POST /api/prompt/compile — prompt preview."""

    def test_compile_payload(self, test_client):
        resp = test_client.post("/api/prompt/compile", json=_generate_payload(lighting="neon"))
        assert resp.status_code == 200
        data = resp.json()
        assert "a red dress" in data["compiled_prompt"]
        assert "neon" in data["compiled_prompt"].lower()
        assert data["reference_count"] == 0

    def test_compile_uses_session(self, test_client):
        resp = test_client.post("/api/prompt/compile", json={})
        assert resp.status_code == 200
        assert resp.json()["compiled_prompt"]

    def test_compile_empty_characters(self, test_client):
        resp = test_client.post("/api/prompt/compile", json={"characters": []})
        assert resp.status_code == 400


class TestGenerate:
    """Test POST /api/generate — image generation."""

    def test_single(self, test_client, fake_service):
        resp = test_client.post("/api/generate", json=_generate_payload())
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert len(data["outcomes"]) == 1
        assert data["outcomes"][0]["image"]["prompt"] == data["compiled_prompt"]
        assert fake_service.requests[0]["prompt"] == data["compiled_prompt"]

    def test_batch_records_history(self, test_client, fake_service):
        resp = test_client.post("/api/generate", json=_generate_payload(image_count=3))
        assert resp.status_code == 200
        assert len(fake_service.requests) == 3
        assert test_client.get("/api/history").json()["total"] == 3

    def test_failure_reported(self, test_client, fake_service):
        fake_service.queue(402, {})
        data = test_client.post("/api/generate", json=_generate_payload()).json()

        assert data["success"] is False
        assert data["outcomes"][0]["error_kind"] == "quota"
        assert test_client.get("/api/history").json()["total"] == 0

    def test_image_count_above_limit(self, test_client, fake_service):
        resp = test_client.post("/api/generate", json=_generate_payload(image_count=11))
        assert resp.status_code == 400
        assert fake_service.requests == []

    def test_image_count_zero(self, test_client):
        resp = test_client.post("/api/generate", json=_generate_payload(image_count=0))
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# History tests.
# ---------------------------------------------------------------------------


class TestHistory:
    """Test the history endpoints."""

    def _generate(self, test_client) -> dict:
        data = test_client.post("/api/generate", json=_generate_payload(lighting="moody")).json()
        return data["outcomes"][0]["image"]

    def test_get_entry(self, test_client):
        image = self._generate(test_client)
        resp = test_client.get(f"/api/history/{image['id']}")
        assert resp.status_code == 200
        assert resp.json()["prompt"] == image["prompt"]

    def test_missing_entry(self, test_client):
        assert test_client.get("/api/history/missing").status_code == 404

    def test_reprompt(self, test_client):
        image = self._generate(test_client)
        data = test_client.post(f"/api/history/{image['id']}/reprompt").json()

        assert data["characters"][0]["clothing_text"] == "a red dress"
        assert data["settings"]["lighting"] == "moody"
        assert test_client.get("/api/session").json()["settings"]["lighting"] == "moody"

    def test_persisted_to_data_dir(self, test_client, test_config):
        self._generate(test_client)
        assert (test_config.data_dir / "ai-studio-history.json").exists()

    def test_clear(self, test_client):
        self._generate(test_client)
        assert test_client.delete("/api/history").status_code == 200
        assert test_client.get("/api/history").json()["total"] == 0


# ---------------------------------------------------------------------------
# Editor tests.
# ---------------------------------------------------------------------------


class TestEditors:
    """Test the appearance, clothing and retouch editors."""

    def test_appearance(self, test_client, fake_service, test_config):
        resp = test_client.post(
            "/api/edit/appearance", json={"source_image": "src", "hair_color": "#DAA520"}
        )
        assert resp.status_code == 200
        request = fake_service.requests[0]
        assert request["referenceImages"] == ["src"]
        assert request["model"] == test_config.high_quality_model
        assert "Golden (#DAA520)" in request["prompt"]

    def test_appearance_without_changes(self, test_client, fake_service):
        resp = test_client.post("/api/edit/appearance", json={"source_image": "src"})
        assert resp.status_code == 400
        assert fake_service.requests == []

    def test_clothing(self, test_client, fake_service):
        resp = test_client.post(
            "/api/edit/clothing",
            json={"source_image": "src", "clothing_images": ["shirt"]},
        )
        assert resp.status_code == 200
        assert fake_service.paths == ["/functions/v1/edit-clothing"]
        assert fake_service.requests[0]["referenceImages"] == ["src", "shirt"]

    def test_clothing_rate_limited(self, test_client, fake_service):
        fake_service.queue(429, {"error": "Too many requests"})
        resp = test_client.post(
            "/api/edit/clothing", json={"source_image": "src", "clothing_description": "a coat"}
        )
        assert resp.status_code == 429
        assert resp.json()["detail"] == "Too many requests"

    def test_retouch_whole_image(self, test_client, fake_service, png_data_url):
        resp = test_client.post("/api/edit/retouch", json={"image_data": png_data_url("tan")})
        assert resp.status_code == 200
        request = fake_service.requests[0]
        assert "maskData" not in request
        assert request["prompt"] == RETOUCH_FULL_INSTRUCTION

    def test_retouch_masked(self, test_client, fake_service, png_data_url):
        source = png_data_url("tan", size=(20, 10))
        mask = png_data_url((230, 230, 230), size=(5, 5))
        resp = test_client.post("/api/edit/retouch", json={"image_data": source, "mask_data": mask})

        assert resp.status_code == 200
        request = fake_service.requests[0]
        assert request["prompt"] == RETOUCH_MASKED_INSTRUCTION
        sent_mask = load_image(request["maskData"])
        assert sent_mask.size == (20, 10)
        assert set(sent_mask.getdata()) == {255}

    def test_retouch_bad_mask(self, test_client, fake_service, png_data_url):
        resp = test_client.post(
            "/api/edit/retouch",
            json={"image_data": png_data_url("tan"), "mask_data": "data:image/png;base64,AAAA"},
        )
        assert resp.status_code == 400
        assert fake_service.requests == []
