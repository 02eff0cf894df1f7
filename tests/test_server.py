"""Tests for the FastAPI timing and rendering API.

WHY: Browser readers rely on the API to produce the same word windows
and markup as every other host. These tests pin the response shapes,
the "unknown duration" handling and the error responses.

HOW: Each test exercises one endpoint through the FastAPI TestClient
(synchronous, in-process). The API is stateless, so no fixtures need
resetting between tests.

RULES:
- All tests use the FastAPI TestClient
- Tests cover: happy paths, unknown durations, 400 and 422 errors
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from bionic_reader import __version__
from bionic_reader.server.app import app


@pytest.fixture
def client():
    return TestClient(app)


# ---------------------------------------------------------------------------
# GET /health, GET /formats
# ---------------------------------------------------------------------------


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


class TestFormats:

    def test_lists_all_formats(self, client):
        response = client.get("/formats")
        assert response.status_code == 200
        formats = {f["key"]: f for f in response.json()}
        assert set(formats) == {"ansi", "html", "markdown"}
        assert formats["html"]["suffix"] == "-bionic.html"
        assert formats["html"]["media_type"] == "text/html"
        assert formats["markdown"]["name"] == "Markdown"


# ---------------------------------------------------------------------------
# POST /timings
# ---------------------------------------------------------------------------


class TestTimings:

    def test_hi_there(self, client):
        response = client.post("/timings", json={"text": "Hi there", "duration_ms": 2000})
        assert response.status_code == 200
        body = response.json()
        assert body["word_count"] == 2
        assert body["duration_known"] is True
        assert body["duration_ms"] == 2000
        assert [(w["text"], w["start_ms"], w["end_ms"]) for w in body["words"]] == [
            ("Hi", 0, 571),
            ("there", 571, 2000),
        ]

    @pytest.mark.parametrize("duration", [None, -100])
    def test_unknown_duration_gives_zero_windows(self, client, duration):
        response = client.post("/timings", json={"text": "Hi there", "duration_ms": duration})
        assert response.status_code == 200
        body = response.json()
        assert body["duration_known"] is False
        assert body["duration_ms"] == 0
        assert all(w["start_ms"] == w["end_ms"] == 0 for w in body["words"])

    def test_punctuation_only_text(self, client):
        response = client.post("/timings", json={"text": "— …", "duration_ms": 1000})
        assert response.json()["words"] == []

    def test_min_char_weight_override(self, client):
        response = client.post(
            "/timings",
            json={"text": "a bcd", "duration_ms": 1000, "min_char_weight": 1},
        )
        assert response.json()["words"][0]["end_ms"] == 250

    def test_invalid_min_char_weight(self, client):
        response = client.post(
            "/timings",
            json={"text": "a bcd", "duration_ms": 1000, "min_char_weight": 0},
        )
        assert response.status_code == 422

    def test_missing_text(self, client):
        response = client.post("/timings", json={"duration_ms": 1000})
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# POST /resolve
# ---------------------------------------------------------------------------


class TestResolve:

    def test_active_word(self, client):
        response = client.post(
            "/resolve",
            json={"text": "Hi there", "duration_ms": 2000, "current_time_ms": 600},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["index"] == 1
        assert body["word"]["text"] == "there"

    def test_boundary_belongs_to_later_word(self, client):
        response = client.post(
            "/resolve",
            json={"text": "Hi there", "duration_ms": 2000, "current_time_ms": 571},
        )
        assert response.json()["index"] == 1

    @pytest.mark.parametrize("t", [-1, 2000, 5000])
    def test_out_of_range(self, client, t):
        response = client.post(
            "/resolve",
            json={"text": "Hi there", "duration_ms": 2000, "current_time_ms": t},
        )
        assert response.status_code == 200
        assert response.json() == {"index": None, "word": None}

    def test_unknown_duration_resolves_nothing(self, client):
        response = client.post(
            "/resolve",
            json={"text": "Hi there", "duration_ms": None, "current_time_ms": 0},
        )
        assert response.json()["index"] is None


# ---------------------------------------------------------------------------
# POST /render
# ---------------------------------------------------------------------------


class TestRender:

    def test_html_default(self, client):
        response = client.post("/render", json={"text": "Hi there", "active_index": 1})
        assert response.status_code == 200
        body = response.json()
        assert body["format"] == "html"
        assert body["media_type"] == "text/html"
        assert body["word_count"] == 2
        assert 'class="bionic-word bionic-active" data-word-index="1"' in body["content"]

    def test_markdown(self, client):
        response = client.post("/render", json={"text": "Hi there", "format": "markdown"})
        assert response.json()["content"] == "**H**i **th**ere"

    def test_preferences(self, client):
        response = client.post(
            "/render",
            json={
                "text": "Hi",
                "preferences": {"dyslexia_font": True, "letter_spacing_em": 0.1},
            },
        )
        content = response.json()["content"]
        assert "OpenDyslexic" in content
        assert "letter-spacing: 0.1em" in content

    def test_unknown_format(self, client):
        response = client.post("/render", json={"text": "Hi", "format": "pdf"})
        assert response.status_code == 400
        assert "Unknown format 'pdf'" in response.json()["detail"]

    def test_negative_active_index_rejected(self, client):
        response = client.post("/render", json={"text": "Hi", "active_index": -1})
        assert response.status_code == 422
