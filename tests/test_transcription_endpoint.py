"""
Transcription endpoint tests
"""
import asyncio

import httpx
import pytest

from app.pitch_api import transcription, web


AUDIO_FILE = {"file": ("clip.webm", b"\x1aE\xdf\xa3fake-webm-bytes", "audio/webm")}


@pytest.fixture
def upstream(monkeypatch):
    """Route the transcription client through a mock transport."""
    state = {"requests": [], "handler": None}

    def handler(request: httpx.Request):
        state["requests"].append(request)
        return state["handler"](request)

    def build_client(settings):
        return httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            headers={"Authorization": f"Bearer {settings.transcribe_api_key}"},
        )

    monkeypatch.setattr(transcription, "_build_client", build_client)
    return state


class TestTranscribe:
    def test_missing_file_returns_400_without_upstream_call(self, client, upstream):
        upstream["handler"] = lambda request: httpx.Response(200, json={"text": "unused"})

        response = client.post("/api/transcribe", data={"note": "no audio here"})

        assert response.status_code == 400
        assert response.json() == {"error": "No audio file uploaded."}
        assert upstream["requests"] == []

    def test_text_file_field_returns_400(self, client, upstream):
        upstream["handler"] = lambda request: httpx.Response(200, json={"text": "unused"})

        response = client.post("/api/transcribe", data={"file": "notafile"})

        assert response.status_code == 400
        assert response.json() == {"error": "No audio file uploaded."}
        assert upstream["requests"] == []

    def test_first_file_part_is_forwarded(self, client, upstream):
        upstream["handler"] = lambda request: httpx.Response(200, json={"text": "first"})
        files = [
            ("file", ("first.webm", b"first-audio", "audio/webm")),
            ("file", ("second.webm", b"second-audio", "audio/webm")),
        ]

        response = client.post("/api/transcribe", files=files)

        assert response.status_code == 200
        body = upstream["requests"][0].content
        assert b'filename="first.webm"' in body
        assert b"second-audio" not in body

    def test_malformed_multipart_returns_400(self, client, upstream):
        response = client.post(
            "/api/transcribe",
            content=b"garbage",
            headers={"Content-Type": "multipart/form-data"},
        )

        assert response.status_code == 400
        assert upstream["requests"] == []

    def test_oversized_request_returns_413(self, client, upstream, monkeypatch):
        monkeypatch.setattr(web, "MAX_REQUEST_BYTES", 10)

        response = client.post("/api/transcribe", files=AUDIO_FILE)

        assert response.status_code == 413
        assert upstream["requests"] == []

    def test_oversized_file_returns_413(self, client, upstream, monkeypatch):
        monkeypatch.setattr(transcription, "MAX_UPLOAD_BYTES", 8)

        response = client.post("/api/transcribe", files=AUDIO_FILE)

        assert response.status_code == 413
        assert "file" in response.json()["detail"]
        assert upstream["requests"] == []

    def test_returns_transcript(self, client, upstream):
        upstream["handler"] = lambda request: httpx.Response(200, json={"text": "I led a team of five."})

        response = client.post("/api/transcribe", files=AUDIO_FILE)

        assert response.status_code == 200
        assert response.json() == {"text": "I led a team of five."}

        sent = upstream["requests"][0]
        body = sent.content
        assert sent.url == "https://api.openai.com/v1/audio/transcriptions"
        assert sent.headers["Authorization"] == "Bearer test-openai-key"
        assert b'name="model"' in body and b"whisper-1" in body
        assert b'name="response_format"' in body and b"json" in body
        assert b'filename="clip.webm"' in body
        assert b"fake-webm-bytes" in body

    def test_missing_text_field_becomes_empty(self, client, upstream):
        upstream["handler"] = lambda request: httpx.Response(200, json={"duration": 1.2})

        response = client.post("/api/transcribe", files=AUDIO_FILE)

        assert response.status_code == 200
        assert response.json() == {"text": ""}

    def test_upstream_error_is_relayed_verbatim(self, client, upstream):
        detail = '{"error":{"message":"Invalid file format.","type":"invalid_request_error"}}'
        upstream["handler"] = lambda request: httpx.Response(400, text=detail)

        response = client.post("/api/transcribe", files=AUDIO_FILE)

        assert response.status_code == 400
        assert response.json() == {"error": "Transcription API error", "details": detail}

    def test_empty_file_is_rejected(self, client, upstream):
        upstream["handler"] = lambda request: httpx.Response(200, json={"text": "unused"})

        response = client.post("/api/transcribe", files={"file": ("clip.webm", b"", "audio/webm")})

        assert response.status_code == 400
        assert upstream["requests"] == []


class TestDeadline:
    def test_slow_upstream_returns_408(self, client, use_settings, monkeypatch):
        use_settings(transcribe_timeout_seconds=0.05)

        async def slow_handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json={"text": "too late"})

        monkeypatch.setattr(
            transcription,
            "_build_client",
            lambda settings: httpx.AsyncClient(transport=httpx.MockTransport(slow_handler)),
        )

        response = client.post("/api/transcribe", files=AUDIO_FILE)

        assert response.status_code == 408
        payload = response.json()
        assert payload["error"] == "Timeout"
        assert "timed out" in payload["details"]

    def test_transport_timeout_returns_408(self, client, upstream):
        def raise_timeout(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        upstream["handler"] = raise_timeout

        response = client.post("/api/transcribe", files=AUDIO_FILE)

        assert response.status_code == 408
        assert response.json()["error"] == "Timeout"

    def test_unexpected_failure_returns_500(self, client, upstream):
        upstream["handler"] = lambda request: httpx.Response(200, text="<html>gateway</html>")

        response = client.post("/api/transcribe", files=AUDIO_FILE)

        assert response.status_code == 500
        assert response.json()["error"] == "Server error"
