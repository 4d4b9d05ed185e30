import base64
import io
import wave

import httpx
import pytest

from lumos.main import app
from lumos.modules.voice import session_registry
from lumos.modules.voice.handler import DEFAULT_GREETING
from lumos.modules.voice.routes import get_stt_service
from lumos.modules.voice.stt import STTService

AUDIO = base64.b64encode(b"\x1a\x45\xdf\xa3webm").decode()


@pytest.fixture
def transcript():
    state = {"text": "I am stressed about my calculus exam"}

    def handler(request):
        return httpx.Response(200, json={"text": state["text"]})

    app.dependency_overrides[get_stt_service] = lambda: STTService(
        api_key="hf-key", transport=httpx.MockTransport(handler)
    )
    return state


def test_tts_returns_wav(client):
    response = client.post("/api/tts", json={"text": "Hello", "voice": "female"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/wav"
    with wave.open(io.BytesIO(response.content)) as wav:
        assert wav.getframerate() == 44100


def test_tts_requires_text(client):
    response = client.post("/api/tts", json={"text": "  "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Text is required"


def test_tts_voices(client):
    voices = client.get("/api/tts/voices").json()
    assert {v["id"] for v in voices} == {"default", "male", "female", "warm", "professional"}


def test_anonymous_voice_session(client, db, transcript, openrouter):
    openrouter.reply = "Take a deep breath. Let's review limits together!"
    with client.websocket_connect("/api/voice/ws") as ws:
        ws.send_json({"type": "init_session", "sessionId": "ws-1"})
        assert ws.receive_json() == {"type": "session_initialized", "sessionId": "ws-1", "greeting": DEFAULT_GREETING}
        assert session_registry.get_connection("ws-1") is not None

        ws.send_json({"type": "process_audio", "audio": AUDIO})
        assert ws.receive_json() == {"type": "processing_start", "message": "Got it, thinking..."}
        assert ws.receive_json() == {"type": "stream_start", "message": "Starting response..."}
        assert ws.receive_json() == {"type": "stream_chunk", "text": "Take a deep breath.", "is_complete": False}
        assert ws.receive_json() == {
            "type": "stream_chunk", "text": "Let's review limits together!", "is_complete": False,
        }
        complete = ws.receive_json()
        assert complete["type"] == "stream_complete"
        assert complete["full_text"] == "Take a deep breath. Let's review limits together!"
        assert complete["emotional_state"] == "stressed"

    assert db.rows("sessions") == []
    assert db.rows("messages") == []


def test_signed_in_voice_session_is_stored(client, db, transcript, student):
    user_id, _ = student
    with client.websocket_connect("/api/voice/ws") as ws:
        ws.send_json({"type": "init_session", "token": "token-siti@example.com", "userAgent": "pytest"})
        init = ws.receive_json()
        assert init["greeting"].startswith("Hello Siti!")

        session = db.rows("sessions")[0]
        assert session["user_id"] == user_id
        assert session["title"] == "Lumos • Voice Session"
        assert session["meta"] == {"channel": "voice", "ws_id": init["sessionId"], "user_agent": "pytest"}

        ws.send_json({"type": "process_audio", "audio": AUDIO})
        while ws.receive_json()["type"] != "stream_complete":
            pass

        ws.send_json({"type": "get_analytics"})
        analytics = ws.receive_json()
        assert analytics["type"] == "analytics"
        assert analytics["data"]["messages"] == 2

    assert [m["session_id"] for m in db.rows("messages")] == [session["id"], session["id"]]
    stored = db.rows("session_analytics")[0]
    assert stored["emotion"] == "stressed"
    assert stored["tokens_used"] == len("Hello from Lumos.")
    assert stored["metrics"]["user_message_length"] == len(transcript["text"])
    assert db.rows("sessions")[0]["ended_at"] is not None
    assert session_registry.active_count() == 0


def test_silence_is_reported(client, transcript):
    transcript["text"] = "   "
    with client.websocket_connect("/api/voice/ws") as ws:
        ws.send_json({"type": "process_audio", "audio": AUDIO})
        assert ws.receive_json() == {
            "type": "no_speech_detected", "message": "I didn't hear anything. Could you try speaking again?",
        }


def test_bad_messages_get_error_replies(client, transcript):
    with client.websocket_connect("/api/voice/ws") as ws:
        ws.send_text("not json")
        assert ws.receive_json()["type"] == "error"

        ws.send_text("[1, 2]")
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "init_session", "token": "bogus"})
        init = ws.receive_json()
        assert init["greeting"] == DEFAULT_GREETING

        ws.send_json({"type": "clear_conversation"})
        assert ws.receive_json() == {"type": "conversation_cleared"}
