"""Unit tests for the RelayClient.

Validates the multipart upload (audio field, filename hint, trimmed
history), the single-attempt policy, and how HTTP, transport, and
malformed replies map onto tagged results.
"""

import json

import httpx
import pytest

from src.core.models import ChatRole
from src.core.result import Err, ErrorKind, Ok
from src.services.audio.recorder import AudioBlob
from src.ui.api_client import (
    FALLBACK_REPLY,
    HEALTH_TIMEOUT,
    UNREACHABLE_MESSAGE,
    RelayClient,
    trim_history,
)
from src.ui.chat_state import Message

RELAY_URL = "http://relay.test/api/chat"


@pytest.fixture
def blob():
    return AudioBlob(data=b"\x1aE\xdf\xa3voice", mime_type="audio/webm;codecs=opus")


@pytest.fixture
def history():
    messages = [Message(id="welcome", role=ChatRole.model, text="Hello!")]
    for i in range(7):
        messages.append(Message(id=f"u{i}", role=ChatRole.user, audio=b"a"))
        messages.append(Message(id=f"m{i}", role=ChatRole.model, text=f"reply {i}"))
    return messages


def _client(handler, requests=None):
    def record(request):
        if requests is not None:
            requests.append(request)
        return handler(request)

    return RelayClient(relay_url=RELAY_URL, transport=httpx.MockTransport(record))


class TestTrimHistory:
    def test_keeps_last_ten_as_role_text(self, history):
        trimmed = trim_history(history)

        assert len(trimmed) == 10
        assert trimmed[-1] == {"role": "model", "text": "reply 6"}
        assert trimmed[-2] == {"role": "user", "text": ""}

    def test_short_history_kept_whole(self):
        messages = [Message(id="1", role=ChatRole.model, text="hi")]
        assert trim_history(messages) == [{"role": "model", "text": "hi"}]


class TestSendVoiceMessage:
    def test_success_uploads_multipart(self, blob, history):
        requests = []
        client = _client(lambda r: httpx.Response(200, json={"text": "Hello there"}), requests)

        result = client.send_voice_message(blob, history)

        assert result == Ok("Hello there")
        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == RELAY_URL
        assert request.headers["content-type"].startswith("multipart/form-data")
        body = request.content
        assert b'name="audio"; filename="voice_message.mp3"' in body
        assert b"Content-Type: audio/webm;codecs=opus" in body
        assert b"\x1aE\xdf\xa3voice" in body
        assert b'name="history"' in body
        assert json.dumps(trim_history(history)).encode() in body

    def test_missing_text_falls_back(self, blob):
        client = _client(lambda r: httpx.Response(200, json={"other": 1}))
        assert client.send_voice_message(blob, []) == Ok(FALLBACK_REPLY)

    def test_empty_text_falls_back(self, blob):
        client = _client(lambda r: httpx.Response(200, json={"text": ""}))
        assert client.send_voice_message(blob, []) == Ok(FALLBACK_REPLY)

    def test_non_json_success_falls_back(self, blob):
        client = _client(lambda r: httpx.Response(200, text="<html>ok</html>"))
        assert client.send_voice_message(blob, []) == Ok(FALLBACK_REPLY)

    def test_server_error_detail_preferred(self, blob):
        client = _client(lambda r: httpx.Response(400, json={"error": "No audio file provided"}))

        result = client.send_voice_message(blob, [])

        assert result == Err(ErrorKind.http, "No audio file provided")

    def test_status_text_when_no_body(self, blob):
        requests = []
        client = _client(lambda r: httpx.Response(503), requests)

        result = client.send_voice_message(blob, [])

        assert result == Err(ErrorKind.http, "Server error: Service Unavailable")
        assert len(requests) == 1  # no retry

    def test_unreachable_relay(self, blob):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        requests = []
        client = _client(refuse, requests)

        result = client.send_voice_message(blob, [])

        assert result == Err(ErrorKind.transport, UNREACHABLE_MESSAGE)
        assert len(requests) == 1

    def test_timeout_is_transport_error(self, blob):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        result = _client(slow).send_voice_message(blob, [])

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.transport


class TestCheckConnection:
    def test_healthy(self):
        requests = []
        client = _client(lambda r: httpx.Response(200, json={"status": "ok"}), requests)

        assert client.check_connection() == (True, "Connected")
        assert str(requests[0].url) == "http://relay.test/health"

    def test_unreachable(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        ok, message = _client(refuse).check_connection()

        assert ok is False
        assert "not running" in message

    def test_health_check_uses_short_timeout(self):
        requests = []
        client = _client(lambda r: httpx.Response(200, json={"status": "ok"}), requests)

        client.check_connection()

        assert requests[0].extensions["timeout"]["read"] == HEALTH_TIMEOUT
        assert HEALTH_TIMEOUT < 60.0
