"""
Synchronous HTTP client for the EchoVoice relay server.

Uses ``httpx.Client`` (sync) because Streamlit scripts run synchronously.
Every call returns a tagged ``Result`` instead of raising, so the chat
view can always resolve its placeholder.
"""

import json
import logging

import httpx
import streamlit as st

from src.core.config import get_settings
from src.core.result import Err, ErrorKind, Ok, Result
from src.services.audio.recorder import AudioBlob

logger = logging.getLogger(__name__)

UPLOAD_FILENAME = "voice_message.mp3"
FALLBACK_REPLY = "I couldn't generate a response."
UNREACHABLE_MESSAGE = "Failed to process voice message. Is the relay server running?"
HEALTH_TIMEOUT = 3.0  # seconds; the sidebar probes on every rerun


def trim_history(history, limit: int = 10) -> list[dict]:
    """Reduce the last ``limit`` messages to ``{role, text}`` dicts."""
    if limit <= 0:
        return []
    return [{"role": str(msg.role), "text": msg.text or ""} for msg in history[-limit:]]


def _error_detail(resp: httpx.Response) -> str:
    """Prefer the server's error field, fall back to the HTTP status text."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        detail = body.get("error") or body.get("details")
        if detail:
            return str(detail)
    return f"Server error: {resp.reason_phrase or resp.status_code}"


class RelayClient:
    """Thin synchronous wrapper around httpx for calling the relay server.

    Args:
        relay_url: Full URL of the chat endpoint (defaults to settings).
        timeout: Request timeout in seconds.
        history_limit: Number of trailing messages sent as history.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        relay_url: str | None = None,
        timeout: float | None = None,
        history_limit: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._relay_url = relay_url or settings.relay_url
        self._history_limit = settings.history_limit if history_limit is None else history_limit
        self._client = httpx.Client(
            timeout=timeout or settings.relay_timeout,
            transport=transport,
        )

    @property
    def relay_url(self) -> str:
        return self._relay_url

    def send_voice_message(self, blob: AudioBlob, history) -> Result:
        """Upload one recording with trimmed history and return the reply.

        Exactly one POST is made; failures are returned, never retried.

        Returns:
            ``Ok(text)`` on success (fallback text when the reply has none),
            ``Err(http, detail)`` on a non-2xx status, or
            ``Err(transport, ...)`` when the relay cannot be reached.
        """
        files = {"audio": (UPLOAD_FILENAME, blob.data, blob.mime_type)}
        data = {"history": json.dumps(trim_history(history, self._history_limit))}

        try:
            resp = self._client.post(self._relay_url, files=files, data=data)
        except httpx.HTTPError as exc:
            logger.error("Error calling relay server: %s", exc)
            return Err(ErrorKind.transport, UNREACHABLE_MESSAGE)

        if not resp.is_success:
            detail = _error_detail(resp)
            logger.error("Relay server returned %s: %s", resp.status_code, detail)
            return Err(ErrorKind.http, detail)

        try:
            body = resp.json()
        except ValueError:
            logger.warning("Relay reply was not JSON")
            return Ok(FALLBACK_REPLY)

        text = body.get("text") if isinstance(body, dict) else None
        if not isinstance(text, str) or not text:
            return Ok(FALLBACK_REPLY)
        return Ok(text)

    def check_connection(self) -> tuple[bool, str]:
        """Check if the relay server is reachable. Returns (ok, message)."""
        health_url = httpx.URL(self._relay_url).join("/health")
        try:
            self._client.get(health_url, timeout=HEALTH_TIMEOUT).raise_for_status()
            return True, "Connected"
        except httpx.HTTPStatusError as exc:
            return False, f"Health check failed ({exc.response.status_code})"
        except httpx.HTTPError:
            return False, "Relay server is not running. Start it with: `python -m src.api`"


@st.cache_resource
def get_relay_client(relay_url: str) -> RelayClient:
    """Return a cached RelayClient, keyed by relay_url.

    Uses Streamlit's ``cache_resource`` to persist the client across reruns.
    """
    return RelayClient(relay_url=relay_url)
