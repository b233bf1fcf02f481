"""Voice relay: uploaded audio in, provider text out.

Each request writes its upload to its own temporary file inside the upload
directory, reads it back, and forwards the bytes to the audio LLM with a
fixed instruction prompt. Files are not cleaned up afterwards.

Usage::

    relay = VoiceRelay()
    result = await relay.relay(audio_bytes)
    if result.ok:
        print(result.text)
"""

import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

from src.core.config import Settings, get_settings
from src.core.result import Err, ErrorKind, Ok, Result
from src.services.llm import BaseAudioLLM, create_llm

logger = logging.getLogger(__name__)

NO_AUDIO_MESSAGE = "No audio file provided"
API_KEY_MESSAGE = "Server API Key configuration error"
PROVIDER_FAILURE_MESSAGE = "Failed to process voice message"


def store_upload(audio: bytes, upload_dir: str | Path, suffix: str = ".mp3") -> Path:
    """Write one upload to a fresh, uniquely named file and return its path."""
    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        dir=directory, prefix="voice_", suffix=suffix, delete=False
    ) as fh:
        fh.write(audio)
    return Path(fh.name)


class VoiceRelay:
    """Bridges one chat upload to the audio LLM.

    Args:
        settings: Settings to read the credential, prompt and upload dir from.
        llm_factory: Builds the provider once the credential is known to exist.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        llm_factory: Callable[..., BaseAudioLLM] = create_llm,
    ) -> None:
        self._settings = settings or get_settings()
        self._llm_factory = llm_factory

    async def relay(self, audio: bytes | None) -> Result:
        """Forward an uploaded clip and return the provider's reply.

        Returns:
            ``Ok(text)`` with the provider text verbatim, or ``Err`` tagged
            ``client_request`` (no upload), ``configuration`` (no API key)
            or ``provider`` (anything failing after validation).
        """
        if audio is None:
            return Err(ErrorKind.client_request, NO_AUDIO_MESSAGE)

        settings = self._settings
        if not settings.api_key:
            logger.error("API_KEY is missing in environment variables.")
            return Err(ErrorKind.configuration, API_KEY_MESSAGE)

        try:
            path = store_upload(audio, settings.upload_dir)
            stored = path.read_bytes()
            logger.info("Stored voice message %s (%d bytes)", path.name, len(stored))

            llm = self._llm_factory(
                settings.llm_provider, api_key=settings.api_key, model=settings.gemini_model
            )
            text = await llm.respond_to_audio(
                stored,
                mime_type=settings.audio_mime_hint,
                prompt=settings.voice_prompt,
            )
        except Exception:
            logger.exception("Error processing voice message")
            return Err(ErrorKind.provider, PROVIDER_FAILURE_MESSAGE)

        return Ok(text)
