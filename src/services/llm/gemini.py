"""
Gemini LLM provider implementation.

Uses the Google Gen AI SDK (``google.genai``) async client. The audio is
sent as an inline ``Part`` (the SDK base64-encodes inline bytes on the wire)
next to a text instruction, and the single text completion is returned.
"""

import logging

from google import genai
from google.genai import errors, types

from src.core.config import get_settings
from src.services.llm.base import BaseAudioLLM

logger = logging.getLogger(__name__)


class GeminiLLM(BaseAudioLLM):
    """Gemini provider for one-shot voice message replies.

    No retries: each relay request makes exactly one provider call.
    """

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        settings = get_settings()
        self._api_key = api_key or settings.api_key
        self._model = model or settings.gemini_model
        self._client = genai.Client(api_key=self._api_key)

    async def respond_to_audio(self, audio: bytes, mime_type: str, prompt: str) -> str:
        """Generate a reply to an inline audio clip.

        SDK exceptions are translated to standard Python exceptions so the
        relay service does not depend on ``google.genai`` error types.
        """
        contents = types.Content(
            role="user",
            parts=[
                types.Part.from_bytes(data=audio, mime_type=mime_type),
                types.Part.from_text(text=prompt),
            ],
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=contents,
            )
        except errors.ServerError as exc:
            logger.warning("Gemini server error: %s", exc)
            raise ConnectionError(f"Gemini API unavailable: {exc}") from exc
        except errors.APIError as exc:
            logger.error("Gemini API error (%s): %s", exc.code, exc)
            raise RuntimeError(f"Gemini API error: {exc}") from exc

        return response.text or ""
