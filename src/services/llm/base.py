"""
Abstract base class for audio-capable LLM providers.

The relay server talks to the model only through this interface, so the
provider can be swapped (or mocked in tests) without touching the route.
"""

from abc import ABC, abstractmethod


class BaseAudioLLM(ABC):
    """Interface that every audio-in / text-out provider must implement."""

    @abstractmethod
    async def respond_to_audio(self, audio: bytes, mime_type: str, prompt: str) -> str:
        """Send an inline audio clip plus an instruction and return the reply.

        Args:
            audio: Raw bytes of the recorded clip, in whatever container the
                recorder negotiated.
            mime_type: MIME hint passed to the provider with the inline part.
            prompt: Natural-language instruction sent alongside the audio.

        Returns:
            The model's text response (empty string when the model produced none).
        """
