"""
EchoVoice exception hierarchy.

All relay-server exceptions inherit from EchoVoiceError, enabling
centralized error handling in the API middleware layer. Client-side
recorder failures use ``MicrophoneUnavailableError``.
"""

from datetime import UTC, datetime


class EchoVoiceError(Exception):
    """Base exception for all EchoVoice errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "ECHOVOICE_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class NoAudioProvidedError(EchoVoiceError):
    """Raised when a chat request carries no audio upload."""

    def __init__(self) -> None:
        super().__init__(
            detail="No audio file provided",
            code="NO_AUDIO",
            status_code=400,
        )


class ApiKeyConfigurationError(EchoVoiceError):
    """Raised when the provider credential is missing from the environment."""

    def __init__(self) -> None:
        super().__init__(
            detail="Server API Key configuration error",
            code="API_KEY_MISSING",
            status_code=500,
        )


class ProviderError(EchoVoiceError):
    """Raised when the AI provider call fails.

    The client only ever sees the generic detail; the provider's own
    message is logged server-side.
    """

    def __init__(self, detail: str = "Failed to process voice message") -> None:
        super().__init__(
            detail=detail,
            code="PROVIDER_ERROR",
            status_code=500,
        )


class MicrophoneUnavailableError(EchoVoiceError):
    """Raised by capture backends when microphone access is denied or absent."""

    def __init__(self, detail: str = "Microphone is not available") -> None:
        super().__init__(
            detail=detail,
            code="MICROPHONE_UNAVAILABLE",
            status_code=500,
        )
