"""
Voice chat endpoint.

Accepts one multipart upload (``audio``) plus an optional ``history``
field, relays the audio to the AI provider and returns its text reply.
The history is accepted for compatibility but not forwarded.
"""

import logging

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from src.core.exceptions import (
    ApiKeyConfigurationError,
    EchoVoiceError,
    NoAudioProvidedError,
    ProviderError,
)
from src.core.models import ChatResponse, ErrorResponse
from src.core.result import Err, ErrorKind
from src.services.relay import VoiceRelay

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


def get_relay() -> VoiceRelay:
    """Dependency returning the relay service (overridden in tests)."""
    return VoiceRelay()


def _raise_for(err: Err) -> None:
    """Map a relay failure onto the matching HTTP-level exception."""
    if err.kind == ErrorKind.client_request:
        raise NoAudioProvidedError()
    if err.kind == ErrorKind.configuration:
        raise ApiKeyConfigurationError()
    if err.kind == ErrorKind.provider:
        raise ProviderError(err.message)
    raise EchoVoiceError(detail=err.message)


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat(request: Request, relay: VoiceRelay = Depends(get_relay)) -> ChatResponse:
    """Relay a recorded voice message and return the model's reply."""
    # Parse the form by hand so a missing or non-file field is a 400, not a 422
    form = await request.form()
    upload = form.get("audio")
    audio = await upload.read() if isinstance(upload, UploadFile) else None
    if audio is not None:
        logger.info(
            "Received voice message %r (%s, %d bytes)",
            upload.filename,
            upload.content_type,
            len(audio),
        )

    result = await relay.relay(audio)
    if isinstance(result, Err):
        _raise_for(result)
    return ChatResponse(text=result.text)
