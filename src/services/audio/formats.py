"""Audio container negotiation and encoding.

The recorder picks the first MIME type from ``AUDIO_MIME_TYPES`` that the
capture backend can produce. For the microphone backend that means a
container ``soundfile`` (libsndfile) can write; anything else falls back to
16-bit WAV.
"""

import io

import numpy as np
import soundfile as sf

# Supported MIME types in order of preference
AUDIO_MIME_TYPES = [
    "audio/webm;codecs=opus",
    "audio/webm",
    "audio/mp4",
    "audio/ogg",
]

DEFAULT_MIME_TYPE = "audio/wav"

# MIME type -> (soundfile format, subtype)
_CONTAINERS: dict[str, tuple[str, str]] = {
    "audio/ogg": ("OGG", "VORBIS"),
    DEFAULT_MIME_TYPE: ("WAV", "PCM_16"),
}


def is_mime_type_supported(mime_type: str) -> bool:
    """Return True if the installed libsndfile can write ``mime_type``."""
    container = _CONTAINERS.get(mime_type)
    if container is None:
        return False
    fmt, subtype = container
    return fmt in sf.available_formats() and subtype in sf.available_subtypes(fmt)


def negotiate_mime_type(is_supported=is_mime_type_supported, preferences=None) -> str:
    """Return the first supported MIME type, or ``""`` to let the backend decide.

    Args:
        is_supported: Predicate answering whether a MIME type can be produced.
        preferences: Ordered candidates (defaults to ``AUDIO_MIME_TYPES``).
    """
    for mime_type in preferences or AUDIO_MIME_TYPES:
        if is_supported(mime_type):
            return mime_type
    return ""


def encode_chunks(chunks: list[np.ndarray], mime_type: str, sample_rate: int) -> bytes:
    """Concatenate captured float32 frames and write them into one container.

    Args:
        chunks: Frames in capture order, each shaped ``(frames, channels)``.
        mime_type: Negotiated MIME type; unknown or empty values encode as WAV.
        sample_rate: Capture sample rate in Hz.

    Returns:
        The encoded file bytes.
    """
    fmt, subtype = _CONTAINERS.get(mime_type, _CONTAINERS[DEFAULT_MIME_TYPE])
    data = np.concatenate(chunks, axis=0)
    buf = io.BytesIO()
    sf.write(buf, data, sample_rate, format=fmt, subtype=subtype)
    return buf.getvalue()


def format_time(seconds: int) -> str:
    """Render a duration as ``m:ss`` (e.g. 75 -> ``1:15``)."""
    mins, secs = divmod(int(seconds), 60)
    return f"{mins}:{secs:02d}"
