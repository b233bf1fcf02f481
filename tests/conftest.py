"""Shared pytest fixtures for EchoVoice test suite.

Provides a fake capture backend and a manually fired tick timer for the
recorder, a mock audio LLM for the relay, and settings pointing the
upload directory at a temp dir.
"""

from unittest.mock import AsyncMock

import numpy as np
import pytest

from src.core.config import Settings
from src.core.exceptions import MicrophoneUnavailableError
from src.services.audio.capture import CaptureBackend, CaptureStream

# ---------------------------------------------------------------------------
# Capture fakes
# ---------------------------------------------------------------------------


class FakeStream(CaptureStream):
    """Capture stream driven by the test through ``emit``."""

    def __init__(self, on_chunk, flush_chunk=None) -> None:
        self.on_chunk = on_chunk
        self.flush_chunk = flush_chunk
        self.started = False
        self.stopped = False
        self.samples = np.zeros(0, dtype=np.float32)

    def emit(self, chunk) -> None:
        self.on_chunk(chunk)

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        # Like a real encoder, the last buffered chunk arrives on stop
        if self.flush_chunk is not None:
            self.on_chunk(self.flush_chunk)
        self.stopped = True

    def latest_samples(self, count: int) -> np.ndarray:
        return self.samples[-count:]


class FakeBackend(CaptureBackend):
    """Byte-chunk backend; ``assemble`` simply concatenates."""

    def __init__(self, supported=("audio/ogg",), fail: bool = False, flush_chunk=None) -> None:
        self.supported = set(supported)
        self.fail = fail
        self.flush_chunk = flush_chunk
        self.streams: list[FakeStream] = []

    @property
    def stream(self) -> FakeStream:
        return self.streams[-1]

    def open(self, on_chunk) -> FakeStream:
        if self.fail:
            raise MicrophoneUnavailableError("Permission denied")
        stream = FakeStream(on_chunk, flush_chunk=self.flush_chunk)
        self.streams.append(stream)
        return stream

    def is_type_supported(self, mime_type: str) -> bool:
        return mime_type in self.supported

    def assemble(self, chunks: list, mime_type: str) -> bytes:
        return b"".join(chunks)


class ManualTimer:
    """Stand-in for ``RepeatingTimer``; the test calls ``fire`` to tick."""

    def __init__(self, interval: float, fn) -> None:
        self.interval = interval
        self.fn = fn
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if self.cancelled:
                return
            self.fn()


@pytest.fixture
def fake_backend():
    """A microphone that grants access and supports only audio/ogg."""
    return FakeBackend()


@pytest.fixture
def timers():
    """Collects every ManualTimer created by a recorder."""
    return []


@pytest.fixture
def make_recorder(fake_backend, timers):
    """Factory building a Recorder wired to the fake backend and manual timers."""
    from src.services.audio.recorder import Recorder

    def factory(backend=None, **kwargs):
        def timer_factory(interval, fn):
            timer = ManualTimer(interval, fn)
            timers.append(timer)
            return timer

        kwargs.setdefault("flush_grace_seconds", 0)
        return Recorder(backend or fake_backend, timer_factory=timer_factory, **kwargs)

    return factory


# ---------------------------------------------------------------------------
# Relay fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm():
    """Create a mock audio LLM provider for unit testing.

    Returns:
        AsyncMock: A mock implementing the BaseAudioLLM interface that
        replies "Hello there".
    """
    from src.services.llm.base import BaseAudioLLM

    llm = AsyncMock(spec=BaseAudioLLM)
    llm.respond_to_audio.return_value = "Hello there"
    return llm


@pytest.fixture
def upload_dir(tmp_path):
    """Temporary directory receiving uploaded voice messages."""
    return tmp_path / "userAudio"


@pytest.fixture
def settings(upload_dir):
    """Settings with a test API key and a temp upload directory."""
    return Settings(api_key="test-key", upload_dir=str(upload_dir))


@pytest.fixture
def sample_audio_bytes():
    """A few bytes standing in for a recorded webm clip."""
    return b"\x1aE\xdf\xa3fake-webm-voice-message"


@pytest.fixture
def make_backend():
    """Factory for fake backends with custom support, failure or flush behavior."""
    return FakeBackend
