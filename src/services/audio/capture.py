"""Microphone capture backends.

``CaptureBackend`` is what the recorder needs from the platform: open a
stream that pushes chunks to a callback, say which containers it can
produce, and assemble captured chunks into one encoded clip.
``MicrophoneBackend`` implements it with ``sounddevice``.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable

import numpy as np

from src.core.exceptions import MicrophoneUnavailableError
from src.services.audio.formats import encode_chunks, is_mime_type_supported

logger = logging.getLogger(__name__)


class CaptureStream(ABC):
    """A live input stream owned by the recorder."""

    @abstractmethod
    def start(self) -> None:
        """Begin delivering chunks."""

    @abstractmethod
    def stop(self) -> None:
        """Stop the hardware stream; pending chunks are delivered before returning."""

    @abstractmethod
    def latest_samples(self, count: int) -> np.ndarray:
        """Return up to ``count`` of the most recent mono samples (read-only view)."""


class CaptureBackend(ABC):
    """Platform microphone access used by ``Recorder``."""

    @abstractmethod
    def open(self, on_chunk: Callable[[object], None]) -> CaptureStream:
        """Acquire the microphone and return an unstarted stream.

        Raises:
            MicrophoneUnavailableError: Access denied or no input device.
        """

    @abstractmethod
    def is_type_supported(self, mime_type: str) -> bool:
        """Whether ``mime_type`` can be produced by ``assemble``."""

    @abstractmethod
    def assemble(self, chunks: list, mime_type: str) -> bytes:
        """Join all captured chunks into one clip encoded as ``mime_type``."""


def _lazy_import_sounddevice():
    # PortAudio is loaded at import time; a missing library means no microphone
    try:
        import sounddevice as sd
    except (ImportError, OSError) as exc:
        raise MicrophoneUnavailableError(f"sounddevice is unavailable: {exc}") from exc
    return sd


class SoundDeviceStream(CaptureStream):
    """Wraps ``sounddevice.InputStream`` and keeps a rolling sample window."""

    def __init__(
        self,
        sd,
        on_chunk: Callable[[object], None],
        *,
        sample_rate: int,
        channels: int,
        device: int | str | None,
        window_blocks: int,
    ) -> None:
        self._on_chunk = on_chunk
        self._window: deque[np.ndarray] = deque(maxlen=window_blocks)
        self._window_lock = threading.Lock()
        self._stream = sd.InputStream(
            samplerate=sample_rate,
            channels=channels,
            dtype="float32",
            device=device,
            callback=self._callback,
        )

    def _callback(self, indata, frames, time_info, status) -> None:  # noqa: ARG002
        if status:
            logger.debug("Input stream status: %s", status)
        chunk = indata.copy()
        with self._window_lock:
            self._window.append(chunk[:, 0])
        self._on_chunk(chunk)

    def start(self) -> None:
        self._stream.start()

    def stop(self) -> None:
        try:
            self._stream.stop()
        finally:
            self._stream.close()

    def latest_samples(self, count: int) -> np.ndarray:
        with self._window_lock:
            if not self._window:
                return np.zeros(0, dtype=np.float32)
            samples = np.concatenate(list(self._window))
        return samples[-count:]


class MicrophoneBackend(CaptureBackend):
    """Default-microphone capture through ``sounddevice``.

    Args:
        sample_rate: Capture sample rate (Hz).
        channels: Number of input channels.
        device: sounddevice device index or name (None = system default).
        window_blocks: Callback blocks retained for the visualizer.
    """

    def __init__(
        self,
        *,
        sample_rate: int = 16000,
        channels: int = 1,
        device: int | str | None = None,
        window_blocks: int = 8,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device
        self.window_blocks = window_blocks

    def open(self, on_chunk: Callable[[object], None]) -> CaptureStream:
        sd = _lazy_import_sounddevice()
        try:
            sd.check_input_settings(
                device=self.device, channels=self.channels, samplerate=self.sample_rate
            )
            return SoundDeviceStream(
                sd,
                on_chunk,
                sample_rate=self.sample_rate,
                channels=self.channels,
                device=self.device,
                window_blocks=self.window_blocks,
            )
        except (sd.PortAudioError, ValueError) as exc:
            raise MicrophoneUnavailableError(f"Could not open input device: {exc}") from exc

    def is_type_supported(self, mime_type: str) -> bool:
        return is_mime_type_supported(mime_type)

    def assemble(self, chunks: list, mime_type: str) -> bytes:
        return encode_chunks(chunks, mime_type, self.sample_rate)
