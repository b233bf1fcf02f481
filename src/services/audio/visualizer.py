"""Live frequency-bar visualizer for the active recording.

Mirrors a small analyser: a 64-point FFT over the newest samples, byte
magnitudes on a -100..-30 dB scale, and ``VISUALIZER_BAR_COUNT`` bars
sampled from the lower half of the spectrum. Purely cosmetic.
"""

import numpy as np

from src.services.audio.recorder import RecordingSession

VISUALIZER_BAR_COUNT = 30
FFT_SIZE = 64
MIN_DECIBELS = -100.0
MAX_DECIBELS = -30.0
MIN_LEVEL = 4 / 60  # 4px of a 60px-high canvas
_BLOCKS = " ▁▂▃▄▅▆▇█"


def byte_frequency_data(samples: np.ndarray, fft_size: int = FFT_SIZE) -> np.ndarray:
    """Return ``fft_size // 2`` frequency magnitudes scaled to 0..255."""
    frame = np.zeros(fft_size, dtype=np.float32)
    tail = np.asarray(samples, dtype=np.float32)[-fft_size:]
    if tail.size:
        frame[-tail.size :] = tail
    spectrum = np.abs(np.fft.rfft(frame * np.blackman(fft_size)))[: fft_size // 2] / fft_size
    decibels = 20 * np.log10(np.maximum(spectrum, 1e-12))
    scaled = (decibels - MIN_DECIBELS) / (MAX_DECIBELS - MIN_DECIBELS) * 255
    return np.clip(scaled, 0, 255).astype(np.uint8)


def bar_levels(
    data: np.ndarray,
    bar_count: int = VISUALIZER_BAR_COUNT,
    min_level: float = MIN_LEVEL,
) -> list[float]:
    """Map frequency bytes onto ``bar_count`` bar heights in ``[min_level, 0.8]``."""
    bins = len(data)
    levels = []
    for i in range(bar_count):
        index = int(i / bar_count * (bins / 2))
        value = int(data[index]) if index < bins else 0
        levels.append(max(min_level, value / 255 * 0.8))
    return levels


class Visualizer:
    """Reads the recorder's stream while recording and produces bar heights.

    ``attach`` borrows the session's stream; ``detach`` drops the reference
    and analysis window. The stream itself is never stopped here.
    """

    def __init__(self, bar_count: int = VISUALIZER_BAR_COUNT, fft_size: int = FFT_SIZE) -> None:
        self.bar_count = bar_count
        self.fft_size = fft_size
        self._session: RecordingSession | None = None

    @property
    def attached(self) -> bool:
        return self._session is not None

    def attach(self, session: RecordingSession) -> bool:
        """Start analysing ``session`` if it is recording. Returns True on success."""
        if not session.is_recording or session.stream is None:
            self.detach()
            return False
        self._session = session
        return True

    def detach(self) -> None:
        self._session = None

    def levels(self) -> list[float]:
        """Current bar heights, or ``[]`` (and detach) once recording has stopped."""
        session = self._session
        stream = session.stream if session is not None else None
        if session is None or not session.is_recording or stream is None:
            self.detach()
            return []
        data = byte_frequency_data(stream.latest_samples(self.fft_size), self.fft_size)
        return bar_levels(data, self.bar_count)

    def render_text(self) -> str:
        """Unicode block rendering of ``levels()`` (empty when detached)."""
        top = len(_BLOCKS) - 1
        return "".join(_BLOCKS[max(1, round(level * top))] for level in self.levels())
