"""Voice message recorder.

Wraps a ``CaptureBackend`` into start / stop / cancel transitions over an
explicit ``RecordingSession`` value object. A repeating 1-second tick
advances the elapsed time and auto-stops (and sends) the recording once
``max_seconds`` is reached.

Threading: chunks arrive on the capture callback thread and ticks on the
timer thread, so every transition runs under one lock. The stop transition
is guarded so it fires once per session, whichever of manual stop,
cancel, auto-stop or close gets there first.

Usage::

    recorder = Recorder(MicrophoneBackend(), on_complete=handle_blob)
    recorder.start()
    ...
    blob = recorder.stop(should_emit=True)
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from src.core.exceptions import MicrophoneUnavailableError
from src.services.audio.capture import CaptureBackend, CaptureStream
from src.services.audio.formats import DEFAULT_MIME_TYPE, negotiate_mime_type

logger = logging.getLogger(__name__)

MAX_RECORDING_TIME = 60  # seconds
PERMISSION_ERROR_MESSAGE = "Could not access microphone. Please check permissions."


@dataclass(frozen=True)
class AudioBlob:
    """A finished recording: encoded bytes plus their MIME type."""

    data: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class RecordingSession:
    """State of the current (or last) recording.

    Owned by ``Recorder``; the visualizer holds a reference to read
    ``stream`` but never stops it.
    """

    is_recording: bool = False
    elapsed_seconds: int = 0
    stream: CaptureStream | None = None
    error: str | None = None
    mime_type: str = ""
    chunks: list = field(default_factory=list)


class RepeatingTimer:
    """Calls ``fn`` every ``interval`` seconds on a daemon thread until cancelled."""

    def __init__(self, interval: float, fn: Callable[[], None]) -> None:
        self._interval = interval
        self._fn = fn
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name="recorder-tick", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def _run(self) -> None:
        while not self._cancelled.wait(self._interval):
            self._fn()


class Recorder:
    """Microphone recorder with a hard duration limit.

    Args:
        backend: Platform capture backend.
        on_complete: Called with the ``AudioBlob`` when a recording is sent.
        max_seconds: Auto-stop threshold; the clip is sent when reached.
        tick_seconds: Elapsed-time tick interval.
        flush_grace_seconds: Delay between stopping the stream and assembling
            chunks so the final flush is observed.
        timer_factory: Builds the tick timer (``RepeatingTimer`` by default).
    """

    def __init__(
        self,
        backend: CaptureBackend,
        on_complete: Callable[[AudioBlob], None] | None = None,
        *,
        max_seconds: int = MAX_RECORDING_TIME,
        tick_seconds: float = 1.0,
        flush_grace_seconds: float = 0.2,
        timer_factory: Callable[[float, Callable[[], None]], RepeatingTimer] = RepeatingTimer,
    ) -> None:
        self._backend = backend
        self.on_complete = on_complete
        self._max_seconds = max_seconds
        self._tick_seconds = tick_seconds
        self._flush_grace_seconds = flush_grace_seconds
        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._timer: RepeatingTimer | None = None
        self._generation = 0
        self._stopping = False
        self.session = RecordingSession()

    @property
    def max_seconds(self) -> int:
        return self._max_seconds

    @property
    def is_recording(self) -> bool:
        return self.session.is_recording

    @property
    def is_stopping(self) -> bool:
        """True from the start of a stop until its clip has been delivered."""
        return self._stopping

    # -- transitions --

    def start(self) -> bool:
        """Acquire the microphone and begin recording.

        Returns:
            True if a new session started. False if one is already active or
            the microphone is unavailable (``session.error`` is then set).
        """
        with self._lock:
            session = self.session
            if session.is_recording or self._stopping:
                return False
            session.error = None

            generation = self._generation + 1
            try:
                stream = self._backend.open(lambda chunk: self._on_chunk(generation, chunk))
            except MicrophoneUnavailableError as exc:
                logger.error("Error accessing microphone: %s", exc.detail)
                session.error = PERMISSION_ERROR_MESSAGE
                return False

            self._generation = generation
            session.mime_type = negotiate_mime_type(self._backend.is_type_supported)
            session.chunks = []
            session.elapsed_seconds = 0
            session.stream = stream
            session.is_recording = True
            try:
                stream.start()
            except Exception as exc:
                logger.error("Failed to start input stream: %s", exc)
                self._reset_session()
                self._release(stream)
                session.error = PERMISSION_ERROR_MESSAGE
                return False

            self._timer = self._timer_factory(self._tick_seconds, self._tick)
            self._timer.start()

        logger.info("Recording started (%s)", session.mime_type or DEFAULT_MIME_TYPE)
        return True

    def stop(self, should_emit: bool = True) -> AudioBlob | None:
        """Stop recording; deliver the clip when ``should_emit`` and data exists.

        Returns:
            The delivered blob, or None if nothing was sent (already stopped,
            discarded, or no chunks captured).
        """
        with self._lock:
            session = self.session
            if not session.is_recording:
                return None
            self._cancel_timer()
            session.is_recording = False
            self._stopping = True
            stream = session.stream

        try:
            return self._finish(stream, should_emit)
        finally:
            with self._lock:
                self._stopping = False

    def _finish(self, stream: CaptureStream | None, should_emit: bool) -> AudioBlob | None:
        # The stream's stop waits for in-flight callbacks, which take the lock
        self._release(stream)
        if self._flush_grace_seconds > 0:
            time.sleep(self._flush_grace_seconds)

        with self._lock:
            session = self.session
            chunks = session.chunks
            mime_type = session.mime_type or DEFAULT_MIME_TYPE
            self._reset_session()

        if not should_emit:
            logger.info("Recording discarded (%d chunks)", len(chunks))
            return None
        if not chunks:
            logger.warning("Recording stopped with no audio captured")
            return None

        blob = AudioBlob(data=self._backend.assemble(chunks, mime_type), mime_type=mime_type)
        logger.info("Recording finished: %d bytes (%s)", blob.size, mime_type)
        if self.on_complete is not None:
            self.on_complete(blob)
        return blob

    def cancel(self) -> None:
        """Stop and discard the current recording; nothing is delivered."""
        self.stop(should_emit=False)

    def close(self) -> None:
        """Teardown: release the microphone even mid-recording."""
        self.cancel()
        with self._lock:
            self._cancel_timer()

    # -- internals --

    def _on_chunk(self, generation: int, chunk) -> None:
        with self._lock:
            # Late chunks from a finished session are dropped
            if generation == self._generation and self.session.stream is not None:
                self.session.chunks.append(chunk)

    def _tick(self) -> None:
        with self._lock:
            session = self.session
            if not session.is_recording:
                return
            if session.elapsed_seconds < self._max_seconds:
                session.elapsed_seconds += 1
            reached = session.elapsed_seconds >= self._max_seconds
        if reached:
            logger.info("Max recording time reached (%ds), sending", self._max_seconds)
            self.stop(should_emit=True)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _reset_session(self) -> None:
        session = self.session
        session.is_recording = False
        session.stream = None
        session.chunks = []
        self._generation += 1

    @staticmethod
    def _release(stream: CaptureStream | None) -> None:
        if stream is None:
            return
        try:
            stream.stop()
        except Exception as exc:
            logger.warning("Error releasing input stream: %s", exc)
