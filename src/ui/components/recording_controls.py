"""
Recording controls — microphone button, live timer/visualizer, cancel/send.

States: idle -> recording -> idle

Finished clips are handed over through a thread-safe queue because the
auto-stop path delivers them from the recorder's timer thread, outside any
Streamlit script run.
"""

import logging
import queue

import streamlit as st

from src.core.config import get_settings
from src.services.audio.capture import MicrophoneBackend
from src.services.audio.formats import format_time
from src.services.audio.recorder import AudioBlob, Recorder
from src.services.audio.visualizer import Visualizer

logger = logging.getLogger(__name__)

_settings = get_settings()


def get_recorder() -> Recorder:
    """Return this browser session's recorder, creating it on first use."""
    if "recorder" not in st.session_state:
        pending: queue.Queue[AudioBlob] = queue.Queue()
        st.session_state.pending_blobs = pending
        st.session_state.recorder = Recorder(
            MicrophoneBackend(sample_rate=_settings.sample_rate),
            on_complete=pending.put,
            max_seconds=_settings.max_recording_seconds,
        )
        st.session_state.visualizer = Visualizer()
    return st.session_state.recorder


def take_pending_blob() -> AudioBlob | None:
    """Pop the next delivered recording, if any."""
    get_recorder()
    try:
        return st.session_state.pending_blobs.get_nowait()
    except queue.Empty:
        return None


def reset_recorder() -> None:
    """Release the microphone and drop clips not yet turned into messages."""
    get_recorder().close()
    pending: queue.Queue[AudioBlob] = st.session_state.pending_blobs
    while True:
        try:
            pending.get_nowait()
        except queue.Empty:
            break


def render_recording_controls(disabled: bool) -> None:
    """Render the controls for the current recorder state."""
    recorder = get_recorder()
    visualizer: Visualizer = st.session_state.visualizer

    if recorder.session.error:
        st.error(recorder.session.error, icon="⚠️")

    if recorder.is_recording or recorder.is_stopping:
        _render_recording(recorder, visualizer)
    else:
        _render_idle(recorder, visualizer, disabled)


def _render_idle(recorder: Recorder, visualizer: Visualizer, disabled: bool) -> None:
    if st.button(
        "\U0001f3a4 Record",
        type="primary",
        disabled=disabled,
        use_container_width=True,
    ):
        if recorder.start():
            visualizer.attach(recorder.session)
        st.rerun()
    st.caption("Tap microphone to speak")


def _render_recording(recorder: Recorder, visualizer: Visualizer) -> None:
    _recording_status(recorder, visualizer)
    if not recorder.is_recording:
        return

    col1, col2 = st.columns(2)
    with col1:
        if st.button("\U0001f5d1️ Cancel", use_container_width=True):
            recorder.cancel()
            visualizer.detach()
            st.rerun()
    with col2:
        if st.button("➤ Send Voice Note", type="primary", use_container_width=True):
            recorder.stop(should_emit=True)
            visualizer.detach()
            st.rerun()


@st.fragment(run_every=_settings.visualizer_refresh_seconds)
def _recording_status(recorder: Recorder, visualizer: Visualizer) -> None:
    """Timer and frequency bars, refreshed on their own while recording."""
    session = recorder.session
    if not session.is_recording:
        visualizer.detach()
        if recorder.is_stopping and st.session_state.pending_blobs.empty():
            # Auto-stop still assembling the clip; check again on the next refresh
            st.caption("Finishing recording...")
            return
        # Auto-stopped on timeout: rerun the whole app to pick up the clip
        st.rerun()

    elapsed = format_time(session.elapsed_seconds)
    limit = format_time(recorder.max_seconds)
    st.markdown(f"\U0001f534 `{elapsed} / {limit}` **RECORDING VOICE MESSAGE**")

    levels = visualizer.levels()
    if levels:
        st.bar_chart(levels, height=80)
