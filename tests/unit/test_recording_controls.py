"""Unit tests for the recorder hand-off used by the Streamlit controls."""

import queue
from unittest.mock import patch

import pytest

from src.services.audio.recorder import AudioBlob
from src.services.audio.visualizer import Visualizer
from src.ui.components import recording_controls


class _SessionState(dict):
    """Attribute-style dict standing in for ``st.session_state``."""

    __getattr__ = dict.__getitem__
    __setattr__ = dict.__setitem__


@pytest.fixture
def session_state(make_recorder):
    pending = queue.Queue()
    state = _SessionState(
        recorder=make_recorder(on_complete=pending.put),
        pending_blobs=pending,
        visualizer=Visualizer(),
    )
    with patch.object(recording_controls.st, "session_state", state):
        yield state


def test_take_pending_blob_pops_in_order(session_state):
    session_state.pending_blobs.put(AudioBlob(data=b"one", mime_type="audio/ogg"))
    session_state.pending_blobs.put(AudioBlob(data=b"two", mime_type="audio/ogg"))

    assert recording_controls.take_pending_blob().data == b"one"
    assert recording_controls.take_pending_blob().data == b"two"
    assert recording_controls.take_pending_blob() is None


def test_reset_recorder_drops_undelivered_clips(session_state, fake_backend):
    recorder = session_state.recorder
    recorder.start()
    session_state.pending_blobs.put(AudioBlob(data=b"stale", mime_type="audio/ogg"))

    recording_controls.reset_recorder()

    assert not recorder.is_recording
    assert fake_backend.stream.stopped
    assert recording_controls.take_pending_blob() is None
