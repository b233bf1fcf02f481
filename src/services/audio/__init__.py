"""
Audio module - microphone capture, recording and visualization.
"""

from .capture import CaptureBackend, CaptureStream, MicrophoneBackend
from .recorder import AudioBlob, Recorder, RecordingSession
from .visualizer import Visualizer

__all__ = [
    "AudioBlob",
    "CaptureBackend",
    "CaptureStream",
    "MicrophoneBackend",
    "Recorder",
    "RecordingSession",
    "Visualizer",
]
