"""
Audio infrastructure for Hadal.

- processing: signal helpers and PyAudio microphone capture
- speech: Google Cloud streaming speech-to-text
"""

from .processing import PyAudioCaptureDevice, prepare_chunk
from .speech import GoogleLiveTranscriber, RestartPolicy

__all__ = [
    "PyAudioCaptureDevice",
    "prepare_chunk",
    "GoogleLiveTranscriber",
    "RestartPolicy"
]
