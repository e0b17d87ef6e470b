"""Infrastructure components for Hadal.

Platform adapters behind the recording interfaces (microphone, live
transcription) and the attempt log storage.
"""

# Audio infrastructure
from .audio import PyAudioCaptureDevice, GoogleLiveTranscriber, RestartPolicy

# Storage
from .data import AttemptLog, AttemptRecord

__all__ = [
    # Audio
    "PyAudioCaptureDevice", "GoogleLiveTranscriber", "RestartPolicy",

    # Storage
    "AttemptLog", "AttemptRecord"
]
