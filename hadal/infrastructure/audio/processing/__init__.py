"""Audio processing and microphone capture modules."""

# Import processing functions immediately (numpy/scipy only)
from .processing import (
    to_mono,
    remove_dc,
    resample,
    float_to_pcm16,
    pcm16_to_float,
    prepare_chunk,
    write_wav
)


# Lazy imports for capture (PyAudio itself is only loaded on acquire)
def _get_capture_classes():
    from .capture import PyAudioCaptureDevice, PyAudioCaptureHandle
    return {"PyAudioCaptureDevice": PyAudioCaptureDevice, "PyAudioCaptureHandle": PyAudioCaptureHandle}


def __getattr__(name):
    if name in ("PyAudioCaptureDevice", "PyAudioCaptureHandle"):
        return _get_capture_classes()[name]
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "PyAudioCaptureDevice",
    "PyAudioCaptureHandle",
    "to_mono",
    "remove_dc",
    "resample",
    "float_to_pcm16",
    "pcm16_to_float",
    "prepare_chunk",
    "write_wav"
]
