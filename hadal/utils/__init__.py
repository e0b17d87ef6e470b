"""Utility modules for logging and the native audio stack."""

from .imports import load_pyaudio, native_stderr_silenced, quiet_native_audio
from .logging import setup_logging

__all__ = ["load_pyaudio", "native_stderr_silenced", "quiet_native_audio", "setup_logging"]
