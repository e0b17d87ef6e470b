"""
Helpers for the native audio stack.

PortAudio and ALSA write diagnostics straight to file descriptor 2 whenever a
device is probed or opened; PyAudio also prints on import. These helpers keep
that noise out of the learner's terminal.
"""
import functools
import os
import sys
import warnings
from contextlib import contextmanager
from types import ModuleType


# PortAudio must not try to launch a JACK server; gRPC should only report errors
for _name, _value in (("JACK_NO_START_SERVER", "1"),
                      ("GRPC_VERBOSITY", "ERROR"),
                      ("GLOG_minloglevel", "2")):
    os.environ.setdefault(_name, _value)


@contextmanager
def native_stderr_silenced():
    """Point fd 2 at /dev/null for the duration of the block."""
    try:
        saved_fd = os.dup(2)
    except OSError:
        yield
        return

    try:
        null_fd = os.open(os.devnull, os.O_WRONLY)
        os.dup2(null_fd, 2)
        os.close(null_fd)
        yield
    finally:
        os.dup2(saved_fd, 2)
        os.close(saved_fd)


def quiet_native_audio(func):
    """Decorator form of `native_stderr_silenced` for capture calls."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with native_stderr_silenced():
            return func(*args, **kwargs)
    return wrapper


def load_pyaudio() -> ModuleType:
    """
    Import PyAudio with its import-time chatter suppressed.

    Raises:
        ImportError: If the `audio` extra is not installed
    """
    saved_stderr = sys.stderr
    with warnings.catch_warnings(), open(os.devnull, "w") as devnull:
        warnings.simplefilter("ignore")
        sys.stderr = devnull
        try:
            import pyaudio
        finally:
            sys.stderr = saved_stderr
    return pyaudio
