"""
Microphone capture through PyAudio.

The PyAudio callback runs on PortAudio's thread; it converts each block to
16 kHz mono PCM16 and hands it over through a bounded thread-safe queue.
"""
import logging
import os
import queue
import threading
from typing import Iterator, List, Optional

import numpy as np

from ....assessment.errors import DeviceUnavailable
from ....config import (
    CAPTURE_QUEUE_MAX_CHUNKS, CHANNELS, FRAME_MS,
    SAMPLE_RATE_CAPTURE, SAMPLE_RATE_TARGET
)
from ....recording.interfaces import CaptureDevice, CaptureHandle
from ....utils import load_pyaudio, quiet_native_audio
from .processing import pcm16_to_float, prepare_chunk, write_wav

logger = logging.getLogger("audio_capture")


def _load_pyaudio():
    """Lazy import so the package works without the audio extra installed."""
    try:
        return load_pyaudio()
    except ImportError as e:
        raise DeviceUnavailable(f"PyAudio is not installed: {e}")


class PyAudioCaptureHandle(CaptureHandle):
    """An open PyAudio input stream feeding a chunk queue."""

    def __init__(self,
                 sr_capture: int,
                 channels: int,
                 sr_target: int = SAMPLE_RATE_TARGET,
                 max_chunks: int = CAPTURE_QUEUE_MAX_CHUNKS,
                 wav_path: Optional[str] = None):
        self.sr_capture = sr_capture
        self.channels = channels
        self.sr_target = sr_target
        self.wav_path = wav_path
        self._queue: "queue.Queue[Optional[bytes]]" = queue.Queue(maxsize=max_chunks)
        self._recorded: List[bytes] = []
        self._lock = threading.Lock()
        self._released = False
        self._dropped = 0
        self._pa = None
        self._stream = None

    def attach(self, pa, stream) -> None:
        self._pa = pa
        self._stream = stream

    def on_audio(self, in_data: bytes) -> None:
        """Convert one raw int16 block and queue it; drops when the consumer lags."""
        if self._released:
            return
        frames = pcm16_to_float(in_data)
        if self.channels > 1:
            frames = frames.reshape(-1, self.channels)
        chunk = prepare_chunk(frames, self.sr_capture, self.sr_target)
        if self.wav_path:
            self._recorded.append(chunk)
        try:
            self._queue.put_nowait(chunk)
        except queue.Full:
            self._dropped += 1
            if self._dropped % 50 == 1:
                logger.warning(f"Audio queue full, dropped {self._dropped} chunks")

    def chunks(self) -> Iterator[bytes]:
        while True:
            try:
                chunk = self._queue.get(timeout=0.1)
            except queue.Empty:
                if self._released:
                    return
                continue
            if chunk is None:
                return
            yield chunk

    @property
    def released(self) -> bool:
        return self._released

    @quiet_native_audio
    def release(self) -> None:
        with self._lock:
            if self._released:
                return
            self._released = True

        try:
            if self._stream is not None:
                self._stream.stop_stream()
                self._stream.close()
        finally:
            if self._pa is not None:
                self._pa.terminate()
            self._stream = None
            self._pa = None
            try:
                self._queue.put_nowait(None)
            except queue.Full:
                pass

        logger.info("Microphone released")
        if self.wav_path and self._recorded:
            pcm16 = np.frombuffer(b"".join(self._recorded), dtype=np.int16)
            try:
                os.makedirs(os.path.dirname(self.wav_path) or ".", exist_ok=True)
                write_wav(self.wav_path, pcm16, self.sr_target, channels=1)
            except OSError as e:
                logger.error(f"Could not save answer audio to {self.wav_path}: {e}")
            else:
                logger.info(f"Saved answer audio to {self.wav_path}")


class PyAudioCaptureDevice(CaptureDevice):
    """Opens the system microphone with PyAudio."""

    def __init__(self,
                 input_device: Optional[int] = None,
                 num_channels: int = CHANNELS,
                 sr_capture: int = SAMPLE_RATE_CAPTURE,
                 frame_ms: int = FRAME_MS,
                 sr_target: int = SAMPLE_RATE_TARGET,
                 wav_path: Optional[str] = None):
        self.input_device = input_device
        self.num_channels = num_channels
        self.sr_capture = sr_capture
        self.frame_size = int(sr_capture * frame_ms / 1000)
        self.sr_target = sr_target
        self.wav_path = wav_path

    @quiet_native_audio
    def acquire(self) -> PyAudioCaptureHandle:
        """
        Open the microphone.

        Returns:
            A handle that is already capturing

        Raises:
            DeviceUnavailable: If PyAudio is missing or the device cannot be opened
        """
        pyaudio = _load_pyaudio()
        pa = pyaudio.PyAudio()

        handle = PyAudioCaptureHandle(
            sr_capture=self.sr_capture,
            channels=self.num_channels,
            sr_target=self.sr_target,
            wav_path=self.wav_path,
        )

        def callback(in_data, frame_count, time_info, status):
            try:
                handle.on_audio(in_data)
            except Exception as e:
                logger.error(f"Audio callback failed: {e}")
            return (None, pyaudio.paContinue)

        logger.info(
            f"Opening microphone: device={self.input_device}, channels={self.num_channels}, "
            f"rate={self.sr_capture}, frame={self.frame_size}"
        )
        try:
            stream = pa.open(
                format=pyaudio.paInt16,
                channels=self.num_channels,
                rate=self.sr_capture,
                input=True,
                input_device_index=self.input_device,
                frames_per_buffer=self.frame_size,
                stream_callback=callback,
            )
            stream.start_stream()
        except (OSError, IOError, ValueError) as e:
            pa.terminate()
            logger.error(f"Failed to open microphone: {e}")
            raise DeviceUnavailable(f"Could not open microphone: {e}")

        handle.attach(pa, stream)
        logger.info("Microphone opened successfully")
        return handle
