"""
Basic audio processing functions: channel downmix, resampling and PCM16 conversion.
"""
import math
import wave

import numpy as np
from scipy.signal import resample_poly


def to_mono(x: np.ndarray) -> np.ndarray:
    """Downmix (samples, channels) audio to mono by averaging channels."""
    if x.ndim == 1:
        return x
    return np.mean(x, axis=1)


def remove_dc(x: np.ndarray) -> np.ndarray:
    """Remove DC offset from audio signal."""
    if x.size == 0:
        return x
    return x - np.mean(x)


def resample(x: np.ndarray, sr_in: int, sr_out: int) -> np.ndarray:
    """Polyphase resampling between integer sample rates."""
    if sr_in == sr_out:
        return x.astype(np.float32)
    g = math.gcd(sr_in, sr_out)
    return resample_poly(x, up=sr_out // g, down=sr_in // g).astype(np.float32)


def float_to_pcm16(x: np.ndarray) -> np.ndarray:
    """Convert float audio in [-1, 1] to int16 with clipping."""
    return np.clip(x * 32767, -32768, 32767).astype(np.int16)


def pcm16_to_float(raw: bytes) -> np.ndarray:
    return np.frombuffer(raw, dtype=np.int16).astype(np.float32) / 32768.0


def prepare_chunk(frames: np.ndarray, sr_in: int, sr_out: int) -> bytes:
    """
    Turn one captured block into bytes ready for streaming recognition.

    Args:
        frames: Float samples shaped (samples,) or (samples, channels)
        sr_in: Capture sample rate
        sr_out: Recognizer sample rate

    Returns:
        Mono PCM16 little-endian bytes at `sr_out`
    """
    mono = remove_dc(to_mono(frames))
    return float_to_pcm16(resample(mono, sr_in, sr_out)).tobytes()


def write_wav(path: str, pcm16: np.ndarray, sr: int, channels: int = 1) -> None:
    """Write PCM16 audio data to WAV file."""
    with wave.open(path, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sr)
        wf.writeframes(pcm16.tobytes())
