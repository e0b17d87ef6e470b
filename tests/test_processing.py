import wave

import numpy as np

from hadal.infrastructure.audio.processing import (
    PyAudioCaptureHandle,
    float_to_pcm16,
    pcm16_to_float,
    prepare_chunk,
    remove_dc,
    resample,
    to_mono,
    write_wav,
)


def test_prepare_chunk_downsamples_to_pcm16():
    # 100 ms at 48 kHz -> 1600 samples at 16 kHz
    t = np.arange(4800) / 48000
    frames = 0.5 * np.sin(2 * np.pi * 440 * t).astype(np.float32)
    chunk = prepare_chunk(frames, 48000, 16000)
    assert isinstance(chunk, bytes)
    assert len(chunk) == 3200


def test_stereo_is_downmixed():
    stereo = np.column_stack([np.ones(10), -np.ones(10)])
    assert np.allclose(to_mono(stereo), 0.0)
    mono = np.ones(5)
    assert to_mono(mono) is mono


def test_remove_dc():
    x = np.full(100, 0.25, dtype=np.float32)
    assert np.allclose(remove_dc(x), 0.0)


def test_resample_same_rate_is_passthrough():
    x = np.linspace(-1, 1, 32)
    out = resample(x, 16000, 16000)
    assert out.dtype == np.float32
    assert len(out) == 32


def test_pcm16_conversion_clips():
    pcm = float_to_pcm16(np.array([-2.0, 0.0, 2.0]))
    assert pcm.tolist() == [-32768, 0, 32767]
    back = pcm16_to_float(pcm.tobytes())
    assert back[0] == -1.0
    assert back[1] == 0.0


def test_write_wav(tmp_path):
    path = str(tmp_path / "answer.wav")
    write_wav(path, np.zeros(1600, dtype=np.int16), 16000)
    with wave.open(path, "rb") as wf:
        assert wf.getframerate() == 16000
        assert wf.getnchannels() == 1
        assert wf.getnframes() == 1600


def test_released_handle_saves_answer_audio(tmp_path):
    path = tmp_path / "answers" / "last_answer.wav"
    handle = PyAudioCaptureHandle(sr_capture=16000, channels=1, wav_path=str(path))
    handle.on_audio(np.zeros(1600, dtype=np.int16).tobytes())
    handle.on_audio(np.zeros(1600, dtype=np.int16).tobytes())
    handle.release()
    assert handle.released
    with wave.open(str(path), "rb") as wf:
        assert wf.getnframes() == 3200
        assert wf.getframerate() == 16000


def test_handle_without_wav_path_keeps_nothing(tmp_path):
    handle = PyAudioCaptureHandle(sr_capture=16000, channels=1)
    handle.on_audio(np.zeros(1600, dtype=np.int16).tobytes())
    handle.release()
    assert list(tmp_path.iterdir()) == []
