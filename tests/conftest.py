"""Pytest configuration and fixtures for birdlab tests."""

import io

import numpy as np
import pytest
import soundfile as sf

try:
    import mlx.core as mx
except ImportError:
    mx = None

_TEST_SEED = 42


def make_sine(
    freq: float = 1000.0,
    duration: float = 1.0,
    sample_rate: int = 16000,
    amplitude: float = 0.5,
) -> np.ndarray:
    """Sine wave as float32."""
    t = np.arange(int(round(duration * sample_rate))) / sample_rate
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def make_wav_bytes(samples: np.ndarray, sample_rate: int, subtype: str = "PCM_16") -> bytes:
    """Encode samples ([n] or [n, channels]) as an in-memory WAV file."""
    buf = io.BytesIO()
    sf.write(buf, samples, sample_rate, format="WAV", subtype=subtype)
    return buf.getvalue()


@pytest.fixture
def fixed_seed() -> int:
    """Fix MLX and NumPy random seeds."""
    if mx is not None:
        mx.random.seed(_TEST_SEED)
    np.random.seed(_TEST_SEED)
    return _TEST_SEED


@pytest.fixture
def random_audio():
    """Random audio in [-1, 1] for testing."""
    rng = np.random.default_rng(_TEST_SEED)
    return np.clip(rng.standard_normal(16000) * 0.3, -1.0, 1.0).astype(np.float32)


@pytest.fixture
def sine_signal():
    """Two seconds of 1 kHz sine at 16 kHz, amplitude 0.5."""
    from birdlab.types import AudioSignal

    return AudioSignal.from_samples(make_sine(1000.0, 2.0, 16000), 16000)


@pytest.fixture
def sine_wav_bytes():
    """Three seconds of 1 kHz sine at 44.1 kHz as WAV bytes."""
    return make_wav_bytes(make_sine(1000.0, 3.0, 44100), 44100, subtype="FLOAT")
