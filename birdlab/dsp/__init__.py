"""Spectral feature extraction."""

from birdlab.dsp.config import DSPConfig
from birdlab.dsp.engine import DSPEngine
from birdlab.dsp.fft import fft, hann_window, power_spectrum
from birdlab.dsp.filterbank import (
    accumulate_channels,
    build_mel_filterbank,
    hz_to_mel,
    mel_to_hz,
    triangular_filterbank,
)

__all__ = [
    "DSPConfig",
    "DSPEngine",
    "fft",
    "hann_window",
    "power_spectrum",
    "accumulate_channels",
    "build_mel_filterbank",
    "hz_to_mel",
    "mel_to_hz",
    "triangular_filterbank",
]
