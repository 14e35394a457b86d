"""Configuration for the DSP engine."""

from __future__ import annotations

from dataclasses import dataclass

from birdlab.config import BaseConfig
from birdlab.constants import (
    DEFAULT_HOP_SIZE,
    DEFAULT_MFCC_FILTERS,
    DEFAULT_N_MELS,
    DEFAULT_WINDOW_SIZE,
    FILTERBANK_BITS,
    LOG_SCALE_SHIFT,
    MEL_HIGH_HZ,
    MEL_LOW_HZ,
    TARGET_FRAMES,
)
from birdlab.exceptions import ConfigurationError


@dataclass(frozen=True)
class DSPConfig(BaseConfig):
    """Feature extraction parameters.

    Defaults are the operating point the shipped classifiers were
    trained on; changing them produces features those models do not
    understand.

    Attributes:
        window_size: FFT window length in samples (power of two)
        hop_size: Hop between frames in samples
        num_coefficients: Mel bands (and MFCC coefficients) per frame
        mel_low_hz: Lower filterbank band limit
        mel_high_hz: Upper filterbank band limit
        target_frames: Rows in the padded/truncated mel-spectrogram
        filterbank_bits: Filterbank weight scale bits
        log_scale_shift: Log output scale bits
        mfcc_filters: Default filter count for MFCC extraction
    """

    window_size: int = DEFAULT_WINDOW_SIZE
    hop_size: int = DEFAULT_HOP_SIZE
    num_coefficients: int = DEFAULT_N_MELS
    mel_low_hz: float = MEL_LOW_HZ
    mel_high_hz: float = MEL_HIGH_HZ
    target_frames: int = TARGET_FRAMES
    filterbank_bits: int = FILTERBANK_BITS
    log_scale_shift: int = LOG_SCALE_SHIFT
    mfcc_filters: int = DEFAULT_MFCC_FILTERS

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        self._validate_power_of_two(self.window_size, "window_size")
        self._validate_positive(self.hop_size, "hop_size")
        self._validate_positive(self.num_coefficients, "num_coefficients")
        self._validate_positive(self.target_frames, "target_frames")
        self._validate_positive(self.mfcc_filters, "mfcc_filters")
        self._validate_non_negative(self.mel_low_hz, "mel_low_hz")
        self._validate_range(self.filterbank_bits, "filterbank_bits", 1, 15)
        self._validate_range(self.log_scale_shift, "log_scale_shift", 0, 16)
        if self.mel_low_hz >= self.mel_high_hz:
            raise ConfigurationError(
                f"mel_low_hz ({self.mel_low_hz}) must be less than "
                f"mel_high_hz ({self.mel_high_hz})"
            )


__all__ = ["DSPConfig"]
