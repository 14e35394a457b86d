"""Spectral feature containers produced by the DSP engine."""

from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np

MelSpectrogram = np.ndarray
"""Log mel energies of shape [frames, mel_bands] = [55, 40]."""


@dataclass(frozen=True)
class SpectrogramData:
    """Short-time spectrum of a signal.

    Attributes:
        frequencies: Bin center frequencies in Hz [bins]
        times: Frame start times in seconds [frames]
        magnitudes: Power (or dB) values [frames, bins]
        sample_rate: Sample rate of the analysed signal
        window_size: Analysis window length in samples
        hop_size: Hop between frames in samples
    """

    frequencies: np.ndarray
    times: np.ndarray
    magnitudes: np.ndarray
    sample_rate: int
    window_size: int
    hop_size: int

    def __post_init__(self) -> None:
        if self.magnitudes.shape != (len(self.times), len(self.frequencies)):
            raise ValueError(
                f"magnitudes shape {self.magnitudes.shape} does not match "
                f"[{len(self.times)} frames, {len(self.frequencies)} bins]"
            )

    @property
    def num_frames(self) -> int:
        return len(self.times)

    def with_magnitudes(self, magnitudes: np.ndarray) -> SpectrogramData:
        """Copy with a replaced magnitude matrix (e.g. dB values)."""
        return replace(self, magnitudes=magnitudes)


@dataclass(frozen=True)
class MFCCData:
    """Mel-frequency cepstral coefficients per frame.

    Attributes:
        coefficients: Cepstral values [frames, num_coefficients]
        times: Frame start times in seconds
        num_coefficients: Coefficients per frame
        sample_rate: Sample rate of the analysed signal
    """

    coefficients: np.ndarray
    times: np.ndarray
    num_coefficients: int
    sample_rate: int


@dataclass(frozen=True)
class FilterBankData:
    """Quantized mel filterbank in weight/unweight form.

    ``channel_starts``, ``channel_widths`` and ``channel_weight_starts`` have
    ``num_channels + 1`` entries. The weighted sum of the leading internal
    channel is dropped; only its unweighted remainder reaches the output.

    Attributes:
        num_bins: FFT bins per frame the filterbank was built for
        start_index: First FFT bin with non-zero weight (DC always excluded)
        end_index: One past the last FFT bin with non-zero weight
        num_channels: Number of output mel channels
        channel_starts: First FFT bin of each internal channel
        channel_widths: Number of FFT bins of each internal channel
        channel_weight_starts: Offset of each channel in the weight arrays
        weights: Share of each bin kept by its own channel, scaled by 2**bits
        unweights: Complementary share carried into the next channel
        bits: Weight scale bits
    """

    num_bins: int
    start_index: int
    end_index: int
    num_channels: int
    channel_starts: np.ndarray
    channel_widths: np.ndarray
    channel_weight_starts: np.ndarray
    weights: np.ndarray
    unweights: np.ndarray
    bits: int
