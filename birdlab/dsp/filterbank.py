"""
Mel filterbanks.

Two filterbanks live here:

- A quantized HTK filterbank in weight/unweight form, as used by
  fixed-point embedded audio frontends. Each FFT bin belongs to exactly one
  internal channel; the channel keeps ``weight`` of its energy and hands
  ``unweight`` (the complement) to the next channel. This is the filterbank
  the classifier input is computed with.
- A floating-point triangular filterbank used for MFCC extraction.

Note: hz_to_mel() and mel_to_hz() use the natural-log HTK form
(1127 * ln(1 + f/700)), which equals 2595 * log10(1 + f/700).
"""

from __future__ import annotations

import logging
from functools import lru_cache

import numpy as np

from birdlab.constants import (
    FILTERBANK_BITS,
    HTK_MEL_BASE,
    HTK_MEL_FACTOR,
    MEL_HIGH_HZ,
    MEL_LOW_HZ,
)
from birdlab.types import FilterBankData

_logger = logging.getLogger(__name__)


def hz_to_mel(frequencies: np.ndarray | float) -> np.ndarray:
    """Convert Hz to the HTK mel scale."""
    frequencies = np.asarray(frequencies, dtype=np.float64)
    return HTK_MEL_FACTOR * np.log1p(frequencies / HTK_MEL_BASE)


def mel_to_hz(mels: np.ndarray | float) -> np.ndarray:
    """Convert HTK mels to Hz."""
    mels = np.asarray(mels, dtype=np.float64)
    return HTK_MEL_BASE * np.expm1(mels / HTK_MEL_FACTOR)


def _quantize_weights(w: np.ndarray, bits: int) -> np.ndarray:
    return np.floor(w * (1 << bits) + 0.5).astype(np.int32)


def _readonly(a: np.ndarray) -> np.ndarray:
    a.flags.writeable = False
    return a


@lru_cache(maxsize=32)
def build_mel_filterbank(
    num_filters: int,
    num_bins: int,
    sample_rate: int,
    lower_hz: float = MEL_LOW_HZ,
    upper_hz: float = MEL_HIGH_HZ,
    bits: int = FILTERBANK_BITS,
) -> FilterBankData:
    """
    Build the quantized weight/unweight mel filterbank.

    ``num_filters + 1`` channel centers are spaced evenly on the mel scale
    above ``lower_hz``, the last one landing on ``upper_hz``. Walking up from
    the start bin, each internal channel claims every bin whose mel value is
    at or below its center. A bin's weight is its mel distance to the
    channel's center divided by the distance between the channel's center
    and the previous one (``lower_hz`` for the first channel).

    Results are cached per argument tuple and returned read-only.

    Parameters
    ----------
    num_filters : int
        Number of output mel channels.
    num_bins : int
        One-sided FFT bins per frame (window_size // 2 + 1).
    sample_rate : int
        Sample rate of the analysed signal.
    lower_hz, upper_hz : float
        Band limits.
    bits : int
        Weights are scaled by 2**bits and rounded half up.

    Returns
    -------
    FilterBankData
    """
    if num_filters <= 0:
        raise ValueError(f"num_filters must be positive, got {num_filters}")
    if num_bins < 2:
        raise ValueError(f"num_bins must be at least 2, got {num_bins}")
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")

    num_internal = num_filters + 1
    hz_per_bin = 0.5 * sample_rate / (num_bins - 1)
    start_index = int(1.5 + lower_hz / hz_per_bin)

    mel_low = float(hz_to_mel(lower_hz))
    mel_high = float(hz_to_mel(upper_hz))
    mel_spacing = (mel_high - mel_low) / num_internal
    centers = mel_low + mel_spacing * np.arange(1, num_internal + 1)

    bin_mels = hz_to_mel(np.arange(num_bins) * hz_per_bin)

    channel_starts = np.zeros(num_internal, dtype=np.int32)
    channel_widths = np.zeros(num_internal, dtype=np.int32)
    channel_weight_starts = np.zeros(num_internal, dtype=np.int32)
    weights: list[np.ndarray] = []
    unweights: list[np.ndarray] = []

    freq_index = min(start_index, num_bins)
    end_index = 0
    offset = 0
    for chan in range(num_internal):
        # First bin whose mel exceeds this channel's center
        stop = max(freq_index, int(np.searchsorted(bin_mels, centers[chan], side="right")))
        width = stop - freq_index

        channel_starts[chan] = freq_index
        channel_widths[chan] = width
        channel_weight_starts[chan] = offset

        denom = mel_low if chan == 0 else centers[chan - 1]
        w = (centers[chan] - bin_mels[freq_index:stop]) / (centers[chan] - denom)
        weights.append(_quantize_weights(w, bits))
        unweights.append(_quantize_weights(1.0 - w, bits))

        offset += width
        freq_index = stop
        end_index = max(end_index, freq_index)

    fb = FilterBankData(
        num_bins=num_bins,
        start_index=start_index,
        end_index=end_index,
        num_channels=num_filters,
        channel_starts=_readonly(channel_starts),
        channel_widths=_readonly(channel_widths),
        channel_weight_starts=_readonly(channel_weight_starts),
        weights=_readonly(np.concatenate(weights)),
        unweights=_readonly(np.concatenate(unweights)),
        bits=bits,
    )
    _logger.debug(
        "Built %d-channel filterbank over bins [%d, %d) at %d Hz",
        num_filters,
        fb.start_index,
        fb.end_index,
        sample_rate,
    )
    return fb


def accumulate_channels(power: np.ndarray, fb: FilterBankData) -> np.ndarray:
    """
    Apply a quantized filterbank to power spectra.

    Channels are accumulated in order. Each internal channel starts from the
    remainder carried out of the previous one, adds its weighted bins and
    carries its unweighted bins forward. The leading internal channel's sum
    is discarded.

    Parameters
    ----------
    power : np.ndarray
        Power spectra of shape (frames, fb.num_bins).
    fb : FilterBankData
        Filterbank from :func:`build_mel_filterbank`.

    Returns
    -------
    np.ndarray
        Channel energies of shape (frames, fb.num_channels), float64.
    """
    power = np.asarray(power, dtype=np.float64)
    if power.ndim != 2 or power.shape[1] != fb.num_bins:
        raise ValueError(
            f"Expected power of shape (frames, {fb.num_bins}), got {power.shape}"
        )

    masked = np.zeros_like(power)
    masked[:, fb.start_index : fb.end_index] = power[:, fb.start_index : fb.end_index]

    weights = fb.weights.astype(np.float64)
    unweights = fb.unweights.astype(np.float64)

    out = np.empty((power.shape[0], fb.num_channels + 1), dtype=np.float64)
    carry = np.zeros(power.shape[0], dtype=np.float64)
    for chan in range(fb.num_channels + 1):
        start = fb.channel_starts[chan]
        width = fb.channel_widths[chan]
        w_start = fb.channel_weight_starts[chan]
        bins = masked[:, start : start + width]
        out[:, chan] = carry + bins @ weights[w_start : w_start + width]
        carry = bins @ unweights[w_start : w_start + width]

    return out[:, 1:]


@lru_cache(maxsize=16)
def _triangular_filterbank_np(
    num_filters: int,
    num_bins: int,
    sample_rate: int,
    window_size: int,
    lower_hz: float,
    upper_hz: float,
) -> np.ndarray:
    mel_points = np.linspace(
        float(hz_to_mel(lower_hz)), float(hz_to_mel(upper_hz)), num_filters + 2
    )
    bin_points = np.floor(mel_to_hz(mel_points) * window_size / sample_rate + 0.5)
    bin_points = bin_points.astype(np.int64)

    bins = np.arange(num_bins)[np.newaxis, :]
    left = bin_points[:-2, np.newaxis]
    center = bin_points[1:-1, np.newaxis]
    right = bin_points[2:, np.newaxis]

    with np.errstate(divide="ignore", invalid="ignore"):
        rising = np.where(
            (bins >= left) & (bins < center), (bins - left) / (center - left), 0.0
        )
        falling = np.where(
            (bins >= center) & (bins < right), (right - bins) / (right - center), 0.0
        )
    filterbank = rising + falling
    filterbank.flags.writeable = False
    return filterbank


def triangular_filterbank(
    num_filters: int,
    num_bins: int,
    sample_rate: int,
    window_size: int,
    lower_hz: float = MEL_LOW_HZ,
    upper_hz: float = MEL_HIGH_HZ,
) -> np.ndarray:
    """
    Floating-point triangular mel filterbank for MFCC extraction.

    ``num_filters + 2`` mel points are spaced evenly between the band
    limits and snapped to the nearest FFT bin. Filter ``i`` rises linearly
    from point ``i`` to point ``i + 1`` and falls to zero at point ``i + 2``.

    Returns
    -------
    np.ndarray
        Read-only matrix of shape (num_filters, num_bins).
    """
    if num_filters <= 0:
        raise ValueError(f"num_filters must be positive, got {num_filters}")
    return _triangular_filterbank_np(
        num_filters, num_bins, sample_rate, window_size, float(lower_hz), float(upper_hz)
    )


__all__ = [
    "hz_to_mel",
    "mel_to_hz",
    "build_mel_filterbank",
    "accumulate_channels",
    "triangular_filterbank",
]
