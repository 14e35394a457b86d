"""
Radix-2 FFT and window functions.

The transform is a recursive Cooley-Tukey decimation in time. Each level
of the recursion stacks the even and odd halves of every input row into
one array, so a whole batch of STFT frames is transformed with one call
per level rather than one call per butterfly.
"""

from __future__ import annotations

from functools import lru_cache

import numpy as np
from scipy.signal import get_window


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


@lru_cache(maxsize=32)
def _twiddles(n: int) -> np.ndarray:
    """Twiddle factors exp(-2*pi*i*k/n) for k in [0, n/2)."""
    k = np.arange(n // 2)
    return np.exp(-2j * np.pi * k / n)


def _fft_radix2(x: np.ndarray) -> np.ndarray:
    n = x.shape[-1]
    if n == 1:
        return x

    halves = _fft_radix2(np.stack((x[..., 0::2], x[..., 1::2])))
    even, odd = halves[0], halves[1]
    t = _twiddles(n) * odd
    return np.concatenate((even + t, even - t), axis=-1)


def fft(x: np.ndarray) -> np.ndarray:
    """
    Discrete Fourier transform over the last axis.

    Parameters
    ----------
    x : np.ndarray
        Real or complex input of shape (..., n). Leading axes are
        treated as a batch.

    Returns
    -------
    np.ndarray
        complex128 spectrum of shape (..., n).

    Raises
    ------
    ValueError
        If n is not a power of two.
    """
    x = np.asarray(x, dtype=np.complex128)
    n = x.shape[-1] if x.ndim else 0
    if not _is_power_of_two(n):
        raise ValueError(f"FFT length must be a power of two, got {n}")
    return _fft_radix2(x)


def power_spectrum(frames: np.ndarray) -> np.ndarray:
    """
    One-sided power spectrum re^2 + im^2.

    Parameters
    ----------
    frames : np.ndarray
        Real frames of shape (..., n).

    Returns
    -------
    np.ndarray
        float64 power of shape (..., n // 2 + 1).
    """
    spectrum = fft(frames)
    half = spectrum[..., : spectrum.shape[-1] // 2 + 1]
    return half.real**2 + half.imag**2


@lru_cache(maxsize=16)
def _hann_window_np(size: int) -> np.ndarray:
    window = get_window("hann", size, fftbins=False).astype(np.float64)
    window.flags.writeable = False
    return window


def hann_window(size: int) -> np.ndarray:
    """
    Symmetric Hann window 0.5 * (1 - cos(2*pi*i / (size - 1))).

    The returned array is cached and read-only.
    """
    if size <= 0:
        raise ValueError(f"window size must be positive, got {size}")
    return _hann_window_np(size)


__all__ = ["fft", "power_spectrum", "hann_window"]
