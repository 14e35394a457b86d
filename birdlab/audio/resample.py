"""Linear-interpolation resampling.

This resampler is lossy and not band-limited: it is good enough for
feature extraction at the classifier's operating rate, not for
general-purpose audio conversion.
"""

from __future__ import annotations

import numpy as np

from birdlab.types.audio import AudioSignal


def resample(signal: AudioSignal, target_sample_rate: int) -> AudioSignal:
    """Resample a signal to ``target_sample_rate``.

    Returns ``signal`` itself when the rates already match. Otherwise each
    output sample ``i`` interpolates linearly between source samples
    ``floor(i * ratio)`` and the next one (clamped to the last sample),
    where ``ratio = source_rate / target_rate``.

    Args:
        signal: Source signal
        target_sample_rate: Desired sample rate in Hz (e.g., 16000)

    Returns:
        Resampled AudioSignal

    Raises:
        ValueError: If the signal is empty or the target rate is not positive

    Example:
        >>> resampled = resample(signal, 16000)
        >>> resampled.sample_rate
        16000
    """
    if signal is None or len(signal.data) == 0:
        raise ValueError("Invalid audio signal: empty or null")

    if target_sample_rate <= 0:
        raise ValueError(f"Invalid target sample rate: {target_sample_rate}")

    if signal.sample_rate == target_sample_rate:
        return signal

    data = signal.data.astype(np.float64)
    ratio = signal.sample_rate / target_sample_rate
    new_length = int(np.floor(len(data) / ratio + 0.5))

    src_index = np.arange(new_length, dtype=np.float64) * ratio
    left = np.floor(src_index).astype(np.int64)
    right = np.minimum(left + 1, len(data) - 1)
    fraction = src_index - left
    resampled = data[left] * (1.0 - fraction) + data[right] * fraction

    return AudioSignal(
        sample_rate=target_sample_rate,
        channels=signal.channels,
        data=resampled.astype(np.float32),
        duration=new_length / target_sample_rate,
    )


__all__ = ["resample"]
