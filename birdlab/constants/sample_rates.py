"""Sample rate constants for audio processing.

The shipped classifiers were trained on a single operating point;
every input is resampled to it before feature extraction.
"""

from __future__ import annotations

TARGET_SAMPLE_RATE = 16000
"""Classifier operating sample rate in Hz."""

DEFAULT_RECORDING_RATE = 44100
"""Default microphone capture rate in Hz."""

__all__ = [
    "TARGET_SAMPLE_RATE",
    "DEFAULT_RECORDING_RATE",
]
