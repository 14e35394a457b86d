"""STFT, clip and quantization constants.

These values are fixed by trained-model compatibility.
"""

from __future__ import annotations

DEFAULT_WINDOW_SIZE = 4096
"""Analysis window length in samples (power of two)."""

DEFAULT_HOP_SIZE = 512
"""Hop between successive analysis frames in samples."""

CLIP_DURATION_MS = 2000
"""Length of the loudest-segment clip fed to the classifier."""

TARGET_FRAMES = 55
"""Mel-spectrogram rows: (32000 - 4096) // 512 + 1."""

INT16_SCALE = 32767
"""Full-scale value used when quantizing samples to int16."""

DEFAULT_BLOCKSIZE = 1024
"""Samples per microphone callback."""

__all__ = [
    "DEFAULT_WINDOW_SIZE",
    "DEFAULT_HOP_SIZE",
    "CLIP_DURATION_MS",
    "TARGET_FRAMES",
    "INT16_SCALE",
    "DEFAULT_BLOCKSIZE",
]
