"""Utility helpers for birdlab."""

from birdlab.utils.dependencies import (
    require_dependency,
    require_librosa,
    require_sounddevice,
)

__all__ = [
    "require_dependency",
    "require_librosa",
    "require_sounddevice",
]
