"""Flat tensor buffer used to hand features to a model."""

from __future__ import annotations

from dataclasses import dataclass
from math import prod
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import mlx.core as mx


@dataclass(frozen=True)
class TensorBuffer:
    """Contiguous float32 values plus an explicit shape.

    Attributes:
        data: Flat float32 buffer
        shape: Logical shape; its product equals ``len(data)``
    """

    data: np.ndarray
    shape: tuple[int, ...]

    def __post_init__(self) -> None:
        data = np.ascontiguousarray(self.data, dtype=np.float32).reshape(-1)
        shape = tuple(int(d) for d in self.shape)
        if prod(shape) != data.size:
            raise ValueError(
                f"shape {shape} holds {prod(shape)} values, buffer has {data.size}"
            )
        object.__setattr__(self, "data", data)
        object.__setattr__(self, "shape", shape)

    @classmethod
    def from_mel_spectrogram(cls, mel: np.ndarray) -> TensorBuffer:
        """Lay out a [frames, bands] mel-spectrogram as [1, frames, bands, 1]."""
        mel = np.asarray(mel, dtype=np.float32)
        if mel.ndim != 2:
            raise ValueError(f"Expected a 2-D mel-spectrogram, got shape {mel.shape}")
        frames, bands = mel.shape
        return cls(data=mel, shape=(1, frames, bands, 1))

    @property
    def size(self) -> int:
        return self.data.size

    def to_numpy(self) -> np.ndarray:
        return self.data.reshape(self.shape)

    def to_mlx(self) -> mx.array:
        import mlx.core as mx

        return mx.array(self.to_numpy())


__all__ = ["TensorBuffer"]
