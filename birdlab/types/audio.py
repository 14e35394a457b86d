"""Audio data types."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class AudioSignal:
    """Decoded, single-channel audio ready for feature extraction.

    Only channel 0 of the source is kept; ``channels`` records how many the
    source had. The sample buffer is made read-only on construction so a
    signal can be shared between pipeline stages without copying.

    Attributes:
        sample_rate: Sample rate in Hz
        channels: Channel count of the source container
        data: float32 samples, nominally in [-1, 1]
        duration: Duration in seconds
    """

    sample_rate: int
    channels: int
    data: np.ndarray
    duration: float

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.channels <= 0:
            raise ValueError(f"channels must be positive, got {self.channels}")
        data = np.asarray(self.data, dtype=np.float32)
        if data.ndim != 1:
            raise ValueError(f"data must be 1-D, got shape {data.shape}")
        if data.flags.writeable:
            data = data.copy()
            data.flags.writeable = False
        object.__setattr__(self, "data", data)

    @classmethod
    def from_samples(
        cls,
        data: np.ndarray,
        sample_rate: int,
        channels: int = 1,
    ) -> AudioSignal:
        """Build a signal, deriving duration from the sample count."""
        data = np.asarray(data, dtype=np.float32)
        return cls(
            sample_rate=int(sample_rate),
            channels=channels,
            data=data,
            duration=len(data) / float(sample_rate),
        )

    def __len__(self) -> int:
        """Number of samples."""
        return len(self.data)

    def __repr__(self) -> str:
        return (
            f"AudioSignal(sample_rate={self.sample_rate}, channels={self.channels}, "
            f"samples={len(self.data)}, duration={self.duration:.3f}s)"
        )
