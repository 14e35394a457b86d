"""Result and progress types for birdlab.

These are the pipeline outputs consumed by presentation code: ranked
classification results, progress events and the bundle of artefacts
produced by one pipeline run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import numpy as np

    from birdlab.types.audio import AudioSignal
    from birdlab.types.spectral import SpectrogramData


@dataclass(frozen=True)
class ClassificationResult:
    """One ranked class prediction.

    Attributes:
        species: Class label
        confidence: Probability in [0, 1]
        inference_time: Wall-clock forward-pass time in milliseconds
    """

    species: str
    confidence: float
    inference_time: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "species": self.species,
            "confidence": self.confidence,
            "inference_time": self.inference_time,
        }

    def __repr__(self) -> str:
        return (
            f"ClassificationResult(species={self.species!r}, "
            f"confidence={self.confidence:.2%})"
        )


class ProcessingStage(Enum):
    """Stages of the classification pipeline."""

    IDLE = "idle"
    LOADING = "loading"
    AUDIO = "audio"
    DSP = "dsp"
    INFERENCE = "inference"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class ProcessingProgress:
    """Progress event for the presentation layer.

    Attributes:
        stage: Current processing stage
        progress: Percentage in [0, 100]
        message: Human-readable status message
    """

    stage: ProcessingStage
    progress: int
    message: str

    def __post_init__(self) -> None:
        if not 0 <= self.progress <= 100:
            raise ValueError(f"progress must be in [0, 100], got {self.progress}")


IDLE_PROGRESS = ProcessingProgress(ProcessingStage.IDLE, 0, "Ready to process audio")


@dataclass
class PipelineResult:
    """Everything one pipeline run produced.

    Attributes:
        signal: Resampled input signal
        spectrogram: dB spectrogram of the classified clip (for display)
        mel_spectrogram: Classifier input [55, 40]
        results: Ranked classification results
        model: Model variant used
        metadata: Additional run information
    """

    signal: AudioSignal
    spectrogram: SpectrogramData
    mel_spectrogram: np.ndarray
    results: list[ClassificationResult]
    model: str
    metadata: dict = field(default_factory=dict)

    @property
    def top(self) -> ClassificationResult:
        """Highest-confidence result."""
        return self.results[0]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (without the raw arrays)."""
        return {
            "model": self.model,
            "duration": self.signal.duration,
            "sample_rate": self.signal.sample_rate,
            "mel_shape": list(self.mel_spectrogram.shape),
            "results": [r.to_dict() for r in self.results],
            "metadata": self.metadata,
        }
