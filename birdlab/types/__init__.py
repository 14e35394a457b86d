"""Type definitions for birdlab."""

from birdlab.types.audio import AudioSignal
from birdlab.types.results import (
    IDLE_PROGRESS,
    ClassificationResult,
    PipelineResult,
    ProcessingProgress,
    ProcessingStage,
)
from birdlab.types.spectral import (
    FilterBankData,
    MelSpectrogram,
    MFCCData,
    SpectrogramData,
)

__all__ = [
    "AudioSignal",
    "ClassificationResult",
    "PipelineResult",
    "ProcessingProgress",
    "ProcessingStage",
    "IDLE_PROGRESS",
    "FilterBankData",
    "MelSpectrogram",
    "MFCCData",
    "SpectrogramData",
]
