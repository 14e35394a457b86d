"""
birdlab: bird species classification from short audio clips.

Decodes an audio clip, extracts the log mel-spectrogram a fixed-point
embedded frontend would produce, and ranks species with a tiny MLX
classifier.

Example:
    >>> import birdlab
    >>> result = birdlab.classify("robin.wav", model="efficiency")
    >>> result.top.species
"""

from birdlab._version import __version__
from birdlab.audio import AudioFileReader, MicrophoneRecorder, decode_bytes, resample
from birdlab.dsp import DSPConfig, DSPEngine
from birdlab.exceptions import (
    BirdlabError,
    ConfigurationError,
    DecodeError,
    InferenceRuntimeError,
    MicrophonePermissionError,
    ModelLoadError,
    RecordingError,
)
from birdlab.inference import InferenceEngine, ModelConfig, get_model_config
from birdlab.pipeline import ClassificationPipeline, classify
from birdlab.types import (
    AudioSignal,
    ClassificationResult,
    PipelineResult,
    ProcessingProgress,
    ProcessingStage,
)

__all__ = [
    "__version__",
    # Functional API
    "classify",
    # Components
    "AudioFileReader",
    "MicrophoneRecorder",
    "decode_bytes",
    "resample",
    "DSPConfig",
    "DSPEngine",
    "InferenceEngine",
    "ModelConfig",
    "get_model_config",
    "ClassificationPipeline",
    # Types
    "AudioSignal",
    "ClassificationResult",
    "PipelineResult",
    "ProcessingProgress",
    "ProcessingStage",
    # Exceptions
    "BirdlabError",
    "ConfigurationError",
    "DecodeError",
    "InferenceRuntimeError",
    "MicrophonePermissionError",
    "ModelLoadError",
    "RecordingError",
]
