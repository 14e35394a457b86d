"""Model loading and inference."""

from birdlab.inference.engine import (
    MOCK_PROBABILITIES,
    EngineState,
    InferenceEngine,
    mock_probabilities,
)
from birdlab.inference.tensor import TensorBuffer
from birdlab.inference.variants import (
    DEFAULT_VARIANT,
    MODEL_CONFIGS,
    ModelConfig,
    ModelVariant,
    available_variants,
    get_model_config,
)

__all__ = [
    "MOCK_PROBABILITIES",
    "EngineState",
    "InferenceEngine",
    "mock_probabilities",
    "TensorBuffer",
    "DEFAULT_VARIANT",
    "MODEL_CONFIGS",
    "ModelConfig",
    "ModelVariant",
    "available_variants",
    "get_model_config",
]
