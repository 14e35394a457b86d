"""Classifier variants shipped with birdlab."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from birdlab.constants import DEFAULT_N_MELS, TARGET_FRAMES
from birdlab.exceptions import ConfigurationError

ModelVariant = Literal["precision", "efficiency"]
"""Public names of the classifier variants."""

DEFAULT_VARIANT: ModelVariant = "precision"
"""Variant used when none is requested."""

CLASS_LABELS = ("Other", "Robin")
"""Output labels of both variants, by class index."""

INPUT_SHAPE = (1, TARGET_FRAMES, DEFAULT_N_MELS, 1)
"""Model input layout (batch, frames, mel bands, channels)."""


@dataclass(frozen=True)
class ModelConfig:
    """Static description of one classifier variant.

    Attributes:
        id: Artifact directory name under the models directory
        name: Display name
        accuracy: Reported validation accuracy
        memory_kb: Approximate weight size in kilobytes
        input_shape: Expected input tensor shape
        labels: Class labels by output index
    """

    id: str
    name: str
    accuracy: float
    memory_kb: int
    input_shape: tuple[int, ...]
    labels: tuple[str, ...]

    @property
    def num_classes(self) -> int:
        return len(self.labels)

    def label(self, index: int) -> str:
        """Label for an output index, with a generic name past the label list."""
        if 0 <= index < len(self.labels):
            return self.labels[index]
        return f"Species {index}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "accuracy": self.accuracy,
            "memory_kb": self.memory_kb,
            "input_shape": list(self.input_shape),
            "labels": list(self.labels),
        }


MODEL_CONFIGS: dict[str, ModelConfig] = {
    "precision": ModelConfig(
        id="E_model",
        name="High Precision",
        accuracy=0.98,
        memory_kb=16,
        input_shape=INPUT_SHAPE,
        labels=CLASS_LABELS,
    ),
    "efficiency": ModelConfig(
        id="N_Enrich_model",
        name="High Efficiency",
        accuracy=0.94,
        memory_kb=12,
        input_shape=INPUT_SHAPE,
        labels=CLASS_LABELS,
    ),
}


def get_model_config(variant: str) -> ModelConfig:
    """Look up a variant.

    Raises:
        ConfigurationError: If the variant is unknown
    """
    try:
        return MODEL_CONFIGS[variant]
    except KeyError:
        raise ConfigurationError(
            f"Unknown model variant '{variant}'. "
            f"Available: {', '.join(MODEL_CONFIGS)}"
        ) from None


def available_variants() -> list[str]:
    """Names of all variants."""
    return list(MODEL_CONFIGS)


__all__ = [
    "ModelVariant",
    "DEFAULT_VARIANT",
    "CLASS_LABELS",
    "INPUT_SHAPE",
    "ModelConfig",
    "MODEL_CONFIGS",
    "get_model_config",
    "available_variants",
]
