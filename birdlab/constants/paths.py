"""Path constants for model artifacts."""

from __future__ import annotations

from pathlib import Path

CACHE_DIR = Path.home() / ".cache" / "birdlab"
"""Root cache directory for birdlab."""

MODELS_DIR = CACHE_DIR / "models"
"""Directory holding one subdirectory per model variant."""

MODEL_CONFIG_FILENAME = "config.json"
"""Model description file inside a model directory."""

MODEL_WEIGHTS_FILENAME = "model.safetensors"
"""Weight file inside a model directory."""

__all__ = [
    "CACHE_DIR",
    "MODELS_DIR",
    "MODEL_CONFIG_FILENAME",
    "MODEL_WEIGHTS_FILENAME",
]
