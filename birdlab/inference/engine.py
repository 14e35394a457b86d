"""
Inference engine.

Owns at most one loaded classifier. Model loading and forward-pass failures
are contained here: they are logged and classification continues with a
fixed mock distribution, so a missing or broken model never stops the
pipeline.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np

from birdlab.constants import MODELS_DIR
from birdlab.exceptions import InferenceRuntimeError, ModelLoadError
from birdlab.inference.tensor import TensorBuffer
from birdlab.inference.variants import (
    DEFAULT_VARIANT,
    MODEL_CONFIGS,
    ModelConfig,
    get_model_config,
)
from birdlab.types import ClassificationResult

_logger = logging.getLogger(__name__)

MOCK_PROBABILITIES = (0.6, 0.4)
"""Unnormalized class distribution used when no model can run."""


class EngineState(Enum):
    """Model lifecycle state."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


def mock_probabilities() -> np.ndarray:
    """The mock distribution, normalized to sum to 1."""
    probs = np.asarray(MOCK_PROBABILITIES, dtype=np.float64)
    return probs / probs.sum()


class InferenceEngine:
    """Loads classifier variants and ranks their predictions.

    Args:
        models_dir: Directory holding one ``<model id>/`` folder per variant
            (``config.json`` + ``model.safetensors``)

    Example:
        >>> with InferenceEngine() as engine:
        ...     engine.load_model("precision")
        ...     results = engine.infer(mel)
        >>> len(results)
        2
    """

    def __init__(self, models_dir: str | Path = MODELS_DIR):
        self.models_dir = Path(models_dir).expanduser()
        self._model: Any = None
        self._variant: str | None = None
        self._state = EngineState.UNLOADED
        self._lock = threading.Lock()

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state is EngineState.LOADED

    @property
    def current_variant(self) -> str | None:
        """Most recently requested variant (loaded or not)."""
        return self._variant

    def get_model_config(self, variant: str) -> ModelConfig:
        return get_model_config(variant)

    def available_models(self) -> list[ModelConfig]:
        return list(MODEL_CONFIGS.values())

    def model_path(self, variant: str) -> Path:
        """Artifact directory for a variant."""
        return self.models_dir / get_model_config(variant).id

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def load_model(self, variant: str = DEFAULT_VARIANT) -> bool:
        """Load a classifier variant, replacing any loaded one.

        No-op when the variant is already loaded. A load failure is logged
        and leaves the engine unloaded; later :meth:`infer` calls use the
        mock distribution.

        Args:
            variant: "precision" or "efficiency"

        Returns:
            True if the variant is loaded afterwards

        Raises:
            ConfigurationError: If the variant is unknown
        """
        config = get_model_config(variant)

        with self._lock:
            if self._variant == variant and self._state is EngineState.LOADED:
                return True

            self._release()
            self._variant = variant
            self._state = EngineState.LOADING

            path = self.models_dir / config.id
            _logger.debug("Loading %s model from %s", config.name, path)
            try:
                model = self._load_from_path(path, config)
            except ModelLoadError as e:
                _logger.warning(
                    "Could not load %s model, using mock inference: %s", config.name, e
                )
                self._state = EngineState.UNLOADED
                return False

            self._model = model
            self._state = EngineState.LOADED
            _logger.info("Loaded %s model (%s)", config.name, config.id)
            return True

    def _load_from_path(self, path: Path, config: ModelConfig) -> Any:
        try:
            from birdlab.models import TinyConvClassifier
        except ImportError as e:
            raise ModelLoadError(f"MLX is not available: {e}") from e

        try:
            model = TinyConvClassifier.from_pretrained(path)
        except ModelLoadError:
            raise
        except Exception as e:
            raise ModelLoadError(f"Failed to load model from {path}: {e}") from e

        if model.config.num_classes != config.num_classes:
            raise ModelLoadError(
                f"Model at {path} has {model.config.num_classes} classes, "
                f"variant '{config.id}' expects {config.num_classes}"
            )
        return model

    def _release(self) -> None:
        self._model = None
        self._state = EngineState.UNLOADED

    def dispose(self) -> None:
        """Release the loaded model and reset to unloaded."""
        with self._lock:
            self._release()
            self._variant = None

    def __enter__(self) -> InferenceEngine:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    # =========================================================================
    # Inference
    # =========================================================================

    def infer(
        self, mel_spectrogram: np.ndarray, top_k: int | None = None
    ) -> list[ClassificationResult]:
        """Classify a mel-spectrogram.

        Args:
            mel_spectrogram: Features of shape [frames, bands]
            top_k: Number of results to return (default: all classes)

        Returns:
            Results sorted by descending confidence, all sharing the
            measured inference time in milliseconds
        """
        tensor = TensorBuffer.from_mel_spectrogram(mel_spectrogram)
        config = get_model_config(self._variant or DEFAULT_VARIANT)

        with self._lock:
            model = self._model if self._state is EngineState.LOADED else None

        start = time.perf_counter()
        if model is None:
            probs = mock_probabilities()
        else:
            try:
                probs = self._forward(model, tensor)
            except InferenceRuntimeError as e:
                _logger.warning("Inference failed, using mock inference: %s", e)
                probs = mock_probabilities()
        inference_time = (time.perf_counter() - start) * 1000.0
        _logger.debug("Inference took %.2f ms", inference_time)

        results = [
            ClassificationResult(
                species=config.label(i),
                confidence=float(p),
                inference_time=inference_time,
            )
            for i, p in enumerate(probs)
        ]
        results.sort(key=lambda r: r.confidence, reverse=True)

        limit = len(results) if top_k is None else max(0, min(top_k, len(results)))
        return results[:limit]

    def _forward(self, model: Any, tensor: TensorBuffer) -> np.ndarray:
        """Run the model; every failure surfaces as InferenceRuntimeError."""
        if tensor.shape != model.input_shape:
            raise InferenceRuntimeError(
                f"Input shape {tensor.shape} does not match model input "
                f"{model.input_shape}"
            )
        try:
            import mlx.core as mx

            probs = model.predict_proba(tensor.to_mlx())
            mx.eval(probs)
            probs = np.array(probs, dtype=np.float64).reshape(-1)
        except Exception as e:
            raise InferenceRuntimeError(f"Forward pass failed: {e}") from e

        if probs.size != model.config.num_classes or not np.all(np.isfinite(probs)):
            raise InferenceRuntimeError(f"Malformed model output: {probs}")
        return probs


__all__ = [
    "EngineState",
    "InferenceEngine",
    "MOCK_PROBABILITIES",
    "mock_probabilities",
]
