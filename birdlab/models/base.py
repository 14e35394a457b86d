"""Pretrained model loading mixin.

Provides from_pretrained() / save_pretrained() for model directories
holding a config.json and a model.safetensors file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

from birdlab.constants import MODEL_CONFIG_FILENAME, MODEL_WEIGHTS_FILENAME
from birdlab.exceptions import ConfigurationError, ModelLoadError

if TYPE_CHECKING:
    from birdlab.config import BaseConfig


class PretrainedMixin:
    """Mixin providing from_pretrained functionality.

    Classes using this mixin must:
    1. Define a `config_class` attribute pointing to their config class
    2. Accept a config as the first argument to __init__
    3. Be an mlx.nn.Module (for `load_weights` and `parameters`)

    Example:
        >>> class MyModel(nn.Module, PretrainedMixin):
        ...     config_class = MyModelConfig
        ...
        >>> model = MyModel.from_pretrained("~/.cache/birdlab/models/E_model")
    """

    # Must be set by subclass
    config_class: type[BaseConfig]

    @classmethod
    def from_pretrained(
        cls,
        path: str | Path,
        **config_overrides: Any,
    ) -> Self:
        """Load a pretrained model from a directory.

        The directory must contain:
        - config.json: Model configuration
        - model.safetensors: Model weights

        Args:
            path: Path to model directory
            **config_overrides: Override specific config values

        Returns:
            Loaded model instance

        Raises:
            ModelLoadError: If files are missing, unreadable, or the weights
                do not match the architecture described by config.json
        """
        path = Path(path).expanduser()
        if not path.is_dir():
            raise ModelLoadError(f"Model directory not found: {path}")

        config_path = path / MODEL_CONFIG_FILENAME
        weights_path = path / MODEL_WEIGHTS_FILENAME
        if not weights_path.exists():
            raise ModelLoadError(f"Model weights not found: {weights_path}")

        try:
            if config_path.exists():
                with open(config_path, encoding="utf-8") as f:
                    config_dict = json.load(f)
            else:
                config_dict = {}
            if not isinstance(config_dict, dict):
                raise ModelLoadError(
                    f"Invalid model config {config_path}: expected a JSON object, "
                    f"got {type(config_dict).__name__}"
                )
            config_dict.update(config_overrides)
            config = cls.config_class.from_dict(config_dict)
        except (OSError, ValueError, TypeError, ConfigurationError) as e:
            raise ModelLoadError(f"Invalid model config {config_path}: {e}") from e

        model = cls(config)
        try:
            model.load_weights(str(weights_path))
        except (OSError, ValueError, RuntimeError) as e:
            raise ModelLoadError(f"Failed to load weights from {weights_path}: {e}") from e

        model.eval()
        return model

    def save_pretrained(self, path: str | Path) -> None:
        """Save model to a directory.

        Saves both config.json and model.safetensors.

        Args:
            path: Directory to save model to
        """
        import mlx.core as mx
        from mlx.utils import tree_flatten

        path = Path(path).expanduser()
        path.mkdir(parents=True, exist_ok=True)

        self.config.to_json(path / MODEL_CONFIG_FILENAME)

        weights = dict(tree_flatten(self.parameters()))
        mx.save_safetensors(str(path / MODEL_WEIGHTS_FILENAME), weights)


__all__ = ["PretrainedMixin"]
