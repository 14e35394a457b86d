"""Tiny convolutional classifier for mel-spectrogram input."""

from __future__ import annotations

from dataclasses import dataclass

import mlx.core as mx
import mlx.nn as nn

from birdlab.config import BaseConfig
from birdlab.constants import DEFAULT_N_MELS, TARGET_FRAMES
from birdlab.exceptions import ConfigurationError
from birdlab.models.base import PretrainedMixin


@dataclass
class TinyConvConfig(BaseConfig):
    """Configuration for TinyConvClassifier.

    Attributes:
        input_height: Spectrogram frames
        input_width: Mel bands
        num_classes: Output classes
        filters: Convolution output channels
        kernel_size: Convolution kernel (height, width)
        stride: Convolution stride in both directions
        dropout: Dropout before the dense layer (training only)
    """

    input_height: int = TARGET_FRAMES
    input_width: int = DEFAULT_N_MELS
    num_classes: int = 2
    filters: int = 8
    kernel_size: tuple[int, int] = (10, 8)
    stride: int = 2
    dropout: float = 0.0

    def __post_init__(self) -> None:
        # JSON round-trips tuples as lists
        self.kernel_size = tuple(self.kernel_size)
        self._validate()

    def _validate(self) -> None:
        self._validate_positive(self.input_height, "input_height")
        self._validate_positive(self.input_width, "input_width")
        self._validate_positive(self.num_classes, "num_classes")
        self._validate_positive(self.filters, "filters")
        self._validate_positive(self.stride, "stride")
        if not 0.0 <= self.dropout < 1.0:
            raise ConfigurationError(f"dropout must be in [0, 1), got {self.dropout}")
        if len(self.kernel_size) != 2:
            raise ConfigurationError(
                f"kernel_size must have 2 entries, got {self.kernel_size}"
            )
        self._validate_range(self.kernel_size[0], "kernel_size[0]", 1, self.input_height)
        self._validate_range(self.kernel_size[1], "kernel_size[1]", 1, self.input_width)

    @property
    def output_height(self) -> int:
        return (self.input_height - self.kernel_size[0]) // self.stride + 1

    @property
    def output_width(self) -> int:
        return (self.input_width - self.kernel_size[1]) // self.stride + 1

    @property
    def flat_size(self) -> int:
        """Features entering the dense layer."""
        return self.output_height * self.output_width * self.filters


class TinyConvClassifier(nn.Module, PretrainedMixin):
    """Single-convolution keyword-spotting style classifier.

    Architecture:
        [B, 55, 40, 1] -> Conv2d(8, 10x8, stride 2) -> ReLU -> flatten
        -> Dropout -> Linear(num_classes)

    Args:
        config: TinyConvConfig specifying model architecture

    Example:
        >>> model = TinyConvClassifier(TinyConvConfig())
        >>> probs = model.predict_proba(mx.zeros((1, 55, 40, 1)))  # [1, 2]
    """

    config_class = TinyConvConfig

    def __init__(self, config: TinyConvConfig | None = None) -> None:
        super().__init__()
        if config is None:
            config = TinyConvConfig()
        self.config = config

        self.conv = nn.Conv2d(
            in_channels=1,
            out_channels=config.filters,
            kernel_size=config.kernel_size,
            stride=config.stride,
        )
        self.dropout = nn.Dropout(config.dropout)
        self.fc = nn.Linear(config.flat_size, config.num_classes)

    @property
    def input_shape(self) -> tuple[int, int, int, int]:
        """Expected input shape (batch, height, width, channels)."""
        return (1, self.config.input_height, self.config.input_width, 1)

    def __call__(self, x: mx.array) -> mx.array:
        """Forward pass.

        Args:
            x: NHWC input [B, input_height, input_width, 1]

        Returns:
            Logits [B, num_classes]
        """
        x = nn.relu(self.conv(x))
        x = x.reshape(x.shape[0], -1)
        x = self.dropout(x)
        return self.fc(x)

    def predict_proba(self, x: mx.array) -> mx.array:
        """Class probabilities [B, num_classes]."""
        return mx.softmax(self(x), axis=-1)


__all__ = ["TinyConvConfig", "TinyConvClassifier"]
