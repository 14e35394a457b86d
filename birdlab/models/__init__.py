"""Classifier models."""

from birdlab.models.base import PretrainedMixin
from birdlab.models.tiny_conv import TinyConvClassifier, TinyConvConfig

__all__ = ["PretrainedMixin", "TinyConvClassifier", "TinyConvConfig"]
