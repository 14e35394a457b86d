"""Base configuration class for birdlab.

Provides common serialization and validation shared by the DSP
and model configuration dataclasses.
"""

from __future__ import annotations

import json
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Self

from birdlab.exceptions import ConfigurationError


class BaseConfig:
    """Base class for configurations.

    Provides common serialization methods (from_dict, to_dict, from_json, to_json).
    Subclasses should be decorated with @dataclass and call ``self._validate()``
    from ``__post_init__``.

    Example:
        >>> @dataclass
        ... class MyConfig(BaseConfig):
        ...     window_size: int = 4096
        ...
        >>> config = MyConfig.from_dict({"window_size": 2048})
        >>> config.to_dict()
        {'window_size': 2048}
    """

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Self:
        """Create a config instance from a dictionary.

        Only keys that correspond to valid fields are used.
        Extra keys are silently ignored.
        """
        valid_fields = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in valid_fields})

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return asdict(self)

    @classmethod
    def from_json(cls, path: str | Path) -> Self:
        """Load config from a JSON file."""
        with open(path) as f:
            return cls.from_dict(json.load(f))

    def to_json(self, path: str | Path, indent: int = 2) -> None:
        """Save config to a JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=indent)

    # =========================================================================
    # Validation utilities
    # =========================================================================

    def _validate(self) -> None:
        """Validate configuration values.

        Override in subclasses to add custom validation logic.

        Raises:
            ConfigurationError: If validation fails
        """
        pass

    @staticmethod
    def _validate_positive(value: int | float, name: str) -> None:
        if value <= 0:
            raise ConfigurationError(f"{name} must be positive, got {value}")

    @staticmethod
    def _validate_non_negative(value: int | float, name: str) -> None:
        if value < 0:
            raise ConfigurationError(f"{name} must be non-negative, got {value}")

    @staticmethod
    def _validate_range(
        value: int | float,
        name: str,
        min_val: int | float,
        max_val: int | float,
        inclusive: bool = True,
    ) -> None:
        """Validate that a value is within [min, max] (or (min, max))."""
        if inclusive:
            if not (min_val <= value <= max_val):
                raise ConfigurationError(
                    f"{name} must be in [{min_val}, {max_val}], got {value}"
                )
        else:
            if not (min_val < value < max_val):
                raise ConfigurationError(
                    f"{name} must be in ({min_val}, {max_val}), got {value}"
                )

    @staticmethod
    def _validate_power_of_two(value: int, name: str) -> None:
        if value <= 0 or value & (value - 1):
            raise ConfigurationError(f"{name} must be a power of two, got {value}")


__all__ = ["BaseConfig", "ConfigurationError"]
