"""Dependency management utilities.

Provides helpers for importing optional dependencies with
user-friendly error messages.
"""

from __future__ import annotations

import importlib
from typing import Any


def require_dependency(
    package: str,
    install_name: str | None = None,
    purpose: str | None = None,
) -> Any:
    """Import a package, raising a helpful error if missing.

    Args:
        package: The package name to import (e.g., "sounddevice")
        install_name: The pip install name if different from package name
        purpose: Optional description of why this dependency is needed

    Returns:
        The imported module

    Raises:
        ImportError: If the package is not installed, with installation instructions

    Example:
        >>> sd = require_dependency("sounddevice", purpose="microphone capture")
    """
    install_name = install_name or package
    try:
        return importlib.import_module(package)
    except ImportError:
        purpose_msg = f" for {purpose}" if purpose else ""
        raise ImportError(
            f"{package} is required{purpose_msg}. "
            f"Install with: pip install {install_name}"
        )


def require_sounddevice() -> Any:
    """Import sounddevice, raising helpful error if missing.

    Returns:
        The sounddevice module

    Raises:
        ImportError: If sounddevice is not installed
    """
    return require_dependency(
        "sounddevice",
        install_name="birdlab[microphone]",
        purpose="microphone capture",
    )


def require_librosa() -> Any:
    """Import librosa, raising helpful error if missing.

    Returns:
        The librosa module

    Raises:
        ImportError: If librosa is not installed
    """
    return require_dependency("librosa", purpose="decoding ffmpeg-only containers")


__all__ = [
    "require_dependency",
    "require_sounddevice",
    "require_librosa",
]
