"""Custom exception hierarchy for birdlab.

All birdlab specific exceptions inherit from BirdlabError,
making it easy to catch any library-specific error.
"""

from __future__ import annotations


class BirdlabError(Exception):
    """Base exception for all birdlab errors.

    Example:
        try:
            signal = decode_bytes(payload)
        except BirdlabError as e:
            print(f"birdlab error: {e}")
    """

    pass


class DecodeError(BirdlabError):
    """Failed to decode an audio container.

    Raised when:
        - Input bytes are empty
        - Container format is unsupported or corrupt
        - The decode context has already been disposed
    """

    pass


class MicrophonePermissionError(BirdlabError, PermissionError):
    """Microphone access was not granted.

    Raised when recording is started before a successful
    permission request. Never retried automatically.
    """

    pass


class RecordingError(BirdlabError):
    """Microphone capture is in an invalid state.

    Raised when:
        - stop_recording() is called with no recording in progress
        - No audio was captured before stopping
    """

    pass


class ModelLoadError(BirdlabError):
    """Model files could not be loaded.

    Raised when:
        - Model directory or weight files are missing
        - config.json cannot be parsed
        - Weights do not match the architecture

    InferenceEngine recovers from this locally by falling back
    to mock inference.
    """

    pass


class InferenceRuntimeError(BirdlabError):
    """Error during a forward pass.

    Raised when:
        - Input tensor shape does not match the model
        - Model output is malformed (NaN, wrong class count)

    InferenceEngine recovers from this locally by falling back
    to mock inference.
    """

    pass


class ConfigurationError(BirdlabError):
    """Invalid DSP or model configuration.

    Raised when:
        - Config parameters are out of valid range
        - Window size is not a power of two
        - Unknown model variant is requested
    """

    pass


__all__ = [
    "BirdlabError",
    "DecodeError",
    "MicrophonePermissionError",
    "RecordingError",
    "ModelLoadError",
    "InferenceRuntimeError",
    "ConfigurationError",
]
