"""Audio ingestion: container decoding, resampling and microphone capture."""

from birdlab.audio.decode import (
    SUPPORTED_EXTENSIONS,
    AudioFileReader,
    decode_bytes,
    decode_source,
    is_supported_file,
)
from birdlab.audio.microphone import MicrophoneRecorder
from birdlab.audio.resample import resample

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "AudioFileReader",
    "MicrophoneRecorder",
    "decode_bytes",
    "decode_source",
    "is_supported_file",
    "resample",
]
