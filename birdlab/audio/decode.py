"""Audio container decoding.

Decodes WAV, MP3, OGG and FLAC through soundfile (libsndfile). Containers
libsndfile cannot parse, such as the WEBM blobs browsers and some
recorders produce, fall back to librosa, which hands them to audioread
and ffmpeg.
"""

from __future__ import annotations

import asyncio
import io
import logging
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import BinaryIO, Union

import numpy as np
import soundfile as sf

from birdlab.audio.resample import resample
from birdlab.exceptions import DecodeError
from birdlab.types.audio import AudioSignal
from birdlab.utils.dependencies import require_librosa

_logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".wav", ".mp3", ".ogg", ".flac", ".webm")

AudioSource = Union[bytes, bytearray, memoryview, str, Path, BinaryIO]


def is_supported_file(path: str | Path) -> bool:
    return str(path).lower().endswith(SUPPORTED_EXTENSIONS)


def decode_bytes(data: bytes | bytearray | memoryview, suffix: str = "") -> AudioSignal:
    """Decode an in-memory audio container into an AudioSignal.

    Only the first channel is kept; ``channels`` reports the source count.

    Args:
        data: Encoded container bytes
        suffix: Optional file extension hint for the ffmpeg fallback

    Returns:
        AudioSignal with float32 samples

    Raises:
        DecodeError: If the input is empty or no decoder can parse it
    """
    data = bytes(data)
    if not data:
        raise DecodeError("Invalid audio data: empty or null")

    try:
        samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        # soundfile returns [samples, channels]
        samples = samples.T
    except sf.SoundFileError as exc:
        _logger.debug("soundfile could not decode input (%s), trying librosa", exc)
        samples, sample_rate = _decode_with_librosa(data, suffix, exc)

    channels = samples.shape[0]
    if samples.shape[1] == 0:
        raise DecodeError("Decoded audio contains no samples")

    return AudioSignal.from_samples(samples[0], int(sample_rate), channels=channels)


def _decode_with_librosa(
    data: bytes,
    suffix: str,
    original_error: Exception,
) -> tuple[np.ndarray, int]:
    """Decode through librosa/audioread, which needs a real file on disk."""
    try:
        librosa = require_librosa()
    except ImportError as exc:
        raise DecodeError(f"Unsupported or corrupt audio container: {original_error}") from exc

    fd, temp_path = tempfile.mkstemp(suffix=suffix or ".audio", prefix="birdlab_")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        samples, sample_rate = librosa.load(temp_path, sr=None, mono=False)
    except Exception as exc:
        raise DecodeError(f"Unsupported or corrupt audio container: {exc}") from exc
    finally:
        Path(temp_path).unlink(missing_ok=True)

    samples = np.asarray(samples, dtype=np.float32)
    # librosa returns 1D for mono files
    if samples.ndim == 1:
        samples = samples[np.newaxis, :]
    return samples, int(sample_rate)


def decode_source(source: AudioSource) -> AudioSignal:
    """Decode bytes, a file path or a binary file object."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return decode_bytes(source)

    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise DecodeError(f"Audio file not found: {path}")
        return decode_bytes(path.read_bytes(), suffix=path.suffix)

    if hasattr(source, "read"):
        suffix = Path(getattr(source, "name", "") or "").suffix
        return decode_bytes(source.read(), suffix=suffix)

    raise DecodeError(
        f"Unsupported audio source type: {type(source).__name__}. "
        "Expected bytes, str, Path, or a binary file object."
    )


class AudioFileReader:
    """Decode context for audio files.

    Owns a single-worker executor, so at most one decode runs at a time
    per reader and the event loop never blocks on container parsing.
    Call ``dispose()`` (or use the reader as a context manager) to
    release it.

    Example:
        >>> async with AudioFileReader() as reader:
        ...     signal = await reader.decode_file("robin.mp3")
        ...     signal = await reader.resample(signal, 16000)
    """

    def __init__(self) -> None:
        self._executor: ThreadPoolExecutor | None = None
        self._disposed = False

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._disposed:
            raise DecodeError("AudioFileReader has been disposed")
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="birdlab-decode"
            )
        return self._executor

    async def decode_file(self, source: AudioSource) -> AudioSignal:
        """Decode an audio file into an AudioSignal.

        Args:
            source: Encoded bytes, a file path or a binary file object

        Returns:
            AudioSignal with the first channel's samples

        Raises:
            DecodeError: If the file is empty, missing or cannot be decoded
        """
        executor = self._get_executor()
        loop = asyncio.get_running_loop()
        signal = await loop.run_in_executor(executor, decode_source, source)
        _logger.debug("Decoded %r", signal)
        return signal

    async def resample(self, signal: AudioSignal, target_sample_rate: int) -> AudioSignal:
        """Resample on the reader's worker (see :func:`resample`)."""
        if signal.sample_rate == target_sample_rate:
            return signal
        executor = self._get_executor()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, resample, signal, target_sample_rate)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Release the decode worker. Pending decodes are cancelled."""
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        self._disposed = True

    def __enter__(self) -> AudioFileReader:
        return self

    def __exit__(self, *args: object) -> None:
        self.dispose()

    async def __aenter__(self) -> AudioFileReader:
        return self

    async def __aexit__(self, *args: object) -> None:
        self.dispose()


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "AudioSource",
    "AudioFileReader",
    "decode_bytes",
    "decode_source",
    "is_supported_file",
]
