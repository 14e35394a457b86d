"""Microphone capture using sounddevice."""

from __future__ import annotations

import asyncio
import io
import logging
import threading
from typing import Any, Callable

import numpy as np
import soundfile as sf

from birdlab.audio.decode import decode_bytes
from birdlab.constants import DEFAULT_BLOCKSIZE, DEFAULT_RECORDING_RATE
from birdlab.exceptions import MicrophonePermissionError, RecordingError
from birdlab.types.audio import AudioSignal
from birdlab.utils.dependencies import require_sounddevice

_logger = logging.getLogger(__name__)

StreamFactory = Callable[..., Any]


class MicrophoneRecorder:
    """Records a clip from the microphone into an AudioSignal.

    Opening the input stream is the permission step: if the device cannot
    be opened, ``request_permission()`` returns False and recording stays
    unavailable. The captured frames are packed into a WAV container on
    stop and decoded through the same path as uploaded files.

    The recorder holds the input device until ``dispose()`` is called;
    use it as a context manager to guarantee release.

    Args:
        sample_rate: Capture rate in Hz (default: 44100)
        channels: Number of channels to capture (default: 1)
        device: Input device index or name (default: None = system default)
        blocksize: Samples per callback (default: 1024)
        stream_factory: Callable creating the input stream; defaults to
            ``sounddevice.InputStream``

    Example:
        >>> async with MicrophoneRecorder() as recorder:
        ...     if await recorder.request_permission():
        ...         recorder.start_recording()
        ...         await asyncio.sleep(3)
        ...         signal = await recorder.stop_recording()

    Note:
        Requires sounddevice: pip install birdlab[microphone]
    """

    def __init__(
        self,
        sample_rate: int = DEFAULT_RECORDING_RATE,
        channels: int = 1,
        device: int | str | None = None,
        blocksize: int = DEFAULT_BLOCKSIZE,
        stream_factory: StreamFactory | None = None,
    ) -> None:
        self._sample_rate = sample_rate
        self._channels = channels
        self._device = device
        self._blocksize = blocksize
        self._stream_factory = stream_factory

        # State
        self._stream = None
        self._recording: bool = False
        self._chunks: list[np.ndarray] = []
        self._captured_frames: int = 0
        self._lock = threading.Lock()

    async def request_permission(self) -> bool:
        """Open the input stream.

        Never raises: any failure (missing backend, no device, access
        denied) is logged and reported as False.

        Returns:
            True if the microphone is available for recording
        """
        if self._stream is not None:
            return True

        try:
            self._stream = await asyncio.to_thread(self._open_stream)
        except Exception as exc:
            _logger.warning("Microphone unavailable: %s", exc)
            self._stream = None
            return False

        _logger.info("Microphone opened at %d Hz, %d channel(s)", self._sample_rate, self._channels)
        return True

    def _open_stream(self) -> Any:
        factory = self._stream_factory
        if factory is None:
            sd = require_sounddevice()
            factory = sd.InputStream

        return factory(
            samplerate=self._sample_rate,
            channels=self._channels,
            device=self._device,
            blocksize=self._blocksize,
            dtype="float32",
            callback=self._audio_callback,
        )

    def start_recording(self) -> None:
        """Start capturing audio.

        Raises:
            MicrophonePermissionError: If request_permission() did not succeed
        """
        if self._stream is None:
            raise MicrophonePermissionError(
                "Microphone not initialized. Call request_permission first."
            )
        if self._recording:
            return

        with self._lock:
            self._chunks = []
            self._captured_frames = 0
        self._recording = True
        try:
            self._stream.start()
        except Exception:
            self._recording = False
            raise

    def _audio_callback(
        self,
        indata: np.ndarray,
        frames: int,
        time_info: object,
        status: object,
    ) -> None:
        """Sounddevice callback for incoming audio."""
        if status:
            _logger.debug("Microphone status: %s", status)

        if not self._recording:
            return

        with self._lock:
            # indata is [frames, channels] and reused by PortAudio
            self._chunks.append(indata.copy())
            self._captured_frames += frames

    async def stop_recording(self) -> AudioSignal:
        """Stop capturing and decode what was recorded.

        Returns:
            AudioSignal of the captured audio

        Raises:
            RecordingError: If no recording is in progress or nothing was captured
            DecodeError: If the captured container cannot be decoded
        """
        if not self._recording or self._stream is None:
            raise RecordingError("No recording in progress")

        self._recording = False
        self._stream.stop()

        with self._lock:
            chunks = self._chunks
            self._chunks = []

        if not chunks:
            raise RecordingError("No audio was captured")

        signal = await asyncio.to_thread(self._decode_capture, chunks)
        _logger.info("Recorded %.2fs of audio", signal.duration)
        return signal

    def _decode_capture(self, chunks: list[np.ndarray]) -> AudioSignal:
        audio = np.concatenate(chunks, axis=0)
        buffer = io.BytesIO()
        sf.write(buffer, audio, self._sample_rate, format="WAV", subtype="FLOAT")
        return decode_bytes(buffer.getvalue(), suffix=".wav")

    @property
    def sample_rate(self) -> int:
        """Capture sample rate in Hz."""
        return self._sample_rate

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def has_permission(self) -> bool:
        return self._stream is not None

    @property
    def recording_duration(self) -> float:
        """Seconds captured so far in the current recording."""
        with self._lock:
            return self._captured_frames / float(self._sample_rate)

    def dispose(self) -> None:
        """Stop capture and release the input device."""
        stream = self._stream
        self._stream = None
        self._recording = False

        with self._lock:
            self._chunks = []
            self._captured_frames = 0

        if stream is not None:
            try:
                stream.stop()
            finally:
                stream.close()

    def __enter__(self) -> MicrophoneRecorder:
        return self

    def __exit__(self, *args: object) -> None:
        self.dispose()

    async def __aenter__(self) -> MicrophoneRecorder:
        return self

    async def __aexit__(self, *args: object) -> None:
        self.dispose()


__all__ = ["MicrophoneRecorder"]
