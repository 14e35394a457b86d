"""
Classification pipeline.

Chains ingestion, feature extraction and inference for one audio source and
reports progress as it goes:

    loading -> audio -> dsp -> inference -> complete

Each run takes a generation token. Starting a new run (or calling reset())
invalidates older tokens; a run that finds its token stale after any await
returns None without publishing progress or results, so only the newest
request ever reaches the caller's state.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import numpy as np

from birdlab.audio import AudioFileReader, resample
from birdlab.audio.decode import AudioSource
from birdlab.constants import CLIP_DURATION_MS, TARGET_SAMPLE_RATE
from birdlab.dsp import DSPEngine
from birdlab.exceptions import BirdlabError
from birdlab.inference import DEFAULT_VARIANT, InferenceEngine, get_model_config
from birdlab.types import (
    IDLE_PROGRESS,
    AudioSignal,
    PipelineResult,
    ProcessingProgress,
    ProcessingStage,
    SpectrogramData,
)

_logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProcessingProgress], None]


class ClassificationPipeline:
    """Async orchestrator for audio classification.

    Args:
        reader: Decode context (created if omitted)
        dsp: Feature extractor (default operating point if omitted)
        engine: Inference engine (created if omitted)
        on_progress: Called with every published ProcessingProgress
        target_sample_rate: Rate features are computed at
        clip_duration_ms: Length of the classified clip

    Example:
        >>> async with ClassificationPipeline() as pipeline:
        ...     result = await pipeline.run("robin.wav", model="efficiency")
        >>> result.top.species
    """

    def __init__(
        self,
        reader: AudioFileReader | None = None,
        dsp: DSPEngine | None = None,
        engine: InferenceEngine | None = None,
        on_progress: ProgressCallback | None = None,
        target_sample_rate: int = TARGET_SAMPLE_RATE,
        clip_duration_ms: float = CLIP_DURATION_MS,
    ):
        self.reader = reader or AudioFileReader()
        self.dsp = dsp or DSPEngine()
        self.engine = engine or InferenceEngine()
        self.on_progress = on_progress
        self.target_sample_rate = target_sample_rate
        self.clip_duration_ms = clip_duration_ms

        self._generation = 0
        self._latest: PipelineResult | None = None
        self._progress = IDLE_PROGRESS

    # =========================================================================
    # State
    # =========================================================================

    @property
    def latest(self) -> PipelineResult | None:
        """Result of the most recent completed, non-stale run."""
        return self._latest

    @property
    def progress(self) -> ProcessingProgress:
        return self._progress

    def reset(self) -> None:
        """Clear the published result and invalidate in-flight runs."""
        self._generation += 1
        self._latest = None
        self._set_progress(IDLE_PROGRESS)

    def _next_token(self) -> int:
        self._generation += 1
        return self._generation

    def _is_stale(self, token: int) -> bool:
        return token != self._generation

    def _set_progress(self, progress: ProcessingProgress) -> None:
        self._progress = progress
        if self.on_progress is not None:
            self.on_progress(progress)

    def _publish(
        self, token: int, stage: ProcessingStage, progress: int, message: str
    ) -> None:
        if self._is_stale(token):
            return
        self._set_progress(ProcessingProgress(stage, progress, message))

    # =========================================================================
    # Runs
    # =========================================================================

    async def run(
        self, source: AudioSource, model: str = DEFAULT_VARIANT
    ) -> PipelineResult | None:
        """Classify an audio file.

        Args:
            source: Encoded bytes, a file path or a binary file object
            model: Classifier variant

        Any failure after the run starts publishes the error stage before
        propagating.

        Returns:
            The result, or None if a newer run superseded this one

        Raises:
            DecodeError: If the source cannot be decoded
            ConfigurationError: If the model variant is unknown
        """
        get_model_config(model)
        token = self._next_token()

        try:
            if not await self._load_model(token, model):
                return None

            self._publish(token, ProcessingStage.AUDIO, 30, "Decoding audio...")
            signal = await self.reader.decode_file(source)
            if self._is_stale(token):
                return None

            signal = await self.reader.resample(signal, self.target_sample_rate)
            if self._is_stale(token):
                return None

            return await self._classify(token, signal, model)
        except Exception as e:
            self._publish(token, ProcessingStage.ERROR, 0, str(e))
            raise

    async def run_signal(
        self, signal: AudioSignal, model: str = DEFAULT_VARIANT
    ) -> PipelineResult | None:
        """Classify an already decoded signal, e.g. a microphone capture.

        Failures publish the error stage and propagate, as in :meth:`run`.
        """
        get_model_config(model)
        token = self._next_token()

        try:
            if not await self._load_model(token, model):
                return None

            self._publish(token, ProcessingStage.AUDIO, 30, "Preparing audio...")
            if signal.sample_rate != self.target_sample_rate:
                signal = await asyncio.to_thread(
                    resample, signal, self.target_sample_rate
                )
                if self._is_stale(token):
                    return None

            return await self._classify(token, signal, model)
        except Exception as e:
            self._publish(token, ProcessingStage.ERROR, 0, str(e))
            raise

    async def _load_model(self, token: int, model: str) -> bool:
        self._publish(token, ProcessingStage.LOADING, 10, "Loading model...")
        await asyncio.to_thread(self.engine.load_model, model)
        return not self._is_stale(token)

    def _extract_features(
        self, signal: AudioSignal
    ) -> tuple[np.ndarray, SpectrogramData, np.ndarray]:
        clip = self.dsp.extract_loudest_slice(signal, self.clip_duration_ms)
        quantized = self.dsp.quantize_to_int16(clip)

        clip_signal = AudioSignal.from_samples(clip, signal.sample_rate)
        spectrogram = self.dsp.compute_spectrogram(clip_signal)
        mel = self.dsp.compute_mel_spectrogram(
            AudioSignal.from_samples(quantized, signal.sample_rate)
        )
        return quantized, spectrogram, mel

    async def _classify(
        self, token: int, signal: AudioSignal, model: str
    ) -> PipelineResult | None:
        self._publish(token, ProcessingStage.DSP, 50, "Extracting features...")
        quantized, spectrogram, mel = await asyncio.to_thread(
            self._extract_features, signal
        )
        if self._is_stale(token):
            return None

        self._publish(token, ProcessingStage.INFERENCE, 80, "Running inference...")
        results = await asyncio.to_thread(self.engine.infer, mel)
        if self._is_stale(token):
            return None

        metadata: dict[str, Any] = {
            "clip_samples": len(quantized),
            "model_loaded": self.engine.is_loaded,
            "inference_time_ms": results[0].inference_time if results else 0.0,
        }
        result = PipelineResult(
            signal=signal,
            spectrogram=spectrogram,
            mel_spectrogram=mel,
            results=results,
            model=model,
            metadata=metadata,
        )
        self._latest = result
        self._publish(token, ProcessingStage.COMPLETE, 100, "Classification complete")
        _logger.info(
            "Classified %.2fs of audio with %s: %s (%.1f%%)",
            signal.duration,
            model,
            result.top.species,
            result.top.confidence * 100,
        )
        return result

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def dispose(self) -> None:
        """Invalidate in-flight runs and release the reader and the model."""
        self._generation += 1
        self.reader.dispose()
        self.engine.dispose()

    async def __aenter__(self) -> ClassificationPipeline:
        return self

    async def __aexit__(self, *args: object) -> None:
        self.dispose()


def classify(
    source: AudioSource,
    model: str = DEFAULT_VARIANT,
    models_dir: str | None = None,
) -> PipelineResult:
    """Classify an audio file synchronously.

    Convenience wrapper around :class:`ClassificationPipeline` for scripts
    and the CLI.

    Args:
        source: Encoded bytes, a file path or a binary file object
        model: Classifier variant ("precision" or "efficiency")
        models_dir: Directory with model artifacts (default cache dir)

    Returns:
        PipelineResult with ranked classification results

    Example:
        >>> result = birdlab.classify("robin.wav")
        >>> print(result.top)
    """
    engine = InferenceEngine(models_dir) if models_dir else InferenceEngine()

    async def _run() -> PipelineResult:
        async with ClassificationPipeline(engine=engine) as pipeline:
            result = await pipeline.run(source, model=model)
        if result is None:
            raise BirdlabError("Classification run was superseded before completing")
        return result

    return asyncio.run(_run())


__all__ = ["ClassificationPipeline", "ProgressCallback", "classify"]
