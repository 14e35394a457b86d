"""Tests for ClassificationPipeline."""

import asyncio

import numpy as np
import pytest

from birdlab.audio import AudioFileReader
from birdlab.dsp import DSPEngine
from birdlab.exceptions import BirdlabError, ConfigurationError, DecodeError
from birdlab.inference import InferenceEngine
from birdlab.pipeline import ClassificationPipeline, classify
from birdlab.types import AudioSignal, ProcessingStage

from conftest import make_sine, make_wav_bytes

try:
    import mlx.core as mx
except ImportError:
    mx = None


def _pipeline(models_dir, events=None):
    return ClassificationPipeline(
        reader=AudioFileReader(),
        dsp=DSPEngine(),
        engine=InferenceEngine(models_dir),
        on_progress=events.append if events is not None else None,
    )


class TestEndToEnd:
    """Full runs without model files (mock inference)."""

    def test_sine_clip(self, tmp_path, sine_wav_bytes):
        """3 s of 1 kHz at 44.1 kHz: 32000-sample clip, [55, 40] mel, mock result."""
        events = []

        async def run():
            async with _pipeline(tmp_path / "models", events) as pipeline:
                return await pipeline.run(sine_wav_bytes, model="precision")

        result = asyncio.run(run())

        assert result.signal.sample_rate == 16000
        assert len(result.signal) == 48000
        assert result.metadata["clip_samples"] == 32000
        assert result.metadata["model_loaded"] is False
        assert result.mel_spectrogram.shape == (55, 40)
        assert result.spectrogram.magnitudes.shape == (55, 2049)
        assert result.model == "precision"

        assert [r.species for r in result.results] == ["Other", "Robin"]
        assert sum(r.confidence for r in result.results) == pytest.approx(1.0)

        stages = [e.stage for e in events]
        assert stages == [
            ProcessingStage.LOADING,
            ProcessingStage.AUDIO,
            ProcessingStage.DSP,
            ProcessingStage.INFERENCE,
            ProcessingStage.COMPLETE,
        ]
        progress = [e.progress for e in events]
        assert progress == sorted(progress)
        assert progress[-1] == 100

    def test_quantized_clip_near_half_scale(self, tmp_path, sine_wav_bytes):
        async def run():
            async with _pipeline(tmp_path / "models") as pipeline:
                return await pipeline.run(sine_wav_bytes)

        result = asyncio.run(run())
        dsp = DSPEngine()
        clip = dsp.extract_loudest_slice(result.signal, 2000)
        quantized = dsp.quantize_to_int16(clip)

        assert len(quantized) == 32000
        assert 15500 <= quantized.max() <= 16384
        assert -16384 <= quantized.min() <= -15500

    def test_latest_and_reset(self, tmp_path, sine_wav_bytes):
        events = []

        async def run():
            pipeline = _pipeline(tmp_path / "models", events)
            result = await pipeline.run(sine_wav_bytes)
            assert pipeline.latest is result
            pipeline.reset()
            return pipeline

        pipeline = asyncio.run(run())

        assert pipeline.latest is None
        assert pipeline.progress.stage is ProcessingStage.IDLE
        assert events[-1].stage is ProcessingStage.IDLE

    def test_run_signal_resamples(self, tmp_path):
        signal = AudioSignal.from_samples(make_sine(1000.0, 2.5, 44100), 44100)

        async def run():
            async with _pipeline(tmp_path / "models") as pipeline:
                return await pipeline.run_signal(signal, model="efficiency")

        result = asyncio.run(run())

        assert result.signal.sample_rate == 16000
        assert result.model == "efficiency"
        assert result.mel_spectrogram.shape == (55, 40)

    def test_to_dict(self, tmp_path, sine_wav_bytes):
        async def run():
            async with _pipeline(tmp_path / "models") as pipeline:
                return await pipeline.run(sine_wav_bytes)

        d = asyncio.run(run()).to_dict()
        assert d["mel_shape"] == [55, 40]
        assert d["sample_rate"] == 16000
        assert len(d["results"]) == 2


class TestStaleRuns:
    """Superseded runs never publish."""

    def test_newer_run_wins(self, tmp_path, sine_wav_bytes):
        events = []
        other_wav = make_wav_bytes(make_sine(2000.0, 2.0, 22050), 22050, subtype="FLOAT")

        async def run():
            pipeline = _pipeline(tmp_path / "models", events)
            first = asyncio.create_task(pipeline.run(sine_wav_bytes, model="efficiency"))
            await asyncio.sleep(0)
            second = await pipeline.run(other_wav, model="precision")
            return pipeline, await first, second

        pipeline, first, second = asyncio.run(run())

        assert first is None
        assert second is not None
        assert pipeline.latest is second
        assert pipeline.latest.model == "precision"
        assert [e.stage for e in events].count(ProcessingStage.COMPLETE) == 1

    def test_reset_discards_in_flight_run(self, tmp_path, sine_wav_bytes):
        async def run():
            pipeline = _pipeline(tmp_path / "models")
            task = asyncio.create_task(pipeline.run(sine_wav_bytes))
            await asyncio.sleep(0)
            pipeline.reset()
            return pipeline, await task

        pipeline, result = asyncio.run(run())

        assert result is None
        assert pipeline.latest is None
        assert pipeline.progress.stage is ProcessingStage.IDLE


class TestErrors:
    """Error propagation."""

    def test_decode_error_publishes_error_stage(self, tmp_path):
        events = []

        async def run():
            async with _pipeline(tmp_path / "models", events) as pipeline:
                await pipeline.run(b"")

        with pytest.raises(DecodeError):
            asyncio.run(run())

        assert events[-1].stage is ProcessingStage.ERROR
        assert events[-1].progress == 0

    def test_unknown_model(self, tmp_path, sine_wav_bytes):
        async def run():
            async with _pipeline(tmp_path / "models") as pipeline:
                await pipeline.run(sine_wav_bytes, model="turbo")

        with pytest.raises(ConfigurationError):
            asyncio.run(run())

    def test_run_signal_resample_error_publishes_error_stage(self, tmp_path):
        events = []
        empty = AudioSignal.from_samples(np.zeros(0), 44100)

        async def run():
            async with _pipeline(tmp_path / "models", events) as pipeline:
                await pipeline.run_signal(empty)

        with pytest.raises(ValueError, match="empty"):
            asyncio.run(run())

        assert events[-1].stage is ProcessingStage.ERROR
        assert events[-1].progress == 0

    def test_run_signal_feature_error_publishes_error_stage(self, tmp_path, monkeypatch):
        events = []
        signal = AudioSignal.from_samples(make_sine(1000.0, 2.0, 16000), 16000)

        def broken(self, signal):
            raise RuntimeError("feature extraction failed")

        monkeypatch.setattr(DSPEngine, "compute_mel_spectrogram", broken)

        async def run():
            async with _pipeline(tmp_path / "models", events) as pipeline:
                await pipeline.run_signal(signal)

        with pytest.raises(RuntimeError, match="feature extraction"):
            asyncio.run(run())

        assert events[-1].stage is ProcessingStage.ERROR
        assert "feature extraction failed" in events[-1].message


@pytest.mark.skipif(mx is None, reason="MLX not available")
class TestModelSwitching:
    """Runs against real model files."""

    def test_precision_then_efficiency(self, tmp_path, sine_wav_bytes, fixed_seed):
        from birdlab.models import TinyConvClassifier

        models_dir = tmp_path / "models"
        TinyConvClassifier().save_pretrained(models_dir / "E_model")
        TinyConvClassifier().save_pretrained(models_dir / "N_Enrich_model")

        async def run():
            pipeline = _pipeline(models_dir)
            a = await pipeline.run(sine_wav_bytes, model="precision")
            first_model = pipeline.engine._model
            b = await pipeline.run(sine_wav_bytes, model="efficiency")
            return pipeline, first_model, a, b

        pipeline, first_model, a, b = asyncio.run(run())

        assert a.metadata["model_loaded"] is True
        assert b.model == "efficiency"
        assert pipeline.engine.current_variant == "efficiency"
        assert pipeline.engine._model is not first_model
        assert sum(r.confidence for r in b.results) == pytest.approx(1.0, abs=1e-5)


class TestClassify:
    """Tests for the synchronous convenience wrapper."""

    def test_classify_file(self, tmp_path, sine_wav_bytes):
        path = tmp_path / "robin.wav"
        path.write_bytes(sine_wav_bytes)

        result = classify(path, model="efficiency", models_dir=str(tmp_path / "models"))

        assert result.model == "efficiency"
        assert len(result.results) == 2
        assert np.isclose(sum(r.confidence for r in result.results), 1.0)

    def test_superseded_run_raises(self, tmp_path, sine_wav_bytes, monkeypatch):
        async def superseded(self, source, model="precision"):
            return None

        monkeypatch.setattr(ClassificationPipeline, "run", superseded)

        with pytest.raises(BirdlabError, match="superseded"):
            classify(sine_wav_bytes, models_dir=str(tmp_path / "models"))
