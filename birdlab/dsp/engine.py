"""
Feature extraction for the bird classifiers.

DSPEngine turns an AudioSignal into the fixed-shape log mel-spectrogram the
classifiers consume, plus a dB spectrogram and MFCCs for display and
analysis. All transforms are pure functions of the signal and the engine's
DSPConfig; only the filterbank tables are cached.

Computation is done in NumPy float64. The mel-spectrogram reproduces a
fixed-point embedded frontend (quantized filterbank weights, carried
remainders, scaled natural log), so the classifier sees the same features
it was trained on.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from birdlab.constants import (
    CLIP_DURATION_MS,
    DB_OFFSET,
    DEFAULT_AMIN,
    INT16_SCALE,
    NORMALIZE_EPS,
)
from birdlab.dsp.config import DSPConfig
from birdlab.dsp.fft import fft as _fft
from birdlab.dsp.fft import hann_window, power_spectrum
from birdlab.dsp.filterbank import (
    accumulate_channels,
    build_mel_filterbank,
    triangular_filterbank,
)
from birdlab.types import AudioSignal, FilterBankData, MFCCData, SpectrogramData

_logger = logging.getLogger(__name__)


def _dct2_matrix(num_inputs: int, num_outputs: int) -> np.ndarray:
    """Unnormalized DCT-II basis cos(pi * k * (2i + 1) / (2n)), shape (n, k)."""
    i = np.arange(num_inputs)[:, np.newaxis]
    k = np.arange(num_outputs)[np.newaxis, :]
    return np.cos(np.pi * k * (2 * i + 1) / (2 * num_inputs))


class DSPEngine:
    """Spectral feature extractor.

    Args:
        config: Feature extraction parameters (defaults to the model
            operating point: 4096/512 window/hop, 40 mel bands, 55 frames)

    Example:
        >>> dsp = DSPEngine()
        >>> clip = dsp.extract_loudest_slice(signal, 2000)
        >>> mel = dsp.compute_mel_spectrogram(
        ...     AudioSignal.from_samples(dsp.quantize_to_int16(clip), signal.sample_rate)
        ... )
        >>> mel.shape
        (55, 40)
    """

    def __init__(self, config: DSPConfig | None = None):
        self.config = config or DSPConfig()

    @property
    def num_bins(self) -> int:
        """One-sided FFT bins per frame."""
        return self.config.window_size // 2 + 1

    # =========================================================================
    # Time domain
    # =========================================================================

    def extract_loudest_slice(
        self, signal: AudioSignal, duration_ms: float = CLIP_DURATION_MS
    ) -> np.ndarray:
        """
        Cut a fixed-length window centered on the loudest sample.

        The window is shifted, not clipped, to stay inside the signal. Ties
        for the loudest sample resolve to the first occurrence.

        Parameters
        ----------
        signal : AudioSignal
            Source signal.
        duration_ms : float
            Window length in milliseconds.

        Returns
        -------
        np.ndarray
            float32 samples, exactly round(duration_ms / 1000 * sample_rate)
            long. Zero-padded at the end only when the signal is shorter.
        """
        if duration_ms <= 0:
            raise ValueError(f"duration_ms must be positive, got {duration_ms}")

        target = int(np.floor(duration_ms / 1000.0 * signal.sample_rate + 0.5))
        data = signal.data
        out = np.zeros(target, dtype=np.float32)
        if len(data) == 0:
            return out
        if len(data) <= target:
            out[: len(data)] = data
            return out

        peak = int(np.argmax(np.abs(data)))
        start = min(max(peak - target // 2, 0), len(data) - target)
        out[:] = data[start : start + target]
        return out

    def quantize_to_int16(self, samples: np.ndarray) -> np.ndarray:
        """
        Convert float samples to int16 the way the embedded frontend does.

        Samples are clipped to [-1, 1], scaled by 32767 and rounded half up
        (floor(x + 0.5)). Output lies in [-32767, 32767].
        """
        samples = np.asarray(samples, dtype=np.float64)
        scaled = np.clip(samples, -1.0, 1.0) * INT16_SCALE
        return np.floor(scaled + 0.5).astype(np.int16)

    def normalize(
        self,
        signal: AudioSignal,
        mean: float | None = None,
        std: float | None = None,
    ) -> AudioSignal:
        """
        Scale a signal by its standard deviation.

        Note: the numerator subtracts ``std``, not ``mean``, i.e. the result
        is ``(x - std) / (std + 1e-8)``. ``mean`` only feeds the std
        computation when ``std`` is not given. Existing consumers depend on
        these values, so the formula is kept as is.
        """
        data = signal.data.astype(np.float64)
        if len(data) == 0:
            return signal
        data_mean = float(np.mean(data)) if mean is None else float(mean)
        if std is None:
            data_std = float(np.sqrt(np.mean((data - data_mean) ** 2)))
        else:
            data_std = float(std)

        normalized = (data - data_std) / (data_std + NORMALIZE_EPS)
        return AudioSignal(
            sample_rate=signal.sample_rate,
            channels=signal.channels,
            data=normalized.astype(np.float32),
            duration=signal.duration,
        )

    # =========================================================================
    # Spectral
    # =========================================================================

    def fft(self, x: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Radix-2 FFT of a real frame.

        Returns
        -------
        tuple[np.ndarray, np.ndarray]
            (real, imag), each the same length as ``x``.

        Raises
        ------
        ValueError
            If ``len(x)`` is not a power of two.
        """
        spectrum = _fft(x)
        return spectrum.real, spectrum.imag

    def _frames(self, data: np.ndarray) -> np.ndarray:
        window = self.config.window_size
        hop = self.config.hop_size
        if len(data) < window:
            return np.zeros((0, window), dtype=np.float64)
        num_frames = (len(data) - window) // hop + 1
        frames = sliding_window_view(data.astype(np.float64), window)[::hop]
        return frames[:num_frames]

    def stft(self, signal: AudioSignal) -> SpectrogramData:
        """
        Short-time power spectrum with a symmetric Hann window.

        Produces floor((n - window) / hop) + 1 frames (zero for signals
        shorter than one window). Magnitudes are squared magnitudes
        re^2 + im^2 for bins 0..window/2.
        """
        window_size = self.config.window_size
        sr = signal.sample_rate
        frames = self._frames(signal.data)

        if len(frames):
            power = power_spectrum(frames * hann_window(window_size))
        else:
            power = np.zeros((0, self.num_bins), dtype=np.float64)

        times = np.arange(len(frames)) * self.config.hop_size / sr
        frequencies = np.arange(self.num_bins) * sr / window_size
        return SpectrogramData(
            frequencies=frequencies,
            times=times,
            magnitudes=power,
            sample_rate=sr,
            window_size=window_size,
            hop_size=self.config.hop_size,
        )

    def to_decibel_spectrogram(self, spectrogram: SpectrogramData) -> SpectrogramData:
        """Convert power to max(0, 20 * log10(max(p, 1e-10)) + 80)."""
        db = 20.0 * np.log10(np.maximum(spectrogram.magnitudes, DEFAULT_AMIN))
        return spectrogram.with_magnitudes(np.maximum(0.0, db + DB_OFFSET))

    def compute_spectrogram(self, signal: AudioSignal) -> SpectrogramData:
        """dB spectrogram for display."""
        return self.to_decibel_spectrogram(self.stft(signal))

    # =========================================================================
    # Mel features
    # =========================================================================

    def build_mel_filterbank(
        self, num_filters: int, num_bins: int, sample_rate: int
    ) -> FilterBankData:
        """Quantized filterbank over this engine's band limits (cached)."""
        return build_mel_filterbank(
            num_filters,
            num_bins,
            sample_rate,
            float(self.config.mel_low_hz),
            float(self.config.mel_high_hz),
            self.config.filterbank_bits,
        )

    def compute_mel_spectrogram(self, signal: AudioSignal) -> np.ndarray:
        """
        Log mel-spectrogram in the classifier's input format.

        Per frame: power spectrum, quantized filterbank with carried
        remainders, sqrt scaled down by 2**(bits / 2), then
        ln(max(v, 1)) * 2**log_scale_shift. Rows are zero-padded or
        truncated to ``target_frames``.

        Expects int16-scaled samples (see :meth:`quantize_to_int16`).

        Returns
        -------
        np.ndarray
            float32 array of shape (target_frames, num_coefficients).
        """
        cfg = self.config
        spec = self.stft(signal)
        fb = self.build_mel_filterbank(
            cfg.num_coefficients, len(spec.frequencies), signal.sample_rate
        )

        energies = accumulate_channels(spec.magnitudes, fb)
        scaled = np.sqrt(energies) / float(1 << cfg.filterbank_bits) ** 0.5
        log_mel = np.log(np.maximum(scaled, 1.0)) * float(1 << cfg.log_scale_shift)

        out = np.zeros((cfg.target_frames, cfg.num_coefficients), dtype=np.float32)
        rows = min(len(log_mel), cfg.target_frames)
        out[:rows] = log_mel[:rows]

        _logger.debug(
            "Mel spectrogram: %d frames computed, shape %s", len(log_mel), out.shape
        )
        return out

    def compute_mfcc(
        self, signal: AudioSignal, num_filters: int | None = None
    ) -> MFCCData:
        """
        Mel-frequency cepstral coefficients.

        Float triangular filterbank over the power spectrum, natural log
        floored at 1e-10, then an unnormalized DCT-II giving
        ``num_coefficients`` values per frame.

        Parameters
        ----------
        signal : AudioSignal
            Input signal.
        num_filters : int, optional
            Filterbank size (default ``config.mfcc_filters``).

        Returns
        -------
        MFCCData
        """
        cfg = self.config
        if num_filters is None:
            num_filters = cfg.mfcc_filters
        spec = self.stft(signal)

        filters = triangular_filterbank(
            num_filters,
            len(spec.frequencies),
            signal.sample_rate,
            cfg.window_size,
            cfg.mel_low_hz,
            cfg.mel_high_hz,
        )
        energies = np.maximum(spec.magnitudes @ filters.T, DEFAULT_AMIN)
        coefficients = np.log(energies) @ _dct2_matrix(num_filters, cfg.num_coefficients)

        return MFCCData(
            coefficients=coefficients,
            times=spec.times,
            num_coefficients=cfg.num_coefficients,
            sample_rate=signal.sample_rate,
        )


__all__ = ["DSPEngine"]
