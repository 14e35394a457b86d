"""Tests for the radix-2 FFT and Hann window."""

import numpy as np
import pytest

from birdlab.dsp import fft, hann_window, power_spectrum


class TestFFT:
    """Tests for fft()."""

    @pytest.mark.parametrize("n", [1, 2, 8, 64, 4096])
    def test_matches_numpy(self, n):
        rng = np.random.default_rng(n)
        x = rng.standard_normal(n)
        np.testing.assert_allclose(fft(x), np.fft.fft(x), rtol=1e-9, atol=1e-9)

    def test_batched_frames(self):
        rng = np.random.default_rng(0)
        frames = rng.standard_normal((5, 256))
        np.testing.assert_allclose(
            fft(frames), np.fft.fft(frames, axis=-1), rtol=1e-9, atol=1e-9
        )

    @pytest.mark.parametrize("n", [0, 3, 100, 4095])
    def test_non_power_of_two_raises(self, n):
        with pytest.raises(ValueError, match="power of two"):
            fft(np.zeros(n))

    def test_impulse_is_flat(self):
        x = np.zeros(16)
        x[0] = 1.0
        np.testing.assert_allclose(fft(x), np.ones(16), atol=1e-12)

    @pytest.mark.parametrize("freq", [440.0, 1000.0, 3000.0])
    def test_sinusoid_peak_bin(self, freq):
        """Peak lands within one bin of round(f * n / sr)."""
        n, sr = 4096, 16000
        t = np.arange(n) / sr
        x = np.sin(2 * np.pi * freq * t)

        power = power_spectrum(x)
        expected = int(round(freq * n / sr))
        assert abs(int(np.argmax(power)) - expected) <= 1


class TestPowerSpectrum:
    """Tests for power_spectrum()."""

    def test_one_sided_shape(self):
        assert power_spectrum(np.zeros((3, 512))).shape == (3, 257)

    def test_is_squared_magnitude(self):
        rng = np.random.default_rng(1)
        x = rng.standard_normal(128)
        expected = np.abs(np.fft.rfft(x)) ** 2
        np.testing.assert_allclose(power_spectrum(x), expected, rtol=1e-9, atol=1e-9)


class TestHannWindow:
    """Tests for hann_window()."""

    def test_symmetric_formula(self):
        n = 64
        i = np.arange(n)
        expected = 0.5 * (1 - np.cos(2 * np.pi * i / (n - 1)))
        np.testing.assert_allclose(hann_window(n), expected, atol=1e-12)

    def test_endpoints_zero(self):
        w = hann_window(4096)
        assert w[0] == pytest.approx(0.0)
        assert w[-1] == pytest.approx(0.0)

    def test_read_only(self):
        with pytest.raises(ValueError):
            hann_window(16)[0] = 1.0

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            hann_window(0)
