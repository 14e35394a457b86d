"""Tests for the quantized and triangular mel filterbanks."""

import numpy as np
import pytest

from birdlab.dsp import (
    accumulate_channels,
    build_mel_filterbank,
    hz_to_mel,
    mel_to_hz,
    triangular_filterbank,
)

NUM_BINS = 2049
SAMPLE_RATE = 16000
HZ_PER_BIN = 0.5 * SAMPLE_RATE / (NUM_BINS - 1)


@pytest.fixture
def fb():
    return build_mel_filterbank(40, NUM_BINS, SAMPLE_RATE)


class TestMelScale:
    """Tests for the HTK mel conversion."""

    def test_natural_log_form(self):
        assert hz_to_mel(700.0) == pytest.approx(1127.0 * np.log(2.0))

    def test_equals_log10_form(self):
        f = np.array([0.0, 125.0, 1000.0, 7500.0])
        np.testing.assert_allclose(hz_to_mel(f), 2595.0 * np.log10(1 + f / 700.0), rtol=1e-3)

    def test_round_trip(self):
        f = np.linspace(0, 8000, 17)
        np.testing.assert_allclose(mel_to_hz(hz_to_mel(f)), f, atol=1e-9)


class TestBuildMelFilterbank:
    """Tests for build_mel_filterbank()."""

    def test_channel_count(self, fb):
        assert fb.num_channels == 40
        assert fb.num_bins == NUM_BINS
        assert len(fb.channel_starts) == 41
        assert len(fb.channel_widths) == 41

    def test_start_index_excludes_dc(self, fb):
        assert fb.start_index == int(1.5 + 125.0 / HZ_PER_BIN)
        assert fb.start_index > 0
        assert fb.channel_starts[0] == fb.start_index

    def test_end_index_near_upper_limit(self, fb):
        assert abs(fb.end_index * HZ_PER_BIN - 7500.0) <= 2 * HZ_PER_BIN
        assert fb.end_index == fb.channel_starts[-1] + fb.channel_widths[-1]

    def test_channels_contiguous_and_non_overlapping(self, fb):
        starts = fb.channel_starts.astype(int)
        widths = fb.channel_widths.astype(int)

        assert np.all(np.diff(starts) >= 0)
        np.testing.assert_array_equal(starts[1:], starts[:-1] + widths[:-1])

    def test_weight_offsets(self, fb):
        offsets = fb.channel_weight_starts.astype(int)
        widths = fb.channel_widths.astype(int)

        assert offsets[0] == 0
        np.testing.assert_array_equal(offsets[1:], np.cumsum(widths)[:-1])
        assert len(fb.weights) == widths.sum()

    def test_weights_quantized_to_scale(self, fb):
        scale = 1 << fb.bits
        assert fb.bits == 12
        assert fb.weights.min() >= 0
        assert fb.weights.max() <= scale
        assert np.all(np.abs(fb.weights + fb.unweights - scale) <= 1)

    def test_weights_fall_within_channel(self, fb):
        """Weights shrink as bins approach the channel's center."""
        for chan in range(41):
            start = fb.channel_weight_starts[chan]
            width = fb.channel_widths[chan]
            w = fb.weights[start : start + width].astype(int)
            assert np.all(np.diff(w) <= 0)

    def test_weights_match_htk_slope(self, fb):
        mel_low, mel_high = hz_to_mel(125.0), hz_to_mel(7500.0)
        spacing = (mel_high - mel_low) / 41
        centers = mel_low + spacing * np.arange(1, 42)

        chan = 10
        start = fb.channel_starts[chan]
        offset = fb.channel_weight_starts[chan]
        mel = hz_to_mel(start * HZ_PER_BIN)
        w = (centers[chan] - mel) / (centers[chan] - centers[chan - 1])
        assert fb.weights[offset] == np.floor(w * 4096 + 0.5)
        assert fb.unweights[offset] == np.floor((1 - w) * 4096 + 0.5)

    def test_cached(self, fb):
        assert build_mel_filterbank(40, NUM_BINS, SAMPLE_RATE) is fb

    def test_tables_read_only(self, fb):
        with pytest.raises(ValueError):
            fb.weights[0] = 0

    @pytest.mark.parametrize("num_filters", [10, 26, 64])
    def test_other_sizes(self, num_filters):
        bank = build_mel_filterbank(num_filters, 513, 16000)
        assert bank.num_channels == num_filters
        assert np.all(np.diff(bank.channel_starts.astype(int)) >= 0)

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            build_mel_filterbank(0, NUM_BINS, SAMPLE_RATE)
        with pytest.raises(ValueError):
            build_mel_filterbank(40, 1, SAMPLE_RATE)


class TestAccumulateChannels:
    """Tests for the weight/unweight accumulation."""

    def _impulse(self, bin_index):
        power = np.zeros((1, NUM_BINS))
        power[0, bin_index] = 1000.0
        return power

    def test_bin_splits_between_neighbouring_channels(self, fb):
        """A bin's weight stays in its own band, its unweight moves up one."""
        chan = 5
        bin_index = int(fb.channel_starts[chan]) + 1
        offset = int(fb.channel_weight_starts[chan]) + 1

        out = accumulate_channels(self._impulse(bin_index), fb)[0]

        expected = np.zeros(40)
        expected[chan - 1] = fb.weights[offset] * 1000.0
        expected[chan] = fb.unweights[offset] * 1000.0
        np.testing.assert_allclose(out, expected)

    def test_leading_channel_weight_dropped(self, fb):
        bin_index = int(fb.channel_starts[0])
        out = accumulate_channels(self._impulse(bin_index), fb)[0]

        assert out[0] == pytest.approx(fb.unweights[0] * 1000.0)
        assert np.count_nonzero(out) <= 1

    @pytest.mark.parametrize("bin_index", [0, 1, NUM_BINS - 1])
    def test_power_outside_range_ignored(self, fb, bin_index):
        out = accumulate_channels(self._impulse(bin_index), fb)
        np.testing.assert_array_equal(out, 0.0)

    def test_output_shape(self, fb):
        out = accumulate_channels(np.ones((7, NUM_BINS)), fb)
        assert out.shape == (7, 40)
        assert np.all(out > 0)

    def test_wrong_bin_count_raises(self, fb):
        with pytest.raises(ValueError, match="Expected power"):
            accumulate_channels(np.ones((2, 100)), fb)


class TestTriangularFilterbank:
    """Tests for the MFCC filterbank."""

    def test_shape_and_range(self):
        filters = triangular_filterbank(26, NUM_BINS, SAMPLE_RATE, 4096)

        assert filters.shape == (26, NUM_BINS)
        assert filters.min() >= 0.0
        assert filters.max() <= 1.0

    def test_each_filter_peaks_at_one(self):
        filters = triangular_filterbank(26, NUM_BINS, SAMPLE_RATE, 4096)
        np.testing.assert_allclose(filters.max(axis=1), 1.0)

    def test_no_energy_outside_band(self):
        filters = triangular_filterbank(26, NUM_BINS, SAMPLE_RATE, 4096)
        low_bin = int(np.floor(125.0 * 4096 / SAMPLE_RATE + 0.5))

        assert np.all(filters[:, :low_bin] == 0.0)
        assert np.all(filters[:, 1921:] == 0.0)
