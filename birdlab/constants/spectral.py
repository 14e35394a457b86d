"""Spectral analysis constants for mel filterbanks and spectrograms."""

from __future__ import annotations

DEFAULT_N_MELS = 40
"""Mel bands in the classifier input."""

DEFAULT_MFCC_FILTERS = 26
"""Filterbank size used for MFCC extraction."""

MEL_LOW_HZ = 125.0
"""Lower filterbank band limit."""

MEL_HIGH_HZ = 7500.0
"""Upper filterbank band limit."""

# HTK mel formula constants (natural-log form)
HTK_MEL_FACTOR = 1127.0
"""HTK mel scale conversion factor: mel = 1127 * ln(1 + f / 700)."""

HTK_MEL_BASE = 700.0
"""HTK mel scale base frequency."""

# Fixed-point frontend parameters
FILTERBANK_BITS = 12
"""Filterbank weights are scaled by 2**FILTERBANK_BITS and rounded."""

LOG_SCALE_SHIFT = 6
"""Log energies are scaled by 2**LOG_SCALE_SHIFT."""

DEFAULT_AMIN = 1e-10
"""Floor applied before taking logarithms."""

DB_OFFSET = 80.0
"""Offset added to dB values before flooring at zero."""

NORMALIZE_EPS = 1e-8
"""Denominator guard for normalize()."""

__all__ = [
    "DEFAULT_N_MELS",
    "DEFAULT_MFCC_FILTERS",
    "MEL_LOW_HZ",
    "MEL_HIGH_HZ",
    "HTK_MEL_FACTOR",
    "HTK_MEL_BASE",
    "FILTERBANK_BITS",
    "LOG_SCALE_SHIFT",
    "DEFAULT_AMIN",
    "DB_OFFSET",
    "NORMALIZE_EPS",
]
