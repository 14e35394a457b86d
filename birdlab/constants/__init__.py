"""Constants module for birdlab.

This module centralizes magic numbers and configuration values
used throughout the codebase.

Submodules:
    sample_rates: Audio sample rate constants
    audio_processing: STFT, clip and quantization constants
    spectral: Mel filterbank and spectrogram constants
    paths: Model artifact locations
"""

from __future__ import annotations

from birdlab.constants.audio_processing import *
from birdlab.constants.paths import *
from birdlab.constants.sample_rates import *
from birdlab.constants.spectral import *

__all__ = [
    # Sample rates
    "TARGET_SAMPLE_RATE",
    "DEFAULT_RECORDING_RATE",
    # Audio processing
    "DEFAULT_WINDOW_SIZE",
    "DEFAULT_HOP_SIZE",
    "CLIP_DURATION_MS",
    "TARGET_FRAMES",
    "INT16_SCALE",
    "DEFAULT_BLOCKSIZE",
    # Spectral
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
    # Paths
    "CACHE_DIR",
    "MODELS_DIR",
    "MODEL_CONFIG_FILENAME",
    "MODEL_WEIGHTS_FILENAME",
]
