"""Signal features and their histograms used to fit the prior speech model."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .config import (
    BIN_SIZE_LRT,
    BIN_SIZE_SPEC_DIFF,
    BIN_SIZE_SPEC_FLAT,
    FFT_SIZE_BY_2_PLUS_1,
    LTR_FEATURE_THR,
)

HISTOGRAM_SIZE = 1000

_LRT_LIMIT = np.float32(HISTOGRAM_SIZE * BIN_SIZE_LRT)
_FLAT_LIMIT = np.float32(HISTOGRAM_SIZE * BIN_SIZE_SPEC_FLAT)
_DIFF_LIMIT = np.float32(HISTOGRAM_SIZE * BIN_SIZE_SPEC_DIFF)
_ONE_BY_BIN_LRT = np.float32(1.0 / BIN_SIZE_LRT)
_ONE_BY_BIN_FLAT = np.float32(1.0 / BIN_SIZE_SPEC_FLAT)
_ONE_BY_BIN_DIFF = np.float32(1.0 / BIN_SIZE_SPEC_DIFF)

_SPECTRAL_FEATURE_THR = 0.5


def _full_lrt() -> np.ndarray:
    return np.full(FFT_SIZE_BY_2_PLUS_1, LTR_FEATURE_THR, dtype=np.float32)


def _empty_histogram() -> np.ndarray:
    return np.zeros(HISTOGRAM_SIZE, dtype=np.int64)


@dataclass
class SignalModel:
    """Current values of the features that discriminate speech from noise."""

    lrt: float = LTR_FEATURE_THR
    spectral_diff: float = _SPECTRAL_FEATURE_THR
    spectral_flatness: float = _SPECTRAL_FEATURE_THR
    avg_log_lrt: np.ndarray = field(default_factory=_full_lrt)


@dataclass
class Histograms:
    """Counts of observed feature values over the feature-update window."""

    lrt: np.ndarray = field(default_factory=_empty_histogram)
    spectral_flatness: np.ndarray = field(default_factory=_empty_histogram)
    spectral_diff: np.ndarray = field(default_factory=_empty_histogram)

    def clear(self) -> None:
        """Zero every histogram."""
        self.lrt[:] = 0
        self.spectral_flatness[:] = 0
        self.spectral_diff[:] = 0

    def update(self, features: SignalModel) -> None:
        """Count the features' current values; out-of-range values are ignored."""
        lrt = np.float32(features.lrt)
        if 0 <= lrt < _LRT_LIMIT:
            self.lrt[int(_ONE_BY_BIN_LRT * lrt)] += 1

        flatness = np.float32(features.spectral_flatness)
        if 0 <= flatness < _FLAT_LIMIT:
            self.spectral_flatness[int(flatness * _ONE_BY_BIN_FLAT)] += 1

        diff = np.float32(features.spectral_diff)
        if 0 <= diff < _DIFF_LIMIT:
            self.spectral_diff[int(diff * _ONE_BY_BIN_DIFF)] += 1