"""Prior speech model fitted from the feature histograms."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .config import (
    BIN_SIZE_LRT,
    BIN_SIZE_SPEC_DIFF,
    BIN_SIZE_SPEC_FLAT,
    FEATURE_UPDATE_WINDOW_SIZE,
    LTR_FEATURE_THR,
)
from .histograms import Histograms

_F0 = np.float32(0)
_HALF = np.float32(0.5)
_MAX_LRT = np.float32(1.0)
_MIN_LRT = np.float32(0.2)
_MIN_PEAK_WEIGHT = np.float32(0.3 * 500)


@dataclass
class PriorSignalModel:
    """Thresholds and weights of the features in the speech prior."""

    lrt: float = LTR_FEATURE_THR
    flatness_threshold: float = 0.5
    template_diff_threshold: float = 0.5
    lrt_weighting: float = 1.0
    flatness_weighting: float = 0.0
    difference_weighting: float = 0.0


def _clamp(value, low, high):
    return min(max(value, np.float32(low)), np.float32(high))


def _sequential_sum(values: np.ndarray) -> np.float32:
    # Left-to-right float32 accumulation.
    return np.add.accumulate(values, dtype=np.float32)[-1]


def _bin_mids(count: int, bin_size) -> np.ndarray:
    return (np.arange(count, dtype=np.float32) + _HALF) * np.float32(bin_size)


def find_first_of_two_largest_peaks(bin_size, histogram) -> tuple[np.float32, int]:
    """Return (position, weight) of the largest peak, merged with a close runner-up."""
    bin_size = np.float32(bin_size)
    peak_value = peak_weight = 0
    secondary_value = secondary_weight = 0
    peak_pos = secondary_pos = _F0
    for i, count in enumerate(np.asarray(histogram).tolist()):
        bin_mid = (np.float32(i) + _HALF) * bin_size
        if count > peak_value:
            secondary_value, secondary_weight, secondary_pos = peak_value, peak_weight, peak_pos
            peak_value = peak_weight = count
            peak_pos = bin_mid
        elif count > secondary_value:
            secondary_value = secondary_weight = count
            secondary_pos = bin_mid

    delta = abs(secondary_pos - peak_pos)
    if delta < np.float32(2) * bin_size and np.float32(secondary_weight) > _HALF * np.float32(
        peak_weight
    ):
        peak_weight += secondary_weight
        peak_pos = _HALF * (peak_pos + secondary_pos)
    return np.float32(peak_pos), peak_weight


def update_lrt(lrt_histogram) -> tuple[np.float32, bool]:
    """Return the prior LRT threshold and whether the LRT fluctuates little."""
    counts = np.asarray(lrt_histogram).astype(np.float32)
    mids = _bin_mids(len(counts), BIN_SIZE_LRT)

    head = counts[:10]
    average = _sequential_sum(head * mids[:10])
    count = int(np.asarray(lrt_histogram)[:10].sum())
    if count > 0:
        average = average / np.float32(count)

    one_by_window = np.float32(1.0 / FEATURE_UPDATE_WINDOW_SIZE)
    average_squared = _sequential_sum(counts * mids * mids) * one_by_window
    average_compl = _sequential_sum(counts * mids) * one_by_window

    low_fluctuations = bool(average_squared - average * average_compl < np.float32(0.05))
    if low_fluctuations:
        return _MAX_LRT, True
    return _clamp(np.float32(1.2) * average, _MIN_LRT, _MAX_LRT), False


class PriorSignalModelEstimator:
    """Refits the prior speech model from a window of feature histograms."""

    def __init__(self, lrt_initial) -> None:
        self.prior_model = PriorSignalModel(lrt=float(lrt_initial))

    def update(self, histograms: Histograms) -> None:
        """Refit the prior model from ``histograms``."""
        model = self.prior_model
        lrt, low_lrt_fluctuations = update_lrt(histograms.lrt)
        model.lrt = float(lrt)

        flat_pos, flat_weight = find_first_of_two_largest_peaks(
            BIN_SIZE_SPEC_FLAT, histograms.spectral_flatness
        )
        diff_pos, diff_weight = find_first_of_two_largest_peaks(
            BIN_SIZE_SPEC_DIFF, histograms.spectral_diff
        )

        use_spec_flat = not (
            np.float32(flat_weight) < _MIN_PEAK_WEIGHT or flat_pos < np.float32(0.6)
        )
        use_spec_diff = not (np.float32(diff_weight) < _MIN_PEAK_WEIGHT or low_lrt_fluctuations)

        model.template_diff_threshold = float(_clamp(np.float32(1.2) * diff_pos, 0.16, 1.0))

        one_by_feature_sum = np.float32(1.0) / np.float32(
            1 + int(use_spec_flat) + int(use_spec_diff)
        )
        model.lrt_weighting = float(one_by_feature_sum)

        if use_spec_flat:
            model.flatness_threshold = float(_clamp(np.float32(0.9) * flat_pos, 0.1, 0.95))
            model.flatness_weighting = float(one_by_feature_sum)
        else:
            model.flatness_weighting = 0.0

        model.difference_weighting = float(one_by_feature_sum) if use_spec_diff else 0.0