import numpy as np
import pytest

from pamdsp.ns.histograms import Histograms
from pamdsp.ns.prior_signal_model import (
    PriorSignalModelEstimator,
    find_first_of_two_largest_peaks,
    update_lrt,
)


def _hist(**bins):
    h = np.zeros(1000, dtype=np.int64)
    for index, count in bins.items():
        h[int(index.lstrip("b"))] = count
    return h


def test_peaks_of_empty_histogram():
    pos, weight = find_first_of_two_largest_peaks(0.05, _hist())
    assert pos == 0.0 and weight == 0


def test_single_peak_lies_in_its_bin():
    pos, weight = find_first_of_two_largest_peaks(0.05, _hist(b10=300))
    assert weight == 300
    assert 10 * 0.05 < pos < 11 * 0.05


def test_adjacent_peaks_merge():
    pos10, _ = find_first_of_two_largest_peaks(0.05, _hist(b10=300))
    pos11, _ = find_first_of_two_largest_peaks(0.05, _hist(b11=300))
    pos, weight = find_first_of_two_largest_peaks(0.05, _hist(b10=300, b11=200))
    assert weight == 500
    assert pos10 < pos < pos11


def test_distant_peaks_do_not_merge():
    single_pos, _ = find_first_of_two_largest_peaks(0.05, _hist(b10=300))
    pos, weight = find_first_of_two_largest_peaks(0.05, _hist(b10=300, b50=200))
    assert weight == 300
    assert pos == single_pos


def test_small_secondary_peak_does_not_merge():
    _, weight = find_first_of_two_largest_peaks(0.05, _hist(b10=300, b11=100))
    assert weight == 300


def test_update_lrt_empty_histogram_has_low_fluctuations():
    lrt, low = update_lrt(_hist())
    assert low is True
    assert lrt == pytest.approx(1.0)


def test_update_lrt_concentrated_histogram_has_low_fluctuations():
    lrt, low = update_lrt(_hist(b3=500))
    assert low is True
    assert lrt == pytest.approx(1.0)


def test_update_lrt_spread_histogram():
    lrt, low = update_lrt(_hist(b2=250, b500=250))
    assert low is False
    assert lrt == pytest.approx(0.3, rel=1e-5)


def test_update_lrt_clamps_to_bounds():
    high, _ = update_lrt(_hist(b9=250, b500=250))
    low, _ = update_lrt(_hist(b0=250, b500=250))
    assert high == pytest.approx(1.0)
    assert low == pytest.approx(0.2)


def test_estimator_initial_model():
    est = PriorSignalModelEstimator(0.5)
    model = est.prior_model
    assert model.lrt == 0.5
    assert model.lrt_weighting == 1.0
    assert model.flatness_weighting == 0.0 and model.difference_weighting == 0.0


def test_estimator_update_with_empty_histograms_uses_lrt_only():
    est = PriorSignalModelEstimator(0.5)
    est.update(Histograms())
    model = est.prior_model
    assert model.lrt == pytest.approx(1.0)
    assert model.lrt_weighting == pytest.approx(1.0)
    assert model.flatness_weighting == 0.0 and model.difference_weighting == 0.0
    assert model.template_diff_threshold == pytest.approx(0.16)


def test_estimator_update_with_all_features():
    h = Histograms()
    h.lrt[:] = _hist(b2=250, b500=250)
    h.spectral_flatness[16] = 400
    h.spectral_diff[3] = 400
    est = PriorSignalModelEstimator(0.5)
    est.update(h)
    model = est.prior_model
    weights = [model.lrt_weighting, model.flatness_weighting, model.difference_weighting]
    assert weights[0] == weights[1] == weights[2]
    assert sum(weights) == pytest.approx(1.0, rel=1e-6)
    flat_pos, _ = find_first_of_two_largest_peaks(0.05, h.spectral_flatness)
    assert 0.1 <= model.flatness_threshold < flat_pos
    assert 0.16 <= model.template_diff_threshold <= 1.0