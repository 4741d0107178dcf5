import numpy as np
import pytest

from pamdsp.ns.config import (
    FFT_SIZE_BY_2_PLUS_1 as N,
    SuppressionLevel,
    suppression_params_for,
)
from pamdsp.ns.noise_estimator import NoiseEstimator
from pamdsp.ns.quantile_noise_estimator import QuantileNoiseEstimator


def _estimator(level=SuppressionLevel.LEVEL_12DB):
    return NoiseEstimator(suppression_params_for(level))


def _spectrum(seed):
    rng = np.random.default_rng(seed)
    return (rng.random(N) * 100 + 1).astype(np.float32)


def test_prepare_analysis_snapshots_noise_spectrum():
    est = _estimator()
    spec = _spectrum(1)
    est.pre_update(0, spec, float(spec.sum()))
    est.prepare_analysis()
    snapshot = est.prev_noise_spectrum.copy()
    np.testing.assert_array_equal(snapshot, est.noise_spectrum)
    spec2 = _spectrum(2) * 10
    est.pre_update(1, spec2, float(spec2.sum()))
    np.testing.assert_array_equal(est.prev_noise_spectrum, snapshot)
    assert not np.array_equal(est.noise_spectrum, snapshot)


def test_startup_noise_spectrum_is_positive_and_finite():
    est = _estimator()
    for frame in range(10):
        spec = _spectrum(frame)
        est.prepare_analysis()
        est.pre_update(frame, spec, float(spec.sum()))
        assert int(np.count_nonzero(np.isfinite(est.noise_spectrum))) == N
        assert float(est.noise_spectrum.min()) > 0.0
        assert int(np.count_nonzero(np.isfinite(est.parametric_noise_spectrum))) == N


def test_white_noise_level_scales_with_over_subtraction():
    plain = _estimator(SuppressionLevel.LEVEL_12DB)
    strong = _estimator(SuppressionLevel.LEVEL_21DB)
    spec = _spectrum(3)
    for est in (plain, strong):
        est.pre_update(0, spec, float(spec.sum()))
    assert float(plain.white_noise_level) > 0
    ratio = float(strong.white_noise_level) / float(plain.white_noise_level)
    assert ratio == pytest.approx(1.25, rel=1e-5)


def test_after_startup_noise_equals_quantile_estimate():
    est = _estimator()
    reference = QuantileNoiseEstimator()
    for frame in range(60):
        spec = _spectrum(frame)
        est.prepare_analysis()
        est.pre_update(frame, spec, float(spec.sum()))
        expected = reference.estimate(spec)
        if frame >= 50:
            np.testing.assert_array_equal(est.noise_spectrum, expected)


def test_full_speech_probability_keeps_previous_noise():
    est = _estimator()
    spec = _spectrum(4)
    est.pre_update(0, spec, float(spec.sum()))
    est.prepare_analysis()
    prev = est.prev_noise_spectrum.copy()
    est.post_update(np.ones(N, dtype=np.float32), _spectrum(5) * 3)
    np.testing.assert_allclose(est.noise_spectrum, prev, rtol=1e-5)
    assert not est.conservative_noise_spectrum.any()


def test_no_speech_moves_noise_towards_signal():
    est = _estimator()
    spec = _spectrum(6)
    est.pre_update(0, spec, float(spec.sum()))
    est.prepare_analysis()
    prev = est.prev_noise_spectrum.copy()
    signal = _spectrum(7) * 5
    est.post_update(np.zeros(N, dtype=np.float32), signal)
    low = np.minimum(prev, signal)
    high = np.maximum(prev, signal)
    assert float((est.noise_spectrum - low * (1 - 1e-5)).min()) >= 0.0
    assert float((high * (1 + 1e-5) - est.noise_spectrum).min()) >= 0.0
    assert float(est.conservative_noise_spectrum.min()) > 0.0
    assert float((signal - est.conservative_noise_spectrum).min()) > 0.0


def test_bad_shapes_raise():
    est = _estimator()
    with pytest.raises(ValueError):
        est.pre_update(0, np.ones(10), 10.0)
    with pytest.raises(ValueError):
        est.post_update(np.zeros(10), np.ones(N))