"""Per-bin speech presence probability."""

from __future__ import annotations

import math

import numpy as np

from .config import FFT_SIZE_BY_2_PLUS_1, LONG_STARTUP_PHASE_BLOCKS
from .fast_math import exp_approx
from .signal_model_estimator import SignalModelEstimator

_ONE = np.float32(1.0)
_HALF = np.float32(0.5)
_WIDTH_PRIOR_0 = np.float32(4.0)
_WIDTH_PRIOR_1 = np.float32(2.0) * _WIDTH_PRIOR_0
_PRIOR_STEP = np.float32(0.1)
_MIN_PRIOR = np.float32(0.01)
_EPS = np.float32(0.0001)


def _tanh(x) -> np.float32:
    return np.float32(math.tanh(float(x)))


class SpeechProbabilityEstimator:
    """Combines the signal features into a speech probability for every bin."""

    def __init__(self) -> None:
        self.model_estimator = SignalModelEstimator()
        self.prior_speech_prob = np.float32(0.5)
        self.speech_probability = np.zeros(FFT_SIZE_BY_2_PLUS_1, dtype=np.float32)

    def update(
        self,
        num_analyzed_frames,
        prior_snr,
        post_snr,
        conservative_noise_spectrum,
        signal_spectrum,
        signal_spectral_sum,
        signal_energy,
    ) -> None:
        """Update the features and the speech probability from one frame."""
        if num_analyzed_frames < LONG_STARTUP_PHASE_BLOCKS:
            self.model_estimator.adjust_normalization(num_analyzed_frames, signal_energy)
        self.model_estimator.update(
            prior_snr,
            post_snr,
            conservative_noise_spectrum,
            signal_spectrum,
            signal_spectral_sum,
            signal_energy,
        )

        model = self.model_estimator.features
        prior = self.model_estimator.prior_estimator.prior_model
        lrt = np.float32(model.lrt)
        flatness = np.float32(model.spectral_flatness)
        diff = np.float32(model.spectral_diff)
        prior_lrt = np.float32(prior.lrt)
        flat_thr = np.float32(prior.flatness_threshold)
        diff_thr = np.float32(prior.template_diff_threshold)

        width = _WIDTH_PRIOR_1 if lrt < prior_lrt else _WIDTH_PRIOR_0
        ind0 = _HALF * (_tanh(width * (lrt - prior_lrt)) + _ONE)

        width = _WIDTH_PRIOR_1 if flatness > flat_thr else _WIDTH_PRIOR_0
        ind1 = _HALF * (_tanh(width * (flat_thr - flatness)) + _ONE)

        width = _WIDTH_PRIOR_1 if diff < diff_thr else _WIDTH_PRIOR_0
        ind2 = _HALF * (_tanh(width * (diff - diff_thr)) + _ONE)

        ind_prior = (
            np.float32(prior.lrt_weighting) * ind0
            + np.float32(prior.flatness_weighting) * ind1
            + np.float32(prior.difference_weighting) * ind2
        )

        p = self.prior_speech_prob + _PRIOR_STEP * (ind_prior - self.prior_speech_prob)
        if p > 1:
            p = _ONE
        if p < _MIN_PRIOR:
            p = _MIN_PRIOR
        self.prior_speech_prob = np.float32(p)

        gain_prior = (_ONE - self.prior_speech_prob) / (self.prior_speech_prob + _EPS)
        inv_lrt = np.asarray(exp_approx(-model.avg_log_lrt), dtype=np.float32)
        self.speech_probability = (_ONE / (_ONE + gain_prior * inv_lrt)).astype(np.float32)