"""Estimation of the speech/noise discriminating features of a channel."""

from __future__ import annotations

import numpy as np

from .config import FEATURE_UPDATE_WINDOW_SIZE, FFT_SIZE_BY_2_PLUS_1, LTR_FEATURE_THR
from .fast_math import exp_approx, log_approx
from .histograms import Histograms, SignalModel
from .prior_signal_model import PriorSignalModelEstimator

_ONE_BY_BINS = np.float32(1.0 / FFT_SIZE_BY_2_PLUS_1)
_EPS = np.float32(0.0001)
_ONE = np.float32(1.0)
_TWO = np.float32(2.0)
_HALF = np.float32(0.5)
_AVERAGING = np.float32(0.3)


def _spectrum(values, name: str) -> np.ndarray:
    data = np.asarray(values, dtype=np.float32)
    if data.shape != (FFT_SIZE_BY_2_PLUS_1,):
        raise ValueError(
            f"ns: {name} needs {FFT_SIZE_BY_2_PLUS_1} bins, got shape {data.shape}"
        )
    return data


def _sequential_sum(values: np.ndarray) -> np.float32:
    return np.add.accumulate(values, dtype=np.float32)[-1]


def compute_spectral_diff(
    conservative_noise_spectrum, signal_spectrum, signal_spectral_sum, diff_normalization
) -> np.float32:
    """Return the normalised spectral difference between signal and noise."""
    noise = _spectrum(conservative_noise_spectrum, "noise spectrum")
    signal = _spectrum(signal_spectrum, "signal spectrum")

    noise_average = _sequential_sum(noise) * _ONE_BY_BINS
    signal_average = np.float32(signal_spectral_sum) * _ONE_BY_BINS

    signal_diff = signal - signal_average
    noise_diff = noise - noise_average
    covariance = _sequential_sum(signal_diff * noise_diff) * _ONE_BY_BINS
    noise_variance = _sequential_sum(noise_diff * noise_diff) * _ONE_BY_BINS
    signal_variance = _sequential_sum(signal_diff * signal_diff) * _ONE_BY_BINS

    spec_diff = signal_variance - (covariance * covariance) / (noise_variance + _EPS)
    return np.float32(spec_diff / (np.float32(diff_normalization) + _EPS))


def update_spectral_flatness(signal_spectrum, signal_spectral_sum, spectral_flatness) -> np.float32:
    """Return the spectral flatness feature smoothed with the current spectrum."""
    spectrum = _spectrum(signal_spectrum, "signal spectrum")
    flatness = np.float32(spectral_flatness)

    if np.any(spectrum[1:] == 0):
        return np.float32(flatness - _AVERAGING * flatness)

    num = _sequential_sum(np.asarray(log_approx(spectrum[1:]), dtype=np.float32))
    denom = (np.float32(signal_spectral_sum) - spectrum[0]) * _ONE_BY_BINS
    num = num * _ONE_BY_BINS

    spec_tmp = np.float32(exp_approx(num)) / denom
    return np.float32(flatness + _AVERAGING * (spec_tmp - flatness))


def update_spectral_lrt(prior_snr, post_snr, avg_log_lrt) -> tuple[np.ndarray, np.float32]:
    """Return the smoothed per-bin log likelihood ratio and its mean."""
    prior = _spectrum(prior_snr, "prior SNR")
    post = _spectrum(post_snr, "posterior SNR")
    avg = _spectrum(avg_log_lrt, "average log LRT")

    tmp1 = _ONE + _TWO * prior
    tmp2 = _TWO * prior / (tmp1 + _EPS)
    bessel = (post + _ONE) * tmp2
    log_tmp1 = np.asarray(log_approx(tmp1), dtype=np.float32)
    new_avg = (avg + _HALF * (bessel - log_tmp1 - avg)).astype(np.float32)

    lrt = np.float32(_sequential_sum(new_avg) * _ONE_BY_BINS)
    return new_avg, lrt


class SignalModelEstimator:
    """Keeps the feature values, their histograms and the fitted prior model."""

    def __init__(self) -> None:
        self.diff_normalization = np.float32(0)
        self.signal_energy_sum = np.float32(0)
        self.histograms = Histograms()
        self.histogram_analysis_counter = FEATURE_UPDATE_WINDOW_SIZE
        self.prior_estimator = PriorSignalModelEstimator(LTR_FEATURE_THR)
        self.features = SignalModel()

    def adjust_normalization(self, num_analyzed_frames, signal_energy) -> None:
        """Fold one frame's energy into the running spectral-difference normaliser."""
        value = self.diff_normalization * np.float32(num_analyzed_frames)
        value = value + np.float32(signal_energy)
        self.diff_normalization = np.float32(value / np.float32(num_analyzed_frames + 1))

    def update(
        self,
        prior_snr,
        post_snr,
        conservative_noise_spectrum,
        signal_spectrum,
        signal_spectral_sum,
        signal_energy,
    ) -> None:
        """Update the features from one analysed frame."""
        features = self.features
        features.spectral_flatness = float(
            update_spectral_flatness(
                signal_spectrum, signal_spectral_sum, features.spectral_flatness
            )
        )

        spec_diff = compute_spectral_diff(
            conservative_noise_spectrum,
            signal_spectrum,
            signal_spectral_sum,
            self.diff_normalization,
        )
        current_diff = np.float32(features.spectral_diff)
        features.spectral_diff = float(current_diff + _AVERAGING * (spec_diff - current_diff))

        self.signal_energy_sum = np.float32(self.signal_energy_sum + np.float32(signal_energy))

        self.histogram_analysis_counter -= 1
        if self.histogram_analysis_counter > 0:
            self.histograms.update(features)
        else:
            self.prior_estimator.update(self.histograms)
            self.histograms.clear()
            self.histogram_analysis_counter = FEATURE_UPDATE_WINDOW_SIZE
            energy = self.signal_energy_sum / np.float32(FEATURE_UPDATE_WINDOW_SIZE)
            self.diff_normalization = np.float32(_HALF * (energy + self.diff_normalization))
            self.signal_energy_sum = np.float32(0)

        features.avg_log_lrt, lrt = update_spectral_lrt(prior_snr, post_snr, features.avg_log_lrt)
        features.lrt = float(lrt)