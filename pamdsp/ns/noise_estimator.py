"""Noise spectrum estimation combining quantile tracking and a startup noise model."""

from __future__ import annotations

import math

import numpy as np

from .config import (
    FFT_SIZE_BY_2_PLUS_1,
    SHORT_STARTUP_PHASE_BLOCKS,
    SuppressionParams,
)
from .fast_math import exp_approx, log_approx, pow_approx
from .quantile_noise_estimator import QuantileNoiseEstimator

# ln(i) for i in 0..128; the first five entries are never used.
_LOG_TABLE = np.array(
    [
        0, 0, 0, 0, 0, 1.609438, 1.791759,
        1.945910, 2.079442, 2.197225, math.log(10), 2.397895, 2.484907,
        2.564949,
        2.639057, 2.708050, 2.772589, 2.833213, 2.890372, 2.944439, 2.995732,
        3.044522, 3.091043, 3.135494, 3.178054, 3.218876, 3.258097, 3.295837,
        3.332205, 3.367296, 3.401197, 3.433987, 3.465736, 3.496507, 3.526361,
        3.555348, 3.583519, 3.610918, 3.637586, 3.663562, 3.688879, 3.713572,
        3.737669, 3.761200, 3.784190, 3.806663, 3.828641, 3.850147, 3.871201,
        3.891820, 3.912023, 3.931826, 3.951244, 3.970292, 3.988984, 4.007333,
        4.025352, 4.043051, 4.060443, 4.077538, 4.094345, 4.110874, 4.127134,
        4.143135, 4.158883, 4.174387, 4.189655, 4.204693, 4.219508, 4.234107,
        4.248495, 4.262680, 4.276666, 4.290460, 4.304065, 4.317488, 4.330733,
        4.343805, 4.356709, 4.369448, 4.382027, 4.394449, 4.406719, 4.418841,
        4.430817, 4.442651, 4.454347, 4.465908, 4.477337, 4.488636, 4.499810,
        4.510859, 4.521789, 4.532599, 4.543295, 4.553877, 4.564348, 4.574711,
        4.584968, 4.595119, 4.605170, 4.615121, 4.624973, 4.634729, 4.644391,
        4.653960, 4.663439, 4.672829, 4.682131, 4.691348, 4.700480, 4.709530,
        4.718499, 4.727388, 4.736198, 4.744932, 4.753591, 4.762174, 4.770685,
        4.779124, 4.787492, 4.795791, 4.804021, 4.812184, 4.820282, 4.828314,
        4.836282, 4.844187, 4.852030,
    ],
    dtype=np.float32,
)

_START_BAND = 5
_NUM_BANDS = np.float32(FFT_SIZE_BY_2_PLUS_1 - _START_BAND)
_ONE_BY_BINS = np.float32(1.0 / FFT_SIZE_BY_2_PLUS_1)
_ONE_BY_SHORT = np.float32(1.0 / SHORT_STARTUP_PHASE_BLOCKS)
_USE_BAND = np.maximum(
    np.arange(FFT_SIZE_BY_2_PLUS_1, dtype=np.float32), np.float32(_START_BAND)
)
_ZERO = np.float32(0)
_ONE = np.float32(1)
_NOISE_UPDATE = np.float32(0.9)
_SPEECH_GAMMA = np.float32(0.99)
_PROB_RANGE = np.float32(0.2)
_CONSERVATIVE_STEP = np.float32(0.05)


def _spectrum(values, name: str) -> np.ndarray:
    data = np.asarray(values, dtype=np.float32)
    if data.shape != (FFT_SIZE_BY_2_PLUS_1,):
        raise ValueError(
            f"ns: {name} needs {FFT_SIZE_BY_2_PLUS_1} bins, got shape {data.shape}"
        )
    return data


def _sequential_sum(values: np.ndarray) -> np.float32:
    return np.add.accumulate(values, dtype=np.float32)[-1]


class NoiseEstimator:
    """Tracks the noise spectrum of one channel."""

    def __init__(self, params: SuppressionParams) -> None:
        self.params = params
        self.white_noise_level = _ZERO
        self.pink_noise_num = _ZERO
        self.pink_noise_exp = _ZERO
        self.prev_noise_spectrum = np.zeros(FFT_SIZE_BY_2_PLUS_1, dtype=np.float32)
        self.conservative_noise_spectrum = np.zeros(FFT_SIZE_BY_2_PLUS_1, dtype=np.float32)
        self.parametric_noise_spectrum = np.zeros(FFT_SIZE_BY_2_PLUS_1, dtype=np.float32)
        self.noise_spectrum = np.zeros(FFT_SIZE_BY_2_PLUS_1, dtype=np.float32)
        self.quantile = QuantileNoiseEstimator()

    def prepare_analysis(self) -> None:
        """Remember the current noise spectrum as the previous one."""
        self.prev_noise_spectrum = self.noise_spectrum.copy()

    def pre_update(self, num_analyzed_frames, signal_spectrum, signal_spectral_sum) -> None:
        """Update the estimate before the speech probability is known."""
        spectrum = _spectrum(signal_spectrum, "signal spectrum")
        self.noise_spectrum = self.quantile.estimate(spectrum)

        if num_analyzed_frames >= SHORT_STARTUP_PHASE_BLOCKS:
            return

        log_i = _LOG_TABLE[_START_BAND:]
        log_magn = np.asarray(log_approx(spectrum[_START_BAND:]), dtype=np.float32)
        sum_log_i = _sequential_sum(log_i)
        sum_log_i_sq = _sequential_sum(log_i * log_i)
        sum_log_magn = _sequential_sum(log_magn)
        sum_log_i_log_magn = _sequential_sum(log_i * log_magn)

        self.white_noise_level = self.white_noise_level + (
            np.float32(signal_spectral_sum)
            * _ONE_BY_BINS
            * np.float32(self.params.over_subtraction_factor)
        )

        denom = sum_log_i_sq * _NUM_BANDS - sum_log_i * sum_log_i
        num = sum_log_i_sq * sum_log_magn - sum_log_i * sum_log_i_log_magn
        adjustment = num / denom
        if adjustment < 0:
            adjustment = _ZERO
        self.pink_noise_num = self.pink_noise_num + adjustment

        num = sum_log_i * sum_log_magn - _NUM_BANDS * sum_log_i_log_magn
        adjustment = num / denom
        if adjustment < 0:
            adjustment = _ZERO
        if adjustment > 1:
            adjustment = _ONE
        self.pink_noise_exp = self.pink_noise_exp + adjustment

        frames = np.float32(num_analyzed_frames)
        one_by_frames_plus_1 = _ONE / (frames + _ONE)

        if self.pink_noise_exp == 0:
            self.parametric_noise_spectrum = np.full(
                FFT_SIZE_BY_2_PLUS_1, self.white_noise_level, dtype=np.float32
            )
        else:
            parametric_num = np.float32(exp_approx(self.pink_noise_num * one_by_frames_plus_1))
            parametric_num = parametric_num * (frames + _ONE)
            parametric_exp = self.pink_noise_exp * one_by_frames_plus_1
            parametric_denom = np.asarray(pow_approx(_USE_BAND, parametric_exp), dtype=np.float32)
            self.parametric_noise_spectrum = (parametric_num / parametric_denom).astype(np.float32)

        noise = self.noise_spectrum * frames
        tmp = self.parametric_noise_spectrum * np.float32(
            SHORT_STARTUP_PHASE_BLOCKS - int(num_analyzed_frames)
        )
        noise = noise + tmp * one_by_frames_plus_1
        self.noise_spectrum = (noise * _ONE_BY_SHORT).astype(np.float32)

    def post_update(self, speech_prob, signal_spectrum) -> None:
        """Update the estimate once the per-bin speech probability is known."""
        prob_speech = _spectrum(speech_prob, "speech probability")
        spectrum = _spectrum(signal_spectrum, "signal spectrum")
        prev = self.prev_noise_spectrum
        prob_non_speech = _ONE - prob_speech

        gamma_new = np.where(prob_speech > _PROB_RANGE, _SPEECH_GAMMA, _NOISE_UPDATE).astype(
            np.float32
        )
        # Each bin uses the smoothing factor chosen at the previous bin.
        gamma_old = np.concatenate(([_NOISE_UPDATE], gamma_new[:-1])).astype(np.float32)

        mixed = prob_non_speech * spectrum + prob_speech * prev
        update_old = gamma_old * prev + (_ONE - gamma_old) * mixed
        update_new = gamma_new * prev + (_ONE - gamma_new) * mixed

        conservative = self.conservative_noise_spectrum
        self.conservative_noise_spectrum = np.where(
            prob_speech < _PROB_RANGE,
            conservative + _CONSERVATIVE_STEP * (spectrum - conservative),
            conservative,
        ).astype(np.float32)

        self.noise_spectrum = np.where(
            gamma_new == gamma_old,
            update_old,
            np.where(update_old < update_new, update_old, update_new),
        ).astype(np.float32)