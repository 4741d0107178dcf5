"""Wiener filter gains of the noise suppressor."""

from __future__ import annotations

import numpy as np

from .config import (
    FFT_SIZE_BY_2_PLUS_1,
    LONG_STARTUP_PHASE_BLOCKS,
    SHORT_STARTUP_PHASE_BLOCKS,
    SuppressionParams,
)
from .fast_math import sqrt_approx

_ONE = np.float32(1.0)
_EPS = np.float32(0.0001)
_DD_WEIGHT = np.float32(0.98)
_DD_COMPLEMENT = np.float32(1.0 - 0.98)
_ONE_BY_SHORT = np.float32(1.0 / SHORT_STARTUP_PHASE_BLOCKS)
_B_LIM = np.float32(0.5)
_UPPER_SLOPE = np.float32(1.3)
_LOWER_SLOPE = np.float32(0.3)


def _spectrum(values, name: str) -> np.ndarray:
    data = np.asarray(values, dtype=np.float32)
    if data.shape != (FFT_SIZE_BY_2_PLUS_1,):
        raise ValueError(
            f"ns: {name} needs {FFT_SIZE_BY_2_PLUS_1} bins, got shape {data.shape}"
        )
    return data


def _clamp_gain(values: np.ndarray, minimum: np.float32) -> np.ndarray:
    values = np.where(values > 1, _ONE, values)
    return np.where(values < minimum, minimum, values).astype(np.float32)


class WienerFilter:
    """Per-bin suppression gains derived from a decision-directed SNR estimate."""

    def __init__(self, params: SuppressionParams) -> None:
        self.params = params
        self.spectrum_prev_process = np.zeros(FFT_SIZE_BY_2_PLUS_1, dtype=np.float32)
        self.initial_spectral_estimate = np.zeros(FFT_SIZE_BY_2_PLUS_1, dtype=np.float32)
        self.filter = np.ones(FFT_SIZE_BY_2_PLUS_1, dtype=np.float32)

    def update(
        self,
        num_analyzed_frames,
        noise_spectrum,
        prev_noise_spectrum,
        parametric_noise_spectrum,
        signal_spectrum,
    ) -> None:
        """Recompute the filter gains for one frame."""
        noise = _spectrum(noise_spectrum, "noise spectrum")
        prev_noise = _spectrum(prev_noise_spectrum, "previous noise spectrum")
        parametric = _spectrum(parametric_noise_spectrum, "parametric noise spectrum")
        signal = _spectrum(signal_spectrum, "signal spectrum")
        over = np.float32(self.params.over_subtraction_factor)
        minimum = np.float32(self.params.minimum_attenuating_gain)

        prev_tsa = self.spectrum_prev_process / (prev_noise + _EPS) * self.filter
        current_tsa = np.where(signal > noise, signal / (noise + _EPS) - _ONE, 0).astype(
            np.float32
        )
        snr_prior = _DD_WEIGHT * prev_tsa + _DD_COMPLEMENT * current_tsa
        self.filter = _clamp_gain(snr_prior / (over + snr_prior), minimum)

        if num_analyzed_frames < SHORT_STARTUP_PHASE_BLOCKS:
            self.initial_spectral_estimate = (self.initial_spectral_estimate + signal).astype(
                np.float32
            )
            initial = self.initial_spectral_estimate
            filter_initial = (initial - over * parametric) / (initial + _EPS)
            filter_initial = _clamp_gain(filter_initial, minimum)
            filter_initial = filter_initial * np.float32(
                SHORT_STARTUP_PHASE_BLOCKS - int(num_analyzed_frames)
            )
            blended = self.filter * np.float32(num_analyzed_frames) + filter_initial
            self.filter = (blended * _ONE_BY_SHORT).astype(np.float32)

        self.spectrum_prev_process = signal.copy()

    def compute_overall_scaling_factor(
        self, num_analyzed_frames, prior_speech_prob, energy_before, energy_after
    ) -> np.float32:
        """Return the overall gain correction applied after synthesis."""
        if (
            not self.params.use_attenuation_adjustment
            or num_analyzed_frames <= LONG_STARTUP_PHASE_BLOCKS
        ):
            return _ONE

        gain = np.float32(
            sqrt_approx(np.float32(energy_after) / (np.float32(energy_before) + _ONE))
        )

        scale_factor1 = _ONE
        if gain > _B_LIM:
            scale_factor1 = _ONE + _UPPER_SLOPE * (gain - _B_LIM)
            if gain * scale_factor1 > _ONE:
                scale_factor1 = _ONE / gain

        scale_factor2 = _ONE
        if gain < _B_LIM:
            minimum = np.float32(self.params.minimum_attenuating_gain)
            if gain < minimum:
                gain = minimum
            scale_factor2 = _ONE - _LOWER_SLOPE * (_B_LIM - gain)

        p = np.float32(prior_speech_prob)
        return np.float32(p * scale_factor1 + (_ONE - p) * scale_factor2)