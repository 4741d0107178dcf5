"""Noise spectrum estimate from running log-domain quantiles."""

from __future__ import annotations

import math

import numpy as np

from .config import FFT_SIZE_BY_2_PLUS_1, LONG_STARTUP_PHASE_BLOCKS
from .fast_math import exp_approx, log_approx

SIMULT = 3

_DELTA = np.float32(40.0)
_UP_STEP = np.float32(0.25)
_DOWN_STEP = np.float32(0.75)
_WIDTH = np.float32(0.01)
_ONE_BY_WIDTH_PLUS_2 = np.float32(1.0) / (np.float32(2.0) * _WIDTH)


class QuantileNoiseEstimator:
    """Tracks several staggered quantile estimates of the log spectrum."""

    def __init__(self) -> None:
        self.density = np.full((SIMULT, FFT_SIZE_BY_2_PLUS_1), 0.3, dtype=np.float32)
        self.log_quantile = np.full((SIMULT, FFT_SIZE_BY_2_PLUS_1), 8.0, dtype=np.float32)
        self.quantile = np.zeros(FFT_SIZE_BY_2_PLUS_1, dtype=np.float32)
        one_by_simult = 1.0 / SIMULT
        self.counter = [
            math.floor(float(LONG_STARTUP_PHASE_BLOCKS) * (s + 1) * one_by_simult)
            for s in range(SIMULT)
        ]
        self.num_updates = 1

    def estimate(self, signal_spectrum) -> np.ndarray:
        """Update the quantiles with one magnitude spectrum and return the noise estimate."""
        spectrum = np.asarray(signal_spectrum, dtype=np.float32)
        if spectrum.shape != (FFT_SIZE_BY_2_PLUS_1,):
            raise ValueError(
                f"ns: spectrum needs {FFT_SIZE_BY_2_PLUS_1} bins, got shape {spectrum.shape}"
            )
        log_spectrum = log_approx(spectrum)

        row_to_return = None
        for s, (density, log_quantile) in enumerate(zip(self.density, self.log_quantile)):
            counter = self.counter[s]
            one_by_counter_plus_1 = np.float32(1.0) / np.float32(counter + 1)

            with np.errstate(divide="ignore"):
                delta = np.where(density > 1.0, _DELTA / density, _DELTA).astype(np.float32)
            multiplier = delta * one_by_counter_plus_1
            log_quantile[:] = np.where(
                log_spectrum > log_quantile,
                log_quantile + _UP_STEP * multiplier,
                log_quantile - _DOWN_STEP * multiplier,
            )

            near = np.abs(log_spectrum - log_quantile) < _WIDTH
            updated = (np.float32(counter) * density + _ONE_BY_WIDTH_PLUS_2) * one_by_counter_plus_1
            density[:] = np.where(near, updated, density)

            if counter >= LONG_STARTUP_PHASE_BLOCKS:
                counter = 0
                if self.num_updates >= LONG_STARTUP_PHASE_BLOCKS:
                    row_to_return = s
            self.counter[s] = counter + 1

        if self.num_updates < LONG_STARTUP_PHASE_BLOCKS:
            row_to_return = SIMULT - 1
            self.num_updates += 1

        if row_to_return is not None:
            self.quantile = np.asarray(
                exp_approx(self.log_quantile[row_to_return]), dtype=np.float32
            )

        return self.quantile.copy()