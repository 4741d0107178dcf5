"""Analysis/synthesis window and FFT for the 160/256 noise-suppression filter bank."""

from __future__ import annotations

import numpy as np

from ..fft import FFTPlan
from .config import FFT_SIZE

_RISE_LENGTH = 96

# The rising half is a quarter-period sine; samples 96..160 are flat at 1.0
# and the falling half mirrors the rise.
_WINDOW_RISE = np.sin(
    np.pi * np.arange(_RISE_LENGTH, dtype=np.float64) / (2 * _RISE_LENGTH)
).astype(np.float32)

_FULL_WINDOW = np.ones(FFT_SIZE, dtype=np.float32)
_FULL_WINDOW[:_RISE_LENGTH] = _WINDOW_RISE
_FULL_WINDOW[161:] = _WINDOW_RISE[_RISE_LENGTH - 1 : 0 : -1]


def apply_filter_bank_window(x) -> np.ndarray:
    """Window a 256-sample frame and return it.

    A float32 array is windowed in place; other inputs are copied first.
    """
    data = np.asarray(x, dtype=np.float32)
    if data.shape != (FFT_SIZE,):
        raise ValueError(f"ns: window needs {FFT_SIZE} samples, got shape {data.shape}")
    data *= _FULL_WINDOW
    return data


class NsFft:
    """Real FFT of the filter-bank frame size with a half-spectrum interface."""

    def __init__(self) -> None:
        self._plan = FFTPlan(FFT_SIZE)

    def forward(self, time_data) -> tuple[np.ndarray, np.ndarray]:
        """Return the real and imaginary half spectrum (129 bins each)."""
        return self._plan.forward(time_data)

    def inverse(self, real, imag) -> np.ndarray:
        """Return the 256-sample frame rebuilt from a half spectrum."""
        return self._plan.inverse(real, imag)