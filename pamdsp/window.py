"""Analysis and synthesis windows for short-time spectral processing."""

from __future__ import annotations

import numpy as np


def hann(n: int) -> np.ndarray:
    """Return an ``n``-sample symmetric Hann window."""
    if n < 0:
        raise ValueError("window: n must not be negative")
    if n == 1:
        return np.ones(1, dtype=np.float32)
    i = np.arange(n, dtype=np.float64)
    return (0.5 - 0.5 * np.cos(2 * np.pi * i / (n - 1))).astype(np.float32)


def sqrt_hann(n: int) -> np.ndarray:
    """Return the square root of an ``n``-sample Hann window."""
    w = hann(n)
    return np.sqrt(np.clip(w.astype(np.float64), 0.0, None)).astype(np.float32)