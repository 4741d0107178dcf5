"""Radix-2 real FFTs of a fixed power-of-two length, in single precision."""

from __future__ import annotations

import math

import numpy as np


class FFTPlan:
    """Forward and inverse real-input FFTs of a fixed length ``n``."""

    def __init__(self, n: int) -> None:
        if n <= 0 or n & (n - 1):
            raise ValueError("fft: n must be a positive power of two")
        self._n = n
        self._log_n = n.bit_length() - 1
        self._bit_rev = np.array(
            [_reverse_bits(i, self._log_n) for i in range(n)], dtype=np.intp
        )
        angles = -2 * math.pi * np.arange(n // 2, dtype=np.float64) / n
        twiddles = np.empty(n // 2, dtype=np.complex64)
        twiddles.real = np.cos(angles).astype(np.float32)
        twiddles.imag = np.sin(angles).astype(np.float32)
        self._twiddles = twiddles
        self._inverse_twiddles = np.conj(twiddles)

    @property
    def size(self) -> int:
        """The transform length."""
        return self._n

    def forward(self, time) -> tuple[np.ndarray, np.ndarray]:
        """Return the real and imaginary half spectrum (``n/2+1`` bins each)."""
        n = self._n
        samples = np.asarray(time, dtype=np.float32)
        if samples.shape != (n,):
            raise ValueError("fft: time length mismatch")
        buf = np.zeros(n, dtype=np.complex64)
        buf.real[self._bit_rev] = samples
        self._butterflies(buf, self._twiddles)
        half = buf[: n // 2 + 1]
        return half.real.astype(np.float32), half.imag.astype(np.float32)

    def inverse(self, real, imag) -> np.ndarray:
        """Return ``n`` time samples from a half spectrum, scaled by ``1/n``."""
        n = self._n
        re = np.asarray(real, dtype=np.float32)
        im = np.asarray(imag, dtype=np.float32)
        if re.shape != (n // 2 + 1,) or im.shape != (n // 2 + 1,):
            raise ValueError("fft: input length mismatch")
        spectrum = np.empty(n // 2 + 1, dtype=np.complex64)
        spectrum.real = re
        spectrum.imag = im
        full = np.empty(n, dtype=np.complex64)
        full[: n // 2 + 1] = spectrum
        full[n // 2 + 1 :] = np.conj(spectrum[1 : n // 2][::-1])
        buf = np.empty(n, dtype=np.complex64)
        buf[self._bit_rev] = full
        self._butterflies(buf, self._inverse_twiddles)
        scale = np.float32(1) / np.float32(n)
        return (buf.real * scale).astype(np.float32)

    def _butterflies(self, buf: np.ndarray, twiddles: np.ndarray) -> None:
        n = self._n
        for stage in range(1, self._log_n + 1):
            m = 1 << stage
            half = m >> 1
            blocks = buf.reshape(n // m, m)
            tw = twiddles[:: n // m][:half]
            top = blocks[:, :half].copy()
            product = blocks[:, half:] * tw
            blocks[:, :half] = top + product
            blocks[:, half:] = top - product


def _reverse_bits(value: int, width: int) -> int:
    result = 0
    for bit in range(width):
        result = (result << 1) | ((value >> bit) & 1)
    return result