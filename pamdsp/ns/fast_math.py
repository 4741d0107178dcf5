"""Single-precision approximations used by the noise suppressor.

``fast_log2f`` is a bit-level approximation of log2; the suppressor's tuning
is calibrated against its error, so it is kept as is. All functions accept
scalars or arrays and return ``numpy.float32`` values of the same shape.
"""

from __future__ import annotations

import math

import numpy as np

_LOG2_SCALE = np.float32(1.1920929e-7)
_LOG2_OFFSET = np.float32(126.942695)
_LN2 = np.float32(math.log(2))
_LOG10E = np.float32(math.log10(math.e))
_TEN = np.float32(10)


def _as_f32(x) -> np.ndarray:
    return np.asarray(x, dtype=np.float32)


def _finish(out, ndim: int):
    out = np.asarray(out, dtype=np.float32)
    return out[()] if ndim == 0 else out


def fast_log2f(x):
    """Approximate log2 from the IEEE-754 bit pattern of ``x``."""
    a = _as_f32(x)
    flat = np.array(a, dtype=np.float32, ndmin=1)
    out = flat.view(np.uint32).astype(np.float32) * _LOG2_SCALE - _LOG2_OFFSET
    return _finish(out.reshape(a.shape), a.ndim)


def sqrt_approx(x):
    """Square root, evaluated in double precision and rounded to float32."""
    a = _as_f32(x)
    with np.errstate(invalid="ignore"):
        out = np.sqrt(a.astype(np.float64))
    return _finish(out, a.ndim)


def pow2_approx(p):
    """Two to the power ``p``, evaluated in double precision."""
    a = _as_f32(p)
    with np.errstate(over="ignore"):
        out = np.power(2.0, a.astype(np.float64)).astype(np.float32)
    return _finish(out, a.ndim)


def pow_approx(x, p):
    """``x`` to the power ``p`` through the fast log2."""
    return pow2_approx(_as_f32(p) * _as_f32(fast_log2f(x)))


def log_approx(x):
    """Approximate natural logarithm."""
    a = _as_f32(x)
    return _finish(_as_f32(fast_log2f(a)) * _LN2, a.ndim)


def exp_approx(x):
    """Approximate natural exponential."""
    a = _as_f32(x)
    return _finish(pow_approx(_TEN, a * _LOG10E), a.ndim)