"""Cascaded biquad filters in Direct Form I.

Each section evaluates::

    y[k] = b0*x[k] + b1*x[k-1] + b2*x[k-2] - a1*y[k-1] - a2*y[k-2]

with ``a0`` normalised to 1. Arithmetic is carried out in single precision.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, MutableSequence, Sequence

import numpy as np

_ZERO = np.float32(0)


@dataclass(frozen=True)
class Coefficients:
    """One biquad section: ``b`` is (b0, b1, b2), ``a`` is (a1, a2)."""

    b: tuple[float, float, float]
    a: tuple[float, float]

    def __post_init__(self) -> None:
        if len(self.b) != 3:
            raise ValueError(f"biquad: b needs 3 values, got {len(self.b)}")
        if len(self.a) != 2:
            raise ValueError(f"biquad: a needs 2 values, got {len(self.a)}")
        object.__setattr__(self, "b", tuple(float(v) for v in self.b))
        object.__setattr__(self, "a", tuple(float(v) for v in self.a))


def _zero_pair() -> list:
    return [_ZERO, _ZERO]


@dataclass
class Biquad:
    """One stage of a cascade: coefficients plus two-sample delay lines."""

    coefficients: Coefficients
    x: list = field(default_factory=_zero_pair)
    y: list = field(default_factory=_zero_pair)

    def reset(self) -> None:
        """Zero the delay lines."""
        self.x = _zero_pair()
        self.y = _zero_pair()

    def process(self, samples: MutableSequence[float]) -> MutableSequence[float]:
        """Filter ``samples`` in place through this stage and return them."""
        return _filter_in_place(samples, (self,))

    def _run(self, data: np.ndarray) -> None:
        b0, b1, b2 = (np.float32(v) for v in self.coefficients.b)
        a1, a2 = (np.float32(v) for v in self.coefficients.a)
        x0, x1 = self.x
        y0, y1 = self.y
        for k, tmp in enumerate(data):
            out = b0 * tmp + b1 * x0 + b2 * x1 - a1 * y0 - a2 * y1
            data[k] = out
            x1, x0 = x0, tmp
            y1, y0 = y0, out
        self.x = [np.float32(x0), np.float32(x1)]
        self.y = [np.float32(y0), np.float32(y1)]


class Cascade:
    """An ordered series of biquad sections; one cascade per channel."""

    def __init__(self, coefficients: Iterable[Coefficients]) -> None:
        self.stages: tuple[Biquad, ...] = tuple(Biquad(c) for c in coefficients)

    def reset(self) -> None:
        """Zero every stage's delay lines."""
        for stage in self.stages:
            stage.reset()

    def process(self, samples: MutableSequence[float]) -> MutableSequence[float]:
        """Filter ``samples`` in place through all stages and return them."""
        return _filter_in_place(samples, self.stages)

    def __len__(self) -> int:
        return len(self.stages)


def _filter_in_place(samples, stages: Sequence[Biquad]):
    data = np.asarray(samples, dtype=np.float32)
    if data.ndim != 1:
        raise ValueError("biquad: samples must be one-dimensional")
    for stage in stages:
        stage._run(data)
    if data is not samples:
        if isinstance(samples, np.ndarray):
            samples[...] = data
        else:
            samples[:] = data.tolist()
    return samples