"""Multi-channel high-pass filter built from three cascaded biquads.

Only 16, 32 and 48 kHz sample rates are supported.
"""

from __future__ import annotations

from typing import MutableSequence, Sequence

from .biquad import Cascade, Coefficients

_COEFFS_16KHZ = (
    Coefficients(
        b=(0.8773539420715290582, -1.754683920749088077, 0.8773539420715289472),
        a=(-1.881687317862849707, 0.8880584644559580410),
    ),
    Coefficients(
        b=(1.0, -1.999810143464515022, 1.0),
        a=(-1.976035417167170793, 0.9779708644868606582),
    ),
    Coefficients(
        b=(1.0, -1.999669231394235469, 1.0),
        a=(-1.994265767864654482, 0.9954861594635392441),
    ),
)

_COEFFS_32KHZ = (
    Coefficients(
        b=(0.9102055685511306615, -1.820404922871161624, 0.9102055685511306615),
        a=(-1.940710875829138482, 0.9423512845457852061),
    ),
    Coefficients(
        b=(1.0, -1.999952541587768806, 1.0),
        a=(-1.988434609801665420, 0.9889212529819323416),
    ),
    Coefficients(
        b=(1.0, -1.999917315632020021, 1.0),
        a=(-1.997434723613889629, 0.9977401885079651978),
    ),
)

_COEFFS_48KHZ = (
    Coefficients(
        b=(0.9213790163564168, -1.8427552370064049, 0.9213790163564168),
        a=(-1.9604500061078971, 0.9611862979079667),
    ),
    Coefficients(
        b=(1.0, -1.9999789078432082, 1.0),
        a=(-1.9923834169149972, 0.9926001112941157),
    ),
    Coefficients(
        b=(1.0, -1.9999632520325810, 1.0),
        a=(-1.9983570340145236, 0.9984928491805198),
    ),
)

_COEFFICIENTS_BY_RATE = {
    16000: _COEFFS_16KHZ,
    32000: _COEFFS_32KHZ,
    48000: _COEFFS_48KHZ,
}


class HighPassFilter:
    """A high-pass filter for one stream, with an independent cascade per channel."""

    def __init__(self, sample_rate_hz: int, num_channels: int) -> None:
        coefficients = _COEFFICIENTS_BY_RATE.get(sample_rate_hz)
        if coefficients is None:
            raise ValueError(
                f"hpf: unsupported sample rate {sample_rate_hz} Hz "
                "(want 16000, 32000, or 48000)"
            )
        if num_channels < 0:
            raise ValueError(f"hpf: num_channels must not be negative, got {num_channels}")
        self._rate = sample_rate_hz
        self._channels = [Cascade(coefficients) for _ in range(num_channels)]

    @property
    def sample_rate(self) -> int:
        """The sample rate the filter was built for, in Hz."""
        return self._rate

    @property
    def num_channels(self) -> int:
        """The configured channel count."""
        return len(self._channels)

    def process(
        self, channels: Sequence[MutableSequence[float]]
    ) -> Sequence[MutableSequence[float]]:
        """Filter one frame in place; ``channels`` is indexed [channel][sample]."""
        if len(channels) != len(self._channels):
            raise ValueError(
                f"hpf: got {len(channels)} channels, want {len(self._channels)}"
            )
        for cascade, samples in zip(self._channels, channels):
            cascade.process(samples)
        return channels

    def reset(self) -> None:
        """Clear the filter state of every channel."""
        for cascade in self._channels:
            cascade.reset()