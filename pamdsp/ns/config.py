"""Noise-suppression configuration, tuning parameters and frame geometry."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

FFT_SIZE = 256
FFT_SIZE_BY_2_PLUS_1 = FFT_SIZE // 2 + 1
NS_FRAME_SIZE = 160
OVERLAP_SIZE = FFT_SIZE - NS_FRAME_SIZE

SHORT_STARTUP_PHASE_BLOCKS = 50
LONG_STARTUP_PHASE_BLOCKS = 200
FEATURE_UPDATE_WINDOW_SIZE = 500

LTR_FEATURE_THR = 0.5
BIN_SIZE_LRT = 0.1
BIN_SIZE_SPEC_FLAT = 0.05
BIN_SIZE_SPEC_DIFF = 0.1


class SuppressionLevel(IntEnum):
    """How aggressively noise is suppressed."""

    LEVEL_6DB = 0
    LEVEL_12DB = 1
    LEVEL_18DB = 2
    LEVEL_21DB = 3


@dataclass(frozen=True)
class Config:
    """Configuration of a noise suppressor."""

    target_level: SuppressionLevel = SuppressionLevel.LEVEL_12DB


@dataclass(frozen=True)
class SuppressionParams:
    """Tuning values derived from a suppression level."""

    over_subtraction_factor: float
    minimum_attenuating_gain: float
    use_attenuation_adjustment: bool


_PARAMS_BY_LEVEL = {
    SuppressionLevel.LEVEL_6DB: SuppressionParams(1.0, 0.5, False),
    SuppressionLevel.LEVEL_12DB: SuppressionParams(1.0, 0.25, True),
    SuppressionLevel.LEVEL_18DB: SuppressionParams(1.1, 0.125, True),
    SuppressionLevel.LEVEL_21DB: SuppressionParams(1.25, 0.09, True),
}


def default_config() -> Config:
    """Return the default configuration (12 dB target)."""
    return Config(target_level=SuppressionLevel.LEVEL_12DB)


def suppression_params_for(level) -> SuppressionParams:
    """Return the tuning for ``level``; unknown levels get the 12 dB tuning."""
    return _PARAMS_BY_LEVEL.get(level, _PARAMS_BY_LEVEL[SuppressionLevel.LEVEL_12DB])