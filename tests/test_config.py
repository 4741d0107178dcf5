import dataclasses

import pytest

from pamdsp.ns.config import (
    Config,
    SuppressionLevel,
    SuppressionParams,
    default_config,
    suppression_params_for,
)


def test_default_config_targets_12db():
    assert default_config().target_level is SuppressionLevel.LEVEL_12DB


def test_config_is_frozen():
    cfg = default_config()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.target_level = SuppressionLevel.LEVEL_6DB
    assert cfg.target_level is SuppressionLevel.LEVEL_12DB


@pytest.mark.parametrize(
    "level, expected",
    [
        (SuppressionLevel.LEVEL_6DB, SuppressionParams(1.0, 0.5, False)),
        (SuppressionLevel.LEVEL_12DB, SuppressionParams(1.0, 0.25, True)),
        (SuppressionLevel.LEVEL_18DB, SuppressionParams(1.1, 0.125, True)),
        (SuppressionLevel.LEVEL_21DB, SuppressionParams(1.25, 0.09, True)),
    ],
)
def test_params_per_level(level, expected):
    assert suppression_params_for(level) == expected


def test_unknown_level_falls_back_to_12db():
    assert suppression_params_for(42) == suppression_params_for(SuppressionLevel.LEVEL_12DB)


def test_plain_int_level_is_accepted():
    assert suppression_params_for(2) == suppression_params_for(SuppressionLevel.LEVEL_18DB)


def test_more_aggressive_levels_attenuate_more():
    gains = [
        suppression_params_for(level).minimum_attenuating_gain for level in SuppressionLevel
    ]
    assert gains == sorted(gains, reverse=True)


def test_config_carries_level():
    assert Config(SuppressionLevel.LEVEL_21DB).target_level == SuppressionLevel.LEVEL_21DB