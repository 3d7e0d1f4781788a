import dataclasses
import math

import pytest

from sadp import constants
from sadp.config import SADPConfig


def test_defaults_match_constants():
    config = SADPConfig()
    assert config.b0 == constants.DEFAULT_B0
    assert config.bf == constants.DEFAULT_BF
    assert config.br == constants.DEFAULT_BR
    assert config.max_assignment_iterations == 4
    assert config.max_sinkhorn_iterations == 30
    assert config.eps0 == 0.5
    assert config.eps1 == 0.05


def test_config_is_immutable():
    config = SADPConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.b0 = 1.0


@pytest.mark.parametrize(
    "kwargs,message",
    [
        ({"b0": 0.0}, "b0 must be positive"),
        ({"b0": -1.0}, "b0 must be positive"),
        ({"bf": 0.5}, "must be greater than b0"),
        ({"b0": 2.0, "bf": 1.0}, "must be greater than b0"),
        ({"br": 1.0}, "br must be greater than 1"),
        ({"br": 0.9}, "br must be greater than 1"),
        ({"max_assignment_iterations": 0}, "max_assignment_iterations"),
        ({"max_sinkhorn_iterations": 0}, "max_sinkhorn_iterations"),
        ({"eps0": -0.1}, "eps0 must be non-negative"),
        ({"eps1": -0.1}, "eps1 must be non-negative"),
        ({"bf": math.inf}, "bf must be finite"),
        ({"b0": math.nan}, "b0 must be finite"),
    ],
)
def test_invalid_config_rejected(kwargs, message):
    with pytest.raises(ValueError, match=message):
        SADPConfig(**kwargs)


def test_outer_step_count_default_schedule():
    config = SADPConfig()
    expected = math.floor(math.log(10.0 / 0.5) / math.log(1.075)) + 1
    assert config.outer_step_count == expected == 42


@pytest.mark.parametrize(
    "b0,bf,br,expected",
    [
        (1.0, 10.0, 3.0, 3),  # 1, 3, 9 -> 27
        (0.5, 5.1, 2.0, 4),  # 0.5, 1, 2, 4 -> 8
        (1.0, 1.5, 2.0, 1),
    ],
)
def test_outer_step_count_matches_loop(b0, bf, br, expected):
    config = SADPConfig(b0=b0, bf=bf, br=br)
    steps = 0
    b = b0
    while b < bf:
        b *= br
        steps += 1
    assert steps == expected
    assert config.outer_step_count == expected


def test_from_cli_args_maps_names():
    config = SADPConfig.from_cli_args(
        b0=1.0,
        bf=8.0,
        br=2.0,
        assignment_iterations=2,
        sinkhorn_iterations=5,
        eps0=0.1,
        eps1=0.01,
    )
    assert config == SADPConfig(
        b0=1.0,
        bf=8.0,
        br=2.0,
        max_assignment_iterations=2,
        max_sinkhorn_iterations=5,
        eps0=0.1,
        eps1=0.01,
    )
