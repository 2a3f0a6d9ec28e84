import numpy as np
import pytest

from faucetflow.distributions import Exp, log_dist
from faucetflow.params import FlowParams


@pytest.fixture
def small_params():
    """A run small enough to integrate in well under a second."""
    return FlowParams(
        size=64,
        seed=3,
        num_forces=8,
        force_strength_dist=log_dist(2.0, 2.0),
        force_spread_dist=log_dist(16.0, 2.0),
        num_faucets=4,
        faucet_position_spread_dist=Exp(6.0),
        num_streams=60,
        decay_dist=Exp(0.5),
        max_decay_factor=2.0,
        velocity_cap=6.0,
        color_cap=1.5,
    )


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
