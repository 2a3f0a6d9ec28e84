import math
from collections import Counter

import numpy as np
import pytest

from faucetflow.distributions import Constant
from faucetflow.faucets import Faucet, FaucetSet
from faucetflow.params import FlowParams


def test_generate_count_and_shape(small_params, rng):
    faucets = FaucetSet.generate(small_params, rng)
    assert len(faucets) == small_params.num_faucets
    for f in faucets:
        assert len(f.position) == 2
        assert len(f.velocity) == 2
        assert len(f.color) == 3
        assert all(s > 0 for s in f.color_spread)


def test_center_placement_offsets_by_drawn_radius(rng):
    params = FlowParams(
        size=200, num_faucets=16, num_streams=0,
        faucet_position_spread_dist=Constant(30.0),
        faucet_velocity_spread_dist=Constant(2.0),
    )
    for f in FaucetSet.generate(params, rng):
        assert math.hypot(f.position[0] - 100.0, f.position[1] - 100.0) == pytest.approx(30.0)
        assert math.hypot(*f.velocity) == pytest.approx(2.0)


def test_uniform_placement_spreads_faucets(rng):
    params = FlowParams(
        size=500, num_faucets=200, num_streams=0,
        faucet_placement="uniform",
        faucet_position_spread_dist=Constant(0.0),
    )
    xs = np.array([f.position[0] for f in FaucetSet.generate(params, rng)])
    assert xs.min() < 100 and xs.max() > 400


def test_colors_share_a_centre(rng):
    params = FlowParams(
        num_faucets=50, num_streams=0,
        faucet_color_center_dist=Constant(0.25),
        faucet_color_spread_dist=Constant(1e-6),
    )
    faucets = FaucetSet.generate(params, rng)
    assert faucets.color_center == (0.25, 0.25, 0.25)
    for f in faucets:
        assert f.color == pytest.approx((0.25, 0.25, 0.25), abs=1e-4)


def test_generation_is_reproducible(small_params):
    a = FaucetSet.generate(small_params, np.random.default_rng(5))
    b = FaucetSet.generate(small_params, np.random.default_rng(5))
    assert a.faucets == b.faucets


def test_round_robin_assignment():
    faucets = FaucetSet([Faucet((0.0, 0.0), (0.0, 0.0), (0.0, 0.0, 0.0))] * 3)
    assert [faucets.faucet_index(i) for i in range(7)] == [0, 1, 2, 0, 1, 2, 0]


def test_assignment_is_balanced_for_classic_run():
    faucets = FaucetSet([Faucet((float(i), 0.0), (0.0, 0.0), (0.0, 0.0, 0.0)) for i in range(40)])
    counts = Counter(faucets.faucet_index(i) for i in range(100000))
    assert set(counts.values()) == {2500}
    assert faucets.stream_counts(100000) == [2500] * 40


@pytest.mark.parametrize("num_streams,num_faucets", [(0, 3), (7, 3), (5, 8), (1001, 40)])
def test_stream_counts_floor_or_ceil(num_streams, num_faucets):
    faucets = FaucetSet([Faucet((0.0, 0.0), (0.0, 0.0), (0.0, 0.0, 0.0))] * num_faucets)
    counts = faucets.stream_counts(num_streams)
    assert sum(counts) == num_streams
    assert set(counts) <= {num_streams // num_faucets, -(-num_streams // num_faucets)}
    tallied = Counter(faucets.faucet_index(i) for i in range(num_streams))
    assert [tallied.get(i, 0) for i in range(num_faucets)] == counts
