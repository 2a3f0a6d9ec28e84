import math

import numpy as np
import pytest

from faucetflow.errors import ConfigurationError
from faucetflow.forces import Force, ForceField


def test_empty_field_is_zero():
    field = ForceField([], size=100)
    assert field.field_at(10.0, 20.0) == (0.0, 0.0)


def test_zero_strength_force_contributes_nothing():
    field = ForceField([Force(50.0, 50.0, 0.0, 10.0)], size=100)
    for p in [(0.0, 0.0), (49.0, 50.0), (50.0, 50.0), (99.0, 1.0)]:
        assert field.field_at(*p) == (0.0, 0.0)


def test_zero_strength_entries_do_not_change_the_sum():
    live = Force(30.0, 40.0, 5.0, 12.0, "outward")
    dead = Force(60.0, 60.0, 0.0, 3.0, "linear", (1.0, 0.0))
    assert ForceField([live, dead], 100).field_at(35.0, 45.0) == pytest.approx(
        ForceField([live], 100).field_at(35.0, 45.0)
    )


def test_inward_force_attracts():
    field = ForceField([Force(50.0, 50.0, 4.0, 10.0, "inward")], size=100)
    fx, fy = field.field_at(60.0, 50.0)
    assert fx < 0
    assert fy == pytest.approx(0.0)


def test_outward_force_repels():
    field = ForceField([Force(50.0, 50.0, 4.0, 10.0, "outward")], size=100)
    fx, fy = field.field_at(50.0, 40.0)
    assert fx == pytest.approx(0.0)
    assert fy < 0


def test_linear_force_follows_its_direction():
    field = ForceField([Force(50.0, 50.0, 4.0, 10.0, "linear", (0.0, 1.0))], size=100)
    fx, fy = field.field_at(55.0, 45.0)
    assert fx == pytest.approx(0.0)
    assert fy > 0


def test_magnitude_bounded_and_monotone():
    force = Force(0.0, 0.0, 6.0, 5.0, "inward")
    field = ForceField([force], size=100)
    mags = [math.hypot(*field.field_at(d, 0.0)) for d in np.linspace(0.01, 40.0, 200)]
    assert max(mags) <= 6.0 / 5.0
    assert all(a >= b for a, b in zip(mags, mags[1:]))


def test_no_singularity_at_centre():
    field = ForceField([Force(20.0, 20.0, 100.0, 0.5, "inward")], size=40)
    fx, fy = field.field_at(20.0, 20.0)
    assert (fx, fy) == (0.0, 0.0)


def test_centre_is_the_only_break_in_monotonicity():
    inward = ForceField([Force(0.0, 0.0, 6.0, 5.0, "inward")], size=100)
    assert math.hypot(*inward.field_at(0.0, 0.0)) == 0.0
    assert math.hypot(*inward.field_at(1e-9, 0.0)) == pytest.approx(6.0 / 5.0)

    linear = ForceField([Force(0.0, 0.0, 6.0, 5.0, "linear", (1.0, 0.0))], size=100)
    assert linear.field_at(0.0, 0.0) == pytest.approx((6.0 / 5.0, 0.0))


def test_vectorised_query_matches_scalar_sum(rng):
    forces = [
        Force(rng.random() * 100, rng.random() * 100, rng.random() * 5, 5 + rng.random() * 20, kind,
              (0.6, 0.8) if kind == "linear" else (0.0, 0.0))
        for kind in ("inward", "outward", "linear") * 4
    ]
    field = ForceField(forces, size=100)
    for px, py in [(10.0, 10.0), (50.0, 75.0), (99.0, 0.5)]:
        expected = np.sum([f.apply(px, py) for f in forces], axis=0)
        assert field.field_at(px, py) == pytest.approx(tuple(expected))


def test_field_is_deterministic():
    field = ForceField([Force(10.0, 10.0, 3.0, 8.0), Force(30.0, 5.0, 2.0, 4.0, "outward")], 50)
    assert field.field_at(12.5, 7.25) == field.field_at(12.5, 7.25)


def test_generate_draws_requested_forces(small_params, rng):
    field = ForceField.generate(small_params, rng)
    assert len(field) == small_params.num_forces
    for f in field.forces:
        assert 0 <= f.x < small_params.size
        assert 0 <= f.y < small_params.size
        assert f.strength > 0 and f.spread > 0
        assert f.kind in small_params.force_kinds
        if f.kind == "linear":
            assert math.hypot(*f.direction) == pytest.approx(1.0)
    assert sum(field.kind_counts().values()) == small_params.num_forces


def test_generate_respects_force_kinds(small_params, rng):
    params = small_params.replace(force_kinds=("outward",), num_forces=30)
    field = ForceField.generate(params, rng)
    assert field.kind_counts() == {"outward": 30}


def test_invalid_force():
    with pytest.raises(ConfigurationError):
        Force(0.0, 0.0, 1.0, 0.0)
    with pytest.raises(ConfigurationError):
        Force(0.0, 0.0, 1.0, 1.0, "spiral")
