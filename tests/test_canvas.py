import numpy as np
import pytest

from faucetflow.canvas import Canvas


def test_add_accumulates():
    canvas = Canvas(4)
    canvas.add((1, 2), (0.5, -0.25, 1.0))
    canvas.add((1, 2), (0.5, 0.25, 1.0))
    grid = canvas.finalize()
    assert grid[2, 1].tolist() == [1.0, 0.0, 2.0]
    assert grid.sum() == pytest.approx(3.0)


def test_add_ignores_off_canvas_pixels():
    canvas = Canvas(4)
    for pixel in [(-1, 0), (0, -1), (4, 0), (0, 4), (100, 100)]:
        canvas.add(pixel, (1.0, 1.0, 1.0))
    assert not canvas.finalize().any()


def test_deposit_floors_and_drops():
    canvas = Canvas(5)
    xs = np.array([0.2, 0.9, 4.99, 5.0, -0.1, 2.5])
    ys = np.array([0.0, 0.5, 4.5, 1.0, 1.0, 3.0])
    colors = np.ones((6, 3))
    kept = canvas.deposit(xs, ys, colors)
    grid = canvas.finalize()
    assert kept == 4
    assert grid[0, 0].tolist() == [2.0, 2.0, 2.0]
    assert grid[4, 4].tolist() == [1.0, 1.0, 1.0]
    assert grid[3, 2].tolist() == [1.0, 1.0, 1.0]
    assert grid.sum() == pytest.approx(12.0)


def test_finalize_returns_a_copy():
    canvas = Canvas(3)
    grid = canvas.finalize()
    grid[0, 0] = 9.0
    assert not canvas.finalize().any()


def test_accumulation_is_order_independent(rng):
    size = 16
    contributions = [
        (rng.random(20) * size, rng.random(20) * size, rng.normal(size=(20, 3)))
        for _ in range(30)
    ]

    forward = Canvas(size)
    for xs, ys, cs in contributions:
        forward.deposit(xs, ys, cs)

    shuffled = Canvas(size)
    for i in rng.permutation(len(contributions)):
        shuffled.deposit(*contributions[i])

    np.testing.assert_allclose(forward.finalize(), shuffled.finalize(), rtol=1e-12, atol=1e-12)


def test_merge_sums_grids():
    a, b = Canvas(3), Canvas(3)
    a.add((0, 0), (1.0, 0.0, 0.0))
    b.add((0, 0), (0.0, 2.0, 0.0))
    b.add((2, 1), (0.0, 0.0, 3.0))
    a.merge(b)
    grid = a.finalize()
    assert grid[0, 0].tolist() == [1.0, 2.0, 0.0]
    assert grid[1, 2].tolist() == [0.0, 0.0, 3.0]
    with pytest.raises(ValueError):
        a.merge(Canvas(4))


def test_coverage():
    canvas = Canvas(2)
    assert canvas.coverage() == 0.0
    canvas.add((1, 1), (0.0, 0.1, 0.0))
    assert canvas.coverage() == 0.25
