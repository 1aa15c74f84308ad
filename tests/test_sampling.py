"""Unit tests for the seedable random stream and sampling distributions.

Tests cover:
- Determinism of the stream for a given (seed, pixel, sample)
- Independence of neighbouring streams
- Ranges of the uniform draws
- Support of the sphere, unit vector and disk samplers
"""

import numpy as np
import pytest
import taichi as ti

from pathtracer.core.sampling import (
    random_float,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_range,
    random_unit_vector,
    seed_rng,
)
from pathtracer.core.vector import length_squared

N = 2000


def _draw_floats(seed: int, pixel: int, sample: int, count: int) -> np.ndarray:
    values = ti.field(dtype=ti.f64, shape=count)

    @ti.kernel
    def test_kernel():
        for _ in range(1):
            state = seed_rng(ti.cast(seed, ti.u32), ti.cast(pixel, ti.u32), ti.cast(sample, ti.u32))
            for k in range(count):
                u, state = random_float(state)
                values[k] = u

    test_kernel()
    return values.to_numpy()


class TestRandomStream:
    def test_same_inputs_same_sequence(self):
        a = _draw_floats(123456, 7, 3, 64)
        b = _draw_floats(123456, 7, 3, 64)
        np.testing.assert_array_equal(a, b)

    def test_different_pixels_give_different_sequences(self):
        a = _draw_floats(123456, 7, 3, 64)
        b = _draw_floats(123456, 8, 3, 64)
        assert not np.array_equal(a, b)

    def test_different_seeds_give_different_sequences(self):
        a = _draw_floats(1, 0, 0, 64)
        b = _draw_floats(2, 0, 0, 64)
        assert not np.array_equal(a, b)

    def test_values_in_unit_interval(self):
        values = _draw_floats(99, 0, 0, N)
        assert values.min() >= 0.0
        assert values.max() < 1.0
        # Roughly uniform
        assert abs(values.mean() - 0.5) < 0.05

    def test_zero_seed_still_produces_values(self):
        values = _draw_floats(0, 0, 0, 16)
        assert len(set(values.tolist())) > 1


def test_random_range():
    values = ti.field(dtype=ti.f64, shape=N)

    @ti.kernel
    def test_kernel():
        for i in range(N):
            state = seed_rng(ti.cast(5, ti.u32), ti.cast(i, ti.u32), ti.cast(0, ti.u32))
            v, state = random_range(-2.0, 3.0, state)
            values[i] = v

    test_kernel()
    arr = values.to_numpy()
    assert arr.min() >= -2.0
    assert arr.max() < 3.0


def test_random_in_unit_sphere_inside():
    len_sq = ti.field(dtype=ti.f64, shape=N)

    @ti.kernel
    def test_kernel():
        for i in range(N):
            state = seed_rng(ti.cast(11, ti.u32), ti.cast(i, ti.u32), ti.cast(0, ti.u32))
            p, state = random_in_unit_sphere(state)
            len_sq[i] = length_squared(p)

    test_kernel()
    arr = len_sq.to_numpy()
    assert arr.min() > 0.0
    assert arr.max() < 1.0


def test_random_unit_vector_has_unit_length():
    points = ti.Vector.field(3, dtype=ti.f64, shape=N)

    @ti.kernel
    def test_kernel():
        for i in range(N):
            state = seed_rng(ti.cast(12, ti.u32), ti.cast(i, ti.u32), ti.cast(0, ti.u32))
            p, state = random_unit_vector(state)
            points[i] = p

    test_kernel()
    arr = points.to_numpy()
    np.testing.assert_allclose(np.linalg.norm(arr, axis=1), 1.0, atol=1e-12)
    # Directions cover the whole sphere
    np.testing.assert_allclose(arr.mean(axis=0), 0.0, atol=0.1)


def test_random_in_unit_disk_is_planar():
    points = ti.Vector.field(3, dtype=ti.f64, shape=N)

    @ti.kernel
    def test_kernel():
        for i in range(N):
            state = seed_rng(ti.cast(13, ti.u32), ti.cast(i, ti.u32), ti.cast(0, ti.u32))
            p, state = random_in_unit_disk(state)
            points[i] = p

    test_kernel()
    arr = points.to_numpy()
    assert np.all(arr[:, 2] == 0.0)
    assert np.all(arr[:, 0] ** 2 + arr[:, 1] ** 2 < 1.0)


def test_state_advances():
    states = ti.field(dtype=ti.u32, shape=2)
    values = ti.field(dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel():
        for _ in range(1):
            state = seed_rng(ti.cast(1, ti.u32), ti.cast(2, ti.u32), ti.cast(3, ti.u32))
            states[0] = state
            value, state = random_float(state)
            states[1] = state
            values[None] = value

    test_kernel()
    assert states[0] != 0
    assert states[0] != states[1]
    assert 0.0 <= values[None] < 1.0


@pytest.mark.parametrize("seed", [0, 1, 2**31 - 1])
def test_seed_rng_is_nonzero(seed):
    states = ti.field(dtype=ti.u32, shape=64)

    @ti.kernel
    def test_kernel():
        for i in range(64):
            states[i] = seed_rng(ti.cast(seed, ti.u32), ti.cast(i, ti.u32), ti.cast(0, ti.u32))

    test_kernel()
    assert np.all(states.to_numpy() != 0)
