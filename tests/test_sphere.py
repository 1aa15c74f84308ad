"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Ray tangent to sphere
- Interval bounds and nearest-root selection
- Unit normals for non-normalized directions
"""

import math

import pytest
import taichi as ti

from pathtracer.core.vector import vec3
from pathtracer.geometry.sphere import Sphere, hit_sphere


def _intersect(origin, direction, center, radius, t_min=0.001, t_max=math.inf):
    """Run hit_sphere once and return the record fields as Python values."""
    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    point = ti.Vector.field(3, dtype=ti.f64, shape=())
    normal = ti.Vector.field(3, dtype=ti.f64, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f64, lo: ti.f64, hi: ti.f64):
        record = hit_sphere(o, d, Sphere(center=c, radius=r), lo, hi)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": tuple(point[None].to_numpy()),
        "normal": tuple(normal[None].to_numpy()),
        "front_face": front_face[None],
    }


class TestSphereIntersection:
    def test_direct_hit_from_outside(self):
        rec = _intersect((0, 0, 0), (0, 0, -1), (0, 0, -1), 0.5)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(0.5, abs=1e-12)
        assert rec["point"] == pytest.approx((0.0, 0.0, -0.5), abs=1e-12)
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-12)
        assert rec["front_face"] == 1

    def test_miss(self):
        rec = _intersect((5, 0, 0), (0, 0, -1), (0, 0, 0), 1.0)
        assert rec["hit"] == 0

    def test_inside_hits_back_face(self):
        rec = _intersect((0, 0, 0), (0, 0, 1), (0, 0, 0), 1.0)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(1.0, abs=1e-12)
        # Normal is flipped to face against the ray
        assert rec["normal"] == pytest.approx((0.0, 0.0, -1.0), abs=1e-12)
        assert rec["front_face"] == 0

    def test_tangent_ray_misses(self):
        # Discriminant is exactly zero
        rec = _intersect((1, 0, 5), (0, 0, -1), (0, 0, 0), 1.0)
        assert rec["hit"] == 0

    def test_sphere_behind_ray_misses(self):
        rec = _intersect((0, 0, 0), (0, 0, 1), (0, 0, -3), 1.0)
        assert rec["hit"] == 0

    def test_nearest_root_outside_interval_uses_far_root(self):
        # Near root at t=4 is excluded by t_min; far root at t=6 is accepted
        rec = _intersect((0, 0, 5), (0, 0, -1), (0, 0, 0), 1.0, t_min=4.5)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(6.0, abs=1e-12)
        assert rec["front_face"] == 0

    def test_interval_is_open(self):
        # Hit at exactly t_max is rejected
        rec = _intersect((0, 0, 5), (0, 0, -1), (0, 0, 0), 1.0, t_max=4.0)
        assert rec["hit"] == 0

    def test_both_roots_outside_interval(self):
        rec = _intersect((0, 0, 5), (0, 0, -1), (0, 0, 0), 1.0, t_min=0.001, t_max=3.0)
        assert rec["hit"] == 0

    def test_normal_is_unit_for_unnormalized_direction(self):
        rec = _intersect((0.3, 0.2, 4), (0, 0, -7.5), (0, 0, 0), 2.0)
        assert rec["hit"] == 1
        n = rec["normal"]
        assert math.sqrt(n[0] ** 2 + n[1] ** 2 + n[2] ** 2) == pytest.approx(1.0, abs=1e-9)

    def test_t_scales_with_direction_length(self):
        rec = _intersect((0, 0, 0), (0, 0, -2), (0, 0, -1), 0.5)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(0.25, abs=1e-12)
        assert rec["point"] == pytest.approx((0.0, 0.0, -0.5), abs=1e-12)

    def test_normal_faces_against_ray(self):
        for origin, direction in [((0, 0, 5), (0, 0, -1)), ((0, 0, 0), (1, 1, 0))]:
            rec = _intersect(origin, direction, (0, 0, 0), 1.0)
            assert rec["hit"] == 1
            n = rec["normal"]
            assert n[0] * direction[0] + n[1] * direction[1] + n[2] * direction[2] < 0.0
