"""Tests for the thin-lens camera.

Tests cover:
- Parameter validation
- Orthonormal basis construction
- Viewport geometry on the focus plane
- Pinhole behaviour when the aperture is zero
- Depth of field: all lens rays through a pixel meet on the focus plane

Note: Imports are done inside test methods so the camera fields are
declared after Taichi has been initialised.
"""

import math

import numpy as np
import pytest
import taichi as ti

N = 512


def _camera(**overrides):
    from pathtracer.camera.thin_lens import ThinLensCamera

    params = dict(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=2.0,
    )
    params.update(overrides)
    return ThinLensCamera(**params)


def _camera_state():
    """Read back the camera fields written by setup_camera."""
    from pathtracer.camera import thin_lens

    def read(field):
        value = field[None]
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "origin": read(thin_lens._camera_origin),
        "u": read(thin_lens._camera_u),
        "v": read(thin_lens._camera_v),
        "w": read(thin_lens._camera_w),
        "horizontal": read(thin_lens._viewport_horizontal),
        "vertical": read(thin_lens._viewport_vertical),
        "lower_left": read(thin_lens._lower_left_corner),
        "lens_radius": float(thin_lens._lens_radius[None]),
    }


def _rays(s, t, count=N):
    """Generate count rays through (s, t) with independent random streams."""
    from pathtracer.camera.thin_lens import get_ray
    from pathtracer.core.sampling import seed_rng

    origins = ti.Vector.field(3, dtype=ti.f64, shape=count)
    directions = ti.Vector.field(3, dtype=ti.f64, shape=count)
    states_in = ti.field(dtype=ti.u32, shape=count)
    states_out = ti.field(dtype=ti.u32, shape=count)

    @ti.kernel
    def test_kernel(u: ti.f64, v: ti.f64):
        for i in range(count):
            state = seed_rng(ti.cast(51, ti.u32), ti.cast(i, ti.u32), ti.cast(0, ti.u32))
            states_in[i] = state
            origin, direction, state = get_ray(u, v, state)
            origins[i] = origin
            directions[i] = direction
            states_out[i] = state

    test_kernel(s, t)
    return origins.to_numpy(), directions.to_numpy(), states_in.to_numpy(), states_out.to_numpy()


class TestCameraValidation:
    @pytest.mark.parametrize("vfov", [0.0, 180.0, -10.0, 200.0])
    def test_vfov_range(self, vfov):
        with pytest.raises(ValueError, match="vfov"):
            _camera(vfov=vfov)

    def test_negative_aperture(self):
        with pytest.raises(ValueError, match="aperture"):
            _camera(aperture=-0.1)

    def test_focus_dist_positive(self):
        with pytest.raises(ValueError, match="focus_dist"):
            _camera(focus_dist=0.0)

    def test_aspect_ratio_positive(self):
        with pytest.raises(ValueError, match="aspect_ratio"):
            _camera(aspect_ratio=0.0)

    def test_coincident_lookfrom_lookat(self):
        with pytest.raises(ValueError, match="distinct"):
            _camera(lookat=(0.0, 0.0, 0.0))

    def test_vup_parallel_to_view(self):
        with pytest.raises(ValueError, match="parallel"):
            _camera(vup=(0.0, 0.0, 2.0))

    def test_lens_radius(self):
        assert _camera(aperture=0.1).lens_radius == pytest.approx(0.05)


class TestCameraSetup:
    def test_basis_for_default_view(self):
        from pathtracer.camera.thin_lens import setup_camera

        setup_camera(_camera())
        info = _camera_state()

        assert info["origin"] == pytest.approx((0.0, 0.0, 0.0))
        assert info["w"] == pytest.approx((0.0, 0.0, 1.0))
        assert info["u"] == pytest.approx((1.0, 0.0, 0.0))
        assert info["v"] == pytest.approx((0.0, 1.0, 0.0))
        # vfov 90 -> viewport height 2, aspect 2 -> width 4, at distance 1
        assert info["horizontal"] == pytest.approx((4.0, 0.0, 0.0))
        assert info["vertical"] == pytest.approx((0.0, 2.0, 0.0))
        assert info["lower_left"] == pytest.approx((-2.0, -1.0, -1.0))
        assert info["lens_radius"] == 0.0

    def test_basis_is_orthonormal(self):
        from pathtracer.camera.thin_lens import setup_camera

        setup_camera(
            _camera(lookfrom=(13.0, 2.0, 3.0), lookat=(0.0, 0.0, 0.0), vfov=20.0, aperture=0.1, focus_dist=10.0)
        )
        info = _camera_state()
        u, v, w = (np.array(info[k]) for k in ("u", "v", "w"))

        for vec in (u, v, w):
            assert np.linalg.norm(vec) == pytest.approx(1.0)
        assert np.dot(u, v) == pytest.approx(0.0, abs=1e-12)
        assert np.dot(u, w) == pytest.approx(0.0, abs=1e-12)
        assert np.dot(v, w) == pytest.approx(0.0, abs=1e-12)
        np.testing.assert_allclose(np.cross(u, v), w, atol=1e-12)
        np.testing.assert_allclose(w, np.array([13.0, 2.0, 3.0]) / math.sqrt(182.0))

    def test_viewport_scales_with_focus_distance(self):
        from pathtracer.camera.thin_lens import setup_camera

        setup_camera(_camera(focus_dist=3.0))
        info = _camera_state()
        assert info["horizontal"] == pytest.approx((12.0, 0.0, 0.0))
        assert info["vertical"] == pytest.approx((0.0, 6.0, 0.0))
        assert info["lower_left"] == pytest.approx((-6.0, -3.0, -3.0))


class TestRayGeneration:
    def test_pinhole_center_ray(self):
        from pathtracer.camera.thin_lens import setup_camera

        setup_camera(_camera())
        origins, directions, states_in, states_out = _rays(0.5, 0.5)

        np.testing.assert_allclose(origins, 0.0)
        np.testing.assert_allclose(directions, np.tile([0.0, 0.0, -1.0], (N, 1)), atol=1e-12)
        # A pinhole draws no random numbers
        np.testing.assert_array_equal(states_in, states_out)

    def test_pinhole_corner_ray_is_not_normalized(self):
        from pathtracer.camera.thin_lens import setup_camera

        setup_camera(_camera())
        _, directions, _, _ = _rays(0.0, 0.0, count=1)
        np.testing.assert_allclose(directions[0], [-2.0, -1.0, -1.0], atol=1e-12)

    def test_lens_origins_within_aperture(self):
        from pathtracer.camera.thin_lens import setup_camera

        setup_camera(_camera(aperture=0.5, focus_dist=4.0))
        origins, _, states_in, states_out = _rays(0.3, 0.7)

        # Lens disk lies in the u-v plane through lookfrom
        np.testing.assert_allclose(origins[:, 2], 0.0, atol=1e-12)
        assert np.all(np.hypot(origins[:, 0], origins[:, 1]) < 0.25)
        assert np.ptp(origins[:, 0]) > 0.1
        assert np.all(states_in != states_out)

    def test_lens_rays_converge_on_focus_plane(self):
        from pathtracer.camera.thin_lens import setup_camera

        focus = 4.0
        setup_camera(_camera(aperture=0.5, focus_dist=focus))
        origins, directions, _, _ = _rays(0.3, 0.7)

        # Intersect every ray with the plane z = -focus
        t = (-focus - origins[:, 2]) / directions[:, 2]
        points = origins + t[:, None] * directions
        np.testing.assert_allclose(points, np.tile(points[0], (N, 1)), atol=1e-9)
        # And that point is the viewport point for (s, t)
        np.testing.assert_allclose(points[0], [-8.0 + 0.3 * 16.0, -4.0 + 0.7 * 8.0, -focus], atol=1e-9)


def test_jittered_rays_stay_inside_pixel():
    from pathtracer.camera.thin_lens import get_ray_jittered, setup_camera
    from pathtracer.core.sampling import seed_rng

    setup_camera(_camera())
    width, height = 8, 4
    directions = ti.Vector.field(3, dtype=ti.f64, shape=N)

    @ti.kernel
    def test_kernel():
        for k in range(N):
            state = seed_rng(ti.cast(52, ti.u32), ti.cast(k, ti.u32), ti.cast(0, ti.u32))
            origin, direction, state = get_ray_jittered(2, 1, width, height, state)
            directions[k] = direction

    test_kernel()
    d = directions.to_numpy()
    # Pixel (2, 1) spans s in [2/8, 3/8) and t in [1/4, 2/4)
    s = (d[:, 0] + 2.0) / 4.0
    t = (d[:, 1] + 1.0) / 2.0
    assert np.all((s >= 2 / 8) & (s < 3 / 8))
    assert np.all((t >= 1 / 4) & (t < 2 / 4))
    np.testing.assert_allclose(d[:, 2], -1.0)
