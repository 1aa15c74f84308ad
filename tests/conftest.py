"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene storage and the render target around each test."""
    # Import here so the field-declaring modules load after ti.init
    from pathtracer.core.integrator import clear_render_target
    from pathtracer.scene.world import clear_world

    def _clear_all():
        clear_world()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()
