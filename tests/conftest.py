"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    from pathtracer.core.settings import init_backend

    init_backend("cpu", seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, material and render target state around each test."""
    # Import here so Taichi is initialized before fields are declared
    from pathtracer.core.integrator import release_render_target
    from pathtracer.materials.registry import clear_materials
    from pathtracer.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        release_render_target()

    _clear_all()
    yield
    _clear_all()
