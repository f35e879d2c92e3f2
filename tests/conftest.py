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
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear the uploaded spheres and materials around each test."""
    # Import here so that the fields are declared after ti.init
    from src.pathtracer.materials.material import clear_materials
    from src.pathtracer.scene.intersection import clear_scene

    clear_scene()
    clear_materials()
    yield
    clear_scene()
    clear_materials()
