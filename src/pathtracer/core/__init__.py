"""Core rendering module.

Components:
    ray: Ray data structure, vector utilities and random vector generators
    sampler: Counter-based random number generation
    integrator: Radiance estimator and background gradient
    scheduler: Scanline render scheduler and render settings

Note: integrator and scheduler are NOT imported here to avoid circular imports.
Import directly from src.pathtracer.core.integrator or
src.pathtracer.core.scheduler when needed.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    random_vec,
    ray_at,
    reflect,
    refract,
    unit_vector,
    unit_vector_or_zero,
    vec3,
)
from .sampler import draw_floats, next_float, pcg_hash, seed_state

__all__ = [
    "Ray",
    "ray_at",
    "vec3",
    "length",
    "length_squared",
    "unit_vector",
    "unit_vector_or_zero",
    "dot",
    "cross",
    "reflect",
    "refract",
    "near_zero",
    "random_vec",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    "pcg_hash",
    "seed_state",
    "next_float",
    "draw_floats",
]
