"""Metal (specular reflective) material implementation.

The incoming direction is normalized and mirrored about the normal,
R = I - 2(I . N)N, then perturbed by fuzz times a random point of the unit
ball. Rays perturbed below the surface are absorbed, which is why fuzzy
metals darken at grazing angles.

Example:
    >>> from src.pathtracer.materials.metal import Metal
    >>> mirror = Metal(albedo=(0.7, 0.6, 0.5), fuzz=0.0)
    >>> # Inside a Taichi kernel:
    >>> # direction, did_scatter, state = scatter_metal(fuzz, incident, normal, state)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import random_in_unit_sphere, reflect, unit_vector
from src.pathtracer.materials.lambertian import validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True, eq=False)
class Metal:
    """Metal (specular reflective) material.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: Perturbation radius of the reflected direction. 0 is a perfect
            mirror; values are conventionally at most 1.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    def __post_init__(self) -> None:
        validate_albedo(self.albedo)
        if self.fuzz < 0.0:
            raise ValueError(f"Fuzz = {self.fuzz} is negative. Fuzz must be >= 0.")
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))
        object.__setattr__(self, "fuzz", float(self.fuzz))

    @property
    def attenuation(self) -> tuple[float, float, float]:
        return self.albedo


@ti.func
def scatter_metal(
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Compute the scattered direction for a metal surface.

    Args:
        fuzz: The perturbation radius.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal (facing the ray).
        state: The generator state.

    Returns:
        A tuple (scattered_direction, did_scatter, new_state) where
        did_scatter is 0 when the perturbed reflection points into the
        surface (absorbed) and 1 otherwise. The direction is returned in
        both cases.
    """
    reflected = reflect(unit_vector(incident_direction), normal)
    perturbation, next_state = random_in_unit_sphere(state)
    scattered_direction = reflected + fuzz * perturbation

    did_scatter = 1
    if tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0

    return scattered_direction, did_scatter, next_state
