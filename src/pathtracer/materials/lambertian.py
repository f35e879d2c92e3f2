"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters in the direction of the hit normal plus a random
unit vector, which approximates a cosine-weighted distribution over the
hemisphere around the normal. It never absorbs a ray; the albedo tints the
radiance carried back along the scattered ray.

Example:
    >>> from src.pathtracer.materials.lambertian import Lambertian
    >>> ground = Lambertian(albedo=(0.5, 0.5, 0.5))
    >>> # Inside a Taichi kernel:
    >>> # direction, state = scatter_lambertian(normal, state)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import near_zero, random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


def validate_albedo(albedo: tuple[float, float, float]) -> None:
    """Check that an albedo has three components in [0, 1].

    Raises:
        ValueError: If the albedo has the wrong size or a component is
            outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )


@dataclass(frozen=True, eq=False)
class Lambertian:
    """Lambertian (ideal diffuse) material.

    Instances compare by identity: every sphere that shares one instance
    shares one entry of the material table.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: tuple[float, float, float]

    def __post_init__(self) -> None:
        validate_albedo(self.albedo)
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))

    @property
    def attenuation(self) -> tuple[float, float, float]:
        return self.albedo


@ti.func
def scatter_lambertian(normal: vec3, state: ti.u32):
    """Sample a scattered direction for a Lambertian surface.

    Args:
        normal: The unit surface normal at the hit point (facing the ray).
        state: The generator state.

    Returns:
        A tuple (scattered_direction, new_state). The direction is not
        normalized. If normal + random unit vector nearly cancels out, the
        bare normal is returned instead.
    """
    offset, next_state = random_unit_vector(state)
    scattered_direction = normal + offset

    # Catch degenerate scatter direction
    if near_zero(scattered_direction):
        scattered_direction = normal

    return scattered_direction, next_state
