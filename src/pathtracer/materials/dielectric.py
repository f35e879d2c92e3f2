"""Dielectric (glass/water) material implementation.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when ratio * sin(theta) > 1

The material randomly chooses between reflection and refraction based on the
Schlick reflectance, which increases at grazing angles. Clear glass does not
tint, so the attenuation is white.

Example:
    >>> from src.pathtracer.materials.dielectric import Dielectric
    >>> glass = Dielectric(index_of_refraction=1.5)
    >>> # Inside a Taichi kernel:
    >>> # direction, state = scatter_dielectric(ior, incident, normal, front_face, state)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import reflect, refract, unit_vector
from src.pathtracer.core.sampler import next_float

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True, eq=False)
class Dielectric:
    """Dielectric (glass/water) material.

    Attributes:
        index_of_refraction: Index of refraction (> 0). Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    index_of_refraction: float = 1.5

    def __post_init__(self) -> None:
        if self.index_of_refraction <= 0.0:
            raise ValueError(
                f"Index of refraction = {self.index_of_refraction} is not positive."
            )
        object.__setattr__(self, "index_of_refraction", float(self.index_of_refraction))

    @property
    def attenuation(self) -> tuple[float, float, float]:
        return (1.0, 1.0, 1.0)


@ti.func
def schlick_reflectance(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Ratio of refractive indices.

    Returns:
        r0 + (1 - r0)(1 - cosine)^5 with r0 = ((1 - ref_idx) / (1 + ref_idx))^2.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def refraction_ratio(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """1 / ior when entering from outside, ior when leaving the medium."""
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def cannot_refract(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Determine whether total internal reflection occurs.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal (facing the ray).
        front_face: 1 if the ray hits the outside of the surface.

    Returns:
        1 if refraction is impossible, 0 otherwise.
    """
    ratio = refraction_ratio(ior, front_face)
    unit_direction = unit_vector(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = tm.sqrt(1.0 - cos_theta * cos_theta)
    return ratio * sin_theta > 1.0


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Compute the scattered direction for a dielectric surface.

    A uniform random number is drawn for every call so that the generator
    stream does not depend on the branch taken.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal (facing the ray).
        front_face: 1 if the ray hits the outside of the surface,
            0 if it is inside the material.
        state: The generator state.

    Returns:
        A tuple (scattered_direction, new_state). Dielectrics always scatter.
    """
    ratio = refraction_ratio(ior, front_face)
    unit_direction = unit_vector(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)

    total_internal_reflection = cannot_refract(ior, incident_direction, normal, front_face)
    draw, next_state = next_float(state)
    reflectance = schlick_reflectance(cos_theta, ratio)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if total_internal_reflection or reflectance > draw:
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, next_state
