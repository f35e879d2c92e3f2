"""Material table and scattering dispatch.

Materials form a closed set of three variants. They live in one table of
Taichi fields indexed by material ID: every variant stores its kind and the
attenuation it applies, and only the parameters it needs (fuzz for metals,
index of refraction for dielectrics) are meaningful in the other columns.
Spheres refer to materials by ID, so one material shared by many spheres is
stored once.

``scatter`` dispatches on the kind with a single branch, which keeps the
hot loop free of indirection.

Example:
    >>> from src.pathtracer.materials.material import upload_materials
    >>> upload_materials([Lambertian((0.5, 0.5, 0.5)), Dielectric(1.5)])
    >>> # Inside a Taichi kernel:
    >>> # direction, did_scatter, state = scatter(material_id, d, n, front_face, state)
"""

from collections.abc import Sequence
from enum import IntEnum
from typing import Union

import numpy as np
import taichi as ti
import taichi.math as tm

from src.pathtracer.materials.dielectric import Dielectric, scatter_dielectric
from src.pathtracer.materials.lambertian import Lambertian, scatter_lambertian
from src.pathtracer.materials.metal import Metal, scatter_metal

# Type alias for 3D vectors
vec3 = tm.vec3

# Any of the host-side material descriptions
Material = Union[Lambertian, Metal, Dielectric]


class MaterialType(IntEnum):
    """Enumeration of supported material kinds.

    Used for material dispatch in the path tracer.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of distinct materials in a scene
MAX_MATERIALS = 1024

# Material table: Structure of Arrays layout
material_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_attenuations = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_fuzz = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_iors = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def material_type_of(material: Material) -> MaterialType:
    """Get the MaterialType for a host-side material description.

    Raises:
        TypeError: If the object is not one of the supported materials.
    """
    if isinstance(material, Lambertian):
        return MaterialType.LAMBERTIAN
    if isinstance(material, Metal):
        return MaterialType.METAL
    if isinstance(material, Dielectric):
        return MaterialType.DIELECTRIC
    raise TypeError(f"Unsupported material type: {type(material).__name__}")


def clear_materials() -> None:
    """Reset the material count to zero."""
    num_materials[None] = 0


def upload_materials(materials: Sequence[Material]) -> None:
    """Write a list of materials into the material table.

    Material ``i`` of the list gets material ID ``i``.

    Args:
        materials: The materials, in ID order.

    Raises:
        RuntimeError: If the list exceeds MAX_MATERIALS.
        TypeError: If an entry is not a supported material.
    """
    count = len(materials)
    if count > MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    kinds = np.zeros(MAX_MATERIALS, dtype=np.int32)
    attenuations = np.zeros((MAX_MATERIALS, 3), dtype=np.float32)
    fuzz = np.zeros(MAX_MATERIALS, dtype=np.float32)
    iors = np.ones(MAX_MATERIALS, dtype=np.float32)

    for idx, material in enumerate(materials):
        kinds[idx] = int(material_type_of(material))
        attenuations[idx] = material.attenuation
        if isinstance(material, Metal):
            fuzz[idx] = material.fuzz
        elif isinstance(material, Dielectric):
            iors[idx] = material.index_of_refraction

    material_kinds.from_numpy(kinds)
    material_attenuations.from_numpy(attenuations)
    material_fuzz.from_numpy(fuzz)
    material_iors.from_numpy(iors)
    num_materials[None] = count


def get_material_count() -> int:
    """Get the number of materials in the table."""
    return int(num_materials[None])


@ti.func
def get_attenuation(material_id: ti.i32) -> vec3:
    """Color multiplier applied to the radiance of a scattered ray.

    Args:
        material_id: Index into the material table.

    Returns:
        The albedo for Lambertian and metal materials, white for dielectrics.
    """
    return material_attenuations[material_id]


@ti.func
def scatter(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Dispatch to the scattering function of a material.

    Args:
        material_id: Index into the material table.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal (facing the ray).
        front_face: 1 if the ray hit the outside of the surface.
        state: The generator state.

    Returns:
        A tuple (scattered_direction, did_scatter, new_state). did_scatter is
        0 when the ray is absorbed.
    """
    kind = material_kinds[material_id]

    scattered_direction = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    next_state = state

    if kind == int(MaterialType.LAMBERTIAN):
        scattered_direction, next_state = scatter_lambertian(normal, state)
        did_scatter = 1

    elif kind == int(MaterialType.METAL):
        scattered_direction, did_scatter, next_state = scatter_metal(
            material_fuzz[material_id], incident_direction, normal, state
        )

    elif kind == int(MaterialType.DIELECTRIC):
        scattered_direction, next_state = scatter_dielectric(
            material_iors[material_id], incident_direction, normal, front_face, state
        )
        did_scatter = 1

    return scattered_direction, did_scatter, next_state
