"""Materials module.

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection perturbed by fuzz
    dielectric: Glass-like refraction with Schlick reflectance
    material: Material table and scattering dispatch

Each material has a frozen host-side description that validates its
parameters and a Taichi scatter function. Materials compare by identity so
that spheres sharing an instance share one material table entry.
"""

from .dielectric import (
    Dielectric,
    cannot_refract,
    refraction_ratio,
    scatter_dielectric,
    schlick_reflectance,
)
from .lambertian import Lambertian, scatter_lambertian, validate_albedo
from .material import (
    MAX_MATERIALS,
    Material,
    MaterialType,
    clear_materials,
    get_attenuation,
    get_material_count,
    material_type_of,
    scatter,
    upload_materials,
)
from .metal import Metal, scatter_metal

__all__ = [
    # Lambertian
    "Lambertian",
    "scatter_lambertian",
    "validate_albedo",
    # Metal
    "Metal",
    "scatter_metal",
    # Dielectric
    "Dielectric",
    "scatter_dielectric",
    "schlick_reflectance",
    "refraction_ratio",
    "cannot_refract",
    # Dispatch
    "Material",
    "MaterialType",
    "MAX_MATERIALS",
    "material_type_of",
    "upload_materials",
    "clear_materials",
    "get_material_count",
    "get_attenuation",
    "scatter",
]
