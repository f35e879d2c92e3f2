"""Scene snapshot: spheres plus the materials they share.

The Scene is built on the host and written to the Taichi fields in one go by
``upload()``. A renderer takes its own copy with ``snapshot()`` and uploads
that copy before every band, so the scene it draws stays fixed for the whole
render.

Materials are registered by identity: passing the same material instance to
several ``add_sphere`` calls stores it once and makes every one of those
spheres reference the same material ID.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.manager import Scene
    >>> from src.pathtracer.materials import Lambertian, Metal
    >>> scene = Scene()
    >>> ground = Lambertian((0.5, 0.5, 0.5))
    >>> scene.add_sphere((0, -1000, 0), 1000, ground)
    >>> scene.add_sphere((4, 1, 0), 1.0, Metal((0.7, 0.6, 0.5), fuzz=0.0))
    >>> scene.upload()
"""

from dataclasses import dataclass

from src.pathtracer.materials.material import (
    MAX_MATERIALS,
    Material,
    material_type_of,
    upload_materials,
)
from src.pathtracer.scene.intersection import MAX_SPHERES, upload_spheres


@dataclass(frozen=True)
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere (non-zero, may be negative).
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


class Scene:
    """An ordered collection of spheres and the materials they reference.

    Attributes:
        materials: Registered materials; the list index is the material ID.
        spheres: Spheres in insertion order.
    """

    def __init__(self) -> None:
        self.materials: list[Material] = []
        self.spheres: list[SphereInfo] = []
        self._material_ids: dict[int, int] = {}

    def add_material(self, material: Material) -> int:
        """Register a material, or return its ID if already registered.

        Args:
            material: A Lambertian, Metal or Dielectric instance.

        Returns:
            The material ID.

        Raises:
            TypeError: If the object is not a supported material.
            RuntimeError: If the maximum number of materials is exceeded.
        """
        key = id(material)
        if key in self._material_ids:
            return self._material_ids[key]

        material_type_of(material)
        if len(self.materials) >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_id = len(self.materials)
        self.materials.append(material)
        self._material_ids[key] = material_id
        return material_id

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: Material,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere.
            radius: The radius. Must be non-zero; a negative radius flips the
                surface normal (hollow glass).
            material: The sphere's material. The instance is shared, not
                copied.

        Returns:
            The index of the added sphere.

        Raises:
            ValueError: If the radius is zero or the center is malformed.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        if radius == 0.0:
            raise ValueError("Sphere radius must be non-zero")
        if len(center) != 3:
            raise ValueError(f"Sphere center must have 3 components, got {len(center)}")
        if len(self.spheres) >= MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

        material_id = self.add_material(material)
        info = SphereInfo(
            sphere_index=len(self.spheres),
            center=(float(center[0]), float(center[1]), float(center[2])),
            radius=float(radius),
            material_id=material_id,
        )
        self.spheres.append(info)
        return info.sphere_index

    def get_material(self, material_id: int) -> Material:
        """Look up a registered material by ID.

        Raises:
            ValueError: If the ID is not registered.
        """
        if material_id < 0 or material_id >= len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")
        return self.materials[material_id]

    def get_sphere_count(self) -> int:
        return len(self.spheres)

    def get_material_count(self) -> int:
        return len(self.materials)

    def snapshot(self) -> "Scene":
        """Return a copy that later add_sphere calls on this scene do not affect.

        Spheres and materials are immutable, so the copy shares them.
        """
        copy = Scene()
        copy.materials = list(self.materials)
        copy.spheres = list(self.spheres)
        copy._material_ids = dict(self._material_ids)
        return copy

    def upload(self) -> None:
        """Write the spheres and materials into the Taichi fields.

        Replaces whatever scene was uploaded before.
        """
        upload_materials(self.materials)
        upload_spheres(
            [s.center for s in self.spheres],
            [s.radius for s in self.spheres],
            [s.material_id for s in self.spheres],
        )

    def __repr__(self) -> str:
        return f"Scene(spheres={len(self.spheres)}, materials={len(self.materials)})"
