"""Scene-level sphere intersection testing.

Spheres are stored in Taichi fields (Structure of Arrays) together with the
ID of the material they reference. ``intersect_scene`` walks them in
insertion order and keeps the closest hit, shrinking the accepted range as it
goes. There is no spatial index; the cost is linear in the number of spheres.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.intersection import upload_spheres, intersect_scene
    >>> upload_spheres([(0.0, 0.0, -1.0)], [0.5], [0])
    >>> # Use intersect_scene within a Taichi kernel
"""

from collections.abc import Sequence

import numpy as np
import taichi as ti
import taichi.math as tm

from src.pathtracer.geometry.sphere import HitRecord, Sphere, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any sphere (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The world-space intersection point. Only valid if hit == 1.
        normal: The unit surface normal, oriented against the incoming ray.
            Only valid if hit == 1.
        front_face: Whether the ray hit the front face (1) or back face (0).
        material_id: Index of the hit sphere's material in the material
            table. -1 for a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Only the count is reset; stale entries are overwritten on the next upload.
    """
    num_spheres[None] = 0


def upload_spheres(
    centers: Sequence[tuple[float, float, float]],
    radii: Sequence[float],
    material_ids: Sequence[int],
) -> None:
    """Replace the scene's spheres.

    Args:
        centers: Sphere centers, in insertion order.
        radii: Sphere radii, same order.
        material_ids: Material table index of each sphere, same order.

    Raises:
        ValueError: If the sequences differ in length.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    count = len(centers)
    if len(radii) != count or len(material_ids) != count:
        raise ValueError(
            f"Sphere data length mismatch: {count} centers, {len(radii)} radii, "
            f"{len(material_ids)} material ids"
        )
    if count > MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    center_data = np.zeros((MAX_SPHERES, 3), dtype=np.float32)
    radius_data = np.ones(MAX_SPHERES, dtype=np.float32)
    material_data = np.full(MAX_SPHERES, -1, dtype=np.int32)
    if count > 0:
        center_data[:count] = np.asarray(centers, dtype=np.float32)
        radius_data[:count] = np.asarray(radii, dtype=np.float32)
        material_data[:count] = np.asarray(material_ids, dtype=np.int32)

    sphere_centers.from_numpy(center_data)
    sphere_radii.from_numpy(radius_data)
    sphere_material_ids.from_numpy(material_data)
    num_spheres[None] = count


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the closest sphere hit by a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A SceneHitRecord for the closest intersection in [t_min, t_max], or a
        miss record if no sphere was hit.
    """
    closest_t = t_max
    result = _make_miss_record()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, sphere_material_ids[i])

    return result
