"""Sphere primitive with ray-sphere intersection.

The intersection solves |O + tD - C|^2 = r^2 with the half-b form of the
quadratic formula:

    a      = dot(D, D)
    half_b = dot(O - C, D)
    c      = dot(O - C, O - C) - r^2
    disc   = half_b^2 - a*c

The nearer root is tried first and the farther one only if the nearer falls
outside [t_min, t_max], which keeps occlusion correct when the ray starts
inside the sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. The normal is computed as
            (point - center) / radius, so a negative radius flips it.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The world-space intersection point. Only valid if hit == 1.
        normal: The unit surface normal, oriented against the incoming ray.
            Only valid if hit == 1.
        front_face: 1 if the ray hit the outside of the surface (the
            geometric normal was kept), 0 if it was flipped.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def is_front_face(ray_direction: vec3, outward_normal: vec3) -> ti.i32:
    """Front face test: the ray travels against the outward normal."""
    return tm.dot(ray_direction, outward_normal) < 0.0


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3) -> vec3:
    """Orient a normal so that it always opposes the incoming ray.

    Args:
        ray_direction: Direction of the incoming ray.
        outward_normal: The geometric (outward) unit normal.

    Returns:
        outward_normal if the ray hits the front face, else -outward_normal.
    """
    normal = outward_normal
    if not is_front_face(ray_direction, outward_normal):
        normal = -outward_normal
    return normal


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be
            normalized, must be non-zero).
        sphere: The sphere to test intersection against.
        t_min: Smallest accepted ray parameter (inclusive).
        t_max: Largest accepted ray parameter (inclusive).

    Returns:
        A HitRecord containing intersection information. Check the hit field
        to determine if an intersection occurred.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    front_face = 0

    if discriminant >= 0.0:
        sqrtd = ti.sqrt(discriminant)

        # Find the nearest root that lies in the acceptable range
        root = (-half_b - sqrtd) / a
        valid = (root >= t_min) and (root <= t_max)
        if not valid:
            root = (-half_b + sqrtd) / a
            valid = (root >= t_min) and (root <= t_max)

        if valid:
            did_hit = 1
            hit_t = root
            hit_point = ray_at(Ray(origin=ray_origin, direction=ray_direction), root)
            outward_normal = (hit_point - sphere.center) / sphere.radius
            front_face = is_front_face(ray_direction, outward_normal)
            hit_normal = set_face_normal(ray_direction, outward_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=front_face,
    )
