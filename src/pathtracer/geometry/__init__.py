"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) returning a HitRecord
whose normal always opposes the incoming ray.
"""

from .sphere import HitRecord, Sphere, hit_sphere, is_front_face, set_face_normal

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "is_front_face",
    "set_face_normal",
]
