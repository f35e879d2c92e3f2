"""Scene module for scene management and hit records.

Components:
    intersection: Sphere storage fields and closest-hit queries
    manager: Scene snapshot of spheres and shared materials
    random_scene: Procedural "many spheres" scene and its camera

Scene data is kept in Structure-of-Arrays Taichi fields, written once per
render by Scene.upload().
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    clear_scene,
    get_sphere_count,
    intersect_scene,
    upload_spheres,
)
from .manager import Scene, SphereInfo
from .random_scene import RandomSceneParams, create_random_camera, create_random_scene

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "MAX_SPHERES",
    "upload_spheres",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    # Manager module
    "Scene",
    "SphereInfo",
    # Procedural scene
    "RandomSceneParams",
    "create_random_scene",
    "create_random_camera",
]
