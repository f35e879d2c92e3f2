"""Procedural "many spheres" scene.

The scene is a large gray ground sphere, a grid of small spheres with random
materials, and three large feature spheres (glass, diffuse brown, polished
metal). It is viewed from a low angle with a narrow field of view and a
slight depth of field.

Small spheres:
    For each grid cell (a, b) with a, b in [-grid_extent, grid_extent), a
    sphere of radius 0.2 is placed at (a + 0.9 r1, 0.2, b + 0.9 r2). Spheres
    within 0.9 of (4, 0.2, 0) are skipped so they do not overlap the metal
    feature sphere. The material is chosen by a uniform draw:

    - < 0.6: Lambertian with albedo = random * random (component-wise)
    - < 0.85: Metal with albedo in [0.5, 1) and fuzz in [0, 0.5)
    - otherwise: glass (index of refraction 1.5)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.random_scene import RandomSceneParams, create_random_scene
    >>> scene, camera = create_random_scene(RandomSceneParams(seed=7))
    >>> scene.get_sphere_count() > 4
    True
"""

from dataclasses import dataclass

import numpy as np

from src.pathtracer.camera.thin_lens import ThinLensCamera
from src.pathtracer.materials.dielectric import Dielectric
from src.pathtracer.materials.lambertian import Lambertian
from src.pathtracer.materials.metal import Metal
from src.pathtracer.scene.manager import Scene

# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

SMALL_SPHERE_RADIUS = 0.2
JITTER = 0.9

# Small spheres closer than this to KEEP_OUT_CENTER are skipped
KEEP_OUT_CENTER = (4.0, 0.2, 0.0)
KEEP_OUT_DISTANCE = 0.9

GLASS_IOR = 1.5

FEATURE_RADIUS = 1.0
GLASS_SPHERE_CENTER = (0.0, 1.0, 0.0)
DIFFUSE_SPHERE_CENTER = (-4.0, 1.0, 0.0)
DIFFUSE_SPHERE_ALBEDO = (0.4, 0.2, 0.1)
METAL_SPHERE_CENTER = (4.0, 1.0, 0.0)
METAL_SPHERE_ALBEDO = (0.7, 0.6, 0.5)

# Camera
LOOKFROM = (13.0, 2.0, 3.0)
LOOKAT = (0.0, 0.0, 0.0)
VUP = (0.0, 1.0, 0.0)
VFOV = 20.0
APERTURE = 0.1
FOCUS_DIST = 10.0
ASPECT_RATIO = 3.0 / 2.0


@dataclass
class RandomSceneParams:
    """Parameters of the procedural scene.

    Attributes:
        seed: Seed of the NumPy generator that places the small spheres.
            None draws fresh entropy, giving a different scene every call.
        grid_extent: Small spheres are placed for a, b in
            [-grid_extent, grid_extent).
        diffuse_probability: Probability of a Lambertian small sphere.
        metal_probability: Probability of a metal small sphere. The rest are
            glass.
        aspect_ratio: Aspect ratio of the returned camera.
        aperture: Lens diameter of the returned camera.
    """

    seed: int | None = None
    grid_extent: int = 11
    diffuse_probability: float = 0.6
    metal_probability: float = 0.25
    aspect_ratio: float = ASPECT_RATIO
    aperture: float = APERTURE

    def __post_init__(self) -> None:
        if self.grid_extent < 0:
            raise ValueError(f"grid_extent must be non-negative, got {self.grid_extent}")
        if self.diffuse_probability < 0.0 or self.metal_probability < 0.0:
            raise ValueError("Material probabilities must be non-negative")
        if self.diffuse_probability + self.metal_probability > 1.0:
            raise ValueError(
                "diffuse_probability + metal_probability must not exceed 1, got "
                f"{self.diffuse_probability + self.metal_probability}"
            )


def create_random_camera(
    aspect_ratio: float = ASPECT_RATIO,
    aperture: float = APERTURE,
) -> ThinLensCamera:
    """Camera looking at the feature spheres from (13, 2, 3)."""
    return ThinLensCamera(
        lookfrom=LOOKFROM,
        lookat=LOOKAT,
        vup=VUP,
        vfov=VFOV,
        aspect_ratio=aspect_ratio,
        aperture=aperture,
        focus_dist=FOCUS_DIST,
    )


def _random_small_sphere_material(
    rng: np.random.Generator,
    choose_mat: float,
    params: RandomSceneParams,
) -> Lambertian | Metal | Dielectric:
    if choose_mat < params.diffuse_probability:
        albedo = rng.random(3) * rng.random(3)
        return Lambertian(tuple(albedo))
    if choose_mat < params.diffuse_probability + params.metal_probability:
        albedo = rng.random(3) / 2.0 + 0.5
        fuzz = rng.random() / 2.0
        return Metal(tuple(albedo), fuzz=fuzz)
    return Dielectric(GLASS_IOR)


def create_random_scene(
    params: RandomSceneParams | None = None,
) -> tuple[Scene, ThinLensCamera]:
    """Build the procedural scene and its camera.

    The scene is built on the host only; it is written to the Taichi fields
    when a renderer uploads it.

    Args:
        params: Scene parameters. Defaults to RandomSceneParams().

    Returns:
        A tuple of (Scene, ThinLensCamera).

    Example:
        >>> scene, camera = create_random_scene(RandomSceneParams(seed=1))
        >>> scene.spheres[0].radius
        1000.0
    """
    if params is None:
        params = RandomSceneParams()

    rng = np.random.default_rng(params.seed)
    scene = Scene()

    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, Lambertian(GROUND_ALBEDO))

    keep_out = np.array(KEEP_OUT_CENTER)
    for a in range(-params.grid_extent, params.grid_extent):
        for b in range(-params.grid_extent, params.grid_extent):
            choose_mat = rng.random()
            center = np.array(
                [a + JITTER * rng.random(), SMALL_SPHERE_RADIUS, b + JITTER * rng.random()]
            )
            if np.linalg.norm(center - keep_out) <= KEEP_OUT_DISTANCE:
                continue
            material = _random_small_sphere_material(rng, choose_mat, params)
            scene.add_sphere(tuple(center), SMALL_SPHERE_RADIUS, material)

    scene.add_sphere(GLASS_SPHERE_CENTER, FEATURE_RADIUS, Dielectric(GLASS_IOR))
    scene.add_sphere(DIFFUSE_SPHERE_CENTER, FEATURE_RADIUS, Lambertian(DIFFUSE_SPHERE_ALBEDO))
    scene.add_sphere(METAL_SPHERE_CENTER, FEATURE_RADIUS, Metal(METAL_SPHERE_ALBEDO, fuzz=0.0))

    camera = create_random_camera(params.aspect_ratio, params.aperture)
    return scene, camera
