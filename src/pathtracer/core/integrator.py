"""Radiance estimator for Monte Carlo path tracing.

A camera ray is traced through the scene by repeated closest-hit queries.
At every hit the material scatters the ray (or absorbs it) and the path
throughput is multiplied by the attenuation of the material that was hit.
A path ends in one of three ways:

    - escaped: the ray misses everything and picks up the sky gradient
    - absorbed: the material returns no scattered ray, the path is black
    - depth-exhausted: MAX_DEPTH scene queries without escaping, also black

There are no light sources; all light comes from the background. The
recursion ``color = attenuation * color(scattered)`` is written as a loop
because Taichi functions cannot recurse.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.integrator import background
    >>> color = background((0.0, 1.0, 0.0))  # ~ (0.5, 0.7, 1.0)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import unit_vector
from src.pathtracer.core.sampler import seed_state
from src.pathtracer.materials.material import get_attenuation, scatter
from src.pathtracer.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum number of scene queries along one path
MAX_DEPTH = 128

# Accepted hit range. The lower bound keeps a scattered ray from hitting the
# surface it starts on again.
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints
HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


@ti.func
def background_color(direction: vec3) -> vec3:
    """Vertical white-to-blue gradient seen by escaping rays.

    Args:
        direction: The ray direction (any non-zero length).

    Returns:
        (1 - t) * white + t * sky blue with t = 0.5 * (unit(direction).y + 1).
    """
    unit_direction = unit_vector(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * HORIZON_COLOR + t * ZENITH_COLOR


@ti.func
def ray_color(origin: vec3, direction: vec3, state: ti.u32):
    """Estimate the radiance arriving along a ray.

    Args:
        origin: The ray origin.
        direction: The ray direction (not necessarily unit length).
        state: The generator state.

    Returns:
        A tuple (color, new_state).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction
    s = state

    # Taichi doesn't support break in ti.func loops
    active = 1

    for _ in range(MAX_DEPTH):
        if active == 1:
            rec = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background_color(ray_direction)
                active = 0
            else:
                scattered_direction, did_scatter, s = scatter(
                    rec.material_id, ray_direction, rec.normal, rec.front_face, s
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= get_attenuation(rec.material_id)
                    ray_origin = rec.point
                    ray_direction = scattered_direction

    # A path still active here ran out of depth; color stays black
    return color, s


# =============================================================================
# Single-ray Kernels
# =============================================================================


_traced_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_ray(origin: vec3, direction: vec3, seed: ti.u32):
    # Single task; the bounce loop runs serially
    for i in range(1):
        color, _ = ray_color(origin, direction, seed_state(seed, 0, i, 0))
        _traced_color[None] = color


@ti.kernel
def _background(direction: vec3) -> vec3:
    return background_color(direction)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    seed: int = 0,
) -> tuple[float, float, float]:
    """Trace one ray through the uploaded scene (Python-callable).

    Used for testing and debugging; the renderer traces rays inside its own
    kernel.

    Args:
        origin: The ray origin.
        direction: The ray direction.
        seed: Seed of the random stream used by the path.

    Returns:
        Tuple of (R, G, B) linear radiance.
    """
    _trace_ray(vec3(*origin), vec3(*direction), seed & 0xFFFFFFFF)
    color = _traced_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def background(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Evaluate the sky gradient for a direction (Python-callable)."""
    color = _background(vec3(*direction))
    return (float(color[0]), float(color[1]), float(color[2]))
