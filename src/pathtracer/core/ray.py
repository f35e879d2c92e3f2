"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass, the vector algebra helpers that are
not already covered by ``taichi.math`` operators (negation, addition,
subtraction, component-wise and scalar products come with ``vec3``), and the
random vector generators used for Monte Carlo scattering.

Random generators take the generator state explicitly and return the advanced
state alongside their result (see ``core.sampler``).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.sampler import next_float

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Threshold below which every component counts as zero
NEAR_ZERO_EPSILON = 1e-8

# Upper bound on rejection-sampling rounds. The acceptance rate is ~52% for
# the ball and ~79% for the disk, so the bound is never reached in practice.
MAX_REJECTION_ATTEMPTS = 100


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Euclidean length of a vector."""
    return tm.sqrt(tm.dot(v, v))


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared Euclidean length of a vector."""
    return tm.dot(v, v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The caller must ensure v has non-zero length; a zero vector yields NaN
    components. Host-side constructors reject the inputs that could produce
    one (zero-radius spheres, degenerate cameras).

    Args:
        v: The input vector.

    Returns:
        v / |v|.
    """
    return v / length(v)


@ti.func
def unit_vector_or_zero(v: vec3) -> vec3:
    """Normalize a vector, mapping a zero vector to zero instead of NaN."""
    result = vec3(0.0, 0.0, 0.0)
    if length_squared(v) > 0.0:
        result = unit_vector(v)
    return result


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect a vector about a normal.

    Args:
        v: The incoming direction (pointing toward the surface).
        n: The surface normal (unit length).

    Returns:
        v - 2 * dot(v, n) * n.
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit direction through a surface (Snell's law).

    The result is the sum of the component perpendicular to the normal and
    the component parallel to it. Total internal reflection must already
    have been ruled out by the caller.

    Args:
        uv: The incoming direction (unit length).
        n: The surface normal (unit length, facing against uv).
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -tm.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether every component of a vector is close to zero.

    Used to catch degenerate scatter directions.

    Returns:
        1 if all components are below NEAR_ZERO_EPSILON in magnitude, else 0.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vec(state: ti.u32):
    """Generate a vector with components uniform in [0, 1).

    Args:
        state: The generator state.

    Returns:
        A tuple (vector, new_state).
    """
    x, s1 = next_float(state)
    y, s2 = next_float(s1)
    z, s3 = next_float(s2)
    return vec3(x, y, z), s3


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Generate a uniformly distributed point inside the unit ball.

    Uses rejection sampling on the cube [-1, 1)^3.

    Args:
        state: The generator state.

    Returns:
        A tuple (point, new_state) with |point|^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    s = state
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            candidate, s = random_vec(s)
            candidate = 2.0 * candidate - vec3(1.0, 1.0, 1.0)
            if length_squared(candidate) < 1.0:
                p = candidate
                found = True
    return p, s


@ti.func
def random_unit_vector(state: ti.u32):
    """Generate a random unit vector (normalized point from the unit ball).

    Args:
        state: The generator state.

    Returns:
        A tuple (unit_vector, new_state). The vector is zero in the
        unreachable case where rejection sampling ran out of attempts.
    """
    p, s = random_in_unit_sphere(state)
    return unit_vector_or_zero(p), s


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Generate a uniformly distributed point inside the unit disk (z = 0).

    Used for thin-lens depth-of-field sampling.

    Args:
        state: The generator state.

    Returns:
        A tuple (point, new_state) with x^2 + y^2 < 1 and z = 0.
    """
    p = vec3(0.0, 0.0, 0.0)
    s = state
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, s = next_float(s)
            y, s = next_float(s)
            candidate = vec3(2.0 * x - 1.0, 2.0 * y - 1.0, 0.0)
            if length_squared(candidate) < 1.0:
                p = candidate
                found = True
    return p, s
