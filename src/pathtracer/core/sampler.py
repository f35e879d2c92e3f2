"""Counter-based random number generation for Monte Carlo sampling.

Every random draw in the renderer goes through an explicit generator state
(a single ``ti.u32``) that is passed into and returned from each sampling
function. A camera sample derives its state by hashing the render seed with
its (row, column, sample) coordinates, so the random stream of a sample does
not depend on which worker thread computes it or in which order scanlines
finish. Two renders with the same seed are therefore pixel-identical.

The hash is the PCG-RXS-M-XS output permutation applied on top of a 32-bit
LCG step, which is cheap and has good avalanche behaviour for this purpose.

Example:
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     state = seed_state(ti.u32(7), 0, 0, 0)
    ...     value, state = next_float(state)
    ...     return value
"""

import taichi as ti

# LCG multiplier and increment. Both stay below 2**31 so they are
# representable as default integer literals before the cast to u32.
_LCG_MULTIPLIER = 747796405
_LCG_INCREMENT = 1442695041

# Output permutation multiplier.
_PERMUTE_MULTIPLIER = 277803737

# 2**-24: maps the top 24 bits of a u32 onto [0, 1).
_INV_2_24 = 1.0 / 16777216.0


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value with one PCG step.

    Args:
        value: The input value (generator state or key).

    Returns:
        A well-mixed 32-bit hash of the input.
    """
    state = value * ti.cast(_LCG_MULTIPLIER, ti.u32) + ti.cast(_LCG_INCREMENT, ti.u32)
    shift = (state >> ti.cast(28, ti.u32)) + ti.cast(4, ti.u32)
    word = ((state >> shift) ^ state) * ti.cast(_PERMUTE_MULTIPLIER, ti.u32)
    return (word >> ti.cast(22, ti.u32)) ^ word


@ti.func
def seed_state(seed: ti.u32, row: ti.i32, col: ti.i32, sample: ti.i32) -> ti.u32:
    """Derive the generator state for one camera sample.

    Args:
        seed: The render seed.
        row: Image row of the pixel (0 = top).
        col: Image column of the pixel (0 = left).
        sample: Index of the sample within the pixel's supersampling grid.

    Returns:
        The initial generator state for this sample.
    """
    h = pcg_hash(seed)
    h = pcg_hash(h ^ ti.cast(row, ti.u32))
    h = pcg_hash(h ^ ti.cast(col, ti.u32))
    return pcg_hash(h ^ ti.cast(sample, ti.u32))


@ti.func
def next_float(state: ti.u32):
    """Draw a uniform float in [0, 1) and advance the generator.

    Args:
        state: The current generator state.

    Returns:
        A tuple (value, new_state).
    """
    new_state = pcg_hash(state)
    value = ti.cast(new_state >> ti.cast(8, ti.u32), ti.f32) * _INV_2_24
    return value, new_state


@ti.kernel
def _draw_floats(seed: ti.u32, count: ti.i32, out: ti.template()):
    # Single task; the inner loop runs serially
    for _ in range(1):
        state = seed_state(seed, 0, 0, 0)
        for i in range(count):
            value, state = next_float(state)
            out[i] = value


def draw_floats(seed: int, count: int) -> list[float]:
    """Draw ``count`` uniform floats from the stream of ``seed`` (Python-side).

    Used for diagnostics and tests; the renderer draws inside kernels.

    Args:
        seed: The seed of the stream (sample (0, 0, 0) of that seed).
        count: How many values to draw.

    Returns:
        The drawn values, in order.
    """
    if count <= 0:
        return []
    out = ti.field(dtype=ti.f32, shape=count)
    _draw_floats(seed, count, out)
    return [float(v) for v in out.to_numpy()]
