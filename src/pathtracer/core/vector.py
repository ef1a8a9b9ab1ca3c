"""Vector algebra for the path tracer.

All vectors are ``vec3`` values in double precision. The same type is used
for points, directions and linear RGB colours; Taichi already provides the
component-wise operators (``+``, ``-``, unary ``-``, ``*`` and ``/`` with
either a scalar or another vector), so this module only adds the geometric
helpers and the Monte Carlo sampling routines.

Normalizing a zero-length vector divides by zero and yields NaN/Inf
components. Nothing here checks for it: the scattering code relies on
``near_zero`` to catch degenerate directions before they are used.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.vector import reflect, vec3
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

# Scalar and vector types used by every kernel in the package
real = ti.f64
vec3 = ti.types.vector(3, real)

# Per-axis threshold of the near-zero test
NEAR_ZERO_EPSILON = 1e-8


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Dot product a . b."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Cross product a x b."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def length_squared(v: vec3) -> real:
    """Squared Euclidean length, cheaper than ``length`` for comparisons."""
    return dot(v, v)


@ti.func
def length(v: vec3) -> real:
    """Euclidean length of ``v``."""
    return ti.sqrt(length_squared(v))


@ti.func
def unit_vec(v: vec3) -> vec3:
    """Scale ``v`` to unit length.

    The result is undefined (NaN/Inf components) when ``v`` has zero length.
    """
    return v / length(v)


@ti.func
def reflect(v: vec3, normal: vec3) -> vec3:
    """Mirror ``v`` about a unit ``normal``: v - 2(v . n)n.

    The reflected vector keeps the length of ``v``.
    """
    return v - 2.0 * dot(v, normal) * normal


@ti.func
def refract(unit_direction: vec3, normal: vec3, eta_ratio: real) -> vec3:
    """Bend a unit direction through a surface with Snell's law.

    The refracted ray is split into a part perpendicular to the normal,
    ``eta * (v + cos_theta * n)``, and a part parallel to it whose length
    completes a unit vector.

    Args:
        unit_direction: Incoming direction, unit length.
        normal: Unit surface normal opposing ``unit_direction``.
        eta_ratio: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(-dot(unit_direction, normal), 1.0)
    r_perpendicular = eta_ratio * (unit_direction + cos_theta * normal)
    r_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_perpendicular))) * normal
    return r_perpendicular + r_parallel


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if *any* component of ``v`` is within 1e-8 of zero.

    This is an axis-wise test, not a magnitude test; Lambertian scattering
    uses it to fall back to the bare normal.
    """
    s = NEAR_ZERO_EPSILON
    result = 0
    if ti.abs(v.x) < s or ti.abs(v.y) < s or ti.abs(v.z) < s:
        result = 1
    return result


# =============================================================================
# Random Sampling
# =============================================================================


@ti.func
def random_vec() -> vec3:
    """Vector with independent uniform components in [0, 1)."""
    return vec3(ti.random(real), ti.random(real), ti.random(real))


@ti.func
def random_range(lo: real, hi: real) -> vec3:
    """Vector with independent uniform components in [lo, hi)."""
    return lo + (hi - lo) * random_vec()


@ti.func
def random_in_unit_sphere() -> vec3:
    """Uniform point strictly inside the unit sphere, by rejection sampling.

    About 52% of the cube draws are accepted, so the loop takes two draws on
    average.
    """
    p = random_range(-1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = random_range(-1.0, 1.0)
    return p


@ti.func
def random_in_unit_disk() -> vec3:
    """Uniform point inside the unit disk of the xy-plane (z is always 0)."""
    p = vec3(2.0 * ti.random(real) - 1.0, 2.0 * ti.random(real) - 1.0, 0.0)
    while length_squared(p) >= 1.0:
        p = vec3(2.0 * ti.random(real) - 1.0, 2.0 * ti.random(real) - 1.0, 0.0)
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Random direction on the unit sphere."""
    return unit_vec(random_in_unit_sphere())


@ti.func
def random_in_hemisphere(normal: vec3) -> vec3:
    """Point in the unit ball, flipped into the hemisphere around ``normal``."""
    in_unit_sphere = random_in_unit_sphere()
    result = in_unit_sphere
    if dot(in_unit_sphere, normal) <= 0.0:
        result = -in_unit_sphere
    return result
