"""Core rendering module.

Components:
    vector: vec3 helpers and random direction sampling
    ray: Ray and interval value types
    color: Background colour and 8-bit conversion
    settings: Render configuration and backend initialization
    integrator: Path tracing kernels and the render target
    progressive: Progressive accumulation wrapper

Note: integrator and progressive are NOT imported here because they declare
Taichi fields. Import them directly once Taichi is initialized.
"""

from .ray import RAY_T_MAX, RAY_T_MIN, Interval, Ray, make_interval, make_ray, ray_at, surrounds
from .settings import RenderSettings, init_backend
from .vector import (
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    random_in_hemisphere,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    real,
    reflect,
    refract,
    unit_vec,
    vec3,
)

__all__ = [
    "Ray",
    "Interval",
    "RAY_T_MIN",
    "RAY_T_MAX",
    "ray_at",
    "make_ray",
    "make_interval",
    "surrounds",
    "RenderSettings",
    "init_backend",
    "real",
    "vec3",
    "dot",
    "cross",
    "length",
    "length_squared",
    "unit_vec",
    "reflect",
    "refract",
    "near_zero",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_hemisphere",
    "random_in_unit_disk",
]
