"""Taichi-based Monte Carlo path tracer.

Renders scenes of spheres with diffuse, metal and glass materials through a
thin-lens camera, averaging many jittered paths per pixel.

Subpackages:
    core: Vectors, rays, colour, settings, the path integrator and the
        progressive renderer
    geometry: Hit records and the sphere primitive
    materials: Lambertian, metal and dielectric scattering plus the material
        registry
    camera: Thin-lens camera with depth of field
    scene: Primitive storage, the scene manager and the random spheres scene
    preview: PNG export

Taichi must be initialized (``pathtracer.core.settings.init_backend``)
before importing any module that declares fields.
"""

__version__ = "0.1.0"
