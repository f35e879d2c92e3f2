"""Taichi-based Monte Carlo sphere path tracer.

This package renders scenes made of spheres by path tracing, with:
- Lambertian, metal and dielectric materials shared between spheres
- A thin-lens camera with depth of field
- A deterministic, seedable per-sample random source
- A scanline scheduler that renders rows in parallel and emits them in order

Subpackages:
    core: Vector utilities, random sampling, radiance estimator, scheduler
    geometry: Sphere primitive and ray-sphere intersection
    materials: Material descriptions and scattering functions
    scene: Scene snapshot, closest-hit queries, procedural scene
    camera: Thin-lens camera model
    preview: Display conversion and PPM/PNG export

Modules that declare Taichi fields must be imported after ``ti.init``.
"""

__version__ = "0.1.0"
