"""Taichi-based Monte Carlo path tracer for analytic sphere scenes.

This package renders a static scene of spheres by tracing randomly sampled
light paths, with support for:
- Diffuse (Lambertian), fuzzy metal and dielectric (glass) materials
- Thin-lens camera with depth of field
- Depth-bounded path integration with a sky-gradient background
- Deterministic, seedable sampling (one random sub-stream per pixel sample)
- Progressive rendering with accumulation

Subpackages:
    core: Vector algebra, rays, random sampling, integrator and rendering loop
    geometry: Sphere primitive and ray-sphere intersection
    materials: Scattering models (Lambertian, metal, dielectric)
    scene: Scene storage, nearest-hit queries and scene builders
    camera: Thin-lens camera ray generation
    preview: Image output (PPM, PNG) and preview utilities

Taichi must be initialised (see pathtracer.config.init_backend) before any
module that declares Taichi fields is imported.
"""

__version__ = "0.1.0"
