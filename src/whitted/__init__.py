"""Taichi-based Whitted-style ray tracer.

This package renders triangle scenes lit by a single point light with the
Phong local illumination model. Every pixel traces one primary ray; there
are no shadow, reflection or refraction rays.

Subpackages:
    core: Ray and vector utilities, the render loop and the Renderer
    geometry: Triangle primitive and ray-triangle intersection
    materials: Phong shading
    scene: Scene configuration and closest-hit queries
    camera: Pinhole camera with ray generation
    preview: Output sinks and PNG export
"""

__version__ = "0.1.0"
