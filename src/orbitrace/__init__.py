"""Taichi ray tracer for an orbiting view of a random sphere field.

This package renders a field of spheres with a Monte Carlo ray tracer while a
thin-lens camera orbits the scene, producing one image per animation frame.

Subpackages:
    core: Ray and vector utilities, random streams, the radiance integrator,
        the parallel frame renderer and the animation loop
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian, metal and dielectric scattering models
    scene: Sphere list storage, scene building and the random spheres scene
    camera: Thin-lens camera and the orbit driver
    output: PPM/PNG frame export
"""

__version__ = "0.1.0"
