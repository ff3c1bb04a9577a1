"""Geometry module for the sphere primitive.

Components:
    sphere: Sphere primitive, hit records and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so that every pixel's
rays can be tested in parallel inside the render kernel. The composite
"list of spheres" lives in scene.intersection, which owns the sphere storage.

Ray-object intersection follows the pattern:
    record = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere, set_face_normal

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "set_face_normal",
]
