"""
PrismTrace - A Python Ray Tracing Renderer

A small Monte Carlo path tracer with support for:
- Spheres (including hollow shells via negative radius)
- Lambertian, fuzzy metal and dielectric materials
- Depth of field
- Multi-threaded, seed-reproducible rendering
- P3 portable pixmap output
"""

__version__ = "0.1.0"
__author__ = "PrismTrace Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import Sphere, HittableList, HitRecord, Hittable
from .materials import Material, ScatterResult, Lambertian, Metal, Dielectric
from .camera import Camera
from .renderer import Renderer, RenderSettings, ray_color, sky_color
from .scenes import SCENES, create_scene, random_scene, material_scene, three_sphere_scene
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene

__all__ = [
    'Vec3', 'Point3', 'Color',
    'Ray',
    'Sphere', 'HittableList', 'HitRecord', 'Hittable',
    'Material', 'ScatterResult', 'Lambertian', 'Metal', 'Dielectric',
    'Camera',
    'Renderer', 'RenderSettings', 'ray_color', 'sky_color',
    'SCENES', 'create_scene', 'random_scene', 'material_scene', 'three_sphere_scene',
    'SceneParser', 'SceneParseError', 'load_scene', 'parse_scene',
]
