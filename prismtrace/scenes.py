"""
Built-in scenes.

Every factory takes the image aspect ratio and a random stream and returns
the populated world together with a camera framing it.
"""

from __future__ import annotations
from typing import Callable, Dict, Tuple

import numpy as np

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Sphere, HittableList
from .materials import Lambertian, Metal, Dielectric

SceneFactory = Callable[[float, np.random.Generator], Tuple[HittableList, Camera]]


def random_scene(aspect_ratio: float, rng: np.random.Generator) -> Tuple[HittableList, Camera]:
    """Create the cover scene: a field of small random spheres around three big ones."""
    world = HittableList()

    ground_material = Lambertian(Color(0.5, 0.5, 0.5))
    world.add(Sphere(Point3(0, -1000, 0), 1000, ground_material))

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = Point3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())

            if (center - Point3(4, 0.2, 0)).length() > 0.9:
                if choose_mat < 0.8:
                    # diffuse
                    albedo = Color.random(rng=rng) * Color.random(rng=rng)
                    sphere_material = Lambertian(albedo)
                elif choose_mat < 0.95:
                    # metal
                    albedo = Color.random(0.5, 1, rng)
                    fuzz = rng.uniform(0, 0.5)
                    sphere_material = Metal(albedo, fuzz)
                else:
                    # glass
                    sphere_material = Dielectric(1.5)

                world.add(Sphere(center, 0.2, sphere_material))

    world.add(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    camera = Camera(
        look_from=Point3(13, 2, 3),
        look_at=Point3(0, 0, 0),
        vup=Vec3(0, 1, 0),
        vfov=20,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0
    )
    return world, camera


def material_scene(aspect_ratio: float, rng: np.random.Generator) -> Tuple[HittableList, Camera]:
    """Create a small showcase of every material, including a hollow glass sphere."""
    world = HittableList()

    ground = Lambertian(Color(0.8, 0.8, 0.0))
    center = Lambertian(Color(0.1, 0.2, 0.5))
    glass = Dielectric(1.5)
    gold = Metal(Color(0.8, 0.6, 0.2), 0.0)

    world.add(Sphere(Point3(0, -100.5, -1), 100, ground))
    world.add(Sphere(Point3(0, 0, -1), 0.5, center))
    # Outer and inner wall of a glass shell
    world.add(Sphere(Point3(-1, 0, -1), 0.5, glass))
    world.add(Sphere(Point3(-1, 0, -1), -0.45, glass))
    world.add(Sphere(Point3(1, 0, -1), 0.5, gold))

    look_from = Point3(3, 3, 2)
    look_at = Point3(0, 0, -1)
    camera = Camera(
        look_from=look_from,
        look_at=look_at,
        vup=Vec3(0, 1, 0),
        vfov=20,
        aspect_ratio=aspect_ratio,
        aperture=2.0,
        focus_dist=(look_from - look_at).length()
    )
    return world, camera


def three_sphere_scene(aspect_ratio: float, rng: np.random.Generator) -> Tuple[HittableList, Camera]:
    """Create a ground sphere with a diffuse, a glass and a metal sphere in a row.

    The glass sphere sits in the middle of the frame and the pinhole camera
    leaves the upper part of the image to the sky.
    """
    world = HittableList()

    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(Color(0.5, 0.5, 0.5))))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    world.add(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    camera = Camera(
        look_from=Point3(0, 2, 10),
        look_at=Point3(0, 1, 0),
        vup=Vec3(0, 1, 0),
        vfov=45,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=10.0
    )
    return world, camera


SCENES: Dict[str, SceneFactory] = {
    'random': random_scene,
    'materials': material_scene,
    'three_spheres': three_sphere_scene,
}


def create_scene(name: str, aspect_ratio: float,
                 rng: np.random.Generator) -> Tuple[HittableList, Camera]:
    """Build a registered scene by name."""
    try:
        factory = SCENES[name]
    except KeyError:
        raise ValueError(f"Unknown scene: {name}") from None
    return factory(aspect_ratio, rng)
