"""Tests for geometric shapes."""

import pytest
import math
import numpy as np

from prismtrace.vec3 import Vec3, Point3, Color
from prismtrace.ray import Ray
from prismtrace.shapes import Sphere, HittableList, HitRecord
from prismtrace.materials import Lambertian, Dielectric

INF = float('inf')


def random_spheres(rng, count):
    return [
        Sphere(Vec3.random(-5, 5, rng), float(rng.uniform(0.2, 1.5)))
        for _ in range(count)
    ]


def random_ray(rng):
    direction = Vec3.random_unit_vector(rng)
    return Ray(Vec3.random(-8, 8, rng), direction)


class TestHitRecord:
    """Test front-face orientation of hit records."""

    def test_front_face_keeps_outward_normal(self):
        rec = HitRecord(point=Point3(0, 0, -1), normal=Vec3(), t=1.0, front_face=False)
        rec.set_face_normal(Ray(Point3(0, 0, -2), Vec3(0, 0, 1)), Vec3(0, 0, -1))
        assert rec.front_face is True
        assert rec.normal == Vec3(0, 0, -1)

    def test_back_face_flips_normal(self):
        rec = HitRecord(point=Point3(0, 0, 1), normal=Vec3(), t=1.0, front_face=True)
        rec.set_face_normal(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), Vec3(0, 0, 1))
        assert rec.front_face is False
        assert rec.normal == Vec3(0, 0, -1)


class TestSphere:
    """Test Sphere class."""

    def test_creation(self):
        center = Point3(0, 0, 0)
        sphere = Sphere(center, 1.0)
        assert sphere.center == center
        assert sphere.radius == 1.0

    def test_hit_through_center(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        hit = sphere.hit(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)), 0.001, INF)

        assert hit is not None
        assert abs(hit.t - 4.0) < 1e-12
        assert abs(hit.point.z - (-1.0)) < 1e-12

    def test_hit_with_unnormalized_direction(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        hit = sphere.hit(Ray(Point3(0, 0, -5), Vec3(0, 0, 2)), 0.001, INF)

        assert hit is not None
        assert abs(hit.t - 2.0) < 1e-12
        assert hit.point == Point3(0, 0, -1)

    def test_hit_front_face(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        hit = sphere.hit(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)), 0.001, INF)

        assert hit.front_face is True
        assert hit.normal == Vec3(0, 0, -1)

    def test_hit_from_inside(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        hit = sphere.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), 0.001, INF)

        assert hit is not None
        assert hit.front_face is False
        # Normal still faces the incoming ray
        assert hit.normal == Vec3(0, 0, -1)

    def test_miss(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        assert sphere.hit(Ray(Point3(0, 5, -5), Vec3(0, 0, 1)), 0.001, INF) is None

    def test_behind_ray(self):
        sphere = Sphere(Point3(0, 0, -5), 1.0)
        assert sphere.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), 0.001, INF) is None

    def test_far_root_when_near_root_excluded(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        hit = sphere.hit(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)), 4.5, INF)
        assert hit is not None
        assert abs(hit.t - 6.0) < 1e-12

    def test_both_roots_outside_interval(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        assert sphere.hit(ray, 0.001, 3.9) is None
        assert sphere.hit(ray, 6.1, INF) is None

    def test_with_material(self):
        material = Lambertian(Color(1, 0, 0))
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        hit = sphere.hit(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)), 0.001, INF)
        assert hit.material is material

    def test_hit_points_lie_on_surface(self):
        rng = np.random.default_rng(11)
        sphere = Sphere(Point3(0.5, -1, 2), 1.7)
        hits = 0
        for _ in range(300):
            ray = random_ray(rng)
            hit = sphere.hit(ray, 0.001, INF)
            if hit is not None:
                hits += 1
                assert abs((hit.point - sphere.center).length() - sphere.radius) < 1e-9
        assert hits > 0


class TestNegativeRadiusSphere:
    """A negative radius turns the outward normal inward."""

    def test_front_face_flag_flips(self):
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        positive = Sphere(Point3(0, 0, 0), 1.0).hit(ray, 0.001, INF)
        negative = Sphere(Point3(0, 0, 0), -1.0).hit(ray, 0.001, INF)

        assert positive.t == negative.t
        assert positive.front_face is True
        assert negative.front_face is False
        # Both stored normals face the incoming ray
        assert positive.normal == negative.normal == Vec3(0, 0, -1)

    def test_inside_hit_counts_as_front_face(self):
        ray = Ray(Point3(0, 0, 0), Vec3(1, 0, 0))
        hit = Sphere(Point3(0, 0, 0), -0.45).hit(ray, 0.001, INF)

        assert hit.front_face is True
        assert hit.normal == Vec3(-1, 0, 0)

    def test_hollow_shell_layers(self):
        glass = Dielectric(1.5)
        world = HittableList()
        world.add(Sphere(Point3(0, 0, 0), 0.5, glass))
        world.add(Sphere(Point3(0, 0, 0), -0.45, glass))

        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        outer = world.hit(ray, 0.001, INF)
        assert abs(outer.t - 4.5) < 1e-12
        assert outer.front_face is True

        # Continue from just past the outer wall: the inner wall is next and,
        # being inward-facing, the ray leaves glass into air there.
        inner = world.hit(ray, outer.t + 1e-6, INF)
        assert abs(inner.t - 4.55) < 1e-12
        assert inner.front_face is False


class TestHittableList:
    """Test HittableList class."""

    def test_empty_list_misses(self):
        assert HittableList().hit(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), 0.001, INF) is None

    def test_add_len_and_clear(self):
        world = HittableList()
        world.add(Sphere(Point3(0, 0, -1), 0.5))
        world.add(Sphere(Point3(0, 0, -3), 0.5))
        assert len(world) == 2
        assert len(list(world)) == 2

        world.clear()
        assert len(world) == 0

    def test_closest_hit_wins(self):
        near = Sphere(Point3(0, 0, -3), 0.5, Lambertian(Color(1, 0, 0)))
        far = Sphere(Point3(0, 0, -10), 0.5, Lambertian(Color(0, 1, 0)))
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))

        for objects in ([near, far], [far, near]):
            hit = HittableList(objects).hit(ray, 0.001, INF)
            assert hit.material is near.material
            assert abs(hit.t - 2.5) < 1e-12

    def test_t_max_bounds_the_search(self):
        world = HittableList([Sphere(Point3(0, 0, -10), 0.5)])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert world.hit(ray, 0.001, 5.0) is None

    def test_matches_brute_force_scan(self):
        rng = np.random.default_rng(2024)
        spheres = random_spheres(rng, 12)
        world = HittableList(list(spheres))
        shuffled = HittableList(list(reversed(spheres)))

        hits = 0
        for _ in range(400):
            ray = random_ray(rng)
            t_min, t_max = 0.001, float(rng.choice([INF, 6.0]))

            candidates = [s.hit(ray, t_min, t_max) for s in spheres]
            candidates = [h for h in candidates if h is not None]
            result = world.hit(ray, t_min, t_max)
            reversed_result = shuffled.hit(ray, t_min, t_max)

            if not candidates:
                assert result is None
                assert reversed_result is None
                continue

            hits += 1
            best = min(h.t for h in candidates)
            assert result.t == best
            assert reversed_result.t == best
        assert hits > 0
