"""Tests for Camera class."""

import pytest
import math
import numpy as np

from prismtrace.vec3 import Vec3, Point3
from prismtrace.camera import Camera


def forward_camera(**kwargs):
    params = dict(
        look_from=Point3(0, 0, 0),
        look_at=Point3(0, 0, -1),
        vup=Vec3(0, 1, 0),
        vfov=90,
        aspect_ratio=1.0,
    )
    params.update(kwargs)
    return Camera(**params)


class TestCameraCreation:
    """Test Camera construction."""

    def test_origin(self):
        assert forward_camera().origin == Point3(0, 0, 0)

    def test_camera_basis_vectors(self):
        cam = forward_camera()
        # w points backward, u right, v up
        assert cam.w == Vec3(0, 0, 1)
        assert cam.u == Vec3(1, 0, 0)
        assert cam.v == Vec3(0, 1, 0)

    def test_basis_is_orthonormal_for_any_orientation(self):
        cam = Camera(
            look_from=Point3(13, 2, 3),
            look_at=Point3(0, 0, 0),
            vup=Vec3(0, 1, 0),
            vfov=20,
            aspect_ratio=16 / 9
        )
        for axis in (cam.u, cam.v, cam.w):
            assert abs(axis.length() - 1.0) < 1e-12
        assert abs(cam.u.dot(cam.v)) < 1e-12
        assert abs(cam.u.dot(cam.w)) < 1e-12
        assert abs(cam.v.dot(cam.w)) < 1e-12

    def test_viewport_scales_with_focus_distance(self):
        cam = forward_camera(vfov=90, aspect_ratio=2.0, focus_dist=3.0)
        # tan(45 deg) = 1: viewport is 2 high, 4 wide at unit distance
        assert abs(cam.vertical.length() - 6.0) < 1e-12
        assert abs(cam.horizontal.length() - 12.0) < 1e-12
        assert cam.lower_left_corner == Point3(-6, -3, -3)

    def test_lens_radius_is_half_the_aperture(self):
        assert forward_camera(aperture=0.5).lens_radius == 0.25


class TestCameraRays:
    """Test Camera.get_ray() method."""

    def test_center_ray(self):
        ray = forward_camera().get_ray(0.5, 0.5)
        assert ray.direction == Vec3(0, 0, -1)

    def test_corner_rays(self):
        cam = forward_camera()
        assert cam.get_ray(0, 0).direction == Vec3(-1, -1, -1)
        assert cam.get_ray(1, 1).direction == Vec3(1, 1, -1)

    def test_direction_is_not_normalized(self):
        ray = forward_camera(focus_dist=4.0).get_ray(0.5, 0.5)
        assert ray.direction == Vec3(0, 0, -4)

    def test_ray_origin_without_dof(self):
        cam = Camera(
            look_from=Point3(1, 2, 3),
            look_at=Point3(0, 0, 0),
            vup=Vec3(0, 1, 0),
            vfov=90,
            aspect_ratio=1.0,
            aperture=0.0
        )
        assert cam.get_ray(0.5, 0.5).origin == cam.origin


class TestDepthOfField:
    """Test Camera depth of field."""

    def dof_camera(self):
        return Camera(
            look_from=Point3(0, 0, 0),
            look_at=Point3(0, 0, -10),
            vup=Vec3(0, 1, 0),
            vfov=90,
            aspect_ratio=1.0,
            aperture=2.0,
            focus_dist=10.0
        )

    def test_dof_varies_origin_within_lens(self):
        cam = self.dof_camera()
        rng = np.random.default_rng(5)
        origins = [cam.get_ray(0.5, 0.5, rng).origin for _ in range(100)]

        xs = [o.x for o in origins]
        assert max(xs) - min(xs) > 0.1
        for o in origins:
            assert o.z == 0
            assert (o - cam.origin).length() < cam.lens_radius

    def test_rays_converge_on_focus_plane(self):
        cam = self.dof_camera()
        rng = np.random.default_rng(6)
        target = cam.lower_left_corner + cam.horizontal * 0.3 + cam.vertical * 0.7
        for _ in range(20):
            ray = cam.get_ray(0.3, 0.7, rng)
            assert ray.at(1.0) == target

    def test_no_dof_fixed_origin(self):
        cam = forward_camera(look_at=Point3(0, 0, -10), aperture=0.0, focus_dist=10.0)
        for _ in range(10):
            assert cam.get_ray(0.5, 0.5).origin == cam.origin


class TestFieldOfView:
    """Test Camera field of view."""

    def test_narrow_fov(self):
        ray_narrow = forward_camera(vfov=20).get_ray(1, 1)
        ray_wide = forward_camera(vfov=90).get_ray(1, 1)

        center = Vec3(0, 0, -1)
        assert ray_narrow.direction.normalize().dot(center) > ray_wide.direction.normalize().dot(center)


class TestCameraPositioning:
    """Test various camera positions."""

    def test_looking_down(self):
        cam = Camera(
            look_from=Point3(0, 10, 0),
            look_at=Point3(0, 0, 0),
            vup=Vec3(0, 0, -1),
            vfov=90,
            aspect_ratio=1.0
        )
        assert cam.get_ray(0.5, 0.5).direction.y < 0

    def test_angled_camera(self):
        cam = Camera(
            look_from=Point3(5, 5, 5),
            look_at=Point3(0, 0, 0),
            vup=Vec3(0, 1, 0),
            vfov=60,
            aspect_ratio=1.0
        )
        ray = cam.get_ray(0.5, 0.5)
        target = Point3(0, 0, 0) - cam.origin
        assert ray.direction.normalize().dot(target.normalize()) > 0.999
