"""
Scene files.

A scene file is a YAML (or JSON) mapping with up to four sections. Every
section and field is checked against a fixed schema; anything unexpected is
reported as a SceneParseError naming where it was found.

```yaml
camera:                 # optional, looks from (0, 0, 5) at the origin
  look_from: [13, 2, 3]
  look_at: [0, 0, 0]
  vup: [0, 1, 0]
  vfov: 20
  aperture: 0.1
  focus_dist: 10        # default: distance from look_from to look_at
  aspect_ratio: 1.78    # default: render width / height

render:                 # optional, RenderSettings defaults
  width: 400
  height: 225
  samples: 100
  max_depth: 50
  tile_size: 16
  threads: 0
  seed: 7

materials:              # named materials, shared by reference
  glass:
    type: dielectric    # lambertian (default) | metal | dielectric
    ior: 1.5

objects:
  - type: sphere
    center: [0, 1, 0]
    radius: 1
    material: glass
  - center: [0, 1, 0]   # negative radius: inner wall of a hollow shell
    radius: -0.9
    material: glass
```

Vectors are `[x, y, z]` or `{x, y, z}`; colors are `[r, g, b]`, `{r, g, b}`
or `'#rrggbb'`. Every object needs a material, given by name or inline.
"""

from __future__ import annotations
import json
import logging
import math
import numbers
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .vec3 import Vec3, Color
from .camera import Camera
from .shapes import Sphere, HittableList
from .materials import Material, Lambertian, Metal, Dielectric
from .renderer import RenderSettings

logger = logging.getLogger(__name__)

SECTIONS = ('camera', 'render', 'materials', 'objects')

CAMERA_FIELDS = ('look_from', 'look_at', 'vup', 'vfov', 'aperture', 'focus_dist', 'aspect_ratio')

# Scene file key -> RenderSettings field
RENDER_FIELDS = {
    'width': 'width',
    'height': 'height',
    'samples': 'samples_per_pixel',
    'max_depth': 'max_depth',
    'tile_size': 'tile_size',
    'threads': 'num_threads',
    'seed': 'seed',
}

MATERIAL_FIELDS = {
    'lambertian': ('type', 'albedo'),
    'metal': ('type', 'albedo', 'fuzz'),
    'dielectric': ('type', 'ior'),
}

SPHERE_FIELDS = ('type', 'center', 'radius', 'material')

# Below this |cross(vup, w)| the up hint is treated as parallel to the view.
PARALLEL_EPSILON = 1e-9

SceneTuple = Tuple[HittableList, Camera, RenderSettings]


class SceneParseError(Exception):
    """A scene file that cannot be turned into a scene."""
    pass


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise SceneParseError(f"{where} must be a mapping, got {type(value).__name__}")
    return value


def _check_fields(data: Mapping[str, Any], allowed, where: str) -> None:
    unknown = sorted(str(key) for key in data if key not in allowed)
    if unknown:
        raise SceneParseError(f"Unknown field(s) in {where}: {', '.join(unknown)}")


def _number(value: Any, where: str) -> float:
    # bool is an int subclass, but `radius: yes` is a mistake
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise SceneParseError(f"{where} must be a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise SceneParseError(f"{where} must be finite, got {value!r}")
    return number


def _integer(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise SceneParseError(f"{where} must be an integer, got {value!r}")
    return int(value)


class SceneParser:
    """Builds a scene, camera and render settings from a scene description.

    ``overrides`` are RenderSettings fields (e.g. from the command line) that
    replace the file's render section before the camera is built, so the
    default camera aspect ratio always matches the final image size.
    """

    def __init__(self, overrides: Optional[Mapping[str, Any]] = None):
        self.overrides = dict(overrides or {})
        self.materials: Dict[str, Material] = {}

    def parse_file(self, filepath: str) -> SceneTuple:
        path = Path(filepath)
        if not path.is_file():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()

        try:
            if path.suffix.lower() == '.json':
                data = json.loads(content)
            else:
                # YAML is a superset of JSON, so this covers unknown suffixes too
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SceneParseError(f"Cannot read scene file {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file must contain a mapping: {filepath}")

        logger.debug("Loaded scene description from %s", path)
        return self.parse_dict(data)

    def parse_dict(self, data: Mapping[str, Any]) -> SceneTuple:
        """Parse a scene description mapping.

        Materials come first because objects refer to them by name, and the
        render settings come before the camera, whose aspect ratio defaults
        to the image's.
        """
        data = _mapping(data, "scene")
        _check_fields(data, SECTIONS, "scene")

        self.materials = {}
        materials = _mapping(data.get('materials', {}), "materials")
        for name, spec in materials.items():
            self.materials[str(name)] = self._parse_material(spec, f"materials.{name}")

        world = self._parse_objects(data.get('objects', []))
        settings = self._parse_settings(data.get('render', {}))
        camera = self._parse_camera(data.get('camera', {}), settings)

        logger.debug("Parsed %d materials and %d objects", len(self.materials), len(world))
        return world, camera, settings

    def _parse_vec3(self, value: Any, where: str = "vector") -> Vec3:
        if isinstance(value, (list, tuple)):
            if len(value) != 3:
                raise SceneParseError(f"{where} must have 3 components, got {len(value)}")
            x, y, z = (_number(c, f"{where}[{i}]") for i, c in enumerate(value))
            return Vec3(x, y, z)
        if isinstance(value, dict):
            _check_fields(value, ('x', 'y', 'z'), where)
            return Vec3(*(_number(value.get(axis, 0), f"{where}.{axis}") for axis in 'xyz'))
        raise SceneParseError(f"{where} must be a vector, got {value!r}")

    def _parse_color(self, value: Any, where: str = "color") -> Color:
        if isinstance(value, str):
            digits = value[1:] if value.startswith('#') else ''
            if len(digits) != 6:
                raise SceneParseError(f"{where}: cannot parse color from string {value!r}")
            try:
                r, g, b = (int(digits[k:k + 2], 16) / 255.0 for k in (0, 2, 4))
            except ValueError:
                raise SceneParseError(f"{where}: cannot parse color from string {value!r}") from None
            return Color(r, g, b)
        if isinstance(value, dict):
            _check_fields(value, ('r', 'g', 'b'), where)
            return Color(*(_number(value.get(c, 0), f"{where}.{c}") for c in 'rgb'))
        if isinstance(value, (list, tuple)):
            return Color(*self._parse_vec3(value, where))
        raise SceneParseError(f"{where} must be a color, got {value!r}")

    def _parse_material(self, spec: Any, where: str) -> Material:
        spec = _mapping(spec, where)
        mat_type = str(spec.get('type', 'lambertian')).lower()
        if mat_type not in MATERIAL_FIELDS:
            raise SceneParseError(f"{where}: Unknown material type: {mat_type}")
        _check_fields(spec, MATERIAL_FIELDS[mat_type], where)

        if mat_type == 'lambertian':
            return Lambertian(self._parse_color(spec.get('albedo', [0.5, 0.5, 0.5]), f"{where}.albedo"))

        if mat_type == 'metal':
            albedo = self._parse_color(spec.get('albedo', [0.8, 0.8, 0.8]), f"{where}.albedo")
            fuzz = _number(spec.get('fuzz', 0.0), f"{where}.fuzz")
            if fuzz < 0:
                raise SceneParseError(f"{where}.fuzz must be >= 0, got {fuzz}")
            return Metal(albedo, fuzz)

        ior = _number(spec.get('ior', 1.5), f"{where}.ior")
        if ior <= 0:
            raise SceneParseError(f"{where}.ior must be > 0, got {ior}")
        return Dielectric(ior)

    def _resolve_material(self, ref: Any, where: str) -> Material:
        if ref is None:
            raise SceneParseError(f"{where} has no material")
        if isinstance(ref, str):
            if ref not in self.materials:
                raise SceneParseError(f"{where}: Unknown material: {ref}")
            return self.materials[ref]
        if isinstance(ref, dict):
            return self._parse_material(ref, f"{where}.material")
        raise SceneParseError(f"{where}: Invalid material reference: {ref!r}")

    def _parse_objects(self, objects: Any) -> HittableList:
        if not isinstance(objects, list):
            raise SceneParseError(f"objects must be a list, got {type(objects).__name__}")

        world = HittableList()
        for index, spec in enumerate(objects):
            where = f"objects[{index}]"
            spec = _mapping(spec, where)
            obj_type = str(spec.get('type', 'sphere')).lower()
            if obj_type != 'sphere':
                raise SceneParseError(f"{where}: Unknown object type: {obj_type}")
            _check_fields(spec, SPHERE_FIELDS, where)

            center = self._parse_vec3(spec.get('center', [0, 0, 0]), f"{where}.center")
            radius = _number(spec.get('radius', 1.0), f"{where}.radius")
            if radius == 0:
                raise SceneParseError(f"{where}.radius must be non-zero")
            material = self._resolve_material(spec.get('material'), where)
            world.add(Sphere(center, radius, material))
        return world

    def _parse_settings(self, spec: Any) -> RenderSettings:
        spec = _mapping(spec, "render")
        _check_fields(spec, RENDER_FIELDS, "render")

        values = {}
        for key, field in RENDER_FIELDS.items():
            if spec.get(key) is not None:
                values[field] = _integer(spec[key], f"render.{key}")
        values.update(self.overrides)

        try:
            return RenderSettings(**values)
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"Invalid render settings: {e}") from e

    def _parse_camera(self, spec: Any, settings: RenderSettings) -> Camera:
        spec = _mapping(spec, "camera")
        _check_fields(spec, CAMERA_FIELDS, "camera")

        look_from = self._parse_vec3(spec.get('look_from', [0, 0, 5]), "camera.look_from")
        look_at = self._parse_vec3(spec.get('look_at', [0, 0, 0]), "camera.look_at")
        vup = self._parse_vec3(spec.get('vup', [0, 1, 0]), "camera.vup")

        view = look_from - look_at
        if view.length_squared() == 0:
            raise SceneParseError("camera.look_from and camera.look_at must differ")
        if vup.cross(view.normalize()).length() < PARALLEL_EPSILON:
            raise SceneParseError("camera.vup must not be parallel to the view direction")

        vfov = _number(spec.get('vfov', 60), "camera.vfov")
        if not 0 < vfov < 180:
            raise SceneParseError(f"camera.vfov must be between 0 and 180 degrees, got {vfov}")

        aspect_ratio = _number(spec.get('aspect_ratio', settings.aspect_ratio), "camera.aspect_ratio")
        aperture = _number(spec.get('aperture', 0.0), "camera.aperture")
        focus_dist = _number(spec.get('focus_dist', view.length()), "camera.focus_dist")
        if aspect_ratio <= 0 or aperture < 0 or focus_dist <= 0:
            raise SceneParseError(
                "camera.aspect_ratio and camera.focus_dist must be > 0, camera.aperture >= 0"
            )

        return Camera(
            look_from=look_from,
            look_at=look_at,
            vup=vup,
            vfov=vfov,
            aspect_ratio=aspect_ratio,
            aperture=aperture,
            focus_dist=focus_dist
        )


def load_scene(filepath: str, overrides: Optional[Mapping[str, Any]] = None) -> SceneTuple:
    """Load a scene file, applying RenderSettings overrides."""
    return SceneParser(overrides).parse_file(filepath)


def parse_scene(data: Mapping[str, Any], overrides: Optional[Mapping[str, Any]] = None) -> SceneTuple:
    """Parse a scene description mapping, applying RenderSettings overrides."""
    return SceneParser(overrides).parse_dict(data)
