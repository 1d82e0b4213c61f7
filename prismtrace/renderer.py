"""
Renderer module - the heart of the ray tracer.

Implements:
- Path tracing with a fixed bounce budget
- Multi-threaded tile-based rendering with one random stream per pixel
- Gamma correction and 8-bit quantization
- P3 portable pixmap output (other formats through Pillow)
"""

from __future__ import annotations
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Callable, TextIO, Tuple
import numpy as np

from .vec3 import Color
from .ray import Ray
from .camera import Camera
from .shapes import Hittable

logger = logging.getLogger(__name__)

# Shadow-acne epsilon: hits closer than this to the ray origin are ignored.
T_MIN = 0.001

BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)
SKY_BLUE = Color(0.5, 0.7, 1.0)


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 400
    height: int = 225
    samples_per_pixel: int = 100
    max_depth: int = 50
    tile_size: int = 16
    num_threads: int = 0  # 0 = auto-detect
    seed: Optional[int] = None  # None = fresh entropy on every render

    def __post_init__(self):
        if self.width < 2 or self.height < 2:
            raise ValueError(
                f"Image must be at least 2x2 pixels, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be >= 1, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.tile_size < 1:
            raise ValueError(f"tile_size must be >= 1, got {self.tile_size}")
        if self.num_threads < 0:
            raise ValueError(f"num_threads must be >= 0, got {self.num_threads}")
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be >= 0, got {self.seed}")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


def sky_color(ray: Ray) -> Color:
    """Blend white to sky blue by the vertical component of the ray."""
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return WHITE * (1.0 - t) + SKY_BLUE * t


def ray_color(ray: Ray, scene: Hittable, depth: int,
              rng: Optional[np.random.Generator] = None) -> Color:
    """Compute the color carried back along a ray.

    Follows the ray through at most ``depth`` scatter events, multiplying the
    attenuation of every bounce. The path ends black when the budget runs out
    or a material absorbs the ray, and picks up the sky color when it escapes
    the scene.

    Args:
        ray: The ray to trace
        scene: The scene to trace against
        depth: Maximum number of bounces
        rng: Random stream used by the materials

    Returns:
        The computed color for this ray
    """
    throughput = WHITE
    while depth > 0:
        hit_record = scene.hit(ray, T_MIN, float('inf'))
        if hit_record is None:
            return throughput * sky_color(ray)

        scatter_result = hit_record.material.scatter(ray, hit_record, rng)
        if scatter_result is None:
            return BLACK

        throughput = throughput * scatter_result.attenuation
        ray = scatter_result.scattered_ray
        depth -= 1

    return BLACK


class Renderer:
    """Path tracing renderer with multi-threading support."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, scene: Hittable, camera: Camera) -> np.ndarray:
        """Render the scene and return the image as a numpy array.

        The scene and camera are only read. Every pixel draws from its own
        generator keyed by the settings seed and the pixel position, so the
        result depends on the seed and settings but not on how the image is
        split into tiles or how many threads render them.

        Args:
            scene: The scene to render (any Hittable)
            camera: The camera to render from

        Returns:
            Linear image as numpy array of shape (height, width, 3),
            top scanline first
        """
        width = self.settings.width
        height = self.settings.height
        samples = self.settings.samples_per_pixel
        max_depth = self.settings.max_depth

        image = np.zeros((height, width, 3), dtype=np.float64)

        tiles = self._generate_tiles(width, height)
        root_seed = np.random.SeedSequence(self.settings.seed)
        total_tiles = len(tiles)
        completed_tiles = [0]
        lock = threading.Lock()

        logger.info(
            "Rendering %dx%d, %d spp, depth %d, %d tiles on %d threads",
            width, height, samples, max_depth, total_tiles, self.settings.num_threads,
        )

        def render_tile(tile: Tuple[int, int, int, int]
                        ) -> Tuple[Tuple[int, int, int, int], np.ndarray]:
            """Render a single tile."""
            x0, y0, x1, y1 = tile
            tile_image = np.zeros((y1 - y0, x1 - x0, 3), dtype=np.float64)

            for j in range(y1 - y0):
                for i in range(x1 - x0):
                    rng = self.pixel_rng(root_seed, x0 + i, y0 + j)
                    pixel_color = BLACK

                    for _ in range(samples):
                        u = (x0 + i + rng.random()) / (width - 1)
                        v = (height - 1 - (y0 + j) + rng.random()) / (height - 1)

                        ray = camera.get_ray(u, v, rng)
                        pixel_color = pixel_color + ray_color(ray, scene, max_depth, rng)

                    tile_image[j, i] = pixel_color.to_array() / samples

            with lock:
                completed_tiles[0] += 1
                done = completed_tiles[0]
            logger.debug("Tile %s done (%d/%d)", tile, done, total_tiles)
            if self._progress_callback:
                self._progress_callback(done / total_tiles)

            return tile, tile_image

        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                results = list(executor.map(render_tile, tiles))
        else:
            results = [render_tile(tile) for tile in tiles]

        # Combine tiles into final image
        for tile, tile_image in results:
            x0, y0, x1, y1 = tile
            image[y0:y1, x0:x1] = tile_image

        logger.info("Render finished")
        return image

    @staticmethod
    def pixel_rng(root_seed: np.random.SeedSequence, x: int, y: int) -> np.random.Generator:
        """Return the random stream for pixel (x, y), y counted from the top."""
        return np.random.default_rng(
            np.random.SeedSequence(root_seed.entropy, spawn_key=(y, x))
        )

    def ray_color(self, ray: Ray, scene: Hittable,
                  rng: Optional[np.random.Generator] = None) -> Color:
        """Trace a single ray with the configured bounce budget."""
        return ray_color(ray, scene, self.settings.max_depth, rng)

    def _generate_tiles(self, width: int, height: int) -> list[Tuple[int, int, int, int]]:
        """Generate tiles for parallel rendering.

        Args:
            width: Image width
            height: Image height

        Returns:
            List of tiles as (x0, y0, x1, y1) tuples, row-major
        """
        tile_size = self.settings.tile_size
        tiles = []

        for y in range(0, height, tile_size):
            for x in range(0, width, tile_size):
                x1 = min(x + tile_size, width)
                y1 = min(y + tile_size, height)
                tiles.append((x, y, x1, y1))

        return tiles

    @staticmethod
    def to_ldr(image: np.ndarray) -> np.ndarray:
        """Convert a linear image to 8-bit with gamma 2 correction.

        Args:
            image: Averaged linear color (float64)

        Returns:
            LDR image as uint8 array
        """
        # NaN (degenerate geometry) quantizes to 0
        image = np.nan_to_num(image, nan=0.0)
        corrected = np.sqrt(np.clip(image, 0.0, None))
        return (256.0 * np.clip(corrected, 0.0, 0.999)).astype(np.uint8)

    @staticmethod
    def ppm_text(ldr: np.ndarray) -> str:
        """Encode an 8-bit image as P3 text, top scanline first."""
        height, width = ldr.shape[:2]
        lines = ["P3", f"{width} {height}", "255"]
        for r, g, b in ldr.reshape(-1, 3):
            lines.append(f"{r} {g} {b}")
        return "\n".join(lines) + "\n"

    def write_ppm(self, ldr: np.ndarray, stream: TextIO) -> None:
        """Write an 8-bit image to a text stream as P3."""
        stream.write(self.ppm_text(ldr))

    def save_image(self, image: np.ndarray, filename: str) -> None:
        """Save image to file.

        Args:
            image: Image array (linear float or 8-bit)
            filename: Output filename (extension determines format)
        """
        if image.dtype == np.float64 or image.dtype == np.float32:
            image = self.to_ldr(image)

        path = Path(filename)
        if path.suffix.lower() == '.ppm':
            with open(path, 'w', encoding='ascii', newline='\n') as f:
                self.write_ppm(image, f)
        else:
            from PIL import Image as PILImage

            pil_image = PILImage.fromarray(image)
            pil_image.save(path)
        logger.info("Saved %s", path)
