"""
Command line entry point for rendering scenes.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import numpy as np

from .logging_config import setup_logging
from .renderer import Renderer, RenderSettings
from .scene_parser import SceneParseError, load_scene
from .scenes import SCENES, create_scene


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='prismtrace',
        description='PrismTrace - A Python Ray Tracing Renderer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  prismtrace --scene random --output render.ppm
  prismtrace --width 800 --height 450 --samples 500 --seed 1 --output hd.png
  prismtrace --scene-file scenes/glass.yaml --threads 8
        '''
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument('--scene', type=str, default='random', choices=sorted(SCENES),
                        help='Built-in scene to render (default: random)')
    source.add_argument('--scene-file', type=str, default=None,
                        help='YAML or JSON scene description')

    parser.add_argument('--width', type=int, default=None, help='Image width (default: 400)')
    parser.add_argument('--height', type=int, default=None, help='Image height (default: 225)')
    parser.add_argument('--samples', type=int, default=None, help='Samples per pixel (default: 100)')
    parser.add_argument('--depth', type=int, default=None, help='Max ray depth (default: 50)')
    parser.add_argument('--threads', type=int, default=None, help='Number of threads (0=auto)')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for a reproducible image')
    parser.add_argument('--output', type=str, default='output/render.ppm',
                        help='Output filename (.ppm writes P3 text, other extensions use Pillow, '
                             '"-" writes P3 to stdout)')
    parser.add_argument('--log-level', type=str, default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging verbosity (default: WARNING)')
    return parser


def _setting_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """RenderSettings fields given on the command line."""
    overrides = {
        'width': args.width,
        'height': args.height,
        'samples_per_pixel': args.samples,
        'max_depth': args.depth,
        'num_threads': args.threads,
        'seed': args.seed,
    }
    return {k: v for k, v in overrides.items() if v is not None}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    # With the image on stdout, the report goes to stderr
    to_stdout = args.output == '-'
    report = sys.stderr if to_stdout else sys.stdout
    overrides = _setting_overrides(args)

    try:
        if args.scene_file:
            world, camera, settings = load_scene(args.scene_file, overrides)
            scene_name = args.scene_file
        else:
            settings = RenderSettings(**overrides)
            world, camera = create_scene(
                args.scene, settings.aspect_ratio, np.random.default_rng(settings.seed)
            )
            scene_name = args.scene
    except SceneParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        parser.error(str(e))

    print("=" * 60, file=report)
    print("PrismTrace Ray Tracer", file=report)
    print("=" * 60, file=report)
    print(f"\nScene: {scene_name} ({len(world)} objects)", file=report)
    print("Render Settings:", file=report)
    print(f"  Resolution: {settings.width}x{settings.height}", file=report)
    print(f"  Samples: {settings.samples_per_pixel}", file=report)
    print(f"  Max Depth: {settings.max_depth}", file=report)
    print(f"  Threads: {settings.num_threads}", file=report)
    print(f"  Seed: {settings.seed}", file=report)

    renderer = Renderer(settings)

    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True, file=report)

    renderer.set_progress_callback(progress_callback)

    print("\nRendering...", file=report)
    start_time = time.time()

    image = renderer.render(world, camera)

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds", file=report)
    if elapsed > 0:
        primary_rays = settings.width * settings.height * settings.samples_per_pixel
        print(f"  Primary rays per second: {primary_rays / elapsed:.0f}", file=report)

    if to_stdout:
        renderer.write_ppm(renderer.to_ldr(image), sys.stdout)
        sys.stdout.flush()
    else:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        print(f"\nSaving to: {args.output}", file=report)
        renderer.save_image(image, str(output_path))

    print("\nDone!", file=report)
    return 0


if __name__ == '__main__':
    sys.exit(main())
