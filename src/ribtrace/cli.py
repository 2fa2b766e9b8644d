"""Command-line front end.

Renders the built-in demonstration scene, or a RIB scene file, to a PPM or
PNG image.

Usage:
    python -m src.ribtrace [options]

Options:
    --rib FILE          Render from a RIB file (default: built-in scene)
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 300)
    --samples SAMPLES   Samples per pixel (default: 1)
    --aa QUALITY        Antialiasing preset: none, low, medium, high, ultra
    --gamma GAMMA       Gamma correction value (default: 2.2)
    --no-stratified     Use plain random sampling instead of stratified
    --single-threaded   Render in this process only
    --threads N         Number of worker processes (default: one per CPU)
    --seed N            Base random seed (default: 12345)
    --output FILE       Output file, .ppm or .png (default: output.ppm)
    --preview           Show the result in a Matplotlib window
    --quiet             Suppress progress output
    --verbose           Enable debug logging

Example:
    python -m src.ribtrace --width 800 --height 600 --aa high --output scene.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.ribtrace.camera.pinhole import Camera
from src.ribtrace.core.color import WHITE
from src.ribtrace.core.parallel import TileScheduler
from src.ribtrace.core.raytracer import Raytracer
from src.ribtrace.core.sampler import DEFAULT_SEED
from src.ribtrace.core.settings import AntialiasingQuality, RenderSettings
from src.ribtrace.core.vector import UNIT_Y, Vec3
from src.ribtrace.errors import RibParseError
from src.ribtrace.preview.export import save_image
from src.ribtrace.scene.default_scene import DEFAULT_FOV, create_default_scene
from src.ribtrace.scene.rib_parser import RibParser
from src.ribtrace.scene.scene import Light, Scene

logger = logging.getLogger(__name__)

# Fixed viewpoint for RIB scenes, which carry no camera of their own
RIB_CAMERA_POSITION = Vec3(0.0, 0.0, 1.0)
RIB_CAMERA_TARGET = Vec3(0.0, 0.0, -3.0)
FALLBACK_LIGHT_POSITION = Vec3(5.0, 5.0, 5.0)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="ribtrace",
        description="Render a RIB scene (or the built-in scene) with a deterministic ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--rib", type=str, default=None, help="Render from a RIB file")
    parser.add_argument(
        "--width", type=int, default=400, help="Image width in pixels (default: 400)"
    )
    parser.add_argument(
        "--height", type=int, default=300, help="Image height in pixels (default: 300)"
    )
    parser.add_argument(
        "--samples", type=int, default=1, help="Samples per pixel (default: 1)"
    )
    parser.add_argument(
        "--aa",
        type=str,
        default=None,
        metavar="QUALITY",
        help="Antialiasing quality: " + ", ".join(q.value for q in AntialiasingQuality),
    )
    parser.add_argument(
        "--gamma", type=float, default=2.2, help="Gamma correction value (default: 2.2)"
    )
    parser.add_argument(
        "--no-stratified",
        action="store_true",
        help="Disable stratified sampling (use random sampling)",
    )
    parser.add_argument(
        "--single-threaded",
        action="store_true",
        help="Disable worker processes",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Number of worker processes (default: auto-detect)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help=f"Random seed for deterministic output (default: {DEFAULT_SEED})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="output.ppm",
        help="Output file path, .ppm or .png (default: output.ppm)",
    )
    parser.add_argument("--preview", action="store_true", help="Show the rendered image")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> RenderSettings:
    """Translate parsed options into validated render settings."""
    settings = RenderSettings(
        width=args.width,
        height=args.height,
        samples=args.samples,
        stratified=not args.no_stratified,
        gamma=args.gamma,
        seed=args.seed,
        threads=1 if args.single_threaded else args.threads,
    )
    if args.aa:
        settings = settings.with_antialiasing(args.aa)
    return settings.validate()


def load_rib_scene(path: str, aspect_ratio: float) -> tuple[Scene, Camera]:
    """Parse a RIB file and pair it with the fixed RIB camera.

    A white light at (5, 5, 5) is added when the file defines no lights.

    Raises:
        OSError: If the file cannot be read.
        RibParseError: If the file is malformed.
    """
    parser = RibParser()
    scene = parser.parse(path)
    if not scene.lights:
        scene.add_light(Light(FALLBACK_LIGHT_POSITION, WHITE, 1.0))

    camera = Camera(
        position=RIB_CAMERA_POSITION,
        target=RIB_CAMERA_TARGET,
        vup=UNIT_Y,
        fov=parser.field_of_view if parser.field_of_view is not None else DEFAULT_FOV,
        aspect_ratio=aspect_ratio,
    )
    return scene, camera


def load_scene(rib_path: str | None, aspect_ratio: float, quiet: bool = False) -> tuple[Scene, Camera]:
    """Load the requested scene, falling back to the built-in one.

    Args:
        rib_path: RIB file to load, or None for the built-in scene.
        aspect_ratio: Camera aspect ratio.
        quiet: If True, suppress progress output.

    Returns:
        A tuple of (Scene, Camera).
    """
    if rib_path is None:
        if not quiet:
            print("No RIB file specified, using default scene")
        return create_default_scene(aspect_ratio)

    try:
        scene, camera = load_rib_scene(rib_path, aspect_ratio)
    except (OSError, RibParseError) as e:
        print(f"Error loading RIB file {rib_path}: {e}", file=sys.stderr)
        print("Failed to parse RIB file, using default scene instead", file=sys.stderr)
        return create_default_scene(aspect_ratio)

    if not quiet:
        print(f"Loaded RIB file: {rib_path}")
        print(
            f"Scene contains {len(scene.objects)} objects and {len(scene.lights)} lights"
        )
    return scene, camera


def render_scene(
    scene: Scene, camera: Camera, settings: RenderSettings, quiet: bool = False
) -> npt.NDArray[np.float64]:
    """Render with worker processes, or in-process when only one is used."""
    threads = settings.resolved_threads
    if threads <= 1:
        if not quiet:
            print("Using single-threaded rendering")

        def progress_callback(current: int, total: int) -> None:
            print(
                f"\r  Progress: {current}/{total} rows ({current / total * 100:.1f}%)",
                end="",
                flush=True,
            )

        image = Raytracer(scene, camera, settings).render(
            callback=None if quiet else progress_callback
        )
        if not quiet:
            print()  # Newline after progress
        return image

    if not quiet:
        print(f"Using multi-process rendering with {threads} workers")
    return TileScheduler(scene, camera, settings).render()


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = build_settings(args)
        scene, camera = load_scene(args.rib, settings.aspect_ratio, quiet=args.quiet)

        if not args.quiet:
            print(
                f"Starting render: {settings.width}x{settings.height}, "
                f"{settings.effective_samples} samples per pixel"
            )
            print(f"Gamma correction: {settings.gamma}")
            print(f"Stratified sampling: {'enabled' if settings.stratified else 'disabled'}")
            print(f"Using deterministic seed: {settings.seed}")

        start_time = time.time()
        image = render_scene(scene, camera, settings, quiet=args.quiet)

        output_file = Path(args.output)
        save_image(image, output_file)

        if not args.quiet:
            print(f"Render completed in {time.time() - start_time:.2f} seconds")
            print(f"Saved to: {output_file.absolute()}")

        if args.preview:
            from src.ribtrace.preview.display import show_preview

            show_preview(image, title=output_file.name)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
