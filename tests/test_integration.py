"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete pipeline from scene creation through the
final image file. Renders are small so the suite stays fast while still
exercising parsing, tracing, scheduling and export together.

The reference image under tests/reference/ pins the exact bytes of the
10x10 single red sphere render and is compared byte for byte.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

# Reference image directory
REFERENCE_DIR = Path(__file__).parent / "reference"
REFERENCE_PPM = REFERENCE_DIR / "reference_sphere.ppm"

SAMPLE_RIB = """\
# Two spheres over a quad, lit by one point light
WorldBegin
  LightSource "pointlight" 1 "intensity" [1.0]
  AttributeBegin
    Translate -0.6 0 -3
    Color [0.8 0.2 0.2]
    Surface "plastic"
    Sphere 0.5 -0.5 0.5 360
  AttributeEnd
  AttributeBegin
    Translate 0.6 0 -3
    Color [0.9 0.9 0.9]
    Surface "metal"
    Sphere 0.5 -0.5 0.5 360
  AttributeEnd
  Color [0.5 0.5 0.5]
  Surface "matte"
  Polygon "P" [-3 -0.5 -1  3 -0.5 -1  3 -0.5 -6  -3 -0.5 -6]
  NuPatch 2 2 [0 0 1 1] 0 1 2 2 [0 0 1 1] 0 1 "P" [
    -1 1 -5  -1 2 -5
     1 1 -5   1 2 -5
  ]
WorldEnd
"""


class TestReferenceRender:
    """Regression tests against the pinned reference image."""

    def test_reference_render_is_pinned(self, reference_scene, reference_settings, tmp_path):
        """Render the 10x10 reference and compare it with the stored bytes."""
        from src.ribtrace.core.raytracer import Raytracer
        from src.ribtrace.preview.export import compare_images, write_ppm

        scene, camera = reference_scene
        image = Raytracer(scene, camera, reference_settings).render()
        output = tmp_path / "reference_sphere.ppm"
        write_ppm(image, output)

        if not REFERENCE_PPM.exists():
            pytest.fail(f"Reference image missing: {REFERENCE_PPM}")

        diff = compare_images(REFERENCE_PPM, output)
        assert diff.identical, f"{diff.reason}: {diff.different_bytes} bytes differ"

    def test_committed_reference_is_well_formed(self):
        """Test the stored reference: 10x10, sky corners and the lit upper right of the sphere."""
        from src.ribtrace.preview.export import read_ppm

        pixels = read_ppm(REFERENCE_PPM)
        assert pixels.shape == (10, 10, 3)
        assert pixels[0, 0].tolist() == [186, 216, 255]
        assert pixels[9, 9].tolist() == [186, 216, 255]
        assert pixels[3, 5].tolist() == [186, 99, 99]
        assert pixels[6, 4].tolist() == [80, 43, 43]

    def test_reference_render_content(self, reference_scene, reference_settings):
        """Test that the sphere covers the centre and the sky the corners."""
        from src.ribtrace.core.raytracer import Raytracer
        from src.ribtrace.scene.default_scene import SKY_BLUE

        scene, camera = reference_scene
        image = Raytracer(scene, camera, reference_settings).render()
        sky = np.array(SKY_BLUE.gamma_correct(reference_settings.gamma).to_tuple())

        assert np.array_equal(image[0, 0], sky)
        assert np.array_equal(image[9, 9], sky)
        centre = image[5, 5]
        assert centre[0] > centre[1] and centre[0] > centre[2]

    def test_parallel_reference_is_byte_identical(self, reference_scene, reference_settings, tmp_path):
        """Test that a four-worker render writes the same file."""
        from dataclasses import replace

        from src.ribtrace.core.parallel import TileScheduler
        from src.ribtrace.core.raytracer import Raytracer
        from src.ribtrace.preview.export import compare_images, write_ppm

        scene, camera = reference_scene
        single = tmp_path / "single.ppm"
        multi = tmp_path / "multi.ppm"
        write_ppm(Raytracer(scene, camera, reference_settings).render(), single)
        write_ppm(TileScheduler(scene, camera, replace(reference_settings, threads=4)).render(), multi)

        assert compare_images(single, multi).identical


class TestPipeline:
    """End-to-end tests over the built-in and parsed scenes."""

    def test_default_scene_end_to_end(self, default_scene, tmp_path):
        """Test an antialiased default scene render through PNG export."""
        from PIL import Image as PILImage

        from src.ribtrace.core.parallel import TileScheduler
        from src.ribtrace.core.settings import RenderSettings
        from src.ribtrace.preview.export import save_image

        scene, camera = default_scene
        settings = RenderSettings(width=16, height=9, threads=2).with_antialiasing("low")
        image = TileScheduler(scene, camera, settings).render()

        assert image.shape == (9, 16, 3)
        assert np.isfinite(image).all()
        assert image.min() >= 0.0 and image.max() <= 1.0

        path = tmp_path / "default.png"
        save_image(image, path)
        with PILImage.open(path) as loaded:
            assert loaded.size == (16, 9)

    def test_rib_scene_end_to_end(self, tmp_path):
        """Test parsing a RIB file with every primitive type and rendering it."""
        from src.ribtrace.cli import load_rib_scene
        from src.ribtrace.core.parallel import TileScheduler
        from src.ribtrace.core.raytracer import Raytracer
        from src.ribtrace.core.settings import RenderSettings
        from src.ribtrace.geometry.nurbs import NurbsSurface
        from src.ribtrace.geometry.triangle import Triangle

        path = tmp_path / "scene.rib"
        path.write_text(SAMPLE_RIB)
        settings = RenderSettings(width=12, height=8, threads=1)
        scene, camera = load_rib_scene(str(path), settings.aspect_ratio)

        assert len(scene.objects) == 5
        assert sum(isinstance(obj, Triangle) for obj in scene.objects) == 2
        assert isinstance(scene.objects[-1], NurbsSurface)

        direct = Raytracer(scene, camera, settings).render()
        parallel = TileScheduler(scene, camera, RenderSettings(width=12, height=8, threads=3)).render()
        assert np.array_equal(direct, parallel)
        assert not np.array_equal(direct, np.zeros_like(direct))
