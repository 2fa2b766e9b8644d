"""Deterministic multi-process rendering by horizontal strips.

The image is cut into at most N horizontal strips ("tiles"), one per worker
process. Each worker rebuilds its own scene, camera and raytracer from a
plain-data copy and renders its rows. Because every pixel seeds its own
generator from its coordinates, the assembled image is byte-identical to a
single-process render, however the rows were split.

Key properties:
    - One task per tile, a fixed pool sized to the tile count
    - ``Pool.map`` is the only synchronization point
    - Worker exceptions come back as failed results and fail the whole render
    - Tiles are reassembled by row range, never by completion order

Example:
    >>> from src.ribtrace.core.parallel import TileScheduler
    >>> from src.ribtrace.core.settings import RenderSettings
    >>> from src.ribtrace.scene.default_scene import create_default_scene
    >>> scene, camera = create_default_scene()
    >>> scheduler = TileScheduler(scene, camera, RenderSettings(width=32, height=18, threads=4))
    >>> scheduler.render().shape
    (18, 32, 3)
"""

from __future__ import annotations

import logging
import math
import multiprocessing as mp
import time
import traceback
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt

from src.ribtrace.camera.pinhole import Camera
from src.ribtrace.core.raytracer import Raytracer
from src.ribtrace.core.settings import RenderSettings
from src.ribtrace.errors import RenderError
from src.ribtrace.scene.scene import Scene
from src.ribtrace.scene.serialization import (
    deserialize_camera,
    deserialize_scene,
    serialize_camera,
    serialize_scene,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Tiles
# =============================================================================


@dataclass(frozen=True)
class Tile:
    """A strip of rows [start_y, end_y) assigned to one worker.

    Attributes:
        tile_id: Index of the tile in partition order.
        start_y: First camera-space row (0 = bottom).
        end_y: One past the last row.
        width: Full image width.
        height: Full image height.
        seed: Base seed of the render.
    """

    tile_id: int
    start_y: int
    end_y: int
    width: int
    height: int
    seed: int

    @property
    def row_count(self) -> int:
        return self.end_y - self.start_y


@dataclass(frozen=True)
class TileResult:
    """Outcome of rendering one tile.

    Attributes:
        tile_id: Index of the tile.
        start_y: First row of the tile.
        end_y: One past the last row.
        success: Whether the worker finished without an exception.
        rows: Rendered rows, shape (end_y - start_y, width, 3), top row
            first. None on failure.
        error: Error description on failure.
    """

    tile_id: int
    start_y: int
    end_y: int
    success: bool
    rows: npt.NDArray[np.float64] | None = None
    error: str | None = None


def partition_tiles(width: int, height: int, workers: int, seed: int) -> list[Tile]:
    """Split the image into horizontal strips.

    Every tile holds ceil(height / workers) rows except possibly the last;
    tiles that would be empty are dropped, so fewer than ``workers`` tiles
    can come back when workers > height.

    Args:
        width: Image width.
        height: Image height.
        workers: Requested number of strips (>= 1).
        seed: Base seed copied into every tile.

    Returns:
        Tiles ordered by start_y ascending.
    """
    workers = max(1, workers)
    rows_per_tile = math.ceil(height / workers)
    tiles = []
    for i in range(workers):
        start_y = i * rows_per_tile
        end_y = min((i + 1) * rows_per_tile, height)
        if start_y >= end_y:
            continue
        tiles.append(Tile(len(tiles), start_y, end_y, width, height, seed))
    return tiles


# =============================================================================
# Worker
# =============================================================================


def render_tile(task: tuple[Tile, dict[str, Any], dict[str, Any], RenderSettings]) -> TileResult:
    """Render one tile from plain data.

    Module-level so a process pool can pickle it. Any exception is caught
    and reported in the result rather than raised.

    Args:
        task: (tile, serialized scene, serialized camera, settings).

    Returns:
        A TileResult with the rendered rows or the error text.
    """
    tile, scene_data, camera_data, settings = task
    try:
        scene = deserialize_scene(scene_data)
        camera = deserialize_camera(camera_data)
        tracer = Raytracer(scene, camera, settings)
        rows = tracer.render_rows(tile.start_y, tile.end_y)
    except Exception as exc:
        return TileResult(
            tile_id=tile.tile_id,
            start_y=tile.start_y,
            end_y=tile.end_y,
            success=False,
            error=f"{type(exc).__name__}: {exc}\n{traceback.format_exc()}",
        )
    return TileResult(tile.tile_id, tile.start_y, tile.end_y, success=True, rows=rows)


def assemble_tiles(results: Sequence[TileResult]) -> npt.NDArray[np.float64]:
    """Stack tile rows into one image, top strip first.

    Raises:
        RenderError: If any tile failed; no partial image is produced.
    """
    failed = [r for r in results if not r.success]
    if failed:
        first = failed[0]
        raise RenderError(
            f"Tile {first.tile_id} (rows {first.start_y}-{first.end_y}) failed: {first.error}"
        )
    if not results:
        raise RenderError("No tiles were rendered")

    ordered = sorted(results, key=lambda r: r.start_y, reverse=True)
    return np.concatenate([r.rows for r in ordered], axis=0)


# =============================================================================
# Scheduler
# =============================================================================


class TileScheduler:
    """Renders a scene across a pool of worker processes.

    Attributes:
        scene: The scene to render.
        camera: The camera generating primary rays.
        settings: Render settings; ``threads`` selects the worker count.
    """

    def __init__(self, scene: Scene, camera: Camera, settings: RenderSettings | None = None) -> None:
        self.scene = scene
        self.camera = camera
        self.settings = (settings or RenderSettings()).validate()

    def tiles(self) -> list[Tile]:
        """Tiles for the configured worker count."""
        s = self.settings
        return partition_tiles(s.width, s.height, s.resolved_threads, s.seed)

    def render(self) -> npt.NDArray[np.float64]:
        """Render the image, in parallel when more than one tile is needed.

        Returns:
            Float64 array of shape (height, width, 3), top row first.

        Raises:
            RenderError: If a worker fails or the pool cannot run.
        """
        start = time.perf_counter()
        tiles = self.tiles()
        scene_data = serialize_scene(self.scene)
        camera_data = serialize_camera(self.camera)
        tasks = [(tile, scene_data, camera_data, self.settings) for tile in tiles]

        logger.info(
            "Rendering %dx%d in %d tile(s) using %d worker(s)",
            self.settings.width,
            self.settings.height,
            len(tiles),
            self.settings.resolved_threads,
        )

        if len(tasks) == 1:
            results = [render_tile(tasks[0])]
        else:
            try:
                with mp.Pool(processes=len(tasks)) as pool:
                    results = pool.map(render_tile, tasks)
            except (OSError, mp.ProcessError) as exc:
                raise RenderError(f"Worker pool failed: {exc}") from exc

        image = assemble_tiles(results)
        logger.info("All tiles completed in %.2fs", time.perf_counter() - start)
        return image
