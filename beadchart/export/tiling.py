from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from threading import Lock
from typing import Callable, List, Optional

from PIL import Image
from pydantic import BaseModel

from .. import settings
from ..core.errors import ConfigurationError
from ..models.pattern import PatternData
from .rasterizer import RenderOptions, render_cells

logger = logging.getLogger(__name__)

DEFAULT_TILE_TITLE = "Part {row}-{col} (Row {row}, Col {col})"

ProgressCallback = Callable[[int, int], None]


class ExportTileSpec(BaseModel):
    chunk_width: int = settings.TILE_WIDTH
    chunk_height: int = settings.TILE_HEIGHT

    def check(self) -> None:
        if self.chunk_width <= 0 or self.chunk_height <= 0:
            raise ConfigurationError(
                f"tile size must be positive, got {self.chunk_width}x{self.chunk_height}"
            )


@dataclass(frozen=True)
class TileRegion:
    row: int
    col: int
    start_x: int
    start_y: int
    width: int
    height: int

    @property
    def filename(self) -> str:
        return f"pattern_row{self.row + 1}_col{self.col + 1}"


@dataclass(frozen=True)
class ExportedSurface:
    filename: str
    image: Image.Image


def tile_grid_shape(width: int, height: int, tile_spec: ExportTileSpec) -> tuple[int, int]:
    """Return ``(rows, cols)`` of the tile grid."""
    tile_spec.check()
    return math.ceil(height / tile_spec.chunk_height), math.ceil(width / tile_spec.chunk_width)


def plan_tiles(width: int, height: int, tile_spec: ExportTileSpec) -> List[TileRegion]:
    """Split a ``width`` x ``height`` grid into tiles in row-major order.

    The last row and column may be partial; tiles never overflow the grid.
    """
    rows, cols = tile_grid_shape(width, height, tile_spec)
    regions: List[TileRegion] = []
    for r in range(rows):
        for c in range(cols):
            start_x = c * tile_spec.chunk_width
            start_y = r * tile_spec.chunk_height
            regions.append(
                TileRegion(
                    row=r,
                    col=c,
                    start_x=start_x,
                    start_y=start_y,
                    width=min(tile_spec.chunk_width, width - start_x),
                    height=min(tile_spec.chunk_height, height - start_y),
                )
            )
    return regions


def export_tiles(
    pattern: PatternData,
    tile_spec: ExportTileSpec,
    options: Optional[RenderOptions] = None,
    *,
    title_template: str = DEFAULT_TILE_TITLE,
    max_workers: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
) -> List[ExportedSurface]:
    """
    Render every tile of the paginated export.

    Tiles are independent and may render on a thread pool; the result is always
    ordered by (row, col). If any tile fails the exception propagates and no
    partial export is returned.
    """
    options = options or RenderOptions()
    options.check()
    regions = plan_tiles(pattern.width, pattern.height, tile_spec)
    total = len(regions)
    done = 0
    done_lock = Lock()

    def render(region: TileRegion) -> ExportedSurface:
        nonlocal done
        cells = pattern.region(region.start_x, region.start_y, region.width, region.height)
        title = title_template.format(row=region.row + 1, col=region.col + 1)
        image = render_cells(cells, (region.start_x, region.start_y), options.with_title(title))
        with done_lock:
            done += 1
            finished = done
        logger.debug("Rendered tile %s (%d/%d)", region.filename, finished, total)
        if progress is not None:
            progress(finished, total)
        return ExportedSurface(filename=region.filename, image=image)

    workers = settings.EXPORT_WORKERS if max_workers is None else max_workers
    if workers <= 1 or total == 1:
        surfaces = [render(region) for region in regions]
    else:
        with ThreadPoolExecutor(max_workers=min(workers, total)) as executor:
            # map() yields in submission order and re-raises the first failure
            surfaces = list(executor.map(render, regions))

    logger.info(
        "Exported %d tiles (%dx%d cells each) for a %dx%d pattern",
        total,
        tile_spec.chunk_width,
        tile_spec.chunk_height,
        pattern.width,
        pattern.height,
    )
    return surfaces


def export_full(
    pattern: PatternData,
    options: Optional[RenderOptions] = None,
    title: Optional[str] = None,
) -> ExportedSurface:
    """Render the whole pattern as one labeled chart."""
    options = options or RenderOptions()
    base = title if title is not None else settings.APP_TITLE
    image = render_cells(
        pattern.grid,
        (0, 0),
        options.with_title(f"{base} - {pattern.width}x{pattern.height}"),
    )
    return ExportedSurface(filename=f"pattern_w{pattern.width}_h{pattern.height}", image=image)


__all__ = [
    "DEFAULT_TILE_TITLE",
    "ExportTileSpec",
    "TileRegion",
    "ExportedSurface",
    "tile_grid_shape",
    "plan_tiles",
    "export_tiles",
    "export_full",
]
