"""Labeled chart rendering for one rectangular region of a pattern.

The same routine draws the whole-pattern export and every tile of the
paginated export. Rulers and the heavy block lines are computed from absolute
grid coordinates (``origin`` plus the relative index), so a tile cut from the
middle of a large pattern lines up with its neighbours once printed.

Layout of the surface::

    +--------------------------------------+
    |              title band              |  title_height (only with a title)
    +--------+-----------------------------+
    |        |  1    5    10   ...  column |  margin
    +--------+-----------------------------+
    |  rows  |            cells            |  height * cell_size
    +--------+-----------------------------+
      margin        width * cell_size
"""

from __future__ import annotations

from typing import FrozenSet, Optional, Sequence, Tuple

from PIL import Image, ImageDraw
from pydantic import BaseModel, ConfigDict

from .. import settings
from ..core.errors import ConfigurationError
from ..core.types import ShapeMode
from ..models.pattern import BeadColor, PatternData
from .drawing import contrast_text_color, draw_text, load_font, new_surface

TITLE_COLOR = "#334155"
RULER_COLOR = "#64748B"
CELL_BORDER_COLOR = "#E2E8F0"
BLOCK_LINE_COLOR = "#94A3B8"

Cells = Sequence[Sequence[BeadColor]]


class RenderOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    cell_size: int = settings.CELL_SIZE
    margin: int = settings.MARGIN
    shape_mode: ShapeMode = "circle"
    title: Optional[str] = None
    hidden_ids: FrozenSet[str] = frozenset()
    show_id_labels: bool = True
    title_height: int = settings.TITLE_HEIGHT
    block_size: int = settings.BLOCK_SIZE
    # False reproduces charts that never draw a block line on absolute 0
    block_line_edges: bool = True

    def check(self) -> None:
        if self.cell_size <= 0:
            raise ConfigurationError(f"cell_size must be positive, got {self.cell_size}")
        if self.margin < 0:
            raise ConfigurationError(f"margin must not be negative, got {self.margin}")
        if self.title_height < 0:
            raise ConfigurationError(f"title_height must not be negative, got {self.title_height}")
        if self.block_size <= 0:
            raise ConfigurationError(f"block_size must be positive, got {self.block_size}")

    def with_title(self, title: Optional[str]) -> "RenderOptions":
        return self.model_copy(update={"title": title})

    @property
    def title_band(self) -> int:
        return self.title_height if self.title else 0


def surface_size(width: int, height: int, options: RenderOptions) -> Tuple[int, int]:
    """Pixel size of the surface :func:`render_cells` produces for a region."""
    return (
        width * options.cell_size + options.margin,
        height * options.cell_size + options.margin + options.title_band,
    )


def _region_size(cells: Cells) -> Tuple[int, int]:
    height = len(cells)
    width = len(cells[0]) if height else 0
    if width == 0 or height == 0:
        raise ConfigurationError("cannot render an empty region")
    for row in cells:
        if len(row) != width:
            raise ConfigurationError("region rows must all have the same length")
    return width, height


def _is_labelled(absolute: int, index: int, length: int) -> bool:
    return absolute == 1 or absolute % 5 == 0 or index == length - 1


def _draw_rulers(
    draw: ImageDraw.ImageDraw,
    width: int,
    height: int,
    origin: Tuple[int, int],
    options: RenderOptions,
) -> None:
    cs = options.cell_size
    margin = options.margin
    band = options.title_band
    font = load_font(max(8, margin * 3 // 10), bold=True)

    for x in range(width):
        absolute = origin[0] + x + 1
        if _is_labelled(absolute, x, width):
            draw_text(draw, (margin + x * cs + cs / 2, band + margin / 2), str(absolute), font, RULER_COLOR)

    for y in range(height):
        absolute = origin[1] + y + 1
        if _is_labelled(absolute, y, height):
            draw_text(draw, (margin / 2, band + margin + y * cs + cs / 2), str(absolute), font, RULER_COLOR)


def _draw_cells(
    draw: ImageDraw.ImageDraw,
    cells: Cells,
    grid_x: int,
    grid_y: int,
    options: RenderOptions,
) -> None:
    cs = options.cell_size
    border = max(1, cs // 25)
    square_inset = max(1, cs // 25)
    radius = cs / 2 - cs * 0.08
    label_font = load_font(max(6, int(cs * 0.4)), bold=True) if options.show_id_labels else None

    for y, row in enumerate(cells):
        for x, bead in enumerate(row):
            x0 = grid_x + x * cs
            y0 = grid_y + y * cs
            draw.rectangle([x0, y0, x0 + cs, y0 + cs], outline=CELL_BORDER_COLOR, width=border)

            if bead.id in options.hidden_ids:
                continue

            if options.shape_mode == "circle":
                cx = x0 + cs / 2
                cy = y0 + cs / 2
                draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], fill=bead.hex)
            else:
                draw.rectangle(
                    [x0 + square_inset, y0 + square_inset, x0 + cs - square_inset - 1, y0 + cs - square_inset - 1],
                    fill=bead.hex,
                )

            if label_font is not None:
                draw_text(draw, (x0 + cs / 2, y0 + cs / 2), bead.id, label_font, contrast_text_color(bead))


def _draw_block_lines(
    draw: ImageDraw.ImageDraw,
    width: int,
    height: int,
    origin: Tuple[int, int],
    grid_x: int,
    grid_y: int,
    options: RenderOptions,
) -> None:
    cs = options.cell_size
    block = options.block_size
    line_width = max(2, cs // 12)

    def wanted(absolute: int, index: int, length: int) -> bool:
        if options.block_line_edges:
            return absolute % block == 0 or index in (0, length)
        return absolute % block == 0 and absolute != 0

    for i in range(width + 1):
        if wanted(origin[0] + i, i, width):
            px = grid_x + i * cs
            draw.line([(px, grid_y), (px, grid_y + height * cs)], fill=BLOCK_LINE_COLOR, width=line_width)

    for i in range(height + 1):
        if wanted(origin[1] + i, i, height):
            py = grid_y + i * cs
            draw.line([(grid_x, py), (grid_x + width * cs, py)], fill=BLOCK_LINE_COLOR, width=line_width)

    draw.rectangle(
        [grid_x, grid_y, grid_x + width * cs - 1, grid_y + height * cs - 1],
        outline=BLOCK_LINE_COLOR,
        width=line_width,
    )


def render_cells(
    cells: Cells,
    origin: Tuple[int, int] = (0, 0),
    options: Optional[RenderOptions] = None,
) -> Image.Image:
    """Render a region whose top-left cell sits at absolute ``origin``."""
    options = options or RenderOptions()
    options.check()
    width, height = _region_size(cells)
    if origin[0] < 0 or origin[1] < 0:
        raise ConfigurationError(f"region origin must not be negative, got {origin}")

    surface = new_surface(*surface_size(width, height, options))
    draw = ImageDraw.Draw(surface)

    if options.title:
        font = load_font(max(10, options.title_height // 2), bold=True)
        draw_text(draw, (surface.width / 2, options.title_height / 2), options.title, font, TITLE_COLOR)

    _draw_rulers(draw, width, height, origin, options)

    grid_x = options.margin
    grid_y = options.title_band + options.margin
    _draw_cells(draw, cells, grid_x, grid_y, options)
    _draw_block_lines(draw, width, height, origin, grid_x, grid_y, options)
    return surface


def render_pattern(pattern: PatternData, options: Optional[RenderOptions] = None) -> Image.Image:
    return render_cells(pattern.grid, (0, 0), options)


__all__ = ["RenderOptions", "render_cells", "render_pattern", "surface_size"]
