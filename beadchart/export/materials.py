"""Shopping-list image: one row per bead colour used by the pattern."""

from __future__ import annotations

import logging
import warnings
from typing import AbstractSet, Iterable, Optional

from PIL import Image, ImageDraw

from ..core.errors import EmptyResultWarning
from ..core.legend import MaterialRow, build_material_rows
from ..models.pattern import BeadColor, PatternData
from .drawing import draw_text, load_font, new_surface

logger = logging.getLogger(__name__)

ROW_HEIGHT = 80
HEADER_HEIGHT = 120
PADDING = 40
SWATCH_WIDTH = 100
ID_WIDTH = 160
NAME_WIDTH = 300
COUNT_WIDTH = 160
SWATCH_RADIUS = 24
HIDDEN_OPACITY = 0.3

TABLE_WIDTH = PADDING * 2 + SWATCH_WIDTH + ID_WIDTH + NAME_WIDTH + COUNT_WIDTH


def table_size(row_count: int) -> tuple[int, int]:
    return TABLE_WIDTH, HEADER_HEIGHT + row_count * ROW_HEIGHT + PADDING * 2


def _draw_row(draw: ImageDraw.ImageDraw, row: MaterialRow, center_y: float) -> None:
    x = PADDING

    swatch_x = x + SWATCH_WIDTH / 2
    draw.ellipse(
        [swatch_x - SWATCH_RADIUS, center_y - SWATCH_RADIUS, swatch_x + SWATCH_RADIUS, center_y + SWATCH_RADIUS],
        fill=row.color.hex,
        outline="#CBD5E1",
        width=2,
    )
    x += SWATCH_WIDTH

    draw_text(draw, (x, center_y), row.color.id, load_font(28, bold=True, mono=True), "#64748B", align="left")
    x += ID_WIDTH

    draw_text(draw, (x, center_y), row.color.name, load_font(28), "#334155", align="left")
    x += NAME_WIDTH

    draw_text(draw, (x + COUNT_WIDTH - 20, center_y), str(row.count), load_font(28, bold=True), "#0F172A", align="right")


def render_materials(
    pattern: PatternData,
    palette_colors: Iterable[BeadColor],
    hidden_ids: AbstractSet[str] = frozenset(),
    exclude_hidden: bool = True,
    title: str = "Materials",
) -> Optional[Image.Image]:
    """
    Render the material table, or return ``None`` when no colour qualifies.

    ``None`` is the explicit empty result (an :class:`EmptyResultWarning` is
    also emitted) so the caller can show a message instead of saving a blank
    file. With ``exclude_hidden`` off, hidden colours stay in the list but are
    drawn faded.
    """
    rows = build_material_rows(pattern, palette_colors, hidden_ids, exclude_hidden)
    if not rows:
        logger.info("Material table for %dx%d pattern has no rows", pattern.width, pattern.height)
        warnings.warn("no materials to list", EmptyResultWarning, stacklevel=2)
        return None

    width, height = table_size(len(rows))
    surface = new_surface(width, height, mode="RGBA", color=(255, 255, 255, 255))
    draw = ImageDraw.Draw(surface)

    draw_text(draw, (width / 2, PADDING + 40), title, load_font(40, bold=True), "#334155")

    current_y = PADDING + HEADER_HEIGHT
    for index, row in enumerate(rows):
        if index % 2 == 0:
            draw.rectangle(
                [PADDING, current_y - ROW_HEIGHT / 2, width - PADDING, current_y + ROW_HEIGHT / 2],
                fill="#F8FAFC",
            )

        if row.hidden and not exclude_hidden:
            layer = Image.new("RGBA", surface.size, (0, 0, 0, 0))
            _draw_row(ImageDraw.Draw(layer), row, current_y)
            alpha = layer.getchannel("A").point(lambda a: int(a * HIDDEN_OPACITY))
            layer.putalpha(alpha)
            surface.alpha_composite(layer)
        else:
            _draw_row(draw, row, current_y)

        current_y += ROW_HEIGHT

    draw.rectangle(
        [PADDING, PADDING + HEADER_HEIGHT - ROW_HEIGHT / 2, width - PADDING, PADDING + HEADER_HEIGHT - ROW_HEIGHT / 2 + len(rows) * ROW_HEIGHT],
        outline="#E2E8F0",
        width=4,
    )
    return surface.convert("RGB")


def materials_filename(pattern: PatternData) -> str:
    return f"materials_{pattern.width}x{pattern.height}"


__all__ = ["render_materials", "materials_filename", "table_size"]
