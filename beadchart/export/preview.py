import io
from typing import AbstractSet, Optional

import numpy as np
from PIL import Image, ImageDraw

from .. import settings
from ..core.errors import ConfigurationError, SurfaceAllocationError
from ..core.types import ShapeMode
from ..models.pattern import PatternData
from .drawing import check_surface_size, new_surface


def render_preview(
    pattern: PatternData,
    hidden_ids: AbstractSet[str] = frozenset(),
    shape_mode: ShapeMode = "circle",
    cell_size: Optional[int] = None,
) -> Image.Image:
    """
    Render the live (unlabeled) preview shown in the interactive view.

    The surface is RGBA and starts fully transparent; hidden colours stay
    transparent so the viewer's checkerboard shows through.
    """
    cell = cell_size or settings.PREVIEW_CELL_SIZE
    if cell <= 0:
        raise ConfigurationError(f"cell_size must be positive, got {cell}")

    w, h = pattern.width, pattern.height

    if shape_mode == "square":
        # squares tile the whole surface, fill them straight into the buffer
        check_surface_size(w * cell, h * cell)
        try:
            img = np.zeros((h * cell, w * cell, 4), dtype=np.uint8)
        except MemoryError as exc:
            raise SurfaceAllocationError(f"cannot allocate a {w * cell}x{h * cell} preview") from exc
        for y, row in enumerate(pattern.grid):
            for x, bead in enumerate(row):
                if bead.id in hidden_ids:
                    continue
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell] = (*bead.rgb, 255)
        return Image.fromarray(img)

    surface = new_surface(w * cell, h * cell, mode="RGBA", color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(surface)
    radius = cell / 2 - 0.5
    for y, row in enumerate(pattern.grid):
        for x, bead in enumerate(row):
            if bead.id in hidden_ids:
                continue
            cx = x * cell + cell / 2
            cy = y * cell + cell / 2
            draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], fill=(*bead.rgb, 255))
    return surface


def render_preview_png(
    pattern: PatternData,
    hidden_ids: AbstractSet[str] = frozenset(),
    shape_mode: ShapeMode = "circle",
    cell_size: Optional[int] = None,
) -> bytes:
    pil = render_preview(pattern, hidden_ids, shape_mode, cell_size)
    buf = io.BytesIO()
    pil.save(buf, format="PNG")
    return buf.getvalue()
