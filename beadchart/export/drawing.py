"""Pillow helpers shared by the raster exporters: surfaces, fonts and text."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from .. import settings
from ..core.errors import SurfaceAllocationError
from ..models.pattern import BeadColor

logger = logging.getLogger(__name__)

FONT_DIRS = [
    Path("assets/fonts"),
    Path("/usr/share/fonts/truetype/dejavu"),
    Path("/usr/local/share/fonts"),
]
FONT_FILES = {
    (False, False): "DejaVuSans.ttf",
    (True, False): "DejaVuSans-Bold.ttf",
    (False, True): "DejaVuSansMono.ttf",
    (True, True): "DejaVuSansMono-Bold.ttf",
}

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]
Color = Union[str, Tuple[int, ...]]


@lru_cache(maxsize=64)
def load_font(size: int, bold: bool = False, mono: bool = False) -> Font:
    filename = FONT_FILES[(bold, mono)]
    for directory in FONT_DIRS:
        candidate = directory / filename
        if not candidate.exists():
            continue
        try:
            return ImageFont.truetype(str(candidate), size)
        except OSError as exc:
            logger.warning("Failed to load font %s: %s", candidate, exc)
    try:
        return ImageFont.truetype(filename, size)
    except OSError:
        logger.warning("Font %s not found, using Pillow default font", filename)
        return ImageFont.load_default(size=size)


def check_surface_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise SurfaceAllocationError(f"cannot allocate a {width}x{height} surface")
    if width * height > settings.MAX_SURFACE_PIXELS:
        raise SurfaceAllocationError(
            f"{width}x{height} surface exceeds the {settings.MAX_SURFACE_PIXELS} pixel limit"
        )


def new_surface(width: int, height: int, mode: str = "RGB", color: Color = "#FFFFFF") -> Image.Image:
    """Allocate a raster surface, failing closed on absurd or impossible sizes."""
    check_surface_size(width, height)
    try:
        return Image.new(mode, (width, height), color)
    except (MemoryError, ValueError) as exc:
        raise SurfaceAllocationError(f"cannot allocate a {width}x{height} surface: {exc}") from exc


def contrast_text_color(color: BeadColor) -> str:
    """Black on light beads, white on dark ones (YIQ luma, threshold 128)."""
    return "#000000" if color.luma >= 128 else "#FFFFFF"


def draw_text(
    draw: ImageDraw.ImageDraw,
    xy: Tuple[float, float],
    text: str,
    font: Font,
    fill: Color,
    align: str = "center",
) -> None:
    """Draw ``text`` vertically centred on ``xy``; ``align`` picks the horizontal anchor."""
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    width = right - left
    height = bottom - top
    x, y = xy
    if align == "center":
        x -= width / 2
    elif align == "right":
        x -= width
    draw.text((x - left, y - height / 2 - top), text, fill=fill, font=font)


__all__ = ["load_font", "check_surface_size", "new_surface", "contrast_text_color", "draw_text"]
