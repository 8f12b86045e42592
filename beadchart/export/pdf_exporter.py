import io
import logging
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image
from reportlab.lib.pagesizes import A4, landscape, portrait
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from .tiling import ExportedSurface

logger = logging.getLogger(__name__)

FONT_CANDIDATES = [
    Path("assets/fonts/DejaVuSans.ttf"),
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
    Path("/usr/local/share/fonts/DejaVuSans.ttf"),
]
FONT_NAME = "DejaVuSans"
PAGE_MARGIN = 12 * mm


def _ensure_font() -> str:
    try:
        pdfmetrics.getFont(FONT_NAME)
        return FONT_NAME
    except KeyError:
        pass

    for candidate in FONT_CANDIDATES:
        if candidate.exists():
            try:
                pdfmetrics.registerFont(TTFont(FONT_NAME, str(candidate)))
                return FONT_NAME
            except Exception as exc:  # reportlab raises bare TTFError subclasses
                logger.warning("Failed to register font %s: %s", candidate, exc)
                continue
    return "Helvetica"


def _draw_sheet(c: canvas.Canvas, image: Image.Image, footer: str, font_name: str) -> None:
    pagesize = landscape(A4) if image.width > image.height else portrait(A4)
    c.setPageSize(pagesize)
    page_w, page_h = pagesize

    block_w = page_w - 2 * PAGE_MARGIN
    block_h = page_h - 3 * PAGE_MARGIN
    scale = min(block_w / image.width, block_h / image.height)
    draw_w = image.width * scale
    draw_h = image.height * scale

    c.drawImage(
        ImageReader(image),
        (page_w - draw_w) / 2,
        page_h - PAGE_MARGIN - draw_h,
        width=draw_w,
        height=draw_h,
        preserveAspectRatio=True,
        anchor="sw",
    )
    c.setFont(font_name, 9)
    c.drawString(PAGE_MARGIN, PAGE_MARGIN, footer)
    c.showPage()


def export_tiles_pdf(
    surfaces: Sequence[ExportedSurface],
    title: str = "Bead Pattern",
    materials: Optional[Image.Image] = None,
) -> bytes:
    """
    Print-ready PDF: one A4 sheet per tile, material table last.

    Each sheet is oriented to match its tile and scaled to fit the printable
    area, so pegboard-sized tiles print one per page.
    """
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=portrait(A4))
    c.setTitle(title)
    font_name = _ensure_font()

    total = len(surfaces)
    for index, surface in enumerate(surfaces, start=1):
        _draw_sheet(c, surface.image, f"{title} · {surface.filename} · Sheet {index} of {total}", font_name)

    if materials is not None:
        _draw_sheet(c, materials, f"{title} · Materials", font_name)

    c.save()
    return buffer.getvalue()


__all__ = ["export_tiles_pdf"]
