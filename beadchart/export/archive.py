from __future__ import annotations

import io
import zipfile
from typing import Iterable

from PIL import Image

from .tiling import ExportedSurface

SPLIT_ARCHIVE_NAME = "pattern-split.zip"


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def build_zip(surfaces: Iterable[ExportedSurface]) -> bytes:
    """Pack rendered surfaces as ``<filename>.png`` entries, keeping their order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for surface in surfaces:
            archive.writestr(f"{surface.filename}.png", encode_png(surface.image))
    return buffer.getvalue()


__all__ = ["SPLIT_ARCHIVE_NAME", "encode_png", "build_zip"]
