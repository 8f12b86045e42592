"""Raster and document exporters for bead patterns."""

from .archive import build_zip, encode_png
from .csv_exporter import export_materials_csv
from .materials import render_materials
from .pdf_exporter import export_tiles_pdf
from .preview import render_preview, render_preview_png
from .rasterizer import RenderOptions, render_cells, render_pattern
from .tiling import ExportedSurface, ExportTileSpec, export_full, export_tiles, plan_tiles

__all__ = [
    "build_zip",
    "encode_png",
    "export_materials_csv",
    "render_materials",
    "export_tiles_pdf",
    "render_preview",
    "render_preview_png",
    "RenderOptions",
    "render_cells",
    "render_pattern",
    "ExportedSurface",
    "ExportTileSpec",
    "export_full",
    "export_tiles",
    "plan_tiles",
]
