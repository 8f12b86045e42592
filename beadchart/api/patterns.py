import logging
import warnings
from typing import Callable, Literal, Optional, TypeVar
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ..core.errors import ConfigurationError, EmptyResultWarning, SurfaceAllocationError
from ..core.geometry import ViewFrame, ViewportState, clamp_zoom, hit_test
from ..core.palettes import PaletteStore
from ..core.session import SessionState
from ..core.sessions import store as session_store
from ..export.archive import SPLIT_ARCHIVE_NAME, build_zip, encode_png
from ..export.csv_exporter import export_materials_csv
from ..export.pdf_exporter import export_tiles_pdf
from ..export.preview import render_preview_png
from ..export.tiling import ExportTileSpec
from ..models.api_schemas import (
    HitTestRequest,
    HitTestResponse,
    PaletteSelectRequest,
    PatternCreateRequest,
    RenderPreferences,
    ReplaceRequest,
    SessionSummary,
    TileExportRequest,
)
from .palettes import get_palette_store

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")


def _run(session_id: str, operation: Callable[[SessionState], T]) -> T:
    if session_store.get(session_id) is None:
        raise HTTPException(status_code=404, detail="Session not found")
    try:
        return session_store.run(session_id, operation)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except SurfaceAllocationError as exc:
        logger.exception("Render failed for session %s", session_id)
        raise HTTPException(status_code=413, detail=str(exc))


def _summary(session_id: str) -> SessionSummary:
    record = session_store.get(session_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Session not found")
    with record.lock:
        return SessionSummary(**record.to_dict())


def _attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# =====================================================================
#   SESSION CREATE / GET
# =====================================================================

@router.post("/patterns", response_model=SessionSummary)
async def create_pattern(
    payload: PatternCreateRequest,
    palettes: PaletteStore = Depends(get_palette_store),
):
    try:
        palette = palettes.get(payload.palette_id) if payload.palette_id else palettes.active
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    session = SessionState(palette.colors)
    session.load_pattern(payload.pattern)
    if payload.title:
        session.title = payload.title

    session_id = str(uuid4())
    session_store.create(session_id, session, palette_id=palette.id)
    return _summary(session_id)


@router.get("/patterns/{session_id}", response_model=SessionSummary)
async def get_pattern(session_id: str):
    return _summary(session_id)


@router.delete("/patterns/{session_id}")
async def delete_pattern(session_id: str):
    if not session_store.delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"deleted": session_id}


@router.patch("/patterns/{session_id}/preferences", response_model=SessionSummary)
async def update_preferences(session_id: str, payload: RenderPreferences):
    def apply(session: SessionState) -> None:
        for key, value in payload.model_dump(exclude_none=True).items():
            setattr(session, key, value)

    _run(session_id, apply)
    return _summary(session_id)


# =====================================================================
#   RENDERING
# =====================================================================

@router.get("/patterns/{session_id}/preview")
async def preview(
    session_id: str,
    shape_mode: Optional[Literal["circle", "square"]] = None,
    cell_size: Optional[int] = None,
):
    png = _run(
        session_id,
        lambda s: render_preview_png(
            s.require_pattern(),
            s.hidden_ids,
            shape_mode or s.shape_mode,
            cell_size,
        ),
    )
    return Response(content=png, media_type="image/png")


@router.get("/patterns/{session_id}/export")
async def export_pattern(session_id: str):
    surface = _run(session_id, lambda s: s.export_full())
    return _attachment(encode_png(surface.image), "image/png", f"{surface.filename}.png")


@router.post("/patterns/{session_id}/export/tiles")
async def export_tiles(session_id: str, payload: TileExportRequest):
    tile_spec = ExportTileSpec(chunk_width=payload.chunk_width, chunk_height=payload.chunk_height)

    def run(session: SessionState):
        surfaces = session.export_tiles(tile_spec)
        materials = None
        if payload.include_materials:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", EmptyResultWarning)
                materials = session.export_materials()
        return session.title, surfaces, materials

    title, surfaces, materials = _run(session_id, run)

    if payload.format == "pdf":
        pdf = export_tiles_pdf(surfaces, title=title, materials=materials.image if materials else None)
        return _attachment(pdf, "application/pdf", "pattern-split.pdf")

    entries = list(surfaces)
    if materials is not None:
        entries.append(materials)
    return _attachment(build_zip(entries), "application/zip", SPLIT_ARCHIVE_NAME)


@router.get("/patterns/{session_id}/materials")
async def materials(session_id: str, exclude_hidden: Optional[bool] = None):
    def run(session: SessionState):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", EmptyResultWarning)
            return session.export_materials(exclude_hidden)

    surface = _run(session_id, run)
    if surface is None:
        raise HTTPException(status_code=404, detail="No materials to list")
    return _attachment(encode_png(surface.image), "image/png", f"{surface.filename}.png")


@router.get("/patterns/{session_id}/materials.csv")
async def materials_csv(session_id: str):
    rows = _run(session_id, lambda s: s.material_rows())
    return _attachment(export_materials_csv(rows).encode("utf-8"), "text/csv", "materials.csv")


# =====================================================================
#   EDITING
# =====================================================================

@router.post("/patterns/{session_id}/hidden/{color_id}")
async def toggle_hidden(session_id: str, color_id: str):
    hidden = _run(session_id, lambda s: s.toggle_hidden(color_id))
    return {"hidden_ids": sorted(hidden)}


@router.post("/patterns/{session_id}/replace", response_model=SessionSummary)
async def replace(session_id: str, payload: ReplaceRequest):
    def run(session: SessionState) -> None:
        new_color = session.palette_color(payload.color_id)
        if payload.mode == "global":
            if not payload.target_id:
                raise ConfigurationError("global replace needs target_id")
            session.replace_global(payload.target_id, new_color)
        else:
            if payload.x is None or payload.y is None:
                raise ConfigurationError("single replace needs x and y")
            session.replace_cell(payload.x, payload.y, new_color)

    _run(session_id, run)
    return _summary(session_id)


@router.post("/patterns/{session_id}/undo", response_model=SessionSummary)
async def undo(session_id: str):
    _run(session_id, lambda s: s.undo())
    return _summary(session_id)


@router.post("/patterns/{session_id}/redo", response_model=SessionSummary)
async def redo(session_id: str):
    _run(session_id, lambda s: s.redo())
    return _summary(session_id)


@router.put("/patterns/{session_id}/palette", response_model=SessionSummary)
async def switch_palette(
    session_id: str,
    payload: PaletteSelectRequest,
    palettes: PaletteStore = Depends(get_palette_store),
):
    try:
        palette = palettes.get(payload.palette_id)
    except ConfigurationError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    record = session_store.get(session_id)

    def run(session: SessionState) -> None:
        session.set_palette(palette.colors)
        record.palette_id = palette.id

    _run(session_id, run)
    return _summary(session_id)


@router.post("/patterns/{session_id}/hit-test", response_model=HitTestResponse)
async def hit_test_cell(session_id: str, payload: HitTestRequest):
    def run(session: SessionState) -> HitTestResponse:
        pattern = session.require_pattern()
        frame = ViewFrame.for_viewport(
            payload.viewport_width,
            payload.viewport_height,
            pattern.width,
            pattern.height,
            cell_size=session.viewport.cell_size,
        )
        state = ViewportState(zoom=clamp_zoom(payload.zoom), pan_x=payload.pan_x, pan_y=payload.pan_y)
        cell = hit_test(payload.x, payload.y, state, frame)
        if cell is None:
            return HitTestResponse(hit=False)
        return HitTestResponse(hit=True, x=cell[0], y=cell[1], color_id=pattern.cell(*cell).id)

    return _run(session_id, run)
