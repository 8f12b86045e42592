from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from ..color.palette_loader import parse_palette_csv
from ..core.errors import ConfigurationError
from ..core.palettes import PaletteStore
from ..models.api_schemas import PaletteSelectRequest
from ..models.pattern import Palette
from ..storage import get_storage

router = APIRouter()

_palette_store: Optional[PaletteStore] = None


def get_palette_store() -> PaletteStore:
    global _palette_store
    if _palette_store is None:
        _palette_store = PaletteStore(get_storage())
        _palette_store.load()
    return _palette_store


def _palette_info(palette: Palette, active_id: str) -> dict:
    return {
        "id": palette.id,
        "name": palette.name,
        "builtin": palette.builtin,
        "size": len(palette.colors),
        "active": palette.id == active_id,
    }


@router.get("/palettes")
async def list_palettes(palettes: PaletteStore = Depends(get_palette_store)):
    active_id = palettes.active.id
    return {"items": [_palette_info(p, active_id) for p in palettes.all_palettes]}


@router.get("/palettes/{palette_id}", response_model=Palette)
async def get_palette(palette_id: str, palettes: PaletteStore = Depends(get_palette_store)):
    try:
        return palettes.get(palette_id)
    except ConfigurationError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/palettes/import")
async def import_palette(
    file: UploadFile = File(...),
    name: str = Form(""),
    palettes: PaletteStore = Depends(get_palette_store),
):
    content = await file.read()
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8 text")

    colors = parse_palette_csv(text)
    if not colors:
        raise HTTPException(status_code=400, detail="Failed to parse CSV. Please check the format.")

    palette_name = name.strip() or Path(file.filename or "palette").stem
    palette = palettes.add_custom(palette_name, colors)
    return _palette_info(palette, palettes.active.id)


@router.put("/palettes/active")
async def select_palette(payload: PaletteSelectRequest, palettes: PaletteStore = Depends(get_palette_store)):
    try:
        palette = palettes.select(payload.palette_id)
    except ConfigurationError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return _palette_info(palette, palette.id)


@router.delete("/palettes/{palette_id}")
async def remove_palette(palette_id: str, palettes: PaletteStore = Depends(get_palette_store)):
    try:
        palettes.remove_custom(palette_id)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"deleted": palette_id, "active": palettes.active.id}
