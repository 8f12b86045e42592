from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.types import ReplaceMode, ShapeMode
from .pattern import PatternData


class PatternCreateRequest(BaseModel):
    pattern: PatternData
    palette_id: Optional[str] = None
    title: Optional[str] = None


class SessionSummary(BaseModel):
    session_id: str
    palette_id: Optional[str] = None
    width: int
    height: int
    counts: Dict[str, int]
    hidden_ids: List[str]
    visible_total: int = 0
    can_undo: bool
    can_redo: bool


class RenderPreferences(BaseModel):
    model_config = ConfigDict(extra="forbid")

    shape_mode: Optional[ShapeMode] = None
    show_id_labels: Optional[bool] = None
    exclude_hidden_materials: Optional[bool] = None
    title: Optional[str] = None


class TileExportRequest(BaseModel):
    chunk_width: int = 29
    chunk_height: int = 29
    format: Literal["zip", "pdf"] = "zip"
    include_materials: bool = True


class ReplaceRequest(BaseModel):
    mode: ReplaceMode
    color_id: str
    target_id: Optional[str] = None
    x: Optional[int] = None
    y: Optional[int] = None


class HitTestRequest(BaseModel):
    viewport_width: float = Field(gt=0)
    viewport_height: float = Field(gt=0)
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    x: float
    y: float


class HitTestResponse(BaseModel):
    hit: bool
    x: Optional[int] = None
    y: Optional[int] = None
    color_id: Optional[str] = None


class PaletteSelectRequest(BaseModel):
    palette_id: str
