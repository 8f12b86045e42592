"""Editing session: the one active pattern plus everything the user toggled.

A session owns the hidden colour set, the render preferences, the viewport
controller and the undo/redo history. Patterns and hidden sets are immutable
values; every change swaps in a new one.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, List, Optional, Sequence, Tuple

from .. import settings
from ..export.materials import materials_filename, render_materials
from ..export.rasterizer import RenderOptions
from ..export.tiling import ExportedSurface, ExportTileSpec, export_full, export_tiles
from ..models.pattern import BeadColor, PatternData
from . import pattern_edit
from .errors import ConfigurationError
from .legend import MaterialRow, build_material_rows
from .types import HiddenSet, ShapeMode
from .viewport import CellSelected, ViewportCommand, ViewportController, ViewportEvent

logger = logging.getLogger(__name__)


class SessionState:
    def __init__(
        self,
        palette_colors: Sequence[BeadColor] = (),
        *,
        viewport: Optional[ViewportController] = None,
        undo_depth: int = settings.UNDO_DEPTH,
    ) -> None:
        self.pattern: Optional[PatternData] = None
        self.hidden_ids: HiddenSet = frozenset()
        self.palette_colors: Tuple[BeadColor, ...] = tuple(palette_colors)
        self.viewport = viewport or ViewportController()
        self.selected_cell: Optional[Tuple[int, int]] = None

        self.shape_mode: ShapeMode = "circle"
        self.show_id_labels = True
        self.tile_spec = ExportTileSpec()
        self.exclude_hidden_materials = True
        self.title = settings.APP_TITLE

        self._undo: Deque[PatternData] = deque(maxlen=undo_depth)
        self._redo: List[PatternData] = []

    # -----------------------------------------------------------------
    #  Pattern lifecycle
    # -----------------------------------------------------------------

    def load_pattern(self, pattern: PatternData) -> None:
        """Replace the document wholesale; hidden set, history and view reset."""
        self.pattern = pattern
        self.hidden_ids = frozenset()
        self.selected_cell = None
        self._undo.clear()
        self._redo.clear()
        self.viewport.load_pattern(pattern.width, pattern.height)
        logger.info("Loaded %dx%d pattern with %d colours", pattern.width, pattern.height, len(pattern.counts))

    def require_pattern(self) -> PatternData:
        if self.pattern is None:
            raise ConfigurationError("no pattern loaded")
        return self.pattern

    def set_palette(self, colors: Sequence[BeadColor]) -> None:
        self.palette_colors = tuple(colors)

    def palette_color(self, color_id: str) -> BeadColor:
        for color in self.palette_colors:
            if color.id == color_id:
                return color
        raise ConfigurationError(f"colour {color_id!r} is not in the active palette")

    # -----------------------------------------------------------------
    #  Hidden colours
    # -----------------------------------------------------------------

    def toggle_hidden(self, color_id: str) -> HiddenSet:
        if color_id in self.hidden_ids:
            self.hidden_ids = self.hidden_ids - {color_id}
        else:
            self.hidden_ids = self.hidden_ids | {color_id}
        return self.hidden_ids

    # -----------------------------------------------------------------
    #  Edits and history
    # -----------------------------------------------------------------

    def _commit(self, updated: PatternData) -> PatternData:
        self._undo.append(self.require_pattern())
        self._redo.clear()
        self.pattern = updated
        return updated

    def replace_global(self, target_id: str, new_color: BeadColor) -> PatternData:
        return self._commit(pattern_edit.replace_global(self.require_pattern(), target_id, new_color))

    def replace_cell(self, x: int, y: int, new_color: BeadColor) -> PatternData:
        return self._commit(pattern_edit.replace_cell(self.require_pattern(), x, y, new_color))

    def replace_selected(self, new_color: BeadColor) -> PatternData:
        if self.selected_cell is None:
            raise ConfigurationError("no cell selected")
        x, y = self.selected_cell
        updated = self.replace_cell(x, y, new_color)
        self.selected_cell = None
        return updated

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self.require_pattern())
        self.pattern = self._undo.pop()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self.require_pattern())
        self.pattern = self._redo.pop()
        return True

    # -----------------------------------------------------------------
    #  Interaction
    # -----------------------------------------------------------------

    def handle_pointer(self, event: ViewportEvent) -> List[ViewportCommand]:
        commands = self.viewport.handle(event)
        for command in commands:
            if isinstance(command, CellSelected):
                self.selected_cell = (command.x, command.y)
        return commands

    # -----------------------------------------------------------------
    #  Exports
    # -----------------------------------------------------------------

    def render_options(self) -> RenderOptions:
        return RenderOptions(
            shape_mode=self.shape_mode,
            hidden_ids=self.hidden_ids,
            show_id_labels=self.show_id_labels,
        )

    def material_rows(self) -> List[MaterialRow]:
        return build_material_rows(
            self.require_pattern(),
            self.palette_colors,
            self.hidden_ids,
            self.exclude_hidden_materials,
        )

    def export_full(self) -> ExportedSurface:
        return export_full(self.require_pattern(), self.render_options(), title=self.title)

    def export_tiles(
        self,
        tile_spec: Optional[ExportTileSpec] = None,
        *,
        max_workers: Optional[int] = None,
        progress: Optional[Callable[[int, int], None]] = None,
    ) -> List[ExportedSurface]:
        """Render the paginated export.

        A ``tile_spec`` passed here becomes the session's tile size only once
        the export has succeeded.
        """
        spec = tile_spec or self.tile_spec
        surfaces = export_tiles(
            self.require_pattern(),
            spec,
            self.render_options(),
            max_workers=max_workers,
            progress=progress,
        )
        self.tile_spec = spec
        return surfaces

    def export_materials(self, exclude_hidden: Optional[bool] = None) -> Optional[ExportedSurface]:
        """Render the material table; ``exclude_hidden`` overrides the preference for this call only."""
        pattern = self.require_pattern()
        if exclude_hidden is None:
            exclude_hidden = self.exclude_hidden_materials
        image = render_materials(
            pattern,
            self.palette_colors,
            self.hidden_ids,
            exclude_hidden,
            title=f"{self.title} - Materials",
        )
        if image is None:
            return None
        return ExportedSurface(filename=materials_filename(pattern), image=image)


__all__ = ["SessionState"]
