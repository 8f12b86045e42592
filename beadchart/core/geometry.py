"""World <-> screen transforms for the interactive pattern view.

The grid is drawn centred in the viewport, then scaled by ``zoom`` around the
viewport centre and shifted by ``pan``::

    screen = center + pan + zoom * (grid_px - extent / 2)

where ``grid_px`` is a position in unscaled grid pixels (``cell * cell_size``)
and ``extent`` is the grid size in the same units. Every function here is
pure; state objects are frozen.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .. import settings

Point = Tuple[float, float]
Cell = Tuple[int, int]


@dataclass(frozen=True)
class ViewportState:
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0


@dataclass(frozen=True)
class ViewFrame:
    """Layout the transform is evaluated against: viewport centre and grid size."""

    center_x: float
    center_y: float
    cell_size: float
    grid_width: int
    grid_height: int

    @classmethod
    def for_viewport(
        cls,
        viewport_width: float,
        viewport_height: float,
        grid_width: int,
        grid_height: int,
        cell_size: float = settings.PREVIEW_CELL_SIZE,
    ) -> "ViewFrame":
        return cls(
            center_x=viewport_width / 2,
            center_y=viewport_height / 2,
            cell_size=cell_size,
            grid_width=grid_width,
            grid_height=grid_height,
        )

    @property
    def extent(self) -> Point:
        return (self.grid_width * self.cell_size, self.grid_height * self.cell_size)


def clamp_zoom(
    zoom: float,
    zoom_min: float = settings.ZOOM_MIN,
    zoom_max: float = settings.ZOOM_MAX,
) -> float:
    return min(max(zoom_min, zoom), zoom_max)


def grid_to_screen(gx: float, gy: float, state: ViewportState, frame: ViewFrame) -> Point:
    """Map a point in unscaled grid pixels to screen pixels."""
    extent_x, extent_y = frame.extent
    return (
        frame.center_x + state.pan_x + state.zoom * (gx - extent_x / 2),
        frame.center_y + state.pan_y + state.zoom * (gy - extent_y / 2),
    )


def screen_to_grid(px: float, py: float, state: ViewportState, frame: ViewFrame) -> Point:
    """Inverse of :func:`grid_to_screen`."""
    extent_x, extent_y = frame.extent
    return (
        (px - frame.center_x - state.pan_x) / state.zoom + extent_x / 2,
        (py - frame.center_y - state.pan_y) / state.zoom + extent_y / 2,
    )


def cell_to_screen(gx: int, gy: int, state: ViewportState, frame: ViewFrame) -> Point:
    """Screen position of the centre of cell ``(gx, gy)``."""
    size = frame.cell_size
    return grid_to_screen((gx + 0.5) * size, (gy + 0.5) * size, state, frame)


def screen_to_cell(px: float, py: float, state: ViewportState, frame: ViewFrame) -> Cell:
    """Cell index under a screen point. May lie outside the grid."""
    wx, wy = screen_to_grid(px, py, state, frame)
    return (math.floor(wx / frame.cell_size), math.floor(wy / frame.cell_size))


def hit_test(px: float, py: float, state: ViewportState, frame: ViewFrame) -> Optional[Cell]:
    gx, gy = screen_to_cell(px, py, state, frame)
    if 0 <= gx < frame.grid_width and 0 <= gy < frame.grid_height:
        return (gx, gy)
    return None


def apply_pan(state: ViewportState, dx: float, dy: float) -> ViewportState:
    return replace(state, pan_x=state.pan_x + dx, pan_y=state.pan_y + dy)


def apply_zoom(
    state: ViewportState,
    delta: float,
    *,
    focal: Optional[Point] = None,
    center: Point = (0.0, 0.0),
    zoom_min: float = settings.ZOOM_MIN,
    zoom_max: float = settings.ZOOM_MAX,
) -> ViewportState:
    """Add ``delta`` to the zoom and clamp it.

    With a ``focal`` screen point the pan is adjusted so the grid point under
    it stays put; without one the view scales around the viewport centre.
    """
    new_zoom = clamp_zoom(state.zoom + delta, zoom_min, zoom_max)
    if focal is None or new_zoom == state.zoom:
        return replace(state, zoom=new_zoom)

    ratio = new_zoom / state.zoom
    rel_x = focal[0] - center[0]
    rel_y = focal[1] - center[1]
    return ViewportState(
        zoom=new_zoom,
        pan_x=rel_x - (rel_x - state.pan_x) * ratio,
        pan_y=rel_y - (rel_y - state.pan_y) * ratio,
    )


__all__ = [
    "ViewportState",
    "ViewFrame",
    "clamp_zoom",
    "grid_to_screen",
    "screen_to_grid",
    "cell_to_screen",
    "screen_to_cell",
    "hit_test",
    "apply_pan",
    "apply_zoom",
]
