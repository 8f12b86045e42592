"""Pan/zoom/tap state machine for the interactive pattern view.

The host shell adapts its mouse, touch and wheel input into the event types
below and feeds them to :meth:`ViewportController.handle` in arrival order.
Each call returns the commands the shell should act on.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from .. import settings
from .geometry import ViewFrame, ViewportState, apply_pan, apply_zoom, hit_test

logger = logging.getLogger(__name__)


class InteractionState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


# ---------------------------------------------------------------------
#  Events in
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float


@dataclass(frozen=True)
class PointerUp:
    x: float
    y: float


@dataclass(frozen=True)
class PointerCancel:
    pass


@dataclass(frozen=True)
class PinchStart:
    distance: float


@dataclass(frozen=True)
class PinchMove:
    distance: float


@dataclass(frozen=True)
class PinchEnd:
    pass


@dataclass(frozen=True)
class Wheel:
    delta_y: float
    x: Optional[float] = None
    y: Optional[float] = None


@dataclass(frozen=True)
class Resize:
    width: float
    height: float


@dataclass(frozen=True)
class ResetView:
    pass


ViewportEvent = Union[
    PointerDown,
    PointerMove,
    PointerUp,
    PointerCancel,
    PinchStart,
    PinchMove,
    PinchEnd,
    Wheel,
    Resize,
    ResetView,
]


# ---------------------------------------------------------------------
#  Commands out
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class ViewChanged:
    state: ViewportState


@dataclass(frozen=True)
class CellSelected:
    x: int
    y: int


ViewportCommand = Union[ViewChanged, CellSelected]


def pinch_distance(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


class ViewportController:
    def __init__(
        self,
        viewport_width: float = 0.0,
        viewport_height: float = 0.0,
        *,
        cell_size: float = settings.PREVIEW_CELL_SIZE,
        zoom_min: float = settings.ZOOM_MIN,
        zoom_max: float = settings.ZOOM_MAX,
        wheel_sensitivity: float = settings.WHEEL_SENSITIVITY,
        pinch_sensitivity: float = settings.PINCH_SENSITIVITY,
        tap_threshold: float = settings.TAP_THRESHOLD,
    ) -> None:
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.cell_size = cell_size
        self.zoom_min = zoom_min
        self.zoom_max = zoom_max
        self.wheel_sensitivity = wheel_sensitivity
        self.pinch_sensitivity = pinch_sensitivity
        self.tap_threshold = tap_threshold

        self.grid_width = 0
        self.grid_height = 0
        self.state = ViewportState()
        self.mode = InteractionState.IDLE

        self._down: Optional[Tuple[float, float]] = None
        self._last: Optional[Tuple[float, float]] = None
        self._last_distance: Optional[float] = None
        self._pinched = False

        self._handlers = {
            PointerDown: self._on_pointer_down,
            PointerMove: self._on_pointer_move,
            PointerUp: self._on_pointer_up,
            PointerCancel: self._on_cancel,
            PinchStart: self._on_pinch_start,
            PinchMove: self._on_pinch_move,
            PinchEnd: self._on_pinch_end,
            Wheel: self._on_wheel,
            Resize: self._on_resize,
            ResetView: self._on_reset,
        }

    # -----------------------------------------------------------------
    #  Public API
    # -----------------------------------------------------------------

    @property
    def has_pattern(self) -> bool:
        return self.grid_width > 0 and self.grid_height > 0

    @property
    def frame(self) -> ViewFrame:
        return ViewFrame.for_viewport(
            self.viewport_width,
            self.viewport_height,
            self.grid_width,
            self.grid_height,
            cell_size=self.cell_size,
        )

    def load_pattern(self, width: int, height: int) -> None:
        """Attach a new grid size; the view always resets for a new pattern."""
        self.grid_width = width
        self.grid_height = height
        self.reset()

    def reset(self) -> None:
        self.state = ViewportState()
        self._to_idle()

    def handle(self, event: ViewportEvent) -> List[ViewportCommand]:
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"unsupported viewport event: {event!r}")
        return handler(event)

    # -----------------------------------------------------------------
    #  Handlers
    # -----------------------------------------------------------------

    def _on_pointer_down(self, event: PointerDown) -> List[ViewportCommand]:
        if not self.has_pattern:
            return []
        self.mode = InteractionState.DRAGGING
        self._down = (event.x, event.y)
        self._last = (event.x, event.y)
        self._pinched = False
        return []

    def _on_pointer_move(self, event: PointerMove) -> List[ViewportCommand]:
        if self.mode is not InteractionState.DRAGGING or self._last is None:
            return []
        if self._last_distance is not None:
            # a second finger is down, pinch owns the gesture
            return []
        dx = event.x - self._last[0]
        dy = event.y - self._last[1]
        self._last = (event.x, event.y)
        if dx == 0 and dy == 0:
            return []
        return self._set_state(apply_pan(self.state, dx, dy))

    def _on_pointer_up(self, event: PointerUp) -> List[ViewportCommand]:
        if self.mode is not InteractionState.DRAGGING or self._down is None:
            self._to_idle()
            return []
        travel = math.hypot(event.x - self._down[0], event.y - self._down[1])
        pinched = self._pinched
        last = self._last
        self._to_idle()
        if pinched:
            return []
        if travel >= self.tap_threshold:
            # release point may differ from the last move
            dx = event.x - last[0]
            dy = event.y - last[1]
            if dx == 0 and dy == 0:
                return []
            return self._set_state(apply_pan(self.state, dx, dy))
        cell = hit_test(event.x, event.y, self.state, self.frame)
        if cell is None:
            logger.debug("Tap at (%.1f, %.1f) fell outside the grid", event.x, event.y)
            return []
        return [CellSelected(x=cell[0], y=cell[1])]

    def _on_cancel(self, _event: PointerCancel) -> List[ViewportCommand]:
        self._to_idle()
        return []

    def _on_pinch_start(self, event: PinchStart) -> List[ViewportCommand]:
        if not self.has_pattern:
            return []
        self._last_distance = event.distance
        self._pinched = True
        return []

    def _on_pinch_move(self, event: PinchMove) -> List[ViewportCommand]:
        if not self.has_pattern:
            return []
        last = self._last_distance
        self._last_distance = event.distance
        if last is None:
            return []
        delta = (event.distance - last) * self.pinch_sensitivity
        return self._set_state(
            apply_zoom(self.state, delta, zoom_min=self.zoom_min, zoom_max=self.zoom_max)
        )

    def _on_pinch_end(self, _event: PinchEnd) -> List[ViewportCommand]:
        self._to_idle()
        return []

    def _on_wheel(self, event: Wheel) -> List[ViewportCommand]:
        if not self.has_pattern:
            return []
        focal = None
        if event.x is not None and event.y is not None:
            focal = (event.x, event.y)
        frame = self.frame
        new_state = apply_zoom(
            self.state,
            -event.delta_y * self.wheel_sensitivity,
            focal=focal,
            center=(frame.center_x, frame.center_y),
            zoom_min=self.zoom_min,
            zoom_max=self.zoom_max,
        )
        return self._set_state(new_state)

    def _on_resize(self, event: Resize) -> List[ViewportCommand]:
        self.viewport_width = event.width
        self.viewport_height = event.height
        return []

    def _on_reset(self, _event: ResetView) -> List[ViewportCommand]:
        changed = self.state != ViewportState()
        self.reset()
        return [ViewChanged(self.state)] if changed else []

    # -----------------------------------------------------------------
    #  Helpers
    # -----------------------------------------------------------------

    def _set_state(self, new_state: ViewportState) -> List[ViewportCommand]:
        if new_state == self.state:
            return []
        self.state = new_state
        return [ViewChanged(new_state)]

    def _to_idle(self) -> None:
        self.mode = InteractionState.IDLE
        self._down = None
        self._last = None
        self._last_distance = None
        self._pinched = False


__all__ = [
    "InteractionState",
    "PointerDown",
    "PointerMove",
    "PointerUp",
    "PointerCancel",
    "PinchStart",
    "PinchMove",
    "PinchEnd",
    "Wheel",
    "Resize",
    "ResetView",
    "ViewChanged",
    "CellSelected",
    "ViewportController",
    "ViewportEvent",
    "ViewportCommand",
    "pinch_distance",
]
