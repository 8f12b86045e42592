from __future__ import annotations

import logging
import time
from threading import Lock
from typing import Callable, List, Optional, Sequence

from pydantic import ValidationError

from ..color.palette_loader import load_builtin_palettes
from ..models.pattern import BeadColor, Palette
from ..storage import Storage
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

PALETTES_KEY = "palettes.json"


class PaletteStore:
    """Built-in plus user-imported palettes and the current selection.

    Custom palettes and the selected id persist through ``storage`` (any
    object with ``load_json``/``save_json``); without one the store is purely
    in memory.
    """

    def __init__(
        self,
        storage: Optional[Storage] = None,
        builtins: Optional[Sequence[Palette]] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.storage = storage
        self._builtin: List[Palette] = list(builtins or load_builtin_palettes())
        if not self._builtin:
            raise ConfigurationError("at least one built-in palette is required")
        self._custom: List[Palette] = []
        self._clock = clock
        self._lock = Lock()
        self.selected_id = self._builtin[0].id

    # -----------------------------------------------------------------
    #  Persistence
    # -----------------------------------------------------------------

    def load(self) -> None:
        if self.storage is None:
            return
        document = self.storage.load_json(PALETTES_KEY)
        if not document:
            return
        try:
            custom = [Palette(**{**entry, "builtin": False}) for entry in document.get("custom", [])]
            selected = document.get("selected")
        except (AttributeError, TypeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable palette document: %s", exc)
            return
        with self._lock:
            self._custom = custom
            if selected and any(p.id == selected for p in self._all()):
                self.selected_id = selected
        logger.info("Loaded %d custom palettes", len(custom))

    def save(self) -> None:
        if self.storage is None:
            return
        with self._lock:
            document = {
                "custom": [p.model_dump(exclude={"builtin"}) for p in self._custom],
                "selected": self.selected_id,
            }
        self.storage.save_json(PALETTES_KEY, document)

    # -----------------------------------------------------------------
    #  Queries
    # -----------------------------------------------------------------

    def _all(self) -> List[Palette]:
        return [*self._builtin, *self._custom]

    @property
    def all_palettes(self) -> List[Palette]:
        with self._lock:
            return self._all()

    def get(self, palette_id: str) -> Palette:
        for palette in self.all_palettes:
            if palette.id == palette_id:
                return palette
        raise ConfigurationError(f"unknown palette {palette_id!r}")

    @property
    def active(self) -> Palette:
        palettes = self.all_palettes
        return next((p for p in palettes if p.id == self.selected_id), palettes[0])

    # -----------------------------------------------------------------
    #  Mutations
    # -----------------------------------------------------------------

    def select(self, palette_id: str) -> Palette:
        palette = self.get(palette_id)
        with self._lock:
            self.selected_id = palette.id
        self.save()
        return palette

    def add_custom(self, name: str, colors: Sequence[BeadColor]) -> Palette:
        """Store an imported palette and make it the active one."""
        if not colors:
            raise ConfigurationError("a palette needs at least one colour")
        with self._lock:
            existing = {p.id for p in self._all()}
            palette_id = f"custom_{int(self._clock() * 1000)}"
            suffix = 1
            while palette_id in existing:
                palette_id = f"custom_{int(self._clock() * 1000)}_{suffix}"
                suffix += 1
            palette = Palette(id=palette_id, name=name, colors=list(colors))
            self._custom.append(palette)
            self.selected_id = palette.id
        self.save()
        logger.info("Added custom palette %s (%d colours)", palette.id, len(palette.colors))
        return palette

    def remove_custom(self, palette_id: str) -> None:
        with self._lock:
            if any(p.id == palette_id for p in self._builtin):
                raise ConfigurationError(f"built-in palette {palette_id!r} cannot be removed")
            remaining = [p for p in self._custom if p.id != palette_id]
            if len(remaining) == len(self._custom):
                raise ConfigurationError(f"unknown palette {palette_id!r}")
            self._custom = remaining
            if self.selected_id == palette_id:
                self.selected_id = self._builtin[0].id
        self.save()


__all__ = ["PALETTES_KEY", "PaletteStore"]
