from __future__ import annotations

import re
from collections import Counter
from typing import Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.types import RGB

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")


class BeadColor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = ""
    hex: str

    @field_validator("hex")
    @classmethod
    def _normalise_hex(cls, value: str) -> str:
        match = _HEX_RE.match(value.strip())
        if not match:
            raise ValueError(f"invalid hex colour: {value!r}")
        return "#" + match.group(1).upper()

    @property
    def rgb(self) -> RGB:
        return (int(self.hex[1:3], 16), int(self.hex[3:5], 16), int(self.hex[5:7], 16))

    @property
    def luma(self) -> float:
        """YIQ brightness in the 0..255 range."""
        r, g, b = self.rgb
        return (r * 299 + g * 587 + b * 114) / 1000


class Palette(BaseModel):
    id: str
    name: str
    colors: List[BeadColor]
    builtin: bool = False

    @model_validator(mode="after")
    def _unique_ids(self) -> "Palette":
        seen: set[str] = set()
        for color in self.colors:
            if color.id in seen:
                raise ValueError(f"duplicate colour id {color.id!r} in palette {self.id!r}")
            seen.add(color.id)
        return self

    def lookup(self) -> Dict[str, BeadColor]:
        return {color.id: color for color in self.colors}


def count_grid(grid: Sequence[Sequence[BeadColor]]) -> Dict[str, int]:
    """Count cells per colour id by scanning the whole grid."""
    counts: Counter[str] = Counter()
    for row in grid:
        counts.update(cell.id for cell in row)
    return dict(counts)


class PatternData(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    grid: List[List[BeadColor]]
    counts: Dict[str, int]

    @model_validator(mode="after")
    def _check_invariants(self) -> "PatternData":
        if len(self.grid) != self.height:
            raise ValueError(f"grid has {len(self.grid)} rows, expected {self.height}")
        for y, row in enumerate(self.grid):
            if len(row) != self.width:
                raise ValueError(f"grid row {y} has {len(row)} cells, expected {self.width}")
        for color_id, count in self.counts.items():
            if count < 0:
                raise ValueError(f"negative count for {color_id!r}")
        present = {color_id: count for color_id, count in self.counts.items() if count}
        if present != count_grid(self.grid):
            raise ValueError("counts do not match the grid contents")
        return self

    @classmethod
    def from_grid(cls, grid: Sequence[Sequence[BeadColor]]) -> "PatternData":
        rows = [list(row) for row in grid]
        return cls(
            width=len(rows[0]) if rows else 0,
            height=len(rows),
            grid=rows,
            counts=count_grid(rows),
        )

    def cell(self, x: int, y: int) -> BeadColor:
        return self.grid[y][x]

    def region(self, x0: int, y0: int, width: int, height: int) -> List[List[BeadColor]]:
        return [list(row[x0 : x0 + width]) for row in self.grid[y0 : y0 + height]]

    @property
    def total(self) -> int:
        return self.width * self.height
