from __future__ import annotations

from typing import List, Optional, Sequence

from beadchart.models.pattern import BeadColor, Palette, PatternData

WHITE = BeadColor(id="H01", name="White", hex="#F9F9F9")
RED = BeadColor(id="H05", name="Red", hex="#C8102E")
BLUE = BeadColor(id="H08", name="Blue", hex="#1F4FA0")
BLACK = BeadColor(id="H18", name="Black", hex="#1A1A1A")

PALETTE: List[BeadColor] = [WHITE, RED, BLUE, BLACK]


def make_pattern(
    width: int,
    height: int,
    colors: Sequence[BeadColor] = PALETTE,
) -> PatternData:
    """Diagonal stripes cycling through ``colors``."""
    grid = [[colors[(x + y) % len(colors)] for x in range(width)] for y in range(height)]
    return PatternData.from_grid(grid)


def uniform_pattern(width: int, height: int, color: BeadColor = RED) -> PatternData:
    return PatternData.from_grid([[color] * width for _ in range(height)])


def pattern_with_cells(
    width: int,
    height: int,
    background: BeadColor,
    color: BeadColor,
    cells: int,
) -> PatternData:
    """``background`` everywhere except the first ``cells`` cells in row-major order."""
    grid = []
    for y in range(height):
        grid.append([color if y * width + x < cells else background for x in range(width)])
    return PatternData.from_grid(grid)


def make_palette(colors: Optional[Sequence[BeadColor]] = None, palette_id: str = "test") -> Palette:
    return Palette(id=palette_id, name="Test", colors=list(colors or PALETTE), builtin=True)
