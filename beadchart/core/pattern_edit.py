from __future__ import annotations

from typing import List

from ..models.pattern import BeadColor, PatternData, count_grid
from .errors import ConfigurationError


def _rebuild(pattern: PatternData, grid: List[List[BeadColor]]) -> PatternData:
    # counts are always rederived from the full grid, never patched
    return PatternData(
        width=pattern.width,
        height=pattern.height,
        grid=grid,
        counts=count_grid(grid),
    )


def replace_global(pattern: PatternData, target_id: str, new_color: BeadColor) -> PatternData:
    """Reassign every cell whose colour id is ``target_id`` to ``new_color``."""
    grid = [
        [new_color if cell.id == target_id else cell for cell in row]
        for row in pattern.grid
    ]
    return _rebuild(pattern, grid)


def replace_cell(pattern: PatternData, x: int, y: int, new_color: BeadColor) -> PatternData:
    """Reassign exactly the cell at ``(x, y)``."""
    if not (0 <= x < pattern.width) or not (0 <= y < pattern.height):
        raise ConfigurationError(
            f"cell ({x}, {y}) is outside the {pattern.width}x{pattern.height} grid"
        )
    grid = [list(row) for row in pattern.grid]
    grid[y][x] = new_color
    return _rebuild(pattern, grid)


__all__ = ["replace_global", "replace_cell", "count_grid"]
