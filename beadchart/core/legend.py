from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Iterable, List

from ..models.pattern import BeadColor, PatternData


@dataclass(frozen=True)
class MaterialRow:
    color: BeadColor
    count: int
    hidden: bool = False


def build_material_rows(
    pattern: PatternData,
    palette_colors: Iterable[BeadColor],
    hidden_ids: AbstractSet[str] = frozenset(),
    exclude_hidden: bool = False,
) -> List[MaterialRow]:
    """Return the shopping list for a pattern, most used colour first.

    Only palette colours with a positive count are listed, in palette order for
    equal counts. Colours missing from the palette are skipped.
    """
    rows = [
        MaterialRow(color=color, count=pattern.counts[color.id], hidden=color.id in hidden_ids)
        for color in palette_colors
        if pattern.counts.get(color.id, 0) > 0
    ]
    if exclude_hidden:
        rows = [row for row in rows if not row.hidden]
    # sorted() is stable, ties keep palette order
    return sorted(rows, key=lambda row: row.count, reverse=True)


def visible_total(pattern: PatternData, hidden_ids: AbstractSet[str] = frozenset()) -> int:
    return sum(count for color_id, count in pattern.counts.items() if color_id not in hidden_ids)


__all__ = ["MaterialRow", "build_material_rows", "visible_total"]
