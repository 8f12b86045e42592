import csv
import io
from typing import List

from ..models.pattern import BeadColor, Palette

# Minimal built-in palette samples (extend with full lists)
HAMA = [
    {"id": "H01", "name": "White", "hex": "#F9F9F9"},
    {"id": "H02", "name": "Cream", "hex": "#F0E6BE"},
    {"id": "H03", "name": "Yellow", "hex": "#F5D200"},
    {"id": "H04", "name": "Orange", "hex": "#ED6B1F"},
    {"id": "H05", "name": "Red", "hex": "#C8102E"},
    {"id": "H06", "name": "Pink", "hex": "#F09CB8"},
    {"id": "H07", "name": "Purple", "hex": "#6C3A8E"},
    {"id": "H08", "name": "Blue", "hex": "#1F4FA0"},
    {"id": "H09", "name": "Light Blue", "hex": "#5BA4DB"},
    {"id": "H10", "name": "Green", "hex": "#1E8C45"},
    {"id": "H11", "name": "Light Green", "hex": "#8DC63F"},
    {"id": "H12", "name": "Brown", "hex": "#6B4226"},
    {"id": "H17", "name": "Grey", "hex": "#8A8D8F"},
    {"id": "H18", "name": "Black", "hex": "#1A1A1A"},
]

PERLER = [
    {"id": "P01", "name": "White", "hex": "#F1F1F1"},
    {"id": "P02", "name": "Cream", "hex": "#E0DEA9"},
    {"id": "P03", "name": "Yellow", "hex": "#ECD800"},
    {"id": "P04", "name": "Orange", "hex": "#ED6120"},
    {"id": "P05", "name": "Red", "hex": "#BF2E40"},
    {"id": "P07", "name": "Purple", "hex": "#604089"},
    {"id": "P08", "name": "Dark Blue", "hex": "#2B3F87"},
    {"id": "P09", "name": "Light Blue", "hex": "#3370C0"},
    {"id": "P10", "name": "Dark Green", "hex": "#1C753E"},
    {"id": "P12", "name": "Brown", "hex": "#513E32"},
    {"id": "P17", "name": "Grey", "hex": "#8A8D91"},
    {"id": "P18", "name": "Black", "hex": "#2E2F32"},
]

BUILTIN_PALETTES = [
    Palette(id="hama", name="Hama Midi", colors=[BeadColor(**c) for c in HAMA], builtin=True),
    Palette(id="perler", name="Perler", colors=[BeadColor(**c) for c in PERLER], builtin=True),
]


def load_builtin_palettes() -> List[Palette]:
    return list(BUILTIN_PALETTES)


def parse_palette_csv(content: str) -> List[BeadColor]:
    """Parse ``id,name,hex`` rows; a header row is detected and skipped.

    Quoted fields may contain commas, a missing ``#`` is added and rows with
    fewer than three fields or an invalid colour are skipped.
    """
    lines = content.splitlines()
    if not lines:
        return []

    start = 0
    first = lines[0].lower()
    if "id" in first and "hex" in first:
        start = 1

    colors: List[BeadColor] = []
    seen: set[str] = set()
    for parts in csv.reader(io.StringIO("\n".join(lines[start:]))):
        if len(parts) < 3:
            continue
        color_id, name, hex_value = (p.strip() for p in parts[:3])
        if not color_id or not hex_value or color_id in seen:
            continue
        if not hex_value.startswith("#"):
            hex_value = "#" + hex_value
        try:
            colors.append(BeadColor(id=color_id, name=name, hex=hex_value))
        except ValueError:
            continue
        seen.add(color_id)
    return colors
