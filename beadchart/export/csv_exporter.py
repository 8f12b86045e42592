import csv
import io
from typing import Iterable

from ..core.legend import MaterialRow


def export_materials_csv(rows: Iterable[MaterialRow]) -> str:
    rows = list(rows)
    total = sum(row.count for row in rows) or 1
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["id", "name", "hex", "count", "percent", "hidden"])
    for row in rows:
        writer.writerow([
            row.color.id,
            row.color.name,
            row.color.hex,
            row.count,
            round(row.count / total * 100, 2),
            "yes" if row.hidden else "",
        ])
    return buf.getvalue()
