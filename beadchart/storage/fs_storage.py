import json
from pathlib import Path
from typing import Any, Optional

from ..settings import DATA_DIR


class FSStorage:
    """Stores documents as files under ``root`` (``BEADCHART_DATA_DIR`` by default)."""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or DATA_DIR)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / key

    def save_bytes(self, path: str, data: bytes) -> None:
        target = self._path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    def load_bytes(self, path: str) -> Optional[bytes]:
        source = self._path(path)
        if not source.is_file():
            return None
        return source.read_bytes()

    def save_json(self, path: str, obj: Any) -> None:
        self.save_bytes(path, json.dumps(obj, ensure_ascii=False, indent=2).encode("utf-8"))

    def load_json(self, path: str) -> Optional[Any]:
        data = self.load_bytes(path)
        if data is None:
            return None
        return json.loads(data.decode("utf-8"))
