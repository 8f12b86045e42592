from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from ..settings import STORAGE_BACKEND
from .fs_storage import FSStorage

logger = logging.getLogger(__name__)


class Storage(Protocol):
    def save_bytes(self, path: str, data: bytes) -> None: ...

    def save_json(self, path: str, obj: Any) -> None: ...

    def load_bytes(self, path: str) -> Optional[bytes]: ...

    def load_json(self, path: str) -> Optional[Any]: ...


_storage_instance: Optional[Storage] = None


def get_storage() -> Storage:
    global _storage_instance
    if _storage_instance is not None:
        return _storage_instance

    backend = STORAGE_BACKEND.lower()
    if backend == "s3":
        from .s3_storage import S3Storage

        _storage_instance = S3Storage()
    else:
        if backend != "fs":
            logger.warning("Unknown storage backend %r, using filesystem", backend)
        _storage_instance = FSStorage()
    return _storage_instance


__all__ = ["Storage", "FSStorage", "get_storage"]
