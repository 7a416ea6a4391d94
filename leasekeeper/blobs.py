"""
leasekeeper.blobs
=================

Path-addressed storage for uploaded evidence files.

Two interchangeable backends:

* :class:`MemoryBlobStore` – a dict, for tests and demos
* :class:`FileBlobStore` – files under a root directory
  (``settings.BLOB_ROOT`` by default)

Paths are POSIX-style relative keys such as ``building/milestone/file.pdf``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Dict

from .errors import StoreError
from .settings import BLOB_ROOT

logger = logging.getLogger(__name__)


def _clean(path: str) -> str:
    p = PurePosixPath(path)
    if p.is_absolute() or ".." in p.parts or not p.parts:
        raise ValueError(f"invalid blob path: {path!r}")
    return str(p)


class MemoryBlobStore:
    """Dictionary-backed blob store."""

    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}

    def upload(self, path: str, content: bytes) -> str:
        key = _clean(path)
        self._blobs[key] = bytes(content)
        return key

    def download(self, path: str) -> bytes:
        try:
            return self._blobs[_clean(path)]
        except KeyError:
            raise StoreError(f"blob not found: {path}") from None

    def exists(self, path: str) -> bool:
        return _clean(path) in self._blobs

    def delete(self, path: str) -> None:
        self._blobs.pop(_clean(path), None)

    def __len__(self) -> int:
        return len(self._blobs)


class FileBlobStore:
    """Blob store writing plain files under *root*."""

    def __init__(self, root: str | os.PathLike = BLOB_ROOT) -> None:
        self.root = Path(root)

    def _target(self, path: str) -> Path:
        return self.root / _clean(path)

    def upload(self, path: str, content: bytes) -> str:
        target = self._target(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            logger.error(f"Failed to write blob {path}: {exc}")
            raise StoreError(str(exc)) from exc
        return _clean(path)

    def download(self, path: str) -> bytes:
        try:
            return self._target(path).read_bytes()
        except OSError as exc:
            raise StoreError(f"blob not readable: {path}") from exc

    def exists(self, path: str) -> bool:
        return self._target(path).is_file()

    def delete(self, path: str) -> None:
        try:
            self._target(path).unlink(missing_ok=True)
        except OSError as exc:
            raise StoreError(str(exc)) from exc
