from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..core.exceptions import DocumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredDocument:
    storage_id: str
    url: str
    file_name: str
    size: int


class DocumentStorage(Protocol):
    def upload(self, data: bytes, *, folder: str, file_name: str) -> StoredDocument:
        raise NotImplementedError

    def delete(self, storage_id: str) -> None:
        raise NotImplementedError


class LocalDocumentStorage(DocumentStorage):
    """Stores documents under ``root/<folder>/<file_name>``.

    ``storage_id`` is the path relative to ``root``; URLs are
    ``{base_url}/{folder}/{file_name}``.
    """

    def __init__(self, root: str | Path, *, base_url: str = "/uploads"):
        self._root = Path(root)
        self._base_url = base_url.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    @property
    def base_url(self) -> str:
        return self._base_url

    def _resolve(self, storage_id: str) -> Path:
        path = (self._root / storage_id).resolve()
        if self._root.resolve() not in path.parents:
            raise DocumentError(f"Refusing path outside document root: {storage_id}")
        return path

    def upload(self, data: bytes, *, folder: str, file_name: str) -> StoredDocument:
        storage_id = f"{folder.strip('/')}/{file_name}"
        path = self._resolve(storage_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise DocumentError(f"Could not store {storage_id}: {e}") from e

        logger.info("Stored document %s (%d bytes)", storage_id, len(data))
        return StoredDocument(
            storage_id=storage_id,
            url=f"{self._base_url}/{storage_id}",
            file_name=file_name,
            size=len(data),
        )

    def delete(self, storage_id: str) -> None:
        try:
            self._resolve(storage_id).unlink(missing_ok=True)
        except OSError as e:
            raise DocumentError(f"Could not delete {storage_id}: {e}") from e
