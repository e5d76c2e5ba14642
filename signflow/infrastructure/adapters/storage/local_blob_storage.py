"""Filesystem-backed blob storage."""

from __future__ import annotations

import asyncio
from pathlib import Path, PurePosixPath

from structlog import get_logger

from signflow.domain.errors import NotFoundError, ValidationError

logger = get_logger()


class LocalBlobStorage:
    """Stores blobs as files below a root directory.

    Keys are slash-separated relative paths such as
    ``certificates/<user_id>/<timestamp>-<filename>``.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    def _path_for(self, key: str) -> Path:
        relative = PurePosixPath(key)
        if relative.is_absolute() or ".." in relative.parts or not relative.parts:
            raise ValidationError(f"Invalid storage key: {key}")
        return self._root.joinpath(*relative.parts)

    async def save(self, key: str, data: bytes) -> str:
        path = self._path_for(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)
        logger.info("blob_saved", blob=key, size=len(data))
        return key

    async def load(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            raise NotFoundError("blob", key) from None

    async def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        logger.info("blob_deleted", blob=key)
        return True
