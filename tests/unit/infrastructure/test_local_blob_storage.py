"""Unit tests for filesystem blob storage."""

from pathlib import Path

import pytest

from signflow.domain.errors import NotFoundError, ValidationError
from signflow.infrastructure.adapters.storage.local_blob_storage import LocalBlobStorage


class TestLocalBlobStorage:
    async def test_save_load_delete(self, tmp_path: Path) -> None:
        storage = LocalBlobStorage(tmp_path)

        key = await storage.save("documents/u1/file.pdf", b"%PDF")

        assert key == "documents/u1/file.pdf"
        assert (tmp_path / "documents" / "u1" / "file.pdf").read_bytes() == b"%PDF"
        assert await storage.load(key) == b"%PDF"
        assert await storage.delete(key) is True
        assert await storage.delete(key) is False

    async def test_missing_blob(self, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError):
            await LocalBlobStorage(tmp_path).load("nope.bin")

    @pytest.mark.parametrize("key", ["../escape.bin", "/etc/passwd", ""])
    async def test_rejects_keys_outside_root(self, tmp_path: Path, key: str) -> None:
        with pytest.raises(ValidationError):
            await LocalBlobStorage(tmp_path).save(key, b"x")
