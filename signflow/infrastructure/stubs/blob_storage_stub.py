"""In-memory blob storage."""

from __future__ import annotations

from signflow.application.ports.blob_storage import BlobStorageProtocol
from signflow.domain.errors import NotFoundError


class BlobStorageStub(BlobStorageProtocol):
    """Stub implementation of BlobStorageProtocol."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}

    def clear(self) -> None:
        self.blobs.clear()

    async def save(self, key: str, data: bytes) -> str:
        self.blobs[key] = data
        return key

    async def load(self, key: str) -> bytes:
        try:
            return self.blobs[key]
        except KeyError:
            raise NotFoundError("blob", key) from None

    async def delete(self, key: str) -> bool:
        return self.blobs.pop(key, None) is not None
