"""Blob storage port for uploaded files."""

from __future__ import annotations

from typing import Protocol


class BlobStorageProtocol(Protocol):
    """Stores opaque file contents under slash-separated keys."""

    async def save(self, key: str, data: bytes) -> str:
        """Store data and return the key it was stored under."""
        ...

    async def load(self, key: str) -> bytes:
        """Read stored data.

        Raises:
            NotFoundError: If nothing is stored under key.
        """
        ...

    async def delete(self, key: str) -> bool:
        """Remove stored data. Returns False when the key was absent."""
        ...
