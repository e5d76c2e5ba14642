"""Uploaded and downloadable file value objects."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath


@dataclass(frozen=True)
class UploadedFile:
    """A file received from the client."""

    file_name: str
    data: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def safe_name(self) -> str:
        """Base name without any client-supplied directories."""
        return PurePath(self.file_name.replace("\\", "/")).name or "upload"


@dataclass(frozen=True)
class FileContent:
    """File returned to the client."""

    data: bytes
    file_name: str
    content_type: str
