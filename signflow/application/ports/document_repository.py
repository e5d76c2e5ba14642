"""Document repository port.

Signers are part of the document aggregate and are persisted through the
same repository. Documents returned by the repository always carry their
signers ordered by ``order``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from signflow.domain.models.document import Document, Signer


class DocumentRepositoryProtocol(Protocol):
    """Persistence for documents and their signers."""

    async def create(self, document: Document) -> Document: ...

    async def get(self, document_id: UUID) -> Document | None: ...

    async def list(self, user_id: UUID | None = None) -> list[Document]:
        """List documents newest upload first.

        Args:
            user_id: Restrict to this owner; None lists every document.
        """
        ...

    async def get_many(
        self, document_ids: Sequence[UUID], user_id: UUID | None = None
    ) -> list[Document]:
        """Fetch the given documents, optionally restricted to one owner."""
        ...

    async def update(self, document: Document) -> Document:
        """Update document columns. Signers are not touched."""
        ...

    async def delete(self, document_id: UUID) -> bool:
        """Delete a document together with its signers."""
        ...

    async def count_by_envelope(
        self, envelope_key: str, exclude_document_id: UUID | None = None
    ) -> int:
        """Count documents referencing a provider envelope."""
        ...

    async def add_signers(self, signers: Sequence[Signer]) -> list[Signer]:
        """Persist new signers atomically (all or none)."""
        ...

    async def get_signer(self, signer_id: UUID) -> Signer | None: ...

    async def update_signer(self, signer: Signer) -> Signer: ...

    async def delete_signer(self, signer_id: UUID) -> bool: ...
