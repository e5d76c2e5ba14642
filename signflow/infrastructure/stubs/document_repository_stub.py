"""In-memory document repository.

Signers are stored separately and attached on read, mirroring the
PostgreSQL adapter where signers live in their own table.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from uuid import UUID

from signflow.application.ports.document_repository import DocumentRepositoryProtocol
from signflow.domain.models.document import Document, Signer


class DocumentRepositoryStub(DocumentRepositoryProtocol):
    """Stub implementation of DocumentRepositoryProtocol.

    ``fail_add_signers`` makes the next add_signers call raise, to test
    that nothing is persisted on failure.
    """

    def __init__(self) -> None:
        self._documents: dict[UUID, Document] = {}
        self._signers: dict[UUID, Signer] = {}
        self.fail_add_signers = False

    def clear(self) -> None:
        self._documents.clear()
        self._signers.clear()
        self.fail_add_signers = False

    def _with_signers(self, document: Document) -> Document:
        signers = sorted(
            (s for s in self._signers.values() if s.document_id == document.id),
            key=lambda s: s.order,
        )
        return replace(document, signers=tuple(signers))

    async def create(self, document: Document) -> Document:
        self._documents[document.id] = replace(document, signers=())
        for signer in document.signers:
            self._signers[signer.id] = signer
        return self._with_signers(document)

    async def get(self, document_id: UUID) -> Document | None:
        document = self._documents.get(document_id)
        return self._with_signers(document) if document else None

    async def list(self, user_id: UUID | None = None) -> list[Document]:
        documents = [
            d for d in self._documents.values() if user_id is None or d.user_id == user_id
        ]
        documents.sort(key=lambda d: d.uploaded_at, reverse=True)
        return [self._with_signers(d) for d in documents]

    async def get_many(
        self, document_ids: Sequence[UUID], user_id: UUID | None = None
    ) -> list[Document]:
        wanted = set(document_ids)
        return [d for d in await self.list(user_id) if d.id in wanted]

    async def update(self, document: Document) -> Document:
        self._documents[document.id] = replace(document, signers=())
        return self._with_signers(document)

    async def delete(self, document_id: UUID) -> bool:
        if self._documents.pop(document_id, None) is None:
            return False
        for signer_id in [s.id for s in self._signers.values() if s.document_id == document_id]:
            del self._signers[signer_id]
        return True

    async def count_by_envelope(
        self, envelope_key: str, exclude_document_id: UUID | None = None
    ) -> int:
        return sum(
            1
            for d in self._documents.values()
            if d.envelope_key == envelope_key and d.id != exclude_document_id
        )

    async def add_signers(self, signers: Sequence[Signer]) -> list[Signer]:
        if self.fail_add_signers:
            self.fail_add_signers = False
            raise RuntimeError("simulated signer insert failure")
        for signer in signers:
            self._signers[signer.id] = signer
        return list(signers)

    async def get_signer(self, signer_id: UUID) -> Signer | None:
        return self._signers.get(signer_id)

    async def update_signer(self, signer: Signer) -> Signer:
        self._signers[signer.id] = signer
        return signer

    async def delete_signer(self, signer_id: UUID) -> bool:
        return self._signers.pop(signer_id, None) is not None
