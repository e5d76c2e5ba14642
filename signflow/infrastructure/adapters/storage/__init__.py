"""Blob storage adapters."""

from signflow.infrastructure.adapters.storage.local_blob_storage import LocalBlobStorage

__all__: list[str] = ["LocalBlobStorage"]
