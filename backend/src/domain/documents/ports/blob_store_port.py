"""Blob Store Port - Domain interface for reading uploaded file bytes.

Applicants upload file bytes straight to object storage and then register
the upload by its storage key. The document service only ever needs to read
those bytes back so they can be validated and hashed.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod


class BlobStoreError(Exception):
    """Base exception for blob store operations."""
    pass


class BlobNotFoundError(BlobStoreError):
    """Raised when no object exists under the requested key."""
    pass


class BlobStorePort(ABC):
    """Port interface for fetching uploaded files by storage key.

    Example Usage:
        blob_store = S3BlobStore(...)
        content = blob_store.fetch("applications/IND-APP-2025-0001/id.pdf")
    """

    @abstractmethod
    def fetch(self, key: str) -> bytes:
        """Return the exact bytes stored under ``key``.

        Args:
            key: Storage key supplied when the upload was registered

        Returns:
            bytes: Complete object content

        Raises:
            BlobNotFoundError: If nothing is stored under the key
            BlobStoreError: If the store is unreachable or the read fails
        """
        pass

    def check_available(self) -> None:
        """Raise BlobStoreError if the store cannot currently serve reads."""
        return None
