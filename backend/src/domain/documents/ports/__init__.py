"""Blob store port interface"""

from .blob_store_port import BlobNotFoundError, BlobStoreError, BlobStorePort

__all__ = ["BlobStorePort", "BlobStoreError", "BlobNotFoundError"]
