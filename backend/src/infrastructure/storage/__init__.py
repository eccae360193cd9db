"""Object storage adapters"""

from .s3_blob_store import S3BlobStore, get_blob_store

__all__ = ["S3BlobStore", "get_blob_store"]
