"""S3 Blob Store - Implementation of BlobStorePort using boto3.

Reads applicant uploads back from AWS S3, MinIO or any other S3-compatible
service so they can be validated and hashed.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
from functools import lru_cache
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from config import settings
from domain.documents.ports import BlobNotFoundError, BlobStoreError, BlobStorePort

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class S3BlobStore(BlobStorePort):
    """S3-compatible blob store.

    Example:
        store = S3BlobStore(
            endpoint_url="http://localhost:9000",
            access_key="minioadmin",
            secret_key="minioadmin",
            bucket_name="registry-applications",
        )
        content = store.fetch("applications/IND-APP-2025-0001/o-level.pdf")
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
    ):
        """Initialize S3 blob store.

        Args:
            endpoint_url: S3 endpoint URL (None for AWS S3, URL for MinIO)
            access_key: S3 access key ID
            secret_key: S3 secret access key
            bucket_name: Bucket holding applicant uploads
            region: AWS region (default: 'us-east-1')

        Raises:
            BlobStoreError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
        except NoCredentialsError as e:
            raise BlobStoreError(f"Invalid S3 credentials: {e}")
        except BotoCoreError as e:
            raise BlobStoreError(f"Failed to initialize S3 client: {e}")

        self.bucket_name = bucket_name
        logger.info(
            f"Initialized S3 blob store: bucket={bucket_name}, "
            f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
        )

    def fetch(self, key: str) -> bytes:
        if not key:
            raise BlobNotFoundError("Storage key is empty")

        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
            content = response["Body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in _MISSING_KEY_CODES:
                logger.warning(f"Blob not found: key={key}")
                raise BlobNotFoundError(f"File not found: {key}")
            logger.error(f"S3 read failed: key={key}, error={error_code}")
            raise BlobStoreError(f"Failed to read file: {error_code}")
        except BotoCoreError as e:
            logger.error(f"S3 read failed: key={key}, error={e}")
            raise BlobStoreError(f"Failed to read file: {e}")

        logger.debug(f"Fetched blob: key={key}, size={len(content)}")
        return content

    def check_available(self) -> None:
        """Confirm the uploads bucket exists and is readable.

        Raises:
            BlobStoreError: If the bucket cannot be reached
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            raise BlobStoreError(f"Bucket {self.bucket_name} unavailable: {error_code}")
        except BotoCoreError as e:
            raise BlobStoreError(f"Bucket {self.bucket_name} unavailable: {e}")


@lru_cache()
def get_blob_store() -> BlobStorePort:
    """FastAPI dependency returning the configured blob store."""
    return S3BlobStore(
        endpoint_url=settings.S3_ENDPOINT_URL,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.S3_BUCKET_NAME,
        region=settings.S3_REGION,
    )
