"""Unit tests for the S3 blob store using moto

Tests cover fetching uploaded bytes back by key and the mapping of S3
failures onto BlobNotFoundError / BlobStoreError.
"""

import boto3
import pytest
from moto import mock_aws

from domain.documents.ports import BlobNotFoundError, BlobStoreError
from infrastructure.storage import S3BlobStore


TEST_BUCKET = "test-registry-bucket"
TEST_REGION = "us-east-1"
TEST_ACCESS_KEY = "test-access-key"
TEST_SECRET_KEY = "test-secret-key"


@pytest.fixture
def s3_client():
    """Mock S3 environment with the uploads bucket"""
    with mock_aws():
        client = boto3.client(
            "s3",
            region_name=TEST_REGION,
            aws_access_key_id=TEST_ACCESS_KEY,
            aws_secret_access_key=TEST_SECRET_KEY,
        )
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


@pytest.fixture
def blob_store(s3_client):
    return S3BlobStore(
        endpoint_url=None,
        access_key=TEST_ACCESS_KEY,
        secret_key=TEST_SECRET_KEY,
        bucket_name=TEST_BUCKET,
        region=TEST_REGION,
    )


class TestFetch:
    def test_returns_exact_bytes(self, s3_client, blob_store):
        content = b"%PDF-1.4\n" + bytes(range(256)) + b"\n%%EOF"
        s3_client.put_object(Bucket=TEST_BUCKET, Key="applications/IND-APP-2025-0001/id.pdf", Body=content)

        assert blob_store.fetch("applications/IND-APP-2025-0001/id.pdf") == content

    def test_missing_key(self, blob_store):
        with pytest.raises(BlobNotFoundError, match="File not found"):
            blob_store.fetch("applications/IND-APP-2025-0001/missing.pdf")

    def test_empty_key(self, blob_store):
        with pytest.raises(BlobNotFoundError):
            blob_store.fetch("")

    def test_missing_bucket_is_a_store_error(self, s3_client):
        store = S3BlobStore(
            endpoint_url=None,
            access_key=TEST_ACCESS_KEY,
            secret_key=TEST_SECRET_KEY,
            bucket_name="no-such-bucket",
            region=TEST_REGION,
        )
        with pytest.raises(BlobStoreError) as exc_info:
            store.fetch("any/key.pdf")

        assert not isinstance(exc_info.value, BlobNotFoundError)
        assert "NoSuchBucket" in str(exc_info.value)


class TestCheckAvailable:
    def test_existing_bucket(self, blob_store):
        blob_store.check_available()

    def test_missing_bucket(self, s3_client):
        store = S3BlobStore(
            endpoint_url=None,
            access_key=TEST_ACCESS_KEY,
            secret_key=TEST_SECRET_KEY,
            bucket_name="no-such-bucket",
            region=TEST_REGION,
        )
        with pytest.raises(BlobStoreError, match="no-such-bucket unavailable"):
            store.check_available()
