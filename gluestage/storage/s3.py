"""
S3 implementation of the blob store.

Wraps a boto3 S3 client. No retries or wrapping happen here: botocore
exceptions reach the caller as raised, so a failed upload aborts the run.
"""

import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError

from gluestage.storage.base import BlobStoreClient

logger = logging.getLogger(__name__)

# head_bucket error codes meaning "the bucket is not there"
MISSING_BUCKET_CODES = {"404", "NoSuchBucket", "NotFound"}


class S3BlobStore(BlobStoreClient):
    """BlobStoreClient backed by Amazon S3."""

    def __init__(self, client: Any = None, region: Optional[str] = None, profile: Optional[str] = None):
        """
        Args:
            client: Pre-built boto3 S3 client (tests inject a mock here)
            region: AWS region used when building a client
            profile: AWS named profile used when building a client
        """
        if client is None:
            session = boto3.session.Session(profile_name=profile, region_name=region)
            client = session.client("s3")
        self.client = client

    def exists(self, bucket: str) -> bool:
        try:
            self.client.head_bucket(Bucket=bucket)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in MISSING_BUCKET_CODES:
                return False
            raise
        return True

    def create_container(self, params: dict[str, Any]) -> None:
        logger.debug(f"CreateBucket {params}")
        self.client.create_bucket(**params)

    def put_object(self, bucket: str, key: str, body: bytes) -> None:
        logger.debug(f"PutObject s3://{bucket}/{key} ({len(body)} bytes)")
        self.client.put_object(Bucket=bucket, Key=key, Body=body)
