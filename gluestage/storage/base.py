"""
Blob store protocol and the no-op implementation.

The deployer only needs three operations from an object store:
- exists(bucket): does the bucket exist
- create_container(params): create a bucket from CreateBucket params
- put_object(bucket, key, body): upload bytes

Errors raised by an implementation are propagated unchanged by the deployer.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


class BlobStoreClient(ABC):
    """Abstract base class for object stores that receive staged artifacts."""

    @abstractmethod
    def exists(self, bucket: str) -> bool:
        """Return True if the bucket exists."""
        pass

    @abstractmethod
    def create_container(self, params: dict[str, Any]) -> None:
        """
        Create a bucket.

        Args:
            params: CreateBucket keyword arguments (at least "Bucket")

        Raises:
            Exception: If the bucket already exists or creation is not permitted
        """
        pass

    @abstractmethod
    def put_object(self, bucket: str, key: str, body: bytes) -> None:
        """
        Upload an object.

        Raises:
            Exception: On transport or permission errors
        """
        pass


@dataclass(frozen=True)
class PutCall:
    """A recorded put_object call."""
    bucket: str
    key: str
    size: int


class NoOpBlobStore(BlobStoreClient):
    """
    Blob store for dry runs and testing.

    Records every call without touching the network. Recording is guarded by a
    lock because support-file uploads are issued from a thread pool.
    """

    def __init__(self, existing_buckets: tuple[str, ...] = ()):
        self.existing_buckets = set(existing_buckets)
        self.exists_calls: list[str] = []
        self.created: list[dict[str, Any]] = []
        self.puts: list[PutCall] = []
        self._lock = threading.Lock()

    def exists(self, bucket: str) -> bool:
        with self._lock:
            self.exists_calls.append(bucket)
            return bucket in self.existing_buckets

    def create_container(self, params: dict[str, Any]) -> None:
        with self._lock:
            self.created.append(dict(params))
            self.existing_buckets.add(params["Bucket"])
        logger.info(f"[DRY-RUN] would create bucket {params['Bucket']}")

    def put_object(self, bucket: str, key: str, body: bytes) -> None:
        with self._lock:
            self.puts.append(PutCall(bucket=bucket, key=key, size=len(body)))
        logger.info(f"[DRY-RUN] would upload {len(body)} bytes to s3://{bucket}/{key}")

    @property
    def uploaded_keys(self) -> list[tuple[str, str]]:
        """(bucket, key) pairs in the order the uploads were recorded."""
        with self._lock:
            return [(p.bucket, p.key) for p in self.puts]
