"""
gluestage.storage - Object stores that receive staged scripts and support files.
"""

from .base import BlobStoreClient, NoOpBlobStore, PutCall
from .s3 import S3BlobStore

__all__ = [
    "BlobStoreClient",
    "NoOpBlobStore",
    "PutCall",
    "S3BlobStore",
]
