"""Tests for gluestage.storage.

The S3 store is exercised against a mocked boto3 client.
"""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from gluestage.storage import BlobStoreClient, NoOpBlobStore, PutCall, S3BlobStore


def _client_error(code: str, operation: str = "HeadBucket") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestS3BlobStore:
    """Tests for S3BlobStore."""

    def test_is_blob_store(self):
        assert issubclass(S3BlobStore, BlobStoreClient)

    def test_exists_true(self):
        client = MagicMock()
        assert S3BlobStore(client=client).exists("b") is True
        client.head_bucket.assert_called_once_with(Bucket="b")

    @pytest.mark.parametrize("code", ["404", "NoSuchBucket", "NotFound"])
    def test_exists_false_when_missing(self, code):
        client = MagicMock()
        client.head_bucket.side_effect = _client_error(code)
        assert S3BlobStore(client=client).exists("b") is False

    def test_exists_other_errors_propagate(self):
        client = MagicMock()
        client.head_bucket.side_effect = _client_error("403")
        with pytest.raises(ClientError):
            S3BlobStore(client=client).exists("b")

    def test_create_container(self):
        client = MagicMock()
        params = {"Bucket": "b", "CreateBucketConfiguration": {"LocationConstraint": "eu-west-1"}}
        S3BlobStore(client=client).create_container(params)
        client.create_bucket.assert_called_once_with(
            Bucket="b", CreateBucketConfiguration={"LocationConstraint": "eu-west-1"}
        )

    def test_create_container_error_propagates(self):
        client = MagicMock()
        client.create_bucket.side_effect = _client_error("BucketAlreadyOwnedByYou", "CreateBucket")
        with pytest.raises(ClientError, match="BucketAlreadyOwnedByYou"):
            S3BlobStore(client=client).create_container({"Bucket": "b"})

    def test_put_object(self):
        client = MagicMock()
        S3BlobStore(client=client).put_object("b", "scripts/etl1.py", b"print(1)")
        client.put_object.assert_called_once_with(Bucket="b", Key="scripts/etl1.py", Body=b"print(1)")

    def test_put_object_error_propagates(self):
        client = MagicMock()
        client.put_object.side_effect = _client_error("AccessDenied", "PutObject")
        with pytest.raises(ClientError):
            S3BlobStore(client=client).put_object("b", "k", b"")

    def test_builds_client_from_session(self):
        with patch("gluestage.storage.s3.boto3.session.Session") as session_cls:
            store = S3BlobStore(region="eu-west-1", profile="dev")
        session_cls.assert_called_once_with(profile_name="dev", region_name="eu-west-1")
        session_cls.return_value.client.assert_called_once_with("s3")
        assert store.client is session_cls.return_value.client.return_value


class TestNoOpBlobStore:
    """Tests for NoOpBlobStore."""

    def test_exists_uses_known_buckets(self):
        store = NoOpBlobStore(existing_buckets=("a",))
        assert store.exists("a") is True
        assert store.exists("b") is False
        assert store.exists_calls == ["a", "b"]

    def test_create_container_records_and_registers(self):
        store = NoOpBlobStore()
        store.create_container({"Bucket": "b", "ACL": "private"})
        assert store.created == [{"Bucket": "b", "ACL": "private"}]
        assert store.exists("b") is True

    def test_put_object_records(self):
        store = NoOpBlobStore()
        store.put_object("b", "k1", b"abc")
        store.put_object("b", "k2", b"")
        assert store.puts == [PutCall("b", "k1", 3), PutCall("b", "k2", 0)]
        assert store.uploaded_keys == [("b", "k1"), ("b", "k2")]
