# SPDX-License-Identifier: MIT
"""Unit tests for S3Storage with a mocked boto3 client."""

from datetime import datetime, timezone

import pytest

pytest.importorskip("boto3")

from botocore import UNSIGNED  # noqa: E402
from botocore.exceptions import ClientError  # noqa: E402

from osskit.config import S3Args  # noqa: E402
from osskit.errors import BackendError, ProviderInitError  # noqa: E402
from osskit.storage import s3  # noqa: E402
from osskit.storage.protocol import EPOCH, ObjectPath, ObjectState, ObjectStorage  # noqa: E402
from osskit.storage.s3 import S3Storage, build_client, ensure_bucket  # noqa: E402


def _client_error(code: str, status: int, operation: str = "HeadObject") -> ClientError:
    return ClientError(
        {"Error": {"Code": code, "Message": "boom"}, "ResponseMetadata": {"HTTPStatusCode": status}},
        operation,
    )


@pytest.fixture
def storage(mock_client):
    return S3Storage("media", mock_client)


def test_s3_is_object_storage(storage):
    assert isinstance(storage, ObjectStorage)
    assert storage.type() == "s3"


# ------------------------------------------------------------------
# Client construction
# ------------------------------------------------------------------


@pytest.mark.unit
class TestBuildClient:
    def test_static_credentials_and_endpoint(self, mocker):
        boto_client = mocker.patch.object(s3.boto3, "client")
        args = S3Args(
            endpoint="http://minio:9000",
            use_path_style=True,
            bucket="b",
            region="us-east-1",
            access_key="AK",
            secret_key="SK",
        )

        build_client(args)

        kwargs = boto_client.call_args.kwargs
        assert boto_client.call_args.args == ("s3",)
        assert kwargs["endpoint_url"] == "http://minio:9000"
        assert kwargs["aws_access_key_id"] == "AK"
        assert kwargs["aws_secret_access_key"] == "SK"
        assert kwargs["region_name"] == "us-east-1"
        assert kwargs["config"].signature_version == "s3v4"
        assert kwargs["config"].s3 == {"addressing_style": "path"}

    def test_default_credential_chain(self, mocker):
        boto_client = mocker.patch.object(s3.boto3, "client")

        build_client(S3Args(use_aws=True, bucket="b", region="eu-west-1"))

        kwargs = boto_client.call_args.kwargs
        assert "aws_access_key_id" not in kwargs
        assert "endpoint_url" not in kwargs
        assert kwargs["config"].s3 == {"addressing_style": "auto"}

    def test_iam_role_ignores_static_keys(self, mocker):
        boto_client = mocker.patch.object(s3.boto3, "client")

        build_client(S3Args(use_aws=True, use_iam_role=True, bucket="b", region="r", access_key="AK", secret_key="SK"))

        assert "aws_access_key_id" not in boto_client.call_args.kwargs

    def test_unsigned(self, mocker):
        boto_client = mocker.patch.object(s3.boto3, "client")

        build_client(S3Args(endpoint="http://minio:9000", bucket="b", region="r", signature_version="unsigned"))

        kwargs = boto_client.call_args.kwargs
        assert kwargs["config"].signature_version is UNSIGNED
        assert "aws_access_key_id" not in kwargs

    def test_v2_signature(self, mocker):
        boto_client = mocker.patch.object(s3.boto3, "client")

        build_client(S3Args(use_aws=True, bucket="b", region="r", signature_version="v2"))

        assert boto_client.call_args.kwargs["config"].signature_version == "s3"


@pytest.mark.unit
class TestEnsureBucket:
    def test_existing_bucket(self, mock_client):
        ensure_bucket(mock_client, "media", "eu-west-1")

        mock_client.head_bucket.assert_called_once_with(Bucket="media")
        mock_client.create_bucket.assert_not_called()

    def test_missing_bucket_is_created(self, mock_client):
        mock_client.head_bucket.side_effect = _client_error("404", 404, "HeadBucket")

        ensure_bucket(mock_client, "media", "eu-west-1")

        mock_client.create_bucket.assert_called_once_with(
            Bucket="media", CreateBucketConfiguration={"LocationConstraint": "eu-west-1"}
        )

    def test_us_east_1_has_no_location_constraint(self, mock_client):
        mock_client.head_bucket.side_effect = _client_error("NotFound", 404, "HeadBucket")

        ensure_bucket(mock_client, "media", "us-east-1")

        mock_client.create_bucket.assert_called_once_with(Bucket="media")

    def test_create_failure(self, mock_client):
        mock_client.head_bucket.side_effect = _client_error("404", 404, "HeadBucket")
        mock_client.create_bucket.side_effect = _client_error("AccessDenied", 403, "CreateBucket")

        with pytest.raises(ProviderInitError, match="cannot create bucket 'media'"):
            ensure_bucket(mock_client, "media", "eu-west-1")

    def test_forbidden_bucket(self, mock_client):
        mock_client.head_bucket.side_effect = _client_error("403", 403, "HeadBucket")

        with pytest.raises(ProviderInitError, match="cannot access bucket 'media'"):
            ensure_bucket(mock_client, "media", "eu-west-1")

        mock_client.create_bucket.assert_not_called()

    def test_from_args_checks_bucket(self, mocker, mock_client):
        mocker.patch.object(s3.boto3, "client", return_value=mock_client)

        storage = S3Storage.from_args(S3Args(use_aws=True, bucket="media", region="eu-west-1"))

        assert storage.type() == "s3"
        mock_client.head_bucket.assert_called_once_with(Bucket="media")


# ------------------------------------------------------------------
# Byte-level I/O
# ------------------------------------------------------------------


@pytest.mark.unit
def test_save(storage, mock_client):
    storage.save("k/v.bin", b"DATA")
    mock_client.put_object.assert_called_once_with(Bucket="media", Key="k/v.bin", Body=b"DATA")


@pytest.mark.unit
def test_load_reads_and_closes_body(storage, mock_client, mocker):
    body = mocker.MagicMock()
    body.read.return_value = b"DATA"
    mock_client.get_object.return_value = {"Body": body}

    assert storage.load("k/v.bin") == b"DATA"
    mock_client.get_object.assert_called_once_with(Bucket="media", Key="k/v.bin")
    body.close.assert_called_once()


@pytest.mark.unit
def test_load_missing_propagates(storage, mock_client):
    mock_client.get_object.side_effect = _client_error("NoSuchKey", 404, "GetObject")

    with pytest.raises(ClientError):
        storage.load("missing")


@pytest.mark.unit
def test_delete(storage, mock_client):
    storage.delete("k")
    mock_client.delete_object.assert_called_once_with(Bucket="media", Key="k")


# ------------------------------------------------------------------
# exists / state
# ------------------------------------------------------------------


@pytest.mark.unit
def test_exists_true(storage, mock_client):
    mock_client.head_object.return_value = {"ContentLength": 1}
    assert storage.exists("k") is True


@pytest.mark.unit
@pytest.mark.parametrize("code", ["404", "NoSuchKey", "NotFound"])
def test_exists_not_found_codes(storage, mock_client, code):
    mock_client.head_object.side_effect = _client_error(code, 404)
    assert storage.exists("k") is False


@pytest.mark.unit
def test_exists_404_status_with_unknown_code(storage, mock_client):
    mock_client.head_object.side_effect = _client_error("", 404)
    assert storage.exists("k") is False


@pytest.mark.unit
def test_exists_other_error_raises(storage, mock_client):
    mock_client.head_object.side_effect = _client_error("403", 403)

    with pytest.raises(ClientError):
        storage.exists("k")


@pytest.mark.unit
def test_state(storage, mock_client):
    modified = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    mock_client.head_object.return_value = {"ContentLength": 42, "LastModified": modified}

    assert storage.state("k") == ObjectState(size=42, last_modified=modified)


@pytest.mark.unit
def test_state_missing_metadata_defaults(storage, mock_client):
    mock_client.head_object.return_value = {}

    assert storage.state("k") == ObjectState(size=0, last_modified=EPOCH)


# ------------------------------------------------------------------
# list
# ------------------------------------------------------------------


@pytest.mark.unit
def test_list_single_page(storage, mock_client):
    mock_client.list_objects_v2.return_value = {
        "Contents": [{"Key": "p/"}, {"Key": "p/a.bin"}, {"Key": "p/sub/b.bin"}],
        "IsTruncated": False,
    }

    result = storage.list("p")

    assert result == [ObjectPath(path="a.bin"), ObjectPath(path="sub/b.bin")]
    mock_client.list_objects_v2.assert_called_once_with(Bucket="media", Prefix="p/", MaxKeys=1000)


@pytest.mark.unit
def test_list_empty(storage, mock_client):
    mock_client.list_objects_v2.return_value = {"KeyCount": 0, "IsTruncated": False}
    assert storage.list("p/") == []


@pytest.mark.unit
def test_list_follows_continuation_tokens(mock_client, make_pages):
    keys = [f"big/{i:05d}.bin" for i in range(1500)]
    pages = {}
    token = None
    for page_keys, next_token in make_pages(keys, 1000):
        pages[token] = (page_keys, next_token)
        token = next_token

    def list_objects_v2(**kwargs):
        page_keys, next_token = pages[kwargs.get("ContinuationToken")]
        resp = {"Contents": [{"Key": k} for k in page_keys], "IsTruncated": next_token is not None}
        if next_token:
            resp["NextContinuationToken"] = next_token
        return resp

    mock_client.list_objects_v2.side_effect = list_objects_v2
    storage = S3Storage("media", mock_client)

    result = storage.list("big")

    assert len(result) == 1500
    assert len({e.path for e in result}) == 1500
    assert mock_client.list_objects_v2.call_count == 2
    assert mock_client.list_objects_v2.call_args_list[1].kwargs["ContinuationToken"] == "t1000"


@pytest.mark.unit
def test_list_page_error_aborts(storage, mock_client):
    mock_client.list_objects_v2.side_effect = [
        {"Contents": [{"Key": "p/a"}], "IsTruncated": True, "NextContinuationToken": "n"},
        _client_error("SlowDown", 503, "ListObjectsV2"),
    ]

    with pytest.raises(ClientError):
        storage.list("p")


@pytest.mark.unit
def test_list_truncated_without_token(storage, mock_client):
    mock_client.list_objects_v2.return_value = {"Contents": [{"Key": "p/a"}], "IsTruncated": True}

    with pytest.raises(BackendError):
        storage.list("p")


@pytest.mark.unit
def test_close(storage, mock_client):
    with storage:
        pass
    mock_client.close.assert_called_once()
