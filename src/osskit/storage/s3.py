# SPDX-License-Identifier: MIT
"""S3 and S3-compatible storage backend (boto3).

Credentials come from static keys, the default AWS provider chain (IAM role
or environment), or are skipped entirely for ``unsigned`` access.  The bucket
is probed at construction and created if it does not exist.
"""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore import UNSIGNED
from botocore.config import Config
from botocore.exceptions import ClientError

from .. import vendors
from ..config import S3Args
from ..errors import ProviderInitError
from .listing import Page, collect_pages, normalize_prefix
from .protocol import EPOCH, ClosingMixin, ObjectPath, ObjectState

logger = logging.getLogger("osskit")

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound", "NoSuchBucket"})

# User-facing signature names -> botocore signature_version values
_SIGNATURE_VERSIONS: dict[str, Any] = {
    "": "s3v4",
    "v4": "s3v4",
    "s3v4": "s3v4",
    "v2": "s3",
    "s3": "s3",
    "unsigned": UNSIGNED,
}


def is_not_found(err: ClientError) -> bool:
    """Whether a botocore error means the bucket or key does not exist."""
    error = err.response.get("Error", {})
    if str(error.get("Code", "")) in _NOT_FOUND_CODES:
        return True
    return err.response.get("ResponseMetadata", {}).get("HTTPStatusCode") == 404


def build_client(args: S3Args):
    """Create the boto3 S3 client described by *args*."""
    config = Config(
        signature_version=_SIGNATURE_VERSIONS[args.signature_version],
        s3={"addressing_style": "path" if args.use_path_style else "auto"},
    )
    kwargs: dict[str, Any] = {"region_name": args.region, "config": config}
    if args.endpoint:
        kwargs["endpoint_url"] = args.endpoint
    if args.signature_version != "unsigned" and not args.uses_default_credentials:
        kwargs["aws_access_key_id"] = args.access_key
        kwargs["aws_secret_access_key"] = args.secret_key
    return boto3.client("s3", **kwargs)


class S3Storage(ClosingMixin):
    """Bucket-bound S3 handle.

    Args:
        bucket: Bucket name.
        client: A boto3 S3 client.
        page_size: ``MaxKeys`` sent with each listing request.
    """

    def __init__(self, bucket: str, client, page_size: int = 1000) -> None:
        self._bucket = bucket
        self._client = client
        self._page_size = page_size

    @classmethod
    def from_args(cls, args: S3Args) -> S3Storage:
        client = build_client(args)
        ensure_bucket(client, args.bucket, args.region)
        return cls(args.bucket, client)

    # ------------------------------------------------------------------
    # Byte-level I/O
    # ------------------------------------------------------------------

    def save(self, key: str, data: bytes) -> None:
        self._client.put_object(Bucket=self._bucket, Key=key, Body=data)

    def load(self, key: str) -> bytes:
        resp = self._client.get_object(Bucket=self._bucket, Key=key)
        body = resp["Body"]
        try:
            return body.read()
        finally:
            body.close()

    def delete(self, key: str) -> None:
        # DeleteObject already succeeds for missing keys
        self._client.delete_object(Bucket=self._bucket, Key=key)

    # ------------------------------------------------------------------
    # Metadata / listing
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if is_not_found(e):
                return False
            raise
        return True

    def state(self, key: str) -> ObjectState:
        resp = self._client.head_object(Bucket=self._bucket, Key=key)
        return ObjectState(
            size=resp.get("ContentLength") or 0,
            last_modified=resp.get("LastModified") or EPOCH,
        )

    def list(self, prefix: str) -> list[ObjectPath]:
        prefix = normalize_prefix(prefix)

        def fetch_page(token: str | None) -> Page:
            kwargs: dict[str, Any] = {"Bucket": self._bucket, "Prefix": prefix, "MaxKeys": self._page_size}
            if token:
                kwargs["ContinuationToken"] = token
            resp = self._client.list_objects_v2(**kwargs)
            return Page(
                keys=[obj["Key"] for obj in resp.get("Contents", [])],
                truncated=bool(resp.get("IsTruncated", False)),
                next_token=resp.get("NextContinuationToken"),
            )

        return collect_pages(fetch_page, prefix)

    def type(self) -> str:
        return vendors.S3

    def close(self) -> None:
        self._client.close()


def ensure_bucket(client, bucket: str, region: str) -> None:
    """Probe *bucket* and create it when the service reports it missing.

    Raises:
        ProviderInitError: If the probe fails for another reason or creation fails.
    """
    try:
        client.head_bucket(Bucket=bucket)
        return
    except ClientError as e:
        if not is_not_found(e):
            raise ProviderInitError(f"cannot access bucket {bucket!r}", e) from e

    logger.info("Bucket %r not found, creating it", bucket)
    kwargs: dict[str, Any] = {"Bucket": bucket}
    # us-east-1 rejects an explicit LocationConstraint
    if region and region != "us-east-1":
        kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}
    try:
        client.create_bucket(**kwargs)
    except ClientError as e:
        raise ProviderInitError(f"cannot create bucket {bucket!r}", e) from e
