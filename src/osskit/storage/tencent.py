# SPDX-License-Identifier: MIT
"""Tencent Cloud COS storage backend (cos-python-sdk-v5).

COS returns metadata as raw response headers and its listing truncation
flag as the strings ``"true"`` / ``"false"``; both are normalized here.
"""

from __future__ import annotations

import logging
from typing import Any

from qcloud_cos import CosConfig, CosS3Client
from qcloud_cos.cos_exception import CosServiceError

from .. import vendors
from ..config import TencentCOSArgs
from .listing import Page, collect_pages, normalize_prefix
from .protocol import ClosingMixin, ObjectPath, ObjectState, parse_http_date

logger = logging.getLogger("osskit")


def _is_true(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


class TencentCOSStorage(ClosingMixin):
    """Bucket-bound Tencent COS handle.

    Args:
        bucket: Bucket name including the APPID suffix.
        client: A ``CosS3Client``.
        page_size: ``MaxKeys`` for listings.
    """

    def __init__(self, bucket: str, client, page_size: int = 1000) -> None:
        self._bucket = bucket
        self._client = client
        self._page_size = page_size

    @classmethod
    def from_args(cls, args: TencentCOSArgs) -> TencentCOSStorage:
        config = CosConfig(
            Region=args.region,
            SecretId=args.secret_id,
            SecretKey=args.secret_key,
            Scheme=args.scheme or "https",
        )
        return cls(args.bucket, CosS3Client(config))

    # ------------------------------------------------------------------
    # Byte-level I/O
    # ------------------------------------------------------------------

    def save(self, key: str, data: bytes) -> None:
        self._client.put_object(Bucket=self._bucket, Body=data, Key=key)

    def load(self, key: str) -> bytes:
        resp = self._client.get_object(Bucket=self._bucket, Key=key)
        return resp["Body"].get_raw_stream().read()

    def delete(self, key: str) -> None:
        # COS answers 204 for missing keys as well
        self._client.delete_object(Bucket=self._bucket, Key=key)

    # ------------------------------------------------------------------
    # Metadata / listing
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
        except CosServiceError as e:
            if e.get_status_code() == 404:
                return False
            raise
        return True

    def state(self, key: str) -> ObjectState:
        headers = self._client.head_object(Bucket=self._bucket, Key=key)
        return ObjectState(
            size=int(headers.get("Content-Length") or 0),
            last_modified=parse_http_date(headers.get("Last-Modified")),
        )

    def list(self, prefix: str) -> list[ObjectPath]:
        prefix = normalize_prefix(prefix)

        def fetch_page(marker: str | None) -> Page:
            resp = self._client.list_objects(
                Bucket=self._bucket, Prefix=prefix, Marker=marker or "", MaxKeys=self._page_size
            )
            keys = [obj["Key"] for obj in resp.get("Contents", [])]
            next_marker = resp.get("NextMarker") or (keys[-1] if keys else None)
            return Page(keys=keys, truncated=_is_true(resp.get("IsTruncated")), next_token=next_marker)

        return collect_pages(fetch_page, prefix)

    def type(self) -> str:
        return vendors.TENCENT_COS
