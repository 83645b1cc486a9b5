# SPDX-License-Identifier: MIT
"""Aliyun OSS storage backend (oss2).

An optional ``path`` from the arguments acts as a key root: every key is
stored below it and listings are reported relative to the requested prefix.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import oss2
from oss2.exceptions import NotFound

from .. import vendors
from ..config import AliyunOSSArgs
from .listing import Page, collect_pages, normalize_prefix
from .protocol import EPOCH, ClosingMixin, ObjectPath, ObjectState

logger = logging.getLogger("osskit")


def build_bucket(args: AliyunOSSArgs) -> oss2.Bucket:
    """Create the ``oss2.Bucket`` described by *args*."""
    if args.auth_version == "v4":
        auth = oss2.AuthV4(args.access_key, args.secret_key)
    else:
        auth = oss2.Auth(args.access_key, args.secret_key)
    kwargs: dict[str, Any] = {}
    if args.region:
        kwargs["region"] = args.region
    if args.cloudbox_id:
        kwargs["cloudbox_id"] = args.cloudbox_id
    return oss2.Bucket(auth, args.endpoint, args.bucket, **kwargs)


class AliyunOSSStorage(ClosingMixin):
    """Bucket-bound Aliyun OSS handle.

    Args:
        bucket: An ``oss2.Bucket``.
        root: Key root prepended to every key (``""`` for none).
        page_size: ``max_keys`` for listings.
    """

    def __init__(self, bucket, root: str = "", page_size: int = 1000) -> None:
        self._bucket = bucket
        self._root = root.strip("/")
        self._page_size = page_size

    @classmethod
    def from_args(cls, args: AliyunOSSArgs) -> AliyunOSSStorage:
        return cls(build_bucket(args), args.path)

    def _key(self, key: str) -> str:
        if not self._root:
            return key
        return f"{self._root}/{key.lstrip('/')}"

    # ------------------------------------------------------------------
    # Byte-level I/O
    # ------------------------------------------------------------------

    def save(self, key: str, data: bytes) -> None:
        self._bucket.put_object(self._key(key), data)

    def load(self, key: str) -> bytes:
        return self._bucket.get_object(self._key(key)).read()

    def delete(self, key: str) -> None:
        # OSS answers 204 for missing keys as well
        self._bucket.delete_object(self._key(key))

    # ------------------------------------------------------------------
    # Metadata / listing
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        try:
            self._bucket.head_object(self._key(key))
        except NotFound:
            return False
        return True

    def state(self, key: str) -> ObjectState:
        meta = self._bucket.head_object(self._key(key))
        last_modified = EPOCH
        if meta.last_modified:
            last_modified = datetime.fromtimestamp(meta.last_modified, tz=timezone.utc)
        return ObjectState(size=meta.content_length or 0, last_modified=last_modified)

    def list(self, prefix: str) -> list[ObjectPath]:
        prefix = normalize_prefix(self._key(prefix))

        def fetch_page(token: str | None) -> Page:
            result = self._bucket.list_objects_v2(
                prefix=prefix, continuation_token=token or "", max_keys=self._page_size
            )
            return Page(
                keys=[obj.key for obj in result.object_list],
                truncated=bool(result.is_truncated),
                next_token=result.next_continuation_token,
            )

        return collect_pages(fetch_page, prefix)

    def type(self) -> str:
        return vendors.ALIYUN_OSS
