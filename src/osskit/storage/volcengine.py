# SPDX-License-Identifier: MIT
"""Volcengine TOS storage backend (tos)."""

from __future__ import annotations

import logging

import tos
from tos.exceptions import TosServerError

from .. import vendors
from ..config import VolcengineTOSArgs
from .listing import Page, collect_pages, normalize_prefix
from .protocol import EPOCH, ClosingMixin, ObjectPath, ObjectState

logger = logging.getLogger("osskit")

MAX_KEYS = 1000


class VolcengineTOSStorage(ClosingMixin):
    """Bucket-bound Volcengine TOS handle.

    Args:
        bucket: Bucket name.
        client: A ``tos.TosClientV2``.
        page_size: ``max_keys`` for listings.
    """

    def __init__(self, bucket: str, client, page_size: int = MAX_KEYS) -> None:
        self._bucket = bucket
        self._client = client
        self._page_size = page_size

    @classmethod
    def from_args(cls, args: VolcengineTOSArgs) -> VolcengineTOSStorage:
        client = tos.TosClientV2(args.access_key, args.secret_key, args.endpoint, args.region)
        return cls(args.bucket, client)

    # ------------------------------------------------------------------
    # Byte-level I/O
    # ------------------------------------------------------------------

    def save(self, key: str, data: bytes) -> None:
        self._client.put_object(self._bucket, key, content=data)

    def load(self, key: str) -> bytes:
        return self._client.get_object(self._bucket, key).read()

    def delete(self, key: str) -> None:
        # TOS answers 204 for missing keys as well
        self._client.delete_object(self._bucket, key)

    # ------------------------------------------------------------------
    # Metadata / listing
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        try:
            self._client.head_object(self._bucket, key)
        except TosServerError as e:
            if e.status_code == 404:
                return False
            raise
        return True

    def state(self, key: str) -> ObjectState:
        resp = self._client.head_object(self._bucket, key)
        return ObjectState(size=resp.content_length or 0, last_modified=resp.last_modified or EPOCH)

    def list(self, prefix: str) -> list[ObjectPath]:
        prefix = normalize_prefix(prefix)

        def fetch_page(token: str | None) -> Page:
            resp = self._client.list_objects_type2(
                self._bucket, prefix=prefix, max_keys=self._page_size, continuation_token=token
            )
            return Page(
                keys=[obj.key for obj in resp.contents],
                truncated=bool(resp.is_truncated),
                next_token=resp.next_continuation_token,
            )

        return collect_pages(fetch_page, prefix)

    def type(self) -> str:
        return vendors.VOLCENGINE_TOS

    def close(self) -> None:
        self._client.close()
