# SPDX-License-Identifier: MIT
"""Huawei Cloud OBS storage backend (esdk-obs-python).

The OBS SDK does not raise on HTTP errors; it returns a response whose
``status`` is 300 or above.  Such responses are turned into
:class:`~osskit.errors.BackendError` here, and a 404 on the metadata probe
means the object does not exist.
"""

from __future__ import annotations

import logging

from obs import ObsClient

from .. import vendors
from ..config import HuaweiOBSArgs
from ..errors import BackendError, ProviderInitError
from .listing import Page, collect_pages, normalize_prefix
from .protocol import ClosingMixin, ObjectPath, ObjectState, parse_http_date

logger = logging.getLogger("osskit")


def _check(resp, action: str, key: str | None = None):
    """Return *resp* if it succeeded, otherwise raise :class:`BackendError`."""
    if resp.status < 300:
        return resp
    target = f" {key!r}" if key is not None else ""
    raise BackendError(
        f"{action}{target}: {resp.errorMessage or resp.reason}",
        status=resp.status,
        code=resp.errorCode,
    )


class HuaweiOBSStorage(ClosingMixin):
    """Bucket-bound Huawei OBS handle.

    Args:
        bucket: Bucket name.
        client: An ``obs.ObsClient``.
        page_size: ``max_keys`` for listings.
    """

    def __init__(self, bucket: str, client, page_size: int = 1000) -> None:
        self._bucket = bucket
        self._client = client
        self._page_size = page_size

    @classmethod
    def from_args(cls, args: HuaweiOBSArgs) -> HuaweiOBSStorage:
        client = ObsClient(
            access_key_id=args.access_key,
            secret_access_key=args.secret_key,
            server=args.server,
            path_style=args.path_style,
        )
        try:
            _check(client.headBucket(args.bucket), "head bucket", args.bucket)
        except BackendError as e:
            client.close()
            raise ProviderInitError(f"cannot access bucket {args.bucket!r}", e) from e
        return cls(args.bucket, client)

    # ------------------------------------------------------------------
    # Byte-level I/O
    # ------------------------------------------------------------------

    def save(self, key: str, data: bytes) -> None:
        _check(self._client.putContent(self._bucket, key, content=data), "put object", key)

    def load(self, key: str) -> bytes:
        resp = _check(self._client.getObject(self._bucket, key, loadStreamInMemory=True), "get object", key)
        return resp.body.buffer

    def delete(self, key: str) -> None:
        # OBS answers 204 for missing keys as well
        _check(self._client.deleteObject(self._bucket, key), "delete object", key)

    # ------------------------------------------------------------------
    # Metadata / listing
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        resp = self._client.getObjectMetadata(self._bucket, key)
        if resp.status == 404:
            return False
        _check(resp, "head object", key)
        return True

    def state(self, key: str) -> ObjectState:
        resp = _check(self._client.getObjectMetadata(self._bucket, key), "head object", key)
        return ObjectState(
            size=int(resp.body.contentLength or 0),
            last_modified=parse_http_date(resp.body.lastModified),
        )

    def list(self, prefix: str) -> list[ObjectPath]:
        prefix = normalize_prefix(prefix)

        def fetch_page(marker: str | None) -> Page:
            resp = _check(
                self._client.listObjects(self._bucket, prefix=prefix, marker=marker, max_keys=self._page_size),
                "list objects",
                prefix,
            )
            keys = [obj.key for obj in resp.body.contents or []]
            next_marker = resp.body.next_marker or (keys[-1] if keys else None)
            return Page(keys=keys, truncated=bool(resp.body.is_truncated), next_token=next_marker)

        return collect_pages(fetch_page, prefix)

    def type(self) -> str:
        return vendors.HUAWEI_OBS

    def close(self) -> None:
        self._client.close()
