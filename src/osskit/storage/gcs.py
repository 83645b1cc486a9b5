# SPDX-License-Identifier: MIT
"""Google Cloud Storage backend (google-cloud-storage).

Authenticates with a service account key supplied base64-encoded in the
arguments.
"""

from __future__ import annotations

import logging

from google.api_core.exceptions import GoogleAPICallError, NotFound
from google.cloud import storage

from .. import vendors
from ..config import GoogleCloudStorageArgs
from ..errors import ProviderInitError
from .listing import Page, collect_pages, normalize_prefix
from .protocol import EPOCH, ClosingMixin, ObjectPath, ObjectState

logger = logging.getLogger("osskit")


class GoogleCloudStorage(ClosingMixin):
    """Bucket-bound GCS handle.

    Args:
        client: A ``google.cloud.storage.Client``.
        bucket_name: Bucket name.
        page_size: Blobs requested per listing page.
    """

    def __init__(self, client, bucket_name: str, page_size: int = 1000) -> None:
        self._client = client
        self._bucket_name = bucket_name
        self._bucket = client.bucket(bucket_name)
        self._page_size = page_size

    @classmethod
    def from_args(cls, args: GoogleCloudStorageArgs) -> GoogleCloudStorage:
        client = storage.Client.from_service_account_info(args.service_account_info())
        handle = cls(client, args.bucket)
        # Object calls report a missing bucket as a missing object
        try:
            handle._bucket.reload()
        except GoogleAPICallError as e:
            client.close()
            raise ProviderInitError(f"cannot access bucket {args.bucket!r}", e) from e
        return handle

    # ------------------------------------------------------------------
    # Byte-level I/O
    # ------------------------------------------------------------------

    def save(self, key: str, data: bytes) -> None:
        self._bucket.blob(key).upload_from_string(data)

    def load(self, key: str) -> bytes:
        return self._bucket.blob(key).download_as_bytes()

    def delete(self, key: str) -> None:
        try:
            self._bucket.blob(key).delete()
        except NotFound:
            logger.debug("Blob %r already absent", key)

    # ------------------------------------------------------------------
    # Metadata / listing
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        try:
            self._bucket.blob(key).reload()
        except NotFound:
            return False
        return True

    def state(self, key: str) -> ObjectState:
        blob = self._bucket.blob(key)
        blob.reload()
        return ObjectState(size=blob.size or 0, last_modified=blob.updated or EPOCH)

    def list(self, prefix: str) -> list[ObjectPath]:
        prefix = normalize_prefix(prefix)

        def fetch_page(token: str | None) -> Page:
            iterator = self._client.list_blobs(
                self._bucket_name, prefix=prefix, page_token=token, page_size=self._page_size
            )
            page = next(iterator.pages, None)
            names = [blob.name for blob in page] if page is not None else []
            next_token = iterator.next_page_token
            return Page(keys=names, truncated=bool(next_token), next_token=next_token)

        return collect_pages(fetch_page, prefix)

    def type(self) -> str:
        return vendors.GOOGLE_CLOUD_STORAGE

    def close(self) -> None:
        self._client.close()
