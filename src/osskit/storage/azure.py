# SPDX-License-Identifier: MIT
"""Azure Blob Storage backend (azure-storage-blob).

Bound to one container of the account named by the connection string.
"""

from __future__ import annotations

import logging

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import BlobServiceClient

from .. import vendors
from ..config import AzureBlobArgs
from .listing import Page, collect_pages, normalize_prefix
from .protocol import EPOCH, ClosingMixin, ObjectPath, ObjectState

logger = logging.getLogger("osskit")


def is_blob_not_found(err: ResourceNotFoundError) -> bool:
    """Whether *err* names the blob itself, not its container."""
    return getattr(err, "error_code", None) == "BlobNotFound"


class AzureBlobStorage(ClosingMixin):
    """Container-bound Azure Blob handle.

    Args:
        container: A ``ContainerClient``.
        service: The owning ``BlobServiceClient``, closed with the handle.
        page_size: ``results_per_page`` for listings.
    """

    def __init__(self, container, service=None, page_size: int = 1000) -> None:
        self._container = container
        self._service = service
        self._page_size = page_size

    @classmethod
    def from_args(cls, args: AzureBlobArgs) -> AzureBlobStorage:
        service = BlobServiceClient.from_connection_string(args.connection_string)
        container = service.get_container_client(args.container_name)
        logger.debug("Azure container: %s", args.container_name)
        return cls(container, service)

    # ------------------------------------------------------------------
    # Byte-level I/O
    # ------------------------------------------------------------------

    def save(self, key: str, data: bytes) -> None:
        self._container.upload_blob(name=key, data=data, overwrite=True)

    def load(self, key: str) -> bytes:
        return self._container.download_blob(key).readall()

    def delete(self, key: str) -> None:
        try:
            self._container.delete_blob(key)
        except ResourceNotFoundError as e:
            if not is_blob_not_found(e):
                raise
            logger.debug("Blob %r already absent", key)

    # ------------------------------------------------------------------
    # Metadata / listing
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        try:
            self._container.get_blob_client(key).get_blob_properties()
        except ResourceNotFoundError as e:
            if is_blob_not_found(e):
                return False
            raise
        return True

    def state(self, key: str) -> ObjectState:
        props = self._container.get_blob_client(key).get_blob_properties()
        return ObjectState(size=props.size or 0, last_modified=props.last_modified or EPOCH)

    def list(self, prefix: str) -> list[ObjectPath]:
        prefix = normalize_prefix(prefix)

        def fetch_page(token: str | None) -> Page:
            pager = self._container.list_blobs(
                name_starts_with=prefix, results_per_page=self._page_size
            ).by_page(continuation_token=token)
            names = [blob.name for blob in next(pager, [])]
            next_token = pager.continuation_token
            return Page(keys=names, truncated=bool(next_token), next_token=next_token)

        return collect_pages(fetch_page, prefix)

    def type(self) -> str:
        return vendors.AZURE_BLOB

    def close(self) -> None:
        if self._service is not None:
            self._service.close()
        else:
            self._container.close()
