# SPDX-License-Identifier: MIT
"""Object storage protocol and shared types.

Defines the interface that all storage backends must implement.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Protocol, runtime_checkable

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
"""Timestamp reported when a backend returns no last-modified metadata."""


def parse_http_date(value: str | None) -> datetime:
    """Parse an RFC 1123 ``Last-Modified`` header, falling back to :data:`EPOCH`."""
    if not value:
        return EPOCH
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return EPOCH


@dataclass(frozen=True)
class ObjectPath:
    """A listed key, relative to the prefix it was listed under."""

    path: str
    is_dir: bool = False


@dataclass(frozen=True)
class ObjectState:
    """Size and last-modified time of a stored object, read at query time."""

    size: int = 0
    last_modified: datetime = EPOCH


@runtime_checkable
class ObjectStorage(Protocol):
    """Protocol for a bucket-bound object storage handle.

    Keys are opaque, case-sensitive strings.  Errors raised by the vendor SDK
    propagate unchanged, except that :meth:`exists` reports a missing object
    as ``False``.
    """

    # ------------------------------------------------------------------
    # Byte-level I/O
    # ------------------------------------------------------------------

    def save(self, key: str, data: bytes) -> None:
        """Create or overwrite *key* with *data*."""
        ...

    def load(self, key: str) -> bytes:
        """Return the full content of *key*.

        Raises:
            The backend's native not-found error if *key* does not exist.
        """
        ...

    def delete(self, key: str) -> None:
        """Remove *key*.  Deleting a missing key succeeds."""
        ...

    # ------------------------------------------------------------------
    # Metadata / listing
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        """Check whether *key* exists.

        Returns ``False`` only when the backend reports not-found; any other
        failure (auth, network) is raised.
        """
        ...

    def state(self, key: str) -> ObjectState:
        """Get size and last-modified metadata for *key*.

        Raises:
            The backend's native not-found error if *key* does not exist.
        """
        ...

    def list(self, prefix: str) -> list[ObjectPath]:
        """List every key stored under *prefix*, across all result pages."""
        ...

    # ------------------------------------------------------------------
    # Identity / lifecycle
    # ------------------------------------------------------------------

    def type(self) -> str:
        """Vendor tag of the backend this handle is bound to."""
        ...

    def close(self) -> None:
        """Release the underlying client."""
        ...


class ClosingMixin:
    """Gives storage handles ``with`` support on top of :meth:`close`."""

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
