# SPDX-License-Identifier: MIT
"""Prefix normalization and the pagination loop shared by every backend.

Backends differ in how they page listings (continuation tokens, markers,
string truncation flags); each adapter translates one response into a
:class:`Page` and :func:`collect_pages` drives the loop.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from ..errors import BackendError
from .protocol import ObjectPath

logger = logging.getLogger("osskit")

SEPARATOR = "/"


@dataclass(frozen=True)
class Page:
    """One page of a backend listing."""

    keys: list[str] = field(default_factory=list)
    truncated: bool = False
    next_token: str | None = None


def normalize_prefix(prefix: str) -> str:
    """Append the key separator to *prefix* unless it already ends with one."""
    if prefix.endswith(SEPARATOR):
        return prefix
    return prefix + SEPARATOR


def relative_key(key: str, prefix: str) -> str | None:
    """Strip the normalized *prefix* and one leading separator from *key*.

    Returns ``None`` for keys that become empty, i.e. the directory marker
    object equal to the prefix itself.
    """
    if key.startswith(prefix):
        key = key[len(prefix) :]
    if key.startswith(SEPARATOR):
        key = key[1:]
    return key or None


def to_object_paths(keys: Iterable[str], prefix: str) -> list[ObjectPath]:
    """Convert raw backend keys into relative :class:`ObjectPath` entries."""
    results: list[ObjectPath] = []
    for key in keys:
        rel = relative_key(key, prefix)
        if rel is None:
            continue
        results.append(ObjectPath(path=rel, is_dir=False))
    return results


def collect_pages(fetch_page: Callable[[str | None], Page], prefix: str) -> list[ObjectPath]:
    """Follow continuation tokens until the backend reports the final page.

    Args:
        fetch_page: Called with ``None`` for the first page, then with the
            token from the immediately preceding page.
        prefix: The normalized prefix the listing was issued for.

    Raises:
        BackendError: A page claimed truncation but carried no token.
    """
    results: list[ObjectPath] = []
    token: str | None = None
    pages = 0
    while True:
        page = fetch_page(token)
        pages += 1
        results.extend(to_object_paths(page.keys, prefix))
        if not page.truncated:
            break
        if not page.next_token:
            raise BackendError(f"listing of {prefix!r} is truncated but has no continuation token")
        token = page.next_token
    logger.debug("Listed %d objects under %r in %d page(s)", len(results), prefix, pages)
    return results
