# SPDX-License-Identifier: MIT
"""Shared pytest fixtures for osskit tests."""

import pathlib

import pytest

from osskit.storage.local import LocalStorage


@pytest.fixture
def tmp_store_path(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create a temporary root directory for the local backend."""
    root = tmp_path / "objects"
    root.mkdir()
    return root


@pytest.fixture
def local_storage(tmp_store_path: pathlib.Path) -> LocalStorage:
    """A local backend rooted at a scratch directory."""
    return LocalStorage(tmp_store_path)


@pytest.fixture
def mock_client(mocker):
    """Stand-in for a vendor SDK client."""
    return mocker.MagicMock()


def paged_listing(keys: list[str], page_size: int) -> list[tuple[list[str], str | None]]:
    """Split *keys* into ``(page_keys, next_token)`` pages.

    Tokens are ``"t<index>"`` strings naming the start of the next page;
    the last page has no token.
    """
    pages = []
    for start in range(0, len(keys), page_size):
        end = start + page_size
        token = f"t{end}" if end < len(keys) else None
        pages.append((keys[start:end], token))
    return pages or [([], None)]


@pytest.fixture
def make_pages():
    """Expose :func:`paged_listing` to tests."""
    return paged_listing
