# SPDX-License-Identifier: MIT
"""Path guards for the local filesystem backend.

Object keys are untrusted input; they must never resolve outside the
configured root directory or through a symbolic link.
"""

from __future__ import annotations

import pathlib


def validate_safe_path(base_path: pathlib.Path, key: str) -> pathlib.Path:
    """Resolve *key* under *base_path*, rejecting traversal outside it.

    Args:
        base_path: Root directory of the store (already resolved).
        key: Relative key, ``/``-separated.

    Returns:
        The resolved absolute path.

    Raises:
        ValueError: If the resolved path escapes *base_path*.
    """
    resolved = (base_path / key).resolve()
    try:
        resolved.relative_to(base_path)
    except ValueError:
        raise ValueError(f"Invalid key {key!r}: path traversal detected") from None
    return resolved


def check_not_symlink(path: pathlib.Path, label: str) -> None:
    """Reject *path* if it is a symbolic link.

    Must be called on the unresolved path, before :func:`validate_safe_path`
    follows the link.

    Raises:
        ValueError: If *path* is a symlink.
    """
    if path.is_symlink():
        raise ValueError(f"{label} cannot be a symbolic link: {path}")
