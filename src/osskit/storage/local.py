# SPDX-License-Identifier: MIT
"""Local filesystem storage backend.

Objects are plain files under a root directory; the key's ``/`` separators
become subdirectories.  Used for local development and tests.
"""

from __future__ import annotations

import logging
import os
import pathlib
import stat
from datetime import datetime, timezone

from .. import vendors
from ..config import LocalArgs
from ..security import check_not_symlink, validate_safe_path
from .listing import normalize_prefix, to_object_paths
from .protocol import ClosingMixin, ObjectPath, ObjectState

logger = logging.getLogger("osskit")


class LocalStorage(ClosingMixin):
    """Stores objects as files below *root*.

    Args:
        root: Directory holding the objects.  Must exist.
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self._root = pathlib.Path(root).resolve()

    @classmethod
    def from_args(cls, args: LocalArgs) -> LocalStorage:
        root = pathlib.Path(args.path)
        root.mkdir(parents=True, exist_ok=True)
        logger.debug("Local storage root: %s", root)
        return cls(root)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _path(self, key: str) -> pathlib.Path:
        rel = key.lstrip("/")
        if not rel:
            raise ValueError(f"Invalid key {key!r}: key cannot be empty")
        check_not_symlink(self._root / rel, "object")
        return validate_safe_path(self._root, rel)

    def _walk(self, base: pathlib.Path) -> list[str]:
        keys: list[str] = []
        for dirpath, dirnames, filenames in os.walk(base):
            dirnames.sort()
            current = pathlib.Path(dirpath)
            for name in sorted(filenames):
                file_path = current / name
                if file_path.is_symlink():
                    logger.debug("Skipping symlink in listing: %s", file_path)
                    continue
                keys.append(file_path.relative_to(self._root).as_posix())
        return keys

    # ------------------------------------------------------------------
    # Byte-level I/O
    # ------------------------------------------------------------------

    def save(self, key: str, data: bytes) -> None:
        file_path = self._path(key)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(data)

    def load(self, key: str) -> bytes:
        return self._path(key).read_bytes()

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    # ------------------------------------------------------------------
    # Metadata / listing
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        try:
            st = self._path(key).stat()
        except (FileNotFoundError, NotADirectoryError):
            return False
        return stat.S_ISREG(st.st_mode)

    def state(self, key: str) -> ObjectState:
        st = self._path(key).stat()
        return ObjectState(
            size=st.st_size,
            last_modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    def list(self, prefix: str) -> list[ObjectPath]:
        prefix = normalize_prefix(prefix).lstrip("/")
        base = validate_safe_path(self._root, prefix)
        if not base.is_dir():
            return []
        return to_object_paths(self._walk(base), prefix)

    def type(self) -> str:
        return vendors.LOCAL
