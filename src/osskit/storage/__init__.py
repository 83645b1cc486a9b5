# SPDX-License-Identifier: MIT
"""Pluggable object storage backends.

Usage::

    from osskit.config import LocalArgs, StorageArgs
    from osskit.storage import load

    storage = load("local", StorageArgs(local=LocalArgs(path="/tmp/objects")))
    storage.save("reports/q1.pdf", pdf_bytes)
    data = storage.load("reports/q1.pdf")
    entries = storage.list("reports")
"""

from .factory import load, supported_vendors
from .protocol import EPOCH, ObjectPath, ObjectState, ObjectStorage

__all__ = ["EPOCH", "ObjectPath", "ObjectState", "ObjectStorage", "load", "supported_vendors"]
