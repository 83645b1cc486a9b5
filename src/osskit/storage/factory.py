# SPDX-License-Identifier: MIT
"""Storage backend factory.

Maps a vendor tag to its adapter, validates the matching arguments and
returns a new handle.  Adapter modules are imported lazily so that only the
SDK of the requested vendor has to be installed.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .. import vendors
from ..config import VENDOR_FIELDS, StorageArgs, VendorArgs
from ..errors import ArgumentInvalidError, OSSError, ProviderInitError
from .protocol import ObjectStorage

logger = logging.getLogger("osskit")

# vendor -> (adapter module, adapter class, pip extra)
_ADAPTERS: dict[str, tuple[str, str, str]] = {
    vendors.LOCAL: (".local", "LocalStorage", ""),
    vendors.S3: (".s3", "S3Storage", "s3"),
    vendors.AZURE_BLOB: (".azure", "AzureBlobStorage", "azure"),
    vendors.ALIYUN_OSS: (".aliyun", "AliyunOSSStorage", "aliyun"),
    vendors.TENCENT_COS: (".tencent", "TencentCOSStorage", "tencent"),
    vendors.GOOGLE_CLOUD_STORAGE: (".gcs", "GoogleCloudStorage", "gcs"),
    vendors.HUAWEI_OBS: (".huawei", "HuaweiOBSStorage", "huawei"),
    vendors.VOLCENGINE_TOS: (".volcengine", "VolcengineTOSStorage", "volcengine"),
}


def supported_vendors() -> list[str]:
    """Vendor tags accepted by :func:`load`."""
    return list(_ADAPTERS)


def load(vendor: str, args: StorageArgs | VendorArgs | Mapping[str, Any]) -> ObjectStorage:
    """Create a storage handle for *vendor*.

    Args:
        vendor: One of :func:`supported_vendors`.
        args: A :class:`StorageArgs` holding the vendor's arguments, a single
            vendor arguments model, or a mapping parseable as
            :class:`StorageArgs`.

    Returns:
        A new handle bound to the configured bucket, container or directory.

    Raises:
        ArgumentInvalidError: Unknown vendor, missing or invalid arguments.
        ProviderInitError: The SDK is not installed, or the client or its
            bucket probe failed.
    """
    if vendor not in _ADAPTERS:
        supported = ", ".join(_ADAPTERS)
        raise ArgumentInvalidError(f"unsupported vendor {vendor!r}, expected one of: {supported}")

    variant = _resolve_args(vendor, args)
    variant.validate_args()
    adapter = _import_adapter(vendor)

    try:
        handle = adapter.from_args(variant)
    except OSSError:
        raise
    except Exception as e:
        raise ProviderInitError(f"cannot create {vendor} client", e) from e

    logger.info("Created %s storage handle", vendor)
    return handle


def _resolve_args(vendor: str, args: StorageArgs | VendorArgs | Mapping[str, Any]) -> VendorArgs:
    field = VENDOR_FIELDS[vendor]

    if isinstance(args, VendorArgs):
        if args.vendor != vendor:
            raise ArgumentInvalidError(f"{type(args).__name__} configures {args.vendor!r}, not {vendor!r}")
        return args

    if isinstance(args, Mapping):
        try:
            args = StorageArgs.model_validate(args)
        except ValidationError as e:
            raise ArgumentInvalidError("cannot parse storage arguments", e) from e

    if not isinstance(args, StorageArgs):
        raise ArgumentInvalidError(f"expected StorageArgs, got {type(args).__name__}")

    variant = args.variant(vendor)
    if variant is None:
        raise ArgumentInvalidError(f"can't find {field!r} argument in StorageArgs")
    logger.debug("Resolved %s arguments from StorageArgs.%s", vendor, field)
    return variant


def _import_adapter(vendor: str) -> type:
    module_name, class_name, extra = _ADAPTERS[vendor]
    try:
        module = importlib.import_module(module_name, __package__)
    except ImportError as e:
        raise ProviderInitError(
            f"{vendor} storage backend requires extra dependencies. Install with: pip install 'osskit[{extra}]'",
            e,
        ) from e
    return getattr(module, class_name)
