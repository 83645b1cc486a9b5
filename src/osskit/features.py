"""Detection of installed vendor SDKs.

Each backend other than ``local`` needs its vendor SDK, installed through the
matching ``osskit[<extra>]`` extra.
"""

import importlib.util
import logging

from . import vendors

logger = logging.getLogger("osskit")

# vendor -> top-level modules its adapter imports
_SDK_MODULES: dict[str, tuple[str, ...]] = {
    vendors.LOCAL: (),
    vendors.S3: ("boto3", "botocore"),
    vendors.AZURE_BLOB: ("azure.storage.blob",),
    vendors.ALIYUN_OSS: ("oss2",),
    vendors.TENCENT_COS: ("qcloud_cos",),
    vendors.GOOGLE_CLOUD_STORAGE: ("google.cloud.storage",),
    vendors.HUAWEI_OBS: ("obs",),
    vendors.VOLCENGINE_TOS: ("tos",),
}


def _module_available(name: str) -> bool:
    try:
        return importlib.util.find_spec(name) is not None
    except ModuleNotFoundError:
        # Parent package missing, e.g. "azure" for "azure.storage.blob"
        return False


def check_vendor_available(vendor: str) -> bool:
    """Check if the SDK for *vendor* is installed.

    Returns:
        True if every module the adapter imports can be found, False otherwise
        (including unknown vendors).
    """
    modules = _SDK_MODULES.get(vendor)
    if modules is None:
        return False
    missing = [name for name in modules if not _module_available(name)]
    if missing:
        logger.info(f"{vendor} storage unavailable - missing modules: {', '.join(missing)}")
        return False
    return True


def available_vendors() -> dict[str, bool]:
    """Get a dictionary of vendor availability.

    Returns:
        Dict mapping vendor tag to availability status
    """
    return {vendor: check_vendor_available(vendor) for vendor in vendors.ALL}
