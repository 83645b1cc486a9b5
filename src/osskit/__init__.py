# SPDX-License-Identifier: MIT
"""osskit: one object storage interface over local disk and eight cloud vendors.

Usage::

    from osskit import StorageArgs, S3Args, load

    storage = load("s3", StorageArgs(s3=S3Args(use_aws=True, bucket="media", region="eu-west-1")))
    storage.save("videos/intro.mp4", data)
    if storage.exists("videos/intro.mp4"):
        print(storage.state("videos/intro.mp4").size)
"""

from .config import (
    AliyunOSSArgs,
    AzureBlobArgs,
    GoogleCloudStorageArgs,
    HuaweiOBSArgs,
    LocalArgs,
    S3Args,
    StorageArgs,
    TencentCOSArgs,
    VendorArgs,
    VolcengineTOSArgs,
    load_from_env,
)
from .errors import ArgumentInvalidError, BackendError, OSSError, ProviderInitError
from .storage import EPOCH, ObjectPath, ObjectState, ObjectStorage, load, supported_vendors

__all__ = [
    "EPOCH",
    "AliyunOSSArgs",
    "ArgumentInvalidError",
    "AzureBlobArgs",
    "BackendError",
    "GoogleCloudStorageArgs",
    "HuaweiOBSArgs",
    "LocalArgs",
    "OSSError",
    "ObjectPath",
    "ObjectState",
    "ObjectStorage",
    "ProviderInitError",
    "S3Args",
    "StorageArgs",
    "TencentCOSArgs",
    "VendorArgs",
    "VolcengineTOSArgs",
    "load",
    "load_from_env",
    "supported_vendors",
]
