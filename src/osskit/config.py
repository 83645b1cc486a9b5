# SPDX-License-Identifier: MIT
"""Storage arguments for every supported vendor.

Each vendor has its own frozen pydantic model.  :class:`StorageArgs` groups
them with one optional field per vendor; exactly one is expected to be set.
Validation is explicit (:meth:`validate_args`) and never touches the network.

Usage::

    from osskit.config import LocalArgs, StorageArgs

    args = StorageArgs(local=LocalArgs(path="/tmp/objects"))
    args.local.validate_args()
"""

from __future__ import annotations

import base64
import json
import logging
import os
from collections.abc import Mapping
from typing import Any, ClassVar

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from . import vendors
from .errors import ArgumentInvalidError

logger = logging.getLogger("osskit")


class VendorArgs(BaseModel, frozen=True, extra="forbid"):
    """Base for per-vendor argument models.

    Subclasses set ``vendor`` and list their mandatory string fields in
    ``required``.
    """

    vendor: ClassVar[str] = ""
    required: ClassVar[tuple[str, ...]] = ()

    @field_validator("*", mode="before")
    @classmethod
    def _strip_strings(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    def validate_args(self) -> None:
        """Check mandatory fields and enumerations.

        Raises:
            ArgumentInvalidError: Naming the first offending field(s).
        """
        missing = [name for name in self.required if not getattr(self, name)]
        if missing:
            raise ArgumentInvalidError(f"{self.vendor}: {', '.join(missing)} cannot be empty")


def _check_choice(vendor: str, name: str, value: str, choices: tuple[str, ...]) -> None:
    if value not in choices:
        allowed = ", ".join(repr(c) for c in choices)
        raise ArgumentInvalidError(f"{vendor}: {name} {value!r} is not one of {allowed}")


class LocalArgs(VendorArgs, frozen=True):
    vendor: ClassVar[str] = vendors.LOCAL
    required: ClassVar[tuple[str, ...]] = ("path",)

    path: str = ""


class S3Args(VendorArgs, frozen=True):
    """S3 and S3-compatible services (MinIO, Ceph, R2, ...).

    ``signature_version`` accepts ``v4``/``s3v4`` (default), ``v2``/``s3``
    and ``unsigned`` for anonymous access.
    """

    vendor: ClassVar[str] = vendors.S3
    required: ClassVar[tuple[str, ...]] = ("bucket", "region")
    signature_versions: ClassVar[tuple[str, ...]] = ("", "v2", "v4", "s3", "s3v4", "unsigned")

    use_aws: bool = False
    use_path_style: bool = False
    use_iam_role: bool = False
    access_key: str = ""
    secret_key: str = ""
    bucket: str = ""
    region: str = ""
    endpoint: str = ""
    signature_version: str = ""

    @field_validator("signature_version")
    @classmethod
    def _lower_signature_version(cls, v: str) -> str:
        return v.lower()

    @property
    def uses_default_credentials(self) -> bool:
        """AWS with an IAM role or no static keys falls back to the default chain."""
        return self.use_aws and (self.use_iam_role or (not self.access_key and not self.secret_key))

    def validate_args(self) -> None:
        super().validate_args()
        _check_choice(self.vendor, "signature_version", self.signature_version, self.signature_versions)
        if not self.use_aws and not self.endpoint:
            raise ArgumentInvalidError(f"{self.vendor}: endpoint cannot be empty when use_aws is false")
        if self.uses_default_credentials or self.signature_version == "unsigned":
            return
        if not self.access_key or not self.secret_key:
            raise ArgumentInvalidError(f"{self.vendor}: access_key and secret_key cannot be empty")


class AzureBlobArgs(VendorArgs, frozen=True):
    vendor: ClassVar[str] = vendors.AZURE_BLOB
    required: ClassVar[tuple[str, ...]] = ("connection_string", "container_name")

    connection_string: str = ""
    container_name: str = ""


class AliyunOSSArgs(VendorArgs, frozen=True):
    """Aliyun OSS.

    ``path`` is an optional key root prepended to every object key.
    ``auth_version`` is ``v1`` (default) or ``v4``; v4 signing needs ``region``.
    """

    vendor: ClassVar[str] = vendors.ALIYUN_OSS
    required: ClassVar[tuple[str, ...]] = ("endpoint", "access_key", "secret_key", "bucket")
    auth_versions: ClassVar[tuple[str, ...]] = ("", "v1", "v4")

    region: str = ""
    endpoint: str = ""
    access_key: str = ""
    secret_key: str = ""
    auth_version: str = ""
    path: str = ""
    bucket: str = ""
    cloudbox_id: str = ""

    @field_validator("auth_version")
    @classmethod
    def _lower_auth_version(cls, v: str) -> str:
        return v.lower()

    def validate_args(self) -> None:
        super().validate_args()
        _check_choice(self.vendor, "auth_version", self.auth_version, self.auth_versions)
        if self.auth_version == "v4" and not self.region:
            raise ArgumentInvalidError(f"{self.vendor}: region cannot be empty with auth_version 'v4'")


class TencentCOSArgs(VendorArgs, frozen=True):
    vendor: ClassVar[str] = vendors.TENCENT_COS
    required: ClassVar[tuple[str, ...]] = ("region", "secret_id", "secret_key", "bucket")
    schemes: ClassVar[tuple[str, ...]] = ("", "http", "https")

    region: str = ""
    secret_id: str = ""
    secret_key: str = ""
    bucket: str = ""
    scheme: str = ""

    @field_validator("scheme")
    @classmethod
    def _lower_scheme(cls, v: str) -> str:
        return v.lower()

    def validate_args(self) -> None:
        super().validate_args()
        _check_choice(self.vendor, "scheme", self.scheme, self.schemes)


class GoogleCloudStorageArgs(VendorArgs, frozen=True):
    """Google Cloud Storage with a base64-encoded service account JSON key."""

    vendor: ClassVar[str] = vendors.GOOGLE_CLOUD_STORAGE
    required: ClassVar[tuple[str, ...]] = ("bucket", "credentials_b64")

    bucket: str = ""
    credentials_b64: str = ""

    def service_account_info(self) -> dict[str, Any]:
        """Decode ``credentials_b64`` into the service account mapping.

        Raises:
            ArgumentInvalidError: If the value is not base64-encoded JSON.
        """
        try:
            info = json.loads(base64.b64decode(self.credentials_b64, validate=True))
        except ValueError as e:
            raise ArgumentInvalidError(f"{self.vendor}: credentials_b64 is not base64-encoded JSON", e) from e
        if not isinstance(info, dict):
            raise ArgumentInvalidError(f"{self.vendor}: credentials_b64 must decode to a JSON object")
        return info

    def validate_args(self) -> None:
        super().validate_args()
        self.service_account_info()


class HuaweiOBSArgs(VendorArgs, frozen=True):
    vendor: ClassVar[str] = vendors.HUAWEI_OBS
    required: ClassVar[tuple[str, ...]] = ("bucket", "access_key", "secret_key", "server")

    bucket: str = ""
    access_key: str = ""
    secret_key: str = ""
    server: str = ""
    path_style: bool = False


class VolcengineTOSArgs(VendorArgs, frozen=True):
    vendor: ClassVar[str] = vendors.VOLCENGINE_TOS
    required: ClassVar[tuple[str, ...]] = ("endpoint", "region", "access_key", "secret_key", "bucket")

    region: str = ""
    endpoint: str = ""
    access_key: str = ""
    secret_key: str = ""
    bucket: str = ""


# ---------- Environment variable names ----------

# vendor -> (StorageArgs field, args model, {model field: env var})
_ENV_VARS: dict[str, tuple[str, type[VendorArgs], dict[str, str]]] = {
    vendors.LOCAL: ("local", LocalArgs, {"path": "LOCAL_STORAGE_PATH"}),
    vendors.S3: (
        "s3",
        S3Args,
        {
            "use_aws": "AWS_S3_USE_AWS",
            "use_path_style": "AWS_S3_USE_PATH_STYLE",
            "use_iam_role": "AWS_S3_USE_IAM_ROLE",
            "access_key": "AWS_S3_ACCESS_KEY",
            "secret_key": "AWS_S3_SECRET_KEY",
            "bucket": "AWS_S3_BUCKET",
            "region": "AWS_S3_REGION",
            "endpoint": "AWS_S3_ENDPOINT",
            "signature_version": "AWS_S3_SIGNATURE_VERSION",
        },
    ),
    vendors.AZURE_BLOB: (
        "azure_blob",
        AzureBlobArgs,
        {"connection_string": "AZURE_CONNECTION", "container_name": "AZURE_CONTAINER"},
    ),
    vendors.ALIYUN_OSS: (
        "aliyun_oss",
        AliyunOSSArgs,
        {
            "region": "ALIYUN_OSS_REGION",
            "endpoint": "ALIYUN_OSS_ENDPOINT",
            "access_key": "ALIYUN_OSS_ACCESS_KEY",
            "secret_key": "ALIYUN_OSS_SECRET_KEY",
            "auth_version": "ALIYUN_OSS_AUTH_VERSION",
            "path": "ALIYUN_OSS_PATH",
            "bucket": "ALIYUN_OSS_BUCKET",
            "cloudbox_id": "ALIYUN_OSS_CLOUDBOX_ID",
        },
    ),
    vendors.TENCENT_COS: (
        "tencent_cos",
        TencentCOSArgs,
        {
            "region": "TENCENT_COS_REGION",
            "secret_id": "TENCENT_COS_SECRET_ID",
            "secret_key": "TENCENT_COS_SECRET_KEY",
            "bucket": "TENCENT_COS_BUCKET",
            "scheme": "TENCENT_COS_SCHEME",
        },
    ),
    vendors.GOOGLE_CLOUD_STORAGE: (
        "google_cloud_storage",
        GoogleCloudStorageArgs,
        {"bucket": "GCS_BUCKET", "credentials_b64": "GCS_CREDENTIALS"},
    ),
    vendors.HUAWEI_OBS: (
        "huawei_obs",
        HuaweiOBSArgs,
        {
            "bucket": "HUAWEI_OBS_BUCKET",
            "access_key": "HUAWEI_OBS_ACCESS_KEY",
            "secret_key": "HUAWEI_OBS_SECRET_KEY",
            "server": "HUAWEI_OBS_SERVER",
            "path_style": "HUAWEI_OBS_PATH_STYLE",
        },
    ),
    vendors.VOLCENGINE_TOS: (
        "volcengine_tos",
        VolcengineTOSArgs,
        {
            "region": "VOLCENGINE_TOS_REGION",
            "endpoint": "VOLCENGINE_TOS_ENDPOINT",
            "access_key": "VOLCENGINE_TOS_ACCESS_KEY",
            "secret_key": "VOLCENGINE_TOS_SECRET_KEY",
            "bucket": "VOLCENGINE_TOS_BUCKET",
        },
    ),
}

# Older deployments spell the Tencent variables TENCNET_COS_*; read them when the new name is unset
_ENV_FALLBACKS: dict[str, str] = {
    var: var.replace("TENCENT_", "TENCNET_", 1) for var in _ENV_VARS[vendors.TENCENT_COS][2].values()
}


VENDOR_FIELDS: dict[str, str] = {vendor: entry[0] for vendor, entry in _ENV_VARS.items()}
"""Maps each vendor tag to the :class:`StorageArgs` field holding its arguments."""


def _env_value(env: Mapping[str, str], var: str) -> str | None:
    for candidate in (var, _ENV_FALLBACKS.get(var)):
        if candidate and env.get(candidate, "").strip():
            return env[candidate]
    return None


class StorageArgs(BaseModel, frozen=True, extra="forbid"):
    """Arguments for exactly one storage vendor.

    Only the field matching the vendor passed to
    :func:`osskit.storage.load` is read; the others are ignored.
    """

    local: LocalArgs | None = None
    s3: S3Args | None = None
    azure_blob: AzureBlobArgs | None = None
    aliyun_oss: AliyunOSSArgs | None = None
    tencent_cos: TencentCOSArgs | None = None
    google_cloud_storage: GoogleCloudStorageArgs | None = None
    huawei_obs: HuaweiOBSArgs | None = None
    volcengine_tos: VolcengineTOSArgs | None = None

    @classmethod
    def from_variant(cls, args: VendorArgs) -> StorageArgs:
        """Wrap a single vendor model in a :class:`StorageArgs`."""
        return cls(**{VENDOR_FIELDS[args.vendor]: args})

    def variant(self, vendor: str) -> VendorArgs | None:
        """Return the arguments stored for *vendor*, or ``None``."""
        field = VENDOR_FIELDS.get(vendor)
        if field is None:
            return None
        return getattr(self, field)

    @classmethod
    def from_env(cls, vendor: str, environ: Mapping[str, str] | None = None) -> StorageArgs:
        """Build the arguments for *vendor* from environment variables.

        Unset or blank variables keep the model defaults.  The result is not
        validated; :func:`osskit.storage.load` does that.

        Raises:
            ArgumentInvalidError: If *vendor* is unknown or a value cannot be parsed.
        """
        env = os.environ if environ is None else environ
        if vendor not in _ENV_VARS:
            raise ArgumentInvalidError(f"unsupported vendor {vendor!r}")
        field, model, names = _ENV_VARS[vendor]
        values = {}
        for name, var in names.items():
            value = _env_value(env, var)
            if value is not None:
                values[name] = value
        logger.debug("Read %d %s setting(s) from environment", len(values), vendor)
        try:
            return cls(**{field: model(**values)})
        except ValueError as e:
            raise ArgumentInvalidError(f"{vendor}: cannot parse environment settings", e) from e


def load_from_env(dotenv_path: str | os.PathLike[str] | None = None) -> tuple[str, StorageArgs]:
    """Read ``OSS_TYPE`` (default ``"local"``) and that vendor's settings.

    A ``.env`` file is loaded first; variables already set in the process
    environment take precedence.

    Returns:
        ``(vendor, args)`` ready to pass to :func:`osskit.storage.load`.
    """
    load_dotenv(dotenv_path)
    vendor = os.getenv("OSS_TYPE", vendors.LOCAL).strip().lower()
    return vendor, StorageArgs.from_env(vendor)
