# SPDX-License-Identifier: MIT
"""Vendor tags identifying each storage backend."""

LOCAL = "local"
S3 = "s3"
AZURE_BLOB = "azure"
ALIYUN_OSS = "aliyun"
TENCENT_COS = "tencent"
GOOGLE_CLOUD_STORAGE = "gcs"
HUAWEI_OBS = "huawei"
VOLCENGINE_TOS = "volcengine"

ALL: tuple[str, ...] = (
    LOCAL,
    S3,
    AZURE_BLOB,
    ALIYUN_OSS,
    TENCENT_COS,
    GOOGLE_CLOUD_STORAGE,
    HUAWEI_OBS,
    VOLCENGINE_TOS,
)
