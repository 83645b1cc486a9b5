# SPDX-License-Identifier: MIT
"""Round-trip every backend through the unified contract.

The local backend always runs against a temporary directory.  Cloud backends
read their settings from the environment (see ``StorageArgs.from_env``) and
are skipped when the SDK is missing or the settings are incomplete.
"""

import uuid

import pytest

from osskit import features, vendors
from osskit.config import LocalArgs, StorageArgs
from osskit.errors import ArgumentInvalidError
from osskit.storage import ObjectPath, ObjectStorage, load

pytestmark = pytest.mark.integration

CLOUD_VENDORS = [v for v in vendors.ALL if v != vendors.LOCAL]


def _cloud_storage(vendor: str) -> ObjectStorage:
    if not features.check_vendor_available(vendor):
        pytest.skip(f"{vendor} SDK not installed")
    args = StorageArgs.from_env(vendor)
    try:
        args.variant(vendor).validate_args()
    except ArgumentInvalidError as e:
        pytest.skip(f"{vendor} not configured: {e}")
    return load(vendor, args)


@pytest.fixture(params=[vendors.LOCAL, *CLOUD_VENDORS])
def storage(request, tmp_path):
    if request.param == vendors.LOCAL:
        handle = load(vendors.LOCAL, StorageArgs(local=LocalArgs(path=str(tmp_path / "oss"))))
    else:
        handle = _cloud_storage(request.param)
    with handle:
        yield handle


@pytest.fixture
def prefix():
    """Unique prefix so concurrent runs against one bucket do not collide."""
    return f"osskit-test/{uuid.uuid4().hex}"


def test_round_trip(storage, prefix):
    key = f"{prefix}/a.txt"
    payload = b"hello world"

    assert storage.exists(key) is False
    storage.save(key, payload)
    try:
        assert storage.exists(key) is True
        assert storage.load(key) == payload
        state = storage.state(key)
        assert state.size == len(payload)
        assert state.last_modified.year >= 2020
        assert storage.list(prefix) == [ObjectPath("a.txt")]
    finally:
        storage.delete(key)

    assert storage.exists(key) is False
    storage.delete(key)


def test_large_object(storage, prefix):
    key = f"{prefix}/big.bin"
    payload = bytes(range(256)) * 4096

    storage.save(key, payload)
    try:
        assert storage.load(key) == payload
        assert storage.state(key).size == 1024 * 1024
    finally:
        storage.delete(key)


def test_list_nested_and_paginated(storage, prefix):
    keys = [f"{prefix}/dir/{i:04d}" for i in range(1500)] + [f"{prefix}/top"]
    for key in keys:
        storage.save(key, b"x")
    try:
        listed = {entry.path for entry in storage.list(prefix + "/")}
        assert listed == {key[len(prefix) + 1 :] for key in keys}
        assert len(storage.list(f"{prefix}/dir")) == 1500
    finally:
        for key in keys:
            storage.delete(key)


def test_type_matches_vendor(storage, request):
    assert storage.type() == request.node.callspec.params["storage"]
