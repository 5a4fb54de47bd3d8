"""Tests for the filesystem-backed asset store."""

from __future__ import annotations

import asyncio

import pytest

from streamvibe.services.assets import AssetTransferError, LocalAssetStore


@pytest.fixture
def store(settings, console) -> LocalAssetStore:
    return LocalAssetStore.for_bucket(settings, "videos", console=console)


def test_put_writes_object_and_resolves_url(store, settings):
    stored = asyncio.run(store.put("u1/abc-clip one.mp4", b"data", content_type="video/mp4"))

    assert stored.size == 4
    assert (settings.storage_root / "videos" / "u1" / "abc-clip one.mp4").read_bytes() == b"data"
    assert store.public_url("u1/abc-clip one.mp4") == "https://cdn.test/storage/videos/u1/abc-clip%20one.mp4"


def test_existing_key_is_not_overwritten(store):
    asyncio.run(store.put("u1/a.mp4", b"first", content_type="video/mp4"))

    with pytest.raises(AssetTransferError):
        asyncio.run(store.put("u1/a.mp4", b"second", content_type="video/mp4"))


@pytest.mark.parametrize("key", ["../escape.mp4", "/abs.mp4", "u1/../../x.mp4", ""])
def test_invalid_keys_rejected(store, key):
    with pytest.raises(AssetTransferError):
        asyncio.run(store.put(key, b"x", content_type="video/mp4"))
