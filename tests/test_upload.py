"""Tests for the upload coordinator."""

from __future__ import annotations

import asyncio
import re

import pytest
from hypothesis import HealthCheck, given, settings as hypothesis_settings, strategies as st

from conftest import FakeAssetStore, FakeRecordStore
from streamvibe.errors import InvalidAsset, RecordWriteFailed, TransferFailed, Unauthenticated, ValidationFailed
from streamvibe.models.media import MediaAsset
from streamvibe.services.identity import StaticIdentityProvider
from streamvibe.services.records import VIDEOS_TABLE
from streamvibe.services.upload import UploadCoordinator
from streamvibe.utils.progress import UploadProgress, UploadStage


def make_coordinator(settings, console, *, identity=None, video_store=None, thumbnail_store=None, record_store=None):
    return UploadCoordinator(
        identity=identity or StaticIdentityProvider("u1"),
        video_store=video_store or FakeAssetStore("videos"),
        thumbnail_store=thumbnail_store or FakeAssetStore("thumbnails"),
        record_store=record_store or FakeRecordStore(),
        settings=settings,
        console=console,
    )


def test_submit_creates_record_with_defaults(settings, console, video_store, record_store, video_asset):
    coordinator = make_coordinator(settings, console, video_store=video_store, record_store=record_store)

    record = asyncio.run(coordinator.submit(video_asset, "My Clip", ""))

    assert record.id is not None
    assert record.user_id == "u1"
    assert record.title == "My Clip"
    assert record.description is None
    assert record.is_public is True
    assert record.thumbnail_url is None
    assert len(video_store.objects) == 1
    assert record_store.calls == [("insert", VIDEOS_TABLE)]


def test_video_url_matches_public_url_of_written_key(settings, console, video_store, video_asset):
    coordinator = make_coordinator(settings, console, video_store=video_store)

    record = asyncio.run(coordinator.submit(video_asset, "Clip"))

    (key,) = video_store.objects
    assert record.video_url == video_store.public_url(key)
    assert re.fullmatch(r"u1/[0-9a-f]{32}-clip\.mp4", key)


def test_timestamp_key_strategy(settings, console, video_store, video_asset):
    settings.object_key_strategy = "timestamp"
    coordinator = make_coordinator(settings, console, video_store=video_store)

    asyncio.run(coordinator.submit(video_asset, "Clip"))

    (key,) = video_store.objects
    assert re.fullmatch(r"u1/\d{13,}-clip\.mp4", key)


def test_title_and_description_are_trimmed(settings, console, video_asset):
    coordinator = make_coordinator(settings, console)

    record = asyncio.run(coordinator.submit(video_asset, "  Trip  ", "  day one \n", is_public=False))

    assert record.title == "Trip"
    assert record.description == "day one"
    assert record.is_public is False


def test_submit_with_thumbnail_stores_both(settings, console, video_store, thumbnail_store, video_asset, thumbnail_asset):
    coordinator = make_coordinator(settings, console, video_store=video_store, thumbnail_store=thumbnail_store)

    record = asyncio.run(coordinator.submit(video_asset, "Clip", thumbnail_asset=thumbnail_asset))

    (thumb_key,) = thumbnail_store.objects
    assert thumb_key.endswith("-cover.png")
    assert record.thumbnail_url == thumbnail_store.public_url(thumb_key)


@hypothesis_settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(user_id=st.one_of(st.none(), st.just("")))
def test_missing_identity_touches_nothing(settings, console, video_asset, user_id):
    video_store = FakeAssetStore("videos")
    record_store = FakeRecordStore()
    coordinator = make_coordinator(
        settings,
        console,
        identity=StaticIdentityProvider(user_id),
        video_store=video_store,
        record_store=record_store,
    )

    with pytest.raises(Unauthenticated):
        asyncio.run(coordinator.submit(video_asset, "Clip"))

    assert video_store.put_calls == []
    assert record_store.calls == []


def test_identity_is_checked_before_asset(settings, console):
    coordinator = make_coordinator(settings, console, identity=StaticIdentityProvider(None))

    with pytest.raises(Unauthenticated):
        asyncio.run(coordinator.submit(None, ""))


@pytest.mark.parametrize(
    "asset",
    [None, MediaAsset(filename="notes.txt", content_type="text/plain", data=b"hi")],
)
def test_invalid_video_asset(settings, console, asset):
    with pytest.raises(InvalidAsset):
        asyncio.run(make_coordinator(settings, console).submit(asset, "Clip"))


@pytest.mark.parametrize("title", ["", "   ", None, "x" * 101])
def test_invalid_title(settings, console, video_asset, title):
    video_store = FakeAssetStore("videos")
    coordinator = make_coordinator(settings, console, video_store=video_store)

    with pytest.raises(ValidationFailed):
        asyncio.run(coordinator.submit(video_asset, title))

    assert video_store.put_calls == []


def test_description_too_long(settings, console, video_asset):
    with pytest.raises(ValidationFailed):
        asyncio.run(make_coordinator(settings, console).submit(video_asset, "Clip", "d" * 1001))


def test_thumbnail_checked_at_selection_time(settings, console, video_asset):
    coordinator = make_coordinator(settings, console)
    not_an_image = MediaAsset(filename="other.mp4", content_type="video/mp4", data=b"x")

    with pytest.raises(InvalidAsset):
        coordinator.select_thumbnail(not_an_image)


def test_oversized_thumbnail_rejected(settings, console):
    coordinator = make_coordinator(settings, console)
    huge = MediaAsset(filename="big.png", content_type="image/png", data=b"0" * (5 * 1024 * 1024 + 1))

    with pytest.raises(InvalidAsset):
        coordinator.select_thumbnail(huge)


def test_progress_sequence_with_thumbnail(settings, console, video_asset, thumbnail_asset):
    coordinator = make_coordinator(settings, console)
    updates: list[UploadProgress] = []

    asyncio.run(coordinator.submit(video_asset, "Clip", thumbnail_asset=thumbnail_asset, on_progress=updates.append))

    assert [update.percent for update in updates] == [0, 20, 60, 80, 100]
    assert updates[-1].stage is UploadStage.COMPLETE
    assert coordinator.percent == 100


def test_progress_without_thumbnail_still_reaches_checkpoints(settings, console, video_asset):
    coordinator = make_coordinator(settings, console)
    percents: list[int] = []
    coordinator.subscribe(lambda update: percents.append(update.percent))

    asyncio.run(coordinator.submit(video_asset, "Clip"))

    assert percents == [0, 20, 60, 80, 100]


def test_video_transfer_failure(settings, console, video_asset):
    record_store = FakeRecordStore()
    coordinator = make_coordinator(
        settings, console, video_store=FakeAssetStore("videos", fail=True), record_store=record_store
    )
    updates: list[UploadProgress] = []

    with pytest.raises(TransferFailed) as excinfo:
        asyncio.run(coordinator.submit(video_asset, "Clip", on_progress=updates.append))

    assert excinfo.value.stage == "video"
    assert record_store.calls == []
    assert updates[-1].stage is UploadStage.FAILED
    assert max(update.percent for update in updates) == 20


def test_thumbnail_failure_leaves_orphaned_video(settings, console, video_asset, thumbnail_asset):
    video_store = FakeAssetStore("videos")
    record_store = FakeRecordStore()
    coordinator = make_coordinator(
        settings,
        console,
        video_store=video_store,
        thumbnail_store=FakeAssetStore("thumbnails", fail=True),
        record_store=record_store,
    )
    updates: list[UploadProgress] = []

    with pytest.raises(TransferFailed) as excinfo:
        asyncio.run(
            coordinator.submit(video_asset, "Clip", thumbnail_asset=thumbnail_asset, on_progress=updates.append)
        )

    assert excinfo.value.stage == "thumbnail"
    assert record_store.rows(VIDEOS_TABLE) == []
    assert len(video_store.objects) == 1
    assert all(update.percent < 100 for update in updates)


def test_record_insert_failure(settings, console, video_asset):
    record_store = FakeRecordStore()
    record_store.fail("insert", VIDEOS_TABLE)
    video_store = FakeAssetStore("videos")
    coordinator = make_coordinator(settings, console, video_store=video_store, record_store=record_store)

    with pytest.raises(RecordWriteFailed):
        asyncio.run(coordinator.submit(video_asset, "Clip"))

    assert len(video_store.objects) == 1
    assert coordinator.percent == 80


def test_per_call_handler_is_detached_after_submit(settings, console, video_asset):
    coordinator = make_coordinator(settings, console)
    first: list[int] = []

    asyncio.run(coordinator.submit(video_asset, "One", on_progress=lambda u: first.append(u.percent)))
    asyncio.run(coordinator.submit(video_asset, "Two"))

    assert first == [0, 20, 60, 80, 100]
