"""Upload pipeline: validated, sequential asset transfers followed by one record insert."""

from __future__ import annotations

from typing import Callable, Optional

from rich.console import Console

from streamvibe.config.settings import Settings, get_settings
from streamvibe.errors import RecordWriteFailed, TransferFailed, TransferStage, Unauthenticated
from streamvibe.models.media import MediaAsset
from streamvibe.models.video import VideoRecord
from streamvibe.services.assets import AssetStore, AssetTransferError
from streamvibe.services.identity import IdentityProvider
from streamvibe.services.records import VIDEOS_TABLE, RecordStore, RecordStoreError
from streamvibe.utils.events import Subject
from streamvibe.utils.progress import UploadProgress, UploadStage
from streamvibe.utils.validation import (
    build_object_key,
    ensure_media_class,
    key_token_factory,
    normalise_description,
    normalise_title,
)

ProgressHandler = Callable[[UploadProgress], None]

PROGRESS_STARTED = 0
PROGRESS_VIDEO_STARTED = 20
PROGRESS_VIDEO_STORED = 60
PROGRESS_THUMBNAIL_STORED = 80
PROGRESS_COMPLETE = 100


class UploadCoordinator:
    """Orchestrates one video upload from validation to the committed record.

    Stages run strictly in order because each needs the previous one's output (an
    object key or URL). Every failure is terminal for the submission: nothing is
    retried and already-stored assets are not deleted, so a failed thumbnail transfer
    or insert leaves an orphaned video object behind.
    """

    def __init__(
        self,
        *,
        identity: IdentityProvider,
        video_store: AssetStore,
        thumbnail_store: AssetStore,
        record_store: RecordStore,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        key_token: Optional[Callable[[], str]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._identity = identity
        self._video_store = video_store
        self._thumbnail_store = thumbnail_store
        self._record_store = record_store
        self._key_token = key_token or key_token_factory(self._settings.object_key_strategy)
        self._progress = Subject[UploadProgress](console=self._console)
        self._percent = PROGRESS_STARTED

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    @property
    def percent(self) -> int:
        """Last progress value emitted by the current or most recent submission."""

        return self._percent

    def subscribe(self, handler: ProgressHandler) -> Callable[[], None]:
        """Receive every :class:`UploadProgress`; returns an unsubscribe callable."""

        return self._progress.subscribe(handler)

    def select_video(self, asset: Optional[MediaAsset]) -> MediaAsset:
        """Check a chosen video file before submission, raising ``InvalidAsset``."""

        limits = self._settings.upload_limits
        return ensure_media_class(asset, "video", max_bytes=limits.max_bytes_for("video"))

    def select_thumbnail(self, asset: Optional[MediaAsset]) -> MediaAsset:
        """Check a chosen thumbnail as soon as it is picked, raising ``InvalidAsset``."""

        limits = self._settings.upload_limits
        return ensure_media_class(asset, "image", max_bytes=limits.max_bytes_for("image"))

    async def submit(
        self,
        video_asset: Optional[MediaAsset],
        title: Optional[str],
        description: Optional[str] = None,
        is_public: bool = True,
        thumbnail_asset: Optional[MediaAsset] = None,
        *,
        on_progress: Optional[ProgressHandler] = None,
    ) -> VideoRecord:
        """Upload the assets and create the video record.

        Raises
        ------
        Unauthenticated
            No identity is signed in. Nothing is transferred.
        InvalidAsset
            The video (or thumbnail) is missing, has the wrong media class, or is too large.
        ValidationFailed
            The trimmed title is empty or a field exceeds its length limit.
        TransferFailed
            An asset transfer failed; ``stage`` names which one.
        RecordWriteFailed
            The assets were stored but the record insert failed.
        """

        owner_id = self._identity.current_identity()
        if not owner_id:
            raise Unauthenticated()

        video = self.select_video(video_asset)
        limits = self._settings.upload_limits
        clean_title = normalise_title(title, max_length=limits.title_max_length)
        clean_description = normalise_description(description, max_length=limits.description_max_length)
        thumbnail = self.select_thumbnail(thumbnail_asset) if thumbnail_asset is not None else None

        unsubscribe = self.subscribe(on_progress) if on_progress else None
        self._percent = PROGRESS_STARTED
        try:
            self._emit(UploadStage.VALIDATING, PROGRESS_STARTED, "Starting upload")
            return await self._run_stages(
                owner_id=owner_id,
                video=video,
                thumbnail=thumbnail,
                fields={
                    "user_id": owner_id,
                    "title": clean_title,
                    "description": clean_description,
                    "is_public": is_public,
                },
            )
        finally:
            if unsubscribe:
                unsubscribe()

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #
    async def _run_stages(
        self,
        *,
        owner_id: str,
        video: MediaAsset,
        thumbnail: Optional[MediaAsset],
        fields: dict[str, object],
    ) -> VideoRecord:
        self._emit(UploadStage.UPLOADING_VIDEO, PROGRESS_VIDEO_STARTED, f"Uploading {video.filename}")
        video_url = await self._transfer(self._video_store, owner_id, video, stage="video")
        next_stage = UploadStage.UPLOADING_THUMBNAIL if thumbnail is not None else UploadStage.SAVING
        self._emit(next_stage, PROGRESS_VIDEO_STORED, "Video stored")

        thumbnail_url: Optional[str] = None
        if thumbnail is not None:
            thumbnail_url = await self._transfer(self._thumbnail_store, owner_id, thumbnail, stage="thumbnail")
        self._emit(
            UploadStage.SAVING,
            PROGRESS_THUMBNAIL_STORED,
            "Thumbnail stored" if thumbnail is not None else "No thumbnail selected",
        )

        try:
            created = await self._record_store.insert(
                VIDEOS_TABLE,
                {**fields, "video_url": video_url, "thumbnail_url": thumbnail_url},
            )
        except RecordStoreError as exc:
            self._console.log(f"[red]Video record insert failed:[/red] {exc}")
            self._fail("Saving the video record failed")
            raise RecordWriteFailed(str(exc)) from exc

        record = created if isinstance(created, VideoRecord) else VideoRecord.model_validate(created)
        self._emit(UploadStage.COMPLETE, PROGRESS_COMPLETE, "Video uploaded")
        self._console.log(f"Uploaded video {record.id} for {owner_id}")
        return record

    async def _transfer(self, store: AssetStore, owner_id: str, asset: MediaAsset, *, stage: TransferStage) -> str:
        key = build_object_key(owner_id, asset.filename, token=self._key_token())
        try:
            await store.put(key, asset.data, content_type=asset.content_type)
        except AssetTransferError as exc:
            self._console.log(f"[red]{stage.title()} transfer failed:[/red] {exc}")
            self._fail(f"{stage.title()} upload failed")
            raise TransferFailed(stage, str(exc)) from exc
        return store.public_url(key)

    def _emit(self, stage: UploadStage, percent: int, message: str) -> None:
        self._percent = max(self._percent, percent)
        self._progress.notify(UploadProgress(stage=stage, percent=self._percent, message=message))

    def _fail(self, message: str) -> None:
        self._progress.notify(UploadProgress(stage=UploadStage.FAILED, percent=self._percent, message=message))


__all__ = ["ProgressHandler", "UploadCoordinator"]
