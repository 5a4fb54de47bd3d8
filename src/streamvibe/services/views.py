"""Read-access policy and once-per-session view accounting."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from rich.console import Console

from streamvibe.errors import NotFound, PrivateVideo, RecordReadFailed
from streamvibe.models.video import VideoRecord
from streamvibe.services.records import VIDEOS_TABLE, VIEWS_TABLE, RecordStore, RecordStoreError
from streamvibe.services.session import SessionMarkerStore

VIEW_MARKER_PREFIX = "viewed_"


def view_marker_key(video_id: object) -> str:
    return f"{VIEW_MARKER_PREFIX}{video_id}"


def can_view(record: VideoRecord, viewer_id: Optional[str]) -> bool:
    """Public videos are open to everyone; private ones only to their owner."""

    return record.is_public or (viewer_id is not None and viewer_id == record.owner_id)


class ViewAccounting:
    """Gates playback on the access rule and emits at most one view per session per video.

    De-duplication is advisory: it depends on the injected session marker store, so a
    new session (or a cleared store) counts the same viewer again.
    """

    def __init__(
        self,
        *,
        record_store: RecordStore,
        session_markers: SessionMarkerStore,
        console: Optional[Console] = None,
    ) -> None:
        self._record_store = record_store
        self._session_markers = session_markers
        self._console = console or Console()

    async def fetch_record(self, video_id: UUID | str) -> VideoRecord:
        """Look up a record without any access check or view accounting.

        Raises ``RecordReadFailed`` if the lookup fails and ``NotFound`` if there is no
        such video.
        """

        try:
            row = await self._record_store.select_one(VIDEOS_TABLE, {"id": video_id})
        except RecordStoreError as exc:
            self._console.log(f"[red]Error fetching video {video_id}:[/red] {exc}")
            raise RecordReadFailed(str(exc)) from exc

        if row is None:
            raise NotFound(f"No video with id {video_id}")

        return row if isinstance(row, VideoRecord) else VideoRecord.model_validate(row)

    async def load_for_viewing(self, video_id: UUID | str, viewer_id: Optional[str]) -> VideoRecord:
        """Fetch a record, enforce access, and record the view.

        Adds ``PrivateVideo`` to the failures of :meth:`fetch_record` when the viewer
        may not watch the video.
        """

        record = await self.fetch_record(video_id)
        await self.authorize_and_maybe_record_view(record, viewer_id)
        return record

    async def authorize_and_maybe_record_view(self, record: VideoRecord, viewer_id: Optional[str]) -> bool:
        """Raise ``PrivateVideo`` if access is denied; otherwise emit a view once per session.

        Returns ``True`` when a view event was written by this call.
        """

        if not can_view(record, viewer_id):
            raise PrivateVideo(f"Video {record.id} is private")

        marker = view_marker_key(record.id)
        if self._session_markers.has(marker):
            return False

        try:
            await self._record_store.insert(VIEWS_TABLE, {"video_id": record.id, "viewer_id": viewer_id})
        except RecordStoreError as exc:
            # Left unset so a later playback in this session can retry the count.
            self._console.log(f"[yellow]View event for {record.id} not recorded:[/yellow] {exc}")
            return False

        self._session_markers.set(marker)
        return True


__all__ = ["VIEW_MARKER_PREFIX", "ViewAccounting", "can_view", "view_marker_key"]
