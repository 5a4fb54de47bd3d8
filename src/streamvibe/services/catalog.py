"""Read-only video listings: the public feed and per-profile pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from rich.console import Console

from streamvibe.errors import RecordReadFailed
from streamvibe.models.profile import Profile
from streamvibe.models.video import VideoRecord
from streamvibe.services.records import PROFILES_TABLE, VIDEOS_TABLE, RecordStore, RecordStoreError

UNKNOWN_USERNAME = "Unknown"


@dataclass(slots=True)
class VideoListing:
    """A video paired with its uploader's display name."""

    video: VideoRecord
    username: str


class CatalogService:
    """Lists videos newest first, hiding private ones from everyone but their owner."""

    def __init__(self, *, record_store: RecordStore, console: Optional[Console] = None) -> None:
        self._record_store = record_store
        self._console = console or Console()

    async def list_public(self) -> List[VideoListing]:
        return await self._list({"is_public": True})

    async def list_for_profile(self, user_id: str, viewer_id: Optional[str]) -> List[VideoListing]:
        """All of ``user_id``'s videos for the owner; only public ones for anyone else."""

        filters: Dict[str, object] = {"user_id": user_id}
        if viewer_id != user_id:
            filters["is_public"] = True
        return await self._list(filters)

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        try:
            row = await self._record_store.select_one(PROFILES_TABLE, {"user_id": user_id})
        except RecordStoreError as exc:
            self._console.log(f"[red]Error fetching profile {user_id}:[/red] {exc}")
            raise RecordReadFailed(str(exc)) from exc
        if row is None:
            return None
        return row if isinstance(row, Profile) else Profile.model_validate(row)

    async def _list(self, filters: Dict[str, object]) -> List[VideoListing]:
        try:
            rows = await self._record_store.select_many(
                VIDEOS_TABLE, filters, order_by="created_at", descending=True
            )
        except RecordStoreError as exc:
            self._console.log(f"[red]Error fetching videos:[/red] {exc}")
            raise RecordReadFailed(str(exc)) from exc

        videos = [row if isinstance(row, VideoRecord) else VideoRecord.model_validate(row) for row in rows]
        usernames = await self._usernames({video.user_id for video in videos})
        return [VideoListing(video=video, username=usernames.get(video.user_id, UNKNOWN_USERNAME)) for video in videos]

    async def _usernames(self, user_ids: Iterable[str]) -> Dict[str, str]:
        names: Dict[str, str] = {}
        for user_id in sorted(user_ids):
            profile = await self.get_profile(user_id)
            if profile is not None:
                names[user_id] = profile.username
        return names


__all__ = ["CatalogService", "UNKNOWN_USERNAME", "VideoListing"]
