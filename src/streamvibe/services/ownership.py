"""Owner-only mutations on a video record: visibility changes and deletion."""

from __future__ import annotations

from typing import Optional

from rich.console import Console

from streamvibe.errors import RecordWriteFailed, Unauthorized
from streamvibe.models.video import VideoRecord
from streamvibe.services.identity import IdentityProvider
from streamvibe.services.records import VIDEOS_TABLE, RecordStore, RecordStoreError


def is_owner(record: VideoRecord, viewer_id: Optional[str]) -> bool:
    """Whether owner-only controls should be offered to ``viewer_id``."""

    return viewer_id is not None and viewer_id == record.owner_id


class OwnershipGuard:
    """Enforces the owner check at the operation boundary.

    Hiding controls from non-owners is only a UI courtesy; every mutation here
    re-checks the current identity against ``record.user_id``.

    Deleting a record leaves its stored video and thumbnail objects in place.
    """

    def __init__(
        self,
        *,
        identity: IdentityProvider,
        record_store: RecordStore,
        console: Optional[Console] = None,
    ) -> None:
        self._identity = identity
        self._record_store = record_store
        self._console = console or Console()

    async def set_visibility(self, record: VideoRecord, next_is_public: bool) -> VideoRecord:
        """Persist ``is_public`` and, once the store confirms, apply it to ``record``."""

        self._require_owner(record)
        if record.is_public == next_is_public:
            return record

        try:
            await self._record_store.update(VIDEOS_TABLE, record.id, {"is_public": next_is_public})
        except RecordStoreError as exc:
            self._console.log(f"[red]Failed to update privacy for {record.id}:[/red] {exc}")
            raise RecordWriteFailed(str(exc)) from exc

        record.is_public = next_is_public
        self._console.log(f"Video {record.id} is now {'public' if next_is_public else 'private'}")
        return record

    async def toggle_visibility(self, record: VideoRecord) -> VideoRecord:
        return await self.set_visibility(record, not record.is_public)

    async def delete(self, record: VideoRecord) -> None:
        """Remove the record permanently. There is no undo."""

        self._require_owner(record)
        try:
            await self._record_store.delete(VIDEOS_TABLE, record.id)
        except RecordStoreError as exc:
            self._console.log(f"[red]Failed to delete video {record.id}:[/red] {exc}")
            raise RecordWriteFailed(str(exc)) from exc
        self._console.log(f"Deleted video {record.id}")

    def _require_owner(self, record: VideoRecord) -> None:
        if not is_owner(record, self._identity.current_identity()):
            raise Unauthorized(f"Video {record.id} is not owned by the current user")


__all__ = ["OwnershipGuard", "is_owner"]
