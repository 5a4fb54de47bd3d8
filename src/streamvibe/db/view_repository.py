"""Repository for the append-only `video_views` table."""

from __future__ import annotations

from streamvibe.db import ConnectionFactory
from streamvibe.db.repositories import BaseRepository
from streamvibe.models.video import VideoView


class VideoViewRepository(BaseRepository[VideoView]):
    """Inserts view events; rows are never updated."""

    table_name = "video_views"
    model_type = VideoView
    insert_fields = ("video_id", "viewer_id")

    def __init__(self, connection_factory: ConnectionFactory) -> None:
        super().__init__(connection_factory)


__all__ = ["VideoViewRepository"]
