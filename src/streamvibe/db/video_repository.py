"""Repository for interacting with the `videos` table."""

from __future__ import annotations

from streamvibe.db import ConnectionFactory
from streamvibe.db.repositories import BaseRepository
from streamvibe.models.video import VideoRecord


class VideoRepository(BaseRepository[VideoRecord]):
    """Data access object for uploaded video records.

    ``video_url`` is deliberately absent from ``update_fields``: it cannot change once
    the record exists.
    """

    table_name = "videos"
    model_type = VideoRecord
    insert_fields = (
        "user_id",
        "title",
        "description",
        "video_url",
        "thumbnail_url",
        "is_public",
    )
    update_fields = ("is_public",)

    def __init__(self, connection_factory: ConnectionFactory) -> None:
        super().__init__(connection_factory)


__all__ = ["VideoRepository"]
