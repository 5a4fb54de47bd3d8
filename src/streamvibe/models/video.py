"""Pydantic models describing uploaded videos and their view events."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from streamvibe.models.base import StreamVibeBaseModel


class VideoRecord(StreamVibeBaseModel):
    """Domain model representing a row in the ``videos`` table.

    ``video_url`` is fixed at creation; ``is_public`` is the only column changed
    afterwards, and only by the owning identity. ``views_count`` and ``created_at``
    are maintained by the database.
    """

    id: Optional[UUID] = None
    user_id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    video_url: str = Field(min_length=1)
    thumbnail_url: Optional[str] = None
    is_public: bool = True
    views_count: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped

    @field_validator("description")
    @classmethod
    def _blank_description_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @property
    def owner_id(self) -> str:
        return self.user_id


class VideoView(StreamVibeBaseModel):
    """A single view event stored in ``video_views``; never read back by the core."""

    id: Optional[UUID] = None
    video_id: UUID
    viewer_id: Optional[str] = None
    created_at: Optional[datetime] = None


__all__ = ["VideoRecord", "VideoView"]
