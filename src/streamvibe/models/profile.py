"""Pydantic model for public user profiles."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from streamvibe.models.base import StreamVibeBaseModel


class Profile(StreamVibeBaseModel):
    """Row in the ``profiles`` table, keyed by the owning identity."""

    id: Optional[UUID] = None
    user_id: str = Field(min_length=1)
    username: str
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None


__all__ = ["Profile"]
