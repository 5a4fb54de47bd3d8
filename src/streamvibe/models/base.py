"""Shared base model definitions for StreamVibe domain objects."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class StreamVibeBaseModel(BaseModel):
    """Base model configured for StreamVibe-wide defaults."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


__all__ = ["StreamVibeBaseModel"]
