"""Progress tracking types shared across the CLI and upload services."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class UploadStage(str, Enum):
    """Lifecycle stages for a single upload submission."""

    VALIDATING = "validating"
    UPLOADING_VIDEO = "uploading_video"
    UPLOADING_THUMBNAIL = "uploading_thumbnail"
    SAVING = "saving"
    COMPLETE = "complete"
    FAILED = "failed"


class UploadProgress(BaseModel):
    """Structured progress payload for UI rendering and logging.

    ``percent`` is a synthetic checkpoint value, not a byte counter. Within one
    submission it never decreases, and it only reaches 100 on full success.
    """

    stage: UploadStage
    percent: int = Field(ge=0, le=100)
    message: str

    model_config = ConfigDict(extra="forbid", frozen=True)


__all__ = ["UploadProgress", "UploadStage"]
