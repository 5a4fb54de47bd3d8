"""Typed failures surfaced by the upload, playback, and mutation services."""

from __future__ import annotations

from typing import ClassVar, Literal, Optional

TransferStage = Literal["video", "thumbnail"]


class StreamVibeError(RuntimeError):
    """Base exception for every failure reported to StreamVibe callers.

    ``code`` is a stable machine-readable identifier and ``user_message`` the single
    human-readable sentence a UI layer should display for this kind of failure.
    """

    code: ClassVar[str] = "error"
    default_message: ClassVar[str] = "Something went wrong. Please try again."

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(detail or self.default_message)
        self.detail = detail

    @property
    def user_message(self) -> str:
        return self.default_message


class UploadError(StreamVibeError):
    """Raised when an upload submission cannot complete."""


class Unauthenticated(UploadError):
    code = "unauthenticated"
    default_message = "Please sign in to upload videos."


class ValidationFailed(UploadError):
    code = "validation_failed"
    default_message = "Please enter a title for your video."

    @property
    def user_message(self) -> str:
        return self.detail or self.default_message


class InvalidAsset(UploadError):
    code = "invalid_asset"
    default_message = "Invalid file type."

    @property
    def user_message(self) -> str:
        return self.detail or self.default_message


class TransferFailed(UploadError):
    """An asset transfer to the object store failed at ``stage``."""

    code = "transfer_failed"
    default_message = "Failed to upload video. Please try again."

    def __init__(self, stage: TransferStage, detail: Optional[str] = None) -> None:
        super().__init__(detail or f"{stage} transfer failed")
        self.stage = stage


class MutationError(StreamVibeError):
    """Raised when an owner-only change to a video cannot be applied."""


class RecordWriteFailed(UploadError, MutationError):
    """The record store rejected an insert, update, or delete."""

    code = "record_write_failed"
    default_message = "Failed to save the video. Please try again."


class AccessError(StreamVibeError):
    """Raised when a video cannot be opened for viewing."""


class PrivateVideo(AccessError):
    code = "private_video"
    default_message = "This video is private."


class NotFound(AccessError):
    code = "not_found"
    default_message = "Video not found."


class RecordReadFailed(AccessError):
    code = "record_read_failed"
    default_message = "Failed to load video."


class PlaybackError(StreamVibeError):
    """Transport-level failure such as a decode error or network interruption."""

    code = "playback_error"
    default_message = "This video could not be played."


class Unauthorized(MutationError):
    """A mutation was attempted by someone other than the owner."""

    code = "unauthorized"
    default_message = "Only the owner can change this video."


__all__ = [
    "AccessError",
    "InvalidAsset",
    "MutationError",
    "NotFound",
    "PlaybackError",
    "PrivateVideo",
    "RecordReadFailed",
    "RecordWriteFailed",
    "StreamVibeError",
    "TransferFailed",
    "TransferStage",
    "Unauthenticated",
    "Unauthorized",
    "UploadError",
    "ValidationFailed",
]
