"""Validation helpers for upload metadata, media classes, and object keys."""

from __future__ import annotations

import time
import uuid
from typing import Callable, Literal, Optional

from streamvibe.errors import InvalidAsset, ValidationFailed
from streamvibe.models.media import MediaAsset

KeyStrategy = Literal["unique", "timestamp"]


def normalise_title(title: Optional[str], *, max_length: int) -> str:
    """Trim a title and ensure it is non-empty and within ``max_length``."""

    stripped = (title or "").strip()
    if not stripped:
        raise ValidationFailed("Please enter a title for your video.")
    if len(stripped) > max_length:
        raise ValidationFailed(f"Title must be at most {max_length} characters.")
    return stripped


def normalise_description(description: Optional[str], *, max_length: int) -> Optional[str]:
    """Trim a description, collapsing an empty value to ``None``."""

    stripped = (description or "").strip()
    if len(stripped) > max_length:
        raise ValidationFailed(f"Description must be at most {max_length} characters.")
    return stripped or None


def ensure_media_class(
    asset: Optional[MediaAsset],
    expected: str,
    *,
    max_bytes: Optional[int] = None,
) -> MediaAsset:
    """Return ``asset`` if it is present and declares the ``expected`` media class."""

    if asset is None:
        raise InvalidAsset(f"Please select a {expected} to upload.")
    if asset.media_class != expected:
        raise InvalidAsset(f"Please select a {expected} file.")
    if max_bytes is not None and asset.size > max_bytes:
        raise InvalidAsset(f"The selected {expected} exceeds the {max_bytes} byte limit.")
    return asset


def _unique_token() -> str:
    return uuid.uuid4().hex


def _timestamp_token() -> str:
    return str(time.time_ns() // 1_000_000)


def key_token_factory(strategy: KeyStrategy) -> Callable[[], str]:
    """Return the token generator used for the given object key strategy."""

    if strategy == "timestamp":
        return _timestamp_token
    return _unique_token


def build_object_key(owner_id: str, filename: str, *, token: str) -> str:
    """Compose the storage key ``{owner_id}/{token}-{filename}``."""

    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    return f"{owner_id}/{token}-{name}"


__all__ = [
    "KeyStrategy",
    "build_object_key",
    "ensure_media_class",
    "key_token_factory",
    "normalise_description",
    "normalise_title",
]
