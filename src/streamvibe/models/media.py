"""In-memory representation of a file selected for upload."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(slots=True, frozen=True)
class MediaAsset:
    """Binary payload plus the metadata the upload pipeline relies on."""

    filename: str
    content_type: str
    data: bytes

    @property
    def media_class(self) -> str:
        """Return the top-level media type, e.g. ``video`` for ``video/mp4``."""

        return self.content_type.split("/", 1)[0].strip().lower()

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path, *, content_type: str | None = None) -> "MediaAsset":
        """Read ``path`` into memory, guessing the content type from its name."""

        guessed, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content_type=content_type or guessed or DEFAULT_CONTENT_TYPE,
            data=path.read_bytes(),
        )


__all__ = ["MediaAsset"]
