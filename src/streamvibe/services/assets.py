"""Object storage capability used for video and thumbnail payloads."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol
from urllib.parse import quote

from rich.console import Console

from streamvibe.config.settings import Settings


class AssetTransferError(RuntimeError):
    """Raised by an asset store when a payload could not be written."""


@dataclass(slots=True, frozen=True)
class StoredAsset:
    """Reference to an object that was written successfully."""

    bucket: str
    key: str
    size: int


class AssetStore(Protocol):
    """A single bucket of opaque, publicly readable objects."""

    bucket: str

    async def put(self, key: str, payload: bytes, *, content_type: str) -> StoredAsset:
        """Store ``payload`` under ``key``; raise :class:`AssetTransferError` on failure."""

    def public_url(self, key: str) -> str:
        """Return the URL from which ``key`` can be fetched."""


class LocalAssetStore:
    """Filesystem-backed bucket served from a public base URL.

    Objects live at ``{root}/{bucket}/{key}``. Existing keys are never overwritten,
    matching the write-once behaviour of hosted object storage.
    """

    def __init__(self, root: Path, bucket: str, public_base_url: str, *, console: Console | None = None) -> None:
        self.bucket = bucket
        self._bucket_root = Path(root) / bucket
        self._public_base_url = public_base_url.rstrip("/")
        self._console = console or Console()

    @classmethod
    def for_bucket(cls, settings: Settings, bucket: str, *, console: Console | None = None) -> "LocalAssetStore":
        return cls(settings.storage_root, bucket, str(settings.storage_public_url), console=console)

    async def put(self, key: str, payload: bytes, *, content_type: str) -> StoredAsset:
        target = self._resolve(key)
        try:
            await asyncio.to_thread(self._write, target, payload)
        except FileExistsError as exc:
            raise AssetTransferError(f"Object '{key}' already exists in bucket '{self.bucket}'.") from exc
        except OSError as exc:
            raise AssetTransferError(f"Failed to write '{key}' to bucket '{self.bucket}': {exc}") from exc
        self._console.log(f"Stored {len(payload)} bytes ({content_type}) at {self.bucket}/{key}")
        return StoredAsset(bucket=self.bucket, key=key, size=len(payload))

    def public_url(self, key: str) -> str:
        return f"{self._public_base_url}/{self.bucket}/{quote(key)}"

    def _resolve(self, key: str) -> Path:
        parts = PurePosixPath(key).parts
        if not parts or key.startswith("/") or any(part in {"..", "."} for part in parts):
            raise AssetTransferError(f"Invalid object key: {key!r}")
        return self._bucket_root.joinpath(*parts)

    @staticmethod
    def _write(target: Path, payload: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("xb") as handle:
            handle.write(payload)


__all__ = ["AssetStore", "AssetTransferError", "LocalAssetStore", "StoredAsset"]
