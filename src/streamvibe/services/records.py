"""Structured storage capability addressed by table name."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Sequence

import psycopg2
from rich.console import Console

from streamvibe.db import ConnectionFactory
from streamvibe.db.connection import get_connection
from streamvibe.db.profile_repository import ProfileRepository
from streamvibe.db.repositories import BaseRepository, RecordNotFoundError, RepositoryError
from streamvibe.db.video_repository import VideoRepository
from streamvibe.db.view_repository import VideoViewRepository
from streamvibe.models.base import StreamVibeBaseModel

VIDEOS_TABLE = "videos"
VIEWS_TABLE = "video_views"
PROFILES_TABLE = "profiles"


class RecordStoreError(RuntimeError):
    """Raised by a record store when a read or write fails."""


class RecordMissingError(RecordStoreError):
    """The row targeted by an update or delete does not exist."""


class RecordStore(Protocol):
    """Async CRUD over named tables with equality-only filters."""

    async def insert(self, table: str, fields: Mapping[str, object]) -> Any:
        """Insert a row and return it as stored, including server-assigned columns."""

    async def update(self, table: str, record_id: object, patch: Mapping[str, object]) -> None:
        """Apply ``patch`` to one row identified by ``record_id``."""

    async def delete(self, table: str, record_id: object) -> None:
        """Remove one row identified by ``record_id``."""

    async def select_one(self, table: str, filters: Mapping[str, object]) -> Optional[Any]:
        """Return the first matching row or ``None``."""

    async def select_many(
        self,
        table: str,
        filters: Mapping[str, object],
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Sequence[Any]:
        """Return every matching row, optionally ordered by one column."""


class PostgresRecordStore:
    """:class:`RecordStore` backed by the psycopg2 repositories.

    Repository calls block, so each one runs on a worker thread via ``asyncio.to_thread``.
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory = get_connection,
        *,
        console: Optional[Console] = None,
    ) -> None:
        self._console = console or Console()
        self._repositories: Dict[str, BaseRepository[Any]] = {
            VIDEOS_TABLE: VideoRepository(connection_factory),
            VIEWS_TABLE: VideoViewRepository(connection_factory),
            PROFILES_TABLE: ProfileRepository(connection_factory),
        }

    async def insert(self, table: str, fields: Mapping[str, object]) -> StreamVibeBaseModel:
        repository = self._repository(table)
        return await self._run(repository.insert, dict(fields))

    async def update(self, table: str, record_id: object, patch: Mapping[str, object]) -> None:
        repository = self._repository(table)
        await self._run(repository.update_by_id, record_id, dict(patch))

    async def delete(self, table: str, record_id: object) -> None:
        repository = self._repository(table)
        await self._run(repository.delete_by_id, record_id)

    async def select_one(self, table: str, filters: Mapping[str, object]) -> Optional[StreamVibeBaseModel]:
        repository = self._repository(table)
        return await self._run(repository.find_one, dict(filters))

    async def select_many(
        self,
        table: str,
        filters: Mapping[str, object],
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Sequence[StreamVibeBaseModel]:
        repository = self._repository(table)
        return await self._run(repository.find_many, dict(filters), order_by=order_by, descending=descending)

    def _repository(self, table: str) -> BaseRepository[Any]:
        try:
            return self._repositories[table]
        except KeyError:
            raise RecordStoreError(f"Unknown table: {table!r}") from None

    async def _run(self, operation: Callable[..., Any], *args: object, **kwargs: object) -> Any:
        try:
            return await asyncio.to_thread(operation, *args, **kwargs)
        except RecordNotFoundError as exc:
            raise RecordMissingError(str(exc)) from exc
        except (RepositoryError, psycopg2.Error) as exc:
            self._console.log(f"[red]Record store failure:[/red] {exc}")
            raise RecordStoreError(str(exc)) from exc


__all__ = [
    "PROFILES_TABLE",
    "PostgresRecordStore",
    "RecordMissingError",
    "RecordStore",
    "RecordStoreError",
    "VIDEOS_TABLE",
    "VIEWS_TABLE",
]
