"""Pooled psycopg2 connections shared by the repository layer."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from psycopg2 import connect
from psycopg2.extensions import connection as PsycopgConnection
from psycopg2.pool import ThreadedConnectionPool

from streamvibe.config.settings import Settings, get_settings


class DatabasePool:
    """Thread-safe pool, since repositories run inside ``asyncio.to_thread`` workers."""

    def __init__(self, dsn: str, *, min_connections: int, max_connections: int) -> None:
        self._pool = ThreadedConnectionPool(min_connections, max_connections, dsn)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabasePool":
        return cls(
            str(settings.database_url),
            min_connections=settings.db_pool_min_connections,
            max_connections=settings.db_pool_max_connections,
        )

    @contextmanager
    def connection(self) -> Iterator[PsycopgConnection]:
        """Yield a connection that commits on success and rolls back on error."""

        conn = self._pool.getconn()
        try:
            yield conn
            conn.commit()
        except Exception:  # pragma: no cover - re-raised after rollback
            conn.rollback()
            raise
        finally:
            self._pool.putconn(conn)

    def close(self) -> None:
        self._pool.closeall()


_pool: Optional[DatabasePool] = None


@contextmanager
def get_connection() -> Iterator[PsycopgConnection]:
    """Provide a pooled connection, creating the process-wide pool on first use."""

    global _pool
    if _pool is None:
        _pool = DatabasePool.from_settings(get_settings())
    with _pool.connection() as conn:
        yield conn


def close_pool() -> None:
    """Release every pooled connection; the next ``get_connection`` reopens the pool."""

    global _pool
    if _pool is not None:
        _pool.close()
        _pool = None


def connection_from_dsn(dsn: str) -> PsycopgConnection:
    """Open a standalone connection outside the pool (used for migrations)."""

    return connect(dsn)


__all__ = ["DatabasePool", "close_pool", "connection_from_dsn", "get_connection"]
