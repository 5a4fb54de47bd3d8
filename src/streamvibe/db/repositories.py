"""Table-generic repository used by the Postgres record store."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import ClassVar, Dict, Generic, Iterable, Mapping, Optional, Sequence, Tuple, Type, TypeVar
from uuid import UUID

from psycopg2.extensions import connection as PsycopgConnection
from psycopg2.extras import RealDictCursor

from streamvibe.db import ConnectionFactory
from streamvibe.models.base import StreamVibeBaseModel

ModelT = TypeVar("ModelT", bound=StreamVibeBaseModel)


class RepositoryError(RuntimeError):
    """Base exception raised for repository layer failures."""


class RecordNotFoundError(RepositoryError):
    """Raised when a requested record cannot be located."""


class BaseRepository(Generic[ModelT]):
    """Equality-filtered CRUD over a single table.

    Column names are never interpolated unless they belong to ``model_type``; values
    always travel as bound parameters.
    """

    table_name: ClassVar[str]
    model_type: ClassVar[Type[ModelT]]
    insert_fields: ClassVar[Sequence[str]]
    update_fields: ClassVar[Sequence[str]] = ()

    def __init__(self, connection_factory: ConnectionFactory) -> None:
        self._connection_factory = connection_factory

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def insert(self, fields: Mapping[str, object]) -> ModelT:
        """Insert a row built from ``fields`` and return it as stored."""

        payload = self._restrict(fields, self.insert_fields)
        if not payload:
            raise RepositoryError(f"No insertable columns provided for {self.table_name}.")
        columns, placeholders = self._build_insert_clause(payload)
        query = f"INSERT INTO {self.table_name} ({columns}) VALUES ({placeholders}) RETURNING *"
        row = self._fetch_one(query, payload)
        return self.model_type.model_validate(row)

    def update_by_id(self, record_id: object, patch: Mapping[str, object]) -> ModelT:
        """Apply ``patch`` to the row with the given primary key."""

        payload = self._restrict(patch, self.update_fields)
        if not payload:
            raise RepositoryError("No fields provided for update.")
        set_clause = ", ".join(f"{field} = %({field})s" for field in payload)
        payload["id"] = self._normalise_identifier(record_id)
        query = f"UPDATE {self.table_name} SET {set_clause} WHERE id = %(id)s RETURNING *"
        row = self._fetch_one(query, payload)
        return self.model_type.model_validate(row)

    def find_one(self, filters: Mapping[str, object]) -> Optional[ModelT]:
        """Return the first row matching every equality filter, if any."""

        where_clause, params = self._build_where_clause(filters)
        query = f"SELECT * FROM {self.table_name}{where_clause} LIMIT 1"
        try:
            row = self._fetch_one(query, params)
        except RecordNotFoundError:
            return None
        return self.model_type.model_validate(row)

    def find_many(
        self,
        filters: Optional[Mapping[str, object]] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[ModelT]:
        """Return every row matching the equality filters, optionally ordered."""

        where_clause, params = self._build_where_clause(filters or {})
        query = f"SELECT * FROM {self.table_name}{where_clause}"
        if order_by:
            self._check_columns([order_by])
            query = f"{query} ORDER BY {order_by} {'DESC' if descending else 'ASC'}"
        rows = self._fetch_many(query, params)
        return [self.model_type.model_validate(row) for row in rows]

    def delete_by_id(self, record_id: object) -> None:
        """Delete a row by primary key, raising if nothing was removed."""

        query = f"DELETE FROM {self.table_name} WHERE id = %(id)s"
        deleted = self._execute(query, {"id": self._normalise_identifier(record_id)})
        if deleted == 0:
            raise RecordNotFoundError(f"No {self.table_name} row with id {record_id!r}.")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _restrict(self, values: Mapping[str, object], allowed: Iterable[str]) -> Dict[str, object]:
        allowed_set = set(allowed)
        unknown = [field for field in values if field not in allowed_set]
        if unknown:
            raise RepositoryError(f"Columns not writable on {self.table_name}: {', '.join(sorted(unknown))}")
        return {field: self._normalise_identifier(value) for field, value in values.items()}

    def _check_columns(self, columns: Iterable[str]) -> None:
        known = self.model_type.model_fields
        unknown = [column for column in columns if column not in known]
        if unknown:
            raise RepositoryError(f"Unknown columns for {self.table_name}: {', '.join(sorted(unknown))}")

    def _build_where_clause(self, filters: Mapping[str, object]) -> Tuple[str, Dict[str, object]]:
        if not filters:
            return "", {}
        self._check_columns(filters.keys())
        conditions = []
        params: Dict[str, object] = {}
        for column, value in filters.items():
            if value is None:
                conditions.append(f"{column} IS NULL")
                continue
            conditions.append(f"{column} = %(f_{column})s")
            params[f"f_{column}"] = self._normalise_identifier(value)
        return " WHERE " + " AND ".join(conditions), params

    def _build_insert_clause(self, payload: Mapping[str, object]) -> Tuple[str, str]:
        columns = ", ".join(payload.keys())
        placeholders = ", ".join(f"%({field})s" for field in payload.keys())
        return columns, placeholders

    def _fetch_one(self, query: str, params: Mapping[str, object]) -> Mapping[str, object]:
        with self._connection() as connection:
            with connection.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone()
                if row is None:
                    raise RecordNotFoundError(f"No records returned for query: {query!r}")
                return dict(row)

    def _fetch_many(self, query: str, params: Mapping[str, object]) -> list[Mapping[str, object]]:
        with self._connection() as connection:
            with connection.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(query, params)
                return [dict(row) for row in cursor.fetchall()]

    def _execute(self, query: str, params: Mapping[str, object]) -> int:
        with self._connection() as connection:
            with connection.cursor() as cursor:
                cursor.execute(query, params)
                return cursor.rowcount

    def _connection(self) -> AbstractContextManager[PsycopgConnection]:
        return self._connection_factory()

    def _normalise_identifier(self, value: object) -> object:
        if isinstance(value, UUID):
            return str(value)
        return value


__all__ = [
    "BaseRepository",
    "RecordNotFoundError",
    "RepositoryError",
]
