"""Apply the SQL files under `db/migrations` in lexical order."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from streamvibe.config.settings import Settings, get_settings
from streamvibe.db.connection import connection_from_dsn

MIGRATIONS_ROOT = Path(__file__).resolve().parent / "migrations"


def load_migration_files(directory: Path = MIGRATIONS_ROOT) -> List[Path]:
    return sorted(directory.glob("*.sql"))


def run_migrations(console: Console | None = None, settings: Optional[Settings] = None) -> List[str]:
    """Execute every migration in a single transaction and return the applied names.

    Each file is idempotent (``IF NOT EXISTS`` / ``OR REPLACE``), so re-running is safe.
    """

    console = console or Console()
    migrations = load_migration_files()

    if not migrations:
        console.print("[yellow]No migrations found.[/yellow]")
        return []

    settings = settings or get_settings()
    connection = connection_from_dsn(str(settings.database_url))

    table = Table(title="Database Migrations")
    table.add_column("Migration", style="cyan")
    table.add_column("Status", style="green")

    applied: List[str] = []
    try:
        with connection.cursor() as db_cursor:
            for migration in migrations:
                db_cursor.execute(migration.read_text(encoding="utf-8"))
                table.add_row(migration.name, "applied")
                applied.append(migration.name)
        connection.commit()
    except Exception as exc:  # pragma: no cover - surface migration errors
        connection.rollback()
        console.print(f"[red]Migration failed:[/red] {exc}")
        raise
    finally:
        connection.close()

    console.print(table)
    return applied


__all__ = ["MIGRATIONS_ROOT", "load_migration_files", "run_migrations"]
