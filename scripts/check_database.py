"""Connectivity check: confirm DATABASE_URL is reachable and the StreamVibe tables exist."""

from __future__ import annotations

from psycopg2 import connect
from rich.console import Console

from streamvibe.config.settings import get_settings
from streamvibe.services.records import PROFILES_TABLE, VIDEOS_TABLE, VIEWS_TABLE


def main() -> None:
    console = Console()
    settings = get_settings()
    try:
        with connect(str(settings.database_url)) as conn:
            with conn.cursor() as cur:
                for table in (PROFILES_TABLE, VIDEOS_TABLE, VIEWS_TABLE):
                    cur.execute("SELECT to_regclass(%s)", (table,))
                    (found,) = cur.fetchone()
                    status = "[green]present[/green]" if found else "[red]missing[/red]"
                    console.print(f"{table}: {status}")
    except Exception as exc:  # pragma: no cover - diagnostic script
        console.print(f"[red]Connection failed:[/red] {exc}")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
