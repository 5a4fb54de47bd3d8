"""CLI commands for uploading, watching, listing, and managing videos."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence
from uuid import UUID

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TaskID, TextColumn
from rich.table import Table

from streamvibe.config.settings import Settings, get_settings
from streamvibe.db.connection import close_pool
from streamvibe.db.migrate import run_migrations
from streamvibe.errors import (
    AccessError,
    InvalidAsset,
    NotFound,
    PrivateVideo,
    RecordWriteFailed,
    StreamVibeError,
    TransferFailed,
    Unauthenticated,
    Unauthorized,
    ValidationFailed,
)
from streamvibe.models.media import MediaAsset
from streamvibe.models.video import VideoRecord
from streamvibe.services.assets import LocalAssetStore
from streamvibe.services.catalog import UNKNOWN_USERNAME, CatalogService, VideoListing
from streamvibe.services.identity import StaticIdentityProvider
from streamvibe.services.ownership import OwnershipGuard
from streamvibe.services.records import PostgresRecordStore, RecordStore
from streamvibe.services.session import InMemorySessionMarkerStore
from streamvibe.services.upload import UploadCoordinator
from streamvibe.services.views import ViewAccounting
from streamvibe.utils.formatting import format_views
from streamvibe.utils.progress import UploadProgress, UploadStage


class ExitCode:
    """Mapping of meaningful CLI exit codes."""

    SUCCESS = 0
    INVALID_INPUT = 1
    UNAUTHENTICATED = 2
    FORBIDDEN = 3
    NOT_FOUND = 4
    STORAGE_ERROR = 5


_EXIT_CODES: Sequence[tuple[type[StreamVibeError], int]] = (
    (Unauthenticated, ExitCode.UNAUTHENTICATED),
    (ValidationFailed, ExitCode.INVALID_INPUT),
    (InvalidAsset, ExitCode.INVALID_INPUT),
    (PrivateVideo, ExitCode.FORBIDDEN),
    (Unauthorized, ExitCode.FORBIDDEN),
    (NotFound, ExitCode.NOT_FOUND),
    (TransferFailed, ExitCode.STORAGE_ERROR),
    (RecordWriteFailed, ExitCode.STORAGE_ERROR),
    (AccessError, ExitCode.STORAGE_ERROR),
)


@dataclass(slots=True)
class ServiceBundle:
    """Services wired for one CLI invocation (one viewing session)."""

    identity: StaticIdentityProvider
    record_store: RecordStore
    uploads: UploadCoordinator
    views: ViewAccounting
    ownership: OwnershipGuard
    catalog: CatalogService


ServicesFactory = Callable[[Optional[str], Console], ServiceBundle]


def build_services(settings: Settings, console: Console, user_id: Optional[str]) -> ServiceBundle:
    """Wire the production collaborators: local buckets plus the Postgres record store."""

    identity = StaticIdentityProvider(user_id or settings.user_id)
    record_store = PostgresRecordStore(console=console)
    uploads = UploadCoordinator(
        identity=identity,
        video_store=LocalAssetStore.for_bucket(settings, settings.video_bucket, console=console),
        thumbnail_store=LocalAssetStore.for_bucket(settings, settings.thumbnail_bucket, console=console),
        record_store=record_store,
        settings=settings,
        console=console,
    )
    return ServiceBundle(
        identity=identity,
        record_store=record_store,
        uploads=uploads,
        views=ViewAccounting(
            record_store=record_store,
            session_markers=InMemorySessionMarkerStore(),
            console=console,
        ),
        ownership=OwnershipGuard(identity=identity, record_store=record_store, console=console),
        catalog=CatalogService(record_store=record_store, console=console),
    )


def register(app: typer.Typer, console: Console, services_factory: Optional[ServicesFactory] = None) -> None:
    """Register video commands on ``app``."""

    def get_services(user_id: Optional[str], *, quiet: bool = False) -> ServiceBundle:
        # Service logs would otherwise land on stdout ahead of machine-readable output.
        service_console = Console(quiet=True) if quiet else console
        if services_factory is not None:
            return services_factory(user_id, service_console)
        return build_services(get_settings(), service_console, user_id)

    def fail(exc: StreamVibeError) -> typer.Exit:
        console.print(f"[red]Error:[/red] {exc.user_message}")
        if isinstance(exc, Unauthenticated):
            console.print("Sign in with [bold]--user[/bold] or set STREAMVIBE_USER_ID.")
        return typer.Exit(code=_exit_code_for(exc))

    @app.command("upload")
    def upload(  # pylint: disable=too-many-arguments
        video: Path = typer.Argument(..., exists=True, dir_okay=False, help="Video file to upload"),
        title: str = typer.Option(..., "--title", "-t", help="Video title (1-100 characters)"),
        description: Optional[str] = typer.Option(None, "--description", "-d", help="Optional description"),
        thumbnail: Optional[Path] = typer.Option(
            None, "--thumbnail", exists=True, dir_okay=False, help="Optional thumbnail image"
        ),
        public: bool = typer.Option(True, "--public/--private", help="Who can watch the video"),
        user: Optional[str] = typer.Option(None, "--user", "-u", help="Act as this user id"),
        quiet: bool = typer.Option(False, "--quiet", "-q", help="Print only the created record as JSON"),
    ) -> None:
        services = get_services(user, quiet=quiet)
        if services.identity.current_identity() is None:
            raise fail(Unauthenticated())
        try:
            video_asset = services.uploads.select_video(MediaAsset.from_path(video))
            thumbnail_asset = services.uploads.select_thumbnail(MediaAsset.from_path(thumbnail)) if thumbnail else None
            if quiet:
                record = asyncio.run(
                    services.uploads.submit(video_asset, title, description, public, thumbnail_asset)
                )
            else:
                progress = Progress(
                    TextColumn("{task.description}"),
                    BarColumn(),
                    TextColumn("{task.percentage:>3.0f}%"),
                    console=console,
                    transient=True,
                )
                with progress as running_progress:
                    task_id = running_progress.add_task("Uploading", total=100)
                    record = asyncio.run(
                        services.uploads.submit(
                            video_asset,
                            title,
                            description,
                            public,
                            thumbnail_asset,
                            on_progress=_progress_handler_factory(running_progress, task_id),
                        )
                    )
        except StreamVibeError as exc:
            raise fail(exc) from exc
        finally:
            close_pool()

        if quiet:
            typer.echo(json.dumps(record.model_dump(mode="json"), indent=2))
            return
        console.print(Panel.fit(f"Uploaded [bold]{record.title}[/bold]", border_style="green"))
        console.print(f"Video ID: {record.id}")
        console.print(f"Watch URL: {record.video_url}")

    @app.command("watch")
    def watch(
        video_id: UUID = typer.Argument(..., help="Video id"),
        user: Optional[str] = typer.Option(None, "--user", "-u", help="Watch as this user id"),
        json_output: bool = typer.Option(False, "--json", help="Output the record as JSON"),
    ) -> None:
        services = get_services(user, quiet=json_output)

        async def _load() -> VideoListing:
            record = await services.views.load_for_viewing(video_id, services.identity.current_identity())
            profile = await services.catalog.get_profile(record.user_id)
            return VideoListing(video=record, username=profile.username if profile else UNKNOWN_USERNAME)

        try:
            listing = asyncio.run(_load())
        except StreamVibeError as exc:
            raise fail(exc) from exc
        finally:
            close_pool()

        if json_output:
            payload = {**listing.video.model_dump(mode="json"), "username": listing.username}
            typer.echo(json.dumps(payload, indent=2))
            return
        console.print(_build_record_panel(listing))

    @app.command("list")
    def list_videos(
        profile: Optional[str] = typer.Option(None, "--profile", "-p", help="List this user's videos"),
        user: Optional[str] = typer.Option(None, "--user", "-u", help="View as this user id"),
        json_output: bool = typer.Option(False, "--json", help="Output listings as JSON"),
    ) -> None:
        services = get_services(user, quiet=json_output)
        try:
            if profile:
                listings = asyncio.run(
                    services.catalog.list_for_profile(profile, services.identity.current_identity())
                )
            else:
                listings = asyncio.run(services.catalog.list_public())
        except StreamVibeError as exc:
            raise fail(exc) from exc
        finally:
            close_pool()

        if json_output:
            payload = [{**item.video.model_dump(mode="json"), "username": item.username} for item in listings]
            typer.echo(json.dumps(payload, indent=2))
            return
        _render_listings(console, listings)

    @app.command("set-visibility")
    def set_visibility(
        video_id: UUID = typer.Argument(..., help="Video id"),
        public: bool = typer.Option(..., "--public/--private", help="New visibility"),
        user: Optional[str] = typer.Option(None, "--user", "-u", help="Act as this user id"),
    ) -> None:
        services = get_services(user)

        async def _apply() -> VideoRecord:
            record = await services.views.fetch_record(video_id)
            return await services.ownership.set_visibility(record, public)

        try:
            record = asyncio.run(_apply())
        except StreamVibeError as exc:
            raise fail(exc) from exc
        finally:
            close_pool()
        console.print(f"Video is now [bold]{'public' if record.is_public else 'private'}[/bold].")

    @app.command("delete")
    def delete(
        video_id: UUID = typer.Argument(..., help="Video id"),
        yes: bool = typer.Option(False, "--yes", help="Confirm permanent deletion"),
        user: Optional[str] = typer.Option(None, "--user", "-u", help="Act as this user id"),
    ) -> None:
        if not yes:
            console.print("[yellow]This cannot be undone. Re-run with --yes to delete.[/yellow]")
            raise typer.Exit(code=ExitCode.INVALID_INPUT)

        services = get_services(user)

        async def _apply() -> None:
            record = await services.views.fetch_record(video_id)
            await services.ownership.delete(record)

        try:
            asyncio.run(_apply())
        except StreamVibeError as exc:
            raise fail(exc) from exc
        finally:
            close_pool()
        console.print("Video deleted. Stored files were kept.")

    @app.command("migrate")
    def migrate() -> None:
        """Create or update the database tables."""

        run_migrations(console=console)


def _exit_code_for(exc: StreamVibeError) -> int:
    for error_type, code in _EXIT_CODES:
        if isinstance(exc, error_type):
            return code
    return ExitCode.STORAGE_ERROR


def _progress_handler_factory(progress: Progress, task_id: TaskID) -> Callable[[UploadProgress], None]:
    def handler(update: UploadProgress) -> None:
        description = "Failed" if update.stage is UploadStage.FAILED else update.message
        progress.update(task_id, completed=update.percent, description=description)

    return handler


def _build_record_panel(listing: VideoListing) -> Panel:
    record = listing.video
    lines = [
        f"[bold]{record.title}[/bold]",
        f"By {listing.username}",
        f"{format_views(record.views_count)} views  |  {'Public' if record.is_public else 'Private'}",
        f"Video: {record.video_url}",
    ]
    if record.thumbnail_url:
        lines.append(f"Thumbnail: {record.thumbnail_url}")
    if record.description:
        lines.extend(["", record.description])
    return Panel.fit("\n".join(lines), title=str(record.id), border_style="blue")


def _render_listings(console: Console, listings: Sequence[VideoListing]) -> None:
    if not listings:
        console.print("[yellow]No videos yet.[/yellow]")
        return

    table = Table(title="Videos")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Uploader")
    table.add_column("Views", justify="right")
    table.add_column("Visibility")
    for item in listings:
        table.add_row(
            str(item.video.id),
            item.video.title,
            item.username,
            format_views(item.video.views_count),
            "public" if item.video.is_public else "private",
        )
    console.print(table)


__all__ = ["ExitCode", "ServiceBundle", "build_services", "register"]
