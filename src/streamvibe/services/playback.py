"""Transport control state machine for a single media session."""

from __future__ import annotations

import asyncio
import math
from typing import Callable, Optional, Protocol
from uuid import UUID

from rich.console import Console

from streamvibe.config.settings import Settings, get_settings
from streamvibe.errors import AccessError, PlaybackError
from streamvibe.models.playback import PlaybackSession, PlaybackState
from streamvibe.models.video import VideoRecord
from streamvibe.services.identity import IdentityProvider
from streamvibe.services.views import ViewAccounting
from streamvibe.utils.events import Subject

SessionHandler = Callable[[PlaybackSession], None]

_SEEKABLE_STATES = frozenset(
    {PlaybackState.READY, PlaybackState.PLAYING, PlaybackState.PAUSED, PlaybackState.ENDED}
)
_PLAYABLE_STATES = frozenset({PlaybackState.READY, PlaybackState.PAUSED, PlaybackState.ENDED})


class FullscreenRefused(RuntimeError):
    """Raised by a transport when the presentation environment rejects a fullscreen request."""


class Transport(Protocol):
    """The media element being controlled. Its events are fed back via ``on_*`` methods."""

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def seek(self, seconds: float) -> None: ...

    def set_muted(self, muted: bool) -> None: ...

    def request_fullscreen(self) -> None: ...

    def exit_fullscreen(self) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything with asyncio's ``call_later`` signature, e.g. a running event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class PlaybackController:
    """Owns the playback session for one attachment of a media element.

    ``open`` takes the session from ``idle`` through ``loading`` to ``ready`` once the
    record is fetched and the access check passes; any failure there lands in
    ``errored``. Afterwards the controller mirrors user commands onto the transport and
    tracks transport events. Every change is broadcast as a :class:`PlaybackSession`.
    """

    def __init__(
        self,
        *,
        transport: Transport,
        view_accounting: ViewAccounting,
        identity: IdentityProvider,
        scheduler: Optional[Scheduler] = None,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._transport = transport
        self._view_accounting = view_accounting
        self._identity = identity
        self._scheduler = scheduler
        self._hide_delay = self._settings.controls_hide_delay_seconds
        self._hide_timer: Optional[TimerHandle] = None
        self._changes = Subject[PlaybackSession](console=self._console)
        self._session = PlaybackSession()
        self._record: Optional[VideoRecord] = None

    # ------------------------------------------------------------------ #
    # Observation                                                        #
    # ------------------------------------------------------------------ #
    @property
    def session(self) -> PlaybackSession:
        return self._session

    @property
    def state(self) -> PlaybackState:
        return self._session.state

    @property
    def record(self) -> Optional[VideoRecord]:
        return self._record

    @property
    def is_playing(self) -> bool:
        return self._session.is_playing

    def subscribe(self, handler: SessionHandler) -> Callable[[], None]:
        return self._changes.subscribe(handler)

    # ------------------------------------------------------------------ #
    # Session start                                                      #
    # ------------------------------------------------------------------ #
    async def open(self, video_id: UUID | str) -> VideoRecord:
        """Load ``video_id`` for the current viewer and move to ``ready``.

        Access failures (``NotFound``, ``RecordReadFailed``, ``PrivateVideo``) move the
        session to ``errored`` with that error's code and are re-raised.
        """

        if self.state is not PlaybackState.IDLE:
            raise RuntimeError(f"Playback session already started (state={self.state.value}).")

        self._update(state=PlaybackState.LOADING)
        try:
            record = await self._view_accounting.load_for_viewing(video_id, self._identity.current_identity())
        except AccessError as exc:
            self._update(state=PlaybackState.ERRORED, error_code=exc.code, error_message=exc.user_message)
            raise

        self._record = record
        self._update(state=PlaybackState.READY)
        return record

    # ------------------------------------------------------------------ #
    # Commands                                                           #
    # ------------------------------------------------------------------ #
    def play(self) -> bool:
        """Start playback. Returns ``False`` when already playing or not playable."""

        if self.state not in _PLAYABLE_STATES:
            return False
        if self.state is PlaybackState.ENDED:
            self._transport.seek(0.0)
            self._update(current_time=0.0)
        self._transport.play()
        self._update(state=PlaybackState.PLAYING)
        return True

    def pause(self) -> bool:
        """Pause playback. Returns ``False`` when not currently playing."""

        if self.state is not PlaybackState.PLAYING:
            return False
        self._transport.pause()
        self._cancel_hide_timer()
        self._update(state=PlaybackState.PAUSED, controls_visible=True)
        return True

    def toggle_play(self) -> bool:
        return self.pause() if self.is_playing else self.play()

    def seek(self, target_seconds: float) -> float:
        """Move to ``target_seconds`` clamped to ``[0, duration]``; play state is kept."""

        if self.state not in _SEEKABLE_STATES:
            return self._session.current_time

        position = self._clamp(target_seconds)
        self._transport.seek(position)
        if self.state is PlaybackState.ENDED and position < self._session.duration:
            self._update(current_time=position, state=PlaybackState.PAUSED)
        else:
            self._update(current_time=position)
        return position

    def toggle_mute(self) -> bool:
        muted = not self._session.is_muted
        self._transport.set_muted(muted)
        self._update(is_muted=muted)
        return muted

    def toggle_fullscreen(self) -> None:
        """Ask the environment to enter or leave fullscreen.

        The session's ``is_fullscreen`` only changes when the environment reports it via
        :meth:`on_fullscreen_change`.
        """

        try:
            if self._session.is_fullscreen:
                self._transport.exit_fullscreen()
            else:
                self._transport.request_fullscreen()
        except FullscreenRefused as exc:
            self._console.log(f"[yellow]Fullscreen request refused:[/yellow] {exc}")

    # ------------------------------------------------------------------ #
    # Transport and pointer events                                       #
    # ------------------------------------------------------------------ #
    def on_loaded_metadata(self, duration: float) -> None:
        if math.isfinite(duration) and duration >= 0:
            self._update(duration=float(duration))

    def on_time_update(self, current_time: float) -> None:
        self._update(current_time=self._clamp(current_time))

    def on_playing(self) -> None:
        """Transport started playing on its own (autoplay, media keys)."""

        if self.state in _PLAYABLE_STATES:
            self._update(state=PlaybackState.PLAYING)

    def on_paused(self) -> None:
        if self.state is PlaybackState.PLAYING:
            self._cancel_hide_timer()
            self._update(state=PlaybackState.PAUSED, controls_visible=True)

    def on_ended(self) -> None:
        if self.state is PlaybackState.PLAYING:
            self._cancel_hide_timer()
            self._update(state=PlaybackState.ENDED, controls_visible=True)

    def on_error(self, message: str) -> None:
        """Decode or network failure: terminal for this session, no retry."""

        self._cancel_hide_timer()
        self._console.log(f"[red]Playback error:[/red] {message}")
        error = PlaybackError(message)
        self._update(
            state=PlaybackState.ERRORED,
            controls_visible=True,
            error_code=error.code,
            error_message=error.user_message,
        )

    def on_fullscreen_change(self, active: bool) -> None:
        self._update(is_fullscreen=active)

    def on_pointer_activity(self) -> None:
        """Show controls and restart the inactivity timer (debounce, not throttle).

        Without an injected scheduler this must be called from a running event loop.
        """

        scheduler = self._scheduler
        if scheduler is None:
            try:
                scheduler = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise RuntimeError(
                    "on_pointer_activity needs a running event loop or an injected scheduler"
                ) from exc
        self._cancel_hide_timer()
        self._update(controls_visible=True)
        self._hide_timer = scheduler.call_later(self._hide_delay, self._hide_controls)

    def close(self) -> None:
        """Detach from the media element; pending timers are cancelled."""

        self._cancel_hide_timer()

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #
    def _hide_controls(self) -> None:
        self._hide_timer = None
        if self.is_playing:
            self._update(controls_visible=False)

    def _cancel_hide_timer(self) -> None:
        if self._hide_timer is not None:
            self._hide_timer.cancel()
            self._hide_timer = None

    def _clamp(self, seconds: float) -> float:
        if not math.isfinite(seconds):
            return self._session.duration if seconds > 0 else 0.0
        return min(max(float(seconds), 0.0), self._session.duration)

    def _update(self, **changes: object) -> None:
        updated = self._session.model_copy(update=changes)
        if updated == self._session:
            return
        self._session = updated
        self._changes.notify(updated)


__all__ = ["FullscreenRefused", "PlaybackController", "Scheduler", "SessionHandler", "TimerHandle", "Transport"]
