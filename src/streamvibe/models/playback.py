"""Models describing the state of a single playback session."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field, computed_field

from streamvibe.models.base import StreamVibeBaseModel
from streamvibe.utils.formatting import format_time


class PlaybackState(str, Enum):
    """Lifecycle states of the playback controller."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"
    ERRORED = "errored"


class PlaybackSession(StreamVibeBaseModel):
    """Immutable snapshot broadcast to subscribers on every state change."""

    state: PlaybackState = PlaybackState.IDLE
    current_time: float = Field(default=0.0, ge=0)
    duration: float = Field(default=0.0, ge=0)
    is_muted: bool = False
    is_fullscreen: bool = False
    controls_visible: bool = True
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @computed_field
    @property
    def is_playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    @computed_field
    @property
    def position_label(self) -> str:
        """Player time readout, e.g. ``1:05 / 3:20``."""

        return f"{format_time(self.current_time)} / {format_time(self.duration)}"


__all__ = ["PlaybackSession", "PlaybackState"]
