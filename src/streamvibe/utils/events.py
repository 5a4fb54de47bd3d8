"""Minimal observer used to broadcast state changes to UI subscribers."""

from __future__ import annotations

from typing import Callable, Generic, List, TypeVar

from rich.console import Console

T = TypeVar("T")

class Subject(Generic[T]):
    """Keeps an ordered list of handlers and fans each notification out to them."""

    def __init__(self, *, console: Console | None = None) -> None:
        self._handlers: List[Callable[[T], None]] = []
        self._console = console or Console()

    def subscribe(self, handler: Callable[[T], None]) -> Callable[[], None]:
        """Register ``handler`` and return a callable that removes it again."""

        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def notify(self, value: T) -> None:
        for handler in list(self._handlers):
            try:
                handler(value)
            except Exception as exc:  # pragma: no cover - subscriber bugs must not break the producer
                self._console.log(f"[yellow]Subscriber {handler!r} failed:[/yellow] {exc}")


__all__ = ["Subject"]
