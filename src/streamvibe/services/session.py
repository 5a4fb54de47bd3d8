"""Session-scoped marker storage used for view de-duplication."""

from __future__ import annotations

from typing import Protocol, Set


class SessionMarkerStore(Protocol):
    """Key set that lives exactly as long as one viewing session."""

    def has(self, key: str) -> bool:
        ...

    def set(self, key: str) -> None:
        ...


class InMemorySessionMarkerStore:
    """Process-local marker store; one instance per viewing session."""

    def __init__(self) -> None:
        self._markers: Set[str] = set()

    def has(self, key: str) -> bool:
        return key in self._markers

    def set(self, key: str) -> None:
        self._markers.add(key)

    def clear(self) -> None:
        """End the session, forgetting every marker."""

        self._markers.clear()

    def __len__(self) -> int:
        return len(self._markers)


__all__ = ["InMemorySessionMarkerStore", "SessionMarkerStore"]
