"""Identity provider capability: who is acting right now."""

from __future__ import annotations

from typing import Optional, Protocol


class IdentityProvider(Protocol):
    def current_identity(self) -> Optional[str]:
        """Return the signed-in user's id, or ``None`` for an anonymous actor."""


class StaticIdentityProvider:
    """Identity fixed at construction, e.g. from ``--user`` or ``STREAMVIBE_USER_ID``."""

    def __init__(self, user_id: Optional[str] = None) -> None:
        self._user_id = user_id or None

    def current_identity(self) -> Optional[str]:
        return self._user_id


__all__ = ["IdentityProvider", "StaticIdentityProvider"]
