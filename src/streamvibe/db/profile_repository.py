"""Repository for reading the `profiles` table."""

from __future__ import annotations

from streamvibe.db import ConnectionFactory
from streamvibe.db.repositories import BaseRepository
from streamvibe.models.profile import Profile


class ProfileRepository(BaseRepository[Profile]):
    """Profiles are created by the identity backend; this package only reads them."""

    table_name = "profiles"
    model_type = Profile
    insert_fields = ("user_id", "username", "avatar_url")

    def __init__(self, connection_factory: ConnectionFactory) -> None:
        super().__init__(connection_factory)


__all__ = ["ProfileRepository"]
