"""Profile Repository - per-user profile documents in a Supabase table.

One row per identity, keyed by ``id``. ``cart``, ``recent_searches`` and
``scan_summary`` are JSON columns written whole. All methods use async/await
with supabase-py v2.
"""

from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase._async.client import AsyncClient

from storefront.config import DEFAULT_PROFILES_TABLE
from storefront.errors import ProfileNotFound, Unavailable
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.models import UserProfile

from .base import ProfileGateway

logger = get_logger(__name__)

# Errors the client raises for backend/network failures
_BACKEND_ERRORS = (APIError, httpx.HTTPError)


def profile_to_row(profile: UserProfile) -> dict[str, Any]:
    """Serialize a profile to a table row (``user_id`` becomes ``id``)."""
    row = profile.model_dump(mode="json")
    row["id"] = row.pop("user_id")
    return row


def row_to_profile(row: dict[str, Any]) -> UserProfile:
    data = dict(row)
    data["user_id"] = data.pop("id")
    return UserProfile(**data)


class SupabaseProfileGateway(ProfileGateway):
    """Profile document operations over a Supabase table."""

    def __init__(self, client: AsyncClient, table: str = DEFAULT_PROFILES_TABLE) -> None:
        self.client = client
        self.table = table

    async def get(self, user_id: str) -> UserProfile | None:
        """Get profile by identity id."""
        try:
            result = await self.client.table(self.table).select("*").eq("id", user_id).execute()
        except _BACKEND_ERRORS as e:
            logger.error("Failed to read profile: %s", type(e).__name__, exc_info=True)
            raise Unavailable() from e
        return row_to_profile(result.data[0]) if result.data else None

    async def set(self, user_id: str, profile: UserProfile) -> None:
        """Upsert the whole profile document."""
        row = profile_to_row(profile)
        row["id"] = user_id
        try:
            await self.client.table(self.table).upsert(row).execute()
        except _BACKEND_ERRORS as e:
            logger.error("Failed to write profile: %s", type(e).__name__, exc_info=True)
            raise Unavailable() from e
        logger.debug("Wrote profile %s", sanitize_id_for_logging(user_id))

    async def update(self, user_id: str, fields: dict[str, Any]) -> None:
        """Overwrite top-level fields of an existing profile."""
        if "user_id" in fields or "id" in fields:
            raise ValueError("profile id cannot be updated")
        if not fields:
            return
        try:
            result = (
                await self.client.table(self.table)
                .update(fields)
                .eq("id", user_id)
                .execute()
            )
        except _BACKEND_ERRORS as e:
            logger.error(
                "Failed to update profile fields %s: %s",
                sorted(fields),
                type(e).__name__,
                exc_info=True,
            )
            raise Unavailable() from e
        if not result.data:
            raise ProfileNotFound(user_id)
