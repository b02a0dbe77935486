"""Profile Domain Service.

Profile fields the search and scan flows own: recent-search history and
the latest body-scan summary. Writes replace the whole field, the same way
the cart store writes the cart.
"""

from storefront.errors import ProfileNotFound
from storefront.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from storefront.models import ScanSummary, UserProfile
from storefront.repositories import ProfileGateway

logger = get_logger(__name__)


class ProfileService:
    """Profile domain service."""

    def __init__(self, gateway: ProfileGateway) -> None:
        self.gateway = gateway

    async def get_profile(self, user_id: str) -> UserProfile | None:
        return await self.gateway.get(user_id)

    async def recent_searches(self, user_id: str) -> list[str]:
        """Stored search terms, oldest first. Empty when there is no profile."""
        profile = await self.gateway.get(user_id)
        return list(profile.recent_searches) if profile else []

    async def record_search(self, user_id: str, term: str) -> list[str]:
        """Append a search term to the user's history.

        Blank terms are ignored and a term already in the history is not
        added again (it keeps its original position).

        Args:
            user_id: Identity id
            term: Raw search query

        Returns:
            The history after the call

        Raises:
            ProfileNotFound: the user has no profile yet
        """
        term = (term or "").strip()
        profile = await self.gateway.get(user_id)
        if profile is None:
            raise ProfileNotFound(user_id)

        searches = list(profile.recent_searches)
        if not term or term in searches:
            return searches

        searches.append(term)
        await self.gateway.update(user_id, {"recent_searches": searches})
        logger.debug(
            "Recorded search %s for %s",
            sanitize_string_for_logging(term),
            sanitize_id_for_logging(user_id),
        )
        return searches

    async def get_scan_summary(self, user_id: str) -> ScanSummary | None:
        profile = await self.gateway.get(user_id)
        return profile.scan_summary if profile else None

    async def save_scan_summary(self, user_id: str, summary: ScanSummary) -> None:
        """Replace the stored scan summary."""
        await self.gateway.update(user_id, {"scan_summary": summary.model_dump(mode="json")})
        logger.info("Saved scan summary for %s", sanitize_id_for_logging(user_id))
