"""Base profile gateway contract."""

from abc import ABC, abstractmethod
from typing import Any

from storefront.models import UserProfile


class ProfileGateway(ABC):
    """Per-user profile document store.

    Whole-document ``set`` and shallow top-level ``update`` only: no
    transactions, no compare-and-swap, no retries. Any call may raise
    ``Unavailable``; ``update`` on a missing document raises ``ProfileNotFound``.
    """

    @abstractmethod
    async def get(self, user_id: str) -> UserProfile | None:
        """Return the profile, or None if it does not exist."""

    @abstractmethod
    async def set(self, user_id: str, profile: UserProfile) -> None:
        """Replace (or create) the whole profile document."""

    @abstractmethod
    async def update(self, user_id: str, fields: dict[str, Any]) -> None:
        """Overwrite the given top-level fields of an existing profile."""
