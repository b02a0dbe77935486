"""Storefront runtime configuration read from the environment."""
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_PROFILES_TABLE = "profiles"
DEFAULT_OAUTH_PROVIDER = "google"
DEFAULT_CURRENCY = "INR"


@dataclass(frozen=True)
class StorefrontSettings:
    """Settings shared by the gateway and the identity provider adapter."""
    profiles_table: str = DEFAULT_PROFILES_TABLE
    oauth_provider: str = DEFAULT_OAUTH_PROVIDER
    oauth_redirect_url: Optional[str] = None
    currency: str = DEFAULT_CURRENCY


def get_settings() -> StorefrontSettings:
    """Build settings from STOREFRONT_* environment variables."""
    return StorefrontSettings(
        profiles_table=os.environ.get("STOREFRONT_PROFILES_TABLE") or DEFAULT_PROFILES_TABLE,
        oauth_provider=os.environ.get("STOREFRONT_OAUTH_PROVIDER") or DEFAULT_OAUTH_PROVIDER,
        oauth_redirect_url=os.environ.get("STOREFRONT_OAUTH_REDIRECT_URL") or None,
        currency=(os.environ.get("STOREFRONT_CURRENCY") or DEFAULT_CURRENCY).upper(),
    )
