"""Storefront root object.

One instance per UI root. It builds the gateway, cart store and session
manager once and hands the same objects to every view, instead of a
module-level singleton.

    storefront = await create_storefront()
    async with storefront:
        await storefront.session.wait_ready()
        snapshot = await storefront.cart.add(item)
"""
from dataclasses import dataclass, field
from typing import Optional

from supabase._async.client import AsyncClient

from storefront.auth import AuthSessionManager, IdentityProvider, SupabaseIdentityProvider
from storefront.cart import CartStore
from storefront.config import StorefrontSettings, get_settings
from storefront.db import get_supabase
from storefront.domains import ProfileService
from storefront.money import format_money
from storefront.repositories import ProfileGateway, SupabaseProfileGateway
from storefront.retry import backend_retry


@dataclass
class Storefront:
    """Wires the core components together for one UI session."""
    profiles: ProfileGateway
    provider: IdentityProvider
    settings: StorefrontSettings = field(default_factory=StorefrontSettings)
    cart: CartStore = field(init=False)
    session: AuthSessionManager = field(init=False)
    profile: ProfileService = field(init=False)

    def __post_init__(self):
        self.cart = CartStore(self.profiles)
        self.session = AuthSessionManager(self.provider, self.profiles, self.cart)
        self.profile = ProfileService(self.profiles)

    async def start(self) -> None:
        await self.session.start()

    async def stop(self) -> None:
        await self.session.stop()

    async def __aenter__(self) -> "Storefront":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def retry_hydration(self) -> None:
        """Retry affordance for a failed sign-in hydrate, with backoff."""
        await backend_retry(self.session.retry_hydration)

    def display_total(self) -> str:
        return format_money(self.cart.total(), self.settings.currency)


async def create_storefront(
    client: Optional[AsyncClient] = None,
    settings: Optional[StorefrontSettings] = None,
) -> Storefront:
    """Build a Storefront backed by Supabase (profile table + Supabase Auth)."""
    settings = settings or get_settings()
    client = client or await get_supabase()
    return Storefront(
        profiles=SupabaseProfileGateway(client, table=settings.profiles_table),
        provider=SupabaseIdentityProvider(
            client,
            oauth_provider=settings.oauth_provider,
            redirect_url=settings.oauth_redirect_url,
        ),
        settings=settings,
    )
