"""Pytest configuration and fixtures"""
import asyncio
import os
from typing import Any, Optional
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Set test environment variables
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test_anon_key")

from storefront.auth import IdentityProvider, SessionEventStream  # noqa: E402
from storefront.cart import CartItem, CartStore  # noqa: E402
from storefront.errors import AuthError, ProfileNotFound, Unavailable  # noqa: E402
from storefront.models import Identity, UserProfile  # noqa: E402
from storefront.repositories import ProfileGateway  # noqa: E402


class FakeProfileGateway(ProfileGateway):
    """In-memory profile store.

    Every call yields to the event loop once before touching data, so
    concurrent callers interleave the way they would against a remote store.
    Operation names in ``failing`` raise Unavailable.
    """

    def __init__(self) -> None:
        self.docs: dict[str, UserProfile] = {}
        self.failing: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    async def _enter(self, op: str, user_id: str) -> None:
        self.calls.append((op, user_id))
        await asyncio.sleep(0)
        if op in self.failing:
            raise Unavailable()

    async def get(self, user_id: str) -> Optional[UserProfile]:
        await self._enter("get", user_id)
        doc = self.docs.get(user_id)
        return doc.model_copy(deep=True) if doc else None

    async def set(self, user_id: str, profile: UserProfile) -> None:
        await self._enter("set", user_id)
        self.docs[user_id] = profile.model_copy(update={"user_id": user_id}, deep=True)

    async def update(self, user_id: str, fields: dict[str, Any]) -> None:
        await self._enter("update", user_id)
        doc = self.docs.get(user_id)
        if doc is None:
            raise ProfileNotFound(user_id)
        self.docs[user_id] = UserProfile(**{**doc.model_dump(), **fields})

    def op_count(self, op: str) -> int:
        return sum(1 for name, _ in self.calls if name == op)


class FakeIdentityProvider(IdentityProvider):
    """Identity provider driven by the test: ``emit`` publishes session events."""

    def __init__(self, initial: Optional[Identity] = None, password: str = "secret") -> None:
        self.initial = initial
        self.password = password
        self.accounts: dict[str, Identity] = {}
        self.stream: Optional[SessionEventStream] = None
        self.unsubscribed = False
        self.federated_identity: Optional[Identity] = None

    def _unsubscribe(self) -> None:
        self.unsubscribed = True

    async def session_events(self) -> SessionEventStream:
        self.stream = SessionEventStream(self._unsubscribe)
        self.stream.publish(self.initial)
        return self.stream

    def emit(self, identity: Optional[Identity]) -> None:
        assert self.stream is not None, "session_events() not called"
        self.stream.publish(identity)

    async def sign_in_with_password(self, email: str, password: str) -> None:
        if email not in self.accounts or password != self.password:
            raise AuthError("Invalid login credentials", code="invalid_credentials")
        self.emit(self.accounts[email])

    async def sign_up_with_password(self, email: str, password: str, display_name=None) -> None:
        if email in self.accounts:
            raise AuthError("User already registered", code="user_already_exists")
        identity = Identity(id=f"user-{len(self.accounts) + 1}", email=email, display_name=display_name or "")
        self.accounts[email] = identity
        self.emit(identity)

    async def sign_in_with_federated_provider(self) -> Optional[str]:
        if self.federated_identity is not None:
            self.emit(self.federated_identity)
            return None
        return "https://test.supabase.co/auth/v1/authorize?provider=google"

    async def sign_out(self) -> None:
        self.emit(None)


async def _settle(manager, rounds: int = 20) -> None:
    """Let the session manager drain queued events."""
    for _ in range(rounds):
        await asyncio.sleep(0)
    await manager.wait_ready()
    if manager._handler is not None:
        await asyncio.gather(manager._handler, return_exceptions=True)


@pytest.fixture
def settle():
    return _settle


@pytest.fixture
def gateway():
    return FakeProfileGateway()


@pytest.fixture
def identity():
    return Identity(
        id="user-123",
        display_name="Test User",
        email="test@example.com",
        photo_ref="https://cdn.example.com/avatar.png",
    )


@pytest.fixture
def provider(identity):
    provider = FakeIdentityProvider()
    provider.accounts[identity.email] = identity
    return provider


@pytest_asyncio.fixture
async def signed_in_store(gateway, identity):
    """Cart store already hydrated for ``identity`` with an empty profile."""
    await gateway.set(identity.id, UserProfile.new_for(identity))
    store = CartStore(gateway)
    await store.hydrate(identity.id)
    return store


@pytest.fixture
def sample_item():
    return CartItem(
        product_id="P1",
        variant_key="M",
        name="Linen Shirt",
        unit_price=999,
        quantity=1,
        image_ref="https://cdn.example.com/p1.jpg",
        category="shirts",
    )


@pytest.fixture
def other_item():
    return CartItem(
        product_id="P2",
        variant_key=None,
        name="Canvas Tote",
        unit_price="450.50",
        quantity=2,
        category="bags",
    )


@pytest.fixture
def sample_profile_row():
    """Profile row as stored in the Supabase table"""
    return {
        "id": "user-123",
        "display_name": "Test User",
        "email": "test@example.com",
        "photo_ref": "",
        "cart": [
            {
                "product_id": "P1",
                "variant_key": "M",
                "name": "Linen Shirt",
                "unit_price": "999",
                "quantity": 2,
                "image_ref": "",
                "category": "shirts",
            }
        ],
        "recent_searches": ["linen"],
        "scan_summary": None,
        "created_at": "2025-01-01T00:00:00+00:00",
        "is_privileged": False,
    }


@pytest.fixture
def mock_supabase_client():
    """Mock async Supabase client: query builders chain, ``execute`` is awaited."""
    client = Mock()

    table_mock = Mock()
    table_mock.select.return_value = table_mock
    table_mock.insert.return_value = table_mock
    table_mock.update.return_value = table_mock
    table_mock.upsert.return_value = table_mock
    table_mock.eq.return_value = table_mock
    table_mock.execute = AsyncMock(return_value=Mock(data=[]))

    client.table.return_value = table_mock

    client.auth = Mock()
    client.auth.get_session = AsyncMock(return_value=None)
    client.auth.sign_in_with_password = AsyncMock()
    client.auth.sign_up = AsyncMock()
    client.auth.sign_in_with_oauth = AsyncMock(return_value=Mock(url="https://auth.example.com/oauth"))
    client.auth.sign_out = AsyncMock()

    return client
