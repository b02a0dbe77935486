"""Identity provider adapter.

Wraps Supabase Auth behind a small contract: password sign-in/up, federated
(OAuth) sign-in, sign-out, and a cancellable stream of session events.
"""
import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

from supabase import AuthError as SupabaseAuthError
from supabase._async.client import AsyncClient

from storefront.config import DEFAULT_OAUTH_PROVIDER
from storefront.errors import AuthError
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.models import Identity

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionEvent:
    """Session changed: ``identity`` is the signed-in user, or None when signed out."""
    identity: Optional[Identity]

    @property
    def signed_in(self) -> bool:
        return self.identity is not None


_CLOSED = object()
_UNSET = object()


class SessionEventStream:
    """Async iterator of session events backed by an asyncio.Queue.

    ``close()`` releases the provider subscription and ends iteration.
    """

    def __init__(self, unsubscribe: Optional[Callable[[], None]] = None) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._unsubscribe = unsubscribe
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def set_unsubscribe(self, unsubscribe: Callable[[], None]) -> None:
        self._unsubscribe = unsubscribe

    def publish(self, identity: Optional[Identity]) -> None:
        """Queue a session event. Ignored once the stream is closed."""
        if self._closed:
            return
        self._queue.put_nowait(SessionEvent(identity))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self):
        return self

    async def __anext__(self) -> SessionEvent:
        event = await self._queue.get()
        if event is _CLOSED:
            raise StopAsyncIteration
        return event


class IdentityProvider(ABC):
    """Contract the session manager consumes."""

    @abstractmethod
    async def session_events(self) -> SessionEventStream:
        """Open a stream that starts with the current session, then every change."""

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> None:
        ...

    @abstractmethod
    async def sign_up_with_password(
        self, email: str, password: str, display_name: Optional[str] = None
    ) -> None:
        ...

    @abstractmethod
    async def sign_in_with_federated_provider(self) -> Optional[str]:
        """Start federated sign-in. Returns a redirect URL when the flow needs one."""

    @abstractmethod
    async def sign_out(self) -> None:
        ...


def identity_from_user(user: Any) -> Optional[Identity]:
    """Build an Identity from a Supabase ``User`` (None passes through)."""
    if user is None:
        return None
    metadata = getattr(user, "user_metadata", None) or {}
    return Identity(
        id=str(user.id),
        display_name=(
            metadata.get("display_name")
            or metadata.get("full_name")
            or metadata.get("name")
            or ""
        ),
        email=getattr(user, "email", None) or "",
        photo_ref=metadata.get("avatar_url") or metadata.get("picture") or "",
    )


class SupabaseIdentityProvider(IdentityProvider):
    """Supabase Auth implementation."""

    def __init__(
        self,
        client: AsyncClient,
        oauth_provider: str = DEFAULT_OAUTH_PROVIDER,
        redirect_url: Optional[str] = None,
    ) -> None:
        self.client = client
        self.oauth_provider = oauth_provider
        self.redirect_url = redirect_url

    async def session_events(self) -> SessionEventStream:
        stream = SessionEventStream()
        last_user_id: Any = _UNSET

        def forward(identity: Optional[Identity]) -> None:
            nonlocal last_user_id
            # Token refreshes re-announce the same user; only forward identity changes
            user_id = identity.id if identity else None
            if user_id == last_user_id:
                return
            last_user_id = user_id
            logger.info("Session changed: %s", sanitize_id_for_logging(user_id))
            stream.publish(identity)

        session = await self.client.auth.get_session()
        forward(identity_from_user(session.user) if session else None)

        def on_change(_event, session) -> None:
            forward(identity_from_user(session.user) if session else None)

        subscription = self.client.auth.on_auth_state_change(on_change)
        stream.set_unsubscribe(subscription.unsubscribe)
        return stream

    async def sign_in_with_password(self, email: str, password: str) -> None:
        try:
            await self.client.auth.sign_in_with_password({"email": email, "password": password})
        except SupabaseAuthError as e:
            raise _auth_error(e) from e

    async def sign_up_with_password(
        self, email: str, password: str, display_name: Optional[str] = None
    ) -> None:
        credentials: dict[str, Any] = {"email": email, "password": password}
        if display_name:
            credentials["options"] = {"data": {"display_name": display_name}}
        try:
            await self.client.auth.sign_up(credentials)
        except SupabaseAuthError as e:
            raise _auth_error(e) from e

    async def sign_in_with_federated_provider(self) -> Optional[str]:
        credentials: dict[str, Any] = {"provider": self.oauth_provider}
        if self.redirect_url:
            credentials["options"] = {"redirect_to": self.redirect_url}
        try:
            response = await self.client.auth.sign_in_with_oauth(credentials)
        except SupabaseAuthError as e:
            raise _auth_error(e) from e
        return getattr(response, "url", None)

    async def sign_out(self) -> None:
        try:
            await self.client.auth.sign_out()
        except SupabaseAuthError as e:
            raise _auth_error(e) from e


def _auth_error(error: SupabaseAuthError) -> AuthError:
    code = getattr(error, "code", None)
    logger.warning("Identity provider rejected request: %s", code or type(error).__name__)
    return AuthError(str(error) or "Authentication failed", code=code)
