"""Auth session manager.

Owns the current session state and keeps the cart store in step with it:
sign-in ensures the profile and hydrates the cart, sign-out resets it.
State only ever changes in response to identity provider events.
"""
import asyncio
from dataclasses import dataclass
from typing import Optional, Union

from storefront.cart import CartStore
from storefront.errors import StorefrontError
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.models import Identity, UserProfile
from storefront.repositories import ProfileGateway

from .provider import IdentityProvider, SessionEvent, SessionEventStream

logger = get_logger(__name__)


@dataclass(frozen=True)
class Anonymous:
    """No signed-in user."""


@dataclass(frozen=True)
class Authenticated:
    """Signed in as ``user_id``."""
    user_id: str
    identity: Identity


SessionState = Union[Anonymous, Authenticated]

ANONYMOUS = Anonymous()


class AuthSessionManager:
    """
    Consumes the identity provider's session events and drives the cart store.

    ``is_initializing`` stays true until the first event has been fully
    handled. A newer event cancels the handling of an older one still in
    flight, so the last event always wins.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        profiles: ProfileGateway,
        cart: CartStore,
    ) -> None:
        self._provider = provider
        self._profiles = profiles
        self._cart = cart
        self._state: SessionState = ANONYMOUS
        self._ready = asyncio.Event()
        self._stream: Optional[SessionEventStream] = None
        self._consumer: Optional[asyncio.Task] = None
        self._handler: Optional[asyncio.Task] = None
        self.last_error: Optional[StorefrontError] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_initializing(self) -> bool:
        return not self._ready.is_set()

    @property
    def current_user_id(self) -> Optional[str]:
        """Signed-in identity id, for collaborators that scope their own data by user."""
        if isinstance(self._state, Authenticated):
            return self._state.user_id
        return None

    async def wait_ready(self) -> None:
        await self._ready.wait()

    async def start(self) -> None:
        """Subscribe to session events and start consuming them."""
        if self._consumer is not None:
            return
        self._stream = await self._provider.session_events()
        self._consumer = asyncio.create_task(self._consume(self._stream))

    async def stop(self) -> None:
        """Release the subscription and cancel any in-flight handling."""
        if self._stream is not None:
            self._stream.close()
        for task in (self._handler, self._consumer):
            if task is not None and not task.done():
                task.cancel()
        for task in (self._handler, self._consumer):
            if task is not None:
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._stream = None
        self._consumer = None
        self._handler = None

    async def __aenter__(self) -> "AuthSessionManager":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def _consume(self, stream: SessionEventStream) -> None:
        async for event in stream:
            previous = self._handler
            if previous is not None and not previous.done():
                logger.debug("Session event superseded in-flight handling")
                previous.cancel()
            self._handler = asyncio.create_task(self._handle(event, previous))
        if self._handler is not None:
            await asyncio.gather(self._handler, return_exceptions=True)

    async def _handle(self, event: SessionEvent, previous: Optional[asyncio.Task]) -> None:
        # Let the cancelled handler unwind before touching shared state
        if previous is not None:
            await asyncio.gather(previous, return_exceptions=True)
        try:
            await self.apply_event(event)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.error("Session event handling failed", exc_info=True)
            self._ready.set()

    async def apply_event(self, event: SessionEvent) -> None:
        """Transition on one session event. Backend failures are recorded, not raised."""
        identity = event.identity
        self.last_error = None

        if identity is None:
            logger.info("Signed out, resetting cart")
            self._state = ANONYMOUS
            await self._cart.reset()
        else:
            logger.info("Signed in as %s", sanitize_id_for_logging(identity.id))
            self._state = Authenticated(user_id=identity.id, identity=identity)
            try:
                await self.ensure_profile(identity)
                await self._cart.hydrate(identity.id)
            except StorefrontError as e:
                # Keep the session; show an empty cart and let the UI offer a retry
                logger.warning(
                    "Cart hydration failed for %s: %s",
                    sanitize_id_for_logging(identity.id),
                    type(e).__name__,
                )
                self._cart.attach(identity.id)
                self.last_error = e

        self._ready.set()

    async def ensure_profile(self, identity: Identity) -> UserProfile:
        """Create the profile on first sign-in; leave an existing one untouched."""
        profile = await self._profiles.get(identity.id)
        if profile is not None:
            return profile
        profile = UserProfile.new_for(identity)
        await self._profiles.set(identity.id, profile)
        logger.info("Created profile for %s", sanitize_id_for_logging(identity.id))
        return profile

    async def retry_hydration(self) -> None:
        """Retry the sign-in work after a failure. Errors propagate to the caller."""
        if not isinstance(self._state, Authenticated):
            return
        identity = self._state.identity
        await self.ensure_profile(identity)
        await self._cart.hydrate(identity.id)
        self.last_error = None

    async def sign_in(self, email: str, password: str) -> None:
        await self._provider.sign_in_with_password(email, password)

    async def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> None:
        await self._provider.sign_up_with_password(email, password, display_name)

    async def sign_in_with_federated_provider(self) -> Optional[str]:
        return await self._provider.sign_in_with_federated_provider()

    async def sign_out(self) -> None:
        await self._provider.sign_out()
