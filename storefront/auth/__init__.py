"""Auth package: identity provider adapter and session manager."""
from .provider import (
    IdentityProvider,
    SessionEvent,
    SessionEventStream,
    SupabaseIdentityProvider,
    identity_from_user,
)
from .session import ANONYMOUS, Anonymous, Authenticated, AuthSessionManager, SessionState

__all__ = [
    "ANONYMOUS",
    "Anonymous",
    "Authenticated",
    "AuthSessionManager",
    "IdentityProvider",
    "SessionEvent",
    "SessionEventStream",
    "SessionState",
    "SupabaseIdentityProvider",
    "identity_from_user",
]
