"""
Storefront errors.

Message constants are shared so callers and tests match on one string;
the exception classes form the taxonomy the cart and session layers raise.
"""

# Backend errors
ERROR_BACKEND_UNAVAILABLE = "Profile store unavailable"
ERROR_PROFILE_NOT_FOUND = "Profile not found"
ERROR_CORRUPT_CART = "Stored cart could not be read"

# Cart errors
ERROR_ITEM_NOT_FOUND = "Item not in cart"
ERROR_NOT_AUTHENTICATED = "Sign in to use the cart"

# Auth errors
ERROR_AUTH_FAILED = "Authentication failed"


class StorefrontError(Exception):
    """Base error for the storefront core."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class Unavailable(StorefrontError):
    """Transient backend or network failure. Never retried internally."""

    def __init__(self, message: str = ERROR_BACKEND_UNAVAILABLE) -> None:
        super().__init__(message, code="UNAVAILABLE")


class ProfileNotFound(StorefrontError):
    """Profile document does not exist for the given user."""

    def __init__(self, user_id: str | None = None) -> None:
        super().__init__(ERROR_PROFILE_NOT_FOUND, code="NOT_FOUND")
        self.user_id = user_id


class CorruptCart(StorefrontError):
    """Stored cart entries failed validation (missing fields, bad quantity, ...)."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(ERROR_CORRUPT_CART, code="CORRUPT_CART")
        self.detail = detail


class ItemNotFound(StorefrontError):
    """Quantity update targeted an entry that is not in the cart."""

    def __init__(self, product_id: str, variant_key: str | None = None) -> None:
        super().__init__(ERROR_ITEM_NOT_FOUND, code="ITEM_NOT_FOUND")
        self.product_id = product_id
        self.variant_key = variant_key


class NotAuthenticated(StorefrontError):
    """Cart mutation attempted with no signed-in user bound to the store."""

    def __init__(self) -> None:
        super().__init__(ERROR_NOT_AUTHENTICATED, code="NOT_AUTHENTICATED")


class AuthError(StorefrontError):
    """Identity provider rejected an operation (bad credentials, account exists, ...).

    ``code`` carries the provider's own error code for display mapping.
    """

    def __init__(self, message: str = ERROR_AUTH_FAILED, code: str | None = None) -> None:
        super().__init__(message, code=code)


__all__ = [
    "ERROR_AUTH_FAILED",
    "ERROR_BACKEND_UNAVAILABLE",
    "ERROR_CORRUPT_CART",
    "ERROR_ITEM_NOT_FOUND",
    "ERROR_NOT_AUTHENTICATED",
    "ERROR_PROFILE_NOT_FOUND",
    "AuthError",
    "CorruptCart",
    "ItemNotFound",
    "NotAuthenticated",
    "ProfileNotFound",
    "StorefrontError",
    "Unavailable",
]
