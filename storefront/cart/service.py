"""Cart store: in-memory cart mirrored to the signed-in user's profile document."""
from dataclasses import replace
from decimal import Decimal
from typing import Callable, List, Optional

from storefront.errors import ItemNotFound, NotAuthenticated
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.models import UserProfile
from storefront.repositories import ProfileGateway

from .models import Cart, CartItem, CartSnapshot

logger = get_logger(__name__)

CartListener = Callable[[CartSnapshot], None]


class CartStore:
    """
    Keeps the signed-in user's cart in memory and in their profile document.

    Every mutation reads the whole persisted cart, changes it locally and
    writes the whole list back with ``update``. Nothing is locked: two
    concurrent mutations can read the same state and the later write wins
    (lost update). Memory only changes after a write succeeds.
    """

    def __init__(self, gateway: ProfileGateway):
        self._gateway = gateway
        self._user_id: Optional[str] = None
        self._cart = Cart()
        # Bumped on every bind/reset so suspended calls can tell they are stale
        self._epoch = 0
        self._listeners: List[CartListener] = []

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def items(self) -> tuple:
        return tuple(self._cart.items)

    @property
    def snapshot(self) -> CartSnapshot:
        return CartSnapshot.of(self._user_id, self._cart)

    def total(self) -> Decimal:
        """Sum of unit_price * quantity over the in-memory cart."""
        return self._cart.total

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call ``listener`` with every snapshot applied to memory. Returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def attach(self, user_id: str) -> None:
        """Bind the store to ``user_id`` with an empty cart, without loading."""
        self._epoch += 1
        self._user_id = user_id
        self._set_cart(Cart())

    async def hydrate(self, user_id: str) -> CartSnapshot:
        """Load ``user_id``'s persisted cart into memory, creating the profile if missing.

        Re-hydrating the bound user keeps the current cart until the read
        succeeds. Binding a different user clears it first.
        """
        if user_id != self._user_id:
            self.attach(user_id)
        else:
            self._epoch += 1
        epoch = self._epoch

        profile = await self._gateway.get(user_id)
        if profile is None:
            logger.info("No profile for %s, creating empty one", sanitize_id_for_logging(user_id))
            await self._gateway.set(user_id, UserProfile(user_id=user_id))
            cart = Cart()
        else:
            cart = Cart.from_list(profile.cart)

        return self._apply(epoch, user_id, cart)

    async def refresh(self) -> CartSnapshot:
        """Re-hydrate the currently bound user."""
        return await self.hydrate(self._require_user())

    async def reset(self) -> None:
        """Empty the in-memory cart and unbind the user. Storage is untouched."""
        self._epoch += 1
        self._user_id = None
        self._set_cart(Cart())

    async def add(self, item: CartItem) -> CartSnapshot:
        """Add ``item``, summing quantities with an existing entry of the same key."""
        user_id = self._require_user()
        epoch = self._epoch

        profile, cart = await self._read(user_id)
        existing = cart.find(item.product_id, item.variant_key)
        if existing is not None:
            items = [
                replace(entry, quantity=entry.quantity + item.quantity) if entry is existing else entry
                for entry in cart.items
            ]
        else:
            items = cart.items + [item]

        updated = Cart(items=items)
        await self._write(user_id, profile, updated)
        return self._apply(epoch, user_id, updated)

    async def remove(self, product_id: str, variant_key: Optional[str] = None) -> CartSnapshot:
        """Remove the entry with this key. Absent key is a no-op."""
        user_id = self._require_user()
        epoch = self._epoch

        profile, cart = await self._read(user_id)
        items = [entry for entry in cart.items if not entry.matches(product_id, variant_key)]
        if len(items) == len(cart.items):
            return self.snapshot

        updated = Cart(items=items)
        await self._write(user_id, profile, updated)
        return self._apply(epoch, user_id, updated)

    async def set_quantity(
        self,
        product_id: str,
        variant_key: Optional[str],
        quantity: int,
    ) -> CartSnapshot:
        """Replace an entry's quantity; ``quantity <= 0`` removes it."""
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValueError("quantity must be an integer")
        if quantity <= 0:
            return await self.remove(product_id, variant_key)

        user_id = self._require_user()
        epoch = self._epoch

        profile, cart = await self._read(user_id)
        existing = cart.find(product_id, variant_key)
        if existing is None:
            raise ItemNotFound(product_id, variant_key or None)

        updated = Cart(items=[
            replace(entry, quantity=quantity) if entry is existing else entry
            for entry in cart.items
        ])
        await self._write(user_id, profile, updated)
        return self._apply(epoch, user_id, updated)

    def _require_user(self) -> str:
        if self._user_id is None:
            raise NotAuthenticated()
        return self._user_id

    async def _read(self, user_id: str):
        profile = await self._gateway.get(user_id)
        if profile is None:
            return None, Cart()
        return profile, Cart.from_list(profile.cart)

    async def _write(self, user_id: str, profile: Optional[UserProfile], cart: Cart) -> None:
        if profile is None:
            # Profile vanished or was never created; recreate it around the cart
            await self._gateway.set(user_id, UserProfile(user_id=user_id, cart=cart.to_list()))
        else:
            await self._gateway.update(user_id, {"cart": cart.to_list()})

    def _apply(self, epoch: int, user_id: str, cart: Cart) -> CartSnapshot:
        """Install ``cart`` in memory unless the store was rebound meanwhile."""
        if epoch != self._epoch:
            logger.debug("Discarding stale cart result for %s", sanitize_id_for_logging(user_id))
            return CartSnapshot.of(user_id, cart)
        self._set_cart(cart)
        return self.snapshot

    def _set_cart(self, cart: Cart) -> None:
        self._cart = cart
        snapshot = self.snapshot
        for listener in list(self._listeners):
            listener(snapshot)
