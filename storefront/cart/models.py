"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, List, Tuple

from storefront.errors import CorruptCart
from storefront.money import to_decimal, round_money, multiply

ItemKey = Tuple[str, Optional[str]]


@dataclass(frozen=True)
class CartItem:
    """Single entry in the cart. Identity key is (product_id, variant_key).

    Immutable; quantity changes go through CartStore.
    """
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int = 1
    variant_key: Optional[str] = None  # e.g. size
    image_ref: str = ""
    category: str = ""

    def __post_init__(self):
        if not self.product_id or not isinstance(self.product_id, str):
            raise ValueError("product_id must be a non-empty string")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValueError("quantity must be a positive integer")
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))
        if self.unit_price < 0:
            raise ValueError("unit_price must be a non-negative number")
        # "" and None both mean "no variant"
        if not self.variant_key:
            object.__setattr__(self, "variant_key", None)

    @property
    def key(self) -> ItemKey:
        return (self.product_id, self.variant_key)

    @property
    def total_price(self) -> Decimal:
        """Total price for all units."""
        return multiply(self.unit_price, self.quantity)

    def matches(self, product_id: str, variant_key: Optional[str] = None) -> bool:
        return self.key == (product_id, variant_key or None)

    def to_dict(self) -> dict:
        """Convert to the dict stored in the profile document."""
        return {
            "product_id": self.product_id,
            "variant_key": self.variant_key,
            "name": self.name,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "image_ref": self.image_ref,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        """Create from a stored dict."""
        return cls(
            product_id=data["product_id"],
            name=data.get("name", ""),
            unit_price=to_decimal(data["unit_price"]),
            quantity=int(data["quantity"]),
            variant_key=data.get("variant_key"),
            image_ref=data.get("image_ref") or "",
            category=data.get("category") or "",
        )


@dataclass
class Cart:
    """Ordered cart contents. No two items share a key."""
    items: List[CartItem] = field(default_factory=list)

    @property
    def total_items(self) -> int:
        """Total number of units in cart."""
        return sum(item.quantity for item in self.items)

    @property
    def total(self) -> Decimal:
        """Sum of unit_price * quantity over all items."""
        return sum((item.total_price for item in self.items), Decimal("0"))

    def find(self, product_id: str, variant_key: Optional[str] = None) -> Optional[CartItem]:
        return next(
            (item for item in self.items if item.matches(product_id, variant_key)),
            None,
        )

    def to_list(self) -> list:
        """Convert to the list stored under the profile's ``cart`` field."""
        return [item.to_dict() for item in self.items]

    @classmethod
    def from_list(cls, data: Optional[list]) -> "Cart":
        """Build from the stored list. Raises CorruptCart if any entry is invalid."""
        try:
            return cls(items=[CartItem.from_dict(item) for item in data or []])
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CorruptCart(f"{type(e).__name__}: {e}") from e


@dataclass(frozen=True)
class CartSnapshot:
    """Immutable cart view handed to the UI layer."""
    user_id: Optional[str]
    items: Tuple[CartItem, ...]
    total: Decimal
    total_items: int

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def display_total(self) -> Decimal:
        return round_money(self.total)

    @classmethod
    def of(cls, user_id: Optional[str], cart: Cart) -> "CartSnapshot":
        return cls(
            user_id=user_id,
            items=tuple(cart.items),
            total=cart.total,
            total_items=cart.total_items,
        )

    @classmethod
    def empty(cls, user_id: Optional[str] = None) -> "CartSnapshot":
        return cls(user_id=user_id, items=(), total=Decimal("0"), total_items=0)
