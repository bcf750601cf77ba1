# =========================================================
# CART AGGREGATION
#
# Pure functions over an immutable cart (a tuple of CartLine).
# Nothing here touches the database: prices and names are
# snapshots taken when the item was put in the cart.
# =========================================================

import hashlib
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterable

from app.core.errors import CartLineNotFound, InvalidCartItem

PRODUCT = "product"
TOPPING = "topping"


@dataclass(frozen=True)
class AddOn:
    add_on_id: int
    name: str
    unit_price: Decimal


@dataclass(frozen=True)
class BaseItem:
    """What a cart line sells: a catalog product or a topping sold on its own."""

    kind: str
    item_id: int
    name: str
    unit_price: Decimal

    def __post_init__(self):
        if self.kind not in (PRODUCT, TOPPING):
            raise ValueError(f"Unknown item kind: {self.kind}")

    @classmethod
    def product(cls, item_id: int, name: str, unit_price) -> "BaseItem":
        return cls(PRODUCT, item_id, name, Decimal(unit_price))

    @classmethod
    def topping(cls, item_id: int, name: str, unit_price) -> "BaseItem":
        return cls(TOPPING, item_id, name, Decimal(unit_price))


@dataclass(frozen=True)
class CartLine:
    line_id: str
    base: BaseItem
    quantity: int
    add_ons: tuple[AddOn, ...] = field(default_factory=tuple)
    note: str = ""

    @property
    def unit_price(self) -> Decimal:
        """Base price plus every selected add-on, for one unit."""
        return self.base.unit_price + sum((a.unit_price for a in self.add_ons), Decimal("0"))

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


Cart = tuple[CartLine, ...]


def _normalize_note(note: str | None) -> str:
    return (note or "").strip()


def line_key(base: BaseItem, add_ons: Iterable[AddOn], note: str | None) -> tuple:
    add_on_ids = tuple(sorted({a.add_on_id for a in add_ons}))
    return (base.kind, base.item_id, add_on_ids, _normalize_note(note))


def make_line_id(key: tuple) -> str:
    kind, item_id, add_on_ids, note = key
    raw = f"{kind}:{item_id}|{','.join(str(i) for i in add_on_ids)}|{note}"
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()[:16]


def merge_or_add(
    cart: Cart,
    base: BaseItem,
    add_ons: Iterable[AddOn] = (),
    note: str | None = None,
    quantity: int = 1,
) -> Cart:
    if quantity <= 0:
        raise ValueError("Quantity must be greater than zero")

    # Same add-on picked twice counts once
    unique_add_ons = tuple({a.add_on_id: a for a in add_ons}.values())
    if base.kind == TOPPING and unique_add_ons:
        raise InvalidCartItem("A topping sold on its own cannot have toppings")

    line_id = make_line_id(line_key(base, unique_add_ons, note))

    for index, line in enumerate(cart):
        if line.line_id == line_id:
            merged = replace(line, quantity=line.quantity + quantity)
            return cart[:index] + (merged,) + cart[index + 1:]

    new_line = CartLine(
        line_id=line_id,
        base=base,
        quantity=quantity,
        add_ons=unique_add_ons,
        note=_normalize_note(note),
    )
    return tuple(cart) + (new_line,)


def set_quantity(cart: Cart, line_id: str, new_qty: int) -> Cart:
    if not any(line.line_id == line_id for line in cart):
        raise CartLineNotFound()

    if new_qty <= 0:
        return remove_line(cart, line_id)

    return tuple(
        replace(line, quantity=new_qty) if line.line_id == line_id else line
        for line in cart
    )


def remove_line(cart: Cart, line_id: str) -> Cart:
    if not any(line.line_id == line_id for line in cart):
        raise CartLineNotFound()

    return tuple(line for line in cart if line.line_id != line_id)


def cart_total(cart: Iterable[CartLine]) -> Decimal:
    return sum((line.line_total for line in cart), Decimal("0"))


def change_due(total, cash_tendered) -> Decimal:
    return max(Decimal("0"), Decimal(cash_tendered) - Decimal(total))


def clamp_stock(current: int, decrement: int) -> int:
    return max(0, current - decrement)


def consumption(cart: Iterable[CartLine]) -> dict[tuple[str, int], int]:
    """
    Units taken from inventory, keyed by (kind, item id).

    An add-on is used once per unit of its line, so it consumes the
    line quantity. A topping can show up both as a base item and as
    an add-on; both uses add up.
    """
    used: dict[tuple[str, int], int] = {}

    for line in cart:
        key = (line.base.kind, line.base.item_id)
        used[key] = used.get(key, 0) + line.quantity

        for add_on in line.add_ons:
            key = (TOPPING, add_on.add_on_id)
            used[key] = used.get(key, 0) + line.quantity

    return used
