"""Cart ledger.

Every operation takes a Cart and returns a new one; the input cart and its
line items are never modified, so a caller either sees the whole mutation
or none of it. Line items are identified by (product id, size, color).
"""
import json
import logging
from typing import List, MutableMapping, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError
from schemas import Cart, LineItem, Product

logger = logging.getLogger(__name__)

# Key under which a browser-scoped cart is persisted
CART_STORAGE_KEY = "athletix-cart"

_line_items = TypeAdapter(List[LineItem])


def _check_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError(f"Quantity must be a positive integer, got {quantity!r}")


def _matches(item: LineItem, product_id: str, size: Optional[str], color: Optional[str]) -> bool:
    return item.key == (product_id, size, color)


def _with_items(cart: Cart, items: List[LineItem]) -> Cart:
    return cart.model_copy(update={"items": items})


def find_item(cart: Cart, product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> Optional[LineItem]:
    for item in cart.items:
        if _matches(item, product_id, size, color):
            return item
    return None


def add_item(cart: Cart, product: Product, quantity: int = 1, size: Optional[str] = None, color: Optional[str] = None) -> Cart:
    """Add ``quantity`` of a product variant, merging into an existing entry.

    Stock is not consulted.
    """
    _check_quantity(quantity)
    items = []
    merged = False
    for item in cart.items:
        if not merged and _matches(item, product.id, size, color):
            item = item.model_copy(update={"quantity": item.quantity + quantity})
            merged = True
        items.append(item)
    if not merged:
        items.append(LineItem(product=product, quantity=quantity, size=size, color=color))
    logger.debug("cart %s: add %s x%d (size=%s color=%s)", cart.owner, product.id, quantity, size, color)
    return _with_items(cart, items)


def set_quantity(cart: Cart, product_id: str, quantity: int, size: Optional[str] = None, color: Optional[str] = None) -> Cart:
    """Replace the quantity of a matching entry.

    Quantities below 1 are rejected; use remove_item to drop an entry.
    A cart with no matching entry is returned unchanged.
    """
    _check_quantity(quantity)
    if find_item(cart, product_id, size, color) is None:
        return cart
    items = [
        item.model_copy(update={"quantity": quantity}) if _matches(item, product_id, size, color) else item
        for item in cart.items
    ]
    logger.debug("cart %s: set %s to %d (size=%s color=%s)", cart.owner, product_id, quantity, size, color)
    return _with_items(cart, items)


def remove_item(cart: Cart, product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> Cart:
    items = [item for item in cart.items if not _matches(item, product_id, size, color)]
    if len(items) == len(cart.items):
        return cart
    logger.debug("cart %s: remove %s (size=%s color=%s)", cart.owner, product_id, size, color)
    return _with_items(cart, items)


def clear_cart(cart: Cart) -> Cart:
    return _with_items(cart, [])


def subtotal(cart: Cart) -> float:
    return sum(item.product.unit_price * item.quantity for item in cart.items)


def item_count(cart: Cart) -> int:
    return sum(item.quantity for item in cart.items)


# Browser-scoped persistence: one JSON array of line items under CART_STORAGE_KEY

def load_cart(storage: MutableMapping[str, str], owner: Optional[str] = None) -> Cart:
    raw = storage.get(CART_STORAGE_KEY)
    if not raw:
        return Cart(owner=owner)
    try:
        items = _line_items.validate_json(raw)
    except PydanticValidationError as e:
        logger.error("Failed to load persisted cart: %s", e)
        return Cart(owner=owner)
    # re-add through the ledger so duplicate keys collapse into one entry
    cart = Cart(owner=owner)
    for item in items:
        cart = add_item(cart, item.product, item.quantity, item.size, item.color)
    return cart


def save_cart(storage: MutableMapping[str, str], cart: Cart) -> None:
    storage[CART_STORAGE_KEY] = json.dumps(_line_items.dump_python(cart.items, mode="json"))
