"""Order assembly: turns a cart snapshot into an immutable, priced order."""
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from bson import ObjectId
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError
from schemas import Cart, Order, OrderItem, OrderStatus, PaymentDetails, ShippingDetails, ShippingTier, utcnow

logger = logging.getLogger(__name__)

SHIPPING_RATES = {
    ShippingTier.STANDARD: Decimal("15.00"),
    ShippingTier.EXPRESS: Decimal("30.00"),
}
TAX_RATE = Decimal("0.10")
CENT = Decimal("0.01")

M = TypeVar("M", bound=BaseModel)


def _tier(tier: Union[str, ShippingTier]) -> ShippingTier:
    try:
        return ShippingTier(tier)
    except ValueError:
        raise ValidationError(f"Unknown shipping tier: {tier!r}") from None


def shipping_cost(tier: Union[str, ShippingTier]) -> Decimal:
    return SHIPPING_RATES[_tier(tier)]


def _cents(amount: float) -> Decimal:
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def _coerce(model: Type[M], value: Union[M, Mapping[str, Any]], what: str) -> M:
    if isinstance(value, BaseModel):
        # re-check instances too; model_construct skips validation
        value = value.model_dump()
    try:
        return model.model_validate(value)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {what}", errors=e.errors(include_url=False, include_context=False, include_input=False))


def place_order(
    cart: Cart,
    shipping_details: Union[ShippingDetails, Mapping[str, Any]],
    shipping_tier: Union[str, ShippingTier],
    payment_details: Optional[Union[PaymentDetails, Mapping[str, Any]]] = None,
    user_id: Optional[str] = None,
) -> Order:
    """Price ``cart`` and capture it as a new pending order.

    Everything is validated before the order is built. The cart itself is
    left alone; clearing it after a successful checkout is up to the caller.
    """
    if not cart.items:
        raise ValidationError("Cart is empty")
    details = _coerce(ShippingDetails, shipping_details, "shipping details")
    payment = _coerce(PaymentDetails, payment_details, "payment details") if payment_details is not None else None
    tier = _tier(shipping_tier)
    shipping = SHIPPING_RATES[tier]

    subtotal = sum((_cents(item.product.unit_price) * item.quantity for item in cart.items), Decimal("0.00"))
    tax = (subtotal * TAX_RATE).quantize(CENT, rounding=ROUND_HALF_UP)
    total = subtotal + shipping + tax

    items = tuple(
        OrderItem(
            product_id=item.product.id,
            product_name=item.product.name,
            product_brand=item.product.brand,
            price=item.product.unit_price,
            quantity=item.quantity,
            size=item.size,
            color=item.color,
        )
        for item in cart.items
    )
    order = Order(
        id=str(ObjectId()),
        user_id=user_id,
        status=OrderStatus.PENDING,
        shipping_details=details,
        payment_details=payment,
        shipping_tier=tier,
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        total=total,
        created_at=utcnow(),
        items=items,
    )
    logger.info("order %s placed: %d items, total %.2f", order.id, len(items), total)
    return order
