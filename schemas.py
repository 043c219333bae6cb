"""
Data model for the Athletix storefront

Products, carts and orders are pydantic models held by the in-memory store
(see database.py). Products and orders are frozen once created; carts are
replaced wholesale by the ledger functions in cart.py.
"""
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Order amounts are exact cents; JSON carries them as numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Badge(str, Enum):
    NEW = "NEW"
    POPULAR = "POPULAR"
    ONLY_X_LEFT = "ONLY X LEFT"


class ShippingTier(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    brand: str
    price: float = Field(..., ge=0)
    sale_price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    image_url: str = ""
    images: List[str] = []
    category: str
    type: str
    sport: Optional[str] = None
    rating: float = Field(5, ge=0, le=5)
    review_count: int = Field(0, ge=0)
    badge: Optional[Badge] = None
    stock: Optional[int] = Field(None, ge=0)
    is_on_sale: bool = False
    sizes: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    featured: bool = False
    best_seller: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("rating")
    @classmethod
    def half_step_rating(cls, v: float) -> float:
        if (v * 2) != int(v * 2):
            raise ValueError("rating must be a multiple of 0.5")
        return v

    @property
    def unit_price(self) -> float:
        # sale price wins whenever it is set, including 0
        return self.sale_price if self.sale_price is not None else self.price


class LineItem(BaseModel):
    product: Product
    quantity: int = Field(..., ge=1)
    size: Optional[str] = None
    color: Optional[str] = None

    @property
    def key(self) -> Tuple[str, Optional[str], Optional[str]]:
        return (self.product.id, self.size, self.color)


class Cart(BaseModel):
    owner: Optional[str] = None
    items: List[LineItem] = []


class ShippingDetails(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class PaymentDetails(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    card_number: str = Field(..., pattern=r"^[0-9]{16}$")
    expiry_date: str = Field(..., pattern=r"^(0[1-9]|1[0-2])/[0-9]{2}$")  # MM/YY
    cvv: str = Field(..., pattern=r"^[0-9]{3,4}$")
    name_on_card: Optional[str] = None


class OrderItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str
    product_brand: str
    price: float
    quantity: int = Field(..., ge=1)
    size: Optional[str] = None
    color: Optional[str] = None


class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    shipping_details: ShippingDetails
    payment_details: Optional[PaymentDetails] = None
    shipping_tier: ShippingTier
    subtotal: Money
    shipping: Money
    tax: Money
    total: Money
    created_at: datetime = Field(default_factory=utcnow)
    items: Tuple[OrderItem, ...] = ()


# Request / response bodies

class CartItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)
    size: Optional[str] = None
    color: Optional[str] = None


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1)
    size: Optional[str] = None
    color: Optional[str] = None


class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)
    size: Optional[str] = None
    color: Optional[str] = None


class OrderCreate(BaseModel):
    user_id: Optional[str] = None
    items: Optional[List[OrderItemRequest]] = None  # guest checkout from a local cart
    shipping_details: ShippingDetails
    shipping_tier: str
    payment_details: Optional[PaymentDetails] = None


class CartOut(BaseModel):
    owner: Optional[str] = None
    items: List[LineItem]
    subtotal: float
    item_count: int


class OrderList(BaseModel):
    orders: List[Order]
