"""
In-memory store for the Athletix storefront

One MemoryStore instance holds the catalog, the server-side carts (one per
owner key) and the placed orders for the lifetime of the application. It is
created and disposed by the app lifespan in main.py and handed to routes as
a dependency; nothing here is module-level state.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping

from bson import ObjectId

from errors import ConflictError, NotFoundError, ValidationError
from schemas import Cart, Order, Product

logger = logging.getLogger(__name__)


def _img(photo: str) -> str:
    return f"https://images.unsplash.com/photo-{photo}?ixlib=rb-1.2.1&auto=format&fit=crop&w=500&h=500&q=80"


SAMPLE_PRODUCTS: List[Dict[str, Any]] = [
    {
        "name": "Air Zoom SuperRep", "brand": "Nike", "price": 129.99,
        "description": "Built for circuit training and HIIT, with Zoom Air cushioning in the forefoot and a wide, stable heel.",
        "image_url": _img("1606107557195-0e29a4b5b4aa"),
        "images": [_img("1606107557195-0e29a4b5b4aa"), _img("1600185365483-26d7a4cc7519")],
        "category": "men", "type": "shoes", "sport": "training",
        "rating": 4.5, "review_count": 128, "badge": "NEW", "stock": 25,
        "sizes": ["7", "8", "9", "10", "11", "12"], "colors": ["#000000", "#ffffff", "#ff0000"],
        "featured": True, "best_seller": True,
    },
    {
        "name": "Ultraboost 21", "brand": "Adidas", "price": 179.99,
        "description": "A BOOST midsole and Primeknit upper deliver energy return with a supportive fit.",
        "image_url": _img("1608231387042-66d1773070a5"),
        "images": [_img("1608231387042-66d1773070a5"), _img("1587563871167-1ee9c731aefb")],
        "category": "men", "type": "shoes", "sport": "running",
        "rating": 5, "review_count": 208, "badge": "POPULAR", "stock": 18,
        "sizes": ["7", "8", "9", "10", "11", "12"], "colors": ["#000000", "#0000ff", "#ff0000"],
        "featured": True, "best_seller": True,
    },
    {
        "name": "HOVR Phantom 2", "brand": "Under Armour", "price": 149.99,
        "description": "UA HOVR foam wrapped in a compression mesh Energy Web for a zero gravity feel.",
        "image_url": _img("1554568218-0f1715e72254"),
        "category": "men", "type": "shoes", "sport": "running",
        "rating": 4, "review_count": 94, "stock": 12,
        "sizes": ["7", "8", "9", "10", "11", "12"], "colors": ["#000000", "#ffffff", "#ff0000", "#00ff00"],
        "best_seller": True,
    },
    {
        "name": "RS-X³ Puzzle", "brand": "Puma", "price": 119.99,
        "description": "Mesh and synthetic leather upper, bold color-blocking and RS cushioning in the midsole.",
        "image_url": _img("1593081891731-fda0877988da"),
        "category": "men", "type": "shoes", "sport": "lifestyle",
        "rating": 3.5, "review_count": 76, "badge": "ONLY X LEFT", "stock": 3,
        "sizes": ["7", "8", "9", "10", "11"], "colors": ["#000000", "#ffffff", "#0000ff"],
        "best_seller": True,
    },
    {
        "name": "Dri-FIT Men's Training T-Shirt", "brand": "Nike", "price": 35.99,
        "description": "Soft, sweat-wicking tee with an easy range of motion for the whole workout.",
        "image_url": _img("1581655353564-df123a1eb820"),
        "category": "men", "type": "apparel", "sport": "training",
        "rating": 5, "review_count": 156,
        "sizes": ["S", "M", "L", "XL", "XXL"], "colors": ["#000000", "#ffffff", "#ff0000", "#0000ff"],
        "best_seller": True,
    },
    {
        "name": "Cloudfoam Pure Shoes", "brand": "Adidas", "price": 89.99,
        "description": "Running-inspired women's shoes with a foot-hugging knit upper and Cloudfoam cushioning.",
        "image_url": _img("1560769629-975ec94e6a86"),
        "category": "women", "type": "shoes", "sport": "running",
        "rating": 5, "review_count": 287, "badge": "POPULAR",
        "sizes": ["5", "6", "7", "8", "9", "10"], "colors": ["#ffffff", "#ff00ff", "#0000ff"],
        "featured": True, "best_seller": True,
    },
    {
        "name": "Women's UA Fly-By 2.0 Shorts", "brand": "Under Armour", "price": 29.99,
        "description": "Lightweight running shorts in a stretchy woven fabric with mesh panels for ventilation.",
        "image_url": _img("1548286978-f218023f8d18"),
        "category": "women", "type": "apparel", "sport": "running",
        "rating": 4.5, "review_count": 183, "is_on_sale": True, "sale_price": 24.99,
        "sizes": ["XS", "S", "M", "L", "XL"], "colors": ["#000000", "#ff00ff", "#0000ff"],
        "best_seller": True,
    },
    {
        "name": "Kid's Zoom Pegasus 38", "brand": "Nike", "price": 85.99,
        "description": "Soft and springy cushioning for young runners.",
        "image_url": _img("1551107696-a4b0c5a0d9a2"),
        "category": "kids", "type": "shoes", "sport": "running",
        "rating": 4.5, "review_count": 92, "badge": "NEW",
        "sizes": ["3", "4", "5", "6", "7"], "colors": ["#ff0000", "#0000ff", "#00ff00"],
        "featured": True,
    },
    {
        "name": "Workout Ready Tech Tee", "brand": "Reebok", "price": 25.99,
        "description": "Lightweight, sweat-wicking training tee that breathes to keep you dry.",
        "image_url": _img("1618354691373-d851c5c3a990"),
        "category": "men", "type": "apparel", "sport": "training",
        "rating": 4.5, "review_count": 108, "is_on_sale": True, "sale_price": 19.99,
        "sizes": ["S", "M", "L", "XL", "XXL"], "colors": ["#000000", "#ffffff", "#808080"],
    },
    {
        "name": "Training Duffle Bag", "brand": "Nike", "price": 45.99,
        "description": "Spacious main compartment with a water-resistant bottom and multiple pockets.",
        "image_url": _img("1553062407-98eeb64c6a62"),
        "category": "accessories", "type": "accessories", "sport": "training",
        "rating": 4, "review_count": 65,
        "colors": ["#000000", "#0000ff", "#ff0000"],
    },
    {
        "name": "Mercurial Vapor 14 Elite", "brand": "Nike", "price": 249.99,
        "description": "Firm-ground soccer boot built to let you play your fastest from start to finish.",
        "image_url": _img("1542291026-7eec264c27ff"),
        "category": "men", "type": "shoes", "sport": "soccer",
        "rating": 5, "review_count": 216,
        "sizes": ["7", "8", "9", "10", "11", "12"], "colors": ["#ff0000", "#00ff00", "#0000ff"],
        "featured": True,
    },
    {
        "name": "Pro Basketball Shorts", "brand": "Adidas", "price": 39.99,
        "description": "Breathable court shorts with side pockets for your essentials.",
        "image_url": _img("1515886657613-9f3515b0c78f"),
        "category": "men", "type": "apparel", "sport": "basketball",
        "rating": 4.5, "review_count": 78,
        "sizes": ["S", "M", "L", "XL", "XXL"], "colors": ["#000000", "#ff0000", "#0000ff"],
    },
]


def _contains(value, needle: str) -> bool:
    return value is not None and needle in value.lower()


class MemoryStore:
    def __init__(self):
        self.products: Dict[str, Product] = {}
        self.carts: Dict[str, Cart] = {}
        self.orders: Dict[str, Order] = {}

    # Lifecycle
    def seed(self, products: Iterable[Mapping[str, Any]] = SAMPLE_PRODUCTS) -> int:
        count = 0
        for p in products:
            now = datetime.now(timezone.utc)
            self.put_product(Product(**{"id": str(ObjectId()), "created_at": now, **p}))
            count += 1
        logger.info("seeded %d products", count)
        return count

    def close(self) -> None:
        self.products.clear()
        self.carts.clear()
        self.orders.clear()

    def stats(self) -> Dict[str, int]:
        return {"products": len(self.products), "carts": len(self.carts), "orders": len(self.orders)}

    # Catalog
    def put_product(self, product: Product) -> Product:
        self.products[product.id] = product
        return product

    def remove_product(self, product_id: str) -> bool:
        return self.products.pop(product_id, None) is not None

    def all_products(self) -> List[Product]:
        return list(self.products.values())

    def get_product(self, product_id: str) -> Product:
        product = self.products.get(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def products_by_category(self, category: str) -> List[Product]:
        return [p for p in self.products.values() if p.category.lower() == category.lower()]

    def products_by_brand(self, brand: str) -> List[Product]:
        return [p for p in self.products.values() if p.brand.lower() == brand.lower()]

    def featured_products(self) -> List[Product]:
        return [p for p in self.products.values() if p.featured]

    def best_sellers(self) -> List[Product]:
        return [p for p in self.products.values() if p.best_seller]

    def search_products(self, query: str) -> List[Product]:
        q = query.lower()
        return [
            p for p in self.products.values()
            if any(_contains(v, q) for v in (p.name, p.brand, p.description, p.category, p.type, p.sport))
        ]

    # Carts
    def get_cart(self, owner: str) -> Cart:
        cart = self.carts.get(owner)
        return cart if cart is not None else Cart(owner=owner)

    def save_cart(self, cart: Cart) -> Cart:
        if cart.owner is None:
            raise ValidationError("Only owned carts can be stored")
        self.carts[cart.owner] = cart
        return cart

    def delete_cart(self, owner: str) -> None:
        self.carts.pop(owner, None)

    # Orders
    def add_order(self, order: Order) -> Order:
        if order.id in self.orders:
            raise ConflictError("Order", order.id)
        self.orders[order.id] = order
        return order

    def get_order(self, order_id: str) -> Order:
        order = self.orders.get(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def orders_for_user(self, user_id: str) -> List[Order]:
        # insertion order breaks ties between equal timestamps
        found = [(o.created_at, seq, o) for seq, o in enumerate(self.orders.values()) if o.user_id == user_id]
        return [o for _, _, o in sorted(found, key=lambda t: (t[0], t[1]), reverse=True)]
