import os
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Depends, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import cart as ledger
from database import MemoryStore
from errors import ConflictError, NotFoundError, ValidationError
from logging_config import configure_logging
from orders import place_order
from schemas import (
    Cart,
    CartItemCreate,
    CartItemUpdate,
    CartOut,
    Order,
    OrderCreate,
    OrderList,
    Product,
)

from dotenv import load_dotenv
load_dotenv()

APP_NAME = os.getenv("APP_NAME", "Athletix Store API")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
SEED_CATALOG = os.getenv("SEED_CATALOG", "true").lower() in ("1", "true", "yes")

configure_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = MemoryStore()
    if SEED_CATALOG:
        store.seed()
    app.state.store = store
    yield
    store.close()


# FastAPI app
app = FastAPI(title=APP_NAME, version="1.0.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Dependencies
def get_store(request: Request) -> MemoryStore:
    return request.app.state.store


# Error mapping
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message, "errors": exc.errors})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


def cart_out(cart: Cart) -> CartOut:
    return CartOut(
        owner=cart.owner,
        items=cart.items,
        subtotal=round(ledger.subtotal(cart), 2),
        item_count=ledger.item_count(cart),
    )


# Products
@app.get("/api/products", response_model=List[Product])
def list_products(store: MemoryStore = Depends(get_store)):
    return store.all_products()

@app.get("/api/products/{product_id}", response_model=Product)
def get_product(product_id: str, store: MemoryStore = Depends(get_store)):
    return store.get_product(product_id)

@app.get("/api/products/category/{category}", response_model=List[Product])
def products_by_category(category: str, store: MemoryStore = Depends(get_store)):
    return store.products_by_category(category)

@app.get("/api/products/brand/{brand}", response_model=List[Product])
def products_by_brand(brand: str, store: MemoryStore = Depends(get_store)):
    return store.products_by_brand(brand)

@app.get("/api/featured-products", response_model=List[Product])
def featured_products(store: MemoryStore = Depends(get_store)):
    return store.featured_products()

@app.get("/api/bestsellers", response_model=List[Product])
def best_sellers(store: MemoryStore = Depends(get_store)):
    return store.best_sellers()

@app.get("/api/search", response_model=List[Product])
def search_products(q: Optional[str] = None, store: MemoryStore = Depends(get_store)):
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Search query is required")
    return store.search_products(q.strip())

# Cart
@app.get("/api/cart/{user_id}", response_model=CartOut)
def get_cart(user_id: str, store: MemoryStore = Depends(get_store)):
    return cart_out(store.get_cart(user_id))

@app.post("/api/cart/{user_id}", response_model=CartOut, status_code=status.HTTP_201_CREATED)
def add_to_cart(user_id: str, body: CartItemCreate, store: MemoryStore = Depends(get_store)):
    product = store.get_product(body.product_id)
    updated = ledger.add_item(store.get_cart(user_id), product, body.quantity, body.size, body.color)
    return cart_out(store.save_cart(updated))

@app.put("/api/cart/{user_id}/items/{product_id}", response_model=CartOut)
def update_cart_item(user_id: str, product_id: str, body: CartItemUpdate, store: MemoryStore = Depends(get_store)):
    current = store.get_cart(user_id)
    if ledger.find_item(current, product_id, body.size, body.color) is None:
        raise NotFoundError("Cart item", product_id)
    updated = ledger.set_quantity(current, product_id, body.quantity, body.size, body.color)
    return cart_out(store.save_cart(updated))

@app.delete("/api/cart/{user_id}/items/{product_id}", response_model=CartOut)
def remove_cart_item(user_id: str, product_id: str, size: Optional[str] = None, color: Optional[str] = None, store: MemoryStore = Depends(get_store)):
    current = store.get_cart(user_id)
    updated = ledger.remove_item(current, product_id, size, color)
    if updated is not current:
        store.save_cart(updated)
    return cart_out(updated)

@app.delete("/api/cart/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def clear_cart(user_id: str, store: MemoryStore = Depends(get_store)):
    store.delete_cart(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# Orders
@app.post("/api/orders", response_model=Order, status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, store: MemoryStore = Depends(get_store)):
    if payload.items is not None:
        checkout = Cart(owner=payload.user_id)
        for item in payload.items:
            product = store.get_product(item.product_id)
            checkout = ledger.add_item(checkout, product, item.quantity, item.size, item.color)
    elif payload.user_id:
        checkout = store.get_cart(payload.user_id)
    else:
        checkout = Cart()
    try:
        order = place_order(
            checkout,
            payload.shipping_details,
            payload.shipping_tier,
            payload.payment_details,
            user_id=payload.user_id,
        )
    except ValidationError as e:
        logger.warning("checkout rejected for user %s: %s", payload.user_id, e.message)
        raise
    store.add_order(order)
    if payload.user_id:
        store.delete_cart(payload.user_id)
    return order

@app.get("/api/orders/{order_id}", response_model=Order)
def order_detail(order_id: str, store: MemoryStore = Depends(get_store)):
    return store.get_order(order_id)

@app.get("/api/orders/user/{user_id}", response_model=OrderList)
def user_orders(user_id: str, store: MemoryStore = Depends(get_store)):
    return {"orders": store.orders_for_user(user_id)}

# Health + test
@app.get("/")
def root():
    return {"message": f"{APP_NAME} running"}

@app.get("/test")
def test_store(store: MemoryStore = Depends(get_store)):
    return {
        "backend": "✅ Running",
        "catalog_seeded": "✅ Yes" if store.products else "❌ Empty",
        "counts": store.stats(),
    }

@app.get('/seed/init')
def seed(store: MemoryStore = Depends(get_store)):
    added = 0
    if not store.products:
        added = store.seed()
    return { 'ok': True, 'added': added }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
