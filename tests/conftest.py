"""Pytest fixtures for the storefront tests."""

import pytest
from fastapi.testclient import TestClient

from database import MemoryStore
from schemas import Cart, Product


@pytest.fixture
def store():
    """A seeded store, disposed after the test."""
    s = MemoryStore()
    s.seed()
    yield s
    s.close()


@pytest.fixture
def shoe():
    return Product(
        id="p-shoe",
        name="Test Runner",
        brand="Acme",
        price=100.0,
        category="men",
        type="shoes",
        sport="running",
        rating=4.5,
        sizes=["9", "10"],
        colors=["#000000", "#ffffff"],
    )


@pytest.fixture
def sale_tee():
    return Product(
        id="p-tee",
        name="Sale Tee",
        brand="Acme",
        price=30.0,
        sale_price=20.0,
        is_on_sale=True,
        category="women",
        type="apparel",
        rating=4,
    )


@pytest.fixture
def empty_cart():
    return Cart(owner="user-1")


@pytest.fixture
def shipping_details():
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "phone": "5551234567",
        "address": "12 Analytical Way",
        "city": "London",
        "state": "LDN",
        "postal_code": "10001",
        "country": "UK",
    }


@pytest.fixture
def payment_details():
    return {"card_number": "1234567890123456", "expiry_date": "09/27", "cvv": "123", "name_on_card": "Ada Lovelace"}


@pytest.fixture
def client():
    """Test client over the app; the lifespan creates and seeds the store."""
    from main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def api_store(client):
    return client.app.state.store
