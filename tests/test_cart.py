"""Tests for the cart ledger."""

import json

import pytest

import cart as ledger
from errors import ValidationError
from schemas import Cart, Product


class TestAddItem:
    def test_appends_new_entry(self, empty_cart, shoe):
        c = ledger.add_item(empty_cart, shoe, 2, size="9", color="#000000")
        assert len(c.items) == 1
        assert c.items[0].quantity == 2
        assert c.items[0].key == ("p-shoe", "9", "#000000")

    def test_merges_same_variant(self, empty_cart, shoe):
        c = ledger.add_item(empty_cart, shoe, 2, size="9")
        c = ledger.add_item(c, shoe, 3, size="9")
        assert len(c.items) == 1
        assert c.items[0].quantity == 5

    def test_different_variants_are_distinct(self, empty_cart, shoe):
        c = ledger.add_item(empty_cart, shoe, 1, size="9")
        c = ledger.add_item(c, shoe, 1, size="10")
        c = ledger.add_item(c, shoe, 1, size="10", color="#ffffff")
        assert [item.key for item in c.items] == [
            ("p-shoe", "9", None),
            ("p-shoe", "10", None),
            ("p-shoe", "10", "#ffffff"),
        ]

    def test_default_quantity_is_one(self, empty_cart, shoe):
        c = ledger.add_item(empty_cart, shoe)
        assert c.items[0].quantity == 1

    def test_preserves_insertion_order(self, empty_cart, shoe, sale_tee):
        c = ledger.add_item(empty_cart, shoe)
        c = ledger.add_item(c, sale_tee)
        c = ledger.add_item(c, shoe)
        assert [item.product.id for item in c.items] == ["p-shoe", "p-tee"]

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
    def test_rejects_non_positive_or_non_integer(self, empty_cart, shoe, quantity):
        with pytest.raises(ValidationError):
            ledger.add_item(empty_cart, shoe, quantity)

    def test_does_not_mutate_input(self, empty_cart, shoe):
        first = ledger.add_item(empty_cart, shoe, 1)
        second = ledger.add_item(first, shoe, 4)
        assert empty_cart.items == []
        assert first.items[0].quantity == 1
        assert second.items[0].quantity == 5

    def test_ignores_stock(self, empty_cart):
        scarce = Product(id="p-rare", name="Rare", brand="Acme", price=10, category="men", type="shoes", stock=1)
        c = ledger.add_item(empty_cart, scarce, 10)
        assert c.items[0].quantity == 10

    def test_keeps_owner(self, empty_cart, shoe):
        assert ledger.add_item(empty_cart, shoe).owner == "user-1"


class TestSetQuantity:
    def test_replaces_quantity(self, empty_cart, shoe):
        c = ledger.add_item(empty_cart, shoe, 2, size="9")
        c = ledger.set_quantity(c, "p-shoe", 7, size="9")
        assert c.items[0].quantity == 7

    def test_only_touches_matching_variant(self, empty_cart, shoe):
        c = ledger.add_item(empty_cart, shoe, 2, size="9")
        c = ledger.add_item(c, shoe, 2, size="10")
        c = ledger.set_quantity(c, "p-shoe", 5, size="10")
        assert [item.quantity for item in c.items] == [2, 5]

    def test_missing_entry_returns_cart_unchanged(self, empty_cart, shoe):
        c = ledger.add_item(empty_cart, shoe, 2, size="9")
        assert ledger.set_quantity(c, "p-shoe", 5, size="11") is c
        assert ledger.set_quantity(c, "nope", 5) is c

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_rejects_quantity_below_one(self, empty_cart, shoe, quantity):
        c = ledger.add_item(empty_cart, shoe, 2)
        with pytest.raises(ValidationError):
            ledger.set_quantity(c, "p-shoe", quantity)
        assert c.items[0].quantity == 2


class TestRemoveItem:
    def test_removes_matching_entry(self, empty_cart, shoe, sale_tee):
        c = ledger.add_item(empty_cart, shoe, 1, size="9")
        c = ledger.add_item(c, sale_tee, 1)
        c = ledger.remove_item(c, "p-shoe", size="9")
        assert [item.product.id for item in c.items] == ["p-tee"]

    def test_absent_entry_is_noop(self, empty_cart, shoe):
        c = ledger.add_item(empty_cart, shoe, 1, size="9")
        assert ledger.remove_item(c, "p-shoe") is c

    def test_is_idempotent(self, empty_cart, shoe, sale_tee):
        c = ledger.add_item(empty_cart, shoe, 1)
        c = ledger.add_item(c, sale_tee, 2)
        once = ledger.remove_item(c, "p-shoe")
        twice = ledger.remove_item(once, "p-shoe")
        assert once == twice


class TestClearAndTotals:
    def test_clear_empties_cart(self, empty_cart, shoe, sale_tee):
        c = ledger.add_item(empty_cart, shoe, 3)
        c = ledger.add_item(c, sale_tee, 2)
        cleared = ledger.clear_cart(c)
        assert cleared.items == []
        assert ledger.item_count(cleared) == 0
        assert cleared.owner == "user-1"

    def test_item_count_sums_quantities(self, empty_cart, shoe, sale_tee):
        c = ledger.add_item(empty_cart, shoe, 3)
        c = ledger.add_item(c, sale_tee, 2)
        assert ledger.item_count(c) == 5

    def test_subtotal_prefers_sale_price(self, empty_cart, shoe, sale_tee):
        c = ledger.add_item(empty_cart, shoe, 1)
        c = ledger.add_item(c, sale_tee, 2)
        assert ledger.subtotal(c) == pytest.approx(100.0 + 2 * 20.0)

    def test_zero_sale_price_still_wins(self, empty_cart):
        freebie = Product(id="p-free", name="Free", brand="Acme", price=12, sale_price=0, category="men", type="socks")
        c = ledger.add_item(empty_cart, freebie, 3)
        assert ledger.subtotal(c) == 0

    def test_subtotal_is_linear(self, empty_cart, shoe, sale_tee):
        c = ledger.add_item(empty_cart, shoe, 1)
        before = ledger.subtotal(c)
        after = ledger.subtotal(ledger.add_item(c, sale_tee, 4))
        assert after == pytest.approx(before + sale_tee.unit_price * 4)

    def test_empty_cart_totals(self, empty_cart):
        assert ledger.subtotal(empty_cart) == 0
        assert ledger.item_count(empty_cart) == 0


class TestLocalPersistence:
    def test_missing_key_loads_empty(self):
        assert ledger.load_cart({}).items == []

    def test_save_writes_single_array(self, empty_cart, shoe):
        storage = {}
        ledger.save_cart(storage, ledger.add_item(empty_cart, shoe, 2, size="9"))
        payload = json.loads(storage[ledger.CART_STORAGE_KEY])
        assert isinstance(payload, list)
        assert payload[0]["quantity"] == 2
        assert payload[0]["size"] == "9"
        assert payload[0]["product"]["id"] == "p-shoe"

    def test_load_restores_saved_cart(self, empty_cart, shoe, sale_tee):
        storage = {}
        c = ledger.add_item(empty_cart, shoe, 2, size="9")
        c = ledger.add_item(c, sale_tee, 1)
        ledger.save_cart(storage, c)

        restored = ledger.load_cart(storage, owner="user-1")
        assert [item.key for item in restored.items] == [item.key for item in c.items]
        assert ledger.subtotal(restored) == pytest.approx(ledger.subtotal(c))

    def test_duplicate_entries_collapse_on_load(self, empty_cart, shoe):
        storage = {}
        ledger.save_cart(storage, ledger.add_item(empty_cart, shoe, 2))
        entries = json.loads(storage[ledger.CART_STORAGE_KEY])
        storage[ledger.CART_STORAGE_KEY] = json.dumps(entries + entries)

        restored = ledger.load_cart(storage)
        assert len(restored.items) == 1
        assert restored.items[0].quantity == 4

    def test_unreadable_payload_loads_empty(self, caplog):
        storage = {ledger.CART_STORAGE_KEY: "{not json"}
        with caplog.at_level("ERROR", logger="cart"):
            restored = ledger.load_cart(storage)
        assert restored.items == []
        assert "Failed to load persisted cart" in caplog.text

    def test_zero_quantity_entry_is_rejected(self, empty_cart, shoe):
        storage = {}
        ledger.save_cart(storage, ledger.add_item(empty_cart, shoe, 1))
        entries = json.loads(storage[ledger.CART_STORAGE_KEY])
        entries[0]["quantity"] = 0
        storage[ledger.CART_STORAGE_KEY] = json.dumps(entries)
        assert ledger.load_cart(storage) == Cart()
