"""Tests for Cart item management and business scoping."""

import pytest
from delivery.cart.cart import Cart, normalize_options
from delivery.cart.events import (
    CartBusinessSwitched,
    CartCleared,
    CartDeliveryAddressSet,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from protean.exceptions import ValidationError


def _add(cart, product_id="p1", business_id="b1", business_name="Biz", unit_price=10.0, quantity=1, options=None):
    cart.add_item(
        product_id=product_id,
        business_id=business_id,
        business_name=business_name,
        name=f"Product {product_id}",
        unit_price=unit_price,
        quantity=quantity,
        options=options,
    )


@pytest.fixture
def cart():
    return Cart.create(customer_id="cust-001")


class TestCartCreation:
    def test_create_with_customer_id(self, cart):
        assert str(cart.customer_id) == "cust-001"
        assert cart.session_id is None

    def test_create_with_session_id(self):
        cart = Cart.create(session_id="sess-guest-001")
        assert cart.customer_id is None
        assert cart.session_id == "sess-guest-001"

    def test_new_cart_is_empty(self, cart):
        assert cart.is_empty
        assert cart.business_id is None
        assert cart.subtotal == 0.0
        assert cart.tax == 0.0
        assert cart.delivery_fee == 0.0
        assert cart.discount == 0.0
        assert cart.total == 0.0

    def test_create_sets_timestamps(self, cart):
        assert cart.created_at is not None
        assert cart.updated_at is not None


class TestAddItem:
    def test_first_item_binds_cart_to_business(self, cart):
        _add(cart, business_id="b1", business_name="Biz")
        assert str(cart.business_id) == "b1"
        assert cart.business_name == "Biz"
        assert len(cart.items) == 1

    def test_same_product_increments_quantity(self, cart):
        _add(cart, quantity=1)
        _add(cart, quantity=2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_different_product_same_business_appends(self, cart):
        _add(cart, product_id="p1")
        _add(cart, product_id="p2")
        assert {str(item.product_id) for item in cart.items} == {"p1", "p2"}

    def test_different_business_replaces_cart_contents(self, cart):
        _add(cart, product_id="p1", business_id="b1", quantity=2)
        _add(cart, product_id="p2", business_id="b2", business_name="Other Biz")

        assert [str(item.product_id) for item in cart.items] == ["p2"]
        assert str(cart.business_id) == "b2"
        assert cart.business_name == "Other Biz"

    def test_business_switch_raises_event(self, cart):
        _add(cart, product_id="p1", business_id="b1")
        _add(cart, product_id="p2", business_id="b2")

        switched = [e for e in cart._events if isinstance(e, CartBusinessSwitched)]
        assert len(switched) == 1
        assert switched[0].previous_business_id == "b1"
        assert switched[0].discarded_item_count == 1

    def test_raises_item_added_event(self, cart):
        _add(cart, quantity=2)
        added = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert len(added) == 1
        assert added[0].quantity == 2

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_is_ignored(self, cart, quantity):
        _add(cart, quantity=quantity)
        assert cart.is_empty
        assert cart._events == []

    def test_negative_unit_price_rejected(self, cart):
        with pytest.raises(ValidationError):
            _add(cart, unit_price=-1.0)

    def test_options_are_stored(self, cart):
        _add(cart, options=[{"name": "Extra cheese", "price": 0.5}, {"name": "No onions"}])
        assert cart.items[0].selected_options == [
            {"name": "Extra cheese", "price": 0.5},
            {"name": "No onions", "price": 0.0},
        ]


class TestUpdateItemQuantity:
    def test_sets_quantity(self, cart):
        _add(cart, quantity=1)
        cart.update_item_quantity("p1", 5)
        assert cart.items[0].quantity == 5
        assert any(isinstance(e, CartItemQuantityUpdated) for e in cart._events)

    def test_zero_removes_item(self, cart):
        _add(cart, product_id="p1")
        _add(cart, product_id="p2")
        cart.update_item_quantity("p1", 0)
        assert [str(item.product_id) for item in cart.items] == ["p2"]

    def test_zero_matches_remove(self):
        updated = Cart.create(customer_id="cust-001")
        removed = Cart.create(customer_id="cust-001")
        for cart in (updated, removed):
            _add(cart, product_id="p1", quantity=2)
            _add(cart, product_id="p2", unit_price=4.0)

        updated.update_item_quantity("p1", 0)
        removed.remove_item("p1")

        assert updated.snapshot() | {"cart_id": None} == removed.snapshot() | {"cart_id": None}

    def test_unknown_product_is_noop(self, cart):
        _add(cart, quantity=2)
        cart._events.clear()

        cart.update_item_quantity("missing", 5)

        assert cart.items[0].quantity == 2
        assert cart._events == []


class TestRemoveItem:
    def test_removes_item(self, cart):
        _add(cart, product_id="p1")
        _add(cart, product_id="p2")
        cart.remove_item("p1")
        assert [str(item.product_id) for item in cart.items] == ["p2"]
        assert any(isinstance(e, CartItemRemoved) for e in cart._events)

    def test_removing_last_item_unbinds_business(self, cart):
        _add(cart, product_id="p1")
        cart.remove_item("p1")
        assert cart.is_empty
        assert cart.business_id is None
        assert cart.business_name is None

    def test_unknown_product_is_noop(self, cart):
        _add(cart, product_id="p1")
        cart._events.clear()

        cart.remove_item("missing")

        assert len(cart.items) == 1
        assert cart._events == []


class TestDeliveryAddress:
    def test_set_from_dict(self, cart):
        cart.set_delivery_address({"street": "1 Market St", "city": "San Francisco", "zip_code": "94105"})
        assert cart.delivery_address.city == "San Francisco"
        assert cart.snapshot()["delivery_address"]["zip_code"] == "94105"

    def test_set_then_remove(self, cart):
        cart.set_delivery_address({"street": "1 Market St", "city": "San Francisco", "zip_code": "94105"})
        cart.set_delivery_address(None)

        assert cart.delivery_address is None
        assert cart.snapshot()["delivery_address"] is None

        address_events = [e for e in cart._events if isinstance(e, CartDeliveryAddressSet)]
        assert len(address_events) == 2
        assert address_events[-1].address is None


class TestClear:
    def test_clear_resets_everything(self, cart):
        _add(cart, quantity=2)
        cart.set_delivery_fee(3.0)
        cart.apply_coupon("SAVE5", 5.0)
        cart.set_delivery_address({"street": "1 Market St", "city": "San Francisco", "zip_code": "94105"})
        cart.set_delivery_instructions("Ring twice")

        cart.clear()

        assert cart.is_empty
        assert cart.business_id is None
        assert cart.business_name is None
        assert cart.coupon_code is None
        assert cart.delivery_address is None
        assert cart.delivery_instructions is None
        assert (cart.subtotal, cart.tax, cart.delivery_fee, cart.discount, cart.total) == (0.0, 0.0, 0.0, 0.0, 0.0)
        assert any(isinstance(e, CartCleared) for e in cart._events)


class TestNormalizeOptions:
    def test_none(self):
        assert normalize_options(None) == []

    def test_missing_price_defaults_to_zero(self):
        assert normalize_options([{"name": "Large"}]) == [{"name": "Large", "price": 0.0}]
