"""Shared BDD fixtures and step definitions for the Delivery domain."""

import pytest
from delivery.cart.cart import Cart
from delivery.cart.events import (
    CartBusinessSwitched,
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartDeliveryFeeSet,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from delivery.order.events import OrderPlaced, OrderStatusChanged
from delivery.order.order import Order
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

# Map event name strings to classes for dynamic lookup in Then steps
_CART_EVENT_CLASSES = {
    "CartItemAdded": CartItemAdded,
    "CartBusinessSwitched": CartBusinessSwitched,
    "CartItemQuantityUpdated": CartItemQuantityUpdated,
    "CartItemRemoved": CartItemRemoved,
    "CartCleared": CartCleared,
    "CartCouponApplied": CartCouponApplied,
    "CartCouponRemoved": CartCouponRemoved,
    "CartDeliveryFeeSet": CartDeliveryFeeSet,
}

_ORDER_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "OrderStatusChanged": OrderStatusChanged,
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps — Cart
# ---------------------------------------------------------------------------
@given("an empty cart", target_fixture="cart")
def empty_cart():
    return Cart.create(customer_id="cust-001")


@given(
    parsers.cfparse('the cart holds {quantity:d} of "{product_id}" at {unit_price:g} from business "{business_id}"'),
    target_fixture="cart",
)
def cart_holding(cart, quantity, product_id, unit_price, business_id):
    cart.add_item(
        product_id=product_id,
        business_id=business_id,
        business_name=f"Business {business_id}",
        name=f"Product {product_id}",
        unit_price=unit_price,
        quantity=quantity,
    )
    cart._events.clear()
    return cart


# ---------------------------------------------------------------------------
# Given steps — Order
# ---------------------------------------------------------------------------
@given(parsers.cfparse('an order placed from the cart paid by "{payment_method}"'), target_fixture="order")
def order_from_cart(cart, payment_method):
    order = Order.create(cart.snapshot(), payment_method, customer_id="cust-001")
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps — Cart
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart subtotal is {amount:g}"))
def cart_subtotal_is(cart, amount):
    assert cart.subtotal == pytest.approx(amount)


@then(parsers.cfparse("the cart tax is {amount:g}"))
def cart_tax_is(cart, amount):
    assert cart.tax == pytest.approx(amount)


@then(parsers.cfparse("the cart total is {amount:g}"))
def cart_total_is(cart, amount):
    assert cart.total == pytest.approx(amount)


@then(parsers.cfparse("a {event_type} cart event is raised"))
def cart_event_raised(cart, event_type):
    event_cls = _CART_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in cart._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in cart._events]}"


@then("the action fails with a validation error")
def action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


# ---------------------------------------------------------------------------
# Then steps — Order
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse("an {event_type} order event is raised"))
def order_event_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert any(isinstance(e, event_cls) for e in order._events)
