"""Order aggregate (CQRS) — a checked-out cart tracked through delivery.

An Order is a frozen copy of the cart at checkout (items, pricing, address)
plus a status that moves through the delivery lifecycle. Every status change
is appended to ``status_history``; entries are never edited or removed.

State Machine:
    PLACED → PREPARING → OUT_FOR_DELIVERY → DELIVERED
    any state → CANCELLED

DELIVERED and CANCELLED are terminal by intent only. Transitions are not
guarded: any status may follow any other, and moving out of a terminal status
is logged rather than refused. Unknown statuses and payment methods are
rejected.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from delivery.domain import delivery
from delivery.order.events import OrderPlaced, OrderStatusChanged
from delivery.shared.address import DeliveryAddress
from delivery.utils.logging import get_logger

logger = get_logger(__name__)

ESTIMATED_DELIVERY_WINDOW = timedelta(minutes=30)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PLACED = "placed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    CREDIT = "credit"
    PAYPAL = "paypal"
    CASH = "cash"


_TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


def parse_status(status):
    try:
        return OrderStatus(status)
    except ValueError:
        raise ValidationError(
            {"status": [f"Unknown order status: {status}. Expected one of: {', '.join(s.value for s in OrderStatus)}"]}
        ) from None


def _parse_payment_method(payment_method):
    try:
        return PaymentMethod(payment_method)
    except ValueError:
        raise ValidationError(
            {
                "payment_method": [
                    f"Unknown payment method: {payment_method}. "
                    f"Expected one of: {', '.join(m.value for m in PaymentMethod)}"
                ]
            }
        ) from None


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@delivery.entity(part_of="Order")
class OrderItem:
    """A line item copied from the cart at checkout; prices are locked from then on."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    options = Text()  # JSON: list of {name, price}

    def to_snapshot(self):
        return {
            "product_id": str(self.product_id),
            "name": self.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "options": json.loads(self.options) if self.options else [],
        }


@delivery.entity(part_of="Order")
class StatusChange:
    """One entry of the order's status audit trail."""

    status = String(required=True, choices=OrderStatus)
    notes = String(max_length=500)
    timestamp = DateTime(required=True)
    sequence = Integer(required=True, min_value=1)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@delivery.aggregate
class Order:
    cart_id = Identifier()
    customer_id = Identifier()
    business_id = Identifier(required=True)
    business_name = String(max_length=255)
    items = HasMany(OrderItem)
    subtotal = Float(default=0.0)
    tax = Float(default=0.0)
    delivery_fee = Float(default=0.0)
    coupon_code = String(max_length=100)
    discount = Float(default=0.0)
    total = Float(default=0.0)
    delivery_address = ValueObject(DeliveryAddress)
    delivery_instructions = Text()
    payment_method = String(required=True, choices=PaymentMethod)
    status = String(choices=OrderStatus, default=OrderStatus.PLACED.value)
    status_history = HasMany(StatusChange)
    created_at = DateTime()
    estimated_delivery_time = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, cart_snapshot, payment_method, cart_id=None, customer_id=None):
        """Place an order from a cart snapshot (see ``Cart.snapshot``).

        The snapshot is copied, never mutated.

        Args:
            cart_snapshot: Dict with items, business_id, business_name,
                subtotal, tax, delivery_fee, discount, coupon_code, total,
                delivery_address and delivery_instructions.
            payment_method: One of the PaymentMethod values.
            cart_id: The cart the order was checked out from, if any.
            customer_id: The customer placing the order, if known.
        """
        items_data = cart_snapshot.get("items") or []
        if not items_data:
            raise ValidationError({"items": ["Cannot place an order for an empty cart"]})
        method = _parse_payment_method(payment_method)

        now = datetime.now(UTC)
        address_data = cart_snapshot.get("delivery_address")
        address = DeliveryAddress(**address_data) if address_data else None

        order = cls(
            cart_id=cart_id or cart_snapshot.get("cart_id"),
            customer_id=customer_id,
            business_id=cart_snapshot["business_id"],
            business_name=cart_snapshot.get("business_name"),
            subtotal=cart_snapshot.get("subtotal", 0.0),
            tax=cart_snapshot.get("tax", 0.0),
            delivery_fee=cart_snapshot.get("delivery_fee", 0.0),
            coupon_code=cart_snapshot.get("coupon_code"),
            discount=cart_snapshot.get("discount", 0.0),
            total=cart_snapshot.get("total", 0.0),
            delivery_address=address,
            delivery_instructions=cart_snapshot.get("delivery_instructions"),
            payment_method=method.value,
            status=OrderStatus.PLACED.value,
            created_at=now,
            estimated_delivery_time=now + ESTIMATED_DELIVERY_WINDOW,
            updated_at=now,
        )
        for item_data in items_data:
            order.add_items(
                OrderItem(
                    product_id=item_data["product_id"],
                    name=item_data["name"],
                    unit_price=item_data["unit_price"],
                    quantity=item_data["quantity"],
                    options=json.dumps(item_data.get("options") or []),
                )
            )
        order.add_status_history(StatusChange(status=OrderStatus.PLACED.value, timestamp=now, sequence=1))

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                cart_id=str(order.cart_id) if order.cart_id else None,
                customer_id=str(customer_id) if customer_id else None,
                business_id=str(order.business_id),
                business_name=order.business_name,
                item_count=len(items_data),
                total=order.total,
                payment_method=method.value,
                delivery_address=json.dumps(address_data) if address_data else None,
                placed_at=now,
                estimated_delivery_time=order.estimated_delivery_time,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status lifecycle
    # -------------------------------------------------------------------
    @property
    def is_terminal(self):
        return OrderStatus(self.status) in _TERMINAL_STATUSES

    @property
    def history(self):
        """Status history in the order it was recorded."""
        return sorted(self.status_history or [], key=lambda entry: entry.sequence)

    def update_status(self, status, notes=None):
        """Move the order to ``status`` and append the change to its history."""
        target = parse_status(status)
        previous = OrderStatus(self.status)

        if self.is_terminal:
            logger.warning(
                "Order leaving terminal status",
                order_id=str(self.id),
                previous_status=previous.value,
                new_status=target.value,
            )

        now = datetime.now(UTC)
        self.status = target.value
        self.add_status_history(
            StatusChange(
                status=target.value,
                notes=notes,
                timestamp=now,
                sequence=len(self.status_history or []) + 1,
            )
        )
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous.value,
                new_status=target.value,
                notes=notes,
                changed_at=now,
            )
        )
