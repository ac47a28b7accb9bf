"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from delivery.domain import delivery


@delivery.event(part_of="Order")
class OrderPlaced:
    """A customer checked out a cart and the order was placed with the business."""

    __version__ = 1

    order_id = Identifier(required=True)
    cart_id = Identifier()
    customer_id = Identifier()
    business_id = Identifier(required=True)
    business_name = String()
    item_count = Integer(required=True)
    total = Float(required=True)
    payment_method = String(required=True)
    delivery_address = Text()  # JSON: address dict
    placed_at = DateTime(required=True)
    estimated_delivery_time = DateTime(required=True)


@delivery.event(part_of="Order")
class OrderStatusChanged:
    """An order moved to a new status in its lifecycle."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    notes = String()
    changed_at = DateTime(required=True)
