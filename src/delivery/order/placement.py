"""Order placement — checkout command and handler.

Builds the order from a snapshot of the persisted cart. The cart itself is
left untouched so the customer can review it after checkout.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from delivery.cart.cart import Cart
from delivery.domain import delivery
from delivery.order.order import Order
from delivery.utils.logging import get_logger

logger = get_logger(__name__)


@delivery.command(part_of="Order")
class PlaceOrder:
    """Check out a cart with the chosen payment method."""

    cart_id = Identifier(required=True)
    payment_method = String(required=True, max_length=50)


@delivery.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = current_domain.repository_for(Cart).get(command.cart_id)
        order = Order.create(
            cart_snapshot=cart.snapshot(),
            payment_method=command.payment_method,
            cart_id=str(cart.id),
            customer_id=str(cart.customer_id) if cart.customer_id else None,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            cart_id=str(cart.id),
            business_id=str(order.business_id),
            total=order.total,
            payment_method=order.payment_method,
        )
        return str(order.id)
