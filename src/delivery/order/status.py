"""Order status updates — command and handler.

An update against an order id that does not exist is logged and ignored.
The handler returns whether an order was updated.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from delivery.domain import delivery
from delivery.order.order import Order
from delivery.utils.logging import get_logger

logger = get_logger(__name__)


@delivery.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    notes = String(max_length=500)


@delivery.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            logger.warning(
                "Status update for unknown order ignored",
                order_id=str(command.order_id),
                status=command.status,
            )
            return False

        order.update_status(command.status, notes=command.notes)
        repo.add(order)

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            status=order.status,
        )
        return True
