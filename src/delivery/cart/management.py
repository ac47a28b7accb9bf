"""Cart management — commands and handler.

Handles cart creation for a customer or session, and resetting a cart.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from delivery.cart.cart import Cart
from delivery.domain import delivery


@delivery.command(part_of="Cart")
class CreateCart:
    """Create an empty cart for a signed-in customer or an anonymous session."""

    customer_id = Identifier()
    session_id = String(max_length=255)


@delivery.command(part_of="Cart")
class ClearCart:
    """Reset a cart to its empty state, dropping fees, coupon and address."""

    cart_id = Identifier(required=True)


@delivery.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = Cart.create(
            customer_id=command.customer_id,
            session_id=command.session_id,
        )
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.clear()
        repo.add(cart)
