"""Delivery details for a cart — fee, address and instructions."""

import json

from protean import handle
from protean.fields import Float, Identifier, Text
from protean.utils.globals import current_domain

from delivery.cart.cart import Cart
from delivery.domain import delivery


@delivery.command(part_of="Cart")
class SetDeliveryFee:
    """Set the fee charged for delivering the cart, e.g. from the business or distance."""

    cart_id = Identifier(required=True)
    delivery_fee = Float(required=True, min_value=0.0)


@delivery.command(part_of="Cart")
class SetDeliveryAddress:
    cart_id = Identifier(required=True)
    address = Text()  # JSON: address dict, empty to remove it


@delivery.command(part_of="Cart")
class SetDeliveryInstructions:
    cart_id = Identifier(required=True)
    instructions = Text()


@delivery.command_handler(part_of=Cart)
class CartDeliveryDetailsHandler:
    @handle(SetDeliveryFee)
    def set_delivery_fee(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.set_delivery_fee(command.delivery_fee)
        repo.add(cart)

    @handle(SetDeliveryAddress)
    def set_delivery_address(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        address = json.loads(command.address) if command.address else None
        cart.set_delivery_address(address)
        repo.add(cart)

    @handle(SetDeliveryInstructions)
    def set_delivery_instructions(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.set_delivery_instructions(command.instructions)
        repo.add(cart)
