"""Cart item management — commands and handler."""

import json

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from delivery.cart.cart import Cart
from delivery.domain import delivery


@delivery.command(part_of="Cart")
class AddItemToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    business_id = Identifier(required=True)
    business_name = String(required=True, max_length=255)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(default=1)
    options = Text()  # JSON: list of {name, price}


@delivery.command(part_of="Cart")
class UpdateCartItemQuantity:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)  # 0 or less removes the item


@delivery.command(part_of="Cart")
class RemoveCartItem:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@delivery.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddItemToCart)
    def add_item_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        options = json.loads(command.options) if isinstance(command.options, str) else command.options
        cart.add_item(
            product_id=command.product_id,
            business_id=command.business_id,
            business_name=command.business_name,
            name=command.name,
            unit_price=command.unit_price,
            quantity=command.quantity,
            options=options,
        )
        repo.add(cart)

    @handle(UpdateCartItemQuantity)
    def update_cart_item_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.update_item_quantity(
            product_id=command.product_id,
            quantity=command.quantity,
        )
        repo.add(cart)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.remove_item(product_id=command.product_id)
        repo.add(cart)
