"""Cart coupon management — commands and handler.

Coupon legitimacy is checked by whoever issues the command; the cart trusts
the discount amount it is given.
"""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from delivery.cart.cart import Cart
from delivery.domain import delivery


@delivery.command(part_of="Cart")
class ApplyCouponToCart:
    """Apply a coupon code and its discount amount to a cart."""

    cart_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=100)
    discount = Float(required=True, min_value=0.0)


@delivery.command(part_of="Cart")
class RemoveCouponFromCart:
    cart_id = Identifier(required=True)


@delivery.command_handler(part_of=Cart)
class CartCouponHandler:
    @handle(ApplyCouponToCart)
    def apply_coupon(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.apply_coupon(coupon_code=command.coupon_code, discount=command.discount)
        repo.add(cart)

    @handle(RemoveCouponFromCart)
    def remove_coupon(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.remove_coupon()
        repo.add(cart)
