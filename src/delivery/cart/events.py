"""Domain events for the Cart aggregate."""

from protean.fields import Float, Identifier, Integer, String, Text

from delivery.domain import delivery


@delivery.event(part_of="Cart")
class CartItemAdded:
    """A product was added to the cart, or its quantity topped up."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    business_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_subtotal = Float(required=True)
    new_total = Float(required=True)


@delivery.event(part_of="Cart")
class CartBusinessSwitched:
    """Items from a different business replaced everything in the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    previous_business_id = Identifier()
    business_id = Identifier(required=True)
    discarded_item_count = Integer(required=True)


@delivery.event(part_of="Cart")
class CartItemQuantityUpdated:
    """The quantity of a cart item was changed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    new_total = Float(required=True)


@delivery.event(part_of="Cart")
class CartItemRemoved:
    """An item was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    new_total = Float(required=True)


@delivery.event(part_of="Cart")
class CartCleared:
    """The cart was reset to its empty state."""

    __version__ = 1

    cart_id = Identifier(required=True)


@delivery.event(part_of="Cart")
class CartCouponApplied:
    """A coupon and its discount were applied to the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
    discount = Float(required=True)
    new_total = Float(required=True)


@delivery.event(part_of="Cart")
class CartCouponRemoved:
    """The applied coupon was taken off the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String()
    new_total = Float(required=True)


@delivery.event(part_of="Cart")
class CartDeliveryFeeSet:
    """The delivery fee charged for the cart changed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    delivery_fee = Float(required=True)
    new_total = Float(required=True)


@delivery.event(part_of="Cart")
class CartDeliveryAddressSet:
    """A delivery address was attached to the cart, or removed from it."""

    __version__ = 1

    cart_id = Identifier(required=True)
    address = Text()  # JSON: address dict, empty when removed
