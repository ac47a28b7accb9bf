"""Delivery address value object shared by carts and orders."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float, String

from delivery.domain import delivery


@delivery.value_object
class DeliveryAddress:
    """Where an order is delivered, optionally pinned on the map.

    Once copied onto an Order the address is frozen; later edits to the
    customer's saved addresses do not reach placed orders.
    """

    street = String(required=True, max_length=255)
    apartment = String(max_length=50)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    zip_code = String(required=True, max_length=20)
    instructions = String(max_length=500)
    latitude = Float(min_value=-90.0, max_value=90.0)
    longitude = Float(min_value=-180.0, max_value=180.0)

    @invariant.post
    def coordinates_must_be_complete(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValidationError({"coordinates": ["Both latitude and longitude are required"]})
