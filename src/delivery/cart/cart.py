"""Cart aggregate (CQRS) — the business-scoped basket a customer fills before checkout.

A cart is bound to at most one business at a time. Adding an item from a
different business starts a new order there: every item already in the cart
is discarded. Pricing is derived, never edited directly:

    subtotal = sum(unit_price * quantity)      # option add-on prices excluded
    tax      = subtotal * TAX_RATE
    total    = subtotal + tax + delivery_fee - discount

Totals are recomputed after every mutation that can affect them. Lookups by a
product id that is not in the cart are no-ops rather than errors.
"""

import json
from datetime import UTC, datetime

from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from delivery.cart.events import (
    CartBusinessSwitched,
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartDeliveryAddressSet,
    CartDeliveryFeeSet,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from delivery.domain import delivery
from delivery.shared.address import DeliveryAddress
from delivery.utils.logging import get_logger

logger = get_logger(__name__)

TAX_RATE = 0.08


def normalize_options(options):
    """Return selected options as a list of ``{"name", "price"}`` dicts, price defaulting to 0."""
    return [{"name": option["name"], "price": option.get("price") or 0.0} for option in options or []]


@delivery.entity(part_of="Cart")
class CartLineItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    options = Text()  # JSON: list of {name, price}

    @property
    def selected_options(self):
        return json.loads(self.options) if self.options else []

    def to_snapshot(self):
        return {
            "product_id": str(self.product_id),
            "name": self.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "options": self.selected_options,
        }


@delivery.aggregate
class Cart:
    customer_id = Identifier()
    session_id = String(max_length=255)
    items = HasMany(CartLineItem)
    business_id = Identifier()
    business_name = String(max_length=255)
    delivery_fee = Float(default=0.0, min_value=0.0)
    coupon_code = String(max_length=100)
    discount = Float(default=0.0, min_value=0.0)
    delivery_address = ValueObject(DeliveryAddress)
    delivery_instructions = Text()
    subtotal = Float(default=0.0)
    tax = Float(default=0.0)
    total = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id=None, session_id=None):
        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            session_id=session_id,
            delivery_fee=0.0,
            discount=0.0,
            subtotal=0.0,
            tax=0.0,
            total=0.0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def _recalculate_totals(self):
        self.subtotal = sum(item.unit_price * item.quantity for item in self.items)
        self.tax = self.subtotal * TAX_RATE
        self.total = self.subtotal + self.tax + (self.delivery_fee or 0.0) - (self.discount or 0.0)
        self.updated_at = datetime.now(UTC)

    def _find_item(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, business_id, business_name, name, unit_price, quantity=1, options=None):
        """Add an item, switching the cart to the item's business if needed."""
        if quantity is None or quantity < 1:
            logger.warning(
                "Ignoring cart item with non-positive quantity",
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity=quantity,
            )
            return

        new_item = CartLineItem(
            product_id=product_id,
            name=name,
            unit_price=unit_price,
            quantity=quantity,
            options=json.dumps(normalize_options(options)),
        )

        if not self.items or str(self.business_id) != str(business_id):
            discarded = len(self.items)
            previous_business_id = self.business_id
            for item in list(self.items):
                self.remove_items(item)

            self.add_items(new_item)
            self.business_id = business_id
            self.business_name = business_name

            if discarded:
                logger.info(
                    "Cart switched business, previous items discarded",
                    cart_id=str(self.id),
                    previous_business_id=str(previous_business_id),
                    business_id=str(business_id),
                    discarded_item_count=discarded,
                )
                self.raise_(
                    CartBusinessSwitched(
                        cart_id=str(self.id),
                        previous_business_id=str(previous_business_id) if previous_business_id else None,
                        business_id=str(business_id),
                        discarded_item_count=discarded,
                    )
                )
        else:
            existing = self._find_item(product_id)
            if existing:
                existing.quantity += quantity
            else:
                self.add_items(new_item)

        self._recalculate_totals()

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                business_id=str(business_id),
                quantity=quantity,
                new_subtotal=self.subtotal,
                new_total=self.total,
            )
        )

    def update_item_quantity(self, product_id, quantity):
        """Set an item's quantity; zero or less removes the item."""
        item = self._find_item(product_id)
        if item is None:
            logger.debug("Quantity update for product not in cart", cart_id=str(self.id), product_id=str(product_id))
            return

        if quantity <= 0:
            self.remove_item(product_id)
            return

        previous_quantity = item.quantity
        item.quantity = quantity
        self._recalculate_totals()

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
                new_total=self.total,
            )
        )

    def remove_item(self, product_id):
        """Remove an item; an emptied cart is no longer bound to a business."""
        item = self._find_item(product_id)
        if item is None:
            logger.debug("Removal of product not in cart", cart_id=str(self.id), product_id=str(product_id))
            return

        self.remove_items(item)
        if not self.items:
            self.business_id = None
            self.business_name = None

        self._recalculate_totals()

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
                new_total=self.total,
            )
        )

    def clear(self):
        """Reset the cart to its empty initial state, adjustments included."""
        for item in list(self.items):
            self.remove_items(item)

        self.business_id = None
        self.business_name = None
        self.delivery_fee = 0.0
        self.coupon_code = None
        self.discount = 0.0
        self.delivery_address = None
        self.delivery_instructions = None
        self._recalculate_totals()

        self.raise_(CartCleared(cart_id=str(self.id)))

    # -------------------------------------------------------------------
    # Adjustments
    # -------------------------------------------------------------------
    def apply_coupon(self, coupon_code, discount):
        """Apply a coupon. The discount has already been validated upstream."""
        self.coupon_code = coupon_code
        self.discount = discount
        self._recalculate_totals()

        self.raise_(
            CartCouponApplied(
                cart_id=str(self.id),
                coupon_code=coupon_code,
                discount=discount,
                new_total=self.total,
            )
        )

    def remove_coupon(self):
        previous_code = self.coupon_code
        self.coupon_code = None
        self.discount = 0.0
        self._recalculate_totals()

        self.raise_(
            CartCouponRemoved(
                cart_id=str(self.id),
                coupon_code=previous_code,
                new_total=self.total,
            )
        )

    def set_delivery_fee(self, fee):
        self.delivery_fee = fee
        self._recalculate_totals()

        self.raise_(
            CartDeliveryFeeSet(
                cart_id=str(self.id),
                delivery_fee=fee,
                new_total=self.total,
            )
        )

    # -------------------------------------------------------------------
    # Delivery details
    # -------------------------------------------------------------------
    def set_delivery_address(self, address):
        """Attach a delivery address, given as a DeliveryAddress or a dict of its fields.

        ``None`` removes the address.
        """
        if isinstance(address, dict):
            address = DeliveryAddress(**address)
        self.delivery_address = address
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartDeliveryAddressSet(
                cart_id=str(self.id),
                address=json.dumps(address.to_dict()) if address is not None else None,
            )
        )

    def set_delivery_instructions(self, instructions):
        self.delivery_instructions = instructions
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Read model
    # -------------------------------------------------------------------
    @property
    def is_empty(self):
        return not self.items

    def snapshot(self):
        """Checkout-time copy of the cart's contents and pricing."""
        return {
            "cart_id": str(self.id),
            "items": [item.to_snapshot() for item in self.items],
            "business_id": str(self.business_id) if self.business_id else None,
            "business_name": self.business_name,
            "subtotal": self.subtotal,
            "tax": self.tax,
            "delivery_fee": self.delivery_fee,
            "coupon_code": self.coupon_code,
            "discount": self.discount,
            "total": self.total,
            "delivery_address": self.delivery_address.to_dict() if self.delivery_address else None,
            "delivery_instructions": self.delivery_instructions,
        }
