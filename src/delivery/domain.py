"""Delivery bounded context — Cart pricing, Orders and delivery estimates.

Handles the single-business shopping cart and its derived totals, the order
placed from a cart snapshot together with its status lifecycle, and the
straight-line distance/ETA helpers used for delivery estimates.
"""

import structlog
from protean.domain import Domain

delivery = Domain(name="delivery")

logger = structlog.get_logger(__name__)
