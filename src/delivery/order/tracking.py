"""Order tracking: read access to placed orders."""

from protean.utils.globals import current_domain

from delivery.order.order import Order, parse_status


def get_order(order_id):
    """Load one order; raises ObjectNotFoundError when it does not exist."""
    return current_domain.repository_for(Order).get(order_id)


def list_orders(customer_id=None, business_id=None, status=None, limit=None, offset=0):
    """Orders newest first, optionally narrowed to a customer, a business and/or a status.

    Without a ``limit`` every matching order is returned; ``offset`` skips
    that many of the newest matches for paging.
    """
    criteria = {}
    if customer_id:
        criteria["customer_id"] = str(customer_id)
    if business_id:
        criteria["business_id"] = str(business_id)
    if status:
        criteria["status"] = parse_status(status).value

    query = current_domain.repository_for(Order)._dao.query
    if criteria:
        query = query.filter(**criteria)

    return query.order_by("-created_at").offset(offset).limit(limit).all().items
