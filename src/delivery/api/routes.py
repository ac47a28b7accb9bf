"""FastAPI routes for the Delivery domain — carts, orders and delivery estimates."""

import json

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from delivery.api.schemas import (
    AddItemRequest,
    AddressSchema,
    ApplyCouponRequest,
    CartIdResponse,
    CartResponse,
    CheckoutRequest,
    CreateCartRequest,
    DistanceResponse,
    OrderIdResponse,
    OrderResponse,
    SetDeliveryFeeRequest,
    SetDeliveryInstructionsRequest,
    StatusResponse,
    TravelTimeResponse,
    UpdateItemQuantityRequest,
    UpdateOrderStatusRequest,
)
from delivery.cart.cart import Cart
from delivery.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from delivery.cart.delivery_details import SetDeliveryAddress, SetDeliveryFee, SetDeliveryInstructions
from delivery.cart.items import AddItemToCart, RemoveCartItem, UpdateCartItemQuantity
from delivery.cart.management import ClearCart, CreateCart
from delivery.order.placement import PlaceOrder
from delivery.order.status import UpdateOrderStatus
from delivery.order.tracking import get_order, list_orders
from delivery.shared.geo import GeoPoint, resolve_travel_mode


def _order_response(order):
    return OrderResponse(
        order_id=str(order.id),
        cart_id=str(order.cart_id) if order.cart_id else None,
        customer_id=str(order.customer_id) if order.customer_id else None,
        business_id=str(order.business_id),
        business_name=order.business_name,
        items=[item.to_snapshot() for item in order.items],
        subtotal=order.subtotal,
        tax=order.tax,
        delivery_fee=order.delivery_fee,
        coupon_code=order.coupon_code,
        discount=order.discount,
        total=order.total,
        delivery_address=order.delivery_address.to_dict() if order.delivery_address else None,
        delivery_instructions=order.delivery_instructions,
        payment_method=order.payment_method,
        status=order.status,
        status_history=[
            {"status": entry.status, "timestamp": entry.timestamp, "notes": entry.notes} for entry in order.history
        ],
        created_at=order.created_at,
        estimated_delivery_time=order.estimated_delivery_time,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("", status_code=201, response_model=CartIdResponse)
async def create_cart(body: CreateCartRequest) -> CartIdResponse:
    command = CreateCart(
        customer_id=body.customer_id,
        session_id=body.session_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str) -> CartResponse:
    cart = current_domain.repository_for(Cart).get(cart_id)
    return CartResponse(**cart.snapshot())


@cart_router.post("/{cart_id}/items", response_model=StatusResponse)
async def add_cart_item(cart_id: str, body: AddItemRequest) -> StatusResponse:
    command = AddItemToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        business_id=body.business_id,
        business_name=body.business_name,
        name=body.name,
        unit_price=body.unit_price,
        quantity=body.quantity,
        options=json.dumps([option.model_dump() for option in body.options]),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/{cart_id}/items/{product_id}", response_model=StatusResponse)
async def update_cart_item_quantity(cart_id: str, product_id: str, body: UpdateItemQuantityRequest) -> StatusResponse:
    command = UpdateCartItemQuantity(
        cart_id=cart_id,
        product_id=product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/items/{product_id}", response_model=StatusResponse)
async def remove_cart_item(cart_id: str, product_id: str) -> StatusResponse:
    command = RemoveCartItem(
        cart_id=cart_id,
        product_id=product_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.post("/{cart_id}/clear", response_model=StatusResponse)
async def clear_cart(cart_id: str) -> StatusResponse:
    current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return StatusResponse()


@cart_router.post("/{cart_id}/coupon", response_model=StatusResponse)
async def apply_cart_coupon(cart_id: str, body: ApplyCouponRequest) -> StatusResponse:
    command = ApplyCouponToCart(
        cart_id=cart_id,
        coupon_code=body.coupon_code,
        discount=body.discount,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/coupon", response_model=StatusResponse)
async def remove_cart_coupon(cart_id: str) -> StatusResponse:
    current_domain.process(RemoveCouponFromCart(cart_id=cart_id), asynchronous=False)
    return StatusResponse()


@cart_router.put("/{cart_id}/delivery-fee", response_model=StatusResponse)
async def set_delivery_fee(cart_id: str, body: SetDeliveryFeeRequest) -> StatusResponse:
    command = SetDeliveryFee(
        cart_id=cart_id,
        delivery_fee=body.delivery_fee,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/{cart_id}/delivery-address", response_model=StatusResponse)
async def set_delivery_address(cart_id: str, body: AddressSchema) -> StatusResponse:
    command = SetDeliveryAddress(
        cart_id=cart_id,
        address=json.dumps(body.model_dump(exclude_none=True)),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/delivery-address", response_model=StatusResponse)
async def remove_delivery_address(cart_id: str) -> StatusResponse:
    current_domain.process(SetDeliveryAddress(cart_id=cart_id), asynchronous=False)
    return StatusResponse()


@cart_router.put("/{cart_id}/delivery-instructions", response_model=StatusResponse)
async def set_delivery_instructions(cart_id: str, body: SetDeliveryInstructionsRequest) -> StatusResponse:
    command = SetDeliveryInstructions(
        cart_id=cart_id,
        instructions=body.instructions,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.post("/{cart_id}/checkout", status_code=201, response_model=OrderIdResponse)
async def checkout_cart(cart_id: str, body: CheckoutRequest) -> OrderIdResponse:
    command = PlaceOrder(
        cart_id=cart_id,
        payment_method=body.payment_method,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=list[OrderResponse])
async def list_all_orders(
    customer_id: str | None = None,
    business_id: str | None = None,
    status: str | None = None,
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
) -> list[OrderResponse]:
    orders = list_orders(
        customer_id=customer_id,
        business_id=business_id,
        status=status,
        limit=limit,
        offset=offset,
    )
    return [_order_response(order) for order in orders]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order_detail(order_id: str) -> OrderResponse:
    return _order_response(get_order(order_id))


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> StatusResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        notes=body.notes,
    )
    updated = current_domain.process(command, asynchronous=False)
    return StatusResponse(status="ok" if updated else "ignored")


# ---------------------------------------------------------------------------
# Geo Router
# ---------------------------------------------------------------------------
geo_router = APIRouter(prefix="/geo", tags=["geo"])


def _points(from_lat, from_lng, to_lat, to_lng):
    return (
        GeoPoint(latitude=from_lat, longitude=from_lng),
        GeoPoint(latitude=to_lat, longitude=to_lng),
    )


@geo_router.get("/distance", response_model=DistanceResponse)
async def distance(
    from_lat: float = Query(...),
    from_lng: float = Query(...),
    to_lat: float = Query(...),
    to_lng: float = Query(...),
) -> DistanceResponse:
    origin, destination = _points(from_lat, from_lng, to_lat, to_lng)
    return DistanceResponse(distance_km=origin.distance_to(destination))


@geo_router.get("/eta", response_model=TravelTimeResponse)
async def travel_time(
    from_lat: float = Query(...),
    from_lng: float = Query(...),
    to_lat: float = Query(...),
    to_lng: float = Query(...),
    mode: str = "driving",
) -> TravelTimeResponse:
    origin, destination = _points(from_lat, from_lng, to_lat, to_lng)
    travel_mode = resolve_travel_mode(mode)
    return TravelTimeResponse(
        distance_km=origin.distance_to(destination),
        mode=travel_mode.value,
        minutes=origin.travel_time_to(destination, travel_mode),
    )
