"""Pydantic request/response schemas for the Delivery API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class OptionSchema(BaseModel):
    name: str
    price: float = Field(ge=0, default=0.0)


class AddressSchema(BaseModel):
    street: str
    apartment: str | None = None
    city: str
    state: str | None = None
    zip_code: str
    instructions: str | None = None
    latitude: float | None = Field(ge=-90, le=90, default=None)
    longitude: float | None = Field(ge=-180, le=180, default=None)


class LineItemSchema(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    options: list[OptionSchema] = []


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    customer_id: str | None = None
    session_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "session_id": None,
                }
            ]
        }
    }


class AddItemRequest(BaseModel):
    product_id: str
    business_id: str
    business_name: str
    name: str
    unit_price: float = Field(ge=0)
    quantity: int = 1
    options: list[OptionSchema] = []

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "item-1",
                    "business_id": "business-001",
                    "business_name": "Burger Palace",
                    "name": "Chicken Burger",
                    "unit_price": 8.99,
                    "quantity": 2,
                    "options": [{"name": "Extra cheese", "price": 0.5}],
                }
            ]
        }
    }


class UpdateItemQuantityRequest(BaseModel):
    quantity: int  # 0 or less removes the item


class ApplyCouponRequest(BaseModel):
    coupon_code: str
    discount: float = Field(ge=0)


class SetDeliveryFeeRequest(BaseModel):
    delivery_fee: float = Field(ge=0)


class SetDeliveryInstructionsRequest(BaseModel):
    instructions: str | None = None


class CheckoutRequest(BaseModel):
    payment_method: str = "credit"


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class UpdateOrderStatusRequest(BaseModel):
    status: str
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "delivered",
                    "notes": "Left at door",
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartIdResponse(BaseModel):
    cart_id: str


class OrderIdResponse(BaseModel):
    order_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class CartResponse(BaseModel):
    cart_id: str
    items: list[LineItemSchema]
    business_id: str | None = None
    business_name: str | None = None
    subtotal: float
    tax: float
    delivery_fee: float
    coupon_code: str | None = None
    discount: float
    total: float
    delivery_address: AddressSchema | None = None
    delivery_instructions: str | None = None


class StatusChangeSchema(BaseModel):
    status: str
    timestamp: datetime
    notes: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    cart_id: str | None = None
    customer_id: str | None = None
    business_id: str
    business_name: str | None = None
    items: list[LineItemSchema]
    subtotal: float
    tax: float
    delivery_fee: float
    coupon_code: str | None = None
    discount: float
    total: float
    delivery_address: AddressSchema | None = None
    delivery_instructions: str | None = None
    payment_method: str
    status: str
    status_history: list[StatusChangeSchema]
    created_at: datetime
    estimated_delivery_time: datetime


class DistanceResponse(BaseModel):
    distance_km: float


class TravelTimeResponse(BaseModel):
    distance_km: float
    mode: str
    minutes: int
