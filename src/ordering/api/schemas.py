"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), kept separate from
internal commands and aggregates.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    item_ref: str
    quantity: int
    size: str = ""


class OrderItemSchema(BaseModel):
    item_ref: str
    quantity: int
    size: str = ""
    unit_price: int


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    item_ref: str
    quantity: int = Field(ge=1, default=1)
    size: str = ""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "item_ref": "sku-kurta-001",
                    "quantity": 2,
                    "size": "M",
                }
            ]
        }
    }


class UpdateCartLineRequest(BaseModel):
    quantity: int = Field(ge=1)
    size: str = ""
    current_size: str | None = Field(
        default=None,
        description="Size of the line being changed, when the item sits in the cart in more than one size",
    )


class ApplyReferralRequest(BaseModel):
    referral_code: str


class CheckoutRequest(BaseModel):
    address_id: str
    payment_method: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "address_id": "addr-001",
                    "payment_method": "UPI",
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class VerifyPaymentRequest(BaseModel):
    gateway_payment_id: str
    signature: str


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=255)


class UpdateOrderStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartResponse(BaseModel):
    customer_id: str
    lines: list[CartLineSchema] = []
    referral_code: str | None = None


class CartTotalResponse(BaseModel):
    total_amount: int
    referral_discount: int
    wallet_redemption: int
    discount: int
    payable_amount: int
    items: list[OrderItemSchema] = []


class OrderResponse(BaseModel):
    id: str
    customer_id: str
    items: list[OrderItemSchema]
    address_id: str
    total_amount: int
    referral_discount: int
    wallet_redemption: int
    payable_amount: int
    currency: str
    payment_method: str
    payment_status: str
    fulfillment_status: str
    gateway_order_id: str
    gateway_payment_id: str | None = None
    referred_by: str | None = None
    cancelled_by: str | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderPageResponse(BaseModel):
    orders: list[OrderResponse]
    page: int
    page_size: int
    total: int
    total_pages: int
