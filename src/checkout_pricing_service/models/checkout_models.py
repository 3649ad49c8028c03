"""Checkout request and response models for the HTTP API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from checkout_pricing_service.models.cart_models import CartLineItem
from checkout_pricing_service.models.order_models import PaymentMethod, PricedOrder


class CheckoutRequest(BaseModel):
    """A customer's checkout of every cart line they hold.

    Lines may come from several restaurants. They are grouped into one
    sub-order per restaurant, in the order each restaurant first appears.
    """

    customer_id: str = Field(..., min_length=1)
    items: list[CartLineItem] = Field(default_factory=list)
    delivery_address: str = Field(default="", description="Free-form delivery address")
    delivery_latitude: float | None = Field(None, ge=-90, le=90)
    delivery_longitude: float | None = Field(None, ge=-180, le=180)
    phone_number: str = Field(default="", description="Contact number for the rider")
    payment_method: PaymentMethod = PaymentMethod.CASH
    customer_notes: str | None = None


class CheckoutQuoteResponse(BaseModel):
    """Priced checkout, persisted or not."""

    order_group_id: str | None
    merchant_count: int
    group_delivery_fee: Decimal
    group_distance_km: Decimal
    multi_merchant_fee_total: Decimal
    grand_total: Decimal
    orders: list[PricedOrder]


class CreatedOrderRef(BaseModel):
    order_id: str
    order_number: str
    restaurant_id: str
    total: Decimal


class CheckoutResponse(BaseModel):
    """Identifiers of the orders created by a checkout."""

    order_group_id: str | None
    grand_total: Decimal
    orders: list[CreatedOrderRef]
