"""Priced order models.

A PricedOrder is the persisted result of pricing one merchant's cart. Orders
created from the same multi-merchant checkout share an ``order_group_id``.
Stored in DynamoDB with ``order_id`` as partition key.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from checkout_pricing_service.models.cart_models import CartItem
from checkout_pricing_service.models.money import to_money

MONEY_FIELDS = (
    "subtotal",
    "markup",
    "delivery_fee",
    "multi_merchant_fee",
    "convenience_fee",
    "total",
    "app_earnings_amount",
    "rider_earnings_amount",
    "merchant_earnings_amount",
)


class PaymentMethod(str, Enum):
    """Payment methods accepted at checkout."""

    CASH = "cash"
    GCASH = "gcash"
    MAYA = "maya"
    CARD = "card"
    WALLET = "wallet"

    @classmethod
    def _missing_(cls, value: object) -> "PaymentMethod | None":
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "paymaya":
                return cls.MAYA
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class OrderStatus(str, Enum):
    """Fulfillment status of an order."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


class PricedOrder(BaseModel):
    """One merchant's priced sub-order.

    Monetary fields and the earnings snapshot are fixed at creation; only
    ``status`` changes afterwards (see ``with_status``).
    """

    model_config = ConfigDict(frozen=True)

    order_id: str = Field(..., description="Unique order identifier")
    order_number: str = Field(..., description="Human-readable order number")
    customer_id: str = Field(..., description="Customer who placed the order")
    restaurant_id: str = Field(..., description="Merchant fulfilling the order")
    restaurant_name: str = Field(..., description="Merchant display name")
    items: list[CartItem] = Field(..., min_length=1)

    subtotal: Decimal = Field(..., ge=0)
    markup_percent: Decimal = Field(..., ge=0)
    markup: Decimal = Field(..., ge=0)
    delivery_fee: Decimal = Field(..., ge=0)
    distance_km: Decimal = Field(default=Decimal("0.00"), ge=0)
    multi_merchant_fee: Decimal = Field(..., ge=0)
    convenience_fee: Decimal = Field(..., ge=0)
    total: Decimal = Field(..., ge=0)

    app_earnings_percentage_used: Decimal = Field(..., ge=0, le=100)
    app_earnings_amount: Decimal = Field(...)
    rider_earnings_amount: Decimal = Field(...)
    merchant_earnings_amount: Decimal = Field(...)

    order_group_id: str | None = Field(None, description="Shared id for multi-merchant groups")
    merchant_count: int = Field(default=1, ge=1)
    group_position: int = Field(default=0, ge=0)

    payment_method: PaymentMethod = PaymentMethod.CASH
    status: OrderStatus = OrderStatus.PENDING
    delivery_address: str = Field(..., min_length=1)
    delivery_latitude: float | None = None
    delivery_longitude: float | None = None
    phone_number: str = Field(..., min_length=1)
    customer_notes: str | None = None
    created_at: datetime

    @field_validator(*MONEY_FIELDS, "distance_km")
    @classmethod
    def quantize_money(cls, v: Decimal) -> Decimal:
        """Store every amount with exactly two fraction digits."""
        return to_money(v)

    @property
    def is_group_order(self) -> bool:
        return self.order_group_id is not None

    @property
    def combined_fees(self) -> Decimal:
        """Delivery fee plus multi-merchant fee, the pool split between app and rider."""
        return self.delivery_fee + self.multi_merchant_fee

    def with_status(self, status: OrderStatus) -> "PricedOrder":
        """Return a copy with a new fulfillment status and untouched pricing."""
        return self.model_copy(update={"status": status})

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "order_id": self.order_id,
            "order_number": self.order_number,
            "customer_id": self.customer_id,
            "restaurant_id": self.restaurant_id,
            "restaurant_name": self.restaurant_name,
            "items": [cart_item.to_dynamodb_item() for cart_item in self.items],
            "markup_percent": self.markup_percent,
            "distance_km": self.distance_km,
            "app_earnings_percentage_used": self.app_earnings_percentage_used,
            "merchant_count": self.merchant_count,
            "group_position": self.group_position,
            "payment_method": self.payment_method.value,
            "status": self.status.value,
            "delivery_address": self.delivery_address,
            "phone_number": self.phone_number,
            "created_at": self.created_at.isoformat(),
        }
        for name in MONEY_FIELDS:
            item[name] = getattr(self, name)

        # DynamoDB rejects floats, coordinates are stored as Decimal strings
        if self.delivery_latitude is not None and self.delivery_longitude is not None:
            item["delivery_latitude"] = Decimal(str(self.delivery_latitude))
            item["delivery_longitude"] = Decimal(str(self.delivery_longitude))

        if self.order_group_id is not None:
            item["order_group_id"] = self.order_group_id

        if self.customer_notes is not None:
            item["customer_notes"] = self.customer_notes

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "PricedOrder":
        """Create PricedOrder from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            PricedOrder: Parsed model instance
        """
        data: dict[str, Any] = {
            "order_id": item["order_id"],
            "order_number": item["order_number"],
            "customer_id": item["customer_id"],
            "restaurant_id": item["restaurant_id"],
            "restaurant_name": item["restaurant_name"],
            "items": [CartItem.from_dynamodb_item(i) for i in item["items"]],
            "markup_percent": Decimal(str(item["markup_percent"])),
            "distance_km": Decimal(str(item.get("distance_km", "0"))),
            "app_earnings_percentage_used": Decimal(str(item["app_earnings_percentage_used"])),
            "merchant_count": int(item.get("merchant_count", 1)),
            "group_position": int(item.get("group_position", 0)),
            "payment_method": PaymentMethod(item["payment_method"]),
            "status": OrderStatus(item.get("status", OrderStatus.PENDING.value)),
            "delivery_address": item["delivery_address"],
            "phone_number": item["phone_number"],
            "created_at": datetime.fromisoformat(item["created_at"]),
            "order_group_id": item.get("order_group_id"),
            "customer_notes": item.get("customer_notes"),
        }
        for name in MONEY_FIELDS:
            data[name] = Decimal(str(item[name]))

        if "delivery_latitude" in item and "delivery_longitude" in item:
            data["delivery_latitude"] = float(item["delivery_latitude"])
            data["delivery_longitude"] = float(item["delivery_longitude"])

        return cls(**data)
