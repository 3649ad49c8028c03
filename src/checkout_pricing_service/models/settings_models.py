"""Rate settings model.

RateSettings is the admin-editable configuration read once per checkout. Each
checkout works from a frozen snapshot, and the earnings percentage in force is
copied onto every order it creates.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from checkout_pricing_service.models.money import to_money
from checkout_pricing_service.models.order_models import PaymentMethod

SETTINGS_ID = "default"

DEFAULT_BASE_DELIVERY_FEE = Decimal("25.00")
DEFAULT_PER_KM_RATE = Decimal("15.00")
DEFAULT_CONVENIENCE_FEE = Decimal("10.00")
DEFAULT_MULTI_MERCHANT_FEE = Decimal("20.00")
DEFAULT_APP_EARNINGS_PERCENTAGE = Decimal("50")
DEFAULT_MAX_MERCHANTS_PER_ORDER = 2


class RateSettings(BaseModel):
    """System-wide pricing rates.

    Every field has a default so a partially configured deployment still prices
    orders. Stored in DynamoDB as a single item keyed by ``settings_id``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_delivery_fee: Decimal = Field(
        default=DEFAULT_BASE_DELIVERY_FEE, description="Fee for the first kilometer", ge=0
    )
    per_km_rate: Decimal = Field(
        default=DEFAULT_PER_KM_RATE, description="Fee per whole kilometer after the first", ge=0
    )
    convenience_fee: Decimal = Field(
        default=DEFAULT_CONVENIENCE_FEE, description="Per sub-order fee paid to the rider", ge=0
    )
    show_convenience_fee: bool = Field(default=True, description="Charge the convenience fee")
    multi_merchant_fee: Decimal = Field(
        default=DEFAULT_MULTI_MERCHANT_FEE,
        description="Fee per additional merchant in one checkout",
        ge=0,
    )
    app_earnings_percentage: Decimal = Field(
        default=DEFAULT_APP_EARNINGS_PERCENTAGE,
        description="Platform share (0-100) of delivery plus multi-merchant fees",
        ge=0,
        le=100,
    )
    max_merchants_per_order: int = Field(default=DEFAULT_MAX_MERCHANTS_PER_ORDER, ge=1)
    allow_multi_merchant_checkout: bool = Field(default=True)
    require_delivery_coordinates: bool = Field(default=False)
    enabled_payment_methods: list[PaymentMethod] = Field(
        default_factory=lambda: list(PaymentMethod)
    )
    updated_at: datetime | None = None

    @field_validator("base_delivery_fee", "per_km_rate", "convenience_fee", "multi_merchant_fee")
    @classmethod
    def quantize_fee(cls, v: Decimal) -> Decimal:
        """Store fees in whole cents."""
        return to_money(v)

    @property
    def effective_max_merchants(self) -> int:
        """Merchant cap actually enforced at checkout."""
        if not self.allow_multi_merchant_checkout:
            return 1
        return self.max_merchants_per_order

    @property
    def effective_convenience_fee(self) -> Decimal:
        return self.convenience_fee if self.show_convenience_fee else to_money(0)

    def is_payment_method_enabled(self, method: PaymentMethod) -> bool:
        return method in self.enabled_payment_methods

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "settings_id": SETTINGS_ID,
            "base_delivery_fee": self.base_delivery_fee,
            "per_km_rate": self.per_km_rate,
            "convenience_fee": self.convenience_fee,
            "show_convenience_fee": self.show_convenience_fee,
            "multi_merchant_fee": self.multi_merchant_fee,
            "app_earnings_percentage": self.app_earnings_percentage,
            "max_merchants_per_order": self.max_merchants_per_order,
            "allow_multi_merchant_checkout": self.allow_multi_merchant_checkout,
            "require_delivery_coordinates": self.require_delivery_coordinates,
            "enabled_payment_methods": [m.value for m in self.enabled_payment_methods],
        }

        if self.updated_at is not None:
            item["updated_at"] = self.updated_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "RateSettings":
        """Create RateSettings from a DynamoDB item.

        Fields missing from the item keep their defaults.

        Args:
            item: DynamoDB item dictionary

        Returns:
            RateSettings: Parsed model instance
        """
        data: dict[str, Any] = {}

        for name in (
            "base_delivery_fee",
            "per_km_rate",
            "convenience_fee",
            "multi_merchant_fee",
            "app_earnings_percentage",
        ):
            if item.get(name) is not None:
                data[name] = Decimal(str(item[name]))

        for name in (
            "show_convenience_fee",
            "allow_multi_merchant_checkout",
            "require_delivery_coordinates",
        ):
            if item.get(name) is not None:
                data[name] = bool(item[name])

        if item.get("max_merchants_per_order") is not None:
            data["max_merchants_per_order"] = int(item["max_merchants_per_order"])

        if item.get("enabled_payment_methods") is not None:
            data["enabled_payment_methods"] = [
                PaymentMethod(m) for m in item["enabled_payment_methods"]
            ]

        if item.get("updated_at"):
            data["updated_at"] = datetime.fromisoformat(item["updated_at"])

        return cls(**data)
