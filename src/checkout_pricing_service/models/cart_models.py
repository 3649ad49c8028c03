"""Cart models.

Carts are ephemeral inputs to pricing. They arrive from the client as a flat list
of line items and are grouped into one MerchantCart per restaurant before checkout.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from checkout_pricing_service.models.money import ZERO, to_money


class Coordinates(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    @classmethod
    def from_optional(cls, latitude: float | None, longitude: float | None) -> "Coordinates | None":
        """Build coordinates only when both parts are present."""
        if latitude is None or longitude is None:
            return None
        return cls(latitude=latitude, longitude=longitude)


class SelectedOption(BaseModel):
    """A chosen option value (size, add-on) with its additive price delta."""

    model_config = ConfigDict(frozen=True)

    option_type_name: str
    value_name: str
    price: Decimal = Field(default=ZERO, ge=0)

    @field_validator("price")
    @classmethod
    def quantize_price(cls, v: Decimal) -> Decimal:
        return to_money(v)


class CartItem(BaseModel):
    """A single line in a merchant cart."""

    menu_item_id: str = Field(..., description="Menu item identifier")
    name: str = Field(..., description="Menu item name at time of ordering")
    unit_base_price: Decimal = Field(..., description="Base price before options", ge=0)
    quantity: int = Field(..., description="Units ordered", ge=1)
    selected_options: list[SelectedOption] = Field(default_factory=list)
    special_instructions: str | None = None

    @field_validator("unit_base_price")
    @classmethod
    def quantize_price(cls, v: Decimal) -> Decimal:
        return to_money(v)

    @property
    def unit_price(self) -> Decimal:
        """Base price plus every selected option delta."""
        return self.unit_base_price + sum((o.price for o in self.selected_options), ZERO)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def option_signature(self) -> tuple[tuple[str, str], ...]:
        """Order-insensitive identity of the selected options."""
        return tuple(sorted((o.option_type_name, o.value_name) for o in self.selected_options))

    def to_dynamodb_item(self) -> dict[str, Any]:
        item: dict[str, Any] = {
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "unit_base_price": self.unit_base_price,
            "quantity": self.quantity,
            "selected_options": [
                {
                    "option_type_name": o.option_type_name,
                    "value_name": o.value_name,
                    "price": o.price,
                }
                for o in self.selected_options
            ],
        }
        if self.special_instructions is not None:
            item["special_instructions"] = self.special_instructions
        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "CartItem":
        return cls(
            menu_item_id=item["menu_item_id"],
            name=item["name"],
            unit_base_price=Decimal(str(item["unit_base_price"])),
            quantity=int(item["quantity"]),
            selected_options=[
                SelectedOption(
                    option_type_name=o["option_type_name"],
                    value_name=o["value_name"],
                    price=Decimal(str(o.get("price", "0"))),
                )
                for o in item.get("selected_options", [])
            ],
            special_instructions=item.get("special_instructions"),
        )


class CartLineItem(CartItem):
    """A cart line tagged with the restaurant it was added from."""

    restaurant_id: str = Field(..., description="Restaurant this item belongs to")
    restaurant_name: str = Field(..., description="Restaurant display name")
    markup_percent: Decimal = Field(default=Decimal("15"), ge=0, le=100)

    def to_cart_item(self) -> CartItem:
        """Drop the restaurant tags."""
        return CartItem(
            menu_item_id=self.menu_item_id,
            name=self.name,
            unit_base_price=self.unit_base_price,
            quantity=self.quantity,
            selected_options=list(self.selected_options),
            special_instructions=self.special_instructions,
        )


class MerchantCart(BaseModel):
    """All items a customer is buying from one restaurant."""

    restaurant_id: str
    restaurant_name: str
    markup_percent: Decimal = Field(default=Decimal("15"), ge=0, le=100)
    items: list[CartItem] = Field(default_factory=list)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)

    @property
    def coordinates(self) -> Coordinates | None:
        return Coordinates.from_optional(self.latitude, self.longitude)

    @property
    def subtotal(self) -> Decimal:
        """Sum of line totals including option deltas, in whole cents."""
        return to_money(sum((item.line_total for item in self.items), ZERO))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)
