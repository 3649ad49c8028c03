"""Checkout pricing engine.

Turns one or more merchant carts into priced sub-orders. The engine is pure: it
reads nothing but its arguments and persists nothing. Callers must store the
resulting group atomically.

Fee assignment inside a multi-merchant group follows one fixed rule. The group
delivery fee and the multi-merchant fee are charged on the sub-order at index 0
of the caller's cart list, and every other sub-order carries zero for both. The
convenience fee is charged on every sub-order.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from checkout_pricing_service.models.cart_models import CartLineItem, Coordinates, MerchantCart
from checkout_pricing_service.models.money import ZERO, apply_percentage, to_money
from checkout_pricing_service.models.order_models import PaymentMethod, PricedOrder
from checkout_pricing_service.models.settings_models import RateSettings
from checkout_pricing_service.services.checkout_errors import (
    DuplicateMerchantError,
    EmptyCartError,
    MerchantCartMismatchError,
    MissingDeliveryCoordinatesError,
    MissingDeliveryDetailsError,
    PaymentMethodDisabledError,
    TooManyMerchantsError,
)
from checkout_pricing_service.services.delivery_fee_calculator import (
    DeliveryQuote,
    quote_delivery,
)
from checkout_pricing_service.services.revenue_splitter import split_revenue

logger = logging.getLogger(__name__)

FEE_CARRIER_INDEX = 0


@dataclass(frozen=True)
class DeliveryDetails:
    """Where and to whom a checkout is delivered."""

    customer_id: str
    delivery_address: str
    phone_number: str
    coordinates: Coordinates | None = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    customer_notes: str | None = None


@dataclass(frozen=True)
class CheckoutQuote:
    """Priced result of one checkout.

    Attributes:
        orders: Priced sub-orders in cart order; ``orders[0]`` carries the group fees
        order_group_id: Shared group id, None for a single merchant
        group_delivery_fee: Delivery fee charged once for the whole group
        group_distance_km: Distance to the farthest merchant
        multi_merchant_fee_total: Multi-merchant fee charged once for the group
        settings_snapshot: Rates the checkout was priced with
    """

    orders: list[PricedOrder]
    order_group_id: str | None
    group_delivery_fee: Decimal
    group_distance_km: Decimal
    multi_merchant_fee_total: Decimal
    settings_snapshot: RateSettings

    @property
    def merchant_count(self) -> int:
        return len(self.orders)

    @property
    def grand_total(self) -> Decimal:
        """What the customer pays across all sub-orders."""
        return sum((o.total for o in self.orders), ZERO)


def validate_checkout(
    carts: list[MerchantCart], details: DeliveryDetails, settings: RateSettings
) -> None:
    """Reject a checkout that cannot be priced.

    Raises:
        CheckoutValidationError: The subclass names the failed precondition
    """
    if not carts:
        raise EmptyCartError("Checkout contains no merchant carts")

    seen: set[str] = set()
    for cart in carts:
        if not cart.items:
            raise EmptyCartError(f"Cart for restaurant {cart.restaurant_id} is empty")
        if cart.restaurant_id in seen:
            raise DuplicateMerchantError(
                f"Restaurant {cart.restaurant_id} appears in more than one cart"
            )
        seen.add(cart.restaurant_id)

        # Tagged lines may be placed in a cart directly; their tag must match
        for item in cart.items:
            if isinstance(item, CartLineItem) and item.restaurant_id != cart.restaurant_id:
                raise MerchantCartMismatchError(
                    f"Item {item.menu_item_id} belongs to restaurant {item.restaurant_id}, "
                    f"not {cart.restaurant_id}"
                )

    max_merchants = settings.effective_max_merchants
    if len(carts) > max_merchants:
        raise TooManyMerchantsError(len(carts), max_merchants)

    if not details.delivery_address.strip() or not details.phone_number.strip():
        raise MissingDeliveryDetailsError("Delivery address and phone number are required")

    if details.coordinates is None and settings.require_delivery_coordinates:
        raise MissingDeliveryCoordinatesError("Delivery address coordinates are required")

    if not settings.is_payment_method_enabled(details.payment_method):
        raise PaymentMethodDisabledError(
            f"Payment method '{details.payment_method.value}' is not enabled"
        )


def multi_merchant_fee_for(merchant_count: int, settings: RateSettings) -> Decimal:
    """Multi-merchant fee for a checkout: one fee per merchant after the first."""
    if merchant_count < 2:
        return ZERO
    return to_money(settings.multi_merchant_fee * (merchant_count - 1))


def _order_number(created_at: datetime, position: int, grouped: bool) -> str:
    millis = int(created_at.timestamp() * 1000)
    if grouped:
        return f"EBD-{millis}-{position + 1}"
    return f"EBD-{millis}"


def price_checkout(
    carts: list[MerchantCart],
    details: DeliveryDetails,
    settings: RateSettings,
    *,
    order_group_id: str | None = None,
    created_at: datetime | None = None,
    id_factory: Callable[[], str] | None = None,
) -> CheckoutQuote:
    """Price a checkout of one or more merchant carts.

    Args:
        carts: Merchant carts; the first one carries the group delivery and
            multi-merchant fees
        details: Delivery address, contact and payment details
        settings: Rate snapshot to price with
        order_group_id: Group id to use for multi-merchant checkouts (generated if omitted)
        created_at: Creation timestamp for the orders (now if omitted)
        id_factory: Order id generator (uuid4 hex if omitted)

    Returns:
        CheckoutQuote with one PricedOrder per cart

    Raises:
        CheckoutValidationError: If the checkout violates a precondition
    """
    validate_checkout(carts, details, settings)

    created_at = created_at or datetime.now(UTC)
    new_id = id_factory or (lambda: uuid.uuid4().hex)
    merchant_count = len(carts)
    grouped = merchant_count > 1

    quotes: list[DeliveryQuote] = [
        quote_delivery(
            details.coordinates,
            cart.coordinates,
            settings.base_delivery_fee,
            settings.per_km_rate,
        )
        for cart in carts
    ]
    group_delivery_fee = max(q.fee for q in quotes)
    group_distance = max(q.distance_km for q in quotes)
    multi_merchant_fee_total = multi_merchant_fee_for(merchant_count, settings)
    convenience_fee = settings.effective_convenience_fee
    app_percentage = settings.app_earnings_percentage

    if grouped and order_group_id is None:
        order_group_id = uuid.uuid4().hex
    elif not grouped:
        order_group_id = None

    orders: list[PricedOrder] = []
    for position, cart in enumerate(carts):
        carries_group_fees = position == FEE_CARRIER_INDEX
        subtotal = cart.subtotal
        markup = apply_percentage(subtotal, cart.markup_percent)
        delivery_fee = group_delivery_fee if carries_group_fees else ZERO
        multi_merchant_fee = multi_merchant_fee_total if carries_group_fees else ZERO
        distance = group_distance if carries_group_fees else quotes[position].distance_km
        total = subtotal + markup + delivery_fee + multi_merchant_fee + convenience_fee

        split = split_revenue(
            subtotal=subtotal,
            markup=markup,
            delivery_fee=delivery_fee,
            multi_merchant_fee=multi_merchant_fee,
            convenience_fee=convenience_fee,
            app_earnings_percentage=app_percentage,
        )

        orders.append(
            PricedOrder(
                order_id=new_id(),
                order_number=_order_number(created_at, position, grouped),
                customer_id=details.customer_id,
                restaurant_id=cart.restaurant_id,
                restaurant_name=cart.restaurant_name,
                items=list(cart.items),
                subtotal=subtotal,
                markup_percent=cart.markup_percent,
                markup=markup,
                delivery_fee=delivery_fee,
                distance_km=distance,
                multi_merchant_fee=multi_merchant_fee,
                convenience_fee=convenience_fee,
                total=total,
                app_earnings_percentage_used=split.app_earnings_percentage_used,
                app_earnings_amount=split.app_earnings,
                rider_earnings_amount=split.rider_earnings,
                merchant_earnings_amount=split.merchant_earnings,
                order_group_id=order_group_id,
                merchant_count=merchant_count,
                group_position=position,
                payment_method=details.payment_method,
                delivery_address=details.delivery_address,
                delivery_latitude=details.coordinates.latitude if details.coordinates else None,
                delivery_longitude=details.coordinates.longitude if details.coordinates else None,
                phone_number=details.phone_number,
                customer_notes=details.customer_notes,
                created_at=created_at,
            )
        )

    logger.debug(
        f"Priced checkout with {merchant_count} merchant(s): "
        f"delivery {group_delivery_fee}, multi-merchant {multi_merchant_fee_total}"
    )

    return CheckoutQuote(
        orders=orders,
        order_group_id=order_group_id,
        group_delivery_fee=group_delivery_fee,
        group_distance_km=group_distance,
        multi_merchant_fee_total=multi_merchant_fee_total,
        settings_snapshot=settings,
    )
