"""Three-way revenue split between merchant, platform and rider."""

from dataclasses import dataclass
from decimal import Decimal

from checkout_pricing_service.models.money import apply_percentage, to_money
from checkout_pricing_service.models.order_models import PricedOrder


@dataclass(frozen=True)
class RevenueSplit:
    """Earnings for each party of one order.

    Attributes:
        merchant_earnings: The full subtotal
        app_earnings: Platform share of combined fees plus the markup
        rider_earnings: Convenience fee plus the rest of combined fees
        app_earnings_percentage_used: Percentage the split was computed with
    """

    merchant_earnings: Decimal
    app_earnings: Decimal
    rider_earnings: Decimal
    app_earnings_percentage_used: Decimal

    @property
    def total(self) -> Decimal:
        return self.merchant_earnings + self.app_earnings + self.rider_earnings


def split_revenue(
    subtotal: Decimal,
    markup: Decimal,
    delivery_fee: Decimal,
    multi_merchant_fee: Decimal,
    convenience_fee: Decimal,
    app_earnings_percentage: Decimal,
) -> RevenueSplit:
    """Split one order's amounts between merchant, platform and rider.

    Delivery and multi-merchant fees are combined before the percentage is
    applied. Rounding to cents happens once, on the platform's share of the
    combined pool, and the rider receives the exact remainder, so the three
    shares always add back up to the order total.

    Args:
        subtotal: Merchant subtotal
        markup: Markup amount (platform revenue)
        delivery_fee: Delivery fee charged on this order
        multi_merchant_fee: Multi-merchant fee charged on this order
        convenience_fee: Convenience fee (rider revenue)
        app_earnings_percentage: Platform share of combined fees, 0-100

    Returns:
        RevenueSplit for the order

    Raises:
        ValueError: If the percentage is outside 0-100
    """
    if not Decimal(0) <= app_earnings_percentage <= Decimal(100):
        raise ValueError("app_earnings_percentage must be between 0 and 100")

    combined_fees = to_money(delivery_fee) + to_money(multi_merchant_fee)
    app_share = apply_percentage(combined_fees, app_earnings_percentage)
    rider_share = combined_fees - app_share

    return RevenueSplit(
        merchant_earnings=to_money(subtotal),
        app_earnings=app_share + to_money(markup),
        rider_earnings=to_money(convenience_fee) + rider_share,
        app_earnings_percentage_used=app_earnings_percentage,
    )


def split_order(order: PricedOrder) -> RevenueSplit:
    """Recompute the split of a persisted order from its own percentage snapshot."""
    return split_revenue(
        subtotal=order.subtotal,
        markup=order.markup,
        delivery_fee=order.delivery_fee,
        multi_merchant_fee=order.multi_merchant_fee,
        convenience_fee=order.convenience_fee,
        app_earnings_percentage=order.app_earnings_percentage_used,
    )
