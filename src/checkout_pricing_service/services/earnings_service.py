"""Earnings reporting built from persisted revenue splits."""

import logging
from decimal import Decimal

from pydantic import BaseModel

from checkout_pricing_service.models.money import ZERO
from checkout_pricing_service.models.order_models import OrderStatus, PricedOrder
from checkout_pricing_service.repositories.pricing_repositories import OrderRepository

logger = logging.getLogger(__name__)


class EarningsSummary(BaseModel):
    """Totals across a set of orders.

    Every amount is summed from values stored on the orders at creation time.
    """

    order_count: int = 0
    subtotal: Decimal = ZERO
    markup: Decimal = ZERO
    delivery_fee: Decimal = ZERO
    multi_merchant_fee: Decimal = ZERO
    convenience_fee: Decimal = ZERO
    total: Decimal = ZERO
    app_earnings: Decimal = ZERO
    rider_earnings: Decimal = ZERO
    merchant_earnings: Decimal = ZERO

    @classmethod
    def from_orders(cls, orders: list[PricedOrder]) -> "EarningsSummary":
        """Sum the persisted amounts of a list of orders."""
        summary = cls()
        for order in orders:
            summary = summary.model_copy(
                update={
                    "order_count": summary.order_count + 1,
                    "subtotal": summary.subtotal + order.subtotal,
                    "markup": summary.markup + order.markup,
                    "delivery_fee": summary.delivery_fee + order.delivery_fee,
                    "multi_merchant_fee": summary.multi_merchant_fee + order.multi_merchant_fee,
                    "convenience_fee": summary.convenience_fee + order.convenience_fee,
                    "total": summary.total + order.total,
                    "app_earnings": summary.app_earnings + order.app_earnings_amount,
                    "rider_earnings": summary.rider_earnings + order.rider_earnings_amount,
                    "merchant_earnings": summary.merchant_earnings
                    + order.merchant_earnings_amount,
                }
            )
        return summary


class EarningsService:
    """Service for merchant, platform and rider earnings reports.

    Reports never consult the live rate settings. A settings change after an
    order was created does not alter what that order reports.
    """

    def __init__(self, order_repository: OrderRepository) -> None:
        """Initialize the EarningsService.

        Args:
            order_repository: Repository holding priced orders
        """
        self.order_repository = order_repository

    async def get_order_earnings(self, order_id: str) -> EarningsSummary | None:
        """Earnings of a single order, None if the order does not exist."""
        order = self.order_repository.get_order(order_id)
        if order is None:
            return None
        return EarningsSummary.from_orders([order])

    async def get_group_earnings(self, order_group_id: str) -> EarningsSummary | None:
        """Combined earnings of every sub-order in a group, None if the group is unknown."""
        orders = self.order_repository.list_orders_for_group(order_group_id)
        if not orders:
            return None
        return EarningsSummary.from_orders(orders)

    async def get_restaurant_earnings(
        self,
        restaurant_id: str,
        limit: int = 100,
        include_cancelled: bool = False,
    ) -> EarningsSummary:
        """Earnings over a restaurant's recent orders.

        Args:
            restaurant_id: The restaurant ID
            limit: Maximum number of recent orders to include
            include_cancelled: Whether cancelled orders count

        Returns:
            EarningsSummary, zeroed if there are no orders
        """
        orders = self.order_repository.list_orders_for_restaurant(restaurant_id, limit=limit)
        if not include_cancelled:
            orders = [o for o in orders if o.status != OrderStatus.CANCELLED]
        return EarningsSummary.from_orders(orders)
