"""Service for reading orders and advancing their fulfillment status."""

import logging

from checkout_pricing_service.models.order_models import (
    TERMINAL_STATUSES,
    OrderStatus,
    PricedOrder,
)
from checkout_pricing_service.repositories.pricing_repositories import (
    OrderRepository,
    StatusUpdateResult,
)

logger = logging.getLogger(__name__)


class OrderStatusConflictError(Exception):
    """The order is already delivered or cancelled."""

    def __init__(self, order_id: str, status: OrderStatus) -> None:
        super().__init__(f"Order {order_id} cannot be moved to {status.value}")
        self.order_id = order_id
        self.status = status


class OrderService:
    """Service for order lookups and status changes.

    Only the status of an order can change; its pricing is fixed at checkout.
    """

    def __init__(self, order_repository: OrderRepository) -> None:
        """Initialize the OrderService.

        Args:
            order_repository: Repository holding priced orders
        """
        self.order_repository = order_repository

    async def get_order(self, order_id: str) -> PricedOrder | None:
        return self.order_repository.get_order(order_id)

    async def get_order_group(self, order_group_id: str) -> list[PricedOrder]:
        """Sub-orders of a group with the fee-carrying order first."""
        return self.order_repository.list_orders_for_group(order_group_id)

    async def update_status(self, order_id: str, status: OrderStatus) -> PricedOrder | None:
        """Move an order to a new status.

        Args:
            order_id: The order to update
            status: The new status

        Returns:
            The updated order, or None if it does not exist or the write failed

        Raises:
            OrderStatusConflictError: If the order is already delivered or
                cancelled, including when that happened concurrently
        """
        order = self.order_repository.get_order(order_id)
        if order is None:
            return None

        if order.status in TERMINAL_STATUSES:
            logger.warning(f"Order {order_id} is already {order.status.value}, not updating")
            raise OrderStatusConflictError(order_id, status)

        result = self.order_repository.update_status(order_id, status)
        if result == StatusUpdateResult.REJECTED:
            raise OrderStatusConflictError(order_id, status)
        if result == StatusUpdateResult.FAILED:
            return None

        return order.with_status(status)
