"""DynamoDB repository classes for rate settings and priced orders.

Expected failures are reported through return values (None/False/empty list)
and logged, rather than raised.
"""

import logging
from datetime import UTC, datetime
from enum import Enum

from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from checkout_pricing_service.models.order_models import (
    TERMINAL_STATUSES,
    OrderStatus,
    PricedOrder,
)
from checkout_pricing_service.models.settings_models import SETTINGS_ID, RateSettings

logger = logging.getLogger(__name__)


class StatusUpdateResult(str, Enum):
    """Outcome of a conditional order status write."""

    UPDATED = "updated"
    REJECTED = "rejected"
    FAILED = "failed"


class RateSettingsRepository:
    """Repository for the rate settings item.

    Settings live in a single DynamoDB item keyed by ``settings_id``.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def read_settings(self) -> RateSettings | None:
        """Retrieve the stored settings, letting read errors propagate.

        Returns:
            RateSettings if stored, None if nothing has been saved yet

        Raises:
            ClientError: If the item could not be read
        """
        response = self.table.get_item(Key={"settings_id": SETTINGS_ID})

        if "Item" not in response:
            return None

        return RateSettings.from_dynamodb_item(response["Item"])

    def get_settings(self) -> RateSettings | None:
        """Retrieve the stored settings.

        Returns:
            RateSettings if stored, None if absent or on error
        """
        try:
            return self.read_settings()

        except ClientError as e:
            logger.error(f"Failed to get rate settings: {e}")  # pragma: no cover
            return None

    def save_settings(self, settings: RateSettings) -> bool:
        """Save the settings item, replacing any previous version.

        Args:
            settings: RateSettings to save

        Returns:
            bool: True if save succeeded, False otherwise
        """
        try:
            self.table.put_item(Item=settings.to_dynamodb_item())
            return True

        except ClientError as e:
            logger.error(f"Failed to save rate settings: {e}")  # pragma: no cover
            return False


class OrderRepository:
    """Repository for priced orders.

    Orders are keyed by ``order_id`` with Global Secondary Indexes on
    ``order_group_id`` and ``restaurant_id``.
    """

    GROUP_INDEX = "order_group_id-index"
    RESTAURANT_INDEX = "restaurant_id-index"

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)
        self.serializer = TypeSerializer()

    def save_order_group(self, orders: list[PricedOrder]) -> bool:
        """Persist every order of a checkout in one transaction.

        Either all orders are written or none are. Each put is conditional on the
        order id being new.

        Args:
            orders: Orders created by one checkout

        Returns:
            bool: True if the transaction committed, False otherwise
        """
        if not orders:
            return False

        transact_items = [
            {
                "Put": {
                    "TableName": self.table_name,
                    "Item": {
                        key: self.serializer.serialize(value)
                        for key, value in order.to_dynamodb_item().items()
                    },
                    "ConditionExpression": "attribute_not_exists(order_id)",
                }
            }
            for order in orders
        ]

        try:
            self.dynamodb.meta.client.transact_write_items(TransactItems=transact_items)
            return True

        except ClientError as e:
            logger.error(f"Failed to save order group of {len(orders)} orders: {e}")
            return False

    def get_order(self, order_id: str) -> PricedOrder | None:
        """Retrieve an order by ID.

        Args:
            order_id: Order identifier

        Returns:
            PricedOrder if found, None otherwise
        """
        try:
            response = self.table.get_item(Key={"order_id": order_id})

            if "Item" not in response:
                return None

            return PricedOrder.from_dynamodb_item(response["Item"])

        except ClientError as e:
            logger.error(f"Failed to get order: {e}")  # pragma: no cover
            return None

    def list_orders_for_group(self, order_group_id: str) -> list[PricedOrder]:
        """List all sub-orders of a multi-merchant group, fee carrier first.

        Args:
            order_group_id: Group identifier

        Returns:
            list: Orders sorted by group position (empty list if none found)
        """
        try:
            response = self.table.query(
                IndexName=self.GROUP_INDEX,
                KeyConditionExpression="order_group_id = :gid",
                ExpressionAttributeValues={":gid": order_group_id},
            )

            orders = [PricedOrder.from_dynamodb_item(item) for item in response.get("Items", [])]
            return sorted(orders, key=lambda o: o.group_position)

        except ClientError as e:
            logger.error(f"Failed to list orders for group: {e}")  # pragma: no cover
            return []

    def list_orders_for_restaurant(self, restaurant_id: str, limit: int = 100) -> list[PricedOrder]:
        """List recent orders for a restaurant.

        Args:
            restaurant_id: Restaurant identifier
            limit: Maximum number of orders to return

        Returns:
            list: List of PricedOrder objects (empty list if none found)
        """
        try:
            response = self.table.query(
                IndexName=self.RESTAURANT_INDEX,
                KeyConditionExpression="restaurant_id = :rid",
                ExpressionAttributeValues={":rid": restaurant_id},
                Limit=limit,
                ScanIndexForward=False,  # Most recent first
            )

            return [PricedOrder.from_dynamodb_item(item) for item in response.get("Items", [])]

        except ClientError as e:
            logger.error(f"Failed to list orders for restaurant: {e}")  # pragma: no cover
            return []

    def update_status(self, order_id: str, status: OrderStatus) -> StatusUpdateResult:
        """Update the fulfillment status of an order.

        Pricing attributes are never touched after creation. The write only
        applies while the order exists and is not delivered or cancelled, so
        concurrent updates cannot move an order out of a terminal status.

        Args:
            order_id: Order identifier
            status: New status

        Returns:
            StatusUpdateResult: UPDATED, REJECTED when the order is missing or
            terminal, FAILED on any other error
        """
        terminal_values = {f":terminal_{i}": s.value for i, s in enumerate(TERMINAL_STATUSES)}
        try:
            self.table.update_item(
                Key={"order_id": order_id},
                UpdateExpression="SET #status = :status, updated_at = :now",
                ConditionExpression=(
                    f"attribute_exists(order_id) AND NOT #status IN ({', '.join(terminal_values)})"
                ),
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={
                    ":status": status.value,
                    ":now": datetime.now(UTC).isoformat(),
                    **terminal_values,
                },
            )
            return StatusUpdateResult.UPDATED

        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                logger.warning(f"Order {order_id} is missing or final, status not changed")
                return StatusUpdateResult.REJECTED
            logger.error(f"Failed to update order status: {e}")  # pragma: no cover
            return StatusUpdateResult.FAILED
