"""Custom metrics for the checkout pricing service."""

from decimal import Decimal

from opentelemetry import metrics

meter = metrics.get_meter("checkout-pricing-svc")

checkout_success_counter = meter.create_counter(
    name="checkout_success_total",
    description="Total number of checkouts persisted, by merchant count",
    unit="1",
)

checkout_failure_counter = meter.create_counter(
    name="checkout_failure_total",
    description="Total number of rejected or failed checkouts, by reason",
    unit="1",
)

checkout_value_histogram = meter.create_histogram(
    name="checkout_grand_total",
    description="Amount paid by the customer per checkout",
    unit="PHP",
)

delivery_distance_histogram = meter.create_histogram(
    name="checkout_delivery_distance_km",
    description="Distance to the farthest merchant per checkout",
    unit="km",
)


def record_checkout_success(merchant_count: int, grand_total: Decimal) -> None:
    """Record a persisted checkout.

    Args:
        merchant_count: Number of merchant sub-orders created
        grand_total: Amount the customer pays across the group
    """
    attributes = {"merchant_count": merchant_count}
    checkout_success_counter.add(1, attributes)
    checkout_value_histogram.record(float(grand_total), attributes)


def record_checkout_failure(reason: str) -> None:
    """Record a checkout that was rejected or could not be stored.

    Args:
        reason: Error code of the failure (e.g. "cart-empty")
    """
    checkout_failure_counter.add(1, {"reason": reason})


def record_delivery_distance(distance_km: Decimal) -> None:
    delivery_distance_histogram.record(float(distance_km))
