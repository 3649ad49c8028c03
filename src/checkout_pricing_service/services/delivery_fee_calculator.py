"""Distance-based delivery fee calculation."""

import math
from dataclasses import dataclass
from decimal import Decimal

from checkout_pricing_service.models.cart_models import Coordinates
from checkout_pricing_service.models.money import ZERO, to_money

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class DeliveryQuote:
    """Delivery fee for one merchant-to-customer leg.

    Attributes:
        fee: Delivery fee in currency units
        distance_km: Great-circle distance, 0 when either location is unknown
        coordinates_known: Whether both locations were available
    """

    fee: Decimal
    distance_km: Decimal
    coordinates_known: bool


def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points on a spherical Earth, in kilometers."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def calculate_delivery_fee(
    distance_km: float, base_delivery_fee: Decimal, per_km_rate: Decimal
) -> Decimal:
    """Price a delivery distance.

    The distance is always rounded up to the next whole kilometer. The first
    kilometer costs ``base_delivery_fee`` and every further kilometer adds
    ``per_km_rate``.

    Args:
        distance_km: Distance in kilometers
        base_delivery_fee: Fee covering up to 1 km
        per_km_rate: Fee per whole kilometer beyond the first

    Returns:
        Decimal: The delivery fee in whole cents

    Raises:
        ValueError: If a rate or the distance is negative
    """
    if base_delivery_fee < 0 or per_km_rate < 0:
        raise ValueError("Delivery rates must be non-negative")
    if distance_km < 0:
        raise ValueError("distance_km must be non-negative")

    rounded_km = math.ceil(distance_km)

    if rounded_km <= 1:
        return to_money(base_delivery_fee)

    return to_money(base_delivery_fee + (rounded_km - 1) * per_km_rate)


def quote_delivery(
    customer: Coordinates | None,
    merchant: Coordinates | None,
    base_delivery_fee: Decimal,
    per_km_rate: Decimal,
) -> DeliveryQuote:
    """Quote the delivery fee between a merchant and a customer.

    When either location is missing the base fee is charged and the distance is
    reported as 0.
    """
    if customer is None or merchant is None:
        return DeliveryQuote(
            fee=calculate_delivery_fee(0, base_delivery_fee, per_km_rate),
            distance_km=ZERO,
            coordinates_known=False,
        )

    distance = haversine_distance_km(
        customer.latitude, customer.longitude, merchant.latitude, merchant.longitude
    )
    return DeliveryQuote(
        fee=calculate_delivery_fee(distance, base_delivery_fee, per_km_rate),
        distance_km=to_money(distance),
        coordinates_known=True,
    )
