"""Shared pytest fixtures and configuration for all tests."""

import os
from decimal import Decimal

import pytest

# Keeps main.py and lambda_handler.py from building real apps on import
os.environ.setdefault("ENVIRONMENT", "test")

from checkout_pricing_service.models.cart_models import Coordinates, MerchantCart  # noqa: E402
from checkout_pricing_service.models.settings_models import RateSettings  # noqa: E402
from checkout_pricing_service.services.pricing_engine import DeliveryDetails  # noqa: E402
from tests.builders import (  # noqa: E402
    CUSTOMER_LAT,
    CUSTOMER_LON,
    FAR_MERCHANT_LAT,
    NEAR_MERCHANT_LAT,
    make_cart,
)


@pytest.fixture
def rate_settings() -> RateSettings:
    """Fixture providing the rates used throughout the pricing examples."""
    return RateSettings(
        base_delivery_fee=Decimal("25"),
        per_km_rate=Decimal("15"),
        convenience_fee=Decimal("15"),
        show_convenience_fee=True,
        multi_merchant_fee=Decimal("20"),
        app_earnings_percentage=Decimal("50"),
        max_merchants_per_order=2,
    )


@pytest.fixture
def customer_coordinates() -> Coordinates:
    return Coordinates(latitude=CUSTOMER_LAT, longitude=CUSTOMER_LON)


@pytest.fixture
def delivery_details(customer_coordinates: Coordinates) -> DeliveryDetails:
    """Fixture providing delivery details with known coordinates."""
    return DeliveryDetails(
        customer_id="cust_001",
        delivery_address="123 Rizal Ave, Manila",
        phone_number="+639171234567",
        coordinates=customer_coordinates,
    )


@pytest.fixture
def far_cart() -> MerchantCart:
    """Fixture providing a 500.00 cart about 2.5 km away (3 km after rounding up)."""
    return make_cart("rest_far", "500", latitude=FAR_MERCHANT_LAT)


@pytest.fixture
def two_merchant_carts() -> list[MerchantCart]:
    """Fixture providing the 300.00 (far) and 200.00 (near) carts."""
    return [
        make_cart("rest_a", "300", latitude=FAR_MERCHANT_LAT),
        make_cart("rest_b", "200", latitude=NEAR_MERCHANT_LAT),
    ]
