"""Checkout service for pricing and creating order groups."""

import asyncio
import logging

from checkout_pricing_service.models.cart_models import Coordinates, MerchantCart
from checkout_pricing_service.models.checkout_models import CheckoutRequest
from checkout_pricing_service.models.settings_models import RateSettings
from checkout_pricing_service.observability import metrics
from checkout_pricing_service.observability.decorators import traced
from checkout_pricing_service.repositories.pricing_repositories import OrderRepository
from checkout_pricing_service.services.cart_aggregator import (
    enforce_merchant_cap,
    group_by_merchant,
    merge_duplicate_items,
)
from checkout_pricing_service.services.checkout_errors import (
    CheckoutPersistenceError,
    CheckoutValidationError,
    RestaurantInactiveError,
)
from checkout_pricing_service.services.pricing_engine import (
    CheckoutQuote,
    DeliveryDetails,
    price_checkout,
)
from checkout_pricing_service.services.restaurant_service_client import (
    RestaurantProfile,
    RestaurantServiceClient,
)
from checkout_pricing_service.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


class CheckoutService:
    """Service for turning a checkout request into persisted, priced orders.

    This service coordinates reading the rate settings once, resolving merchant
    locations, running the pricing engine and writing the resulting order group
    in a single transaction.
    """

    def __init__(
        self,
        settings_service: SettingsService,
        order_repository: OrderRepository,
        restaurant_client: RestaurantServiceClient | None = None,
    ) -> None:
        """Initialize the CheckoutService.

        Args:
            settings_service: Source of the rate settings snapshot
            order_repository: Repository for persisting orders
            restaurant_client: Client for merchant locations; without one every
                merchant location is unknown and the base delivery fee applies
        """
        self.settings_service = settings_service
        self.order_repository = order_repository
        self.restaurant_client = restaurant_client

    @traced("checkout_quote", service_name="checkout-pricing-svc")
    async def quote(self, request: CheckoutRequest) -> CheckoutQuote:
        """Price a checkout without persisting anything.

        Args:
            request: The checkout request

        Returns:
            CheckoutQuote for the request

        Raises:
            CheckoutValidationError: If the request cannot be priced
        """
        settings = await self.settings_service.get_settings()
        return await self._price(request, settings)

    @traced("checkout_create", service_name="checkout-pricing-svc")
    async def checkout(self, request: CheckoutRequest) -> CheckoutQuote:
        """Price a checkout and persist its orders atomically.

        Args:
            request: The checkout request

        Returns:
            CheckoutQuote whose orders have been stored

        Raises:
            CheckoutValidationError: If the request cannot be priced
            CheckoutPersistenceError: If the order group could not be written
        """
        settings = await self.settings_service.get_settings()

        try:
            quote = await self._price(request, settings)
        except CheckoutValidationError as e:
            metrics.record_checkout_failure(e.code)
            raise

        if not self.order_repository.save_order_group(quote.orders):
            metrics.record_checkout_failure(CheckoutPersistenceError.code)
            raise CheckoutPersistenceError(
                f"Failed to persist {quote.merchant_count} order(s) for customer "
                f"{request.customer_id}"
            )

        metrics.record_checkout_success(quote.merchant_count, quote.grand_total)
        metrics.record_delivery_distance(quote.group_distance_km)
        logger.info(
            f"Created {quote.merchant_count} order(s) for customer {request.customer_id}"
            + (f" in group {quote.order_group_id}" if quote.order_group_id else "")
        )
        return quote

    async def _price(self, request: CheckoutRequest, settings: RateSettings) -> CheckoutQuote:
        carts = await self.build_carts(request, settings)
        details = DeliveryDetails(
            customer_id=request.customer_id,
            delivery_address=request.delivery_address,
            phone_number=request.phone_number,
            coordinates=Coordinates.from_optional(
                request.delivery_latitude, request.delivery_longitude
            ),
            payment_method=request.payment_method,
            customer_notes=request.customer_notes,
        )
        return price_checkout(carts, details, settings)

    async def build_carts(
        self, request: CheckoutRequest, settings: RateSettings
    ) -> list[MerchantCart]:
        """Group request lines into merchant carts with locations attached.

        Carts keep the order in which each restaurant first appears in the
        request. Over-cap checkouts are rejected rather than trimmed.

        Raises:
            TooManyMerchantsError: If the request spans too many merchants
            RestaurantInactiveError: If a restaurant is not accepting orders
        """
        grouped = group_by_merchant(request.items)
        grouped = enforce_merchant_cap(grouped, settings.effective_max_merchants, evict_oldest=False)
        carts = [merge_duplicate_items(cart) for cart in grouped.values()]

        if self.restaurant_client is None or not carts:
            return carts

        profiles = await asyncio.gather(
            *(self.restaurant_client.get_restaurant(cart.restaurant_id) for cart in carts)
        )
        for cart, profile in zip(carts, profiles):
            if profile is not None and not profile.is_active:
                raise RestaurantInactiveError(
                    f"Restaurant {cart.restaurant_id} is not accepting orders"
                )
        return [self._apply_profile(cart, profile) for cart, profile in zip(carts, profiles)]

    @staticmethod
    def _apply_profile(cart: MerchantCart, profile: RestaurantProfile | None) -> MerchantCart:
        """Attach the restaurant's stored location and markup to a cart."""
        if profile is None:
            logger.warning(
                f"No profile for restaurant {cart.restaurant_id}, using base delivery fee"
            )
            return cart

        update: dict = {}
        if profile.coordinates is not None:
            update["latitude"] = profile.coordinates.latitude
            update["longitude"] = profile.coordinates.longitude
        if profile.markup is not None:
            update["markup_percent"] = profile.markup
        return cart.model_copy(update=update)
