"""Client for looking up restaurant locations in the Restaurant Service API."""

import logging
from decimal import Decimal

import httpx
from pydantic import BaseModel, Field, ValidationError

from checkout_pricing_service.models.cart_models import Coordinates

logger = logging.getLogger(__name__)


class RestaurantProfile(BaseModel):
    """The parts of a restaurant record that checkout pricing needs."""

    id: str
    name: str
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    markup: Decimal | None = Field(None, ge=0, le=100)
    is_active: bool = True

    @property
    def coordinates(self) -> Coordinates | None:
        return Coordinates.from_optional(self.latitude, self.longitude)


class RestaurantServiceClient:
    """HTTP client for fetching restaurant profiles.

    Uses service-to-service API key authentication. Lookup failures return
    None so checkout can fall back to the base delivery fee.
    """

    def __init__(self, base_url: str, api_key: str, timeout_seconds: float = 5.0) -> None:
        """Initialize the Restaurant Service client.

        Args:
            base_url: Base URL of the Restaurant Service API (e.g., "https://api.example.com")
            api_key: API key for service-to-service authentication
            timeout_seconds: Per-request timeout
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    async def get_restaurant(self, restaurant_id: str) -> RestaurantProfile | None:
        """Fetch a restaurant profile.

        Args:
            restaurant_id: The restaurant to look up

        Returns:
            RestaurantProfile, or None on any failure
        """
        url = f"{self.base_url}/restaurants/{restaurant_id}"
        headers = {"X-API-Key": self.api_key}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
                return RestaurantProfile(**response.json())

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Failed to fetch restaurant {restaurant_id}: {e}")  # pragma: no cover
            return None
        except ValidationError as e:
            logger.error(f"Invalid restaurant payload for {restaurant_id}: {e}")  # pragma: no cover
            return None

    async def get_coordinates(self, restaurant_id: str) -> Coordinates | None:
        """Fetch only a restaurant's location.

        Returns:
            Coordinates if the restaurant was found and has a location, None otherwise
        """
        profile = await self.get_restaurant(restaurant_id)
        if profile is None:
            return None
        return profile.coordinates
