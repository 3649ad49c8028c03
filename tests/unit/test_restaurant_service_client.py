"""Unit tests for RestaurantServiceClient."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from checkout_pricing_service.services.restaurant_service_client import (
    RestaurantProfile,
    RestaurantServiceClient,
)


@pytest.mark.unit
class TestRestaurantServiceClient:
    """Test suite for RestaurantServiceClient."""

    @pytest.fixture
    def client(self) -> RestaurantServiceClient:
        return RestaurantServiceClient(base_url="https://api.test.com/", api_key="test-api-key")

    def _response(self, payload: dict) -> MagicMock:
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.json.return_value = payload
        return mock_response

    def test_client_initialization(self, client: RestaurantServiceClient) -> None:
        """Test that the trailing slash is dropped from the base URL."""
        assert client.base_url == "https://api.test.com"
        assert client.api_key == "test-api-key"
        assert client.timeout_seconds == 5.0

    @pytest.mark.asyncio
    async def test_get_restaurant_success(self, client: RestaurantServiceClient) -> None:
        payload = {
            "id": "rest_a",
            "name": "Lola's Kitchen",
            "latitude": 14.6217,
            "longitude": 120.9842,
            "markup": "12.5",
        }

        with patch(
            "httpx.AsyncClient.get", new_callable=AsyncMock, return_value=self._response(payload)
        ) as mock_get:
            profile = await client.get_restaurant("rest_a")

        assert isinstance(profile, RestaurantProfile)
        assert profile.markup == Decimal("12.5")
        assert profile.coordinates is not None
        assert profile.coordinates.latitude == 14.6217
        mock_get.assert_called_once_with(
            "https://api.test.com/restaurants/rest_a", headers={"X-API-Key": "test-api-key"}
        )

    @pytest.mark.asyncio
    async def test_get_restaurant_without_location(self, client: RestaurantServiceClient) -> None:
        payload = {"id": "rest_a", "name": "Lola's Kitchen"}

        with patch(
            "httpx.AsyncClient.get", new_callable=AsyncMock, return_value=self._response(payload)
        ):
            profile = await client.get_restaurant("rest_a")

        assert profile is not None
        assert profile.coordinates is None
        assert profile.markup is None

    @pytest.mark.asyncio
    async def test_get_restaurant_http_error_returns_none(
        self, client: RestaurantServiceClient
    ) -> None:
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Not found", request=MagicMock(), response=MagicMock(status_code=404)
        )

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            assert await client.get_restaurant("rest_missing") is None

    @pytest.mark.asyncio
    async def test_get_restaurant_network_error_returns_none(
        self, client: RestaurantServiceClient
    ) -> None:
        with patch(
            "httpx.AsyncClient.get",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            assert await client.get_restaurant("rest_a") is None

    @pytest.mark.asyncio
    async def test_get_restaurant_invalid_payload_returns_none(
        self, client: RestaurantServiceClient
    ) -> None:
        payload = {"id": "rest_a", "name": "Lola's Kitchen", "latitude": 200}

        with patch(
            "httpx.AsyncClient.get", new_callable=AsyncMock, return_value=self._response(payload)
        ):
            assert await client.get_restaurant("rest_a") is None

    @pytest.mark.asyncio
    async def test_get_coordinates(self, client: RestaurantServiceClient) -> None:
        payload = {"id": "rest_a", "name": "Lola's Kitchen", "latitude": 14.6, "longitude": 121.0}

        with patch(
            "httpx.AsyncClient.get", new_callable=AsyncMock, return_value=self._response(payload)
        ):
            coordinates = await client.get_coordinates("rest_a")

        assert coordinates is not None
        assert (coordinates.latitude, coordinates.longitude) == (14.6, 121.0)

    @pytest.mark.asyncio
    async def test_get_coordinates_missing_restaurant(self, client: RestaurantServiceClient) -> None:
        with patch.object(client, "get_restaurant", new_callable=AsyncMock, return_value=None):
            assert await client.get_coordinates("rest_missing") is None
