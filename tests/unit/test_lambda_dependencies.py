"""Unit tests for Lambda dependency factory."""

import os
from collections.abc import Iterator
from unittest.mock import MagicMock, Mock, patch

import pytest
from fastapi import FastAPI

import src.lambda_dependencies as deps
from src.lambda_dependencies import (
    get_checkout_service,
    get_dynamodb_resource,
    get_fastapi_app,
    get_settings_service,
    initialize_lambda_environment,
)


@pytest.fixture(autouse=True)
def clear_caches() -> Iterator[None]:
    """Reset module-level caches around each test."""
    deps._dynamodb_resource = None
    deps._order_repository = None
    deps._settings_service = None
    deps._checkout_service = None
    deps._fastapi_app = None
    yield
    deps._dynamodb_resource = None
    deps._order_repository = None
    deps._settings_service = None
    deps._checkout_service = None
    deps._fastapi_app = None


@pytest.mark.unit
class TestGetDynamoDBResource:
    """Tests for get_dynamodb_resource function."""

    @patch.dict(os.environ, {"DYNAMODB_ENDPOINT": "", "AWS_REGION": "us-west-2"}, clear=True)
    @patch("src.lambda_dependencies.boto3.resource")
    def test_creates_aws_resource_when_no_endpoint(self, mock_boto3_resource: Mock) -> None:
        get_dynamodb_resource()

        mock_boto3_resource.assert_called_once_with("dynamodb", region_name="us-west-2")

    @patch.dict(
        os.environ,
        {
            "DYNAMODB_ENDPOINT": "http://localhost:8000",
            "AWS_REGION": "us-east-1",
            "AWS_ACCESS_KEY_ID": "test-key",
            "AWS_SECRET_ACCESS_KEY": "test-secret",
        },
        clear=True,
    )
    @patch("src.lambda_dependencies.boto3.resource")
    def test_creates_local_resource_when_endpoint_provided(self, mock_boto3_resource: Mock) -> None:
        get_dynamodb_resource()

        mock_boto3_resource.assert_called_once_with(
            "dynamodb",
            endpoint_url="http://localhost:8000",
            region_name="us-east-1",
            aws_access_key_id="test-key",
            aws_secret_access_key="test-secret",
        )

    @patch.dict(os.environ, {"DYNAMODB_ENDPOINT": ""}, clear=True)
    @patch("src.lambda_dependencies.boto3.resource")
    def test_caches_resource_for_reuse(self, mock_boto3_resource: Mock) -> None:
        mock_boto3_resource.return_value = MagicMock()

        first = get_dynamodb_resource()
        second = get_dynamodb_resource()

        assert first is second
        mock_boto3_resource.assert_called_once()


@pytest.mark.unit
class TestServiceFactories:
    """Tests for the cached service factories."""

    @patch.dict(os.environ, {"DYNAMODB_RATE_SETTINGS_TABLE": "test-settings"}, clear=True)
    @patch("src.lambda_dependencies.get_dynamodb_resource")
    def test_settings_service_is_cached(self, mock_get_dynamodb: Mock) -> None:
        mock_resource = MagicMock()
        mock_get_dynamodb.return_value = mock_resource

        first = get_settings_service()
        second = get_settings_service()

        assert first is second
        mock_resource.Table.assert_called_once_with("test-settings")

    @patch.dict(
        os.environ,
        {
            "RESTAURANT_SERVICE_BASE_URL": "https://restaurants.test.com",
            "RESTAURANT_SERVICE_API_KEY": "svc-key",
        },
        clear=True,
    )
    @patch("src.lambda_dependencies.get_dynamodb_resource")
    def test_checkout_service_with_restaurant_client(self, mock_get_dynamodb: Mock) -> None:
        mock_get_dynamodb.return_value = MagicMock()

        service = get_checkout_service()

        assert service.restaurant_client is not None
        assert service.restaurant_client.base_url == "https://restaurants.test.com"
        assert get_checkout_service() is service

    @patch.dict(os.environ, {}, clear=True)
    @patch("src.lambda_dependencies.get_dynamodb_resource")
    def test_checkout_service_without_restaurant_client(self, mock_get_dynamodb: Mock) -> None:
        mock_get_dynamodb.return_value = MagicMock()

        assert get_checkout_service().restaurant_client is None

    @patch.dict(os.environ, {}, clear=True)
    @patch("src.lambda_dependencies.setup_observability")
    @patch("src.lambda_dependencies.get_dynamodb_resource")
    def test_fastapi_app_is_cached(
        self, mock_get_dynamodb: Mock, mock_setup_observability: Mock
    ) -> None:
        mock_get_dynamodb.return_value = MagicMock()

        app = get_fastapi_app()

        assert isinstance(app, FastAPI)
        assert get_fastapi_app() is app
        mock_setup_observability.assert_called_once_with(app)


@pytest.mark.unit
class TestInitializeLambdaEnvironment:
    """Tests for initialize_lambda_environment function."""

    @patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}, clear=True)
    @patch("src.lambda_dependencies.configure_logging")
    def test_configures_logging(self, mock_configure_logging: Mock) -> None:
        initialize_lambda_environment()

        mock_configure_logging.assert_called_once_with("WARNING")
