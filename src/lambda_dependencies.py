"""Shared dependency factory for the Lambda handler.

Dependencies are created once per Lambda container and reused across
invocations to keep warm starts cheap.
"""

import logging
import os
from typing import Any

import boto3
from fastapi import FastAPI

from checkout_pricing_service.handlers.api_handler import create_app
from checkout_pricing_service.observability import configure_logging, setup_observability
from checkout_pricing_service.repositories.pricing_repositories import (
    OrderRepository,
    RateSettingsRepository,
)
from checkout_pricing_service.services.checkout_service import CheckoutService
from checkout_pricing_service.services.earnings_service import EarningsService
from checkout_pricing_service.services.order_service import OrderService
from checkout_pricing_service.services.restaurant_service_client import RestaurantServiceClient
from checkout_pricing_service.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

# Module-level caches for Lambda container reuse
_dynamodb_resource: Any | None = None
_order_repository: OrderRepository | None = None
_settings_service: SettingsService | None = None
_checkout_service: CheckoutService | None = None
_fastapi_app: FastAPI | None = None


def get_dynamodb_resource() -> Any:
    """Create or retrieve cached DynamoDB resource.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    global _dynamodb_resource

    if _dynamodb_resource is not None:
        return _dynamodb_resource

    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        _dynamodb_resource = boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )
    else:
        logger.info(f"Using AWS DynamoDB in region {region}")
        _dynamodb_resource = boto3.resource("dynamodb", region_name=region)

    return _dynamodb_resource


def get_order_repository() -> OrderRepository:
    global _order_repository

    if _order_repository is not None:
        return _order_repository

    orders_table = os.getenv("DYNAMODB_ORDERS_TABLE", "checkout-orders")
    _order_repository = OrderRepository(
        dynamodb_resource=get_dynamodb_resource(), table_name=orders_table
    )
    return _order_repository


def get_settings_service() -> SettingsService:
    """Create or retrieve cached settings service.

    Returns:
        Configured SettingsService instance
    """
    global _settings_service

    if _settings_service is not None:
        return _settings_service

    settings_table = os.getenv("DYNAMODB_RATE_SETTINGS_TABLE", "checkout-rate-settings")
    settings_repository = RateSettingsRepository(
        dynamodb_resource=get_dynamodb_resource(), table_name=settings_table
    )
    _settings_service = SettingsService(settings_repository=settings_repository)

    logger.info("Settings service initialized")
    return _settings_service


def get_checkout_service() -> CheckoutService:
    """Create or retrieve cached checkout service.

    Returns:
        Configured CheckoutService instance
    """
    global _checkout_service

    if _checkout_service is not None:
        return _checkout_service

    restaurant_client: RestaurantServiceClient | None = None
    base_url = os.getenv("RESTAURANT_SERVICE_BASE_URL")
    api_key = os.getenv("RESTAURANT_SERVICE_API_KEY")

    if base_url and api_key:
        restaurant_client = RestaurantServiceClient(base_url=base_url, api_key=api_key)
    else:
        logger.warning("Restaurant service not configured - merchant locations will not be resolved")

    _checkout_service = CheckoutService(
        settings_service=get_settings_service(),
        order_repository=get_order_repository(),
        restaurant_client=restaurant_client,
    )

    logger.info("Checkout service initialized")
    return _checkout_service


def get_fastapi_app() -> FastAPI:
    """Create or retrieve cached FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    order_repository = get_order_repository()

    _fastapi_app = create_app(
        checkout_service=get_checkout_service(),
        settings_service=get_settings_service(),
        order_service=OrderService(order_repository=order_repository),
        earnings_service=EarningsService(order_repository=order_repository),
    )
    setup_observability(_fastapi_app)

    logger.info("FastAPI application initialized")
    return _fastapi_app


def initialize_lambda_environment() -> None:
    """Initialize Lambda environment with logging.

    Should be called once during Lambda cold start.
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Lambda environment initialized")
