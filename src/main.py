"""Main application entry point for the checkout pricing service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
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


def get_dynamodb_resource() -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

    logger.info(f"Using AWS DynamoDB in region {region}")
    # Default credential chain (IAM role, env vars, etc.)
    return boto3.resource("dynamodb", region_name=region)


def create_restaurant_client() -> RestaurantServiceClient | None:
    """Create the restaurant service client from environment variables.

    Returns:
        Configured client, or None when the service is not configured. Without
        a client every merchant location is unknown and the base fee applies.
    """
    base_url = os.getenv("RESTAURANT_SERVICE_BASE_URL")
    api_key = os.getenv("RESTAURANT_SERVICE_API_KEY")

    if not base_url or not api_key:
        logger.warning(
            "RESTAURANT_SERVICE_BASE_URL or RESTAURANT_SERVICE_API_KEY not set - "
            "merchant locations will not be resolved"
        )
        return None

    logger.info(f"Restaurant service client configured - URL: {base_url}")
    return RestaurantServiceClient(base_url=base_url, api_key=api_key)


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the DynamoDB resource and repositories
    3. Creates services
    4. Creates the FastAPI app
    5. Sets up observability

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing checkout pricing service...")

    dynamodb_resource = get_dynamodb_resource()

    settings_table = os.getenv("DYNAMODB_RATE_SETTINGS_TABLE", "checkout-rate-settings")
    orders_table = os.getenv("DYNAMODB_ORDERS_TABLE", "checkout-orders")

    settings_repository = RateSettingsRepository(
        dynamodb_resource=dynamodb_resource, table_name=settings_table
    )
    order_repository = OrderRepository(dynamodb_resource=dynamodb_resource, table_name=orders_table)

    logger.info(f"Repositories configured - settings: {settings_table}, orders: {orders_table}")

    settings_service = SettingsService(settings_repository=settings_repository)
    checkout_service = CheckoutService(
        settings_service=settings_service,
        order_repository=order_repository,
        restaurant_client=create_restaurant_client(),
    )
    order_service = OrderService(order_repository=order_repository)
    earnings_service = EarningsService(order_repository=order_repository)

    logger.info("Services initialized")

    app = create_app(
        checkout_service=checkout_service,
        settings_service=settings_service,
        order_service=order_service,
        earnings_service=earnings_service,
    )

    setup_observability(app)

    logger.info("Checkout pricing service initialized successfully")

    return app


# Only build the real app outside of tests so collection does not touch AWS
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8002"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
