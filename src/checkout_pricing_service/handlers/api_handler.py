"""FastAPI application for checkout, order and admin endpoints."""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from checkout_pricing_service.models.checkout_models import (
    CheckoutQuoteResponse,
    CheckoutRequest,
    CheckoutResponse,
    CreatedOrderRef,
)
from checkout_pricing_service.models.order_models import OrderStatus, PricedOrder
from checkout_pricing_service.models.settings_models import RateSettings
from checkout_pricing_service.services.checkout_errors import (
    CheckoutPersistenceError,
    CheckoutValidationError,
)
from checkout_pricing_service.services.checkout_service import CheckoutService
from checkout_pricing_service.services.earnings_service import EarningsService, EarningsSummary
from checkout_pricing_service.services.order_service import OrderService, OrderStatusConflictError
from checkout_pricing_service.services.pricing_engine import CheckoutQuote
from checkout_pricing_service.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class StatusUpdateRequest(BaseModel):
    status: OrderStatus


def _quote_response(quote: CheckoutQuote) -> CheckoutQuoteResponse:
    return CheckoutQuoteResponse(
        order_group_id=quote.order_group_id,
        merchant_count=quote.merchant_count,
        group_delivery_fee=quote.group_delivery_fee,
        group_distance_km=quote.group_distance_km,
        multi_merchant_fee_total=quote.multi_merchant_fee_total,
        grand_total=quote.grand_total,
        orders=quote.orders,
    )


def create_app(
    checkout_service: CheckoutService,
    settings_service: SettingsService,
    order_service: OrderService,
    earnings_service: EarningsService,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        checkout_service: Service for pricing and creating checkouts
        settings_service: Service for the rate settings
        order_service: Service for order lookups and status changes
        earnings_service: Service for earnings reports

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Checkout Pricing Service API",
        description="Prices multi-merchant checkouts and reports revenue splits",
        version="1.0.0",
    )

    # Store services in app state for access in route handlers
    app.state.checkout_service = checkout_service
    app.state.settings_service = settings_service
    app.state.order_service = order_service
    app.state.earnings_service = earnings_service

    @app.exception_handler(CheckoutValidationError)
    async def checkout_validation_error_handler(
        _request: Request, exc: CheckoutValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": exc.code, "message": exc.message})

    @app.exception_handler(CheckoutPersistenceError)
    async def checkout_persistence_error_handler(
        _request: Request, exc: CheckoutPersistenceError
    ) -> JSONResponse:
        logger.error(f"Checkout persistence failed: {exc.message}")
        return JSONResponse(status_code=500, content={"error": exc.code, "message": exc.message})

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    @app.post("/checkout/quote", response_model=CheckoutQuoteResponse, tags=["Checkout"])
    async def quote_checkout(request: CheckoutRequest) -> CheckoutQuoteResponse:
        """Price a checkout without creating any orders."""
        quote: CheckoutQuote = await app.state.checkout_service.quote(request)
        return _quote_response(quote)

    @app.post(
        "/checkout",
        response_model=CheckoutResponse,
        status_code=201,
        tags=["Checkout"],
    )
    async def create_checkout(request: CheckoutRequest) -> CheckoutResponse:
        """Price a checkout and create its orders as one group.

        Returns:
            Identifiers of the created orders
        """
        logger.info(f"Checkout requested by customer {request.customer_id}")

        quote: CheckoutQuote = await app.state.checkout_service.checkout(request)

        return CheckoutResponse(
            order_group_id=quote.order_group_id,
            grand_total=quote.grand_total,
            orders=[
                CreatedOrderRef(
                    order_id=o.order_id,
                    order_number=o.order_number,
                    restaurant_id=o.restaurant_id,
                    total=o.total,
                )
                for o in quote.orders
            ],
        )

    @app.get("/orders/{order_id}", response_model=PricedOrder, tags=["Orders"])
    async def get_order(order_id: str) -> PricedOrder:
        order: PricedOrder | None = await app.state.order_service.get_order(order_id)
        if order is None:
            raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
        return order

    @app.patch("/orders/{order_id}/status", response_model=PricedOrder, tags=["Orders"])
    async def update_order_status(order_id: str, body: StatusUpdateRequest) -> PricedOrder:
        """Change an order's fulfillment status; pricing is never modified."""
        existing: PricedOrder | None = await app.state.order_service.get_order(order_id)
        if existing is None:
            raise HTTPException(status_code=404, detail=f"Order {order_id} not found")

        try:
            order: PricedOrder | None = await app.state.order_service.update_status(
                order_id, body.status
            )
        except OrderStatusConflictError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e

        if order is None:
            raise HTTPException(
                status_code=500, detail=f"Failed to update status of order {order_id}"
            )
        return order

    @app.get("/order-groups/{order_group_id}", response_model=list[PricedOrder], tags=["Orders"])
    async def get_order_group(order_group_id: str) -> list[PricedOrder]:
        orders: list[PricedOrder] = await app.state.order_service.get_order_group(order_group_id)
        if not orders:
            raise HTTPException(status_code=404, detail=f"Order group {order_group_id} not found")
        return orders

    @app.get("/admin/settings", response_model=RateSettings, tags=["Settings"])
    async def get_settings() -> RateSettings:
        settings: RateSettings = await app.state.settings_service.get_settings()
        return settings

    @app.patch("/admin/settings", response_model=RateSettings, tags=["Settings"])
    async def update_settings(changes: dict[str, Any]) -> RateSettings:
        """Update some rate settings.

        Orders already created keep the rates they were priced with.

        Raises:
            HTTPException: 422 for invalid values, 500 if the settings could not be saved
        """
        try:
            settings: RateSettings | None = await app.state.settings_service.update_settings(
                changes
            )
        except ValidationError as e:
            # Error contexts and inputs may hold Decimals, which JSONResponse cannot encode
            detail = e.errors(include_url=False, include_context=False, include_input=False)
            raise HTTPException(status_code=422, detail=detail) from e

        if settings is None:
            raise HTTPException(status_code=500, detail="Failed to save settings")
        return settings

    @app.get(
        "/admin/earnings/orders/{order_id}",
        response_model=EarningsSummary,
        tags=["Earnings"],
    )
    async def get_order_earnings(order_id: str) -> EarningsSummary:
        summary = await app.state.earnings_service.get_order_earnings(order_id)
        if summary is None:
            raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
        return summary

    @app.get(
        "/admin/earnings/order-groups/{order_group_id}",
        response_model=EarningsSummary,
        tags=["Earnings"],
    )
    async def get_group_earnings(order_group_id: str) -> EarningsSummary:
        summary = await app.state.earnings_service.get_group_earnings(order_group_id)
        if summary is None:
            raise HTTPException(status_code=404, detail=f"Order group {order_group_id} not found")
        return summary

    @app.get(
        "/admin/earnings/restaurants/{restaurant_id}",
        response_model=EarningsSummary,
        tags=["Earnings"],
    )
    async def get_restaurant_earnings(
        restaurant_id: str,
        limit: int = 100,
        include_cancelled: bool = False,
    ) -> EarningsSummary:
        summary: EarningsSummary = await app.state.earnings_service.get_restaurant_earnings(
            restaurant_id=restaurant_id,
            limit=limit,
            include_cancelled=include_cancelled,
        )
        return summary

    return app
