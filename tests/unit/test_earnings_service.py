"""Unit tests for EarningsService."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from checkout_pricing_service.models.order_models import OrderStatus
from checkout_pricing_service.repositories.pricing_repositories import OrderRepository
from checkout_pricing_service.services.earnings_service import EarningsService, EarningsSummary
from tests.builders import make_order


def _group_orders() -> list:
    """The 435.00 + 245.00 two-merchant group at 50% app earnings."""
    return [
        make_order(
            "order_1",
            "rest_a",
            "group_1",
            0,
            subtotal=Decimal("300"),
            markup=Decimal("45"),
            delivery_fee=Decimal("55"),
            multi_merchant_fee=Decimal("20"),
            total=Decimal("435"),
            app_earnings_amount=Decimal("82.50"),
            rider_earnings_amount=Decimal("52.50"),
            merchant_earnings_amount=Decimal("300"),
            merchant_count=2,
        ),
        make_order(
            "order_2",
            "rest_b",
            "group_1",
            1,
            subtotal=Decimal("200"),
            markup=Decimal("30"),
            delivery_fee=Decimal("0"),
            total=Decimal("245"),
            app_earnings_amount=Decimal("30"),
            rider_earnings_amount=Decimal("15"),
            merchant_earnings_amount=Decimal("200"),
            merchant_count=2,
        ),
    ]


@pytest.mark.unit
class TestEarningsSummary:
    """Tests for EarningsSummary.from_orders."""

    def test_empty_summary_is_zero(self) -> None:
        summary = EarningsSummary.from_orders([])

        assert summary.order_count == 0
        assert summary.total == Decimal("0.00")

    def test_sums_group_amounts(self) -> None:
        summary = EarningsSummary.from_orders(_group_orders())

        assert summary.order_count == 2
        assert summary.total == Decimal("680.00")
        assert summary.delivery_fee == Decimal("55.00")
        assert summary.multi_merchant_fee == Decimal("20.00")
        assert summary.convenience_fee == Decimal("30.00")
        assert summary.app_earnings == Decimal("112.50")
        assert summary.rider_earnings == Decimal("67.50")
        assert summary.merchant_earnings == Decimal("500.00")
        assert summary.app_earnings + summary.rider_earnings + summary.merchant_earnings == summary.total


@pytest.mark.unit
class TestEarningsService:
    """Test suite for EarningsService."""

    @pytest.fixture
    def mock_order_repo(self) -> MagicMock:
        return MagicMock(spec=OrderRepository)

    @pytest.fixture
    def earnings_service(self, mock_order_repo: MagicMock) -> EarningsService:
        return EarningsService(order_repository=mock_order_repo)

    @pytest.mark.asyncio
    async def test_get_order_earnings(
        self, earnings_service: EarningsService, mock_order_repo: MagicMock
    ) -> None:
        mock_order_repo.get_order.return_value = make_order()

        summary = await earnings_service.get_order_earnings("order_1")

        assert summary is not None
        assert summary.app_earnings == Decimal("102.50")
        assert summary.rider_earnings == Decimal("42.50")

    @pytest.mark.asyncio
    async def test_get_order_earnings_missing(
        self, earnings_service: EarningsService, mock_order_repo: MagicMock
    ) -> None:
        mock_order_repo.get_order.return_value = None

        assert await earnings_service.get_order_earnings("missing") is None

    @pytest.mark.asyncio
    async def test_reports_persisted_amounts_not_current_rates(
        self, earnings_service: EarningsService, mock_order_repo: MagicMock
    ) -> None:
        """An order priced at 50% keeps reporting its 50% split."""
        mock_order_repo.get_order.return_value = make_order(
            app_earnings_percentage_used=Decimal("50")
        )

        summary = await earnings_service.get_order_earnings("order_1")

        assert summary is not None
        assert summary.app_earnings == Decimal("102.50")

    @pytest.mark.asyncio
    async def test_get_group_earnings(
        self, earnings_service: EarningsService, mock_order_repo: MagicMock
    ) -> None:
        mock_order_repo.list_orders_for_group.return_value = _group_orders()

        summary = await earnings_service.get_group_earnings("group_1")

        assert summary is not None
        assert summary.total == Decimal("680.00")

    @pytest.mark.asyncio
    async def test_get_group_earnings_unknown_group(
        self, earnings_service: EarningsService, mock_order_repo: MagicMock
    ) -> None:
        mock_order_repo.list_orders_for_group.return_value = []

        assert await earnings_service.get_group_earnings("missing") is None

    @pytest.mark.asyncio
    async def test_restaurant_earnings_skip_cancelled(
        self, earnings_service: EarningsService, mock_order_repo: MagicMock
    ) -> None:
        mock_order_repo.list_orders_for_restaurant.return_value = [
            make_order("order_1"),
            make_order("order_2", status=OrderStatus.CANCELLED),
        ]

        summary = await earnings_service.get_restaurant_earnings("rest_a", limit=50)

        assert summary.order_count == 1
        mock_order_repo.list_orders_for_restaurant.assert_called_once_with("rest_a", limit=50)

    @pytest.mark.asyncio
    async def test_restaurant_earnings_include_cancelled(
        self, earnings_service: EarningsService, mock_order_repo: MagicMock
    ) -> None:
        mock_order_repo.list_orders_for_restaurant.return_value = [
            make_order("order_1"),
            make_order("order_2", status=OrderStatus.CANCELLED),
        ]

        summary = await earnings_service.get_restaurant_earnings("rest_a", include_cancelled=True)

        assert summary.order_count == 2
        assert summary.merchant_earnings == Decimal("1000.00")
