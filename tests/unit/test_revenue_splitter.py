"""Unit tests for the merchant/app/rider revenue split."""

from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from checkout_pricing_service.services.revenue_splitter import split_order, split_revenue
from tests.builders import make_order

money = st.decimals(min_value=0, max_value=100000, places=2, allow_nan=False, allow_infinity=False)
percentage = st.decimals(min_value=0, max_value=100, places=2, allow_nan=False, allow_infinity=False)


@pytest.mark.unit
class TestSplitRevenue:
    """Tests for split_revenue."""

    def test_single_merchant_example(self) -> None:
        split = split_revenue(
            subtotal=Decimal("500"),
            markup=Decimal("75"),
            delivery_fee=Decimal("55"),
            multi_merchant_fee=Decimal("0"),
            convenience_fee=Decimal("15"),
            app_earnings_percentage=Decimal("50"),
        )

        assert split.merchant_earnings == Decimal("500.00")
        assert split.app_earnings == Decimal("102.50")
        assert split.rider_earnings == Decimal("42.50")
        assert split.total == Decimal("645.00")

    def test_fees_are_combined_before_splitting(self) -> None:
        """33% of 55 + 20 is taken once on 75, not on each fee separately."""
        split = split_revenue(
            subtotal=Decimal("300"),
            markup=Decimal("45"),
            delivery_fee=Decimal("55"),
            multi_merchant_fee=Decimal("20"),
            convenience_fee=Decimal("15"),
            app_earnings_percentage=Decimal("33"),
        )

        assert split.app_earnings == Decimal("24.75") + Decimal("45")
        assert split.rider_earnings == Decimal("15") + Decimal("50.25")

    def test_zero_percent_gives_all_fees_to_rider(self) -> None:
        split = split_revenue(
            Decimal("100"), Decimal("15"), Decimal("40"), Decimal("20"), Decimal("10"), Decimal("0")
        )

        assert split.app_earnings == Decimal("15.00")
        assert split.rider_earnings == Decimal("70.00")

    def test_records_percentage_used(self) -> None:
        split = split_revenue(
            Decimal("100"), Decimal("0"), Decimal("25"), Decimal("0"), Decimal("0"), Decimal("70")
        )

        assert split.app_earnings_percentage_used == Decimal("70")

    @pytest.mark.parametrize("pct", [Decimal("-1"), Decimal("100.01")])
    def test_percentage_out_of_range_raises(self, pct: Decimal) -> None:
        with pytest.raises(ValueError, match="between 0 and 100"):
            split_revenue(Decimal("1"), Decimal("0"), Decimal("0"), Decimal("0"), Decimal("0"), pct)

    @given(
        subtotal=money,
        markup=money,
        delivery_fee=money,
        multi_merchant_fee=money,
        convenience_fee=money,
        pct=percentage,
    )
    def test_shares_always_add_up_to_total(
        self,
        subtotal: Decimal,
        markup: Decimal,
        delivery_fee: Decimal,
        multi_merchant_fee: Decimal,
        convenience_fee: Decimal,
        pct: Decimal,
    ) -> None:
        split = split_revenue(subtotal, markup, delivery_fee, multi_merchant_fee, convenience_fee, pct)

        assert split.total == subtotal + markup + delivery_fee + multi_merchant_fee + convenience_fee
        assert split.rider_earnings >= convenience_fee


@pytest.mark.unit
class TestSplitOrder:
    """Tests for split_order."""

    def test_uses_the_order_snapshot_percentage(self) -> None:
        order = make_order(
            app_earnings_percentage_used=Decimal("40"),
            app_earnings_amount=Decimal("97.00"),
            rider_earnings_amount=Decimal("48.00"),
        )

        split = split_order(order)

        assert split.app_earnings == Decimal("97.00")
        assert split.rider_earnings == Decimal("48.00")
        assert split.total == order.total
