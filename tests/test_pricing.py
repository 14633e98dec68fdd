import pytest

from depotline.domain import DiscountTier, PricingConfig
from depotline.pricing import discount_rate, price

TIERS = [
    DiscountTier(min_quantity=25, discount=0.05),
    DiscountTier(min_quantity=50, discount=0.1),
    DiscountTier(min_quantity=100, discount=0.15),
    DiscountTier(min_quantity=250, discount=0.2),
]


class TestDiscountRate:
    @pytest.mark.parametrize(
        "quantity, expected",
        [(1, 0.0), (24, 0.0), (25, 0.05), (49, 0.05), (50, 0.1), (100, 0.15), (249, 0.15), (250, 0.2), (9999, 0.2)],
    )
    def test_tier_boundaries(self, quantity, expected):
        assert discount_rate(quantity, TIERS) == expected

    def test_unsorted_tiers_pick_best_rate(self):
        assert discount_rate(300, list(reversed(TIERS))) == 0.2
        assert discount_rate(300, PricingConfig().discount_tiers) == 0.2

    def test_best_rate_wins_even_from_lower_threshold(self):
        tiers = [DiscountTier(min_quantity=10, discount=0.3), DiscountTier(min_quantity=100, discount=0.1)]
        assert discount_rate(150, tiers) == 0.3

    def test_no_tiers(self):
        assert discount_rate(500, []) == 0.0

    def test_monotonic_across_boundaries(self):
        rates = [discount_rate(quantity, TIERS) for quantity in range(1, 400)]
        assert rates == sorted(rates)


class TestPrice:
    def test_no_discount(self):
        breakdown = price(2, 150.0, 0.0)
        assert breakdown.total_price == 300.0
        assert breakdown.discount == 0.0

    def test_bulk_discount(self):
        breakdown = price(300, 150.0, 0.2)
        assert breakdown.discount == pytest.approx(9000.0)
        assert breakdown.total_price == pytest.approx(36000.0)

    def test_discount_bounded_by_gross(self):
        breakdown = price(40, 150.0, 0.05)
        assert 0 <= breakdown.discount <= 40 * 150.0
        assert breakdown.total_price + breakdown.discount == pytest.approx(40 * 150.0)
