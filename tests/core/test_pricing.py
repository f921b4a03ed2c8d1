# tests/core/test_pricing.py
import pytest

from marketplace.core.domain.pricing import PricingPolicy


class TestPricingPolicy:

    @pytest.mark.parametrize(
        "lines, expected",
        [
            # (unit price, qty) -> (subtotal, tax, shipping, total)
            ([(1000, 2)], (2000, 360, 150, 2510)),
            ([(2500, 2)], (5000, 900, 150, 6050)),
            ([(5000.01, 1)], (5000.01, 900, 0, 5900.01)),
            ([(3000, 1), (1000, 3)], (6000, 1080, 0, 7080)),
        ],
    )
    def test_totals(self, lines, expected):
        totals = PricingPolicy().totals(lines)

        assert (totals.subtotal, totals.tax_amount, totals.shipping_cost, totals.total_amount) == expected

    def test_tax_rounds_half_up(self):
        """
        Scenario: subtotal 25 gives a raw tax of 4.5.
        Expected: 5, not banker's rounding to 4.
        """
        assert PricingPolicy().totals([(25, 1)]).tax_amount == 5

    def test_threshold_is_exclusive(self):
        assert PricingPolicy().totals([(5000, 1)]).shipping_cost == 150

    def test_custom_policy(self):
        policy = PricingPolicy(tax_rate=0.1, free_shipping_threshold=100, flat_shipping_cost=10)

        totals = policy.totals([(50, 1)])

        assert totals.tax_amount == 5
        assert totals.shipping_cost == 10
        assert totals.total_amount == 65
