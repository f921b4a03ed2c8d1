# marketplace/core/domain/pricing.py
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Tuple


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    tax_amount: float
    shipping_cost: float
    total_amount: float


@dataclass(frozen=True)
class PricingPolicy:
    """
    Checkout pricing rules.

    tax = round(subtotal * tax_rate), half-up to the nearest whole unit.
    Shipping is free strictly above the threshold, otherwise flat.
    """

    tax_rate: float = 0.18
    free_shipping_threshold: float = 5000
    flat_shipping_cost: float = 150

    def totals(self, lines: Iterable[Tuple[float, int]]) -> OrderTotals:
        """``lines`` is an iterable of ``(unit_price, quantity)`` pairs."""
        subtotal = sum(
            (Decimal(str(price)) * quantity for price, quantity in lines),
            Decimal("0"),
        )
        tax = (subtotal * Decimal(str(self.tax_rate))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        shipping = (
            Decimal("0")
            if subtotal > Decimal(str(self.free_shipping_threshold))
            else Decimal(str(self.flat_shipping_cost))
        )
        total = subtotal + tax + shipping
        return OrderTotals(
            subtotal=float(subtotal),
            tax_amount=float(tax),
            shipping_cost=float(shipping),
            total_amount=float(total),
        )
