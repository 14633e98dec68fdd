from __future__ import annotations

from typing import Iterable

from .domain import DiscountTier, PriceBreakdown


def discount_rate(quantity: int, tiers: Iterable[DiscountTier]) -> float:
    """Best discount among all tiers whose threshold the quantity meets.

    Tiers need not be sorted; 0.0 when no tier qualifies.
    """
    best = 0.0
    for tier in tiers:
        if quantity >= tier.min_quantity and tier.discount > best:
            best = tier.discount
    return best


def price(quantity: int, unit_price: float, rate: float) -> PriceBreakdown:
    gross = quantity * unit_price
    discount = gross * rate
    return PriceBreakdown(total_price=gross - discount, discount=discount)
