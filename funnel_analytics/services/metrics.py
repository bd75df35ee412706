"""
Null-safe metric calculations shared by every aggregator.

All functions here are pure. Any zero denominator yields None, never an
exception, NaN or infinity.

Ratios (percentages):
- close_ratio = sold households / quoted households * 100
- bundle_ratio = households with 2+ distinct product types / sold households * 100
- quote_rate = quoted households / leads * 100

Money (integer cents):
- commission = premium * commission_rate / 100
- roi = commission / spend (a multiple, e.g. 3.6 renders as "3.60x")
- cost per X = spend / X

A source with no recorded spend has no cost data: roi and every cost /
acquisition-cost metric is None rather than zero.

Derived money values are rounded half-up to whole cents on output only; ROI is
computed from the unrounded commission.
"""

import math
from typing import Dict, Iterable, Mapping, Optional, Set


def safe_divide(numerator: float, denominator: float) -> Optional[float]:
    """
    Divide, returning None when the denominator is zero or the result is not finite.

    Example:
        >>> safe_divide(3, 6)
        0.5
        >>> safe_divide(3, 0) is None
        True
    """
    if not denominator:
        return None
    result = numerator / denominator
    if not math.isfinite(result):
        return None
    return result


def percentage(part: float, whole: float) -> Optional[float]:
    ratio = safe_divide(part, whole)
    return ratio * 100 if ratio is not None else None


def close_ratio(sold_households: int, quoted_households: int) -> Optional[float]:
    return percentage(sold_households, quoted_households)


def quote_rate(quoted_households: int, leads: int) -> Optional[float]:
    return percentage(quoted_households, leads)


def bundle_ratio(bundled_households: int, sold_households: int) -> Optional[float]:
    return percentage(bundled_households, sold_households)


def count_bundled(
    product_types_by_household: Mapping[str, Set[str]],
    household_ids: Optional[Iterable[str]] = None,
) -> int:
    """
    Count households holding two or more distinct product types.

    Args:
        product_types_by_household: Distinct product types per household,
            built from sale rows only.
        household_ids: Optional subset of households to consider; defaults to
            every household in the mapping.

    Example:
        >>> count_bundled({'h1': {'auto', 'home'}, 'h2': {'auto'}})
        1
    """
    if household_ids is None:
        household_ids = product_types_by_household.keys()
    return sum(
        1 for hid in household_ids
        if len(product_types_by_household.get(hid, ())) >= 2
    )


def commission_cents(premium_cents: int, commission_rate: float) -> float:
    """Commission earned on premium at a percentage rate (unrounded cents)."""
    return premium_cents * (commission_rate / 100)


def roi(commission: float, spend_cents: int) -> Optional[float]:
    """Commission / spend; None without spend."""
    if spend_cents <= 0:
        return None
    return safe_divide(commission, spend_cents)


def to_cents(value: Optional[float]) -> Optional[int]:
    """Round a cents amount half-up to a whole cent."""
    if value is None:
        return None
    return int(math.floor(value + 0.5))


def cost_per(spend_cents: int, count: int) -> Optional[int]:
    """Spend per unit in whole cents; None without spend or without units."""
    if spend_cents <= 0:
        return None
    return to_cents(safe_divide(spend_cents, count))


def calculate_cost_metrics(
    spend_cents: int,
    quoted_households: int,
    quoted_policies: int,
    quoted_items: int,
    sold_households: int,
    written_policies: int,
    written_items: int,
) -> Dict[str, Optional[int]]:
    """
    Calculate cost-per-quoted and acquisition-cost metrics for one group.

    Returns:
        Dictionary keyed by output field name. Values are None when the
        divisor is zero or there is no spend.

    Example:
        >>> calculate_cost_metrics(50000, 6, 8, 10, 3, 4, 5)['householdAcqCost']
        16667
    """
    return {
        'costPerQuotedHousehold': cost_per(spend_cents, quoted_households),
        'costPerQuotedPolicy': cost_per(spend_cents, quoted_policies),
        'costPerQuotedItem': cost_per(spend_cents, quoted_items),
        'householdAcqCost': cost_per(spend_cents, sold_households),
        'policyAcqCost': cost_per(spend_cents, written_policies),
        'itemAcqCost': cost_per(spend_cents, written_items),
    }
