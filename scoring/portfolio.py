"""
portfolio.py
-------------
Aggregations over a batch of propensity results.
"""

from typing import Dict, Iterable, List

from core.models import PropensityResult


TIERS = ("champion", "promoter", "passive", "detractor")
HIGH_PROPENSITY_TIERS = {"champion", "promoter"}


def count_by_tier(results: Iterable[PropensityResult]) -> Dict[str, int]:
    """Customer count per tier. Every tier is present, zero-filled."""
    counts = {tier: 0 for tier in TIERS}
    for result in results:
        counts[result.tier] = counts.get(result.tier, 0) + 1
    return counts


def get_high_propensity_customers(results: Iterable[PropensityResult]) -> List[PropensityResult]:
    """Champions and promoters."""
    return [r for r in results if r.tier in HIGH_PROPENSITY_TIERS]


def calculate_total_estimated_referrals(results: Iterable[PropensityResult]) -> float:
    return sum(r.estimated_referrals_per_year for r in results)
