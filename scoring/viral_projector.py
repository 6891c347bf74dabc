"""
viral_projector.py
-------------------
Viral coefficient (k-factor) and month-by-month referral growth projection.

    k = referral rate × avg referrals per referrer × referral conversion rate

k >= 1.0 means each customer brings in at least one new customer. The
projection compounds monthly and assumes no churn; it shows the referral
lift in isolation.
"""

import math
from typing import List

from config.config_loader import get_viral_interpretation_config
from core.breakpoints import BreakpointTable
from core.models import MonthProjection, ReferralAssumptions, ViralProjection


def calculate_viral_coefficient(
    referral_rate: float,
    conversion_rate: float | None = None,
    avg_referrals_per_customer: float | None = None,
    assumptions: ReferralAssumptions | None = None,
) -> float:
    """k-factor. Unspecified rates come from the referral assumptions."""
    if conversion_rate is None or avg_referrals_per_customer is None:
        assumptions = assumptions or ReferralAssumptions.from_config()
    if conversion_rate is None:
        conversion_rate = assumptions.referral_conversion_rate
    if avg_referrals_per_customer is None:
        avg_referrals_per_customer = assumptions.avg_referrals_per_referrer
    return referral_rate * avg_referrals_per_customer * conversion_rate


def interpret_viral_coefficient(k_factor: float) -> str:
    """Human-readable band for a k-factor."""
    return ViralGrowthProjector().interpret(k_factor)


class ViralGrowthProjector:
    """
    Usage:
        projector = ViralGrowthProjector()
        projection = projector.project(starting_customers=1000, referral_rate=0.1)
    """

    def __init__(self, assumptions: ReferralAssumptions | None = None):
        self.assumptions = assumptions or ReferralAssumptions.from_config()
        interpretation = get_viral_interpretation_config()
        self.interpretation_table = BreakpointTable(
            interpretation["bands"], interpretation["default"]
        )

    def interpret(self, k_factor: float) -> str:
        """Human-readable band for a k-factor."""
        return self.interpretation_table.lookup(k_factor)

    def project(
        self,
        starting_customers: float,
        referral_rate: float,
        months: int = 12,
        conversion_rate: float | None = None,
        avg_referrals_per_referrer: float | None = None,
    ) -> ViralProjection:
        """
        Project customer growth from the referral loop.

        Args:
            starting_customers: Current customer base.
            referral_rate: Share of customers who refer in a given month.
            months: Projection horizon. One entry per month, indexed from 1.
            conversion_rate: Override the referral conversion rate.
            avg_referrals_per_referrer: Override the referrals per referrer.
        """
        if conversion_rate is None:
            conversion_rate = self.assumptions.referral_conversion_rate
        if avg_referrals_per_referrer is None:
            avg_referrals_per_referrer = self.assumptions.avg_referrals_per_referrer

        k_factor = calculate_viral_coefficient(
            referral_rate, conversion_rate, avg_referrals_per_referrer
        )

        projections: List[MonthProjection] = []
        current = float(starting_customers)

        for month in range(1, months + 1):
            referring_customers = current * referral_rate
            referrals_generated = referring_customers * avg_referrals_per_referrer
            new_customers = referrals_generated * conversion_rate

            # No churn modeled
            current += new_customers

            growth_rate = current / starting_customers - 1 if starting_customers > 0 else 0.0
            projections.append(MonthProjection(
                month=month,
                total_customers=math.floor(current),
                new_from_referrals=math.floor(new_customers),
                cumulative_referral_customers=math.floor(current - starting_customers),
                growth_rate=growth_rate,
            ))

        return ViralProjection(
            viral_coefficient=k_factor,
            referral_rate=referral_rate,
            conversion_rate=conversion_rate,
            avg_referrals_per_referrer=avg_referrals_per_referrer,
            interpretation=self.interpret(k_factor),
            month_projections=tuple(projections),
        )
