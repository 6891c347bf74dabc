"""
incentive_analyzer.py
----------------------
Referral incentive scenario analysis.

For each tested incentive amount, estimates how many referrals and
conversions the high- and medium-propensity segments would produce, what
the program would cost, and how the resulting CAC compares to referred
customer LTV.

The incentive is paid per successful conversion, not per referral attempt.
"""

import math
from typing import Dict, List

from config.config_loader import get_incentive_config
from core.breakpoints import BreakpointTable
from core.models import IncentiveScenario, ReferralAssumptions


class IncentiveScenarioAnalyzer:
    """
    Usage:
        analyzer = IncentiveScenarioAnalyzer()
        scenarios = analyzer.analyze(total_customers, high_count, medium_count)
    """

    def __init__(self, assumptions: ReferralAssumptions | None = None):
        self.config = get_incentive_config()
        self.assumptions = assumptions or ReferralAssumptions.from_config()
        self.amounts: List[float] = self.config["amounts"]
        self.effectiveness: Dict[float, float] = {
            float(amount): rate for amount, rate in self.config["effectiveness"].items()
        }
        self.recommendation_table = BreakpointTable(
            self.config["recommendation_bands"], self.config["recommendation_default"]
        )

    def analyze(
        self,
        total_customers: int,
        high_propensity_count: int,
        medium_propensity_count: int,
    ) -> List[IncentiveScenario]:
        """
        Analyze each configured incentive amount.

        Args:
            total_customers: Size of the customer book. Reported for context;
                participation is driven by the propensity segment counts.
            high_propensity_count: Champions.
            medium_propensity_count: Promoters.

        Returns:
            One IncentiveScenario per configured amount, in configured order.
        """
        return [
            self._build_scenario(amount, high_propensity_count, medium_propensity_count)
            for amount in self.amounts
        ]

    def referral_rate_for(self, amount: float) -> float:
        """Base referral rate an incentive of this size produces."""
        return self.effectiveness.get(float(amount), self.config["default_effectiveness"])

    def recommend(self, ltv_cac_ratio: float) -> str:
        return self.recommendation_table.lookup(ltv_cac_ratio)

    # -------------------------------------------------------------------------
    # INTERNAL
    # -------------------------------------------------------------------------

    def _build_scenario(self, amount: float, high_count: int, medium_count: int) -> IncentiveScenario:
        a = self.assumptions
        expected_rate = self.referral_rate_for(amount)

        high_participation = expected_rate * self.config["high_propensity_multiplier"]
        medium_participation = expected_rate * self.config["medium_propensity_multiplier"]

        referrals_from_high = high_count * high_participation * a.avg_referrals_per_referrer
        referrals_from_medium = medium_count * medium_participation * a.avg_referrals_per_referrer
        total_referrals = referrals_from_high + referrals_from_medium

        expected_conversions = total_referrals * a.referral_conversion_rate
        total_cost = expected_conversions * amount

        referral_cac = total_cost / expected_conversions if expected_conversions > 0 else 0.0
        ltv_cac = a.referred_customer_ltv / referral_cac if referral_cac > 0 else 0.0

        revenue = a.referred_customer_ltv * expected_conversions
        roi = (revenue - total_cost) / total_cost if total_cost > 0 else 0.0

        return IncentiveScenario(
            incentive_type="cash",
            incentive_amount=amount,
            expected_referral_rate=expected_rate,
            expected_referrals=math.floor(total_referrals),
            expected_conversions=math.floor(expected_conversions),
            total_incentive_cost=total_cost,
            referral_cac=referral_cac,
            ltv_cac_ratio=ltv_cac,
            roi=roi,
            recommendation=self.recommend(ltv_cac),
        )


def get_optimal_scenario(scenarios: List[IncentiveScenario]) -> IncentiveScenario | None:
    """Scenario with the highest LTV:CAC ratio. Earliest wins ties."""
    if not scenarios:
        return None
    best = scenarios[0]
    for scenario in scenarios[1:]:
        if scenario.ltv_cac_ratio > best.ltv_cac_ratio:
            best = scenario
    return best
