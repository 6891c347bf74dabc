"""
propensity_scorer.py
---------------------
Referral propensity scoring. Answers one question per customer:

    "How likely is this customer to refer someone, and how should we ask?"

The scoring follows a consistent pattern:

    1. Factor scores: Map each raw attribute (tenure, product count,
       retention, engagement, claims experience, NPS) to a 0–100 sub-score
       through a breakpoint table or lookup.
    2. Weighted composite: Sum of sub-score × factor weight.
    3. Tier: Champion / Promoter / Passive / Detractor, with an assumed
       referral rate and recommended outreach approach per tier.

Scoring never fails. Missing claims / NPS data and unrecognized engagement
levels fall back to neutral sub-scores.
"""

from types import MappingProxyType
from typing import Dict, List

from config.config_loader import get_propensity_config, get_tier_config
from core.breakpoints import BreakpointTable
from core.models import PropensityInput, PropensityResult, ReferralAssumptions


class PropensityScorer:
    """
    Scores customers on referral propensity.

    Usage:
        scorer = PropensityScorer()
        result = scorer.score(PropensityInput(...))
    """

    def __init__(self, assumptions: ReferralAssumptions | None = None):
        """
        Args:
            assumptions: Override the config benchmarks (avg referrals per referrer).
        """
        self.config = get_propensity_config()
        self.assumptions = assumptions or ReferralAssumptions.from_config()
        self.weights: Dict[str, float] = self.config["weights"]

        breakpoints = self.config["breakpoints"]
        self.tenure_table = BreakpointTable.from_config(breakpoints["tenure"])
        self.product_table = BreakpointTable.from_config(breakpoints["product_count"])
        self.nps_table = BreakpointTable.from_config(breakpoints["nps_score"])

        self.tiers: List[dict] = get_tier_config()
        self.tier_table = BreakpointTable(
            [(t["min_score"], t) for t in self.tiers if t["min_score"] is not None],
            default=next(t for t in self.tiers if t["min_score"] is None),
        )

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def score(self, customer: PropensityInput) -> PropensityResult:
        """
        Calculate a customer's likelihood to refer others.

        Returns:
            PropensityResult with the weighted score, tier, estimated annual
            referrals, per-factor breakdown and recommended approach.
        """
        factors = self.compute_factor_scores(customer)

        propensity_score = 0.0
        for factor, sub_score in factors.items():
            propensity_score += sub_score * self.weights[factor]

        tier = self.tier_table.lookup(propensity_score)
        estimated_referrals = tier["referral_rate"] * self.assumptions.avg_referrals_per_referrer

        return PropensityResult(
            customer_id=customer.customer_id,
            propensity_score=propensity_score,
            tier=tier["name"],
            estimated_referrals_per_year=estimated_referrals,
            factors=MappingProxyType(factors),
            recommended_approach=tier["recommended_approach"],
        )

    def compute_factor_scores(self, customer: PropensityInput) -> Dict[str, float]:
        """Maps each raw attribute to its 0–100 sub-score."""
        return {
            "tenure": float(self.tenure_table.lookup(customer.tenure_months)),
            "product_count": float(self.product_table.lookup(customer.product_count)),
            "retention_history": customer.retention_score * 100,
            "engagement": float(self._engagement_score(customer.engagement_level)),
            "claims_experience": float(self._claims_score(customer.claims_satisfied)),
            "nps_score": float(self._nps_score(customer.nps_score)),
        }

    def assign_tier(self, propensity_score: float) -> str:
        """Maps a 0–100 score to a tier name. Boundaries belong to the higher tier."""
        return self.tier_table.lookup(propensity_score)["name"]

    def tier_description(self, tier_name: str) -> str:
        for tier in self.tiers:
            if tier["name"] == tier_name:
                return tier["description"]
        raise KeyError(f"Unknown tier '{tier_name}'. Available: {self.tier_names}")

    @property
    def tier_names(self) -> List[str]:
        """Tier names, highest first."""
        return [t["name"] for t in self.tiers]

    # -------------------------------------------------------------------------
    # INTERNAL: CATEGORICAL FACTORS
    # -------------------------------------------------------------------------

    def _engagement_score(self, engagement_level: str) -> float:
        return self.config["engagement_scores"].get(
            engagement_level, self.config["engagement_fallback"]
        )

    def _claims_score(self, claims_satisfied: bool | None) -> float:
        claims = self.config["claims_scores"]
        if claims_satisfied is None:
            return claims["unknown"]
        return claims["satisfied"] if claims_satisfied else claims["dissatisfied"]

    def _nps_score(self, nps_score: float | None) -> float:
        if nps_score is None:
            return self.config["nps_unknown_score"]
        return self.nps_table.lookup(nps_score)
