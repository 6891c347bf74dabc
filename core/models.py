"""
models.py
----------
Core domain models. These are the typed contracts between engine layers.

- ReferralAssumptions: Named benchmark constants (conversion rate, LTV, CAC).
  Passed into every scorer so tests can override assumptions directly.

- PropensityInput / PropensityResult: Customer attributes in, weighted
  0–100 referral propensity score and tier out.

- IncentiveScenario, ViralProjection, ROIAnalysis: Program-level outputs.

Every record is frozen. Results are built once per call and never mutated.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from config.config_loader import get_referral_assumptions_config


@dataclass(frozen=True)
class ReferralAssumptions:
    """Benchmarks shared by all referral calculations."""

    referral_conversion_rate: float = 0.35
    paid_lead_conversion_rate: float = 0.12
    avg_referrals_per_referrer: float = 1.4
    referred_customer_ltv: float = 8200.0
    paid_cac_benchmark: float = 700.0
    paid_ltv_benchmark: float = 7000.0

    @classmethod
    def from_config(cls) -> "ReferralAssumptions":
        """Builds assumptions from the referral_assumptions block of config.yaml."""
        cfg = get_referral_assumptions_config()
        return cls(
            referral_conversion_rate=float(cfg["referral_conversion_rate"]),
            paid_lead_conversion_rate=float(cfg["paid_lead_conversion_rate"]),
            avg_referrals_per_referrer=float(cfg["avg_referrals_per_referrer"]),
            referred_customer_ltv=float(cfg["referred_customer_ltv"]),
            paid_cac_benchmark=float(cfg["paid_cac_benchmark"]),
            paid_ltv_benchmark=float(cfg["paid_ltv_benchmark"]),
        )


@dataclass(frozen=True)
class PropensityInput:
    """
    Customer attributes consumed by the propensity scorer.

    retention_score is expected in [0, 1] (1.0 = never churned). Callers clamp.
    """

    customer_id: str
    tenure_months: float
    product_count: int
    retention_score: float
    engagement_level: str            # "high" | "medium" | "low"
    claims_satisfied: Optional[bool] = None
    nps_score: Optional[float] = None  # -100..100


@dataclass(frozen=True)
class PropensityResult:
    """Scored referral propensity for a single customer."""

    customer_id: str
    propensity_score: float          # 0–100
    tier: str                        # "champion" | "promoter" | "passive" | "detractor"
    estimated_referrals_per_year: float
    # Read-only view; excluded from the hash so results stay hashable
    factors: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}), hash=False)
    recommended_approach: str = ""


@dataclass(frozen=True)
class IncentiveScenario:
    """Cost / ROI outcome of offering one incentive amount."""

    incentive_type: str
    incentive_amount: float
    expected_referral_rate: float
    expected_referrals: int
    expected_conversions: int
    total_incentive_cost: float
    referral_cac: float
    ltv_cac_ratio: float
    roi: float
    recommendation: str


@dataclass(frozen=True)
class MonthProjection:
    month: int                       # 1-based
    total_customers: int
    new_from_referrals: int
    cumulative_referral_customers: int
    growth_rate: float


@dataclass(frozen=True)
class ViralProjection:
    """Viral coefficient plus a month-by-month compounding forecast."""

    viral_coefficient: float         # k-factor
    referral_rate: float
    conversion_rate: float
    avg_referrals_per_referrer: float
    interpretation: str
    month_projections: Tuple[MonthProjection, ...] = ()


@dataclass(frozen=True)
class ProgramCosts:
    setup: float
    monthly_operations: float
    incentives: float
    total: float


@dataclass(frozen=True)
class ReferralMetrics:
    total_customers: float
    cac: float
    avg_ltv: float
    ltv_cac_ratio: float
    revenue: float
    roi: float


@dataclass(frozen=True)
class PaidAcquisitionComparison:
    paid_cac: float
    paid_ltv: float
    cost_to_acquire_via_paid: float
    cost_savings: float
    quality_premium: float
    total_value_vs_paid: float


@dataclass(frozen=True)
class ROISummary:
    referral_cac: float
    paid_cac: float
    cac_savings_per_customer: float
    cac_savings_percentage: float
    total_program_value: float
    break_even_conversions: float


@dataclass(frozen=True)
class ROIAnalysis:
    """Referral program ROI rolled up against paid acquisition."""

    program_costs: ProgramCosts
    referral_metrics: ReferralMetrics
    vs_paid_acquisition: PaidAcquisitionComparison
    summary: ROISummary
