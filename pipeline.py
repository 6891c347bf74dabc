"""
pipeline.py
------------
Main orchestration layer. Wires together:
    1. PropensityScorer            →  scores every customer in the book
    2. IncentiveScenarioAnalyzer   →  prices incentive options for the
                                      champion / promoter segments
    3. ViralGrowthProjector        →  projects referral-driven growth
    4. calculate_referral_roi      →  rolls up program ROI vs paid acquisition
    5. Output serialization        →  flat DataFrames for CSV output

This is the single entry point for running the engine on a customer table.

Usage:
    from pipeline import ReferralPipeline

    pipeline = ReferralPipeline()
    scored_df = pipeline.run(customers_df)
    report = pipeline.build_program_report(scored_df)
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List

import pandas as pd

from core.models import (
    IncentiveScenario,
    PropensityInput,
    PropensityResult,
    ReferralAssumptions,
    ROIAnalysis,
    ViralProjection,
)
from scoring.incentive_analyzer import IncentiveScenarioAnalyzer, get_optimal_scenario
from scoring.portfolio import count_by_tier
from scoring.propensity_scorer import PropensityScorer
from scoring.roi_calculator import calculate_referral_roi
from scoring.viral_projector import ViralGrowthProjector

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS = [
    "customer_id", "tenure_months", "product_count",
    "retention_score", "engagement_level",
]
OPTIONAL_COLUMNS = ["claims_satisfied", "nps_score"]
FACTOR_NAMES = [
    "tenure", "product_count", "retention_history",
    "engagement", "claims_experience", "nps_score",
]
SCORED_COLUMNS = [
    "customer_id", "propensity_score", "tier", "estimated_referrals_per_year",
    "recommended_approach",
] + [f"factor_{name}" for name in FACTOR_NAMES]


@dataclass
class ProgramReport:
    """Program-level view of a scored customer book — one per run."""
    total_customers: int
    tier_counts: Dict[str, int]
    scenarios: List[IncentiveScenario]
    optimal_scenario: IncentiveScenario | None
    projection: ViralProjection
    roi: ROIAnalysis
    summary: dict = field(default_factory=dict)


class ReferralPipeline:
    """
    End-to-end referral growth pipeline.

    Orchestrates scoring → scenario analysis → projection → ROI without
    exposing internal objects to callers.
    """

    def __init__(self, assumptions: ReferralAssumptions | None = None):
        """
        Args:
            assumptions: Override the config benchmarks for every stage.
        """
        self.assumptions = assumptions or ReferralAssumptions.from_config()
        self.scorer = PropensityScorer(self.assumptions)
        self.analyzer = IncentiveScenarioAnalyzer(self.assumptions)
        self.projector = ViralGrowthProjector(self.assumptions)

        logger.info(
            f"Pipeline initialized. "
            f"Conversion rate: {self.assumptions.referral_conversion_rate:.0%}, "
            f"referrals/referrer: {self.assumptions.avg_referrals_per_referrer}, "
            f"referred LTV: ${self.assumptions.referred_customer_ltv:,.0f}."
        )

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def run(self, customers: pd.DataFrame) -> pd.DataFrame:
        """
        Score every customer in the table.

        Args:
            customers: DataFrame with required columns customer_id,
                tenure_months, product_count, retention_score,
                engagement_level. Optional: claims_satisfied, nps_score.

        Returns:
            One row per customer, sorted by propensity_score descending.
        """
        logger.info(f"Pipeline starting. Input: {len(customers):,} customers.")

        results = self.score_customers(customers)
        output_df = self._serialize_results(results)

        logger.info(f"Scoring complete. Tier mix: {count_by_tier(results)}.")
        return output_df

    def score_customers(self, customers: pd.DataFrame) -> List[PropensityResult]:
        """Validates the table and scores each row. Returns results in input order."""
        df = self._prepare(customers)
        return [self.scorer.score(self._to_input(row)) for row in df.to_dict("records")]

    def build_program_report(
        self,
        scored: pd.DataFrame,
        months: int = 12,
        setup_cost: float = 0.0,
        monthly_cost: float = 0.0,
        incentive_per_conversion: float | None = None,
        monthly_conversions: float | None = None,
        referral_rate: float | None = None,
    ) -> ProgramReport:
        """
        Build the program-level report from a scored customer table (output of run()).

        Champions count as high propensity and promoters as medium. Unless
        overridden, the ROI rollup uses the optimal scenario's incentive and
        its annual conversions spread over twelve months, and the growth
        projection uses the book's average tier referral rate, per month.
        """
        total_customers = len(scored)
        tier_counts = {tier: 0 for tier in self.scorer.tier_names}
        if total_customers:
            for tier, count in scored["tier"].value_counts().items():
                tier_counts[tier] = int(count)

        scenarios = self.analyzer.analyze(
            total_customers, tier_counts.get("champion", 0), tier_counts.get("promoter", 0)
        )
        optimal = get_optimal_scenario(scenarios)
        logger.info(
            f"Analyzed {len(scenarios)} incentive scenarios. "
            f"Optimal: ${optimal.incentive_amount:,.0f} (LTV:CAC {optimal.ltv_cac_ratio:.1f})."
            if optimal else "No incentive scenarios configured."
        )

        if referral_rate is None:
            referral_rate = self._monthly_referral_rate(scored)
        projection = self.projector.project(total_customers, referral_rate, months)

        if incentive_per_conversion is None:
            incentive_per_conversion = optimal.incentive_amount if optimal else 0.0
        if monthly_conversions is None:
            monthly_conversions = optimal.expected_conversions / 12 if optimal else 0.0
        roi = calculate_referral_roi(
            setup_cost, monthly_cost, incentive_per_conversion, monthly_conversions,
            months, self.assumptions,
        )

        summary = {
            "total_customers": total_customers,
            "high_propensity_customers": tier_counts.get("champion", 0) + tier_counts.get("promoter", 0),
            "estimated_annual_referrals": float(scored["estimated_referrals_per_year"].sum()) if total_customers else 0.0,
            "viral_coefficient": projection.viral_coefficient,
            "referral_cac": roi.summary.referral_cac,
            "total_program_value": roi.summary.total_program_value,
        }
        logger.info(f"Program report complete. Summary: {summary}.")

        return ProgramReport(
            total_customers=total_customers,
            tier_counts=tier_counts,
            scenarios=scenarios,
            optimal_scenario=optimal,
            projection=projection,
            roi=roi,
            summary=summary,
        )

    # -------------------------------------------------------------------------
    # INTERNAL: INPUT PREPARATION
    # -------------------------------------------------------------------------

    def _prepare(self, customers: pd.DataFrame) -> pd.DataFrame:
        """Validates required columns and values, fills optional ones, clamps retention."""
        missing = [c for c in REQUIRED_COLUMNS if c not in customers.columns]
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

        null_counts = customers[REQUIRED_COLUMNS].isna().sum()
        nulls = {col: int(n) for col, n in null_counts.items() if n > 0}
        if nulls:
            raise ValueError(f"Null values in required columns: {nulls}")

        df = customers.copy()
        for col in OPTIONAL_COLUMNS:
            if col not in df.columns:
                df[col] = None

        df["retention_score"] = pd.to_numeric(df["retention_score"]).clip(0.0, 1.0)
        df["engagement_level"] = df["engagement_level"].astype(str).str.strip().str.lower()
        return df

    @staticmethod
    def _to_input(row: dict) -> PropensityInput:
        return PropensityInput(
            customer_id=str(row["customer_id"]),
            tenure_months=float(row["tenure_months"]),
            product_count=int(row["product_count"]),
            retention_score=float(row["retention_score"]),
            engagement_level=row["engagement_level"],
            claims_satisfied=_optional_bool(row.get("claims_satisfied")),
            nps_score=_optional_float(row.get("nps_score")),
        )

    def _monthly_referral_rate(self, scored: pd.DataFrame) -> float:
        """Average annual tier referral rate of the book, spread over twelve months."""
        if scored.empty:
            return 0.0
        annual_rate = (
            scored["estimated_referrals_per_year"].mean()
            / self.assumptions.avg_referrals_per_referrer
        )
        return float(annual_rate) / 12

    # -------------------------------------------------------------------------
    # INTERNAL: OUTPUT SERIALIZATION
    # -------------------------------------------------------------------------

    def _serialize_results(self, results: List[PropensityResult]) -> pd.DataFrame:
        """Flattens PropensityResults into one row per customer."""
        if not results:
            return pd.DataFrame(columns=SCORED_COLUMNS)

        rows = []
        for r in results:
            row = {
                "customer_id": r.customer_id,
                "propensity_score": round(r.propensity_score, 4),
                "tier": r.tier,
                "estimated_referrals_per_year": r.estimated_referrals_per_year,
                "recommended_approach": r.recommended_approach,
            }
            for name in FACTOR_NAMES:
                row[f"factor_{name}"] = r.factors.get(name)
            rows.append(row)

        df = pd.DataFrame(rows, columns=SCORED_COLUMNS)

        # Sort: score descending, then customer for stable output
        df = df.sort_values(
            ["propensity_score", "customer_id"],
            ascending=[False, True]
        ).reset_index(drop=True)

        return df


# =============================================================================
# REPORT SERIALIZATION
# =============================================================================

def scenarios_to_frame(scenarios: List[IncentiveScenario]) -> pd.DataFrame:
    return pd.DataFrame([asdict(s) for s in scenarios])


def projection_to_frame(projection: ViralProjection) -> pd.DataFrame:
    columns = ["month", "total_customers", "new_from_referrals",
               "cumulative_referral_customers", "growth_rate"]
    return pd.DataFrame([asdict(m) for m in projection.month_projections], columns=columns)


def roi_to_frame(roi: ROIAnalysis) -> pd.DataFrame:
    """Long format: one row per (section, metric)."""
    rows = []
    for section, values in asdict(roi).items():
        for metric, value in values.items():
            rows.append({"section": section, "metric": metric, "value": value})
    return pd.DataFrame(rows, columns=["section", "metric", "value"])


def _optional_bool(value) -> bool | None:
    if value is None or pd.isna(value):
        return None
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "yes", "y", "1"}:
            return True
        if normalized in {"false", "no", "n", "0"}:
            return False
        return None
    return bool(value)


def _optional_float(value) -> float | None:
    if value is None:
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if pd.isna(result) else result
