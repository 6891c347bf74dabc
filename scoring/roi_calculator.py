"""
roi_calculator.py
------------------
Referral program ROI versus paid acquisition.

Rolls up program costs (setup, monthly operations, per-conversion
incentives) over a horizon and compares the resulting referral CAC and
customer value against the paid-acquisition benchmarks.
"""

from core.models import (
    PaidAcquisitionComparison,
    ProgramCosts,
    ReferralAssumptions,
    ReferralMetrics,
    ROIAnalysis,
    ROISummary,
)


def calculate_referral_roi(
    program_setup_cost: float,
    monthly_program_cost: float,
    incentive_per_conversion: float,
    expected_monthly_conversions: float,
    months: int = 12,
    assumptions: ReferralAssumptions | None = None,
) -> ROIAnalysis:
    """
    Calculate ROI of a referral program against paid acquisition.

    Args:
        program_setup_cost: One-time setup (software, marketing materials).
        monthly_program_cost: Fixed monthly program management cost.
        incentive_per_conversion: Incentive paid per successful referral.
        expected_monthly_conversions: Referred customers won per month.
        months: Horizon for the rollup.
        assumptions: Override the LTV / CAC benchmarks.
    """
    a = assumptions or ReferralAssumptions.from_config()

    # --- Program costs ---
    total_setup = program_setup_cost
    total_monthly = monthly_program_cost * months
    total_incentives = incentive_per_conversion * expected_monthly_conversions * months
    total_costs = total_setup + total_monthly + total_incentives

    # --- Referral economics ---
    total_customers = expected_monthly_conversions * months
    referral_cac = total_costs / total_customers if total_customers > 0 else 0.0
    revenue = a.referred_customer_ltv * total_customers
    referral_roi = (revenue - total_costs) / total_costs if total_costs > 0 else 0.0

    # --- Paid acquisition comparison ---
    paid_cac = a.paid_cac_benchmark
    paid_ltv = a.paid_ltv_benchmark
    paid_acquisition_cost = paid_cac * total_customers
    cost_savings = paid_acquisition_cost - total_costs
    # Referred customers carry a higher LTV than paid leads
    quality_premium = (a.referred_customer_ltv - paid_ltv) * total_customers
    total_program_value = cost_savings + quality_premium

    break_even = (
        (total_setup + total_monthly) / incentive_per_conversion
        if incentive_per_conversion > 0 else 0.0
    )

    return ROIAnalysis(
        program_costs=ProgramCosts(
            setup=total_setup,
            monthly_operations=total_monthly,
            incentives=total_incentives,
            total=total_costs,
        ),
        referral_metrics=ReferralMetrics(
            total_customers=total_customers,
            cac=referral_cac,
            avg_ltv=a.referred_customer_ltv,
            ltv_cac_ratio=a.referred_customer_ltv / referral_cac if referral_cac > 0 else 0.0,
            revenue=revenue,
            roi=referral_roi,
        ),
        vs_paid_acquisition=PaidAcquisitionComparison(
            paid_cac=paid_cac,
            paid_ltv=paid_ltv,
            cost_to_acquire_via_paid=paid_acquisition_cost,
            cost_savings=cost_savings,
            quality_premium=quality_premium,
            total_value_vs_paid=total_program_value,
        ),
        summary=ROISummary(
            referral_cac=referral_cac,
            paid_cac=paid_cac,
            cac_savings_per_customer=paid_cac - referral_cac,
            cac_savings_percentage=(paid_cac - referral_cac) / paid_cac if paid_cac > 0 else 0.0,
            total_program_value=total_program_value,
            break_even_conversions=break_even,
        ),
    )
