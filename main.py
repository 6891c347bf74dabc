"""
main.py
--------
Entry point for the Referral Growth Engine.

Reads a customer table, scores referral propensity, builds the program
report (incentive scenarios, viral projection, ROI) and writes output to
the outputs/ folder.

Usage (from the project root):
    python main.py

    # With optional arguments:
    python main.py --input path/to/customers.csv
    python main.py --months 24 --setup-cost 5000 --monthly-cost 500
    python main.py --min-tier promoter
    python main.py --baseline path/to/last_quarter_scores.csv
"""

import sys
import os
import argparse
import logging
import pandas as pd
from datetime import datetime

# Ensure project root is on path (for VS Code runs from any working directory)
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from core.formatting import format_currency, format_percentage
from monitoring.drift_monitor import DriftMonitor
from pipeline import (
    ProgramReport,
    ReferralPipeline,
    projection_to_frame,
    roi_to_frame,
    scenarios_to_frame,
)


# =============================================================================
# LOGGING SETUP
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("main")


TIER_ORDER = {"champion": 4, "promoter": 3, "passive": 2, "detractor": 1}


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Referral Growth Engine — Score referral propensity and size a referral program."
    )
    parser.add_argument(
        "--input", type=str, default=None,
        help="Path to input customers CSV. Defaults to referral_sample_customers.csv in project root."
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Output directory. Defaults to outputs/ in project root."
    )
    parser.add_argument(
        "--months", type=int, default=12,
        help="Projection and ROI horizon in months. Default: 12."
    )
    parser.add_argument(
        "--setup-cost", type=float, default=0.0,
        help="One-time referral program setup cost."
    )
    parser.add_argument(
        "--monthly-cost", type=float, default=0.0,
        help="Monthly referral program operating cost."
    )
    parser.add_argument(
        "--incentive", type=float, default=None,
        help="Incentive per conversion. Defaults to the optimal scenario's amount."
    )
    parser.add_argument(
        "--monthly-conversions", type=float, default=None,
        help="Expected referral conversions per month. Defaults to the optimal scenario's."
    )
    parser.add_argument(
        "--min-tier", type=str, default="detractor",
        choices=list(TIER_ORDER.keys()),
        help="Minimum tier to include in the scores output. Default: detractor (everyone)."
    )
    parser.add_argument(
        "--baseline", type=str, default=None,
        help="Previously written propensity scores CSV. Enables drift monitoring against it."
    )
    return parser.parse_args(argv)


# =============================================================================
# MAIN
# =============================================================================

def main(argv: list[str] | None = None):
    args = parse_args(argv)

    # --- Resolve paths ---
    input_path = args.input or os.path.join(PROJECT_ROOT, "referral_sample_customers.csv")
    output_dir = args.output_dir or os.path.join(PROJECT_ROOT, "outputs")
    os.makedirs(output_dir, exist_ok=True)

    # --- Load customers ---
    logger.info(f"Loading customers from: {input_path}")
    if not os.path.exists(input_path):
        logger.error(f"Input file not found: {input_path}")
        sys.exit(1)

    customers = pd.read_csv(input_path)
    logger.info(f"Loaded {len(customers):,} customers.")

    # --- Run pipeline ---
    pipeline = ReferralPipeline()
    scored = pipeline.run(customers)
    report = pipeline.build_program_report(
        scored,
        months=args.months,
        setup_cost=args.setup_cost,
        monthly_cost=args.monthly_cost,
        incentive_per_conversion=args.incentive,
        monthly_conversions=args.monthly_conversions,
    )

    # --- Apply tier filter ---
    min_tier_value = TIER_ORDER[args.min_tier]
    filtered = scored[scored["tier"].map(TIER_ORDER) >= min_tier_value].copy()
    logger.info(
        f"After filtering (>= {args.min_tier}): {len(filtered):,} customers. "
        f"Filtered out: {len(scored) - len(filtered):,}."
    )

    # --- Outputs ---
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    outputs = {
        "propensity_scores": filtered,
        "incentive_scenarios": scenarios_to_frame(report.scenarios),
        "viral_projection": projection_to_frame(report.projection),
        "referral_roi": roi_to_frame(report.roi),
    }
    for name, frame in outputs.items():
        path = os.path.join(output_dir, f"{name}_{timestamp}.csv")
        frame.to_csv(path, index=False)
        logger.info(f"{name} saved to: {path}")

    _print_summary(report)

    # --- Optional: Drift Monitoring ---
    if args.baseline:
        if not os.path.exists(args.baseline):
            logger.error(f"Baseline file not found: {args.baseline}")
            sys.exit(1)

        logger.info("Running drift monitor...")
        baseline = pd.read_csv(args.baseline)
        drift_report = DriftMonitor().run(baseline, scored)

        logger.info(f"Drift Report: {drift_report.summary}")
        for alert in drift_report.alerts:
            level = {"CRITICAL": logging.ERROR, "WARNING": logging.WARNING}.get(alert.severity, logging.INFO)
            logger.log(level, f"[{alert.alert_type}] {alert.severity}: {alert.message}")

        if drift_report.alerts:
            drift_path = os.path.join(output_dir, f"drift_report_{timestamp}.csv")
            pd.DataFrame([vars(a) for a in drift_report.alerts]).to_csv(drift_path, index=False)
            logger.info(f"Drift report saved to: {drift_path}")
        else:
            logger.info("No drift alerts detected.")


def _print_summary(report: ProgramReport):
    """Prints a clean summary table to the console."""
    if report.total_customers == 0:
        print("\n  No customers to display.\n")
        return

    print("\n" + "=" * 80)
    print("  REFERRAL GROWTH SUMMARY")
    print("=" * 80)

    print("\n  Referral Tiers:")
    print("  " + "-" * 60)
    for tier, count in report.tier_counts.items():
        pct = count / report.total_customers
        print(f"    {tier:12s}  {count:>6,}  ({format_percentage(pct)})")

    print("\n  Incentive Scenarios:")
    print("  " + "-" * 60)
    for s in report.scenarios:
        marker = " *" if s is report.optimal_scenario else ""
        print(
            f"    {format_currency(s.incentive_amount):>6s}  "
            f"{s.expected_conversions:>5,} conv  "
            f"CAC {format_currency(s.referral_cac):>6s}  "
            f"LTV:CAC {s.ltv_cac_ratio:>6.1f}  {s.recommendation.split(' - ')[0]}{marker}"
        )

    projection = report.projection
    final = projection.month_projections[-1] if projection.month_projections else None
    print(f"\n  Viral Coefficient: {projection.viral_coefficient:.3f}  ({projection.interpretation})")
    if final is not None:
        print(
            f"  Month {final.month}: {final.total_customers:,} customers "
            f"(+{final.cumulative_referral_customers:,}, {format_percentage(final.growth_rate)})"
        )

    summary = report.roi.summary
    print(f"\n  Referral CAC: {format_currency(summary.referral_cac)}  vs paid {format_currency(summary.paid_cac)}")
    print(f"  CAC Savings:  {format_percentage(summary.cac_savings_percentage)}")
    print(f"  Total Program Value: {format_currency(summary.total_program_value)}")
    print("=" * 80 + "\n")


if __name__ == "__main__":
    main()
