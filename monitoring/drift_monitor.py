"""
drift_monitor.py
------------------
Drift monitoring for referral propensity scores.

Compares a baseline scoring snapshot (e.g. last quarter's book) with the
current one along four dimensions:
    1. Scored volume — did the book grow or shrink sharply?
    2. Score distribution — KS test on propensity_score.
    3. Score stability — PSI on propensity_score. Industry standard
       thresholds: <0.1 = stable, 0.1–0.25 = minor shift, >0.25 = major shift.
    4. Tier mix — did any tier's share of the book move materially?

All thresholds and minimum sample sizes come from config.yaml.
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from scipy import stats
from typing import List

from config.config_loader import get_drift_monitoring_config


@dataclass
class DriftAlert:
    """A single drift detection alert."""
    alert_type: str                  # "VOLUME" | "SCORE_DISTRIBUTION" | "TIER_MIX"
    severity: str                    # "INFO" | "WARNING" | "CRITICAL"
    tier: str                        # Which tier (or "ALL")
    metric_name: str                 # e.g. "ks_p_value", "psi"
    metric_value: float
    threshold: float
    message: str
    detected_at: str = ""            # ISO timestamp


@dataclass
class DriftReport:
    """Full drift monitoring report — one per run."""
    run_timestamp: str
    baseline_size: int
    current_size: int
    alerts: List[DriftAlert] = field(default_factory=list)
    summary: dict = field(default_factory=dict)


class DriftMonitor:
    """
    Monitors propensity scoring output for distributional drift.

    Usage:
        monitor = DriftMonitor()
        report = monitor.run(baseline_scores_df, current_scores_df)
    """

    def __init__(self):
        self.config = get_drift_monitoring_config()
        self.ks_alpha = self.config["ks_alpha"]
        self.psi_minor = self.config["psi_minor"]
        self.psi_major = self.config["psi_major"]
        self.psi_bins = self.config["psi_bins"]
        self.min_baseline = self.config["min_baseline_samples"]
        self.min_current = self.config["min_current_samples"]
        self.volume_warning_band = self.config["volume_warning_band"]
        self.volume_critical_band = self.config["volume_critical_band"]
        self.tier_share_tolerance = self.config["tier_share_tolerance"]

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def run(self, baseline_df: pd.DataFrame, current_df: pd.DataFrame) -> DriftReport:
        """
        Run full drift monitoring suite.

        Args:
            baseline_df: Scored customers (output of ReferralPipeline.run) for
                the reference period. Must have propensity_score and tier.
            current_df: Scored customers for the period under review.

        Returns:
            DriftReport with all alerts and summary metrics.
        """
        for name, df in (("baseline", baseline_df), ("current", current_df)):
            missing = [c for c in ("propensity_score", "tier") if c not in df.columns]
            if missing:
                raise ValueError(f"Missing required columns in {name}: {missing}")

        now = pd.Timestamp.now().isoformat()
        alerts: List[DriftAlert] = []

        # --- 1. Volume drift ---
        alerts.extend(self._check_volume_drift(len(baseline_df), len(current_df), now))

        # --- 2 & 3. Score distribution drift ---
        alerts.extend(self._check_score_drift(
            baseline_df["propensity_score"].to_numpy(dtype=float),
            current_df["propensity_score"].to_numpy(dtype=float),
            now,
        ))

        # --- 4. Tier mix ---
        alerts.extend(self._check_tier_mix(baseline_df["tier"], current_df["tier"], now))

        summary = {
            "total_alerts": len(alerts),
            "critical_alerts": sum(1 for a in alerts if a.severity == "CRITICAL"),
            "warning_alerts": sum(1 for a in alerts if a.severity == "WARNING"),
            "info_alerts": sum(1 for a in alerts if a.severity == "INFO"),
        }

        return DriftReport(
            run_timestamp=now,
            baseline_size=len(baseline_df),
            current_size=len(current_df),
            alerts=alerts,
            summary=summary,
        )

    # -------------------------------------------------------------------------
    # INTERNAL: VOLUME DRIFT
    # -------------------------------------------------------------------------

    def _check_volume_drift(self, baseline_count: int, current_count: int, now: str) -> List[DriftAlert]:
        """Flags a book that grew or shrank outside the configured bands."""
        if baseline_count == 0:
            return []  # No baseline to compare against

        ratio = current_count / baseline_count
        warn_low, warn_high = self.volume_warning_band
        crit_low, crit_high = self.volume_critical_band

        if warn_low <= ratio <= warn_high:
            return []

        severity = "CRITICAL" if (ratio > crit_high or ratio < crit_low) else "WARNING"
        return [DriftAlert(
            alert_type="VOLUME",
            severity=severity,
            tier="ALL",
            metric_name="scored_volume_ratio",
            metric_value=round(ratio, 3),
            threshold=warn_high if ratio > warn_high else warn_low,
            message=(
                f"Scored customer volume changed by {((ratio - 1) * 100):+.0f}%. "
                f"Baseline: {baseline_count:,}, current: {current_count:,}."
            ),
            detected_at=now,
        )]

    # -------------------------------------------------------------------------
    # INTERNAL: SCORE DISTRIBUTION DRIFT
    # -------------------------------------------------------------------------

    def _check_score_drift(self, baseline: np.ndarray, current: np.ndarray, now: str) -> List[DriftAlert]:
        """KS test + PSI on propensity scores."""
        alerts = []

        # Need minimum samples for meaningful tests
        if len(baseline) < self.min_baseline or len(current) < self.min_current:
            return alerts

        # --- KS Test ---
        ks_stat, ks_pvalue = stats.ks_2samp(baseline, current)
        if ks_pvalue < self.ks_alpha:
            alerts.append(DriftAlert(
                alert_type="SCORE_DISTRIBUTION",
                severity="WARNING",
                tier="ALL",
                metric_name="ks_p_value",
                metric_value=round(float(ks_pvalue), 4),
                threshold=self.ks_alpha,
                message=(
                    f"Propensity score distribution shift detected. "
                    f"KS statistic={ks_stat:.3f}, p-value={ks_pvalue:.4f}. "
                    f"Mean score {baseline.mean():.1f} → {current.mean():.1f}."
                ),
                detected_at=now,
            ))

        # --- PSI ---
        psi = self._compute_psi(baseline, current, self.psi_bins)
        if psi > self.psi_minor:
            severity = "CRITICAL" if psi > self.psi_major else "WARNING"
            alerts.append(DriftAlert(
                alert_type="SCORE_DISTRIBUTION",
                severity=severity,
                tier="ALL",
                metric_name="psi",
                metric_value=round(psi, 4),
                threshold=self.psi_major if severity == "CRITICAL" else self.psi_minor,
                message=(
                    f"PSI={psi:.3f} on propensity scores. "
                    f"({'Major' if severity == 'CRITICAL' else 'Minor'} distribution shift.)"
                ),
                detected_at=now,
            ))

        return alerts

    # -------------------------------------------------------------------------
    # INTERNAL: TIER MIX
    # -------------------------------------------------------------------------

    def _check_tier_mix(self, baseline_tiers: pd.Series, current_tiers: pd.Series, now: str) -> List[DriftAlert]:
        """Flags any tier whose share of the book moved by more than the tolerance."""
        alerts = []
        if baseline_tiers.empty or current_tiers.empty:
            return alerts

        baseline_share = baseline_tiers.value_counts(normalize=True)
        current_share = current_tiers.value_counts(normalize=True)

        for tier in sorted(set(baseline_share.index) | set(current_share.index)):
            before = float(baseline_share.get(tier, 0.0))
            after = float(current_share.get(tier, 0.0))
            shift = after - before
            if abs(shift) > self.tier_share_tolerance:
                alerts.append(DriftAlert(
                    alert_type="TIER_MIX",
                    severity="WARNING",
                    tier=tier,
                    metric_name="tier_share_shift",
                    metric_value=round(shift, 4),
                    threshold=self.tier_share_tolerance,
                    message=(
                        f"{tier.title()} share moved {before:.1%} → {after:.1%} "
                        f"({shift * 100:+.1f} pts)."
                    ),
                    detected_at=now,
                ))

        return alerts

    # -------------------------------------------------------------------------
    # INTERNAL: PSI CALCULATION
    # -------------------------------------------------------------------------

    @staticmethod
    def _compute_psi(baseline: np.ndarray, comparison: np.ndarray, n_bins: int = 10) -> float:
        """
        Computes Population Stability Index between two distributions.

        PSI = Σ (P_actual - P_expected) * ln(P_actual / P_expected)

        Uses baseline percentiles to define bin edges, then maps
        both distributions into those bins.
        """
        bin_edges = np.percentile(baseline, np.linspace(0, 100, n_bins + 1))
        # Edges collapse when scores have low cardinality
        bin_edges = np.unique(bin_edges)
        if len(bin_edges) < 3:
            return 0.0  # Not enough variation to compute PSI

        # Scores outside the baseline range fall into the outermost bins
        comparison = np.clip(comparison, bin_edges[0], bin_edges[-1])

        baseline_counts, _ = np.histogram(baseline, bins=bin_edges)
        comparison_counts, _ = np.histogram(comparison, bins=bin_edges)

        # Small epsilon avoids log(0) and division by zero
        eps = 1e-6
        baseline_freq = (baseline_counts + eps) / (baseline_counts.sum() + eps * len(baseline_counts))
        comparison_freq = (comparison_counts + eps) / (comparison_counts.sum() + eps * len(comparison_counts))

        psi = np.sum((comparison_freq - baseline_freq) * np.log(comparison_freq / baseline_freq))

        return float(psi)
