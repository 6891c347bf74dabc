"""
config_loader.py
-----------------
Singleton config loader. Reads config.yaml once and caches it.
All modules access scoring assumptions through this — never hardcoded values.
"""

import os
import yaml
from typing import Any, Dict


_CONFIG_CACHE: Dict[str, Any] = {}


def load_config(config_path: str | None = None) -> Dict[str, Any]:
    """
    Load and cache the YAML configuration file.

    Args:
        config_path: Path to config.yaml. Defaults to config/ relative to this file.

    Returns:
        Full config dictionary.
    """
    global _CONFIG_CACHE

    if _CONFIG_CACHE:
        return _CONFIG_CACHE

    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "config.yaml")

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        _CONFIG_CACHE = yaml.safe_load(f)

    return _CONFIG_CACHE


def _get_block(name: str) -> Dict[str, Any]:
    config = load_config()
    if name not in config:
        raise KeyError(
            f"No config block '{name}'. Available: {list(config.keys())}"
        )
    return config[name]


def get_referral_assumptions_config() -> Dict[str, Any]:
    """Returns the referral_assumptions block (conversion rates, LTV/CAC benchmarks)."""
    return _get_block("referral_assumptions")


def get_propensity_config() -> Dict[str, Any]:
    """Returns the propensity block (weights, breakpoints, tiers)."""
    return _get_block("propensity")


def get_tier_config() -> list[Dict[str, Any]]:
    """Returns the ordered tier definitions, highest tier first."""
    return get_propensity_config()["tiers"]


def get_incentive_config() -> Dict[str, Any]:
    """Returns the incentives block."""
    return _get_block("incentives")


def get_viral_interpretation_config() -> Dict[str, Any]:
    """Returns the viral_interpretation block."""
    return _get_block("viral_interpretation")


def get_drift_monitoring_config() -> Dict[str, Any]:
    """Returns drift monitoring config."""
    return _get_block("drift_monitoring")


def reset_config() -> None:
    """Clears cached config. Useful for testing."""
    global _CONFIG_CACHE
    _CONFIG_CACHE = {}
