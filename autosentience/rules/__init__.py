"""Deterministic threshold-rule detection for sensor snapshots."""

from autosentience.rules.detector import (
    ThresholdRule,
    detect,
    format_violations,
    load_rules,
    recommended_action,
)

__all__ = [
    "ThresholdRule",
    "detect",
    "format_violations",
    "load_rules",
    "recommended_action",
]
