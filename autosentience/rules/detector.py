"""Threshold-rule detection for sensor snapshots.

First stage of the prediction pipeline.  Applies an ordered table of
``(parameter, min?, max?, severity, message)`` rules to a snapshot and
returns every breach, before anything is escalated to the language model.

No LLM calls and no side effects -- ``detect`` is a total function over
snapshots and never raises.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import yaml

from autosentience.schemas import (
    RuleDetectionResult,
    RuleViolation,
    SENSOR_PARAMETERS,
    SensorReadingInput,
    Severity,
    highest_severity,
)

logger = logging.getLogger(__name__)

_DEFAULT_RULES_PATH = Path(__file__).resolve().parent / "threshold_rules.yaml"

_VALID_SEVERITIES = frozenset(s.value for s in Severity)
_VALID_PARAMETERS = frozenset(SENSOR_PARAMETERS)

_RECOMMENDED_ACTIONS: Dict[Severity, str] = {
    Severity.CRITICAL: "IMMEDIATE ACTION REQUIRED - Stop vehicle safely and call for assistance",
    Severity.HIGH: "Schedule service appointment within 24-48 hours",
    Severity.MEDIUM: "Schedule service appointment within 7 days",
    Severity.LOW: "Monitor condition and schedule service at next convenient time",
}

# Loaded lazily on first use of the bundled table.
_default_rules_cache: Optional[Tuple["ThresholdRule", ...]] = None

SnapshotLike = Union[SensorReadingInput, Mapping[str, Any]]


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ThresholdRule:
    """One row of the threshold table.

    Attributes
    ----------
    id : str
        Stable identifier (e.g. ``"OIL_PRESSURE_CRITICAL"``).
    parameter : str
        Snapshot field the rule watches.
    min : float | None
        Fires when the value is strictly below this bound.
    max : float | None
        Fires when the value is strictly above this bound.
    severity : Severity
        Severity recorded on the violation.
    message : str
        Human-readable description of the breach.
    """

    id: str
    parameter: str
    min: Optional[float]
    max: Optional[float]
    severity: Severity
    message: str

    @property
    def rule_name(self) -> str:
        return f"{self.parameter}_threshold"

    def check(self, value: float) -> Optional[float]:
        """Return the crossed bound, or ``None`` if *value* is within range.

        Bounds are checked independently, min first; if both were crossed
        the max bound is the one recorded.
        """
        crossed: Optional[float] = None
        if self.min is not None and value < self.min:
            crossed = self.min
        if self.max is not None and value > self.max:
            crossed = self.max
        return crossed


def _validate_rule(rule: Dict[str, Any], index: int) -> None:
    """Validate a single rule dict structure. Raises ValueError on problems."""
    if not isinstance(rule, dict):
        raise ValueError(f"Rule at index {index} must be a mapping")
    required_keys = {"id", "parameter", "severity", "message"}
    missing = required_keys - set(rule.keys())
    if missing:
        raise ValueError(
            f"Rule at index {index} (id={rule.get('id', '?')}) "
            f"missing required keys: {missing}"
        )
    if rule["severity"] not in _VALID_SEVERITIES:
        raise ValueError(f"Rule {rule['id']}: invalid severity '{rule['severity']}'")
    if rule["parameter"] not in _VALID_PARAMETERS:
        raise ValueError(f"Rule {rule['id']}: unknown parameter '{rule['parameter']}'")
    if rule.get("min") is None and rule.get("max") is None:
        raise ValueError(f"Rule {rule['id']}: at least one of min/max is required")
    for bound in ("min", "max"):
        value = rule.get(bound)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise ValueError(f"Rule {rule['id']}: {bound} must be numeric, got {value!r}")


def load_rules(path: Optional[Union[str, Path]] = None) -> Tuple[ThresholdRule, ...]:
    """Load and validate threshold rules from a YAML file.

    Parameters
    ----------
    path :
        Path to YAML file.  Defaults to the bundled ``threshold_rules.yaml``.

    Returns
    -------
    tuple[ThresholdRule, ...]
        Rules in file order.

    Raises
    ------
    ValueError
        If the YAML is invalid or any rule fails validation.
    FileNotFoundError
        If the file does not exist.
    """
    path = Path(path) if path is not None else _DEFAULT_RULES_PATH

    try:
        with open(path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of rules in {path}, got {type(raw).__name__}")

    seen_ids: set[str] = set()
    rules: List[ThresholdRule] = []
    for i, entry in enumerate(raw):
        _validate_rule(entry, i)
        rid = entry["id"]
        if rid in seen_ids:
            raise ValueError(f"Duplicate rule id: {rid}")
        seen_ids.add(rid)
        rules.append(
            ThresholdRule(
                id=rid,
                parameter=entry["parameter"],
                min=None if entry.get("min") is None else float(entry["min"]),
                max=None if entry.get("max") is None else float(entry["max"]),
                severity=Severity(entry["severity"]),
                message=entry["message"],
            )
        )
    logger.debug("Loaded %d threshold rules from %s", len(rules), path)
    return tuple(rules)


def default_rules() -> Tuple[ThresholdRule, ...]:
    """Return the bundled rule table, loading it once."""
    global _default_rules_cache
    if _default_rules_cache is None:
        _default_rules_cache = load_rules()
    return _default_rules_cache


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def _read_value(snapshot: SnapshotLike, parameter: str) -> Optional[float]:
    """Fetch and coerce one reading.  Absent, non-numeric and NaN -> ``None``."""
    if isinstance(snapshot, Mapping):
        raw = snapshot.get(parameter)
    else:
        raw = getattr(snapshot, parameter, None)

    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return value


def detect(
    snapshot: SnapshotLike,
    rules: Optional[Sequence[ThresholdRule]] = None,
) -> RuleDetectionResult:
    """Apply the threshold table to *snapshot*.

    Parameters
    ----------
    snapshot :
        A :class:`SensorSnapshot` (or any reading model / plain mapping).
    rules :
        Optional rule table (for testing).  Defaults to the bundled table.

    Returns
    -------
    RuleDetectionResult
        One violation per fired rule, in table order, with
        ``highest_severity`` set to the max-ranked severity (or ``None``).
    """
    if rules is None:
        rules = default_rules()

    violations: List[RuleViolation] = []
    for rule in rules:
        value = _read_value(snapshot, rule.parameter)
        if value is None:
            continue

        threshold = rule.check(value)
        if threshold is None:
            continue

        violations.append(
            RuleViolation(
                rule_name=rule.rule_name,
                parameter=rule.parameter,
                current_value=value,
                threshold=threshold,
                severity=rule.severity,
                message=rule.message,
            )
        )

    return RuleDetectionResult(
        violations=tuple(violations),
        has_violations=len(violations) > 0,
        highest_severity=highest_severity(v.severity for v in violations),
    )


def format_violations(violations: Sequence[RuleViolation]) -> str:
    """Render violations as a bullet list for prompts and alert descriptions."""
    if not violations:
        return "No rule violations detected."
    return "\n".join(
        f"- {v.message}: {v.parameter} = {v.current_value} "
        f"(threshold: {v.threshold}, severity: {v.severity.value})"
        for v in violations
    )


def recommended_action(severity: Optional[Severity]) -> str:
    """Return the standard driver-facing action for *severity*."""
    if severity is None:
        return "Continue normal operation"
    return _RECOMMENDED_ACTIONS[severity]
