"""
Anomaly detection: rule-based sub-detectors.

Four independent checks score the current sample:

- statistical: z-score against the trailing window
- pattern: relative deviation from the (weekday, hour) baseline median
- contextual: Tukey IQR fence over trailing samples with a similar context
  (temperature, occupancy, business hours)
- equipment: ratio tests against the last few raw samples (sudden drop,
  sudden spike, sustained shift)

A detector that lacks the data it needs abstains, i.e. reports no anomaly.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from greenload.data_pipeline.schemas import AnomalyType, Severity
from greenload.utils.config import ContextualConfig, EquipmentConfig, SeverityThresholds, ZCutoffs


@dataclass(frozen=True)
class DetectorOutcome:
    detector: str
    is_anomaly: bool
    severity: Severity = "low"
    type: Optional[AnomalyType] = None


def _abstain(detector: str) -> DetectorOutcome:
    return DetectorOutcome(detector=detector, is_anomaly=False)


def _graded(value: float, thresholds: SeverityThresholds | ZCutoffs) -> Optional[Severity]:
    # cutoffs are checked high -> medium -> low; first exceeded one wins
    if value > thresholds.high:
        return "high"
    if value > thresholds.medium:
        return "medium"
    if value > thresholds.low:
        return "low"
    return None


def statistical_rule(value: float, window: np.ndarray, cutoffs: ZCutoffs, eps: float = 0.001) -> DetectorOutcome:
    mean = float(window.mean())
    std = float(window.std())
    z = abs((value - mean) / (std + eps))
    severity = _graded(z, cutoffs)
    kind: AnomalyType = "spike" if value > mean else "drop"
    if severity is None:
        return DetectorOutcome("statistical", False, "low", kind)
    return DetectorOutcome("statistical", True, severity, kind)


def pattern_rule(value: float, expected: Optional[float], thresholds: SeverityThresholds) -> DetectorOutcome:
    if not expected:
        return _abstain("pattern")
    deviation = abs(value - expected) / expected
    severity = _graded(deviation, thresholds)
    if severity is None:
        return DetectorOutcome("pattern", False, "low", "pattern")
    return DetectorOutcome("pattern", True, severity, "pattern")


def iqr_fence(values: np.ndarray, multiplier: float = 1.5) -> tuple[float, float]:
    """Tukey fence using index-based quartiles of the sorted values."""
    ordered = np.sort(values)
    n = len(ordered)
    q1 = float(ordered[int(n * 0.25)])
    q3 = float(ordered[int(n * 0.75)])
    iqr = q3 - q1
    return q1 - multiplier * iqr, q3 + multiplier * iqr


def _relative_distance(value: float, bound: float) -> float:
    if bound == 0:
        return float("inf")
    return abs(value - bound) / abs(bound)


def contextual_rule(
    value: float,
    temperature: float,
    occupancy: float,
    is_business_hour: bool,
    window_values: np.ndarray,
    window_temps: np.ndarray,
    window_occupancy: np.ndarray,
    window_business: np.ndarray,
    cfg: ContextualConfig,
) -> DetectorOutcome:
    mask = (
        (np.abs(window_temps - temperature) < cfg.temp_tolerance_c)
        & (np.abs(window_occupancy - occupancy) < cfg.occupancy_tolerance)
        & (window_business == is_business_hour)
    )
    similar = window_values[mask]
    if len(similar) < cfg.min_matches:
        return _abstain("contextual")

    lower, upper = iqr_fence(similar, cfg.iqr_multiplier)
    if lower <= value <= upper:
        return DetectorOutcome("contextual", False, "low", "pattern")

    deviation = min(_relative_distance(value, lower), _relative_distance(value, upper))
    severity: Severity = _graded(deviation, cfg.severity) or "low"
    return DetectorOutcome("contextual", True, severity, "pattern")


def equipment_rule(value: float, recent: np.ndarray, cfg: EquipmentConfig) -> DetectorOutcome:
    if len(recent) < cfg.min_samples:
        return _abstain("equipment")

    avg = float(recent.mean())
    if value < avg * cfg.drop_ratio:
        return DetectorOutcome("equipment", True, "high", "drop")
    if value > avg * cfg.spike_ratio:
        return DetectorOutcome("equipment", True, "high", "spike")

    trail = np.append(recent, value)
    if np.all(trail > avg * cfg.sustained_high_ratio) or np.all(trail < avg * cfg.sustained_low_ratio):
        return DetectorOutcome("equipment", True, "medium", "sustained")
    return _abstain("equipment")
