"""
Anomaly detection: multi-method detector with ordered severity fusion.

Every call rebuilds the (weekday, hour) baseline from the full history and
passes it explicitly into scoring, so a detector instance holds only its
configuration and can be reused freely.

Fusion: the sub-detector outcomes are kept in the fixed order
``statistical, pattern, contextual, equipment`` and reduced with the key
``(severity score, -position)``: the most severe flag wins and ties go to
the detector evaluated first. The fused confidence grows with both the mean
severity of the flags and the number of detectors that agree.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from greenload.anomaly.baseline import Baseline, baseline_from_frame
from greenload.anomaly.rules import (
    DetectorOutcome,
    contextual_rule,
    equipment_rule,
    pattern_rule,
    statistical_rule,
)
from greenload.data_pipeline.history import history_to_frame
from greenload.data_pipeline.schemas import SEVERITY_SCORES, AnomalyRecord, Sample, Sensitivity
from greenload.utils.config import AnomalyConfig
from greenload.utils.logging import get_logger

log = get_logger(__name__)

DETECTOR_ORDER = ("statistical", "pattern", "contextual", "equipment")
COLUMNS = ("consumption_kwh", "temperature_c", "occupancy_fraction", "is_business_hour", "dayofweek", "hour")


def _columns(df: pd.DataFrame) -> Dict[str, np.ndarray]:
    return {name: df[name].to_numpy(dtype=float) for name in COLUMNS}


def fuse_outcomes(outcomes: Sequence[DetectorOutcome]) -> Optional[DetectorOutcome]:
    """Most severe flagged outcome; earlier position breaks ties. None if nothing flagged."""
    flagged = [(pos, o) for pos, o in enumerate(outcomes) if o.is_anomaly]
    if not flagged:
        return None
    _, winner = max(flagged, key=lambda item: (SEVERITY_SCORES[item[1].severity], -item[0]))
    return winner


def anomaly_confidence(flagged: Sequence[DetectorOutcome], n_detectors: int = len(DETECTOR_ORDER), cap: float = 0.98) -> float:
    if not flagged:
        return 0.0
    mean_score = sum(SEVERITY_SCORES[o.severity] for o in flagged) / len(flagged)
    agreement = len(flagged) / n_detectors
    return min(cap, 0.5 + (mean_score / 3) * 0.3 + agreement * 0.2)


class AnomalyDetector:
    def __init__(self, sensitivity: Optional[Sensitivity] = None, config: Optional[AnomalyConfig] = None):
        self.config = config or AnomalyConfig()
        self.sensitivity: Sensitivity = sensitivity or self.config.sensitivity
        if self.sensitivity not in self.config.z_profiles:
            raise ValueError(f"No z-score profile for sensitivity {self.sensitivity!r}")

    def detect(self, history: Sequence[Sample], window_size: Optional[int] = None) -> List[AnomalyRecord]:
        """Score every sample from ``max(window_size, 24)`` onward; one record per scored sample."""
        cfg = self.config
        window_size = cfg.window_size if window_size is None else window_size
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")

        ctx = cfg.contextual
        df = history_to_frame(history, business_hours=(ctx.business_start_hour, ctx.business_end_hour))
        baseline = baseline_from_frame(df)
        records = self._score(history, df, baseline, window_size)

        flagged = sum(r.is_anomaly for r in records)
        log.info(
            "Scored %d samples, %d flagged (sensitivity=%s)", len(records), flagged, self.sensitivity,
            extra={"scored": len(records), "flagged": flagged},
        )
        return records

    def evaluate(
        self,
        df: pd.DataFrame,
        baseline: Baseline,
        index: int,
        window_size: int,
        columns: Optional[Dict[str, np.ndarray]] = None,
    ) -> List[DetectorOutcome]:
        """Run the four sub-detectors, in fixed order, on row ``index`` of a calendar-featured frame."""
        cfg = self.config
        cols = columns if columns is not None else _columns(df)
        values = cols["consumption_kwh"]
        value = float(values[index])
        window = slice(index - window_size, index)

        return [
            statistical_rule(value, values[window], cfg.z_profiles[self.sensitivity], cfg.std_epsilon),
            pattern_rule(value, baseline.expected(int(cols["dayofweek"][index]), int(cols["hour"][index])), cfg.pattern),
            contextual_rule(
                value,
                float(cols["temperature_c"][index]),
                float(cols["occupancy_fraction"][index]),
                int(cols["is_business_hour"][index]),
                values[window],
                cols["temperature_c"][window],
                cols["occupancy_fraction"][window],
                cols["is_business_hour"][window],
                cfg.contextual,
            ),
            equipment_rule(value, values[max(0, index - cfg.equipment.window):index], cfg.equipment),
        ]

    def _score(
        self,
        history: Sequence[Sample],
        df: pd.DataFrame,
        baseline: Baseline,
        window_size: int,
    ) -> List[AnomalyRecord]:
        cfg = self.config
        cols = _columns(df)
        records: List[AnomalyRecord] = []
        for i in range(max(window_size, cfg.min_start_index), len(df)):
            outcomes = self.evaluate(df, baseline, i, window_size, cols)
            sample = history[i]
            winner = fuse_outcomes(outcomes)
            if winner is None:
                records.append(
                    AnomalyRecord(
                        timestamp=sample.timestamp,
                        value=sample.consumption_kwh,
                        is_anomaly=False,
                        severity="low",
                        confidence=cfg.normal_confidence,
                    )
                )
                continue
            flagged = [o for o in outcomes if o.is_anomaly]
            records.append(
                AnomalyRecord(
                    timestamp=sample.timestamp,
                    value=sample.consumption_kwh,
                    is_anomaly=True,
                    severity=winner.severity,
                    type=winner.type,
                    confidence=anomaly_confidence(flagged, len(outcomes), cfg.max_confidence),
                )
            )
        return records
