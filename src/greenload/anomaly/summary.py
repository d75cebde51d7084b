"""Anomaly detection: severity and type counts over flagged records."""
from __future__ import annotations

from collections import Counter
from typing import Iterable

from greenload.data_pipeline.schemas import AnomalyRecord, AnomalySummary, AnomalyTypeCounts


def anomaly_stats(records: Iterable[AnomalyRecord]) -> AnomalySummary:
    flagged = [r for r in records if r.is_anomaly]
    severities = Counter(r.severity for r in flagged)
    types = Counter(r.type for r in flagged if r.type is not None)
    return AnomalySummary(
        total=len(flagged),
        high=severities["high"],
        medium=severities["medium"],
        low=severities["low"],
        types=AnomalyTypeCounts(
            spike=types["spike"],
            drop=types["drop"],
            sustained=types["sustained"],
            pattern=types["pattern"],
        ),
    )
