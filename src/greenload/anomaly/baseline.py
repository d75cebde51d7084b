"""Anomaly detection: historical (weekday, hour) consumption baseline."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from greenload.data_pipeline.history import history_to_frame
from greenload.data_pipeline.schemas import Sample

SlotKey = tuple[int, int]


def _upper_median(values: pd.Series) -> float:
    # upper-middle element for even-sized buckets, no interpolation
    ordered = np.sort(values.to_numpy(dtype=float))
    return float(ordered[len(ordered) // 2])


@dataclass(frozen=True)
class Baseline:
    """Median consumption per (day_of_week, hour_of_day) slot; Monday is day 0."""

    medians: Mapping[SlotKey, float] = field(default_factory=dict)

    def expected(self, dayofweek: int, hour: int) -> Optional[float]:
        return self.medians.get((dayofweek, hour))

    def __len__(self) -> int:
        return len(self.medians)


def baseline_from_frame(df: pd.DataFrame) -> Baseline:
    if df.empty:
        return Baseline()
    grouped = df.groupby(["dayofweek", "hour"], sort=True)["consumption_kwh"].agg(_upper_median)
    return Baseline({(int(d), int(h)): float(v) for (d, h), v in grouped.items()})


def build_baseline(history: Sequence[Sample]) -> Baseline:
    """Build the slot baseline from the entire history. Pure: no state is kept."""
    return baseline_from_frame(history_to_frame(history))
