"""
Data Pipeline: history loading, validation and calendar features.

Histories arrive as ordered sequences of :class:`Sample`. This module turns
files into such sequences, enforces ordering, applies the caller's retention
window and builds the pandas frame the engines compute on.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence

import pandas as pd

from greenload.data_pipeline.schemas import Sample
from greenload.utils.logging import get_logger

log = get_logger(__name__)

# Column names used by the dashboard's exported histories.
LEGACY_COLUMNS = {
    "kwh": "consumption_kwh",
    "temperature": "temperature_c",
    "irradiance": "irradiance_wm2",
    "windSpeed": "wind_speed_ms",
    "wind_speed": "wind_speed_ms",
    "occupancy": "occupancy_fraction",
    "solarGeneration": "solar_generation_kwh",
    "solar_generation": "solar_generation_kwh",
}

REQUIRED_COLS = [
    "timestamp",
    "consumption_kwh",
    "temperature_c",
    "irradiance_wm2",
    "wind_speed_ms",
    "occupancy_fraction",
]

FRAME_COLS = REQUIRED_COLS + ["solar_generation_kwh"]


def _read_table(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix == ".json":
        return pd.read_json(path, orient="records", convert_dates=False)
    if suffix == ".parquet":
        return pd.read_parquet(path)
    raise ValueError(f"Unsupported history format: {path.suffix}")


def samples_from_frame(df: pd.DataFrame) -> List[Sample]:
    """Validate a raw frame into timestamp-ordered samples."""
    df = df.rename(columns={k: v for k, v in LEGACY_COLUMNS.items() if k in df.columns})
    missing = [c for c in REQUIRED_COLS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    df = df.copy()
    df["timestamp"] = pd.to_datetime(df["timestamp"], errors="coerce")
    if df["timestamp"].isna().any():
        raise ValueError("history contains unparseable timestamps")
    df = df.sort_values("timestamp", kind="stable").reset_index(drop=True)

    cols = [c for c in FRAME_COLS if c in df.columns]
    records = df[cols].to_dict(orient="records")
    samples = []
    for rec in records:
        solar = rec.get("solar_generation_kwh")
        if solar is not None and pd.isna(solar):
            rec["solar_generation_kwh"] = None
        rec["timestamp"] = rec["timestamp"].to_pydatetime()
        samples.append(Sample.model_validate(rec))
    return samples


def load_history(path: str | Path) -> List[Sample]:
    """Read a CSV/JSON/parquet history file into ordered samples."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    samples = samples_from_frame(_read_table(path))
    log.info("Loaded %d samples from %s", len(samples), path)
    return samples


def trim_history(history: Sequence[Sample], max_samples: int) -> List[Sample]:
    """Keep only the most recent ``max_samples`` samples."""
    if max_samples < 1:
        raise ValueError("max_samples must be >= 1")
    return list(history[-max_samples:])


def ensure_ordered(history: Iterable[Sample]) -> None:
    prev = None
    for idx, sample in enumerate(history):
        if prev is not None and sample.timestamp < prev:
            raise ValueError(f"history is not ordered by timestamp at index {idx}")
        prev = sample.timestamp


def add_time_features(df: pd.DataFrame, business_hours: tuple[int, int] = (8, 18)) -> pd.DataFrame:
    """Attach wall-clock calendar features used for slot matching."""
    out = df.copy()
    ts = out["timestamp"]
    out["hour"] = ts.map(lambda t: t.hour).astype(int)
    out["dayofweek"] = ts.map(lambda t: t.weekday()).astype(int)
    out["is_weekend"] = (out["dayofweek"] >= 5).astype(int)
    start, end = business_hours
    out["is_business_hour"] = out["hour"].between(start, end).astype(int)
    return out


def history_to_frame(history: Sequence[Sample], business_hours: tuple[int, int] = (8, 18)) -> pd.DataFrame:
    """Convert samples to a frame with one row per sample, in input order."""
    ensure_ordered(history)
    df = pd.DataFrame(
        {
            "timestamp": [s.timestamp for s in history],
            "consumption_kwh": [s.consumption_kwh for s in history],
            "temperature_c": [s.temperature_c for s in history],
            "irradiance_wm2": [s.irradiance_wm2 for s in history],
            "wind_speed_ms": [s.wind_speed_ms for s in history],
            "occupancy_fraction": [s.occupancy_fraction for s in history],
            "solar_generation_kwh": [s.solar_generation_kwh for s in history],
        },
        columns=FRAME_COLS,
    )
    # Timestamps stay as Python datetimes so mixed offsets keep their own wall clock.
    df["timestamp"] = df["timestamp"].astype(object)
    return add_time_features(df, business_hours)
