"""Tests for history loading, retention and calendar features."""
import pandas as pd
import pytest

from greenload.data_pipeline.history import (
    history_to_frame,
    load_history,
    samples_from_frame,
    trim_history,
)
from greenload.data_pipeline.schemas import Sample


def test_load_csv_with_legacy_columns(tmp_path, history_frame):
    path = tmp_path / "history.csv"
    history_frame.to_csv(path, index=False)

    samples = load_history(path)

    assert len(samples) == 168
    assert samples[0].consumption_kwh == history_frame["kwh"].iloc[0]
    assert samples[12].solar_generation_kwh == 9.5
    assert samples[0].solar_generation_kwh is None


def test_load_json_records(tmp_path, history_frame):
    path = tmp_path / "history.json"
    history_frame.head(10).to_json(path, orient="records")

    samples = load_history(path)

    assert len(samples) == 10
    assert samples[-1].timestamp.hour == 9


def test_samples_are_sorted_by_timestamp(history_frame):
    shuffled = history_frame.sample(frac=1.0, random_state=7)

    samples = samples_from_frame(shuffled)

    timestamps = [s.timestamp for s in samples]
    assert timestamps == sorted(timestamps)


def test_missing_columns_raise(history_frame):
    with pytest.raises(ValueError, match="Missing required columns"):
        samples_from_frame(history_frame.drop(columns=["occupancy"]))


def test_bad_timestamps_raise(history_frame):
    broken = history_frame.copy()
    broken.loc[3, "timestamp"] = "not a date"
    with pytest.raises(ValueError):
        samples_from_frame(broken)


def test_unknown_format_and_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_history(tmp_path / "absent.csv")
    path = tmp_path / "history.txt"
    path.write_text("x", encoding="utf-8")
    with pytest.raises(ValueError):
        load_history(path)


def test_trim_history_keeps_latest(week_history):
    trimmed = trim_history(week_history, 48)

    assert len(trimmed) == 48
    assert trimmed[-1] == week_history[-1]
    assert trim_history(week_history[:10], 48) == week_history[:10]
    with pytest.raises(ValueError):
        trim_history(week_history, 0)


def test_frame_calendar_features(week_history):
    df = history_to_frame(week_history)

    assert len(df) == 168
    assert df["hour"].iloc[13] == 13
    assert df["dayofweek"].iloc[0] == 0  # 2024-01-01 is a Monday
    assert df["is_weekend"].iloc[5 * 24] == 1  # Saturday
    assert df["is_business_hour"].iloc[8] == 1
    assert df["is_business_hour"].iloc[19] == 0


def test_frame_rejects_unsorted_history(week_history):
    with pytest.raises(ValueError, match="not ordered"):
        history_to_frame([week_history[1], week_history[0]])


def test_round_trip_through_frame(history_frame):
    samples = samples_from_frame(history_frame)
    df = history_to_frame(samples)

    assert list(df["consumption_kwh"]) == list(history_frame["kwh"])
    assert pd.isna(df["solar_generation_kwh"].iloc[0])


def test_missing_consumption_is_rejected(history_frame):
    """An empty kwh cell would otherwise become NaN and poison every mean."""
    frame = history_frame.copy()
    frame.loc[5, "kwh"] = float("nan")

    with pytest.raises(ValueError):
        samples_from_frame(frame)


def test_sample_rejects_infinite_temperature(week_history):
    data = week_history[0].model_dump()
    data["temperature_c"] = float("inf")

    with pytest.raises(ValueError):
        Sample.model_validate(data)
