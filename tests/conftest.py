"""
PyTest Configuration and Fixtures for GreenLoad Tests.

This module provides deterministic building histories and shared fixtures
for unit tests, CLI tests and API tests.
"""
from __future__ import annotations

import math
import os
import sys
from pathlib import Path
from typing import Callable, List, Optional
from unittest.mock import patch

import numpy as np
import pandas as pd
import pytest

# Add src and the repo root (for services.api) to path for imports
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT))

from greenload.data_pipeline.schemas import Sample  # noqa: E402


# =============================================================================
# HELPERS
# =============================================================================

def daylight_irradiance(hour: int) -> float:
    """Clear-sky-like irradiance profile between 06:00 and 18:00."""
    if hour < 6 or hour > 18:
        return 0.0
    return round(800.0 * math.sin(math.pi * (hour - 6) / 12), 1)


def make_history(
    n: int,
    start: str = "2024-01-01 00:00",
    consumption: Optional[Callable[[int, pd.Timestamp], float]] = None,
    temperature: Optional[Callable[[int, pd.Timestamp], float]] = None,
    occupancy: float = 0.5,
    solar: Optional[Callable[[int, pd.Timestamp], float]] = None,
) -> List[Sample]:
    """Build ``n`` hourly samples; 2024-01-01 is a Monday."""
    timestamps = pd.date_range(start=start, periods=n, freq="h")
    consumption = consumption or (lambda i, ts: 30.0 + 10.0 * math.sin(2 * math.pi * ts.hour / 24))
    temperature = temperature or (lambda i, ts: 15.0 + 5.0 * math.sin(2 * math.pi * (ts.hour - 9) / 24))

    samples = []
    for i, ts in enumerate(timestamps):
        samples.append(
            Sample(
                timestamp=ts.to_pydatetime(),
                consumption_kwh=round(consumption(i, ts), 3),
                temperature_c=round(temperature(i, ts), 2),
                irradiance_wm2=daylight_irradiance(ts.hour),
                wind_speed_ms=3.0,
                occupancy_fraction=occupancy,
                solar_generation_kwh=None if solar is None else solar(i, ts),
            )
        )
    return samples


def flat_history(n: int = 61, last: Optional[float] = None) -> List[Sample]:
    """Quiet 30 / 30.5 / 31 kWh cycle with constant weather; ``last`` overrides the final value."""
    def consumption(i: int, ts: pd.Timestamp) -> float:
        if last is not None and i == n - 1:
            return last
        return 30.0 + 0.5 * (i % 3)

    return make_history(n, consumption=consumption, temperature=lambda i, ts: 20.0)


# =============================================================================
# DATA FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return ROOT


@pytest.fixture(scope="session")
def configs_dir(project_root: Path) -> Path:
    return project_root / "configs"


@pytest.fixture
def week_history() -> List[Sample]:
    """One week of hourly samples with a daily consumption cycle."""
    return make_history(168)


@pytest.fixture
def two_day_history() -> List[Sample]:
    """Exactly the 48 samples the forecaster needs, ending at 23:00."""
    return make_history(48)


@pytest.fixture
def history_frame(week_history: List[Sample]) -> pd.DataFrame:
    """Raw frame in the dashboard's legacy column naming."""
    return pd.DataFrame(
        {
            "timestamp": [s.timestamp.isoformat() for s in week_history],
            "kwh": [s.consumption_kwh for s in week_history],
            "temperature": [s.temperature_c for s in week_history],
            "irradiance": [s.irradiance_wm2 for s in week_history],
            "windSpeed": [s.wind_speed_ms for s in week_history],
            "occupancy": [s.occupancy_fraction for s in week_history],
            "solarGeneration": np.where(
                np.arange(len(week_history)) % 24 == 12, 9.5, np.nan
            ),
        }
    )


# =============================================================================
# API FIXTURES
# =============================================================================

@pytest.fixture
def api_client(configs_dir: Path):
    """Create a test client for the FastAPI application using the repo configs."""
    from fastapi.testclient import TestClient

    from services.api.config import clear_config_cache

    with patch.dict(os.environ, {"GREENLOAD_CONFIG_DIR": str(configs_dir)}):
        clear_config_cache()
        from services.api.main import app
        with TestClient(app) as client:
            yield client
    clear_config_cache()


def as_payload(history: List[Sample]) -> List[dict]:
    return [s.model_dump(mode="json") for s in history]


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
