"""
Optimizer: Time-of-use tariff helpers.

The grid price seen by the dispatcher is the base price scaled by the
multiplier of the current time-of-use period:

    effective_price = grid_price * multiplier[period]

Default multipliers: peak 1.8, mid-peak 1.0, off-peak 0.6. The hourly TOU
schedule and the named operating scenarios live in ``configs/optimization.yaml``
under ``tariff``.
"""
from __future__ import annotations

from typing import get_args

from greenload.data_pipeline.schemas import TimeOfUse
from greenload.utils.config import ScenarioConfig, TariffConfig

TOU_PERIODS: tuple[str, ...] = get_args(TimeOfUse)


def validate_period(period: str) -> TimeOfUse:
    if period not in TOU_PERIODS:
        raise ValueError(f"Unknown time-of-use period {period!r}; expected one of {TOU_PERIODS}")
    return period


def effective_price(grid_price: float, period: str, tariff: TariffConfig) -> float:
    """Base grid price scaled by the TOU multiplier."""
    return grid_price * tariff.multipliers[validate_period(period)]


def period_for_hour(hour: int, tariff: TariffConfig) -> TimeOfUse:
    """TOU period for an hour of day (or a period index, taken modulo 24)."""
    return tariff.schedule[hour % 24]


def get_scenario(name: str, tariff: TariffConfig) -> ScenarioConfig:
    try:
        return tariff.scenarios[name]
    except KeyError:
        raise ValueError(f"Unknown scenario {name!r}; available: {sorted(tariff.scenarios)}") from None
