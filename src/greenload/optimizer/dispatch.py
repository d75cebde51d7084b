"""
Optimization: Merit-order dispatch of building demand.

Demand for a period is served in a fixed priority order, without
re-optimising the order by marginal cost:

1. Solar serves demand directly.
2. Leftover solar charges the battery up to its headroom, scaled by the
   round-trip efficiency; solar beyond the headroom is reported as excess.
3. The battery discharges into the remaining demand only during peak
   periods or when the effective grid price is above the discharge
   threshold.
4. The grid serves whatever remains.

``optimize_day_ahead`` threads the battery level through a sequence of
periods; the load-shifting and real-time price advisors live in
``optimizer.load_shifting`` and ``optimizer.price_response`` and are exposed
here as methods for convenience.

Typical usage:
    >>> from greenload.optimizer import EnergyOptimizer
    >>> opt = EnergyOptimizer(battery_capacity_kwh=50, round_trip_efficiency=0.95)
    >>> opt.optimize(50, 30, grid_price=0.12, battery_level=25, tou_period="peak").grid_kwh
    0.0
"""
from __future__ import annotations

from typing import Optional, Sequence

from greenload.data_pipeline.schemas import (
    DayAheadPlan,
    FlexibleLoad,
    LoadShiftPlan,
    OptimizationResult,
    PriceResponse,
)
from greenload.optimizer.impact import grid_stress_reduction_pct, peak_reduction_pct, renewable_pct
from greenload.optimizer.load_shifting import optimize_load_shifting
from greenload.optimizer.price_response import respond_to_price
from greenload.optimizer.tariff import effective_price, period_for_hour, validate_period
from greenload.utils.config import BatteryConfig, OptimizationConfig, TariffConfig
from greenload.utils.logging import get_logger
from greenload.utils.rounding import clamp, round_kwh, round_pct, round_price

log = get_logger(__name__)


def _ensure_non_negative(value: float, label: str) -> None:
    if value < 0:
        raise ValueError(f"{label} must be >= 0, got {value}")


class EnergyOptimizer:
    def __init__(
        self,
        battery_capacity_kwh: float = 50.0,
        round_trip_efficiency: float = 0.95,
        tariff: Optional[TariffConfig] = None,
    ):
        battery = BatteryConfig(
            capacity_kwh=battery_capacity_kwh,
            round_trip_efficiency=round_trip_efficiency,
            initial_level_kwh=min(25.0, battery_capacity_kwh),
        )
        self.battery_capacity = battery.capacity_kwh
        self.battery_efficiency = battery.round_trip_efficiency
        self.tariff = tariff or TariffConfig()

    @classmethod
    def from_config(cls, cfg: OptimizationConfig) -> "EnergyOptimizer":
        return cls(
            battery_capacity_kwh=cfg.battery.capacity_kwh,
            round_trip_efficiency=cfg.battery.round_trip_efficiency,
            tariff=cfg.tariff,
        )

    def optimize(
        self,
        demand: float,
        solar_available: float,
        grid_price: Optional[float] = None,
        battery_level: float = 25.0,
        tou_period: str = "mid-peak",
    ) -> OptimizationResult:
        """Dispatch one period's demand across solar, battery and grid."""
        if grid_price is None:
            grid_price = self.tariff.base_grid_price
        _ensure_non_negative(demand, "demand")
        _ensure_non_negative(solar_available, "solar_available")
        _ensure_non_negative(grid_price, "grid_price")
        _ensure_non_negative(battery_level, "battery_level")
        period = validate_period(tou_period)
        price = effective_price(grid_price, period, self.tariff)

        # 1) solar first
        solar_used = min(solar_available, demand)
        remaining = demand - solar_used

        # 2) leftover solar into the battery, the rest is excess
        excess = solar_available - solar_used
        charge = 0.0
        if excess > 0:
            headroom = max(0.0, self.battery_capacity - battery_level)
            charge = min(excess, headroom) * self.battery_efficiency
            excess -= charge / self.battery_efficiency

        # 3) battery only when it is worth it
        discharge = 0.0
        if remaining > 0 and battery_level > 0:
            if period == "peak" or price > self.tariff.discharge_price_threshold:
                discharge = min(remaining, battery_level)
                remaining -= discharge

        # 4) grid covers the residual
        grid = remaining

        result = OptimizationResult(
            grid_kwh=round_kwh(grid),
            solar_kwh=round_kwh(solar_used),
            battery_discharge_kwh=round_kwh(discharge),
            battery_charge_kwh=round_kwh(charge),
            excess_solar_kwh=round_kwh(excess),
            cost=round_kwh(grid * price),
            carbon_saved_kg=round_kwh((solar_used + discharge) * self.tariff.carbon_intensity_kg_per_kwh),
            renewable_pct=round_pct(renewable_pct(demand, solar_used, discharge)),
            peak_reduction_pct=round_pct(
                peak_reduction_pct(demand, solar_used, discharge, self.tariff.peak_threshold_kwh)
            ),
            grid_stress_reduction_pct=round_pct(grid_stress_reduction_pct(grid, demand)),
            time_of_use=period,
            effective_price=round_price(price),
        )
        log.debug(
            "dispatch period=%s demand=%.2f solar=%.2f battery=%.2f grid=%.2f",
            period, demand, solar_used, discharge, grid,
        )
        return result

    def next_battery_level(self, battery_level: float, result: OptimizationResult) -> float:
        """Battery level after applying a period's dispatch, clamped to [0, capacity]."""
        return clamp(
            battery_level - result.battery_discharge_kwh + result.battery_charge_kwh,
            0.0,
            self.battery_capacity,
        )

    def optimize_day_ahead(
        self,
        demands: Sequence[float],
        solar_forecasts: Sequence[float],
        grid_prices: Sequence[float],
        tou_schedule: Optional[Sequence[str]] = None,
        initial_battery_level: float = 25.0,
    ) -> DayAheadPlan:
        """Roll ``optimize`` over consecutive periods, threading the battery level."""
        horizon = len(demands)
        if len(solar_forecasts) != horizon or len(grid_prices) != horizon:
            raise ValueError(
                f"demands, solar_forecasts and grid_prices must have equal length "
                f"({horizon}, {len(solar_forecasts)}, {len(grid_prices)})"
            )
        if tou_schedule is None:
            tou_schedule = [period_for_hour(t, self.tariff) for t in range(horizon)]
        elif len(tou_schedule) != horizon:
            raise ValueError(f"tou_schedule length {len(tou_schedule)} does not match horizon {horizon}")

        level = clamp(initial_battery_level, 0.0, self.battery_capacity)
        periods = []
        for t in range(horizon):
            result = self.optimize(demands[t], solar_forecasts[t], grid_prices[t], level, tou_schedule[t])
            level = self.next_battery_level(level, result)
            periods.append(result.model_copy(update={"battery_level_kwh": round_kwh(level)}))

        log.info("Day-ahead plan: %d periods, final battery %.2f kWh", horizon, level)
        return DayAheadPlan(periods=periods, final_battery_level_kwh=round_kwh(level))

    def optimize_load_shifting(
        self,
        flexible_loads: Sequence[FlexibleLoad],
        demands: Sequence[float],
        solar_forecasts: Sequence[float],
        grid_prices: Sequence[float],
    ) -> LoadShiftPlan:
        return optimize_load_shifting(flexible_loads, demands, solar_forecasts, grid_prices)

    def respond_to_price(
        self,
        current_price: float,
        average_price: float,
        demand: float,
        solar: float,
        battery_level: float,
    ) -> PriceResponse:
        return respond_to_price(current_price, average_price, demand, solar, battery_level)
