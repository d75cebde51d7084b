"""Optimization package.

Contains the merit-order dispatcher, day-ahead rollout, load-shifting and
price-response advisors, tariff helpers and impact metrics.
"""
from .dispatch import EnergyOptimizer
from .impact import impact_summary
from .load_shifting import optimize_load_shifting
from .price_response import respond_to_price
from .tariff import effective_price, get_scenario, period_for_hour

__all__ = [
    "EnergyOptimizer",
    "effective_price",
    "get_scenario",
    "impact_summary",
    "optimize_load_shifting",
    "period_for_hour",
    "respond_to_price",
]
