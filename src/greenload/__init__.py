"""
GreenLoad: Building Energy Forecasting, Dispatch and Anomaly Detection.

This package provides the analytical core of a building energy manager:
- Next-hour demand forecasting from an ensemble of simple sub-forecasts
- Persistence solar-generation forecasting
- Merit-order dispatch of solar, battery and grid under time-of-use tariffs
- Multi-method anomaly detection over consumption histories

Main Modules:
    - forecasting: historical, trend, weather and occupancy ensemble
    - optimizer: dispatch, day-ahead rollout, load shifting, price response
    - anomaly: statistical, pattern, contextual and equipment detectors
    - monitoring: operator alerts, building metrics and reports
    - data_pipeline: sample schemas and history loading
    - pipeline: end-to-end CLI cycle

Example:
    >>> from greenload.forecasting import Forecaster
    >>> from greenload.optimizer import EnergyOptimizer

Author: GreenLoad Team
Version: 0.1.0
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
