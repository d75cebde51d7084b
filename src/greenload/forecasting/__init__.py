"""Forecasting package.

Contains the ensemble demand forecaster, its sub-forecasts, the persistence
solar model and the confidence score.
"""
from .ensemble import Forecaster, InsufficientHistoryError

__all__ = ["Forecaster", "InsufficientHistoryError"]
