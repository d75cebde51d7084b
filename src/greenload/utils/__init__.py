"""
GreenLoad Utilities Package.

Common utility modules shared by the engines, the CLI and the API service.

Key modules:
    - config: YAML configuration loading and Pydantic validation models
    - logging: Structured logging setup with configurable handlers
    - rounding: Output rounding conventions (kWh, percent, price)

Example usage:
    >>> from greenload.utils.config import load_forecast_config
    >>> cfg = load_forecast_config("configs")
"""

from greenload.utils.logging import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
]
