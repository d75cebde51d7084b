"""Monitoring package.

Contains system alert rules, building metrics and report helpers.
"""

from .alerts import SystemAlert, build_system_alerts
from .metrics import BuildingMetrics, building_metrics
from .report import write_pipeline_report

__all__ = ["BuildingMetrics", "SystemAlert", "build_system_alerts", "building_metrics", "write_pipeline_report"]
