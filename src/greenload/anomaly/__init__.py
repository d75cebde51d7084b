"""Anomaly detection: multi-detector scoring of consumption histories."""

from greenload.anomaly.baseline import Baseline, build_baseline
from greenload.anomaly.detect import AnomalyDetector, fuse_outcomes
from greenload.anomaly.summary import anomaly_stats

__all__ = ["AnomalyDetector", "Baseline", "anomaly_stats", "build_baseline", "fuse_outcomes"]
