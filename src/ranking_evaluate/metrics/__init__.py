"""
Ranking metrics.

Components:
- Metric: per-version observation state and finalization (metric.py)
- Built-in metrics: P, R, F1, RR, AP, NDCG (builtin.py)
- Registry and MetricFactory (registry.py)
"""

from .metric import Metric, Observation, RELEVANCE_THRESHOLD
from .builtin import AveragePrecision, F1, NDCG, Precision, Recall, ReciprocalRank
from .registry import (
    DEFAULT_METRICS,
    METRICS,
    MetricFactory,
    parse_metric_definition,
    register_metric,
)

__all__ = [
    "Metric",
    "Observation",
    "RELEVANCE_THRESHOLD",
    "AveragePrecision",
    "F1",
    "NDCG",
    "Precision",
    "Recall",
    "ReciprocalRank",
    "DEFAULT_METRICS",
    "METRICS",
    "MetricFactory",
    "parse_metric_definition",
    "register_metric",
]
