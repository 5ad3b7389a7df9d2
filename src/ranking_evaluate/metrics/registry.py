"""Metric registry and per-query metric factory.

Metric definitions are strings: a registered base name with an optional
cutoff, e.g. "P@10", "NDCG@5", "AP". Definitions are resolved once, when the
factory is built, so an unknown name fails before the platform is started.
"""

import logging
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..errors import ConfigurationError
from .builtin import AveragePrecision, F1, NDCG, Precision, Recall, ReciprocalRank
from .metric import Metric

logger = logging.getLogger(__name__)

MetricConstructor = Callable[[Optional[int]], Metric]

METRICS: Dict[str, MetricConstructor] = {
    "P": Precision,
    "R": Recall,
    "F1": F1,
    "RR": ReciprocalRank,
    "AP": AveragePrecision,
    "NDCG": NDCG,
}

DEFAULT_METRICS = ["P@10", "R", "AP", "NDCG@10", "RR@10"]


def register_metric(base_name: str, constructor: MetricConstructor) -> None:
    """Make a metric available under base_name (and base_name@k)."""
    METRICS[base_name] = constructor


def parse_metric_definition(definition: str) -> Tuple[str, Optional[int]]:
    """Parse a metric definition into (base_name, k).

    Examples:
        "AP" -> ("AP", None)
        "P@10" -> ("P", 10)

    Raises:
        ConfigurationError: if the base name is unknown or k is not a positive integer.
    """
    if "@" in definition:
        base, k_str = definition.split("@", 1)
        try:
            k = int(k_str)
        except ValueError:
            raise ConfigurationError(f"Metric {definition!r}: cutoff must be an integer") from None
        if k <= 0:
            raise ConfigurationError(f"Metric {definition!r}: cutoff must be positive, got {k}")
    else:
        base, k = definition, None
    if base not in METRICS:
        known = ", ".join(sorted(METRICS))
        raise ConfigurationError(f"Unknown metric {definition!r}. Known metrics: [{known}] (optionally @k)")
    return base, k


class MetricFactory:
    """Builds a fresh, independently configured metric set for each query."""

    def __init__(self, definitions: Sequence[str]):
        self.definitions = list(definitions)
        self._resolved = [(d, *parse_metric_definition(d)) for d in self.definitions]
        for definition, base, _k in self._resolved:
            logger.info("Found metric definition %r which maps to %s", definition, METRICS[base].__name__)

    def create(
        self,
        id_field_name: str,
        relevant_documents: Mapping[str, int],
        versions: Sequence[str],
    ) -> List[Metric]:
        metrics = []
        for definition, base, k in self._resolved:
            try:
                metric = METRICS[base](k)
            except Exception as e:
                raise ConfigurationError(f"Unable to instantiate metric {definition!r}: {e}") from e
            metric.set_id_field_name(id_field_name)
            metric.set_relevant_documents(relevant_documents)
            metric.set_versions(versions)
            metrics.append(metric)
        return metrics
