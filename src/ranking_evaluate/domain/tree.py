"""
Aggregation tree: Evaluation -> Corpus -> Topic -> QueryGroup -> Query.

Structure only grows through find_or_create(). Query leaves collect raw
hits into their metrics; after every leaf has been notified, fold() fills
the `metrics` mapping of every inner node with the mean over the Query
leaves beneath it.
"""

from __future__ import annotations

from collections import defaultdict
from statistics import mean
from types import MappingProxyType
from typing import Any, Callable, Dict, Generic, Iterator, List, Mapping, Optional, Sequence, TypeVar

from ..metrics import Metric

C = TypeVar("C", bound="DomainMember")

# metric name -> version -> value
MetricValues = Dict[str, Dict[str, float]]


class DomainMember(Generic[C]):
    """A named tree node with name-keyed, insertion-ordered children."""

    def __init__(self):
        self.name: str = ""
        self.parent: Optional[DomainMember] = None
        self._children: Dict[str, C] = {}
        self.metrics: MetricValues = {}

    def find_or_create(self, key: str, factory: Callable[[], C]) -> C:
        """Return the child registered under key, creating it with factory() if absent."""
        child = self._children.get(key)
        if child is None:
            child = factory()
            child.name = key
            child.parent = self
            self._children[key] = child
        return child

    @property
    def children(self) -> List[C]:
        return list(self._children.values())

    def child(self, key: str) -> C:
        return self._children[key]

    def __contains__(self, key: str) -> bool:
        return key in self._children

    def __len__(self) -> int:
        return len(self._children)

    def queries(self) -> Iterator["Query"]:
        """All Query leaves beneath this node, in insertion order."""
        for c in self._children.values():
            yield from c.queries()

    def delta(self, metric: str, baseline: str, candidate: str) -> float:
        """Difference candidate - baseline of a folded metric value."""
        values = self.metrics[metric]
        return values[candidate] - values[baseline]

    def path(self) -> List[str]:
        """Names from the corpus level down to this node."""
        names = []
        node: Optional[DomainMember] = self
        while node is not None and node.parent is not None:
            names.append(node.name)
            node = node.parent
        return list(reversed(names))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, children={len(self._children)})"


class Query(DomainMember["Query"]):
    """Leaf: one literal query string with its judgments, metrics and per-version results."""

    def __init__(self):
        super().__init__()
        self._id_field_name: Optional[str] = None
        self._relevant_documents: Optional[Mapping[str, int]] = None
        self._metrics: List[Metric] = []
        self._prepared = False
        self.notified = False
        self.total_hits: Dict[str, List[int]] = defaultdict(list)
        self.hits: Dict[str, List[List[Mapping[str, Any]]]] = defaultdict(list)

    def find_or_create(self, key: str, factory: Callable[[], C]) -> C:
        raise TypeError("Query is a leaf and has no children")

    def queries(self) -> Iterator["Query"]:
        yield self

    @property
    def id_field_name(self) -> Optional[str]:
        return self._id_field_name

    def set_id_field_name(self, id_field_name: str) -> None:
        if self._id_field_name is not None:
            raise ValueError(f"Query {self.name!r}: id field name already set")
        self._id_field_name = id_field_name

    @property
    def relevant_documents(self) -> Mapping[str, int]:
        return self._relevant_documents if self._relevant_documents is not None else MappingProxyType({})

    def set_relevant_documents(self, relevant_documents: Mapping[str, int]) -> None:
        if self._relevant_documents is not None:
            raise ValueError(f"Query {self.name!r}: relevant documents already set")
        self._relevant_documents = MappingProxyType(dict(relevant_documents))

    @property
    def prepared(self) -> bool:
        return self._prepared

    def prepare(self, metrics: Sequence[Metric]) -> None:
        """Attach the metric set. Called once, when the query is first seen."""
        if self._prepared:
            raise ValueError(f"Query {self.name!r}: metrics already prepared")
        self._metrics = list(metrics)
        self._prepared = True

    @property
    def metric_instances(self) -> List[Metric]:
        return list(self._metrics)

    def set_total_hits(self, total_hits: int, version: str) -> None:
        """Record total hits for one execution against version; opens a new hit list."""
        self.total_hits[version].append(total_hits)
        self.hits[version].append([])
        for m in self._metrics:
            m.set_total_hits(total_hits, version)

    def collect(self, hit: Mapping[str, Any], rank: int, version: str) -> None:
        self.hits[version][-1].append(hit)
        for m in self._metrics:
            m.collect(hit, rank, version)

    def notify_collected_metrics(self) -> None:
        """Freeze every metric and expose its per-version values on this leaf."""
        for m in self._metrics:
            self.metrics[m.name] = m.notify_collected_metrics()
        self.notified = True


class QueryGroup(DomainMember[Query]):
    pass


class Topic(DomainMember[QueryGroup]):
    pass


class Corpus(DomainMember[Topic]):
    pass


class Evaluation(DomainMember[Corpus]):
    """Root of the result tree, one per engine run."""
    pass


def fold(node: DomainMember) -> MetricValues:
    """Fill `metrics` on node and every inner node beneath it.

    Each inner node gets, per (metric, version), the mean over all Query
    leaves beneath it. Leaves must already be notified.
    """
    if isinstance(node, Query):
        if node.prepared and not node.notified:
            raise ValueError(f"Query {node.name!r} has not been notified")
        return node.metrics

    for c in node.children:
        fold(c)

    collected: Dict[str, Dict[str, List[float]]] = defaultdict(lambda: defaultdict(list))
    for q in node.queries():
        for metric, by_version in q.metrics.items():
            for version, value in by_version.items():
                collected[metric][version].append(value)

    node.metrics = {
        metric: {version: mean(values) for version, values in by_version.items()}
        for metric, by_version in collected.items()
    }
    return node.metrics
