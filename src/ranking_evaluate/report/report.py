"""
A. Report - Immutable flat view of a finalized evaluation tree.

One ReportEntry per (node, metric, version). Inner nodes carry the folded
mean; query rows carry the value of the query's own metric. Path columns
below a row's level are empty strings.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Literal, Set, Tuple

Level = Literal["evaluation", "corpus", "topic", "query_group", "query"]
LEVELS: Tuple[Level, ...] = ("evaluation", "corpus", "topic", "query_group", "query")
PATH_COLUMNS = ("corpus", "topic", "query_group", "query")


@dataclass(frozen=True)
class ReportEntry:
    """Single report cell: (level, path, metric, version) -> value."""
    level: Level
    corpus: str
    topic: str
    query_group: str
    query: str
    metric: str
    version: str
    value: float

    @property
    def path(self) -> Tuple[str, ...]:
        """Non-empty path components, corpus first."""
        return tuple(p for p in (self.corpus, self.topic, self.query_group, self.query) if p)

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class Report:
    """Immutable collection of report entries."""
    entries: Tuple[ReportEntry, ...]

    @property
    def versions(self) -> List[str]:
        """Versions in first-seen order."""
        return list(dict.fromkeys(e.version for e in self.entries))

    @property
    def metrics(self) -> List[str]:
        """Metric names in first-seen order."""
        return list(dict.fromkeys(e.metric for e in self.entries))

    @property
    def levels(self) -> Set[str]:
        return {e.level for e in self.entries}

    def get_value(self, metric: str, version: str, *path: str) -> float | None:
        """Value at the node addressed by path (empty path = evaluation level), or None."""
        for e in self.entries:
            if e.metric == metric and e.version == version and e.path == tuple(path):
                return e.value
        return None

    def get_version_ranking(self, metric: str) -> Dict[str, float]:
        """
        Version -> evaluation-level value for metric.

        Raises:
            ValueError: If the metric has no evaluation-level rows.
        """
        ranking = {
            e.version: e.value
            for e in self.entries
            if e.level == "evaluation" and e.metric == metric
        }
        if not ranking:
            raise ValueError(f"Metric '{metric}' not found in evaluation-level rows")
        return ranking

    def top_k_versions(self, metric: str, k: int) -> List[str]:
        """Top k versions by evaluation-level value (descending)."""
        ranking = self.get_version_ranking(metric)
        return [v for v, _ in sorted(ranking.items(), key=lambda x: x[1], reverse=True)[:k]]
