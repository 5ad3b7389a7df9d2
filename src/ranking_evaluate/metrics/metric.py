"""
Metric - Base type for ranking metrics.

A metric instance belongs to exactly one Query leaf. It is configured once
(id field name, relevant documents, versions), then receives observations:

- set_total_hits(total, version) opens a new observation for that version
- collect(hit, rank, version) appends a ranked hit to the open observation
- notify_collected_metrics() computes and freezes one value per version

Each version keeps its own list of observations inside the single instance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from statistics import mean
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

# Judged grade at or above which a document counts as relevant
RELEVANCE_THRESHOLD = 1


@dataclass
class Observation:
    """One (query, version) execution: total hits and the judged grade per rank.

    grades[i] is the judged grade of the hit at rank i + 1, or None when the
    hit was not judged.
    """
    total_hits: int
    grades: List[Optional[int]] = field(default_factory=list)


class Metric(ABC):
    """Ranking metric with one observation list per configuration version."""

    base_name: str = ""

    def __init__(self, k: Optional[int] = None):
        self.k = k
        self.id_field_name: Optional[str] = None
        self.relevant_documents: Mapping[str, int] = {}
        self.versions: Tuple[str, ...] = ()
        self._observations: Dict[str, List[Observation]] = {}
        self._values: Optional[Dict[str, float]] = None
        self._configured = set()

    @property
    def name(self) -> str:
        """Display name, e.g. 'P@10' or 'AP'."""
        if self.k is None:
            return self.base_name
        return f"{self.base_name}@{self.k}"

    # =========================================================================
    # One-time configuration
    # =========================================================================

    def _configure_once(self, what: str) -> None:
        if what in self._configured:
            raise ValueError(f"Metric {self.name}: {what} already set")
        self._configured.add(what)

    def set_id_field_name(self, id_field_name: str) -> None:
        self._configure_once("id_field_name")
        self.id_field_name = id_field_name

    def set_relevant_documents(self, relevant_documents: Mapping[str, int]) -> None:
        self._configure_once("relevant_documents")
        self.relevant_documents = dict(relevant_documents)

    def set_versions(self, versions: Sequence[str]) -> None:
        self._configure_once("versions")
        self.versions = tuple(versions)
        self._observations = {v: [] for v in self.versions}

    # =========================================================================
    # Collection
    # =========================================================================

    def _version_observations(self, version: str) -> List[Observation]:
        if self.finalized:
            raise ValueError(f"Metric {self.name} is already finalized")
        if version not in self._observations:
            raise ValueError(f"Metric {self.name}: unknown version {version!r}")
        return self._observations[version]

    def set_total_hits(self, total_hits: int, version: str) -> None:
        """Open a new observation for version."""
        self._version_observations(version).append(Observation(total_hits=total_hits))

    def collect(self, hit: Mapping[str, Any], rank: int, version: str) -> None:
        """Record the hit at a 1-based rank for version."""
        observations = self._version_observations(version)
        if not observations:
            raise ValueError(
                f"Metric {self.name}: total hits for version {version!r} must be set before collecting"
            )
        current = observations[-1]
        expected = len(current.grades) + 1
        if rank != expected:
            raise ValueError(f"Metric {self.name}: expected rank {expected}, got {rank}")

        doc_id = hit.get(self.id_field_name) if self.id_field_name else None
        grade = self.relevant_documents.get(str(doc_id)) if doc_id is not None else None
        current.grades.append(grade)

    # =========================================================================
    # Finalization
    # =========================================================================

    def notify_collected_metrics(self) -> Dict[str, float]:
        """Compute and freeze the value of every version (mean over its observations)."""
        if self._values is None:
            values = {}
            for version in self.versions:
                observations = self._observations[version]
                scores = [self.score(self._cut(o)) for o in observations]
                values[version] = mean(scores) if scores else 0.0
            self._values = values
        return dict(self._values)

    @property
    def finalized(self) -> bool:
        return self._values is not None

    def value(self, version: str) -> float:
        if self._values is None:
            raise ValueError(f"Metric {self.name} has not been finalized")
        return self._values[version]

    def _cut(self, observation: Observation) -> List[Optional[int]]:
        if self.k is None:
            return list(observation.grades)
        return observation.grades[: self.k]

    @property
    def relevant_count(self) -> int:
        """Number of judged documents counting as relevant."""
        return sum(1 for g in self.relevant_documents.values() if g >= RELEVANCE_THRESHOLD)

    @abstractmethod
    def score(self, grades: List[Optional[int]]) -> float:
        """Score one observation, given the judged grade per rank (already cut at k)."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


def is_relevant(grade: Optional[int]) -> bool:
    return grade is not None and grade >= RELEVANCE_THRESHOLD
