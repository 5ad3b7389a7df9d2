"""Search platform contract consumed by the engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Sequence


@dataclass(frozen=True)
class QueryResponse:
    """Total number of matches and the returned hits, best first.

    Each hit is a mapping of document fields (including the id field).
    """
    total_hits: int
    hits: List[Mapping[str, Any]] = field(default_factory=list)


class SearchPlatform(ABC):
    """
    Adapter around a search engine.

    Lifecycle per run: before_start -> start -> after_start, then any number
    of load/execute_query calls, then before_stop exactly once. Retries and
    timeouts, if any, are the adapter's business.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    def before_start(self, configuration: Mapping[str, Any]) -> None:
        pass

    @abstractmethod
    def start(self) -> None:
        ...

    def after_start(self) -> None:
        pass

    @abstractmethod
    def load(self, corpus_file: Path, definition: Path, index_name: str) -> None:
        """Populate index_name from corpus_file using definition (a file or folder).

        Loading an index name that already exists may be a no-op.
        """

    @abstractmethod
    def execute_query(
        self,
        index_name: str,
        query: str,
        fields: Sequence[str],
        max_rows: int,
    ) -> QueryResponse:
        ...

    @abstractmethod
    def before_stop(self) -> None:
        ...
