"""
B. Flatten - Turn a finalized Evaluation tree into a Report or a nested dict.
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..domain import DomainMember, Evaluation, Query
from .report import LEVELS, Report, ReportEntry

# Pseudo-metric carrying the platform's total hit count on query rows
TOTAL_HITS = "total_hits"


def flatten(evaluation: Evaluation) -> Report:
    """One entry per (node, metric, version), walking the tree depth-first."""
    entries: List[ReportEntry] = []
    _flatten(evaluation, 0, [], entries)
    return Report(entries=tuple(entries))


def _flatten(node: DomainMember, depth: int, path: List[str], entries: List[ReportEntry]) -> None:
    level = LEVELS[depth]
    corpus, topic, group, query = (path + ["", "", "", ""])[:4]

    for metric, by_version in node.metrics.items():
        for version, value in by_version.items():
            entries.append(ReportEntry(level, corpus, topic, group, query, metric, version, float(value)))

    if isinstance(node, Query):
        for version, totals in node.total_hits.items():
            # One total per execution; a recurring query reports the latest one
            entries.append(ReportEntry(level, corpus, topic, group, query, TOTAL_HITS, version, float(totals[-1])))
        return

    for c in node.children:
        _flatten(c, depth + 1, path + [c.name], entries)


def to_dict(evaluation: Evaluation) -> Dict[str, Any]:
    """Nested representation mirroring the tree, suitable for JSON output."""
    return {
        "versions": versions(evaluation),
        "metrics": evaluation.metrics,
        "corpora": [
            {
                "name": corpus.name,
                "metrics": corpus.metrics,
                "topics": [
                    {
                        "name": topic.name,
                        "metrics": topic.metrics,
                        "query_groups": [
                            {
                                "name": group.name,
                                "metrics": group.metrics,
                                "queries": [_query_dict(q) for q in group.children],
                            }
                            for group in topic.children
                        ],
                    }
                    for topic in corpus.children
                ],
            }
            for corpus in evaluation.children
        ],
    }


def _query_dict(query: Query) -> Dict[str, Any]:
    return {
        "query": query.name,
        "id_field_name": query.id_field_name,
        "relevant_documents": dict(query.relevant_documents),
        "metrics": query.metrics,
        "total_hits": {v: list(t) for v, t in query.total_hits.items()},
    }


def versions(evaluation: Evaluation) -> List[str]:
    """Versions seen anywhere in the tree, in first-seen order."""
    seen: Dict[str, None] = {}
    for q in evaluation.queries():
        for by_version in q.metrics.values():
            seen.update(dict.fromkeys(by_version))
        seen.update(dict.fromkeys(q.total_hits))
    return list(seen)
