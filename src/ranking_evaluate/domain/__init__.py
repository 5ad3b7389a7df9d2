"""
Evaluation result tree.

Evaluation -> Corpus -> Topic -> QueryGroup -> Query, name-keyed and
insertion-ordered at every level; fold() rolls leaf metric values upward.
"""

from .tree import (
    Corpus,
    DomainMember,
    Evaluation,
    MetricValues,
    Query,
    QueryGroup,
    Topic,
    fold,
)

__all__ = [
    "Corpus",
    "DomainMember",
    "Evaluation",
    "MetricValues",
    "Query",
    "QueryGroup",
    "Topic",
    "fold",
]
