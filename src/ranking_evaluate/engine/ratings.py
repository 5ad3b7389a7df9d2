"""
Rating sets: discovery, parsing and typed judgment structures.

A rating set is one JSON document per file in the ratings folder:

    {
      "index_name": "products",
      "id_field_name": "id",                  (optional, default "id")
      "corpora_filename": "products.json",
      "query_placeholder": "$query",          (optional, default "$query")
      "topics": [
        {"description": "...", "query_groups": [
          {"name": "...", "template": "base.json",  (optional)
           "relevant_documents": {"doc1": 3, "doc2": {"gain": 1}},
           "queries": [{"placeholders": {"$query": "laptop"}, "template": "..."}]}
        ]}
      ]
    }

The raw JSON tree only lives inside this module: parse() converts it into
RatingSet / TopicDef / QueryGroupDef / QueryDef right away.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_ID_FIELD_NAME = "id"
DEFAULT_QUERY_PLACEHOLDER = "$query"


@dataclass(frozen=True)
class QueryDef:
    """One judged query: its literal text, optional template override and placeholders."""
    query: str
    template: Optional[str] = None
    placeholders: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class QueryGroupDef:
    name: str
    relevant_documents: Mapping[str, int]
    queries: Tuple[QueryDef, ...]
    template: Optional[str] = None


@dataclass(frozen=True)
class TopicDef:
    description: str
    query_groups: Tuple[QueryGroupDef, ...]


@dataclass(frozen=True)
class RatingSet:
    index_name: str
    corpora_filename: str
    topics: Tuple[TopicDef, ...]
    id_field_name: str = DEFAULT_ID_FIELD_NAME
    query_placeholder: str = DEFAULT_QUERY_PLACEHOLDER
    source: Optional[Path] = field(default=None, compare=False)


# =============================================================================
# Discovery
# =============================================================================


def rating_files(ratings_folder: Path) -> List[Path]:
    """All non-hidden *.json files in the ratings folder, sorted by name."""
    if not ratings_folder.is_dir():
        raise ConfigurationError(f"Unable to find the ratings folder: {ratings_folder}")
    files = sorted(
        f for f in ratings_folder.iterdir()
        if f.is_file() and f.suffix == ".json" and not f.name.startswith(".")
    )
    logger.info("Found %d ratings sets in %s", len(files), ratings_folder)
    return files


def load_rating_sets(ratings_folder: Path) -> Iterator[RatingSet]:
    """Lazily parse every rating set in the folder."""
    for path in rating_files(ratings_folder):
        yield load_rating_set(path)


def load_rating_set(path: Path) -> RatingSet:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Malformed rating set {path}: {e}") from e
    return parse(data, source=path)


# =============================================================================
# Parsing
# =============================================================================


def parse(data: Any, source: Optional[Path] = None) -> RatingSet:
    """Convert a raw rating-set JSON tree into a RatingSet."""
    where = f" in {source}" if source else ""
    if not isinstance(data, dict):
        raise ConfigurationError(f"Rating set{where} must be a JSON object")

    index_name = _text(_required(data, "index_name", where))
    corpora_filename = _text(_required(data, "corpora_filename", where))
    id_field_name = _text(data.get("id_field_name") or DEFAULT_ID_FIELD_NAME)
    query_placeholder = _text(data.get("query_placeholder") or DEFAULT_QUERY_PLACEHOLDER)

    topics = tuple(
        _parse_topic(t, query_placeholder, where)
        for t in _all(data.get("topics"), "topics", where)
    )
    return RatingSet(
        index_name=index_name,
        corpora_filename=corpora_filename,
        topics=topics,
        id_field_name=id_field_name,
        query_placeholder=query_placeholder,
        source=source,
    )


def _parse_topic(node: Any, query_placeholder: str, where: str) -> TopicDef:
    description = _text(_required(node, "description", where))
    groups = tuple(
        _parse_group(g, query_placeholder, where)
        for g in _all(node.get("query_groups"), "query_groups", where)
    )
    return TopicDef(description=description, query_groups=groups)


def _parse_group(node: Any, query_placeholder: str, where: str) -> QueryGroupDef:
    name = _text(_required(node, "name", where))
    if node.get("relevant_documents") is None:
        raise ConfigurationError(f'"relevant_documents" attribute not found in query group {name!r}{where}')
    template = node.get("template")
    queries = tuple(
        _parse_query(q, query_placeholder, name, where)
        for q in _all(node.get("queries"), "queries", where)
    )
    return QueryGroupDef(
        name=name,
        relevant_documents=_parse_relevant_documents(node["relevant_documents"], name, where),
        queries=queries,
        template=_text(template) if template is not None else None,
    )


def _parse_query(node: Any, query_placeholder: str, group: str, where: str) -> QueryDef:
    if not isinstance(node, dict):
        raise ConfigurationError(f"Query entries in group {group!r}{where} must be JSON objects")
    found, value = _find_value(node, query_placeholder)
    if not found:
        raise ConfigurationError(
            f"Query placeholder {query_placeholder!r} not found in a query of group {group!r}{where}"
        )
    placeholders = node.get("placeholders") or {}
    template = node.get("template")
    return QueryDef(
        query=_text(value),
        template=_text(template) if template is not None else None,
        placeholders=tuple((name, _text(v)) for name, v in placeholders.items()),
    )


def _parse_relevant_documents(node: Any, group: str, where: str) -> Dict[str, int]:
    """Accept {doc: grade} or {doc: {"gain": grade}}; a list means grade 1 each."""
    if isinstance(node, list):
        return {str(doc_id): 1 for doc_id in node}
    if not isinstance(node, dict):
        raise ConfigurationError(f'"relevant_documents" of query group {group!r}{where} must be an object')
    judgments = {}
    for doc_id, grade in node.items():
        if isinstance(grade, dict):
            grade = grade.get("gain", 1)
        try:
            judgments[str(doc_id)] = int(grade)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid grade {grade!r} for document {doc_id!r} in query group {group!r}{where}"
            ) from e
    return judgments


# =============================================================================
# Raw tree helpers
# =============================================================================


def _required(node: Any, name: str, where: str) -> Any:
    if not isinstance(node, dict) or node.get(name) is None:
        raise ConfigurationError(f'"{name}" attribute not found{where}')
    return node[name]


def _all(node: Any, name: str, where: str) -> List[Any]:
    """Children of a collection node; a missing or empty collection is logged and skipped."""
    if not node:
        logger.warning('"%s" node is not defined or empty%s', name, where)
        return []
    if not isinstance(node, list):
        raise ConfigurationError(f'"{name}"{where} must be a JSON array')
    return node


def _find_value(node: Any, key: str) -> Tuple[bool, Any]:
    """Depth-first search for the first value stored under key."""
    if isinstance(node, dict):
        if key in node:
            return True, node[key]
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return False, None
    for c in children:
        found, value = _find_value(c, key)
        if found:
            return True, value
    return False, None


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
