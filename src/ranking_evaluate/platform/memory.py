"""
In-memory reference platform.

Corpus files are either a JSON array of documents or JSON lines (one
document per line). The index definition is an `index-shape.json` file, or
a folder that may contain one:

    {"id_field": "id", "search_fields": ["title", "description"]}

Without search_fields every string field is searched. A query is either JSON
{"query": "terms", "fields": ["title"]} or plain terms; documents are scored
by summed term frequency and ties keep corpus order.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .base import QueryResponse, SearchPlatform

logger = logging.getLogger(__name__)

INDEX_SHAPE_FILENAME = "index-shape.json"

_TOKEN = re.compile(r"\w+", re.UNICODE)


def tokenize(text: str) -> List[str]:
    return [t.lower() for t in _TOKEN.findall(text)]


@dataclass
class _Index:
    id_field: str
    search_fields: Optional[List[str]]
    documents: List[Dict[str, Any]] = field(default_factory=list)

    def searchable_text(self, doc: Mapping[str, Any], fields: Optional[Sequence[str]]) -> List[str]:
        names = fields or self.search_fields
        if names is None:
            names = [k for k, v in doc.items() if isinstance(v, str)]
        tokens: List[str] = []
        for name in names:
            value = doc.get(name)
            if isinstance(value, str):
                tokens.extend(tokenize(value))
            elif isinstance(value, list):
                for v in value:
                    if isinstance(v, str):
                        tokens.extend(tokenize(v))
        return tokens


class InMemoryPlatform(SearchPlatform):
    """Term-frequency search over documents held in memory."""

    def __init__(self):
        self._indexes: Dict[str, _Index] = {}
        self._running = False
        self.settings: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        return "In-Memory"

    def before_start(self, configuration: Mapping[str, Any]) -> None:
        self.settings = dict(configuration or {})

    def start(self) -> None:
        self._running = True

    def before_stop(self) -> None:
        self._running = False
        self._indexes.clear()

    @property
    def index_names(self) -> List[str]:
        return list(self._indexes)

    def load(self, corpus_file: Path, definition: Path, index_name: str) -> None:
        if index_name in self._indexes:
            logger.info("Index %s already loaded, skipping", index_name)
            return

        shape = _read_shape(Path(definition))
        index = _Index(
            id_field=shape.get("id_field", "id"),
            search_fields=shape.get("search_fields"),
            documents=_read_corpus(Path(corpus_file)),
        )
        self._indexes[index_name] = index
        logger.info("Loaded %d documents into %s", len(index.documents), index_name)

    def execute_query(
        self,
        index_name: str,
        query: str,
        fields: Sequence[str],
        max_rows: int,
    ) -> QueryResponse:
        if not self._running:
            raise RuntimeError(f"{self.name} platform is not running")
        if index_name not in self._indexes:
            raise KeyError(f"Unknown index: {index_name}")
        index = self._indexes[index_name]

        terms, search_fields = _parse_query(query)
        scored = []
        for position, doc in enumerate(index.documents):
            tokens = index.searchable_text(doc, search_fields)
            score = sum(tokens.count(t) for t in terms)
            if score > 0:
                scored.append((score, position, doc))

        scored.sort(key=lambda x: (-x[0], x[1]))
        hits = [_project(doc, fields, index.id_field) for _, _, doc in scored[:max_rows]]
        return QueryResponse(total_hits=len(scored), hits=hits)


def _read_shape(definition: Path) -> Dict[str, Any]:
    shape_file = definition / INDEX_SHAPE_FILENAME if definition.is_dir() else definition
    if not shape_file.is_file():
        return {}
    text = shape_file.read_text(encoding="utf-8").strip()
    return json.loads(text) if text else {}


def _read_corpus(path: Path) -> List[Dict[str, Any]]:
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return []
    if text.startswith("["):
        return list(json.loads(text))
    return [json.loads(line) for line in text.split("\n") if line.strip()]


def _parse_query(query: str) -> tuple[List[str], Optional[List[str]]]:
    """Return (terms, fields) from a JSON or plain-text query."""
    try:
        obj = json.loads(query)
    except json.JSONDecodeError:
        return tokenize(query), None
    if isinstance(obj, dict):
        return tokenize(str(obj.get("query", ""))), obj.get("fields")
    return tokenize(str(obj)), None


def _project(doc: Mapping[str, Any], fields: Sequence[str], id_field: str) -> Dict[str, Any]:
    if not fields:
        return dict(doc)
    keep = [id_field] + [f for f in fields if f != id_field]
    return {f: doc[f] for f in keep if f in doc}
