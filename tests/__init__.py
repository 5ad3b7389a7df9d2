"""Shared test helpers: folder-layout sandboxes and a recording platform."""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ranking_evaluate.platform import QueryResponse, SearchPlatform


def write_json(path: Path, obj: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj), encoding="utf-8")
    return path


def rating_set(
    index_name: str = "prod",
    corpora_filename: str = "docs.json",
    topics: Optional[List[Dict[str, Any]]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    data = {"index_name": index_name, "corpora_filename": corpora_filename}
    data["topics"] = topics if topics is not None else [
        {
            "description": "electronics",
            "query_groups": [
                {
                    "name": "brand queries",
                    "template": "query.txt",
                    "relevant_documents": {"doc1": 3, "doc2": 1},
                    "queries": [{"placeholders": {"$query": "laptop"}}],
                }
            ],
        }
    ]
    data.update(extra)
    return data


def make_sandbox(
    root: Path,
    versions: Sequence[str] = ("baseline",),
    ratings: Optional[Mapping[str, Dict[str, Any]]] = None,
    templates: Optional[Mapping[str, str]] = None,
    corpus: Optional[List[Dict[str, Any]]] = None,
    corpus_filename: str = "docs.json",
) -> Dict[str, Path]:
    """Create configurations/, corpora/, ratings/ and templates/ under root."""
    folders = {name: root / name for name in ("configurations", "corpora", "ratings", "templates")}
    for folder in folders.values():
        folder.mkdir(parents=True, exist_ok=True)

    for v in versions:
        write_json(folders["configurations"] / v / "index-shape.json", {"id_field": "id"})

    if corpus is None:
        corpus = [
            {"id": "doc1", "title": "laptop laptop bag"},
            {"id": "doc2", "title": "gaming laptop"},
            {"id": "doc3", "title": "laptop stand"},
            {"id": "doc4", "title": "phone case"},
        ]
    write_json(folders["corpora"] / corpus_filename, corpus)

    for name, data in (ratings if ratings is not None else {"ratings.json": rating_set()}).items():
        write_json(folders["ratings"] / name, data)

    for name, text in (templates if templates is not None else {"query.txt": "find $query"}).items():
        path = folders["templates"] / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    return folders


Responder = Callable[[str, str, Sequence[str], int], QueryResponse]


def hits(*doc_ids: str) -> List[Dict[str, Any]]:
    return [{"id": d} for d in doc_ids]


class RecordingPlatform(SearchPlatform):
    """Fake platform recording every call in order."""

    def __init__(self, responder: Optional[Responder] = None, fail_on_query: Optional[int] = None):
        self.calls: List[tuple] = []
        self.queries: List[tuple] = []
        self.responder = responder or (lambda index, query, fields, rows: QueryResponse(3, hits("doc1", "doc3", "doc2")))
        self.fail_on_query = fail_on_query

    @property
    def name(self) -> str:
        return "Recording"

    def before_start(self, configuration):
        self.calls.append(("before_start", dict(configuration)))

    def start(self):
        self.calls.append(("start",))

    def after_start(self):
        self.calls.append(("after_start",))

    def load(self, corpus_file, definition, index_name):
        self.calls.append(("load", Path(corpus_file).name, Path(definition).name, index_name))

    def execute_query(self, index_name, query, fields, max_rows):
        self.calls.append(("execute_query", index_name, query, tuple(fields), max_rows))
        self.queries.append((index_name, query))
        if self.fail_on_query is not None and len(self.queries) == self.fail_on_query:
            raise RuntimeError(f"query {len(self.queries)} failed")
        return self.responder(index_name, query, fields, max_rows)

    def before_stop(self):
        self.calls.append(("before_stop",))

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]
