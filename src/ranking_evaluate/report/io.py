"""
C. IO - Write evaluations and load flat reports.

Supported formats (chosen by file extension):
- .json: nested tree (to_dict)
- .jsonl: one ReportEntry per line
- .csv: one ReportEntry per row
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

import pandas as pd

from ..domain import Evaluation
from .flatten import flatten, to_dict
from .report import Report, ReportEntry

Format = Literal["json", "jsonl", "csv"]

COLUMNS = ["level", "corpus", "topic", "query_group", "query", "metric", "version", "value"]


def format_for(path: Path) -> Format:
    suffix = path.suffix.lower().lstrip(".")
    if suffix not in ("json", "jsonl", "csv"):
        raise ValueError(f"Unknown output format: {path} (expected .json, .jsonl or .csv)")
    return suffix


def to_dataframe(report: Report) -> pd.DataFrame:
    return pd.DataFrame([e.to_dict() for e in report.entries], columns=COLUMNS)


def write(evaluation: Evaluation, path: Path) -> None:
    """Write evaluation to path, format chosen by extension."""
    fmt = format_for(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "json":
        path.write_text(json.dumps(to_dict(evaluation), indent=2) + "\n", encoding="utf-8")
        return

    df = to_dataframe(flatten(evaluation))
    if fmt == "jsonl":
        df.to_json(path, lines=True, orient="records", force_ascii=False, double_precision=15)
    else:
        df.to_csv(path, index=False)


def load(path: Path) -> Report:
    """Load a flat report written as .jsonl or .csv."""
    fmt = format_for(path)
    if fmt == "jsonl":
        df = pd.read_json(path, lines=True, dtype={c: str for c in COLUMNS if c != "value"})
    elif fmt == "csv":
        df = pd.read_csv(path, dtype={c: str for c in COLUMNS if c != "value"}, keep_default_na=False)
    else:
        raise ValueError(f"Cannot load a flat report from {path}: nested .json reports are write-only")

    missing = [c for c in COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Report {path} is missing columns: {missing}")

    df = df.fillna("")
    entries = tuple(
        ReportEntry(
            level=row["level"],
            corpus=row["corpus"],
            topic=row["topic"],
            query_group=row["query_group"],
            query=row["query"],
            metric=row["metric"],
            version=row["version"],
            value=float(row["value"]),
        )
        for row in df[COLUMNS].to_dict(orient="records")
    )
    return Report(entries=entries)
