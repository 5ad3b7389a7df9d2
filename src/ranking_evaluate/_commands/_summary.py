"""Summary command - pivot a flat report into a metric x version table."""

from pathlib import Path
from typing import List, Optional, Sequence

import click
import pandas as pd

from ranking_evaluate.report import LEVELS, TOTAL_HITS, Report, load, to_dataframe

_INDEX_COLUMNS = {
    "evaluation": [],
    "corpus": ["corpus"],
    "topic": ["corpus", "topic"],
    "query_group": ["corpus", "topic", "query_group"],
    "query": ["corpus", "topic", "query_group", "query"],
}


def summary_table(
    report: Report,
    level: str = "evaluation",
    metrics: Optional[Sequence[str]] = None,
    baseline: Optional[str] = None,
) -> pd.DataFrame:
    """One row per (node, metric) at level, one column per version.

    With a baseline version, adds a delta_<version> column for every other version.
    """
    df = to_dataframe(report)
    df = df[df["level"] == level]
    if metrics:
        df = df[df["metric"].isin(list(metrics))]
    else:
        df = df[df["metric"] != TOTAL_HITS]

    versions = [v for v in report.versions if v in set(df["version"])]
    if baseline is not None and baseline not in versions:
        raise ValueError(f"Baseline version '{baseline}' not found. Versions: {versions}")

    index = _INDEX_COLUMNS[level] + ["metric"]
    if df.empty:
        return pd.DataFrame(columns=index + versions)

    table = df.pivot(index=index, columns="version", values="value")
    table = table.reindex(columns=versions).reset_index()
    table.columns.name = None

    if baseline is not None:
        for v in versions:
            if v != baseline:
                table[f"delta_{v}"] = table[v] - table[baseline]

    return table.round(4)


def write_table(df: pd.DataFrame, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.name.endswith(".jsonl"):
        df.to_json(output, lines=True, orient="records")
    elif output.name.endswith(".csv"):
        df.to_csv(output, index=False)
    else:
        raise ValueError(f"Unknown output format: {output}")


@click.command("summary")
@click.argument("report_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--level",
    type=click.Choice(list(LEVELS)),
    default="evaluation",
    help="Tree level to summarize.",
)
@click.option(
    "--metric", "-m",
    type=str,
    multiple=True,
    help="Metric(s) to include. Repeatable. If omitted, uses all.",
)
@click.option(
    "--baseline",
    type=str,
    default=None,
    help="Version to compare against; adds a delta column per other version.",
)
@click.option(
    "--output",
    type=Path,
    required=False,
    help="Output file path. Format determined by extension: .jsonl for JSON Lines, .csv for CSV.",
)
def summary(
    report_path: Path,
    level: str,
    metric: tuple,
    baseline: Optional[str],
    output: Optional[Path],
) -> int:
    """Summarize a .jsonl or .csv report written by `evaluate --output`."""
    try:
        report = load(report_path)
        df = summary_table(report, level=level, metrics=metric_list(metric), baseline=baseline)
    except ValueError as e:
        raise click.ClickException(str(e))

    click.echo(df.to_string(index=False))

    if output:
        write_table(df, output)
    return 0


def metric_list(values: Sequence[str]) -> List[str]:
    """Split comma-separated metric options: ('P@10,AP', 'R') -> ['P@10', 'AP', 'R']."""
    return [m.strip() for v in values for m in v.split(",") if m.strip()]
