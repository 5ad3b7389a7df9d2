"""CLI command running an evaluation over a rating-set folder layout."""

import logging
from pathlib import Path
from typing import Optional

import click

from ranking_evaluate.engine import EngineConfig, evaluate as run_evaluation, load_config
from ranking_evaluate.errors import ConfigurationError
from ranking_evaluate.report import flatten, write
from ranking_evaluate.report.io import format_for

from ._summary import metric_list, summary_table


@click.command("evaluate")
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None,
              help="YAML run configuration. Relative folders are resolved against its directory.")
@click.option("--configurations", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Configurations folder (one subfolder per version).")
@click.option("--corpora", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Corpora folder.")
@click.option("--ratings", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Ratings folder (*.json rating sets).")
@click.option("--templates", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Query templates folder.")
@click.option("--metric", "-m", type=str, multiple=True,
              help="Metric definition, e.g. P@10, AP, NDCG@10. Repeatable or comma-separated.")
@click.option("--field", "-f", type=str, multiple=True,
              help="Document field to request from the platform. Repeatable.")
@click.option("--platform", type=str, default=None, help="Search platform name (default: memory).")
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
              help="Report file: .json (tree), .jsonl or .csv (flat).")
@click.option("--verbose", "-v", is_flag=True, help="Log engine progress to stderr.")
def evaluate(
    config_file: Optional[Path],
    configurations: Optional[Path],
    corpora: Optional[Path],
    ratings: Optional[Path],
    templates: Optional[Path],
    metric: tuple,
    field: tuple,
    platform: Optional[str],
    output: Optional[Path],
    verbose: bool,
):
    """Evaluate every configuration version against the rating sets.

    Prints the evaluation-level metric values per version:

    \b
      ranking-evaluate evaluate --config rre.yaml -o report.jsonl
      ranking-evaluate evaluate --ratings ratings --corpora corpora \\
          --configurations configurations --templates templates -m P@10 -m AP
    """
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)

    if output:
        try:
            format_for(output)
        except ValueError as e:
            raise click.ClickException(str(e))

    try:
        config = load_config(config_file) if config_file else EngineConfig()
        config = config.override(
            configurations_folder=configurations,
            corpora_folder=corpora,
            ratings_folder=ratings,
            templates_folder=templates,
            metrics=metric_list(metric),
            fields=field,
            platform=platform,
        )
        evaluation = run_evaluation(config)
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    report = flatten(evaluation)
    if not report.entries:
        click.echo("No queries were evaluated.")
    else:
        click.echo(summary_table(report).to_string(index=False))

    if output:
        write(evaluation, output)
        click.echo(f"Wrote report to {output}", err=True)
