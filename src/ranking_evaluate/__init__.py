"""
ranking_evaluate - Search quality evaluation over versioned configurations.

Provides:
- engine/: Engine orchestrator, rating sets, templates, data preparation
- domain/: Evaluation -> Corpus -> Topic -> QueryGroup -> Query result tree
- metrics/: ranking metrics and their registry
- platform/: search platform contract and in-memory reference platform
- report/: flat and nested reports
- _commands/: CLI commands (evaluate, summary)
"""

__version__ = '0.1.0'

from click import group

from ._commands._evaluate import evaluate
from ._commands._summary import summary


@group()
def main():
    pass


main.add_command(evaluate)
main.add_command(summary)
