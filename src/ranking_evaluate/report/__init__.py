"""
Report - Flat and nested views of a finalized evaluation.

Components:
- Report / ReportEntry: immutable flat container (report.py)
- flatten / to_dict: tree -> report, tree -> nested dict (flatten.py)
- IO: write evaluations, load flat reports, pandas tables (io.py)
"""

from .report import LEVELS, Level, Report, ReportEntry
from .flatten import TOTAL_HITS, flatten, to_dict, versions
from .io import load, to_dataframe, write

__all__ = [
    "LEVELS",
    "Level",
    "Report",
    "ReportEntry",
    "TOTAL_HITS",
    "flatten",
    "load",
    "to_dataframe",
    "to_dict",
    "versions",
    "write",
]
