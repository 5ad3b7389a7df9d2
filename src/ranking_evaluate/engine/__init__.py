"""
Evaluation engine.

Components:
- Engine / evaluate(): the orchestrator (engine.py)
- Rating set loading and typed judgments (ratings.py)
- QueryTemplateResolver (templates.py)
- DataPreparer / index_fqdn (data_preparer.py)
- EngineConfig / load_config (config.py)
"""

from .config import EngineConfig, load_config
from .data_preparer import DataPreparer, INDEX_SHAPE_FILENAME, index_fqdn
from .engine import Engine, evaluate
from .ratings import (
    QueryDef,
    QueryGroupDef,
    RatingSet,
    TopicDef,
    load_rating_set,
    load_rating_sets,
    parse,
)
from .templates import QueryTemplateResolver, substitute

__all__ = [
    "DataPreparer",
    "Engine",
    "EngineConfig",
    "INDEX_SHAPE_FILENAME",
    "QueryDef",
    "QueryGroupDef",
    "QueryTemplateResolver",
    "RatingSet",
    "TopicDef",
    "evaluate",
    "index_fqdn",
    "load_config",
    "load_rating_set",
    "load_rating_sets",
    "parse",
    "substitute",
]
