"""
Engine - drives one evaluation run end to end.

For every rating set: load the corpus into every configuration version,
walk topics / query groups / queries, execute each query against each
version and feed the ranked hits into the query's metrics. Only once every
rating set is done are the metrics finalized and rolled up the tree.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..domain import Corpus, Evaluation, Query, QueryGroup, Topic, fold
from ..errors import ConfigurationError
from ..metrics import MetricFactory
from ..platform import SearchPlatform, platform_for
from .config import EngineConfig
from .data_preparer import DataPreparer, index_fqdn
from .ratings import QueryDef, QueryGroupDef, RatingSet, load_rating_sets
from .templates import QueryTemplateResolver

logger = logging.getLogger(__name__)

MIN_ROWS = 10


class Engine:
    """Evaluation engine bound to one platform and one folder layout."""

    def __init__(
        self,
        platform: SearchPlatform,
        configurations_folder: Path,
        corpora_folder: Path,
        ratings_folder: Path,
        templates_folder: Path,
        metrics: Sequence[str],
        fields: Optional[Sequence[str]] = None,
    ):
        self.platform = platform
        self.corpora_folder = Path(corpora_folder)
        self.ratings_folder = Path(ratings_folder)
        self.fields = list(fields or [])
        self.metric_factory = MetricFactory(metrics)
        self.data_preparer = DataPreparer(platform, Path(configurations_folder))
        self.templates = QueryTemplateResolver(Path(templates_folder))

    @classmethod
    def from_config(cls, platform: SearchPlatform, config: EngineConfig) -> "Engine":
        return cls(
            platform,
            configurations_folder=config.configurations_folder,
            corpora_folder=config.corpora_folder,
            ratings_folder=config.ratings_folder,
            templates_folder=config.templates_folder,
            metrics=config.metrics,
            fields=config.fields,
        )

    def evaluate(self, configuration: Optional[Mapping[str, Any]] = None) -> Evaluation:
        """Run the whole evaluation; the platform is stopped on every exit path."""
        try:
            logger.info("New evaluation session is starting...")
            self.platform.before_start(dict(configuration or {}))
            logger.info("Search platform in use: %s", self.platform.name)
            logger.info("Starting %s...", self.platform.name)
            self.platform.start()
            logger.info("%s search platform successfully started", self.platform.name)
            self.platform.after_start()

            evaluation = Evaluation()
            queries: List[Query] = []
            for rating_set in load_rating_sets(self.ratings_folder):
                self._evaluate_rating_set(rating_set, evaluation, queries)

            for q in queries:
                q.notify_collected_metrics()
            fold(evaluation)

            return evaluation
        finally:
            self.platform.before_stop()
            logger.info("%s search platform shutdown procedure executed", self.platform.name)

    def _corpus_file(self, rating_set: RatingSet) -> Path:
        data = self.corpora_folder / rating_set.corpora_filename
        if not data.is_file() or not os.access(data, os.R_OK):
            raise ConfigurationError(f"Unable to read the corpus file {data.absolute()}")
        return data

    def _evaluate_rating_set(
        self,
        rating_set: RatingSet,
        evaluation: Evaluation,
        queries: List[Query],
    ) -> None:
        logger.info("Ratings set processing starts: %s", rating_set.source or rating_set.index_name)
        data = self._corpus_file(rating_set)
        logger.info("Index name => %s", rating_set.index_name)
        logger.info("ID field name => %s", rating_set.id_field_name)
        logger.info("Test collection => %s", data.absolute())

        versions = self.data_preparer.prepare(rating_set.index_name, data)

        corpus = evaluation.find_or_create(data.name, Corpus)
        for topic_def in rating_set.topics:
            topic = corpus.find_or_create(topic_def.description, Topic)
            for group_def in topic_def.query_groups:
                group = topic.find_or_create(group_def.name, QueryGroup)
                for query_def in group_def.queries:
                    query = group.find_or_create(query_def.query, Query)
                    if not query.prepared:
                        query.set_id_field_name(rating_set.id_field_name)
                        query.set_relevant_documents(group_def.relevant_documents)
                        query.prepare(self.metric_factory.create(
                            rating_set.id_field_name, group_def.relevant_documents, versions,
                        ))
                        queries.append(query)

                    for version in versions:
                        self._execute(rating_set, group_def, query_def, query, version)

    def _execute(
        self,
        rating_set: RatingSet,
        group_def: QueryGroupDef,
        query_def: QueryDef,
        query: Query,
        version: str,
    ) -> None:
        text = self.templates.query(
            group_def.template, query_def.template, query_def.placeholders, version,
        )
        response = self.platform.execute_query(
            index_fqdn(rating_set.index_name, version),
            text,
            self._fields(rating_set.id_field_name),
            max(MIN_ROWS, len(group_def.relevant_documents)),
        )
        query.set_total_hits(response.total_hits, version)
        for rank, hit in enumerate(response.hits, 1):
            query.collect(hit, rank, version)

    def _fields(self, id_field_name: str) -> List[str]:
        """Requested fields; the id field always comes first so hits can be graded."""
        if not self.fields:
            return []
        return [id_field_name] + [f for f in self.fields if f != id_field_name]


def evaluate(config: EngineConfig, platform: Optional[SearchPlatform] = None) -> Evaluation:
    """Build an Engine from config and run it."""
    platform = platform or platform_for(config.platform)
    engine = Engine.from_config(platform, config)
    configuration: Dict[str, Any] = dict(config.platform_settings)
    return engine.evaluate(configuration)
