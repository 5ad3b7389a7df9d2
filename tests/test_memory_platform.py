"""Tests for the in-memory reference platform."""

import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from ranking_evaluate.platform import InMemoryPlatform, platform_for
from ranking_evaluate.errors import ConfigurationError

CORPUS = [
    {"id": "1", "title": "red laptop", "body": "fast"},
    {"id": "2", "title": "blue phone", "body": "laptop sized"},
    {"id": "3", "title": "laptop laptop", "body": "slow"},
]


class TestInMemoryPlatform(unittest.TestCase):
    def setUp(self):
        self._dir = TemporaryDirectory()
        self.root = Path(self._dir.name)
        self.corpus = self.root / "corpus.json"
        self.corpus.write_text(json.dumps(CORPUS))
        self.shape = self.root / "index-shape.json"
        self.shape.write_text(json.dumps({"id_field": "id", "search_fields": ["title"]}))
        self.platform = InMemoryPlatform()
        self.platform.before_start({})
        self.platform.start()
        self.platform.after_start()

    def tearDown(self):
        self._dir.cleanup()

    def test_term_frequency_ranking(self):
        self.platform.load(self.corpus, self.shape, "idx_v1")
        response = self.platform.execute_query("idx_v1", "laptop", [], 10)

        self.assertEqual(response.total_hits, 2)
        self.assertEqual([h["id"] for h in response.hits], ["3", "1"])

    def test_json_query_with_fields_override(self):
        self.platform.load(self.corpus, self.shape, "idx_v1")
        response = self.platform.execute_query("idx_v1", '{"query": "laptop", "fields": ["body"]}', [], 10)

        self.assertEqual([h["id"] for h in response.hits], ["2"])

    def test_max_rows_truncates_but_total_hits_counts_all(self):
        self.platform.load(self.corpus, self.shape, "idx_v1")
        response = self.platform.execute_query("idx_v1", "laptop", [], 1)

        self.assertEqual(response.total_hits, 2)
        self.assertEqual(len(response.hits), 1)

    def test_projection_keeps_id_field(self):
        self.platform.load(self.corpus, self.shape, "idx_v1")
        response = self.platform.execute_query("idx_v1", "laptop", ["title"], 10)

        self.assertEqual(response.hits[0], {"id": "3", "title": "laptop laptop"})

    def test_index_folder_definition_and_json_lines_corpus(self):
        folder = self.root / "products"
        folder.mkdir()
        (folder / "index-shape.json").write_text(json.dumps({"search_fields": ["body"]}))
        jsonl = self.root / "corpus.jsonl"
        jsonl.write_text("\n".join(json.dumps(d) for d in CORPUS))

        self.platform.load(jsonl, folder, "products_v1")
        response = self.platform.execute_query("products_v1", "slow", [], 10)

        self.assertEqual([h["id"] for h in response.hits], ["3"])

    def test_reload_is_a_no_op(self):
        self.platform.load(self.corpus, self.shape, "idx_v1")
        self.corpus.write_text("[]")
        self.platform.load(self.corpus, self.shape, "idx_v1")

        self.assertEqual(self.platform.execute_query("idx_v1", "laptop", [], 10).total_hits, 2)

    def test_unknown_index(self):
        with self.assertRaises(KeyError):
            self.platform.execute_query("nope", "laptop", [], 10)

    def test_stop_clears_indexes(self):
        self.platform.load(self.corpus, self.shape, "idx_v1")
        self.platform.before_stop()

        self.assertEqual(self.platform.index_names, [])
        with self.assertRaises(RuntimeError):
            self.platform.execute_query("idx_v1", "laptop", [], 10)


class TestPlatformRegistry(unittest.TestCase):
    def test_memory_is_registered(self):
        self.assertIsInstance(platform_for("memory"), InMemoryPlatform)

    def test_unknown_platform(self):
        with self.assertRaises(ConfigurationError):
            platform_for("solr")
