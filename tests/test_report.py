"""Tests for flattening, writing and loading reports."""

import json

import pytest

from ranking_evaluate._commands._summary import summary_table
from ranking_evaluate.engine import Engine
from ranking_evaluate.platform import QueryResponse
from ranking_evaluate.report import TOTAL_HITS, flatten, load, to_dict, write

from . import RecordingPlatform, hits, make_sandbox, rating_set


@pytest.fixture
def evaluation(tmp_path):
    data = rating_set()
    data["topics"][0]["query_groups"][0]["queries"].append({"placeholders": {"$query": "tablet"}})
    folders = make_sandbox(tmp_path / "sandbox", versions=("v1", "v2"), ratings={"r.json": data})

    def responder(index, query, fields, rows):
        if index == "prod_v1":
            return QueryResponse(2, hits("doc1", "doc4"))
        return QueryResponse(2, hits("doc1", "doc2"))

    engine = Engine(
        RecordingPlatform(responder),
        configurations_folder=folders["configurations"],
        corpora_folder=folders["corpora"],
        ratings_folder=folders["ratings"],
        templates_folder=folders["templates"],
        metrics=["P", "AP"],
    )
    return engine.evaluate()


def test_flatten_levels_and_values(evaluation):
    report = flatten(evaluation)

    assert report.versions == ["v1", "v2"]
    assert report.metrics == ["P", "AP", TOTAL_HITS]
    assert report.levels == {"evaluation", "corpus", "topic", "query_group", "query"}
    assert report.get_value("P", "v1") == pytest.approx(0.5)
    assert report.get_value("P", "v2") == pytest.approx(1.0)
    assert report.get_value("P", "v1", "docs.json", "electronics", "brand queries", "tablet") == pytest.approx(0.5)
    assert report.get_value(TOTAL_HITS, "v2", "docs.json", "electronics", "brand queries", "laptop") == 2.0
    assert report.get_value("P", "v1", "nope") is None


def test_version_ranking(evaluation):
    report = flatten(evaluation)

    assert report.get_version_ranking("AP") == {"v1": pytest.approx(0.5), "v2": pytest.approx(1.0)}
    assert report.top_k_versions("AP", 1) == ["v2"]
    with pytest.raises(ValueError):
        report.get_version_ranking(TOTAL_HITS)


def test_to_dict_mirrors_tree(evaluation):
    tree = to_dict(evaluation)

    assert tree["versions"] == ["v1", "v2"]
    corpus = tree["corpora"][0]
    assert corpus["name"] == "docs.json"
    group = corpus["topics"][0]["query_groups"][0]
    assert [q["query"] for q in group["queries"]] == ["laptop", "tablet"]
    assert group["queries"][0]["total_hits"] == {"v1": [2], "v2": [2]}
    assert group["queries"][0]["relevant_documents"] == {"doc1": 3, "doc2": 1}
    json.dumps(tree)


@pytest.mark.parametrize("suffix", [".jsonl", ".csv"])
def test_write_and_load_flat_report(evaluation, tmp_path, suffix):
    path = tmp_path / "out" / f"report{suffix}"
    write(evaluation, path)
    loaded = load(path)

    assert loaded.entries == flatten(evaluation).entries


def test_write_nested_json(evaluation, tmp_path):
    path = tmp_path / "report.json"
    write(evaluation, path)

    assert json.loads(path.read_text())["corpora"][0]["topics"][0]["name"] == "electronics"
    with pytest.raises(ValueError):
        load(path)


def test_unknown_extension(evaluation, tmp_path):
    with pytest.raises(ValueError):
        write(evaluation, tmp_path / "report.xml")


def test_summary_table_with_baseline(evaluation):
    table = summary_table(flatten(evaluation), baseline="v1")

    assert list(table.columns) == ["metric", "v1", "v2", "delta_v2"]
    row = table[table["metric"] == "P"].iloc[0]
    assert row["v1"] == pytest.approx(0.5)
    assert row["delta_v2"] == pytest.approx(0.5)


def test_summary_table_query_level(evaluation):
    table = summary_table(flatten(evaluation), level="query", metrics=["P"])

    assert list(table.columns) == ["corpus", "topic", "query_group", "query", "metric", "v1", "v2"]
    assert sorted(table["query"]) == ["laptop", "tablet"]


def test_summary_table_unknown_baseline(evaluation):
    with pytest.raises(ValueError):
        summary_table(flatten(evaluation), baseline="v9")
