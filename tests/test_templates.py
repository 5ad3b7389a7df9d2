"""Tests for query template resolution and placeholder substitution."""

from pathlib import Path

import pytest

from ranking_evaluate.engine import QueryTemplateResolver, substitute
from ranking_evaluate.errors import ConfigurationError


def _templates(root: Path, files: dict) -> QueryTemplateResolver:
    for name, text in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
    return QueryTemplateResolver(root)


def test_version_folder_wins_over_root(tmp_path):
    resolver = _templates(tmp_path, {"base.json": "root", "v1/base.json": "v1 specific"})

    assert resolver.template("base.json", None, "v1") == "v1 specific"


def test_falls_back_to_root_without_version_folder(tmp_path):
    resolver = _templates(tmp_path, {"base.json": "root", "v1/base.json": "v1 specific"})

    assert resolver.template("base.json", None, "v2") == "root"


def test_falls_back_to_root_when_version_folder_lacks_the_file(tmp_path):
    resolver = _templates(tmp_path, {"base.json": "root", "v1/other.json": "v1 other"})

    assert resolver.template("base.json", None, "v1") == "root"
    assert resolver.template("other.json", None, "v1") == "v1 other"
    assert resolver.template_path("base.json", None, "v1") == tmp_path / "base.json"


def test_query_override_wins_over_shared_default(tmp_path):
    resolver = _templates(tmp_path, {"base.json": "base", "special.json": "special"})

    assert resolver.template("base.json", "special.json", "v1") == "special"
    assert resolver.template(None, "special.json", "v1") == "special"


def test_version_token_in_template_name(tmp_path):
    resolver = _templates(tmp_path, {"q_v1.json": "first", "q_v2.json": "second"})

    assert resolver.template("q_${version}.json", None, "v1") == "first"
    assert resolver.template_path("q_${version}.json", None, "v2") == tmp_path / "q_v2.json"


def test_no_template_declared(tmp_path):
    resolver = _templates(tmp_path, {})
    with pytest.raises(ConfigurationError, match="template"):
        resolver.template(None, None, "v1")


def test_missing_template_file_names_the_path(tmp_path):
    resolver = _templates(tmp_path, {})
    with pytest.raises(ConfigurationError, match="nope.json"):
        resolver.template("nope.json", None, "v1")


def test_query_substitutes_placeholders(tmp_path):
    resolver = _templates(tmp_path, {"base.json": '{"q": "%%QUERY%%", "again": "%%QUERY%%"}'})

    text = resolver.query("base.json", None, (("%%QUERY%%", "laptop"),), "v1")

    assert text == '{"q": "laptop", "again": "laptop"}'


class TestSubstitute:
    def test_replaces_every_occurrence_and_nothing_else(self):
        assert substitute("find %%QUERY%% or %%QUERY%%!", [("%%QUERY%%", "laptop")]) == "find laptop or laptop!"

    def test_declaration_order(self):
        # "$q" is a prefix of "$query": declared first, it eats part of "$query"
        assert substitute("$query", [("$q", "X"), ("$query", "Y")]) == "Xuery"
        assert substitute("$query", [("$query", "Y"), ("$q", "X")]) == "Y"

    def test_single_pass_only(self):
        # the value of $a introduces $a again; it is not expanded a second time
        assert substitute("$a", [("$a", "[$a]")]) == "[$a]"

    def test_no_placeholders(self):
        assert substitute("match_all", []) == "match_all"
