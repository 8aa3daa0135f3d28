# Copyright 2026 Pennyworth Technologies, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for CLI commands: summary, delta, combine, split, find, config."""

import json

import pytest
from click.testing import CliRunner

from covtree import __version__
from covtree.cli import main
from covtree.documents import dump_tree, load_tree
from covtree.models import Counter, CoverageMetric, CoverageNode

from tests.conftest import make_class, make_module


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _write(tree, path):
    dump_tree(tree, path)
    return str(path)


def _report(module_name, line):
    module = CoverageNode(CoverageMetric.MODULE, module_name)
    package = module.add_child(CoverageNode(CoverageMetric.PACKAGE, "p"))
    package.add_child(make_class("C", line=line))
    return module


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tree_file(tmp_path):
    return _write(make_module(), tmp_path / "app.json")


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------

def test_version(runner):
    result = runner.invoke(main, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_log_level_case_insensitive(runner, tree_file):
    result = runner.invoke(main, ["--log-level", "debug", "summary", tree_file])
    assert result.exit_code == 0, result.output


def test_invalid_log_level_rejected(runner):
    result = runner.invoke(main, ["--log-level", "chatty", "version"])
    assert result.exit_code != 0


def test_invalid_locale_option_fails(runner):
    result = runner.invoke(main, ["--locale", "xx_YY", "version"])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_config_with_wrong_value_type_fails(runner, tmp_path):
    path = tmp_path / "covtree.json"
    path.write_text(json.dumps({"rational_limit": "100"}))
    result = runner.invoke(main, ["--config", str(path), "config", "show"])
    assert result.exit_code == 1
    assert "rational_limit must be an integer" in result.output


def test_missing_config_file_fails(runner, tmp_path):
    result = runner.invoke(main, ["--config", str(tmp_path / "nope.json"), "version"])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


# ---------------------------------------------------------------------------
# summary
# ---------------------------------------------------------------------------

def test_summary_table(runner, tree_file):
    result = runner.invoke(main, ["summary", tree_file])
    assert result.exit_code == 0, result.output
    assert "Coverage of app" in result.output
    assert "Line" in result.output
    assert "63.16%" in result.output


def test_summary_uses_locale(runner, tree_file):
    result = runner.invoke(main, ["--locale", "de_DE", "summary", tree_file])
    assert result.exit_code == 0, result.output
    assert "63,16%" in result.output


def test_summary_json(runner, tree_file):
    result = runner.invoke(main, ["summary", tree_file, "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert list(data) == ["MODULE", "PACKAGE", "CLASS", "LINE", "BRANCH"]
    assert data["LINE"] == {"covered": 12, "missed": 7, "total": 19, "percentage": 12 / 19}


def test_summary_split_packages(runner, tree_file):
    result = runner.invoke(main, ["summary", tree_file, "--split-packages", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    # com, com.example, com.example.util all contain covered lines
    assert data["PACKAGE"]["covered"] == 3


def test_summary_invalid_document(runner, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{broken")
    result = runner.invoke(main, ["summary", str(path)])
    assert result.exit_code == 1
    assert "Error" in result.output


# ---------------------------------------------------------------------------
# delta
# ---------------------------------------------------------------------------

def test_delta_json(runner, tmp_path):
    tree = _write(_report("app", line=(3, 1)), tmp_path / "new.json")
    reference = _write(_report("app", line=(1, 3)), tmp_path / "old.json")
    result = runner.invoke(main, ["delta", tree, reference, "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["LINE"] == {"delta": "1/2", "percentage_points": 50.0}
    assert data["CLASS"]["delta"] == "0"


def test_delta_table(runner, tmp_path):
    tree = _write(_report("app", line=(3, 1)), tmp_path / "new.json")
    reference = _write(_report("app", line=(1, 3)), tmp_path / "old.json")
    result = runner.invoke(main, ["delta", tree, reference])
    assert result.exit_code == 0, result.output
    assert "+50.00%" in result.output


# ---------------------------------------------------------------------------
# combine
# ---------------------------------------------------------------------------

def test_combine_to_stdout(runner, tmp_path):
    first = _write(_report("app", line=(5, 5)), tmp_path / "a.json")
    second = _write(_report("app", line=(7, 3)), tmp_path / "b.json")
    result = runner.invoke(main, ["combine", first, second])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    leaf = data["children"][0]["children"][0]["leaves"][0]
    assert leaf == {"metric": "LINE", "covered": 7, "missed": 3}


def test_combine_to_file(runner, tmp_path):
    first = _write(_report("app", line=(5, 5)), tmp_path / "a.json")
    second = _write(_report("lib", line=(1, 1)), tmp_path / "b.yaml")
    output = tmp_path / "combined.yaml"
    result = runner.invoke(main, ["combine", first, second, "-o", str(output)])
    assert result.exit_code == 0, result.output
    combined = load_tree(output)
    assert combined.metric is CoverageMetric.GROUP
    assert combined.name == "Combined Report"
    assert combined.get_coverage(CoverageMetric.LINE) == Counter(6, 6)


def test_combine_uses_configured_group_name(runner, tmp_path, monkeypatch):
    monkeypatch.setenv("COVTREE_GROUP_NAME", "Nightly")
    first = _write(_report("app", line=(5, 5)), tmp_path / "a.json")
    second = _write(_report("lib", line=(1, 1)), tmp_path / "b.json")
    result = runner.invoke(main, ["combine", first, second])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["name"] == "Nightly"


def test_combine_mismatch_fails(runner, tmp_path):
    first = _write(_report("app", line=(5, 5)), tmp_path / "a.json")
    second = _write(_report("app", line=(5, 6)), tmp_path / "b.json")
    result = runner.invoke(main, ["combine", first, second])
    assert result.exit_code == 1
    assert "mismatch" in result.output


def test_combine_needs_two_files(runner, tree_file):
    result = runner.invoke(main, ["combine", tree_file])
    assert result.exit_code == 1
    assert "at least two" in result.output


# ---------------------------------------------------------------------------
# split / find
# ---------------------------------------------------------------------------

def test_split_to_file(runner, tree_file, tmp_path):
    output = tmp_path / "split.json"
    result = runner.invoke(main, ["split", tree_file, "-o", str(output)])
    assert result.exit_code == 0, result.output
    tree = load_tree(output)
    assert [c.name for c in tree.children] == ["com"]
    assert tree.find(CoverageMetric.CLASS, "Strings").get_path() == "com/example/util/Strings"


def test_split_to_stdout(runner, tree_file):
    result = runner.invoke(main, ["split", tree_file])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["children"][0]["name"] == "com"


def test_find_prints_path(runner, tree_file):
    result = runner.invoke(main, ["find", tree_file, "-m", "class", "-n", "Main"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "com.example/Main"


def test_find_missing_node(runner, tree_file):
    result = runner.invoke(main, ["find", tree_file, "-m", "CLASS", "-n", "Nope"])
    assert result.exit_code == 1


def test_find_unknown_metric(runner, tree_file):
    result = runner.invoke(main, ["find", tree_file, "-m", "statement", "-n", "Main"])
    assert result.exit_code == 1
    assert "Unknown coverage metric" in result.output


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------

def test_config_show(runner, monkeypatch):
    monkeypatch.setenv("COVTREE_LOCALE", "de_DE")
    result = runner.invoke(main, ["config", "show"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["locale"] == "de_DE"


def test_config_init_writes_template(runner, tmp_path):
    path = tmp_path / "covtree.json"
    result = runner.invoke(main, ["config", "init", "--path", str(path)])
    assert result.exit_code == 0, result.output
    assert json.loads(path.read_text())["locale"] == "en_US"


def test_config_init_defaults_to_home(runner, tmp_path):
    result = runner.invoke(main, ["config", "init"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / ".covtree_config.json").exists()


def test_config_init_refuses_overwrite(runner, tmp_path):
    path = tmp_path / "covtree.json"
    path.write_text("{}")
    result = runner.invoke(main, ["config", "init", "--path", str(path)])
    assert result.exit_code == 1
    assert path.read_text() == "{}"

    result = runner.invoke(main, ["config", "init", "--path", str(path), "--force"])
    assert result.exit_code == 0
    assert "locale" in json.loads(path.read_text())
