"""Pytest configuration and shared fixtures for covtree tests."""

import os

import pytest

from covtree.models import Counter, CoverageLeaf, CoverageMetric, CoverageNode


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path, monkeypatch):
    """Keep tests away from the real home directory and COVTREE_* env vars."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for key in list(os.environ):
        if key.startswith("COVTREE_"):
            monkeypatch.delenv(key)


def make_class(name, line=(0, 0), branch=None):
    """Class node with a LINE leaf and an optional BRANCH leaf."""
    node = CoverageNode(CoverageMetric.CLASS, name)
    node.add_leaf(CoverageLeaf(CoverageMetric.LINE, Counter(*line)))
    if branch is not None:
        node.add_leaf(CoverageLeaf(CoverageMetric.BRANCH, Counter(*branch)))
    return node


def make_module(name="app"):
    """Module 'app' with two packages and three classes.

    app
    ├── com.example
    │   ├── Main        LINE 8/10  BRANCH 3/4
    │   └── Helper      LINE 0/5
    └── com.example.util
        └── Strings     LINE 4/4   BRANCH 2/2
    """
    module = CoverageNode(CoverageMetric.MODULE, name)
    example = module.add_child(CoverageNode(CoverageMetric.PACKAGE, "com.example"))
    example.add_child(make_class("Main", line=(8, 2), branch=(3, 1)))
    example.add_child(make_class("Helper", line=(0, 5)))
    util = module.add_child(CoverageNode(CoverageMetric.PACKAGE, "com.example.util"))
    util.add_child(make_class("Strings", line=(4, 0), branch=(2, 0)))
    return module


@pytest.fixture
def module():
    return make_module()
