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

"""Tree documents: coverage trees as plain dictionaries, JSON or YAML.

Document form::

    {
        "metric": "MODULE",
        "name": "app",
        "children": [...],
        "leaves": [{"metric": "LINE", "covered": 5, "missed": 5}]
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from covtree.errors import CovtreeError, DocumentError
from covtree.models.counter import Counter
from covtree.models.leaf import CoverageLeaf
from covtree.models.metric import CoverageMetric
from covtree.models.node import CoverageNode

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def node_to_dict(node: CoverageNode) -> dict[str, Any]:
    """Convert a tree to its document form."""
    root = _node_entry(node)
    stack = [(node, root)]
    while stack:
        current, entry = stack.pop()
        for child in current.children:
            child_entry = _node_entry(child)
            entry["children"].append(child_entry)
            stack.append((child, child_entry))
    return root


def _node_entry(node: CoverageNode) -> dict[str, Any]:
    return {
        "metric": node.metric.name,
        "name": node.name,
        "children": [],
        "leaves": [leaf.to_dict() for leaf in node.leaves],
    }


def node_from_dict(data: dict[str, Any]) -> CoverageNode:
    """Build a tree from its document form.

    Raises:
        DocumentError: If the document is malformed
    """
    root = _node_from_entry(data)
    stack = [(data, root)]
    while stack:
        entry, node = stack.pop()
        for child_entry in entry.get("children") or []:
            child = node.add_child(_node_from_entry(child_entry))
            stack.append((child_entry, child))
    return root


def _node_from_entry(entry: Any) -> CoverageNode:
    if not isinstance(entry, dict):
        raise DocumentError(f"Expected a node mapping, got {type(entry).__name__}")
    try:
        node = CoverageNode(CoverageMetric.from_name(entry["metric"]), str(entry["name"]))
        for leaf in entry.get("leaves") or []:
            node.add_leaf(
                CoverageLeaf(
                    CoverageMetric.from_name(leaf["metric"]),
                    Counter(leaf.get("covered", 0), leaf.get("missed", 0)),
                )
            )
    except KeyError as e:
        raise DocumentError(f"Missing field {e} in node {entry.get('name', '?')!r}")
    except (TypeError, AttributeError) as e:
        raise DocumentError(f"Malformed node {entry.get('name', '?')!r}: {e}")
    except CovtreeError as e:
        raise DocumentError(f"Invalid node {entry.get('name', '?')!r}: {e}")
    return node


def load_tree(path: Path) -> CoverageNode:
    """Load a tree document from a JSON or YAML file (chosen by suffix).

    Raises:
        DocumentError: If the file cannot be read or parsed
    """
    try:
        content = path.read_text()
    except OSError as e:
        raise DocumentError(f"Error reading {path}: {e}")

    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DocumentError(f"Invalid tree document {path}: {e}")

    tree = node_from_dict(data)
    logger.debug("Loaded %s with %d nodes from %s", tree, len(tree.iter_nodes()), path)
    return tree


def dump_tree(node: CoverageNode, path: Path | None = None) -> str:
    """Serialize a tree as JSON or YAML, optionally writing it to ``path``.

    YAML is used when ``path`` has a YAML suffix, JSON otherwise.
    """
    data = node_to_dict(node)
    if path is not None and path.suffix.lower() in YAML_SUFFIXES:
        text = yaml.safe_dump(data, sort_keys=False)
    else:
        text = json.dumps(data, indent=2)

    if path is not None:
        path.write_text(text)
        logger.debug("Wrote %s to %s", node, path)
    return text
