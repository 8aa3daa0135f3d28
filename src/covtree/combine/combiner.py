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

"""Combining coverage trees from several analysis runs into one report.

Both inputs stay untouched: all merging happens on fresh copies, and a
failed combine returns a tagged result instead of a half-merged tree.

Rules:
- Modules with the same name are merged node by node, matching children
  by name. Children only one side has are copied over.
- A node that carries leaves on one side but has children on the other
  side loses its leaves; the structure of the other report wins.
- Two leaf-level nodes are reconciled counter by counter. Both must
  expose the same metrics with the same totals, then the counter with
  more covered items wins.
- Modules with different names are put side by side below a new group node.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from covtree.constants import COMBINED_REPORT_NAME
from covtree.errors import (
    CombineArgumentError,
    CombineStateError,
    LeafReconciliationError,
)
from covtree.models.counter import Counter
from covtree.models.leaf import CoverageLeaf
from covtree.models.metric import CoverageMetric
from covtree.models.node import CoverageNode

logger = logging.getLogger(__name__)


class CombineFailure(str, Enum):
    """Reason a combine was rejected."""

    ARGUMENT_NOT_MODULE = "argument-not-module"
    RECEIVER_NOT_MODULE = "receiver-not-module"
    LEAF_METRICS_MISMATCH = "leaf-metrics-mismatch"
    LEAF_TOTAL_MISMATCH = "leaf-total-mismatch"


@dataclass
class CombineResult:
    """Outcome of combining two coverage trees.

    On success ``tree`` holds the combined tree. On failure ``failure``
    names the violated precondition and ``node_metric``/``node_name``
    identify the node where the reports disagree.
    """

    success: bool
    tree: CoverageNode | None = None
    failure: CombineFailure | None = None
    error: str | None = None
    node_metric: CoverageMetric | None = None
    node_name: str | None = None
    # Leaf metric whose totals differ (LEAF_TOTAL_MISMATCH only)
    metric: CoverageMetric | None = None

    @classmethod
    def ok(cls, tree: CoverageNode) -> CombineResult:
        return cls(success=True, tree=tree)

    @classmethod
    def failed(
        cls,
        failure: CombineFailure,
        error: str,
        node: CoverageNode,
        metric: CoverageMetric | None = None,
    ) -> CombineResult:
        return cls(
            success=False,
            failure=failure,
            error=error,
            node_metric=node.metric,
            node_name=node.name,
            metric=metric,
        )

    def unwrap(self) -> CoverageNode:
        """Return the combined tree or raise the error matching the failure.

        Raises:
            CombineArgumentError: If the other tree is not a module
            CombineStateError: If the receiving tree is not a module
            LeafReconciliationError: If the reports disagree on leaves
        """
        if self.success and self.tree is not None:
            return self.tree
        if self.failure is CombineFailure.ARGUMENT_NOT_MODULE:
            raise CombineArgumentError(self.error)
        if self.failure is CombineFailure.RECEIVER_NOT_MODULE:
            raise CombineStateError(self.error)
        raise LeafReconciliationError(self.error)

    def to_dict(self) -> dict[str, Any]:
        """Convert the failure details to a dictionary (the tree is not included)."""
        return {
            "success": self.success,
            "failure": self.failure.value if self.failure else None,
            "error": self.error,
            "node_metric": self.node_metric.name if self.node_metric else None,
            "node_name": self.node_name,
            "metric": self.metric.name if self.metric else None,
        }


def combine_trees(
    tree: CoverageNode,
    other: CoverageNode,
    group_name: str = COMBINED_REPORT_NAME,
) -> CombineResult:
    """Combine two module trees into a new tree.

    Args:
        tree: The receiving module
        other: The module to combine with
        group_name: Name of the group node used for modules with different names

    Returns:
        CombineResult with the combined tree, or the reason it failed
    """
    if other.metric is not CoverageMetric.MODULE:
        return CombineResult.failed(
            CombineFailure.ARGUMENT_NOT_MODULE,
            f"Provided node {other} is not of metric {CoverageMetric.MODULE}",
            other,
        )
    if tree.metric is not CoverageMetric.MODULE:
        return CombineResult.failed(
            CombineFailure.RECEIVER_NOT_MODULE,
            f"Cannot combine with {tree}: not a {CoverageMetric.MODULE} node",
            tree,
        )

    if tree.name == other.name:
        combined = tree.copy_tree()
        failure = safely_combine_children(combined, other)
        if failure is not None:
            logger.debug("Combining %s failed: %s", tree.name, failure.error)
            return failure
        logger.info("Combined two reports of module %s", tree.name)
    else:
        combined = CoverageNode(CoverageMetric.GROUP, group_name)
        combined.add_child(tree.copy_tree())
        combined.add_child(other.copy_tree())
        logger.info("Grouped modules %s and %s as '%s'", tree.name, other.name, group_name)

    return CombineResult.ok(combined)


def safely_combine_children(
    target: CoverageNode, source: CoverageNode
) -> CombineResult | None:
    """Merge ``source`` into ``target`` in place, node by node.

    ``target`` must be a private copy: on failure it is left half-merged.

    Returns:
        None on success, otherwise the failed CombineResult
    """
    stack = [(target, source)]
    while stack:
        mine, theirs = stack.pop()

        if mine.leaves:
            if not theirs.children:
                failure = merge_leaves(
                    mine,
                    mine.get_metrics_distribution(),
                    theirs.get_metrics_distribution(),
                )
                if failure is not None:
                    return failure
                continue
            logger.debug("Dropping leaves of %s, other report has children", mine)
            mine.clear_leaves()

        pending = []
        for their_child in theirs.children:
            existing = next(
                (child for child in mine.children if child.name == their_child.name),
                None,
            )
            if existing is None:
                mine.add_child(their_child.copy_tree())
            else:
                pending.append((existing, their_child))
        stack.extend(reversed(pending))

    return None


def merge_leaves(
    node: CoverageNode,
    distribution: dict[CoverageMetric, Counter],
    other_distribution: dict[CoverageMetric, Counter],
) -> CombineResult | None:
    """Replace the leaves of ``node`` with the best counters of both reports.

    Both distributions must have the same metrics with the same totals,
    otherwise the reports describe different source entities. For every
    leaf metric the counter with more covered items wins. The leaves of
    ``node`` are only touched once both distributions are verified.

    Returns:
        None on success, otherwise the failed CombineResult
    """
    if set(distribution) != set(other_distribution):
        return CombineResult.failed(
            CombineFailure.LEAF_METRICS_MISMATCH,
            f"Reports to combine have a mismatch of leaves in {node.metric} {node.name}",
            node,
        )

    best: dict[CoverageMetric, Counter] = {}
    for metric, counter in distribution.items():
        other_counter = other_distribution[metric]
        if counter.total != other_counter.total:
            return CombineResult.failed(
                CombineFailure.LEAF_TOTAL_MISMATCH,
                f"Reports to combine have a mismatch of total {metric.display_name} "
                f"coverage in {node.metric} {node.name}",
                node,
                metric=metric,
            )
        if metric.is_leaf:
            best[metric] = max((counter, other_counter), key=lambda c: c.covered)

    # Keep the node's own leaf order, then any leaf metrics it did not carry
    order = list(dict.fromkeys(leaf.metric for leaf in node.leaves if leaf.metric in best))
    order.extend(metric for metric in best if metric not in order)

    node.clear_leaves()
    for metric in order:
        node.add_leaf(CoverageLeaf(metric, best[metric]))
    return None


def combine_all(
    trees: Sequence[CoverageNode],
    group_name: str = COMBINED_REPORT_NAME,
) -> CombineResult:
    """Combine any number of module trees, left to right.

    Once modules with different names have been grouped, further modules
    are merged into the matching child of that group, or added to it.
    Stops at the first failure.

    Raises:
        ValueError: If no trees are given
    """
    if not trees:
        raise ValueError("No coverage trees to combine")

    first = trees[0]
    if first.metric not in (CoverageMetric.MODULE, CoverageMetric.GROUP):
        return CombineResult.failed(
            CombineFailure.RECEIVER_NOT_MODULE,
            f"Cannot combine with {first}: not a {CoverageMetric.MODULE} node",
            first,
        )

    result = CombineResult.ok(first.copy_tree())
    for tree in trees[1:]:
        accumulated = result.tree
        if accumulated.metric is CoverageMetric.GROUP:
            result = _combine_into_group(accumulated, tree, group_name)
        else:
            result = combine_trees(accumulated, tree, group_name)
        if not result.success:
            return result
    return result


def _combine_into_group(
    group: CoverageNode, other: CoverageNode, group_name: str
) -> CombineResult:
    if other.metric is not CoverageMetric.MODULE:
        return CombineResult.failed(
            CombineFailure.ARGUMENT_NOT_MODULE,
            f"Provided node {other} is not of metric {CoverageMetric.MODULE}",
            other,
        )

    existing = next(
        (
            child
            for child in group.children
            if child.metric is CoverageMetric.MODULE and child.name == other.name
        ),
        None,
    )
    combined = CoverageNode(CoverageMetric.GROUP, group.name)
    if existing is None:
        for child in group.children:
            combined.add_child(child.copy_tree())
        combined.add_child(other.copy_tree())
        return CombineResult.ok(combined)

    merged = combine_trees(existing, other, group_name)
    if not merged.success:
        return merged
    for child in group.children:
        combined.add_child(merged.tree if child is existing else child.copy_tree())
    return CombineResult.ok(combined)
