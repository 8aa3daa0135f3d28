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

"""Aggregation engine for rolling up coverage in the tree."""

from __future__ import annotations

from fractions import Fraction
from typing import TYPE_CHECKING

from covtree.models.counter import COVERED_NODE, MISSED_NODE, Counter
from covtree.models.metric import CoverageMetric

if TYPE_CHECKING:
    from covtree.models.node import CoverageNode


def collect_metrics(node: CoverageNode) -> list[CoverageMetric]:
    """Return the distinct metrics used anywhere in the subtree, in metric order.

    This covers the metric of every node and the metric of every leaf
    attachment, starting with ``node`` itself.
    """
    metrics: set[CoverageMetric] = set()
    stack = [node]
    while stack:
        current = stack.pop()
        metrics.add(current.metric)
        metrics.update(leaf.metric for leaf in current.leaves)
        stack.extend(current.children)
    return sorted(metrics)


def aggregate_coverage(node: CoverageNode, search_metric: CoverageMetric) -> Counter:
    """Aggregate the coverage of ``search_metric`` for the subtree of ``node``.

    Leaf metrics are summed over all leaf attachments in the subtree.
    Structural metrics pass the children's totals through, and every node
    of that metric adds one unit of its own: covered if the node has at
    least one covered line, missed otherwise. The verdict is always based
    on LINE coverage, whatever structural metric is requested.

    Uses an explicit stack (children before parents) so that deep trees
    do not hit the interpreter's recursion limit.

    Args:
        node: Root of the subtree to aggregate
        search_metric: The metric to aggregate

    Returns:
        The aggregated counter
    """
    # id(node) -> (coverage of search_metric, LINE coverage)
    results: dict[int, tuple[Counter, Counter]] = {}
    stack: list[tuple[CoverageNode, bool]] = [(node, False)]

    while stack:
        current, expanded = stack.pop()
        if not expanded:
            stack.append((current, True))
            stack.extend((child, False) for child in reversed(current.children))
            continue

        child_results = [results.pop(id(child)) for child in current.children]
        coverage = Counter.sum(cov for cov, _ in child_results)
        lines = Counter.sum(line for _, line in child_results) + Counter.sum(
            leaf.get_coverage(CoverageMetric.LINE) for leaf in current.leaves
        )

        if search_metric.is_leaf:
            coverage = coverage + Counter.sum(
                leaf.get_coverage(search_metric) for leaf in current.leaves
            )
        elif current.metric is search_metric:
            coverage = coverage + (COVERED_NODE if lines.covered > 0 else MISSED_NODE)

        results[id(current)] = (coverage, lines)

    return results[id(node)][0]


def metrics_distribution(node: CoverageNode) -> dict[CoverageMetric, Counter]:
    """Map every metric of the subtree to its aggregated counter."""
    return {metric: aggregate_coverage(node, metric) for metric in collect_metrics(node)}


def metrics_percentages(node: CoverageNode) -> dict[CoverageMetric, Fraction]:
    """Map every metric of the subtree to its covered percentage."""
    return {
        metric: aggregate_coverage(node, metric).percentage
        for metric in collect_metrics(node)
    }
