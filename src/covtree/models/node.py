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

"""Coverage tree node - the hierarchy of coverage results."""

from __future__ import annotations

import logging
import weakref
from fractions import Fraction
from typing import TYPE_CHECKING

from covtree.constants import (
    COMBINED_REPORT_NAME,
    DEFAULT_PACKAGE_NAME,
    DEFAULT_RATIONAL_LIMIT,
    PACKAGE_SEPARATOR,
    PATH_SEPARATOR,
    ROOT_MARKER,
)
from covtree.errors import (
    InvalidLeafError,
    LeafMetricError,
    NodeAlreadyAttachedError,
    TreeCycleError,
)
from covtree.models.counter import Counter
from covtree.models.leaf import CoverageLeaf
from covtree.models.metric import CoverageMetric

if TYPE_CHECKING:
    from covtree.combine.combiner import CombineResult

logger = logging.getLogger(__name__)


def name_hash_code(text: str) -> int:
    """Stable 32-bit hash of a name or path.

    Uses the 31-multiplier polynomial string hash, folded to a signed
    32-bit integer, so the value is identical across processes.
    """
    value = 0
    for char in text:
        value = (31 * value + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


class CoverageNode:
    """A node in the coverage tree.

    Owns its child nodes and leaf attachments. The parent is only a weak
    back-reference, set once when the node is added to another node.
    Equality is identity; use :meth:`structurally_equal` to compare trees.
    """

    def __init__(self, metric: CoverageMetric, name: str) -> None:
        self._metric = metric
        self._name = name
        self._children: list[CoverageNode] = []
        self._leaves: list[CoverageLeaf] = []
        self._parent_ref: weakref.ref[CoverageNode] | None = None

    @property
    def metric(self) -> CoverageMetric:
        return self._metric

    @property
    def name(self) -> str:
        return self._name

    @property
    def children(self) -> tuple[CoverageNode, ...]:
        return tuple(self._children)

    @property
    def leaves(self) -> tuple[CoverageLeaf, ...]:
        return tuple(self._leaves)

    @property
    def parent(self) -> CoverageNode | None:
        """The parent node, or None for the root of a tree."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def has_parent(self) -> bool:
        return not self.is_root

    # -- construction ------------------------------------------------------

    def add_child(self, child: CoverageNode) -> CoverageNode:
        """Append a child node and take ownership of it.

        Raises:
            NodeAlreadyAttachedError: If the child already has a parent
            TreeCycleError: If the child is this node or one of its ancestors
        """
        if child.has_parent:
            raise NodeAlreadyAttachedError(
                f"{child} already belongs to {child.parent}; remove it first"
            )
        ancestor: CoverageNode | None = self
        while ancestor is not None:
            if ancestor is child:
                raise TreeCycleError(f"Cannot add {child} below itself")
            ancestor = ancestor.parent

        self._children.append(child)
        child._parent_ref = weakref.ref(self)
        return child

    def add_children(self, children: list[CoverageNode]) -> None:
        for child in children:
            self.add_child(child)

    def remove_child(self, child: CoverageNode) -> CoverageNode:
        """Detach a direct child so it can be added somewhere else."""
        for index, candidate in enumerate(self._children):
            if candidate is child:
                del self._children[index]
                child._parent_ref = None
                return child
        raise ValueError(f"{child} is not a child of {self}")

    def add_leaf(self, leaf: CoverageLeaf) -> CoverageLeaf:
        if not isinstance(leaf, CoverageLeaf):
            raise InvalidLeafError(
                f"Leaves of {self} must be CoverageLeaf values, got {type(leaf).__name__}"
            )
        self._leaves.append(leaf)
        return leaf

    def clear_leaves(self) -> None:
        self._leaves.clear()

    # -- aggregation -------------------------------------------------------

    def get_metrics(self) -> list[CoverageMetric]:
        """Distinct metrics of this subtree (nodes and leaves), in metric order."""
        from covtree.aggregation import collect_metrics

        return collect_metrics(self)

    def get_coverage(self, search_metric: CoverageMetric) -> Counter:
        """Aggregated coverage of ``search_metric`` for this subtree."""
        from covtree.aggregation import aggregate_coverage

        return aggregate_coverage(self, search_metric)

    def get_metrics_distribution(self) -> dict[CoverageMetric, Counter]:
        from covtree.aggregation import metrics_distribution

        return metrics_distribution(self)

    def get_metrics_percentages(self) -> dict[CoverageMetric, Fraction]:
        from covtree.aggregation import metrics_percentages

        return metrics_percentages(self)

    def print_coverage_for(
        self, search_metric: CoverageMetric, locale: str | None = None
    ) -> str:
        """Covered percentage of ``search_metric`` formatted for ``locale``."""
        return self.get_coverage(search_metric).format_percentage(locale)

    def compute_delta(
        self, reference: CoverageNode, limit: int = DEFAULT_RATIONAL_LIMIT
    ) -> dict[CoverageMetric, Fraction]:
        """Percentage delta of every metric of this tree against ``reference``."""
        from covtree.aggregation import compute_delta

        return compute_delta(self, reference, limit)

    # -- navigation --------------------------------------------------------

    def iter_nodes(self) -> list[CoverageNode]:
        """All nodes of the subtree in depth-first pre-order."""
        nodes = []
        stack = [self]
        while stack:
            current = stack.pop()
            nodes.append(current)
            stack.extend(reversed(current.children))
        return nodes

    def get_all(self, search_metric: CoverageMetric) -> list[CoverageNode]:
        """Return all nodes of ``search_metric`` in this subtree.

        Children's matches come before the node itself (post-order).

        Raises:
            LeafMetricError: If ``search_metric`` is a leaf metric
        """
        if search_metric.is_leaf:
            raise LeafMetricError(
                f"Leaves like '{search_metric}' are not stored as inner nodes of the tree"
            )

        found = []
        stack: list[tuple[CoverageNode, bool]] = [(self, False)]
        while stack:
            current, expanded = stack.pop()
            if expanded:
                if current.metric is search_metric:
                    found.append(current)
                continue
            stack.append((current, True))
            stack.extend((child, False) for child in reversed(current.children))
        return found

    def matches(self, search_metric: CoverageMetric, search_name: str) -> bool:
        return self.metric is search_metric and self.name == search_name

    def matches_hash_code(self, search_metric: CoverageMetric, hash_code: int) -> bool:
        """Whether the name or the path of this node hashes to ``hash_code``.

        Names collide across packages, paths do not, so both are checked.
        Hash collisions are still possible.
        """
        if self.metric is not search_metric:
            return False
        return (
            name_hash_code(self.name) == hash_code
            or name_hash_code(self.get_path()) == hash_code
        )

    def find(self, search_metric: CoverageMetric, search_name: str) -> CoverageNode | None:
        """Depth-first search (node before children) for a metric and name."""
        for node in self.iter_nodes():
            if node.matches(search_metric, search_name):
                return node
        return None

    def find_by_hash_code(
        self, search_metric: CoverageMetric, hash_code: int
    ) -> CoverageNode | None:
        """Depth-first search for a node whose name or path has ``hash_code``."""
        for node in self.iter_nodes():
            if node.matches_hash_code(search_metric, hash_code):
                return node
        return None

    def get_path(self) -> str:
        """Source path of this node, joined with '/'.

        The root has an empty path. The default package '-' resets the path
        to empty, and blank segments are skipped.
        """
        names = []
        node: CoverageNode | None = self
        while node is not None and node.has_parent:
            names.append(node.name)
            node = node.parent

        path = ""
        for local in reversed(names):
            if local == DEFAULT_PACKAGE_NAME:
                path = ""
            elif not path.strip():
                path = local
            elif local.strip():
                path = f"{path}{PATH_SEPARATOR}{local}"
        return path

    def get_parent_name(self) -> str:
        """Dotted name of the run of parents that share the parent's metric.

        Returns the root marker '^' for a root node.
        """
        parent = self.parent
        if parent is None:
            return ROOT_MARKER

        names = []
        node: CoverageNode | None = parent
        while node is not None and node.metric is parent.metric:
            names.append(node.name)
            node = node.parent
        return PACKAGE_SEPARATOR.join(reversed(names))

    # -- restructuring -----------------------------------------------------

    def split_packages(self) -> None:
        """Split flat dotted packages of a module into a package hierarchy.

        Changes the tree in place. Only module nodes are affected; running it
        again on a split tree changes nothing.
        """
        if self.metric is not CoverageMetric.MODULE:
            return
        if not any(child.metric is CoverageMetric.PACKAGE for child in self.children):
            return

        originals = list(self.children)
        for child in originals:
            self.remove_child(child)

        for child in originals:
            parts = [part for part in child.name.split(PACKAGE_SEPARATOR) if part]
            if child.metric is not CoverageMetric.PACKAGE or len(parts) <= 1:
                self.add_child(child)
                continue

            logger.debug("Splitting package %s into %d levels", child.name, len(parts))
            level = self
            for part in parts:
                level = level._package_child(part)
            for grandchild in list(child.children):
                child.remove_child(grandchild)
                level.add_child(grandchild)

    def _package_child(self, name: str) -> CoverageNode:
        for child in self.children:
            if child.metric is CoverageMetric.PACKAGE and child.name == name:
                return child
        return self.add_child(CoverageNode(CoverageMetric.PACKAGE, name))

    def copy_empty(self) -> CoverageNode:
        """A node with the same metric and name, but no children, leaves or parent."""
        return CoverageNode(self.metric, self.name)

    def copy_tree(self) -> CoverageNode:
        """Deep copy of the subtree with this node as detached root."""
        root = self.copy_empty()
        stack = [(self, root)]
        while stack:
            source, copy = stack.pop()
            copy._leaves.extend(source._leaves)
            for child in source._children:
                # Fresh copies have no ancestors, so no cycle check is needed
                child_copy = child.copy_empty()
                copy._children.append(child_copy)
                child_copy._parent_ref = weakref.ref(copy)
                stack.append((child, child_copy))
        return root

    def structurally_equal(self, other: CoverageNode) -> bool:
        """Compare metric, name, children and leaves of two subtrees.

        Parent links are ignored. Cost is proportional to the subtree size.
        """
        stack = [(self, other)]
        while stack:
            mine, theirs = stack.pop()
            if (
                mine.metric is not theirs.metric
                or mine.name != theirs.name
                or mine.leaves != theirs.leaves
                or len(mine.children) != len(theirs.children)
            ):
                return False
            stack.extend(zip(mine.children, theirs.children))
        return True

    # -- combining ---------------------------------------------------------

    def combine_with(
        self, other: CoverageNode, group_name: str = COMBINED_REPORT_NAME
    ) -> CombineResult:
        """Combine this module with another module report.

        See :func:`covtree.combine.combine_trees`.
        """
        from covtree.combine import combine_trees

        return combine_trees(self, other, group_name=group_name)

    def __str__(self) -> str:
        return f"[{self.metric}] {self.name}"

    def __repr__(self) -> str:
        return (
            f"CoverageNode(metric={self.metric.name}, name={self.name!r}, "
            f"children={len(self._children)}, leaves={len(self._leaves)})"
        )


def structurally_equal(first: CoverageNode, second: CoverageNode) -> bool:
    """Whether two trees have the same metrics, names, children and leaves."""
    return first.structurally_equal(second)
