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

"""Exception hierarchy for covtree."""

from __future__ import annotations


class CovtreeError(Exception):
    """Base class for all covtree errors."""

    pass


class InvalidCounterError(CovtreeError, ValueError):
    """Raised when a counter is built from negative or non-integer values."""

    pass


class StructuralLeafError(CovtreeError, ValueError):
    """Raised when a structural metric is used for a leaf attachment."""

    pass


class InvalidLeafError(CovtreeError, TypeError):
    """Raised when something other than a CoverageLeaf is attached as a leaf."""

    pass


class UnknownMetricError(CovtreeError, ValueError):
    """Raised when a metric name does not match any known metric."""

    pass


class LeafMetricError(CovtreeError, ValueError):
    """Raised when a leaf metric is used where only tree nodes can match.

    Leaves are never stored as inner nodes of the tree, so asking for all
    nodes of a leaf metric is a caller logic error.
    """

    pass


class NodeAlreadyAttachedError(CovtreeError, ValueError):
    """Raised when a node that already has a parent is inserted again."""

    pass


class TreeCycleError(CovtreeError, ValueError):
    """Raised when a node would become a descendant of itself."""

    pass


class CombineArgumentError(CovtreeError, ValueError):
    """Raised when the node passed to a combine is not a module."""

    pass


class CombineStateError(CovtreeError, RuntimeError):
    """Raised when a combine is attempted on a non-module node."""

    pass


class LeafReconciliationError(CombineStateError):
    """Raised when two reports disagree on the leaves of the same node."""

    pass


class RationalOverflowError(CovtreeError, OverflowError):
    """Raised when a rational result exceeds the configured precision bound."""

    pass


class DocumentError(CovtreeError):
    """Raised when a tree document cannot be read or converted."""

    pass
