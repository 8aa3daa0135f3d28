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

"""Coverage metric catalog."""

from __future__ import annotations

from enum import Enum
from functools import total_ordering

from covtree.errors import UnknownMetricError


@total_ordering
class CoverageMetric(Enum):
    """Kinds of coverage measurement, in their fixed total order.

    Structural metrics are derived by aggregating descendant nodes, leaf
    metrics are measured directly and attached to nodes as counters.
    """

    # (rank, display name, is leaf)
    MODULE = (0, "Module", False)
    GROUP = (1, "Group", False)
    PACKAGE = (2, "Package", False)
    FILE = (3, "File", False)
    CLASS = (4, "Class", False)
    METHOD = (5, "Method", False)
    LINE = (6, "Line", True)
    BRANCH = (7, "Branch", True)
    INSTRUCTION = (8, "Instruction", True)

    def __init__(self, rank: int, display_name: str, leaf: bool) -> None:
        self.rank = rank
        self.display_name = display_name
        self.is_leaf = leaf

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CoverageMetric):
            return NotImplemented
        return self.rank < other.rank

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_name(cls, name: str) -> CoverageMetric:
        """Look up a metric by member name or display name (case-insensitive)."""
        wanted = name.strip().upper()
        for metric in cls:
            if metric.name == wanted or metric.display_name.upper() == wanted:
                return metric
        raise UnknownMetricError(
            f"Unknown coverage metric '{name}'. "
            f"Valid values: {', '.join(m.name for m in cls)}"
        )

    @classmethod
    def leaf_metrics(cls) -> list[CoverageMetric]:
        return [m for m in cls if m.is_leaf]

    @classmethod
    def structural_metrics(cls) -> list[CoverageMetric]:
        return [m for m in cls if not m.is_leaf]
