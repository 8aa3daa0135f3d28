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

"""Leaf attachments: measured counters hung off a tree node."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from covtree.errors import StructuralLeafError
from covtree.models.counter import NO_COVERAGE, Counter
from covtree.models.metric import CoverageMetric


@dataclass(frozen=True)
class CoverageLeaf:
    """A (metric, counter) pair that terminates the tree for that metric."""

    metric: CoverageMetric
    counter: Counter

    def __post_init__(self) -> None:
        if not self.metric.is_leaf:
            raise StructuralLeafError(
                f"'{self.metric}' is a structural metric and cannot be used as a leaf"
            )

    def get_coverage(self, search_metric: CoverageMetric) -> Counter:
        """Return the counter if it measures ``search_metric``, else zero."""
        if self.metric is search_metric:
            return self.counter
        return NO_COVERAGE

    def to_dict(self) -> dict[str, Any]:
        return {"metric": self.metric.name, **self.counter.to_dict()}

    def __str__(self) -> str:
        return f"[{self.metric}]: {self.counter}"
