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

"""Data models for coverage trees."""

from covtree.models.metric import CoverageMetric
from covtree.models.counter import (
    COVERED_NODE,
    MISSED_NODE,
    NO_COVERAGE,
    Counter,
)
from covtree.models.leaf import CoverageLeaf
from covtree.models.node import (
    CoverageNode,
    name_hash_code,
    structurally_equal,
)

__all__ = [
    "CoverageMetric",
    "Counter",
    "NO_COVERAGE",
    "COVERED_NODE",
    "MISSED_NODE",
    "CoverageLeaf",
    "CoverageNode",
    "name_hash_code",
    "structurally_equal",
]
