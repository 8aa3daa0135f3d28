"""covtree - hierarchical code coverage trees.

Models coverage results as a tree (module → package → file → class →
method) with covered/missed counters attached at the leaves, and
provides aggregation, deltas, package splitting and report combination.

Public API:
    - CoverageNode: tree node with all query and transform operations
    - CoverageMetric: the ordered metric catalog
    - Counter / CoverageLeaf: measured values
    - combine_all: combine any number of module trees

Example:
    from covtree import CoverageLeaf, CoverageMetric, CoverageNode, Counter

    module = CoverageNode(CoverageMetric.MODULE, "app")
    package = module.add_child(CoverageNode(CoverageMetric.PACKAGE, "com.example"))
    cls = package.add_child(CoverageNode(CoverageMetric.CLASS, "Main"))
    cls.add_leaf(CoverageLeaf(CoverageMetric.LINE, Counter(covered=8, missed=2)))

    module.get_coverage(CoverageMetric.LINE)       # Counter(covered=8, missed=2)
    module.print_coverage_for(CoverageMetric.LINE)  # '80.00%'
"""

__version__ = "0.1.0"

from covtree.models import (
    COVERED_NODE,
    MISSED_NODE,
    NO_COVERAGE,
    Counter,
    CoverageLeaf,
    CoverageMetric,
    CoverageNode,
    name_hash_code,
    structurally_equal,
)
from covtree.combine import (
    CombineFailure,
    CombineResult,
    combine_all,
)

__all__ = [
    # Models
    "CoverageMetric",
    "Counter",
    "CoverageLeaf",
    "CoverageNode",
    "NO_COVERAGE",
    "COVERED_NODE",
    "MISSED_NODE",
    "name_hash_code",
    "structurally_equal",
    # Combining
    "CombineFailure",
    "CombineResult",
    "combine_all",
]
