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

"""Coverage deltas between two trees."""

from __future__ import annotations

import logging
from fractions import Fraction
from typing import TYPE_CHECKING

from covtree.aggregation.aggregator import metrics_percentages
from covtree.constants import DEFAULT_RATIONAL_LIMIT
from covtree.errors import RationalOverflowError
from covtree.models.metric import CoverageMetric

if TYPE_CHECKING:
    from covtree.models.node import CoverageNode

logger = logging.getLogger(__name__)


def bounded_fraction(value: Fraction, limit: int = DEFAULT_RATIONAL_LIMIT) -> Fraction:
    """Return ``value`` unchanged if it fits into ``limit``.

    Raises:
        RationalOverflowError: If the numerator or denominator exceeds the limit
    """
    if abs(value.numerator) > limit or value.denominator > limit:
        raise RationalOverflowError(
            f"Fraction {value.numerator}/{value.denominator} exceeds limit {limit}"
        )
    return value


def subtract_fractions(
    minuend: Fraction,
    subtrahend: Fraction,
    limit: int = DEFAULT_RATIONAL_LIMIT,
) -> Fraction:
    """Subtract two fractions, degrading to a float approximation on overflow.

    The exact difference is returned whenever it fits into ``limit``. If it
    does not (large denominators build up after repeated combining), the
    difference is computed from the float values of both fractions and
    converted back to the closest fraction within the limit. That fallback
    is lossy.

    Args:
        minuend: The value to subtract from
        subtrahend: The value to subtract
        limit: Largest allowed numerator or denominator

    Returns:
        The (possibly approximated) difference
    """
    try:
        return bounded_fraction(minuend - subtrahend, limit)
    except RationalOverflowError:
        difference = float(minuend) - float(subtrahend)
        logger.debug(
            "Rational overflow subtracting %s - %s, using float difference %r",
            minuend,
            subtrahend,
            difference,
        )
        return Fraction(difference).limit_denominator(limit)


def compute_delta(
    node: CoverageNode,
    reference: CoverageNode,
    limit: int = DEFAULT_RATIONAL_LIMIT,
) -> dict[CoverageMetric, Fraction]:
    """Compute the percentage delta of every metric of ``node`` against ``reference``.

    Metrics missing from the reference are compared against 0.

    Args:
        node: The tree to compute the delta for
        reference: The tree to compare against
        limit: Precision bound for the resulting fractions

    Returns:
        Mapping of metric to delta (in metric order)
    """
    percentages = metrics_percentages(node)
    reference_percentages = metrics_percentages(reference)
    return {
        metric: subtract_fractions(
            value, reference_percentages.get(metric, Fraction(0)), limit
        )
        for metric, value in percentages.items()
    }
