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

"""Covered/missed counters and their arithmetic."""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Iterable

from babel.numbers import format_percent

from covtree.constants import DEFAULT_LOCALE, DEFAULT_PERCENTAGE_PATTERN, NOT_AVAILABLE
from covtree.errors import InvalidCounterError


@dataclass(frozen=True)
class Counter:
    """Covered and missed occurrences of one metric at one point in the tree.

    Counters are immutable values. ``Counter(0, 0)`` is the identity of
    :meth:`add`. A counter with no occurrences at all has a percentage of 0
    and is reported as unavailable.
    """

    covered: int = 0
    missed: int = 0

    def __post_init__(self) -> None:
        for label, value in (("covered", self.covered), ("missed", self.missed)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidCounterError(
                    f"{label} must be an integer, got {value!r}"
                )
            if value < 0:
                raise InvalidCounterError(
                    f"{label} must not be negative, got {value}"
                )

    @property
    def total(self) -> int:
        return self.covered + self.missed

    @property
    def is_available(self) -> bool:
        """Whether there is anything to compute a percentage from."""
        return self.total > 0

    @property
    def percentage(self) -> Fraction:
        """Covered ratio as an exact fraction (0 when the total is 0)."""
        if self.total == 0:
            return Fraction(0)
        return Fraction(self.covered, self.total)

    def add(self, other: Counter) -> Counter:
        return Counter(self.covered + other.covered, self.missed + other.missed)

    def __add__(self, other: object) -> Counter:
        if not isinstance(other, Counter):
            return NotImplemented
        return self.add(other)

    @classmethod
    def sum(cls, counters: Iterable[Counter]) -> Counter:
        """Add up any number of counters, starting from the zero counter."""
        covered = 0
        missed = 0
        for counter in counters:
            covered += counter.covered
            missed += counter.missed
        return cls(covered, missed)

    def format_percentage(
        self,
        locale: str | None = None,
        pattern: str = DEFAULT_PERCENTAGE_PATTERN,
    ) -> str:
        """Format the covered percentage for display.

        Args:
            locale: Babel locale identifier (e.g. "en_US", "de_DE")
            pattern: CLDR number pattern used for the percentage

        Returns:
            The formatted percentage, or "n/a" if the counter is empty
        """
        if not self.is_available:
            return NOT_AVAILABLE
        return format_percent(
            float(self.percentage),
            format=pattern,
            locale=locale or DEFAULT_LOCALE,
        )

    def to_dict(self) -> dict[str, int]:
        return {"covered": self.covered, "missed": self.missed}

    def __str__(self) -> str:
        return f"{self.covered}/{self.total}"


NO_COVERAGE = Counter(0, 0)
COVERED_NODE = Counter(1, 0)
MISSED_NODE = Counter(0, 1)
