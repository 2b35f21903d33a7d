# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Per-day test statistics."""

import math
from collections import Counter
from collections.abc import Iterable

from ..constants import AgeRange, Result, TestType
from ..utils.utils import round_half_away
from .histogram import Histogram


class DayStats:
    """Aggregated results of the tests attributed to a single day.

    Molecular tests are counted by result, their positives are counted by age
    range, and their result delays are recorded in three histograms (all
    results, positives only, negatives only). Other test types are only
    counted.
    """

    def __init__(self, max_delay: int):
        """Initialize empty statistics.

        Args:
            max_delay: Maximum value for the delay histograms. Every DayStats
                that will be added together must use the same value.
        """
        self.max_delay = max_delay
        self.pos = 0
        self.neg = 0
        self.other = 0
        self.type_counts: Counter[TestType] = Counter()
        self.age_pos: Counter[AgeRange] = Counter()
        self.delays = Histogram(max_delay)
        self.pos_delays = Histogram(max_delay)
        self.neg_delays = Histogram(max_delay)

    def __str__(self) -> str:
        """Summarize the statistics on a single line."""
        return self.summary()

    def summary(self, percentiles: Iterable[float] = (0, 25, 50, 75, 100)) -> str:
        """Summarize the statistics on a single line.

        Args:
            percentiles: Delay percentiles to append, if any delays were
                recorded.

        Returns:
            str: Text like "  12p  340n  2o (3.4%) [0 1 2 3 9]".
        """
        text = (
            f"{self.pos:4d}p {self.neg:4d}n {self.other:2d}o "
            f"({self.positive_rate():0.1f}%)"
        )
        if self.delays.total:
            text += " [{}]".format(
                " ".join(str(self.delay_percentile(p)) for p in percentiles)
            )
        return text

    def __repr__(self) -> str:
        """Return a debugging representation."""
        return (
            f"DayStats(pos={self.pos}, neg={self.neg}, other={self.other}, "
            f"types={dict(self.type_counts)})"
        )

    def __eq__(self, other: object) -> bool:
        """Compare all counters and histograms."""
        if not isinstance(other, DayStats):
            return NotImplemented
        return (
            (self.pos, self.neg, self.other) == (other.pos, other.neg, other.other)
            and +self.type_counts == +other.type_counts
            and +self.age_pos == +other.age_pos
            and self.delays == other.delays
            and self.pos_delays == other.pos_delays
            and self.neg_delays == other.neg_delays
        )

    def update(
        self, test_type: TestType, result: Result, age_range: AgeRange, delay: int
    ) -> None:
        """Record a single test.

        Args:
            test_type: Technology used for the test.
            result: Result of the test.
            age_range: Patient's age range.
            delay: Days between collection and reporting, or a negative value
                if it couldn't be computed.
        """
        if not test_type.is_primary:
            self.type_counts[test_type] += 1
            return

        if result is Result.POSITIVE:
            self.pos += 1
            self.age_pos[age_range] += 1
            self.pos_delays.increment(delay)
        elif result is Result.NEGATIVE:
            self.neg += 1
            self.neg_delays.increment(delay)
        else:
            self.other += 1
        self.delays.increment(delay)

    def total(self) -> int:
        """Get the number of molecular tests."""
        return self.pos + self.neg + self.other

    def count(self, test_type: TestType) -> int:
        """Get the number of tests of the supplied type."""
        if test_type.is_primary:
            return self.total()
        return self.type_counts[test_type]

    def delay_percentile(self, pct: float) -> int:
        """Get a percentile of the delays of all molecular results."""
        return self.delays.percentile(pct)

    def pos_delay_percentile(self, pct: float) -> int:
        """Get a percentile of the delays of positive molecular results."""
        return self.pos_delays.percentile(pct)

    def neg_delay_percentile(self, pct: float) -> int:
        """Get a percentile of the delays of negative molecular results."""
        return self.neg_delays.percentile(pct)

    def positive_rate(self) -> float:
        """Get the percentage of all molecular results that are positive.

        Returns:
            float: Percentage in [0, 100], or 0.0 if there are no results.
        """
        if not self.total():
            return 0.0
        return 100 * self.pos / self.total()

    def positivity(self) -> float:
        """Get the percentage of conclusive molecular results that are positive.

        Unlike positive_rate(), "other" results are excluded.

        Returns:
            float: Percentage in [0, 100], or 0.0 if there are no positive or
                negative results.
        """
        if not self.pos + self.neg:
            return 0.0
        return 100 * self.pos / (self.pos + self.neg)

    def estimated_infections(self) -> int:
        """Estimate the number of new infections from the positive results.

        This uses Youyang Gu's heuristic described at
        https://covid19-projections.com/estimating-true-infections/:
        ``positives * (16 * sqrt(positive_rate) + 2.5)``.

        The positive rate's denominator includes "other" results, which
        slightly understates it.

        Returns:
            int: Estimated infections, or 0 if there are no results.
        """
        # TODO: Decide whether "other" results belong in the positive rate.
        if not self.total():
            return 0
        rate = self.pos / self.total()
        return round_half_away(self.pos * (16 * math.sqrt(rate) + 2.5))

    def add(self, other: "DayStats") -> None:
        """Add another DayStats' counts to this one.

        Raises:
            HistogramMismatchError: If the delay histograms have different sizes.
        """
        pairs = (
            (self.delays, other.delays),
            (self.pos_delays, other.pos_delays),
            (self.neg_delays, other.neg_delays),
        )
        # Nothing is modified unless every histogram pair can be merged.
        for mine, theirs in pairs:
            mine.check_mergeable(theirs)
        for mine, theirs in pairs:
            mine.merge(theirs)

        self.pos += other.pos
        self.neg += other.neg
        self.other += other.other
        self.type_counts.update(other.type_counts)
        self.age_pos.update(other.age_pos)

    def scale(self, factor: float) -> None:
        """Multiply every count by factor, rounding each independently."""
        self.pos = round_half_away(factor * self.pos)
        self.neg = round_half_away(factor * self.neg)
        self.other = round_half_away(factor * self.other)
        self.type_counts = _scale_counter(self.type_counts, factor)
        self.age_pos = _scale_counter(self.age_pos, factor)
        self.delays.scale(factor)
        self.pos_delays.scale(factor)
        self.neg_delays.scale(factor)


def sum_stats(stats: Iterable[DayStats], max_delay: int) -> DayStats:
    """Add several DayStats into a new one, leaving the sources unchanged."""
    result = DayStats(max_delay)
    for s in stats:
        result.add(s)
    return result


def _scale_counter(counter: Counter, factor: float) -> Counter:
    return Counter({k: round_half_away(factor * v) for k, v in counter.items()})
