# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Bounded integer histogram with nearest-rank percentiles."""

from ..exceptions import HistogramMismatchError
from ..utils.utils import round_half_away


class Histogram:
    """Counts of non-negative integer observations up to a maximum value.

    Values ``0..max_value`` each get their own bucket. Larger values share a
    single overflow bucket at index ``max_value + 1``. Updates are O(1) and
    percentile queries are O(max_value) regardless of how many values were
    recorded, and histograms with the same maximum can be merged cheaply.
    """

    def __init__(self, max_value: int):
        """Initialize an empty histogram.

        Args:
            max_value: Largest value tracked in its own bucket.

        Raises:
            ValueError: If max_value is negative.
        """
        if max_value < 0:
            raise ValueError(f"max_value must be non-negative, got {max_value}")
        self.max_value = max_value
        self.buckets: list[int] = [0] * (max_value + 2)
        self.total = 0

    def __len__(self) -> int:
        """Return the number of buckets, including the overflow bucket."""
        return len(self.buckets)

    def __eq__(self, other: object) -> bool:
        """Compare bucket counts."""
        if not isinstance(other, Histogram):
            return NotImplemented
        return self.buckets == other.buckets and self.total == other.total

    def __repr__(self) -> str:
        """Return a debugging representation."""
        return f"Histogram(max_value={self.max_value}, total={self.total})"

    def increment(self, value: int) -> None:
        """Record a single observation.

        Negative values are ignored; they mean no value was available.
        """
        if value < 0:
            return
        self.buckets[min(value, self.max_value + 1)] += 1
        self.total += 1

    def percentile(self, pct: float) -> int:
        """Get the nearest-rank percentile of the recorded values.

        Args:
            pct: Percentile in the range [0, 100].

        Returns:
            int: The bucket index holding the value at the requested rank.
                0 is returned if the histogram is empty or pct is out of
                range, so callers should check ``total`` before treating the
                result as data.
        """
        if self.total == 0 or not 0 <= pct <= 100:
            return 0

        target = 1 + round_half_away(pct * (self.total - 1) / 100)
        seen = 0
        for index, count in enumerate(self.buckets):
            seen += count
            if seen >= target:
                return index
        return len(self.buckets) - 1  # unreachable while total == sum(buckets)

    def check_mergeable(self, other: "Histogram") -> None:
        """Check that another histogram can be merged into this one.

        Raises:
            HistogramMismatchError: If the histograms have different sizes.
        """
        if len(other.buckets) != len(self.buckets):
            raise HistogramMismatchError(
                f"Can't merge histogram with {len(other.buckets)} buckets "
                f"into one with {len(self.buckets)} buckets"
            )

    def merge(self, other: "Histogram") -> None:
        """Add another histogram's counts to this one.

        Raises:
            HistogramMismatchError: If the histograms have different sizes.
        """
        self.check_mergeable(other)
        for index, count in enumerate(other.buckets):
            self.buckets[index] += count
        self.total += other.total

    def scale(self, factor: float) -> None:
        """Multiply every bucket by factor, rounding each to an integer.

        The total is recomputed from the rounded buckets so it always matches
        their sum.
        """
        self.buckets = [round_half_away(factor * count) for count in self.buckets]
        self.total = sum(self.buckets)

    def copy(self) -> "Histogram":
        """Return an independent copy."""
        result = Histogram(self.max_value)
        result.merge(self)
        return result
