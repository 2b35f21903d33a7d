# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Day-keyed collections of test statistics and their roll-ups."""

import datetime
import logging
from collections.abc import Iterator

from ..utils.utils import sunday_on_or_before
from .stats import DayStats, sum_stats

logger = logging.getLogger(__name__)


class StatsStore:
    """Mapping from a calendar day to the DayStats for that day.

    Entries are created the first time a day is requested and never removed.
    Roll-ups return new stores and leave this one unchanged.
    """

    def __init__(self, max_delay: int):
        """Initialize an empty store.

        Args:
            max_delay: Maximum value for the delay histograms of every entry.
        """
        self.max_delay = max_delay
        self._days: dict[datetime.date, DayStats] = {}

    def __len__(self) -> int:
        """Return the number of days in the store."""
        return len(self._days)

    def __contains__(self, day: object) -> bool:
        """Check whether a day has an entry."""
        return day in self._days

    def __getitem__(self, day: datetime.date) -> DayStats:
        """Get an existing entry without creating it.

        Raises:
            KeyError: If the day has no entry.
        """
        return self._days[day]

    def __iter__(self) -> Iterator[datetime.date]:
        """Iterate over days in ascending order."""
        return iter(self.sorted_days())

    def __repr__(self) -> str:
        """Return a debugging representation."""
        return f"StatsStore(days={len(self._days)}, max_delay={self.max_delay})"

    def get(self, day: datetime.date) -> DayStats:
        """Get the entry for a day, creating an empty one if needed."""
        stats = self._days.get(day)
        if stats is None:
            stats = self._days[day] = DayStats(self.max_delay)
        return stats

    def sorted_days(self) -> list[datetime.date]:
        """Get all days in ascending order.

        All reports iterate in this order.
        """
        return sorted(self._days)

    def items(self) -> list[tuple[datetime.date, DayStats]]:
        """Get (day, stats) pairs in ascending order of day."""
        return [(day, self._days[day]) for day in self.sorted_days()]

    def weekly(self) -> "StatsStore":
        """Sum the entries into weeks starting on Sunday.

        Returns:
            StatsStore: A new store keyed by the Sunday on or before each day.
        """
        weeks = StatsStore(self.max_delay)
        for day, stats in self.items():
            weeks.get(sunday_on_or_before(day)).add(stats)
        logger.debug("Rolled %d day(s) up into %d week(s)", len(self), len(weeks))
        return weeks

    def rolling_average(self, num_days: int) -> "StatsStore":
        """Compute a trailing rolling average over the entries.

        Each entry of the result averages the entry with the same key and the
        ``num_days - 1`` entries before it. The first entries average over
        however many entries are available. Missing days between entries
        aren't filled in, so a window covers entries rather than calendar
        days.

        Args:
            num_days: Number of entries in each window.

        Returns:
            StatsStore: A new store with the same keys.

        Raises:
            ValueError: If num_days is less than 1.
        """
        if num_days < 1:
            raise ValueError(f"num_days must be at least 1, got {num_days}")

        days = self.sorted_days()
        averages = StatsStore(self.max_delay)
        for i, day in enumerate(days):
            window = days[max(0, i - num_days + 1) : i + 1]
            avg = sum_stats((self._days[d] for d in window), self.max_delay)
            avg.scale(1 / len(window))
            averages._days[day] = avg
        logger.debug("Computed %d-day averages for %d day(s)", num_days, len(days))
        return averages
