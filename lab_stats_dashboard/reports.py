# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Tabular reports built from aggregated test statistics.

Every report iterates over its store in ascending date order, so output is
deterministic for a given input.
"""

import datetime
import logging
from collections.abc import Callable, Mapping

import arrow

from .aggregations import DayStats, StatsStore
from .config import StatsConfig
from .constants import AgeRange
from .utils import round_half_away_tenths

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
WEEK_LABEL_FORMAT = "%m/%d"

DELAY_ACCESSORS: dict[str, Callable[[DayStats, float], int]] = {
    "total": DayStats.delay_percentile,
    "positive": DayStats.pos_delay_percentile,
    "negative": DayStats.neg_delay_percentile,
}


class ReportTable:
    """Named table of rows ready to be serialized or plotted."""

    def __init__(
        self,
        name: str,
        header: list[str],
        rows: list[list] | None = None,
        date_column: int | None = 0,
    ):
        """Initialize the table.

        Args:
            name: Short name used for file names, e.g. "reports-daily".
            header: Column names.
            rows: Table rows, each with one value per column.
            date_column: Index of the column holding YYYY-MM-DD dates, or
                None if the table isn't a simple time series.
        """
        self.name = name
        self.header = header
        self.rows: list[list] = rows if rows is not None else []
        self.date_column = date_column

    def __len__(self) -> int:
        """Return the number of rows."""
        return len(self.rows)

    def __repr__(self) -> str:
        """Return a debugging representation."""
        return f"ReportTable({self.name!r}, rows={len(self.rows)})"

    def column(self, name: str) -> list:
        """Get all values in the named column."""
        index = self.header.index(name)
        return [row[index] for row in self.rows]


def ordinal(n: int) -> str:
    """Format a number as an English ordinal, e.g. "1st" or "25th"."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def format_day(day: datetime.date) -> str:
    """Format a day as YYYY-MM-DD."""
    return day.strftime(DATE_FORMAT)


def positives_by_age(weekly: StatsStore) -> ReportTable:
    """Count weekly positive results by age range.

    There is one row per week and reportable age range. The X column numbers
    the weeks so the data can be drawn as a heat map.
    """
    table = ReportTable(
        "positives-age", ["X", "Date", "Age", "Positive Tests"], date_column=None
    )
    for i, (week, stats) in enumerate(weekly.items()):
        for age_range in AgeRange.reportable():
            table.rows.append(
                [
                    i,
                    week.strftime(WEEK_LABEL_FORMAT),
                    age_range.min_age,
                    stats.age_pos[age_range],
                ]
            )
    return table


def positives_per_capita(
    weekly: StatsStore, population: Mapping[AgeRange, int]
) -> ReportTable:
    """Compute weekly positive results per 100,000 residents by age range.

    Only age ranges with a known population are included.
    """
    table = ReportTable(
        "positives-age-capita",
        ["X", "Date", "Age", "Positives per 100k"],
        date_column=None,
    )
    age_ranges = [a for a in AgeRange.reportable() if population.get(a)]
    for i, (week, stats) in enumerate(weekly.items()):
        for age_range in age_ranges:
            rate = 100_000 * stats.age_pos[age_range] / population[age_range]
            table.rows.append(
                [
                    i,
                    week.strftime(WEEK_LABEL_FORMAT),
                    age_range.min_age,
                    round_half_away_tenths(rate),
                ]
            )
    return table


def daily_results(averages: StatsStore) -> ReportTable:
    """List the (averaged) number of molecular results for each day."""
    return ReportTable(
        "reports-daily",
        ["Date", "Results"],
        [[format_day(day), stats.total()] for day, stats in averages.items()],
    )


def positivity(
    averages: StatsStore, now: arrow.Arrow, delay_days: int
) -> ReportTable:
    """List the (averaged) positivity rate for each day.

    Days less than delay_days before now are omitted since their negative
    results are likely still being reported.
    """
    cutoff = now.shift(days=-delay_days).date()
    table = ReportTable("positivity", ["Date", "Positivity"])
    for day, stats in averages.items():
        if day > cutoff:
            break
        table.rows.append(
            [format_day(day), round_half_away_tenths(stats.positivity())]
        )
    return table


def estimated_infections(averages: StatsStore) -> ReportTable:
    """List the (averaged) positive results and estimated new infections."""
    return ReportTable(
        "estimated-infections",
        ["Date", "Positive", "Estimated"],
        [
            [format_day(day), stats.pos, stats.estimated_infections()]
            for day, stats in averages.items()
        ],
    )


def delay_percentiles(
    weekly: StatsStore, which: str, percentiles: tuple[int, ...]
) -> ReportTable:
    """List weekly result delay percentiles.

    Args:
        weekly: Weekly statistics.
        which: "total", "positive" or "negative".
        percentiles: Percentiles to include, one column each.

    Raises:
        ValueError: If which isn't a known delay type.
    """
    try:
        accessor = DELAY_ACCESSORS[which]
    except KeyError:
        raise ValueError(f"Unknown delay type {which!r}") from None

    name = "result-delays" if which == "total" else f"{which}-result-delays"
    table = ReportTable(name, ["Date"] + [ordinal(p) for p in percentiles])
    for week, stats in weekly.items():
        table.rows.append([format_day(week)] + [accessor(stats, p) for p in percentiles])
    return table


def max_delay(weekly: StatsStore, pct: float = 90) -> int:
    """Get the largest delay percentile across all weeks and result types.

    Delay plots use this as a shared y-axis limit.
    """
    result = 0
    for _, stats in weekly.items():
        for accessor in DELAY_ACCESSORS.values():
            result = max(result, accessor(stats, pct))
    return result


def daily_summary(
    store: StatsStore, percentiles: tuple[int, ...] = (0, 25, 50, 75, 100)
) -> list[str]:
    """Summarize each day on its own line."""
    return [
        f"{format_day(day)}: {stats.summary(percentiles)}"
        for day, stats in store.items()
    ]


class Reports:
    """All report tables for a run, plus values shared between plots."""

    def __init__(
        self,
        config: StatsConfig,
        collected: StatsStore,
        reported: StatsStore,
        now: arrow.Arrow | None = None,
    ):
        """Compute the roll-ups and build every table.

        Args:
            config: Run settings.
            collected: Daily statistics keyed by collection day.
            reported: Daily statistics keyed by reporting day.
            now: Time used to hide incomplete recent days. Defaults to the
                current time.
        """
        self.config = config
        self.now = now if now is not None else arrow.now(config.timezone)

        avg_collected = collected.rolling_average(config.average_days)
        avg_reported = reported.rolling_average(config.average_days)
        weekly_reported = reported.weekly()

        self.max_delay = max_delay(weekly_reported)
        self.tables: dict[str, ReportTable] = {}
        for table in (
            positives_by_age(weekly_reported),
            positives_per_capita(weekly_reported, config.age_population),
            daily_results(avg_reported),
            positivity(avg_collected, self.now, config.positivity_delay_days),
            estimated_infections(avg_collected),
            *(
                delay_percentiles(weekly_reported, which, config.delay_percentiles)
                for which in DELAY_ACCESSORS
            ),
        ):
            self.tables[table.name] = table
        logger.info(
            "Built %d report(s) over %d week(s)", len(self.tables), len(weekly_reported)
        )

    def __getitem__(self, name: str) -> ReportTable:
        """Get a table by name."""
        return self.tables[name]

    def __iter__(self):
        """Iterate over the tables."""
        return iter(self.tables.values())
