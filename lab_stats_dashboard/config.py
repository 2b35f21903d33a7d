# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Configuration for Lab Stats Dashboard.

The upper-case names in this module are the default settings. They can be
overridden by a Python settings file passed with ``--config`` or named by the
``LAB_STATS_SETTINGS`` environment variable.
"""

import os
from collections.abc import Mapping
from typing import Any, NamedTuple

import arrow
from flask import Config

from .constants import AgeRange

LAB_STATS_TIMEZONE = "America/Puerto_Rico"
"""Time zone used to turn test timestamps into calendar days."""

LAB_STATS_START_DATE = "2020-03-12"
"""Earliest date (YYYY-MM-DD, in LAB_STATS_TIMEZONE) accepted for a test.

Earlier timestamps are treated as missing for the axis they belong to.
"""

LAB_STATS_MAX_DELAY = 90
"""Largest result delay in days tracked individually by the delay histograms.

Longer delays are counted in a shared overflow bucket, so percentiles above
this value are reported as LAB_STATS_MAX_DELAY + 1.
"""

LAB_STATS_AVERAGE_DAYS = 7
"""Number of days with data in the trailing rolling average for daily charts."""

LAB_STATS_POSITIVITY_DELAY_DAYS = 14
"""Number of most recent days omitted from the positivity chart.

Positive results are reported more quickly than negative results, so the
positivity rate for recent collection dates is inflated until the negatives
arrive.
"""

LAB_STATS_DELAY_PERCENTILES = [10, 25, 50, 75, 90]
"""Percentiles written to the delay data files."""

LAB_STATS_SUMMARY_PERCENTILES = [0, 25, 50, 75, 100]
"""Percentiles shown in the daily text summary."""

LAB_STATS_GNUPLOT_COMMAND = "gnuplot"
"""Executable used to render plots."""

LAB_STATS_PLOT_SIZE = "800,600"
"""Size in pixels of rendered PNG plots."""

LAB_STATS_PLOT_FONT = "Arial,12"
"""Font passed to gnuplot's pngcairo terminal."""

LAB_STATS_LOCALE = "en"
"""Locale used for human-readable dates in JSON exports."""

LAB_STATS_AGE_POPULATION: dict[AgeRange, int] = {
    AgeRange.AGE_0_9: 147970 + 177739,
    AgeRange.AGE_10_19: 198257 + 222678,
    AgeRange.AGE_20_29: 232150 + 223828,
    AgeRange.AGE_30_39: 190755 + 207678,
    AgeRange.AGE_40_49: 208209 + 214945,
    AgeRange.AGE_50_59: 224402 + 219484,
    AgeRange.AGE_60_69: 210332 + 195563,
    AgeRange.AGE_70_79: 171623 + 123063,
    AgeRange.AGE_80_89: 84508 + 83993,
}
"""Resident population per age range, used for per-capita positive rates.

From UNdata (Puerto Rico, 2017), summing the five-year ranges. The 80-89 row
includes everyone aged 85 and over.
"""


class StatsConfig(NamedTuple):
    """Settings for a single run, fixed once loaded."""

    timezone: str
    start_date: arrow.Arrow
    max_delay: int
    average_days: int
    positivity_delay_days: int
    delay_percentiles: tuple[int, ...]
    summary_percentiles: tuple[int, ...]
    gnuplot_command: str
    plot_size: str
    plot_font: str
    locale: str
    age_population: Mapping[AgeRange, int]

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "StatsConfig":
        """Build the run settings from a mapping of LAB_STATS_* keys.

        Missing keys fall back to the defaults in this module.

        Args:
            config: Mapping such as a ``flask.Config``

        Returns:
            StatsConfig: The parsed settings.

        Raises:
            ValueError: If the start date can't be parsed or a numeric
                setting is out of range.
        """

        def get(key: str) -> Any:
            return config.get(key, globals()[key])

        timezone = get("LAB_STATS_TIMEZONE")
        start_date = arrow.get(
            get("LAB_STATS_START_DATE"), "YYYY-MM-DD", tzinfo=timezone
        )
        max_delay = int(get("LAB_STATS_MAX_DELAY"))
        if max_delay < 0:
            raise ValueError(f"LAB_STATS_MAX_DELAY must be >= 0, got {max_delay}")
        average_days = int(get("LAB_STATS_AVERAGE_DAYS"))
        if average_days < 1:
            raise ValueError(
                f"LAB_STATS_AVERAGE_DAYS must be >= 1, got {average_days}"
            )

        return cls(
            timezone=timezone,
            start_date=start_date,
            max_delay=max_delay,
            average_days=average_days,
            positivity_delay_days=int(get("LAB_STATS_POSITIVITY_DELAY_DAYS")),
            delay_percentiles=tuple(get("LAB_STATS_DELAY_PERCENTILES")),
            summary_percentiles=tuple(get("LAB_STATS_SUMMARY_PERCENTILES")),
            gnuplot_command=get("LAB_STATS_GNUPLOT_COMMAND"),
            plot_size=get("LAB_STATS_PLOT_SIZE"),
            plot_font=get("LAB_STATS_PLOT_FONT"),
            locale=get("LAB_STATS_LOCALE"),
            age_population=dict(get("LAB_STATS_AGE_POPULATION")),
        )


def load_config(config_file: str | None = None) -> Config:
    """Load settings from the defaults, a settings file and the environment.

    Args:
        config_file: Optional path to a Python settings file. When omitted,
            the file named by the ``LAB_STATS_SETTINGS`` environment variable
            is used if it is set.

    Returns:
        Config: The merged settings.
    """
    config = Config(os.getcwd())
    config.from_object(__name__)
    if config_file:
        config.from_pyfile(os.path.abspath(config_file))
    else:
        config.from_envvar("LAB_STATS_SETTINGS", silent=True)
    return config


def get_stats_config(config_file: str | None = None) -> StatsConfig:
    """Load and parse the settings for a run.

    Returns:
        StatsConfig: The parsed settings.
    """
    return StatsConfig.from_mapping(load_config(config_file))
