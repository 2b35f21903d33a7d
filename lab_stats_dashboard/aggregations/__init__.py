# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Aggregation of test results into daily, weekly and averaged statistics."""

from .histogram import Histogram
from .stats import DayStats, sum_stats
from .store import StatsStore

__all__ = (
    "DayStats",
    "Histogram",
    "StatsStore",
    "sum_stats",
)
