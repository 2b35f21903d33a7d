# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Utility functions for the stats dashboard."""

import datetime
import math


def round_half_away(value: float) -> int:
    """Round to the nearest integer, with halves rounded away from zero.

    The builtin ``round`` rounds halves to even, which would make rank and
    rescaling calculations depend on the parity of intermediate values.

    Args:
        value: Number to round

    Returns:
        Nearest integer, e.g. 2 for 1.5 and -2 for -1.5
    """
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def sunday_on_or_before(day: datetime.date) -> datetime.date:
    """Get the start of the Sunday-aligned week containing a day.

    Args:
        day: Any date

    Returns:
        The same date if it is a Sunday, otherwise the preceding Sunday
    """
    return day - datetime.timedelta(days=day.isoweekday() % 7)


def round_half_away_tenths(value: float) -> float:
    """Round to one decimal place, with halves rounded away from zero.

    Args:
        value: Number to round

    Returns:
        Rounded value, e.g. 12.3 for 12.25
    """
    return round_half_away(value * 10) / 10
