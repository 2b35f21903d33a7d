# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Utility helpers for the stats dashboard."""

from .filewriter import AtomicFileWriter
from .utils import round_half_away, round_half_away_tenths, sunday_on_or_before

__all__ = (
    "AtomicFileWriter",
    "round_half_away",
    "round_half_away_tenths",
    "sunday_on_or_before",
)
