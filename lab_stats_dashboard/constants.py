# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Constants for lab-stats-dashboard."""

from enum import IntEnum, StrEnum


class Result(StrEnum):
    """Disposition of an individual test."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    OTHER = "other"


class TestType(StrEnum):
    """Technology used for a test.

    Only molecular tests feed the result counters and delay histograms. Other
    types are tracked as coarse totals.
    """

    __test__ = False  # not a pytest test class

    MOLECULAR = "molecular"
    SEROLOGICAL = "serological"
    ANTIGEN = "antigen"

    @property
    def is_primary(self) -> bool:
        """Whether results of this type are fully aggregated."""
        return self is TestType.MOLECULAR


class AgeRange(IntEnum):
    """Decade-wide age range of a tested patient.

    Values are ordered and contiguous. ``UNKNOWN`` is used when the record
    doesn't include an age.
    """

    UNKNOWN = 0
    AGE_0_9 = 1
    AGE_10_19 = 2
    AGE_20_29 = 3
    AGE_30_39 = 4
    AGE_40_49 = 5
    AGE_50_59 = 6
    AGE_60_69 = 7
    AGE_70_79 = 8
    AGE_80_89 = 9
    AGE_90_99 = 10
    AGE_100_109 = 11
    AGE_110_119 = 12
    AGE_120_129 = 13
    AGE_130_139 = 14
    AGE_140_149 = 15

    @property
    def min_age(self) -> int:
        """Youngest age in the range, or -1 for ``UNKNOWN``."""
        if self is AgeRange.UNKNOWN:
            return -1
        return (self.value - 1) * 10

    @property
    def max_age(self) -> int:
        """Oldest age in the range, or -1 for ``UNKNOWN``."""
        if self is AgeRange.UNKNOWN:
            return -1
        return self.min_age + 9

    @property
    def label(self) -> str:
        """Human-readable label, e.g. "20-29"."""
        if self is AgeRange.UNKNOWN:
            return "N/A"
        return f"{self.min_age}-{self.max_age}"

    @classmethod
    def known(cls) -> list["AgeRange"]:
        """All ranges except ``UNKNOWN``, youngest first."""
        return [a for a in cls if a is not cls.UNKNOWN]

    @classmethod
    def reportable(cls) -> list["AgeRange"]:
        """Ranges shown in age charts.

        Ranges above 109 are essentially data-entry errors.
        """
        return [a for a in cls.known() if a <= cls.AGE_100_109]
