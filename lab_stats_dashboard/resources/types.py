# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Type definitions for serialized report data."""

from typing import Any, TypedDict


class DataPointDict(TypedDict):
    """Type definition for a data point dictionary."""

    value: list[str | int | float]  # [date, value]
    readableDate: str
    valueType: str


class DataSeriesDict(TypedDict):
    """Type definition for a data series dictionary."""

    id: str
    name: str
    data: list[DataPointDict]
    type: str
    valueType: str


class TableSeriesDict(TypedDict):
    """Type definition for a serialized report table.

    Time-series tables fill ``series``; other tables fill ``rows``.
    """

    series: list[DataSeriesDict]
    rows: list[dict[str, Any]]
