# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Output formats for report tables."""

from .serializers import (
    SERIALIZERS,
    TableCSVSerializer,
    TableExcelSerializer,
    TableJSONSerializer,
    TableTSVSerializer,
)

__all__ = (
    "SERIALIZERS",
    "TableCSVSerializer",
    "TableExcelSerializer",
    "TableJSONSerializer",
    "TableTSVSerializer",
)
