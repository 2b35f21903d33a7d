# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Daily statistics and charts for individually reported lab test results."""

from .version import __version__

__all__ = ("__version__",)
