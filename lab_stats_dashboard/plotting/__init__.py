# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Chart generation with gnuplot."""

from .gnuplot import PLOTS, exec_template, plot_reports, render_template

__all__ = (
    "PLOTS",
    "exec_template",
    "plot_reports",
    "render_template",
)
