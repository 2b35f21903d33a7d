# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Custom exceptions for Lab Stats Dashboard."""


class ClassificationError(ValueError):
    """Exception raised when a raw record value has no known classification."""

    pass


class InputFormatError(ValueError):
    """Exception raised when the input data is not a JSON array of tests."""

    pass


class HistogramMismatchError(ValueError):
    """Exception raised when merging histograms with different bucket counts.

    This indicates a programming or configuration error: every histogram in a
    run is expected to be built with the same maximum value.
    """

    pass


class PlottingError(RuntimeError):
    """Exception raised when gnuplot is unavailable or fails to render a plot."""

    pass
