# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Rendering of report tables with gnuplot."""

import logging
import os
import subprocess
import tempfile
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, NamedTuple

from jinja2 import Environment, PackageLoader, StrictUndefined

from ..config import StatsConfig
from ..exceptions import PlottingError
from ..reports import Reports, ReportTable
from ..resources.serializers import TableTSVSerializer

logger = logging.getLogger(__name__)


def gnuplot_quote(value: Any) -> str:
    """Quote a value as a single-quoted gnuplot string."""
    return "'" + str(value).replace("'", "''") + "'"


env = Environment(
    loader=PackageLoader("lab_stats_dashboard", "plotting/templates"),
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)
env.filters["gpquote"] = gnuplot_quote


class Plot(NamedTuple):
    """A chart produced from a single report table."""

    output: str
    template: str
    table: str
    variables: Mapping[str, Any] = MappingProxyType({})


PLOTS = (
    Plot("positives-age.png", "positives-age.gp", "positives-age"),
    Plot(
        "positives-age-capita.png", "positives-age-capita.gp", "positives-age-capita"
    ),
    Plot("reports-daily.png", "reports-daily.gp", "reports-daily"),
    Plot("positivity.png", "positivity.gp", "positivity"),
    Plot(
        "estimated-infections.png", "estimated-infections.gp", "estimated-infections"
    ),
    Plot("result-delays.png", "delays.gp", "result-delays", {"test_type": "total"}),
    Plot(
        "positive-result-delays.png",
        "delays.gp",
        "positive-result-delays",
        {"test_type": "positive"},
    ),
    Plot(
        "negative-result-delays.png",
        "delays.gp",
        "negative-result-delays",
        {"test_type": "negative"},
    ),
)


def render_template(name: str, context: dict[str, Any]) -> str:
    """Render a gnuplot script template.

    Raises:
        jinja2.UndefinedError: If the template uses a missing variable.
    """
    return env.get_template(name).render(**context)


def exec_template(name: str, context: dict[str, Any], command: str = "gnuplot") -> None:
    """Render a gnuplot script template and run gnuplot on it.

    Args:
        name: Template file name.
        context: Template variables.
        command: gnuplot executable.

    Raises:
        PlottingError: If gnuplot can't be run or exits unsuccessfully.
    """
    script = render_template(name, context)
    fd, script_path = tempfile.mkstemp(prefix="gnuplot.", suffix=".gp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(script)
        try:
            proc = subprocess.run(
                [command, script_path],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise PlottingError(f"Failed running {command}: {e}") from e
        if proc.returncode != 0:
            raise PlottingError(
                f"{command} exited with status {proc.returncode}: "
                f"{proc.stderr.strip()!r}"
            )
    finally:
        os.unlink(script_path)


def delay_columns(table: ReportTable) -> dict[str, Any]:
    """Get the 1-based data columns drawn by the delay template."""

    def col(name: str, default: int) -> int:
        return table.header.index(name) + 1 if name in table.header else default

    return {
        "median_column": col("50th", 2),
        "low_column": col("25th", 2),
        "high_column": col("75th", len(table.header)),
        "range_title": "1st-3rd Quartile",
    }


def plot_context(
    plot: Plot,
    reports: Reports,
    config: StatsConfig,
    data_path: str,
    output_path: str,
) -> dict[str, Any]:
    """Build the template variables for a plot."""
    context = {
        "data_path": data_path,
        "output_path": output_path,
        "plot_size": config.plot_size,
        "plot_font": config.plot_font,
        "footer": "Generated " + reports.now.format("YYYY-MM-DD HH:mm ZZZ"),
        "average_days": config.average_days,
        "max_delay": reports.max_delay,
        **plot.variables,
    }
    if plot.template == "delays.gp":
        context.update(delay_columns(reports[plot.table]))
    return context


def plot_reports(
    reports: Reports,
    out_dir: str,
    config: StatsConfig,
    data_dir: str | None = None,
) -> list[str]:
    """Write a PNG chart for each plot to out_dir.

    Args:
        reports: Tables to plot.
        out_dir: Directory for the PNG files.
        config: Run settings.
        data_dir: Directory to keep the TSV data files in. If None, they are
            written to a temporary directory and deleted afterwards.

    Returns:
        list[str]: Paths of the written charts.

    Raises:
        PlottingError: If gnuplot fails for any plot.
    """
    serializer = TableTSVSerializer()
    written = []
    with tempfile.TemporaryDirectory(prefix="lab-stats.") as tmp_dir:
        for plot in PLOTS:
            table = reports[plot.table]
            (data_path,) = serializer.write([table], data_dir or tmp_dir)
            output_path = os.path.join(out_dir, plot.output)
            context = plot_context(plot, reports, config, data_path, output_path)
            logger.info("Plotting %s to %s", table.name, output_path)
            exec_template(plot.template, context, config.gnuplot_command)
            written.append(output_path)
    return written
