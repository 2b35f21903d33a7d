# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Tests for gnuplot script rendering and execution."""

import os
import subprocess
from unittest.mock import patch

import pytest
from jinja2 import UndefinedError

from lab_stats_dashboard.constants import Result
from lab_stats_dashboard.exceptions import PlottingError
from lab_stats_dashboard.plotting import PLOTS, exec_template, plot_reports, render_template
from lab_stats_dashboard.plotting.gnuplot import delay_columns, gnuplot_quote
from lab_stats_dashboard.records import ingest
from lab_stats_dashboard.reports import Reports, ReportTable


@pytest.fixture
def context() -> dict:
    """Template variables shared by all plots.

    Returns:
        dict: template context.
    """
    return {
        "data_path": "/tmp/data/positivity.tsv",
        "output_path": "/tmp/out/positivity.png",
        "plot_size": "800,600",
        "plot_font": "Arial,12",
        "footer": "Generated 2020-07-01 12:00 AST",
        "average_days": 7,
        "max_delay": 9,
    }


@pytest.fixture
def reports(stats_config, now, make_record) -> Reports:
    """Reports built from a handful of tests.

    Returns:
        Reports: report tables.
    """
    collected, reported = ingest(
        [
            make_record("2020-06-01", "2020-06-03", Result.POSITIVE),
            make_record("2020-06-02", "2020-06-04"),
            make_record("2020-06-09", "2020-06-10"),
        ],
        stats_config,
        now,
    )
    return Reports(stats_config, collected, reported, now)


@pytest.mark.parametrize(
    "value,expected",
    [("plain", "'plain'"), ("it's", "'it''s'"), (12, "'12'")],
)
def test_gnuplot_quote(value, expected):
    """Single quotes are doubled inside gnuplot strings."""
    assert gnuplot_quote(value) == expected


def test_render_template(context):
    """Scripts include the shared header and quoted paths."""
    script = render_template("positivity.gp", context)
    assert "(7-day average)" in script
    assert "set term pngcairo size 800,600 font 'Arial,12'" in script
    assert "set output '/tmp/out/positivity.png'" in script
    assert "'/tmp/data/positivity.tsv' every ::1 using 1:2" in script


def test_render_delays(context):
    """The delay template draws the configured columns."""
    table = ReportTable(
        "result-delays", ["Date", "10th", "25th", "50th", "75th", "90th"]
    )
    context.update(delay_columns(table), test_type="positive")
    script = render_template("delays.gp", context)
    assert "(positive results)" in script
    assert "set yrange [0:9]" in script
    assert "using 1:4 with lines" in script
    assert "using 1:3:5 with filledcurves" in script


def test_render_missing_variable(context):
    """Missing variables are errors rather than empty strings."""
    with pytest.raises(UndefinedError):
        render_template("delays.gp", context)


def test_plot_variables_are_read_only():
    """Plots without variables don't share a mutable dict."""
    plain = [p for p in PLOTS if not p.variables]
    assert plain
    with pytest.raises(TypeError):
        plain[0].variables["test_type"] = "total"
    assert all(not p.variables for p in plain)


def test_delay_columns_fallback():
    """Tables without quartiles fall back to the first and last columns."""
    columns = delay_columns(ReportTable("result-delays", ["Date", "10th", "90th"]))
    assert columns["median_column"] == 2
    assert columns["low_column"] == 2
    assert columns["high_column"] == 3


class TestExecTemplate:
    """Tests for running gnuplot."""

    def test_success(self, context):
        """The rendered script is passed to gnuplot and removed afterwards."""
        scripts = []

        def fake_run(args, **kwargs):
            with open(args[1], encoding="utf-8") as f:
                scripts.append((args[1], f.read()))
            return subprocess.CompletedProcess(args, 0, "", "")

        with patch("subprocess.run", side_effect=fake_run) as run:
            exec_template("positivity.gp", context, "my-gnuplot")

        assert run.call_args.args[0][0] == "my-gnuplot"
        path, script = scripts[0]
        assert "set output '/tmp/out/positivity.png'" in script
        assert not os.path.exists(path)

    def test_failure(self, context):
        """A non-zero exit status is reported with gnuplot's output."""
        result = subprocess.CompletedProcess([], 1, "", "line 3: undefined variable\n")
        with patch("subprocess.run", return_value=result):
            with pytest.raises(PlottingError, match="undefined variable"):
                exec_template("positivity.gp", context)

    def test_missing_command(self, context):
        """A missing gnuplot executable is a plotting error."""
        with patch("subprocess.run", side_effect=FileNotFoundError("gnuplot")):
            with pytest.raises(PlottingError, match="Failed running gnuplot"):
                exec_template("positivity.gp", context)


class TestPlotReports:
    """Tests for plotting every report."""

    def test_plot_reports(self, reports, stats_config, tmp_path):
        """Every plot is rendered from its table's data file."""
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        data_dir = tmp_path / "data"
        data_dir.mkdir()

        with patch("lab_stats_dashboard.plotting.gnuplot.exec_template") as exec_:
            written = plot_reports(reports, str(out_dir), stats_config, str(data_dir))

        assert exec_.call_count == len(PLOTS)
        assert written == [str(out_dir / p.output) for p in PLOTS]
        assert sorted(os.listdir(data_dir)) == sorted(
            f"{p.table}.tsv" for p in PLOTS
        )

        template, context, command = exec_.call_args_list[0].args
        assert template == "positives-age.gp"
        assert context["data_path"] == str(data_dir / "positives-age.tsv")
        assert context["footer"] == "Generated 2020-07-01 12:00 AST"
        assert command == "gnuplot"

        _, context, _ = exec_.call_args_list[-1].args
        assert context["test_type"] == "negative"
        assert context["median_column"] == 4
        assert context["max_delay"] == reports.max_delay

    def test_temporary_data(self, reports, stats_config, tmp_path):
        """Without a data directory, data files aren't kept."""
        paths = []

        def record(template, context, command):
            assert os.path.exists(context["data_path"])
            paths.append(context["data_path"])

        with patch(
            "lab_stats_dashboard.plotting.gnuplot.exec_template", side_effect=record
        ):
            plot_reports(reports, str(tmp_path), stats_config)

        assert len(paths) == len(PLOTS)
        assert not any(os.path.exists(p) for p in paths)
        assert sorted(os.listdir(tmp_path)) == []

    def test_gnuplot_failure(self, reports, stats_config, tmp_path):
        """Plotting stops at the first failure."""
        with patch(
            "lab_stats_dashboard.plotting.gnuplot.exec_template",
            side_effect=PlottingError("boom"),
        ) as exec_:
            with pytest.raises(PlottingError):
                plot_reports(reports, str(tmp_path), stats_config)
        assert exec_.call_count == 1
