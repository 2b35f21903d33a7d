# Part of Lab-Stats-Dashboard
#
# Copyright (C) 2025 Mesh Research
#
# lab-stats-dashboard is free software; you can redistribute it
# and/or modify it under the terms of the MIT License; see LICENSE file for
# more details.

"""Tests for the lab-stats CLI commands."""

import os
import sys
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from openpyxl import load_workbook

from lab_stats_dashboard.cli import cli
from lab_stats_dashboard.exceptions import PlottingError


@pytest.fixture
def runner():
    """Click test runner.

    Returns:
        CliRunner: runner for invoking commands.
    """
    return CliRunner()


@pytest.fixture
def settings_file(tmp_path):
    """Factory writing a Python settings file.

    Returns:
        Callable: function taking the file contents and returning its path.
    """

    def _settings_file(content: str) -> str:
        path = tmp_path / "settings.py"
        path.write_text(content)
        return str(path)

    return _settings_file


class TestSummarize:
    """Tests for the summarize command."""

    def test_by_reported(self, runner, tests_file):
        """Days are grouped by report date by default."""
        result = runner.invoke(cli, ["summarize", tests_file(compress=True)])
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [
            "2020-06-03:    1p    1n  0o (50.0%) [1 1 2 2 2]",
            "2020-06-09:    0p    0n  1o (0.0%) [4 4 4 4 4]",
            "2020-06-10:    0p    1n  0o (0.0%)",
        ]

    def test_redirected_output(self, runner, tests_file):
        """Output that isn't a terminal holds only the summary lines."""
        result = runner.invoke(cli, ["summarize", tests_file()])
        assert result.exit_code == 0, result.output
        assert "\r" not in result.output
        assert result.stdout.splitlines()[0].startswith("2020-06-03:")

    def test_spinner_on_stderr(self, runner, tests_file):
        """The progress spinner writes to stderr and only on a terminal."""
        spinners = []

        def fake_halo(**kwargs):
            spinners.append((kwargs["stream"] is sys.stderr, kwargs["enabled"]))
            halo = MagicMock()
            halo.__exit__.return_value = False
            return halo

        with patch("lab_stats_dashboard.cli.core_cli.Halo", side_effect=fake_halo):
            result = runner.invoke(cli, ["summarize", tests_file()])

        assert result.exit_code == 0, result.output
        assert spinners == [(True, False)]

    def test_by_collected(self, runner, tests_file):
        """Tests collected before the start date are left out."""
        result = runner.invoke(cli, ["summarize", "--by", "collected", tests_file()])
        assert result.exit_code == 0, result.output
        assert [line[:10] for line in result.output.splitlines()] == [
            "2020-06-01",
            "2020-06-02",
            "2020-06-05",
            "2020-06-08",
        ]

    def test_config_file(self, runner, tests_file, settings_file):
        """Settings files override the defaults."""
        config = settings_file(
            'LAB_STATS_START_DATE = "2020-06-02"\n'
            "LAB_STATS_SUMMARY_PERCENTILES = [50]\n"
        )
        result = runner.invoke(
            cli, ["summarize", "--by", "collected", "--config", config, tests_file()]
        )
        assert result.exit_code == 0, result.output
        assert result.output.splitlines()[0] == (
            "2020-06-02:    0p    1n  0o (0.0%) [1]"
        )

    def test_invalid_config(self, runner, tests_file, settings_file):
        """Out of range settings are reported without a traceback."""
        config = settings_file("LAB_STATS_AVERAGE_DAYS = 0\n")
        result = runner.invoke(cli, ["summarize", "--config", config, tests_file()])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_unknown_result(self, runner, tests_file, raw_tests):
        """Unclassifiable tests abort the run."""
        raw_tests[1]["result"] = "Maybe"
        result = runner.invoke(cli, ["summarize", tests_file()])
        assert result.exit_code == 1
        assert "Test 1" in result.output
        assert "Maybe" in result.output

    def test_not_json(self, runner, tmp_path):
        """Malformed input files are reported."""
        path = tmp_path / "tests.json"
        path.write_text("not json")
        result = runner.invoke(cli, ["summarize", str(path)])
        assert result.exit_code == 1
        assert "Failed reading tests" in result.output


class TestExport:
    """Tests for the export command."""

    def test_tsv(self, runner, tests_file, tmp_path):
        """TSV exports write one file per table."""
        out_dir = tmp_path / "out"
        result = runner.invoke(cli, ["export", tests_file(), str(out_dir)])
        assert result.exit_code == 0, result.output
        assert len(result.output.splitlines()) == 8
        assert sorted(os.listdir(out_dir)) == [
            "estimated-infections.tsv",
            "negative-result-delays.tsv",
            "positive-result-delays.tsv",
            "positives-age-capita.tsv",
            "positives-age.tsv",
            "positivity.tsv",
            "reports-daily.tsv",
            "result-delays.tsv",
        ]
        lines = (out_dir / "reports-daily.tsv").read_text().splitlines()
        assert lines[0] == "Date\tResults"
        assert lines[1] == "2020-06-03\t2"

    def test_xlsx(self, runner, tests_file, tmp_path):
        """Excel exports write a single workbook."""
        result = runner.invoke(
            cli, ["export", "--format", "xlsx", tests_file(), str(tmp_path)]
        )
        assert result.exit_code == 0, result.output
        path = tmp_path / "lab-stats.xlsx"
        assert result.output.strip() == f"Wrote {path}"
        wb = load_workbook(path)
        assert len(wb.sheetnames) == 8
        assert "result-delays" in wb.sheetnames

    def test_json(self, runner, tests_file, tmp_path):
        """JSON exports write a single file."""
        result = runner.invoke(
            cli, ["export", "--format", "json", tests_file(), str(tmp_path)]
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / "lab-stats.json").exists()


class TestPlot:
    """Tests for the plot command."""

    def test_plot(self, runner, tests_file, tmp_path):
        """Charts are written to the output directory."""
        out_dir = tmp_path / "charts"
        with patch(
            "lab_stats_dashboard.cli.core_cli.plot_reports",
            return_value=["a.png", "b.png"],
        ) as plot_reports:
            result = runner.invoke(cli, ["plot", tests_file(), str(out_dir)])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == f"Wrote 2 chart(s) to {out_dir}"
        assert out_dir.is_dir()
        assert plot_reports.call_args.kwargs["data_dir"] is None

    def test_keep_data(self, runner, tests_file, tmp_path):
        """--keep-data writes the data files next to the charts."""
        with patch(
            "lab_stats_dashboard.cli.core_cli.plot_reports", return_value=[]
        ) as plot_reports:
            result = runner.invoke(
                cli, ["plot", "--keep-data", tests_file(), str(tmp_path)]
            )
        assert result.exit_code == 0, result.output
        assert plot_reports.call_args.kwargs["data_dir"] == str(tmp_path)

    def test_gnuplot_failure(self, runner, tests_file, tmp_path):
        """Plotting errors are reported without a traceback."""
        with patch(
            "lab_stats_dashboard.cli.core_cli.plot_reports",
            side_effect=PlottingError("gnuplot exited with status 1"),
        ):
            result = runner.invoke(cli, ["plot", tests_file(), str(tmp_path)])
        assert result.exit_code == 1
        assert "Failed plotting: gnuplot exited with status 1" in result.output
