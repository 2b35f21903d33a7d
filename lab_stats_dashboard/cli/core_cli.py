# Part of Lab-Stats-Dashboard
#
# Copyright (C) 2025 Mesh Research
#
# lab-stats-dashboard is free software; you can redistribute it
# and/or modify it under the terms of the MIT License; see LICENSE file for
# more details.

"""Core CLI commands for test statistics summaries, exports and plots."""

import functools
import logging
import os
import sys

import arrow
import click
from halo import Halo

from ..aggregations import StatsStore
from ..config import StatsConfig, get_stats_config
from ..exceptions import (
    ClassificationError,
    HistogramMismatchError,
    InputFormatError,
    PlottingError,
)
from ..plotting import plot_reports
from ..records import ingest, read_tests
from ..reports import Reports, daily_summary
from ..resources import SERIALIZERS, TableJSONSerializer


def common_options(func):
    """Add the --config and --verbose options and set up logging."""

    @click.option(
        "--config",
        "config_file",
        type=click.Path(exists=True, dir_okay=False),
        help="Python settings file overriding the LAB_STATS_* defaults",
    )
    @click.option(
        "--verbose",
        is_flag=True,
        help="Log progress and debugging details to stderr",
    )
    @functools.wraps(func)
    def wrapper(*args, config_file=None, verbose=False, **kwargs):
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        try:
            config = get_stats_config(config_file)
        except (OSError, ValueError) as e:
            raise click.ClickException(f"Invalid configuration: {e}") from e
        return func(*args, config=config, **kwargs)

    return wrapper


def spinner(text: str) -> Halo:
    """Create a progress spinner on stderr, disabled unless it is a terminal."""
    return Halo(
        text=text, spinner="dots", stream=sys.stderr, enabled=sys.stderr.isatty()
    )


def load_stores(input_path: str, config: StatsConfig) -> tuple[StatsStore, StatsStore]:
    """Read and aggregate the input file.

    Raises:
        click.ClickException: If the input can't be read or classified.
    """
    try:
        with spinner("Reading tests..."):
            return ingest(read_tests(input_path, config.timezone), config)
    except (InputFormatError, ClassificationError, OSError) as e:
        raise click.ClickException(f"Failed reading tests: {e}") from e


def build_reports(
    config: StatsConfig, collected: StatsStore, reported: StatsStore
) -> Reports:
    """Build the report tables.

    Raises:
        click.ClickException: If the statistics can't be combined.
    """
    try:
        return Reports(config, collected, reported, arrow.now(config.timezone))
    except HistogramMismatchError as e:
        raise click.ClickException(f"Failed aggregating statistics: {e}") from e


@click.command(name="summarize")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--by",
    type=click.Choice(["reported", "collected"]),
    default="reported",
    show_default=True,
    help="Which date to group tests by",
)
@common_options
def summarize_command(input_path, by, config):
    r"""Print a one-line summary of each day's tests.

    Each line shows the positive, negative and other molecular results, the
    percentage of positive results and, when available, result delay
    percentiles in days.

    Examples:  #

    - lab-stats summarize tests.json.gz
    - lab-stats summarize --by collected tests.json
    """
    collected, reported = load_stores(input_path, config)
    store = reported if by == "reported" else collected
    for line in daily_summary(store, config.summary_percentiles):
        click.echo(line)


@click.command(name="export")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("out_dir", type=click.Path(file_okay=False))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(sorted(SERIALIZERS)),
    default="tsv",
    show_default=True,
    help="Output format for the report tables",
)
@common_options
def export_command(input_path, out_dir, output_format, config):
    r"""Write report tables to OUT_DIR without plotting them.

    TSV and CSV output writes one file per table. XLSX writes a workbook with
    one sheet per table, and JSON writes chart-ready data series.

    Examples:  #

    - lab-stats export tests.json.gz out/
    - lab-stats export --format xlsx tests.json.gz out/
    """
    collected, reported = load_stores(input_path, config)
    reports = build_reports(config, collected, reported)

    serializer_class = SERIALIZERS[output_format]
    if serializer_class is TableJSONSerializer:
        serializer = serializer_class(locale=config.locale)
    else:
        serializer = serializer_class()

    try:
        os.makedirs(out_dir, exist_ok=True)
        paths = serializer.write(reports, out_dir)
    except OSError as e:
        raise click.ClickException(f"Failed writing reports: {e}") from e

    for path in paths:
        click.echo(f"Wrote {path}")


@click.command(name="plot")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("out_dir", type=click.Path(file_okay=False))
@click.option(
    "--keep-data",
    is_flag=True,
    help="Keep the TSV data files next to the charts",
)
@common_options
def plot_command(input_path, out_dir, keep_data, config):
    r"""Write PNG charts of the test statistics to OUT_DIR.

    Requires gnuplot with the pngcairo terminal.

    Examples:  #

    - lab-stats plot tests.json.gz charts/
    - lab-stats plot --keep-data tests.json.gz charts/
    """
    collected, reported = load_stores(input_path, config)
    reports = build_reports(config, collected, reported)

    try:
        os.makedirs(out_dir, exist_ok=True)
        with spinner("Plotting..."):
            paths = plot_reports(
                reports, out_dir, config, data_dir=out_dir if keep_data else None
            )
    except (PlottingError, OSError) as e:
        raise click.ClickException(f"Failed plotting: {e}") from e

    click.echo(f"Wrote {len(paths)} chart(s) to {out_dir}")
