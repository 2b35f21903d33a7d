# Part of Lab-Stats-Dashboard
#
# Copyright (C) 2025 Mesh Research
#
# lab-stats-dashboard is free software; you can redistribute it
# and/or modify it under the terms of the MIT License; see LICENSE file for
# more details.

"""CLI commands for the lab stats dashboard."""

import click

from .core_cli import export_command, plot_command, summarize_command


@click.group()
def cli():
    """Lab test statistics CLI."""
    pass


cli.add_command(summarize_command)
cli.add_command(export_command)
cli.add_command(plot_command)
