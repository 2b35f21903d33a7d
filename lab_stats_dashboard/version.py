# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Version information for Lab-Stats-Dashboard.

This file is imported by ``lab_stats_dashboard.__init__``,
and parsed by ``setup.py``.
"""

__version__ = "0.1.0"
