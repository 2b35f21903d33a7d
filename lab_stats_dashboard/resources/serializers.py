# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Serializers for report tables."""

import csv
import io
import os
from collections.abc import Iterable
from datetime import datetime

import orjson
from babel.dates import format_date
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from ..reports import DATE_FORMAT, ReportTable
from ..utils.filewriter import AtomicFileWriter
from .types import DataPointDict, DataSeriesDict, TableSeriesDict


class TableCSVSerializer:
    """CSV serializer writing one file per report table."""

    delimiter = ","
    extension = "csv"

    def serialize(self, table: ReportTable) -> str:
        """Serialize a table, including its header row.

        Returns:
            str: The delimited text.
        """
        buf = io.StringIO()
        writer = csv.writer(buf, delimiter=self.delimiter, lineterminator="\n")
        writer.writerow(table.header)
        writer.writerows(table.rows)
        return buf.getvalue()

    def path_for(self, table: ReportTable, directory: str) -> str:
        """Get the path a table is written to."""
        return os.path.join(directory, f"{table.name}.{self.extension}")

    def write(self, tables: Iterable[ReportTable], directory: str) -> list[str]:
        """Write each table to its own file in directory.

        Returns:
            list[str]: Paths of the written files.
        """
        paths = []
        for table in tables:
            path = self.path_for(table, directory)
            with AtomicFileWriter(path, newline="") as w:
                w.write(self.serialize(table))
            paths.append(path)
        return paths


class TableTSVSerializer(TableCSVSerializer):
    """Tab-separated serializer, used for gnuplot data files."""

    delimiter = "\t"
    extension = "tsv"


class TableExcelSerializer:
    """Excel serializer writing all tables to one workbook."""

    filename = "lab-stats.xlsx"

    def serialize(self, tables: Iterable[ReportTable]) -> bytes:
        """Serialize tables to an Excel workbook with one sheet per table.

        Returns:
            bytes: The .xlsx file contents.
        """
        wb = Workbook()
        # Remove the default sheet
        wb.remove(wb.active)
        for table in tables:
            ws = wb.create_sheet(title=self._sanitize_sheet_name(table.name))
            ws.append(table.header)
            for row in table.rows:
                ws.append(row)
        self._style_workbook(wb)

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()

    def write(self, tables: Iterable[ReportTable], directory: str) -> list[str]:
        """Write the workbook to directory.

        Returns:
            list[str]: Path of the written workbook.
        """
        path = os.path.join(directory, self.filename)
        with AtomicFileWriter(path, "wb") as w:
            w.write(self.serialize(tables))
        return [path]

    def _sanitize_sheet_name(self, name: str) -> str:
        """Sanitize sheet name for Excel compatibility.

        Args:
            name: Original sheet name

        Returns:
            Sanitized sheet name
        """
        # Excel sheet names have restrictions:
        # - Max 31 characters
        # - Cannot contain: \ / ? * [ ] :
        # - Cannot be empty
        sanitized = str(name)
        for char in ["\\", "/", "?", "*", "[", "]", ":"]:
            sanitized = sanitized.replace(char, "_")
        return sanitized[:31] or "Sheet"

    def _style_workbook(self, wb: Workbook) -> None:
        """Make each sheet's header row bold with a grey fill."""
        header_font = Font(bold=True)
        header_fill = PatternFill(
            start_color="CCCCCC", end_color="CCCCCC", fill_type="solid"
        )

        for ws in wb.worksheets:
            for col in range(1, ws.max_column + 1):
                cell = ws.cell(row=1, column=col)
                cell.font = header_font
                cell.fill = header_fill


class TableJSONSerializer:
    """JSON serializer producing chart-ready data series.

    Time-series tables become one series per value column, each point holding
    the date, the value and a localized readable date. Other tables are
    written as lists of row objects.
    """

    filename = "lab-stats.json"

    def __init__(self, locale: str = "en"):
        """Initialize the serializer.

        Args:
            locale: Locale for readable dates.
        """
        self.locale = locale

    def serialize(self, tables: Iterable[ReportTable]) -> dict[str, TableSeriesDict]:
        """Convert tables to JSON-compatible dictionaries keyed by table name."""
        result: dict[str, TableSeriesDict] = {}
        for table in tables:
            if table.date_column is None:
                result[table.name] = {
                    "series": [],
                    "rows": [dict(zip(table.header, row)) for row in table.rows],
                }
            else:
                result[table.name] = {
                    "series": self._table_series(table),
                    "rows": [],
                }
        return result

    def write(self, tables: Iterable[ReportTable], directory: str) -> list[str]:
        """Write all tables to a single JSON file in directory.

        Returns:
            list[str]: Path of the written file.
        """
        path = os.path.join(directory, self.filename)
        with AtomicFileWriter(path, "wb") as w:
            w.write(orjson.dumps(self.serialize(tables), option=orjson.OPT_INDENT_2))
        return [path]

    def _table_series(self, table: ReportTable) -> list[DataSeriesDict]:
        date_col = table.date_column
        series = []
        for index, column in enumerate(table.header):
            if index == date_col:
                continue
            series.append(
                {
                    "id": f"{table.name}-{column}".lower().replace(" ", "-"),
                    "name": column,
                    "data": [
                        self._data_point(row[date_col], row[index]) for row in table.rows
                    ],
                    "type": "line",
                    "valueType": "number",
                }
            )
        return series

    def _data_point(self, date: str, value: int | float) -> DataPointDict:
        return {
            "value": [date, value],
            "readableDate": self._format_readable_date(date),
            "valueType": "number",
        }

    def _format_readable_date(self, date: str) -> str:
        """Format a YYYY-MM-DD date as a localized human-readable string.

        Returns:
            str: Formatted date, or the input if it can't be parsed.
        """
        try:
            date_obj = datetime.strptime(date, DATE_FORMAT)
        except ValueError:
            return str(date)
        return str(format_date(date_obj, format="medium", locale=self.locale))


SERIALIZERS = {
    "csv": TableCSVSerializer,
    "tsv": TableTSVSerializer,
    "xlsx": TableExcelSerializer,
    "json": TableJSONSerializer,
}
