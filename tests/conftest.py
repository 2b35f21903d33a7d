# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Top-level pytest configuration for Lab-Stats-Dashboard tests."""

import gzip
import json
from collections.abc import Callable

import arrow
import pytest

from lab_stats_dashboard.config import StatsConfig
from lab_stats_dashboard.constants import AgeRange, Result, TestType
from lab_stats_dashboard.records import TestRecord

TZ = "America/Puerto_Rico"

test_config = {
    "LAB_STATS_TIMEZONE": TZ,
    "LAB_STATS_START_DATE": "2020-03-12",
    "LAB_STATS_MAX_DELAY": 10,
    "LAB_STATS_AVERAGE_DAYS": 7,
}


@pytest.fixture
def stats_config() -> StatsConfig:
    """Run settings with a small histogram size.

    Returns:
        StatsConfig: settings for tests.
    """
    return StatsConfig.from_mapping(test_config)


@pytest.fixture
def now() -> arrow.Arrow:
    """Fixed end of the acceptance window.

    Returns:
        arrow.Arrow: noon on 2020-07-01 in Puerto Rico.
    """
    return arrow.Arrow(2020, 7, 1, 12, tzinfo=TZ)


@pytest.fixture
def make_record() -> Callable[..., TestRecord]:
    """Factory to create classified test records from YYYY-MM-DD dates.

    Returns:
        Callable: factory function that builds TestRecord objects.
    """

    def _make_record(
        collected: str | None,
        reported: str | None,
        result: Result = Result.NEGATIVE,
        age_range: AgeRange = AgeRange.AGE_30_39,
        test_type: TestType = TestType.MOLECULAR,
    ) -> TestRecord:
        return TestRecord(
            collected=arrow.get(collected, "YYYY-MM-DD", tzinfo=TZ)
            if collected
            else None,
            reported=arrow.get(reported, "YYYY-MM-DD", tzinfo=TZ) if reported else None,
            age_range=age_range,
            test_type=test_type,
            result=result,
        )

    return _make_record


@pytest.fixture
def raw_tests() -> list[dict]:
    """Raw JSON test objects spanning two reporting weeks.

    Returns:
        list[dict]: decoded JSON test objects.
    """
    return [
        {
            "collectedDate": "6/1/2020",
            "reportedDate": "6/3/2020",
            "ageRange": "20 to 29",
            "testType": "Molecular",
            "result": "Positive",
            "patientCity": "San Juan",
            "patientId": "a1",
            "createdAt": "06/03/2020 10:00",
        },
        {
            "collectedDate": "6/2/2020",
            "reportedDate": "6/3/2020",
            "ageRange": "30 to 39",
            "testType": "Molecular",
            "result": "Not Detected",
            "patientCity": "Ponce",
            "patientId": "a2",
            "createdAt": "06/03/2020 11:00",
        },
        {
            "collectedDate": "6/5/2020",
            "reportedDate": "6/9/2020",
            "ageRange": "",
            "testType": "Molecular",
            "result": "Inconclusive",
            "patientCity": "",
            "patientId": "a3",
            "createdAt": "06/09/2020 09:30",
        },
        {
            "collectedDate": "6/8/2020",
            "reportedDate": "6/9/2020",
            "ageRange": "60 to 69",
            "testType": "Serological",
            "result": "Positive IgM Only",
            "patientCity": "Caguas",
            "patientId": "a4",
            "createdAt": "06/09/2020 12:15",
        },
        {
            "collectedDate": "1/15/2020",
            "reportedDate": "6/10/2020",
            "ageRange": "40 to 49",
            "testType": "Molecular",
            "result": "COVID-19 Negative",
            "patientCity": "Bayamón",
            "patientId": "a5",
            "createdAt": "06/10/2020 08:00",
        },
    ]


@pytest.fixture
def tests_file(tmp_path, raw_tests) -> Callable[..., str]:
    """Factory writing raw tests to a JSON file.

    Returns:
        Callable: function taking (data=None, compress=False) and returning
            the file path.
    """

    def _tests_file(data=None, compress: bool = False) -> str:
        content = json.dumps(raw_tests if data is None else data).encode("utf-8")
        if compress:
            path = tmp_path / "tests.json.gz"
            path.write_bytes(gzip.compress(content))
        else:
            path = tmp_path / "tests.json"
            path.write_bytes(content)
        return str(path)

    return _tests_file
