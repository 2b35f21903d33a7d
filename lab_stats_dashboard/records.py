# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Parsing, classification and ingestion of individual test records.

Input is a JSON array of test objects like the following:

.. code-block:: json

    {
      "collectedDate": "6/25/2020",
      "reportedDate": "6/25/2020",
      "ageRange": "30 to 39",
      "testType": "Molecular",
      "result": "Negative",
      "patientCity": "Las Piedras",
      "patientId": "5161e02e-8aca-4c50-9a16-0007ec5f5e51",
      "createdAt": "06/30/2020 13:49"
    }
"""

import gzip
import logging
import os
from collections.abc import Iterable, Iterator
from typing import Any, NamedTuple

import arrow
import orjson
from arrow.parser import ParserError

from .aggregations import StatsStore
from .config import StatsConfig
from .constants import AgeRange, Result, TestType
from .exceptions import ClassificationError, InputFormatError
from .utils.utils import round_half_away

logger = logging.getLogger(__name__)

DATE_FORMAT = "M/D/YYYY"
CREATED_FORMAT = "MM/DD/YYYY HH:mm"
NO_DELAY = -1
SECONDS_PER_DAY = 24 * 60 * 60

# Result strings are inconsistent across labs. In descending order of
# frequency as of 2020-07-26: "Negative", "Not Detected", "Positive",
# "COVID-19 Negative", "Positive 2019-nCoV", "Presumptive Positive",
# "Not Tested", "Inconclusive", "Other", "Not Valid", "COVID-19 Positive",
# "Invalid", "Positive IgM and IgG", "Positive IgM Only".
RESULT_STRINGS: dict[str, Result] = {
    "Positive": Result.POSITIVE,
    "Positive 2019-nCoV": Result.POSITIVE,
    "Presumptive Positive": Result.POSITIVE,
    "COVID-19 Positive": Result.POSITIVE,
    "Negative": Result.NEGATIVE,
    "Not Detected": Result.NEGATIVE,
    "COVID-19 Negative": Result.NEGATIVE,
    "Positive IgM and IgG": Result.OTHER,  # serological?
    "Positive IgM Only": Result.OTHER,  # serological?
    "Not Tested": Result.OTHER,
    "Inconclusive": Result.OTHER,
    "Other": Result.OTHER,
    "Not Valid": Result.OTHER,
    "Invalid": Result.OTHER,
}

TEST_TYPE_STRINGS: dict[str, TestType] = {
    "Molecular": TestType.MOLECULAR,
    "Serological": TestType.SEROLOGICAL,
    "Antigens": TestType.ANTIGEN,
    "Antigen": TestType.ANTIGEN,
}

AGE_RANGE_STRINGS: dict[str, AgeRange] = {
    "N/A": AgeRange.UNKNOWN,
    "": AgeRange.UNKNOWN,
    **{f"{a.min_age} to {a.max_age}": a for a in AgeRange.known()},
}


class TestRecord(NamedTuple):
    """A single classified test."""

    __test__ = False  # not a pytest test class

    collected: arrow.Arrow | None
    reported: arrow.Arrow | None
    age_range: AgeRange
    test_type: TestType
    result: Result
    patient_id: str = ""
    patient_city: str = ""
    created: arrow.Arrow | None = None


def classify(table: dict[str, Any], value: Any, field: str) -> Any:
    """Look up a raw string in a classification table.

    Raises:
        ClassificationError: If the value isn't in the table.
    """
    try:
        return table[value]
    except (KeyError, TypeError):
        raise ClassificationError(f"Invalid {field} {value!r}") from None


def parse_time(value: Any, fmt: str, tz: str, allow_empty: bool) -> arrow.Arrow | None:
    """Parse a timestamp string in the supplied time zone.

    Returns:
        arrow.Arrow | None: The parsed time, or None for an allowed empty
            string.

    Raises:
        InputFormatError: If the string is missing or doesn't match fmt.
    """
    if value in ("", None) and allow_empty:
        return None
    if not isinstance(value, str):
        raise InputFormatError(f"Expected {fmt} string, got {value!r}")
    try:
        return arrow.get(value, fmt, tzinfo=tz)
    except (ParserError, ValueError) as e:
        raise InputFormatError(f"Bad time {value!r}: {e}") from e


def parse_test(obj: Any, tz: str) -> TestRecord:
    """Parse and classify a decoded JSON test object.

    Args:
        obj: Decoded JSON object.
        tz: Time zone the dates are expressed in.

    Returns:
        TestRecord: The classified test.

    Raises:
        InputFormatError: If obj isn't an object or has malformed dates.
        ClassificationError: If a result, type or age string is unknown.
    """
    if not isinstance(obj, dict):
        raise InputFormatError(f"Expected test object, got {type(obj).__name__}")

    return TestRecord(
        collected=parse_time(obj.get("collectedDate"), DATE_FORMAT, tz, True),
        reported=parse_time(obj.get("reportedDate"), DATE_FORMAT, tz, True),
        age_range=classify(AGE_RANGE_STRINGS, obj.get("ageRange") or "", "age range"),
        test_type=classify(
            TEST_TYPE_STRINGS, obj.get("testType", "Molecular"), "test type"
        ),
        result=classify(RESULT_STRINGS, obj.get("result"), "result"),
        patient_id=obj.get("patientId") or "",
        patient_city=obj.get("patientCity") or "",
        created=parse_time(obj.get("createdAt"), CREATED_FORMAT, tz, True),
    )


def read_tests(path: str | os.PathLike, tz: str) -> Iterator[TestRecord]:
    """Read tests from a JSON file, which may be gzip-compressed.

    Args:
        path: Path to the file. Files ending in ".gz" are decompressed.
        tz: Time zone the dates are expressed in.

    Yields:
        TestRecord: Each test in the file, in order.

    Raises:
        InputFormatError: If the file doesn't contain a JSON array of tests.
        ClassificationError: If a test can't be classified.
    """
    opener = gzip.open if os.fspath(path).endswith(".gz") else open
    with opener(path, "rb") as f:
        try:
            data = orjson.loads(f.read())
        except orjson.JSONDecodeError as e:
            raise InputFormatError(f"Failed decoding {path}: {e}") from e

    if not isinstance(data, list):
        raise InputFormatError(
            f"{path} contains {type(data).__name__} instead of an array"
        )
    logger.info("Read %d test(s) from %s", len(data), path)

    for i, obj in enumerate(data):
        try:
            yield parse_test(obj, tz)
        except (ClassificationError, InputFormatError) as e:
            raise type(e)(f"Test {i}: {e}") from e


def is_valid_time(
    ts: arrow.Arrow | None, config: StatsConfig, now: arrow.Arrow
) -> bool:
    """Check whether a timestamp lies within the acceptance window."""
    return ts is not None and config.start_date <= ts <= now


def compute_delay(
    collected: arrow.Arrow | None, reported: arrow.Arrow | None
) -> int:
    """Get the number of days between collection and reporting.

    Callers should only pass timestamps that passed is_valid_time().

    Returns:
        int: Whole days, or NO_DELAY if either timestamp is missing or the
            test was reported before it was collected.
    """
    if collected is None or reported is None or collected > reported:
        return NO_DELAY
    return round_half_away((reported - collected).total_seconds() / SECONDS_PER_DAY)


def ingest(
    tests: Iterable[TestRecord],
    config: StatsConfig,
    now: arrow.Arrow | None = None,
) -> tuple[StatsStore, StatsStore]:
    """Aggregate tests by collection day and by reporting day.

    A test is added to the collection-day store if its collection time is
    within the acceptance window, and independently to the reporting-day store
    if its reporting time is.

    Args:
        tests: Tests to aggregate.
        config: Run settings.
        now: End of the acceptance window. Defaults to the current time.

    Returns:
        tuple[StatsStore, StatsStore]: Stores keyed by collection day and by
            reporting day.
    """
    if now is None:
        now = arrow.now(config.timezone)

    collected = StatsStore(config.max_delay)
    reported = StatsStore(config.max_delay)
    num_tests = skipped_collected = skipped_reported = 0

    for test in tests:
        num_tests += 1
        col_valid = is_valid_time(test.collected, config, now)
        rep_valid = is_valid_time(test.reported, config, now)

        delay = NO_DELAY
        if col_valid and rep_valid:
            delay = compute_delay(test.collected, test.reported)

        if col_valid:
            collected.get(
                test.collected.to(config.timezone).date()
            ).update(test.test_type, test.result, test.age_range, delay)
        else:
            skipped_collected += 1
            logger.debug("Ignoring collection time %s", test.collected)

        if rep_valid:
            reported.get(
                test.reported.to(config.timezone).date()
            ).update(test.test_type, test.result, test.age_range, delay)
        else:
            skipped_reported += 1
            logger.debug("Ignoring report time %s", test.reported)

    logger.info(
        "Ingested %d test(s) over %d collection and %d report day(s); "
        "%d collection and %d report time(s) outside window",
        num_tests,
        len(collected),
        len(reported),
        skipped_collected,
        skipped_reported,
    )
    return collected, reported
