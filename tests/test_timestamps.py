"""Tests for instant parsing and second-level comparison."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from health_targets.domain.errors import ValidationError
from health_targets.domain.timestamps import (
    parse_instant,
    same_instant_to_second,
    truncate_to_second,
)


def test_parse_instant_accepts_utc_forms() -> None:
    expected = datetime(2025, 10, 30, 12, 34, 56, tzinfo=UTC)

    assert parse_instant("2025-10-30T12:34:56Z") == expected
    assert parse_instant("2025-10-30T12:34:56+00:00") == expected
    assert parse_instant("2025-10-30T12:34:56.789Z") == expected.replace(
        microsecond=789000
    )
    assert parse_instant("2025-10-30T12:34:56.123456789Z").microsecond == 123456


@pytest.mark.parametrize(
    "value",
    [
        "2025-10-30",
        "2025-10-30T12:34:56",
        "2025-10-30T12:34:56+02:00",
        "not a timestamp",
        "2025-13-30T12:34:56Z",
        "2025-10-30T12:34:56.1234567890123Z",
    ],
)
def test_parse_instant_rejects_other_forms(value: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        parse_instant(value, field="metricsComputedAt")

    assert "metricsComputedAt" in excinfo.value.field_errors


def test_same_instant_ignores_sub_second_part() -> None:
    stored = datetime(2025, 10, 30, 12, 34, 56, 789123, tzinfo=UTC)
    truncated = datetime(2025, 10, 30, 12, 34, 56, tzinfo=UTC)

    assert same_instant_to_second(stored, truncated)
    assert same_instant_to_second(stored, stored.replace(microsecond=1))


def test_same_instant_fails_across_second_boundary() -> None:
    stored = datetime(2025, 10, 30, 12, 34, 56, 999999, tzinfo=UTC)

    assert not same_instant_to_second(stored, stored + timedelta(microseconds=1))
    assert not same_instant_to_second(stored, stored - timedelta(seconds=1))


def test_same_instant_normalizes_time_zones() -> None:
    utc_value = datetime(2025, 10, 30, 12, 34, 56, 500000, tzinfo=UTC)
    offset_value = utc_value.astimezone(timezone(timedelta(hours=3)))

    assert same_instant_to_second(utc_value, offset_value)
    assert truncate_to_second(offset_value) == utc_value.replace(microsecond=0)
