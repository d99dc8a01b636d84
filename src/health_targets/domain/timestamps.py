"""Instant parsing and second-granularity comparison."""

import re
from datetime import UTC, datetime

from health_targets.domain.errors import ValidationError

MAX_INSTANT_LENGTH = 30

_UTC_INSTANT = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{1,9})?(?:Z|\+00:00)$"
)


def parse_instant(value: str, field: str = "timestamp") -> datetime:
    """Parse an ISO-8601 UTC instant with optional sub-second precision."""
    if len(value) > MAX_INSTANT_LENGTH or not _UTC_INSTANT.match(value):
        raise ValidationError(
            "Invalid timestamp",
            {field: "Expected an ISO-8601 UTC timestamp"},
        )
    normalized = value.removesuffix("Z").removesuffix("+00:00")
    whole, _, fraction = normalized.partition(".")
    # datetime carries microseconds at most
    if fraction:
        whole = f"{whole}.{fraction[:6].ljust(6, '0')}"
    try:
        parsed = datetime.fromisoformat(whole)
    except ValueError as exc:
        raise ValidationError(
            "Invalid timestamp",
            {field: "Expected an ISO-8601 UTC timestamp"},
        ) from exc
    return parsed.replace(tzinfo=UTC)


def to_utc(value: datetime) -> datetime:
    """Return the instant in UTC, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def truncate_to_second(value: datetime) -> datetime:
    return to_utc(value).replace(microsecond=0)


def same_instant_to_second(left: datetime, right: datetime) -> bool:
    """Return True when both instants fall into the same UTC second."""
    return truncate_to_second(left) == truncate_to_second(right)


def parse_stored_instant(value: str) -> datetime:
    """Parse a timestamp returned by Postgres into an aware UTC datetime."""
    return to_utc(datetime.fromisoformat(value))
