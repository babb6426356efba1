"""
Module: sitecost_engines.grouping
Responsibility:
    Parse activity timestamps, bucket activities into calendar days of the
    reporting timezone (newest day first), and restrict activities to a
    reporting period.

Architecture position:
    Engines -- pure calculation layer, zero I/O, no clock access.

Invariants enforced:
    - Day key is the timestamp truncated to its date in the reporting
      timezone (UTC by default, matching the day key the mobile client has
      always shown).
    - Within a day, activities keep their original relative order; there is
      no re-sort by time of day.
    - Day keys are ordered descending (most recent first).
    - An unparseable timestamp raises UnparseableTimestampError; nothing is
      ever bucketed under an "unknown" day.

Usage:
    grouper = DateGrouper("Asia/Kolkata")
    grouped = grouper.group(activities)
    for day in grouped.ordered_dates:
        grouped.activities_on(day)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from types import MappingProxyType
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sitecost_kernel.domain.activities import MaterialActivity
from sitecost_kernel.exceptions import (
    ConfigurationError,
    InvalidReportPeriodError,
    UnparseableTimestampError,
)
from sitecost_kernel.logging_config import get_logger
from sitecost_engines.tracer import traced_engine

logger = get_logger("engines.grouping")


def resolve_timezone(tz: tzinfo | str | None) -> tzinfo:
    """Turn an IANA name (or None for UTC) into a tzinfo."""
    if tz is None or (isinstance(tz, str) and tz.upper() == "UTC"):
        return timezone.utc
    if isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown timezone {tz!r}") from e


def parse_timestamp(
    value: Any,
    tz: tzinfo,
    activity_id: str | None = None,
) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Naive values are interpreted in ``tz``. A trailing ``Z`` means UTC.

    Raises:
        UnparseableTimestampError: value is missing, not a string/datetime,
            or not ISO-8601.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise UnparseableTimestampError(value, activity_id=activity_id) from e
    else:
        raise UnparseableTimestampError(value, activity_id=activity_id)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


@dataclass(frozen=True)
class GroupedActivities:
    """
    Activities bucketed by calendar day.

    Guarantees:
        - ``ordered_dates`` lists every key of ``by_date`` exactly once,
          newest first.
        - Each bucket is non-empty and preserves input order.
        - Read-only once built: ``by_date`` is a mapping proxy over a
          private copy.
    """

    by_date: Mapping[date, tuple[MaterialActivity, ...]]
    ordered_dates: tuple[date, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "by_date", MappingProxyType(dict(self.by_date)))

    def activities_on(self, day: date) -> tuple[MaterialActivity, ...]:
        return self.by_date.get(day, ())

    def date_keys(self) -> tuple[str, ...]:
        """Day keys as ``YYYY-MM-DD`` strings, newest first."""
        return tuple(d.isoformat() for d in self.ordered_dates)

    @property
    def activity_count(self) -> int:
        return sum(len(v) for v in self.by_date.values())

    @property
    def is_empty(self) -> bool:
        return not self.ordered_dates


class DateGrouper:
    """
    Pure calendar-day grouping in a fixed reporting timezone.

    Contract:
        No I/O, no clock access, fully deterministic.
    """

    def __init__(self, tz: tzinfo | str | None = None):
        self._tz = resolve_timezone(tz)

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def parse(self, value: Any, activity_id: str | None = None) -> datetime:
        """Parse a raw timestamp in this grouper's timezone."""
        return parse_timestamp(value, self._tz, activity_id)

    def calendar_day(self, timestamp: datetime) -> date:
        """Truncate a timestamp to its date in the reporting timezone."""
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=self._tz)
        return timestamp.astimezone(self._tz).date()

    @traced_engine("grouping", "1.0")
    def group(self, activities: Sequence[MaterialActivity]) -> GroupedActivities:
        """
        Bucket activities by calendar day.

        Postconditions:
            Buckets keep input order; dates sorted newest first.
        """
        buckets: dict[date, list[MaterialActivity]] = {}
        for activity in activities:
            buckets.setdefault(self.calendar_day(activity.timestamp), []).append(activity)

        ordered = tuple(sorted(buckets, reverse=True))
        logger.debug(
            "activities_grouped",
            extra={"activity_count": len(activities), "day_count": len(ordered)},
        )
        return GroupedActivities(
            by_date={day: tuple(buckets[day]) for day in ordered},
            ordered_dates=ordered,
        )

    def filter_period(
        self,
        activities: Iterable[MaterialActivity],
        start: date | None = None,
        end: date | None = None,
    ) -> tuple[MaterialActivity, ...]:
        """
        Keep activities whose calendar day lies in ``[start, end]``.

        Either bound may be None (open). Input order is preserved.

        Raises:
            InvalidReportPeriodError: start is after end.
        """
        if start is not None and end is not None and start > end:
            raise InvalidReportPeriodError(start.isoformat(), end.isoformat())
        kept = []
        for activity in activities:
            day = self.calendar_day(activity.timestamp)
            if start is not None and day < start:
                continue
            if end is not None and day > end:
                continue
            kept.append(activity)
        return tuple(kept)

    @staticmethod
    def period_of(grouped: GroupedActivities) -> tuple[date, date] | None:
        """Earliest and latest day actually covered, or None when empty."""
        if grouped.is_empty:
            return None
        return grouped.ordered_dates[-1], grouped.ordered_dates[0]
