"""Availability evaluation: is a candidate range inside the host's windows?

Pure functions over weekly windows and date overrides. Only the local date of
the range start is consulted; a range running past midnight must fit a window
on its start date (e.g. one ending at 24:00).
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from ..errors import CannotCreateByInvalidTimeRange
from ..models import AvailableTime, DateOverride, TimeRange

logger = logging.getLogger(__name__)

WEEKDAYS = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]


def parse_time(value: str) -> tuple[int, int]:
    """Parse 'HH:MM' into (hour, minute). '24:00' is accepted as end of day."""
    hour_str, minute_str = value.strip().split(":")[:2]
    hour, minute = int(hour_str), int(minute_str)
    if not (0 <= hour <= 24 and 0 <= minute < 60) or (hour == 24 and minute):
        raise ValueError(f"Invalid time of day: {value!r}")
    return hour, minute


def localize(day: date, time_str: str, tz: ZoneInfo) -> datetime:
    """Wall-clock time on a given date in tz, as an aware datetime."""
    hour, minute = parse_time(time_str)
    midnight = datetime(day.year, day.month, day.day, tzinfo=tz)
    return midnight + timedelta(hours=hour, minutes=minute)


def weekday_index(moment: datetime) -> int:
    """0=Sunday .. 6=Saturday."""
    return (moment.weekday() + 1) % 7


def is_past(start: datetime, end: datetime, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return start <= now or end <= now


def _contains(ranges: list[TimeRange], day: date, tz: ZoneInfo, start: datetime, end: datetime) -> bool:
    for time_range in ranges:
        range_start = localize(day, time_range.start_time, tz)
        range_end = localize(day, time_range.end_time, tz)
        if range_start <= start and end <= range_end:
            return True
    return False


def find_overlapping_date_override(
    overrides: list[DateOverride], tz: ZoneInfo, start: datetime
) -> DateOverride | None:
    """The override for the local date of start, if any."""
    local_date = start.astimezone(tz).date()
    for override in overrides:
        if override.target_date == local_date:
            return override
    return None


def is_within_override(override: DateOverride, tz: ZoneInfo, start: datetime, end: datetime) -> bool:
    """Empty override = blackout, otherwise one of its ranges must contain the candidate."""
    if not override.time_ranges:
        return False
    return _contains(override.time_ranges, override.target_date, tz, start, end)


def is_within_available_times(
    available_times: list[AvailableTime], tz: ZoneInfo, start: datetime, end: datetime
) -> bool:
    local_start = start.astimezone(tz)
    weekday = weekday_index(local_start)
    day_ranges = [
        time_range
        for available_time in available_times
        if available_time.day == weekday
        for time_range in available_time.time_ranges
    ]
    return _contains(day_ranges, local_start.date(), tz, start, end)


def find_unbookable_reason(
    available_times: list[AvailableTime],
    overrides: list[DateOverride],
    timezone_name: str,
    start: datetime,
    end: datetime,
    now: datetime | None = None,
) -> str | None:
    """Return why the range cannot be booked, or None when it can."""
    if end <= start:
        return CannotCreateByInvalidTimeRange.NOT_CONCATENATED
    if is_past(start, end, now):
        return CannotCreateByInvalidTimeRange.PAST

    tz = ZoneInfo(timezone_name)
    override = find_overlapping_date_override(overrides, tz, start)
    if override is not None:
        if not is_within_override(override, tz, start, end):
            logger.debug(
                "Range %s - %s rejected by date override %s (%d ranges)",
                start, end, override.target_date, len(override.time_ranges),
            )
            return CannotCreateByInvalidTimeRange.OUTSIDE_AVAILABILITY
        return None

    if not is_within_available_times(available_times, tz, start, end):
        logger.debug(
            "Range %s - %s is outside %s windows", start, end,
            WEEKDAYS[weekday_index(start.astimezone(tz))],
        )
        return CannotCreateByInvalidTimeRange.OUTSIDE_AVAILABILITY
    return None


def is_bookable(
    available_times: list[AvailableTime],
    overrides: list[DateOverride],
    timezone_name: str,
    start: datetime,
    end: datetime,
    now: datetime | None = None,
) -> bool:
    """True when the range is in the future, non-empty and inside the host's windows."""
    return find_unbookable_reason(available_times, overrides, timezone_name, start, end, now) is None
