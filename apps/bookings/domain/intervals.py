"""Parsing of requested pickup / drop-off instants into a ``TimeRange``."""

from datetime import date, datetime, time, timezone as datetime_timezone

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from shared.domain.value_objects import TimeRange

from apps.bookings.domain.errors import InvalidInterval


def to_instant(value) -> datetime:
    """
    Accepts a datetime, a date (midnight) or an ISO 8601 string.

    Naive values are interpreted in the current Django time zone; the
    result is normalised to UTC.
    Raises InvalidInterval for anything else.
    """
    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = parse_datetime(text) or parse_date(text)
        except ValueError:
            parsed = None
        if parsed is None:
            raise InvalidInterval(f"Not a valid date: {value!r}")
        value = parsed

    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time.min)
    else:
        raise InvalidInterval(f"Not a valid date: {value!r}")

    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    # instants at the edge of the datetime range cannot be stored as UTC
    try:
        return moment.astimezone(datetime_timezone.utc)
    except OverflowError:
        raise InvalidInterval(f"Date out of range: {value!r}") from None


def parse_interval(start, end) -> TimeRange:
    """Half-open ``[start, end)``; raises InvalidInterval unless ``start < end``."""
    if start in (None, '') or end in (None, ''):
        raise InvalidInterval("Both pickup and drop-off dates are required.")
    start_at, end_at = to_instant(start), to_instant(end)
    if start_at >= end_at:
        raise InvalidInterval("Pickup must be before drop-off.")
    return TimeRange(start=start_at, end=end_at)
