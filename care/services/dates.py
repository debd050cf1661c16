"""Lenient date/datetime parsing for request payloads.

Clients send either a calendar date (``2025-03-14``) or an ISO-8601
datetime; both come back as aware datetimes in the current timezone.
"""
import datetime
from typing import Optional, Union

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

DateLike = Union[str, datetime.date, datetime.datetime]


def _aware(value: datetime.datetime) -> datetime.datetime:
    if timezone.is_naive(value):
        return timezone.make_aware(value)
    return value


def parse_when(value: Optional[DateLike], *, end_of_day: bool = False) -> Optional[datetime.datetime]:
    """Return an aware datetime for ``value`` or None when it is not a valid date.

    A bare calendar date maps to midnight, or to the last microsecond of
    that day when ``end_of_day`` is set, so that date-only windows are
    inclusive on both ends.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime.datetime):
        return _aware(value)
    if isinstance(value, datetime.date):
        day = value
    else:
        text = str(value).strip()
        try:
            dt = parse_datetime(text)
            if dt is not None:
                return _aware(dt)
            day = parse_date(text)
        except ValueError:
            return None
        if day is None:
            return None
    t = datetime.time.max if end_of_day else datetime.time.min
    return _aware(datetime.datetime.combine(day, t))
