"""
Timestamp helpers - Parsing raw tick tokens and rounding bar boundaries.
"""

from datetime import datetime, timedelta, timezone

import pytz

from ..core.constants import TimestampType, EXCHANGE_TIMEZONE
from ..core.exceptions import TickParseError


EXCHANGE_TZ = pytz.timezone(EXCHANGE_TIMEZONE)

IQFEED_FORMATS = ("%Y-%m-%d %H:%M:%S.%f", "%Y-%m-%d %H:%M:%S")


def parse_iqfeed(token: str) -> datetime:
    """
    Parse an IQFeed style "YYYY-MM-DD HH:MM:SS.fff" token.

    IQFeed reports exchange local time, so the result is localized to
    New York. The fractional part is optional.
    """
    text = token.strip()
    for fmt in IQFEED_FORMATS:
        try:
            naive = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return EXCHANGE_TZ.localize(naive)
    raise TickParseError("Malformed IQFeed timestamp", token=repr(token))


def parse_unix(token: str) -> datetime:
    """Parse epoch seconds (fractions allowed) into a UTC datetime."""
    try:
        seconds = float(token)
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        raise TickParseError("Malformed unix timestamp", token=repr(token)) from None


def parse_timestamp(token: str, timestamp_type: TimestampType = TimestampType.IQFEED) -> datetime:
    """Parse a raw timestamp token according to its encoding."""
    if timestamp_type == TimestampType.UNIX:
        return parse_unix(token)
    return parse_iqfeed(token)


def round_to_minutes(timestamp: datetime, minutes: int) -> datetime:
    """
    Round to the nearest multiple of `minutes` on the local wall clock.

    Ties round up, so 09:07:30 goes to 09:15 on a 15 minute grid.
    """
    span = timedelta(minutes=minutes)
    floor = timestamp.replace(
        minute=timestamp.minute - timestamp.minute % minutes,
        second=0,
        microsecond=0
    )
    remainder = timestamp.replace(tzinfo=None) - floor.replace(tzinfo=None)
    if remainder == timedelta(0):
        return timestamp
    if span - remainder <= remainder:
        return floor + span
    return floor
