# utils/timestamp_utils.py - HTTP-date helpers for listing timestamps

import datetime
import email.utils
from typing import Union


def format_http_date(timestamp: Union[int, float]) -> str:
    """
    Format a Unix timestamp as an RFC 7231 IMF-fixdate string

    Sub-second precision is dropped. The day and month names are always
    English regardless of the process locale.

    Args:
        timestamp: Unix timestamp (seconds since 1970-01-01, UTC)

    Returns:
        HTTP-date string, e.g. 'Tue, 15 Nov 1994 08:12:31 GMT'
    """
    return email.utils.formatdate(timestamp, usegmt=True)


def parse_http_date(value: str) -> datetime.datetime:
    """
    Parse an HTTP-date string into an aware UTC datetime

    Args:
        value: HTTP-date string

    Returns:
        datetime object with tzinfo set to UTC

    Raises:
        ValueError: If the value is not a valid HTTP-date
    """
    parsed = email.utils.parsedate_to_datetime(value)
    if parsed is None or parsed.tzinfo is None:
        raise ValueError(f"Not an HTTP-date: {value!r}")

    return parsed.astimezone(datetime.timezone.utc)
