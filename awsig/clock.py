"""UTC timestamps in the formats SigV4 expects."""

import calendar
from datetime import datetime, timezone
from email.utils import formatdate
from typing import Optional

from .exceptions import ClockUnavailableError, InvalidInputError

SIGV4_TIMESTAMP = '%Y%m%dT%H%M%SZ'
SIGV4_DATE = '%Y%m%d'


def _utcnow(now: Optional[datetime]) -> datetime:
    if now is None:
        try:
            return datetime.now(timezone.utc)
        except (OSError, OverflowError) as e:
            raise ClockUnavailableError(f"Unable to read the system clock: {e}") from e
    if now.tzinfo is not None:
        return now.astimezone(timezone.utc)
    # naive values are taken to be UTC already
    return now


def amz_date(now: Optional[datetime] = None) -> str:
    """Return ``now`` (default: the current time) as ``YYYYMMDDTHHMMSSZ``."""
    return _utcnow(now).strftime(SIGV4_TIMESTAMP)


def date(now: Optional[datetime] = None) -> str:
    """Return ``now`` (default: the current time) as ``YYYYMMDD``."""
    return _utcnow(now).strftime(SIGV4_DATE)


def http_date(timestamp: str) -> str:
    """Render a ``YYYYMMDDTHHMMSSZ`` timestamp in RFC 2822 form for a ``Date`` header."""
    try:
        parsed = datetime.strptime(timestamp, SIGV4_TIMESTAMP)
    except ValueError as e:
        raise InvalidInputError(f"Malformed timestamp: {timestamp!r}") from e
    return formatdate(calendar.timegm(parsed.timetuple()))
