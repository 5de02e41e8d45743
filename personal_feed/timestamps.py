"""
Timestamp helpers.

All timestamps are stored as ISO-8601 UTC strings with millisecond
precision and a ``Z`` suffix, so plain string comparison orders them
chronologically. SQLite writes the same shape via ``SQL_NOW``.
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

SQL_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"


def isoformat_utc(value: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def utc_now_iso() -> str:
    return isoformat_utc(datetime.now(timezone.utc))


def parse_timestamp(value) -> datetime | None:
    """
    Parse a loosely-typed timestamp.

    Accepts datetimes, epoch numbers (seconds, or milliseconds when large),
    ISO-8601 strings and RFC 2822 strings as found in RSS ``pubDate``.
    Returns None for anything unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        parsed = datetime.fromisoformat(iso_text)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    except ValueError:
        pass

    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def normalize_timestamp(value) -> str | None:
    """Parse a timestamp and return it in canonical ISO form, or None."""
    parsed = parse_timestamp(value)
    return isoformat_utc(parsed) if parsed else None
