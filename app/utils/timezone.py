"""UTC 일시 유틸리티.

UTC datetime helpers. All timestamps are stored in UTC; some database
backends (SQLite) hand them back without tzinfo, so comparisons in Python
go through ensure_utc first.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """현재 UTC 일시 (Current time, timezone-aware UTC)."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """naive 일시를 UTC로 간주하여 tzinfo를 부여합니다.

    Attach UTC to naive datetimes and convert aware ones to UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
