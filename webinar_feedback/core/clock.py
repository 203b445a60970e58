from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def to_aware_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands datetimes back without tzinfo; everything is stored as UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)
