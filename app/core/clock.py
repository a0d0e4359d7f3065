from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC now, matching what MongoDB hands back for stored datetimes."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime | None) -> datetime:
    """Injected `now` as naive UTC; None means the current time."""
    if value is None:
        return utcnow()
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
