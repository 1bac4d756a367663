from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite drops tzinfo so both stores keep them naive."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def bump(previous: datetime | None) -> datetime:
    # updatedAt must move forward even when two writes share a clock tick
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def iso(dt: datetime | None) -> str | None:
    return dt.isoformat(timespec="microseconds") if dt else None
