"""UTC datetime utilities."""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def seconds_until(target: datetime | None, now: datetime) -> int:
    """Whole seconds from ``now`` until ``target``, rounded up; 0 if already passed."""
    if target is None or target <= now:
        return 0
    delta: timedelta = target - now
    whole = int(delta.total_seconds())
    return whole + 1 if delta > timedelta(seconds=whole) else whole
