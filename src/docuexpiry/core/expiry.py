"""Expiry window helpers shared by listing and dashboard queries."""

from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple, Union

EXPIRING_WINDOW_DAYS = 30

STATUS_EXPIRED = "expired"
STATUS_EXPIRING = "expiring"
STATUS_VALID = "valid"


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Union[datetime, date]) -> datetime:
    """Normalize a date or datetime to naive UTC.

    Plain dates are taken as midnight UTC. Aware datetimes are converted;
    naive ones are assumed to already be UTC.
    """
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def expiry_window(now: datetime, days: int = EXPIRING_WINDOW_DAYS) -> Tuple[datetime, datetime]:
    """Return the inclusive ``(start, end)`` bounds of the expiring-soon window."""
    return now, now + timedelta(days=days)


def classify_expiry(expires_at: datetime, now: datetime, days: int = EXPIRING_WINDOW_DAYS) -> str:
    """Classify a single expiry date against ``now``.

    Mirrors the SQL filters: expired is strictly before ``now``, expiring is
    within ``[now, now + days]`` and valid is anything later.
    """
    start, end = expiry_window(now, days)
    if expires_at < start:
        return STATUS_EXPIRED
    if expires_at <= end:
        return STATUS_EXPIRING
    return STATUS_VALID


def to_aware_utc(value: datetime) -> datetime:
    """Attach UTC to a stored naive datetime for clients."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
