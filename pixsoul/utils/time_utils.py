from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def expires_in(seconds: int) -> datetime:
    return utcnow() + timedelta(seconds=seconds)


def is_expired(expires_at: datetime) -> bool:
    return utcnow() > expires_at
