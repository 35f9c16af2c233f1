"""Common time helpers shared across models."""

from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    return datetime.now(UTC)


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Map an IANA zone name to a tzinfo; None means the host local zone."""
    if not name:
        return None
    return ZoneInfo(name)
