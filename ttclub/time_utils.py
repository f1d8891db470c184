"""Time zone utilities shared across the club helpers."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from zoneinfo import ZoneInfo

from ttclub.config import club_timezone

UTC = ZoneInfo("UTC")


def to_tz(dt_iso: str | datetime, tz: str) -> datetime:
    """Parse ISO timestamp and convert to timezone ``tz`` (IANA name)."""

    if isinstance(dt_iso, datetime):
        dt = dt_iso
    else:
        dt = datetime.fromisoformat(str(dt_iso).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(ZoneInfo(tz))


def localize(naive: datetime, tz_name: Optional[str] = None) -> datetime:
    """Attach the club time zone (or ``tz_name``) to a wall-clock datetime."""

    return naive.replace(tzinfo=ZoneInfo(tz_name or club_timezone()))


def utc_iso(dt: datetime | None) -> str | None:
    """Return an ISO 8601 string in UTC for ``dt`` (tolerates naive input)."""

    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()


def local_hhmm(dt: datetime, tz_name: Optional[str] = None) -> str:
    """Format ``dt`` as 24h ``HH:MM`` in the club time zone."""

    return to_tz(dt, tz_name or club_timezone()).strftime("%H:%M")


def local_date_label(value: str | datetime, tz_name: Optional[str] = None) -> str:
    """German date label (``DD.MM.YYYY``); unparsable input is returned as-is."""

    try:
        local = to_tz(value, tz_name or club_timezone())
    except (TypeError, ValueError):
        return str(value)
    return local.strftime("%d.%m.%Y")


__all__ = ["UTC", "to_tz", "localize", "utc_iso", "local_hhmm", "local_date_label"]
