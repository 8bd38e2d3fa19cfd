from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def localnow() -> datetime:
    """Wall-clock 'now' used for business dates printed on documents."""
    return datetime.now()


def today_str(now: Optional[datetime] = None) -> str:
    """Business date as YYYY-MM-DD."""
    return (now or localnow()).date().isoformat()


def time_str(now: Optional[datetime] = None) -> str:
    """Business time as HH:MM:SS."""
    return (now or localnow()).strftime("%H:%M:%S")


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a YYYY-MM-DD string.

    - None / "" -> None
    - A full ISO datetime is accepted and truncated to its date
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    if len(s) > 10:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    return date.fromisoformat(s)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")
