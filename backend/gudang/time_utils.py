from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional


def local_now() -> datetime:
    """Server-side 'now' on the local clock (naive). Ledger timestamps and day windows share it."""
    return datetime.now()


def start_of_day(moment: Optional[datetime] = None) -> datetime:
    moment = moment or local_now()
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def day_window(moment: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Half-open [start of day, start of next day) around `moment`."""
    start = start_of_day(moment)
    return start, start + timedelta(days=1)


def parse_iso_datetime(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or datetime string into a local naive datetime.

    - None / "" -> None
    - "YYYY-MM-DD" -> midnight, or the last microsecond of that day when `end_of_day`
    - "...Z" or "...+/-HH:MM" is converted to local time and tzinfo is stripped
    - naive datetimes are taken as local time

    Raises ValueError on unparseable input.
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    date_only = len(s) == 10 and "T" not in s
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)

    if date_only and end_of_day:
        dt = dt + timedelta(days=1) - timedelta(microseconds=1)
    return dt
