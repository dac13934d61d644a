# news_alert/utils/time_utils.py

from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as dateparser  # more robust than strptime


def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an RSS/ISO style timestamp to a tz-aware UTC datetime.
    Naive values are taken as UTC. Returns None when unparseable.
    """
    if not value:
        return None
    try:
        dt = dateparser.parse(str(value))
    except (ValueError, OverflowError):
        return None
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso_utc(value: Optional[str]) -> Optional[str]:
    dt = parse_timestamp(value)
    return dt.isoformat(timespec="seconds").replace("+00:00", "Z") if dt else None


def format_duration(seconds: float) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"
