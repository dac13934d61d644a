# news_alert/utils/text.py
import re
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from .time_utils import parse_timestamp

_TAG_RX = re.compile(r"<[^>]*>")
_WS_RX = re.compile(r"\s+")


def clean_text(text: Optional[str], max_length: int = 280) -> str:
    """Strip tags, collapse whitespace and truncate, preferring a word boundary."""
    if not text:
        return ""
    cleaned = _WS_RX.sub(" ", _TAG_RX.sub("", text)).strip()
    if len(cleaned) <= max_length:
        return cleaned

    truncated = cleaned[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.8:
        return truncated[:last_space] + "..."
    return truncated + "..."


def domain_from_url(url: Optional[str]) -> str:
    try:
        host = urlparse(url or "").hostname
    except ValueError:
        return "unknown"
    if not host:
        return "unknown"
    return host.replace("www.", "", 1)


def format_timestamp(timestamp: Optional[str], now: Optional[datetime] = None) -> str:
    """Relative display for recent times ("5m ago"), absolute otherwise."""
    if not timestamp:
        return "Unknown time"
    dt = parse_timestamp(timestamp)
    if dt is None:
        return str(timestamp)

    now = now or datetime.now(timezone.utc)
    diff_minutes = int((now - dt).total_seconds() // 60)
    if diff_minutes < 1:
        return "Just now"
    if diff_minutes < 60:
        return f"{diff_minutes}m ago"
    if diff_minutes < 1440:
        return f"{diff_minutes // 60}h ago"
    return dt.strftime("%Y-%m-%d %H:%M UTC")


def escape_markdown(text: Optional[str]) -> str:
    # Minimal escaping for Telegram Markdown (not V2)
    if not isinstance(text, str):
        return ""
    return (
        text.replace("_", "\\_")
            .replace("*", "\\*")
            .replace("`", "\\`")
            .replace("[", "\\[")
    )


_MD_LINK_RX = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")


def strip_markdown(text: str) -> str:
    """Plain-text version of a Telegram Markdown message; links become "label: url"."""
    plain = _MD_LINK_RX.sub(r"\1: \2", text).replace("\\*", "\0").replace("*", "").replace("\0", "*")
    return plain.replace("\\_", "_").replace("\\[", "[").replace("\\`", "`")
