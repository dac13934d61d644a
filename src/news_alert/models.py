# SPDX-License-Identifier: MIT
# src/news_alert/models.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

KIND_FEED = "feed"
KIND_WEB = "web"


@dataclass
class CandidateItem:
    """
    One fetched unit of content, normalized by every source.

    kind is "feed" for RSS entries (identity from title/link/timestamp) and
    "web" for scraped posts (identity from platform/account/text/timestamp).
    """
    title: str
    body: str
    link: str
    timestamp: Optional[str]
    source_label: str
    kind: str = KIND_FEED
    platform: str = "rss"
    account: Optional[str] = None
    feed_url: Optional[str] = None
    item_id: Optional[str] = None
    fetched_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def text(self) -> str:
        """Title and body joined, the text the keyword filter runs on."""
        return f"{self.title or ''} {self.body or ''}"

    @property
    def display_title(self) -> str:
        if self.kind == KIND_WEB:
            return f"{self.platform.upper()}: {self.text.strip()[:100]}..."
        return self.title or ""

    @property
    def display_source(self) -> str:
        if self.kind == KIND_WEB:
            return f"{self.source_label} ({self.platform})"
        return self.source_label
