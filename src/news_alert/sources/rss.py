# SPDX-License-Identifier: MIT
# src/news_alert/sources/rss.py
from __future__ import annotations
import logging
from typing import List, Optional

import feedparser

from ..models import CandidateItem, KIND_FEED, KIND_WEB
from ..utils.time_utils import to_iso_utc
from .base import BaseSource

logger = logging.getLogger(__name__)


class RSSSource(BaseSource):
    """
    RSS/Atom feed fetched with requests and parsed with feedparser.

    As a "feed" source (RSS pass) every entry becomes an item and the raw
    published string is kept as timestamp. As a "web" source (scrape pass)
    at most `limit` entries are read, titles of min_title_length characters
    or fewer are skipped and timestamps are normalized to ISO UTC.
    """

    def __init__(
        self,
        name: str,
        url: str,
        timeout: float = 10,
        user_agent: Optional[str] = None,
        kind: str = KIND_FEED,
        limit: Optional[int] = None,
        min_title_length: int = 0,
    ):
        super().__init__(name, url, timeout=timeout, user_agent=user_agent)
        self.kind = kind
        self.limit = limit
        self.min_title_length = min_title_length

    def parse(self, content: bytes) -> List[CandidateItem]:
        parsed = feedparser.parse(content)
        if parsed.bozo and not parsed.entries:
            raise ValueError(f"unparseable feed: {parsed.get('bozo_exception')}")

        entries = parsed.entries[: self.limit] if self.limit else parsed.entries
        items: List[CandidateItem] = []
        for e in entries:
            title = str(e.get("title", "")).strip()
            body = str(e.get("summary", "") or e.get("description", "")).strip()
            link = str(e.get("link", "")).strip()
            published = str(e.get("published", "") or e.get("updated", "")).strip()

            if self.kind == KIND_WEB:
                if len(title) <= self.min_title_length:
                    continue
                items.append(CandidateItem(
                    title=title,
                    body=body,
                    link=link,
                    timestamp=to_iso_utc(published) or "",
                    source_label=self.name,
                    kind=KIND_WEB,
                    platform="web",
                    account=self.name,
                    feed_url=self.url,
                ))
            else:
                items.append(CandidateItem(
                    title=title,
                    body=body,
                    link=link,
                    timestamp=published or None,
                    source_label=self.name,
                    feed_url=self.url,
                ))
        return items
