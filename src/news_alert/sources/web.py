# SPDX-License-Identifier: MIT
# src/news_alert/sources/web.py
from __future__ import annotations
import logging
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..models import CandidateItem, KIND_WEB
from .base import BaseSource

logger = logging.getLogger(__name__)

ARTICLE_SELECTORS = [
    "article",
    ".article",
    ".news-item",
    ".post",
    ".story",
    '[class*="article"]',
    '[class*="news"]',
    '[class*="story"]',
]
TITLE_SELECTOR = 'h1, h2, h3, .title, [class*="title"], [class*="headline"]'
BODY_SELECTOR = 'p, .content, .summary, [class*="content"], [class*="summary"]'


class WebPageSource(BaseSource):
    """
    Generic news page scraper.

    Tries ARTICLE_SELECTORS in order, reads at most per_selector blocks for
    each, and stops at the first selector that produced any item. Scraped
    pages carry no publication time, so timestamp is left empty.
    """

    def __init__(
        self,
        name: str,
        url: str,
        timeout: float = 15,
        user_agent: Optional[str] = None,
        per_selector: int = 10,
        min_title_length: int = 10,
        max_body_length: int = 500,
    ):
        super().__init__(name, url, timeout=timeout, user_agent=user_agent)
        self.per_selector = per_selector
        self.min_title_length = min_title_length
        self.max_body_length = max_body_length

    def headers(self):
        h = super().headers()
        h["Accept"] = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
        return h

    def _absolute(self, href: Optional[str]) -> str:
        if not href:
            return self.url
        if href.startswith("http"):
            return href
        return urljoin(self.url, href)

    def parse(self, content: bytes) -> List[CandidateItem]:
        soup = BeautifulSoup(content, "html.parser")
        items: List[CandidateItem] = []

        for sel in ARTICLE_SELECTORS:
            for block in soup.select(sel, limit=self.per_selector):
                title_el = block.select_one(TITLE_SELECTOR)
                title = title_el.get_text(" ", strip=True) if title_el else ""
                if len(title) <= self.min_title_length:
                    continue
                body = " ".join(el.get_text(" ", strip=True) for el in block.select(BODY_SELECTOR))
                anchor = block.find("a")
                items.append(CandidateItem(
                    title=title,
                    body=body.strip()[: self.max_body_length],
                    link=self._absolute(anchor.get("href") if anchor else None),
                    timestamp="",
                    source_label=self.name,
                    kind=KIND_WEB,
                    platform="web",
                    account=self.name,
                    feed_url=self.url,
                ))
            if items:
                logger.debug(f"[{self.name}] selector {sel!r} yielded {len(items)} item(s)")
                break
        return items
