# SPDX-License-Identifier: MIT
# src/news_alert/feeds.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

# Structure: "key": {"name": display name, "urls": [feed urls]}
RSS_FEEDS: Dict[str, Dict] = {
    "bbc": {
        "name": "BBC",
        "urls": [
            "http://feeds.bbci.co.uk/news/rss.xml",
            "http://feeds.bbci.co.uk/news/world/rss.xml",
            "http://feeds.bbci.co.uk/news/world/africa/rss.xml",
        ],
    },
    "cnn": {
        "name": "CNN",
        "urls": [
            "http://rss.cnn.com/rss/edition.rss",
            "http://rss.cnn.com/rss/edition_world.rss",
            "http://rss.cnn.com/rss/edition_africa.rss",
        ],
    },
    # Reuters and AP no longer publish RSS, Google News search stands in
    "reuters_via_google": {
        "name": "Reuters (via Google News)",
        "urls": [
            "https://news.google.com/rss/search?q=when:24h+allinurl:reuters.com&ceid=US:en&hl=en-US&gl=US",
        ],
    },
    "ap_via_google": {
        "name": "AP News (via Google News)",
        "urls": [
            "https://news.google.com/rss/search?q=when:24h+allinurl:apnews.com&ceid=US:en&hl=en-US&gl=US",
        ],
    },
    "aljazeera": {
        "name": "Al Jazeera",
        "urls": ["https://www.aljazeera.com/xml/rss/all.xml"],
    },
    "dw": {
        "name": "Deutsche Welle",
        "urls": ["https://rss.dw.com/xml/rss-en-all"],
    },
    "rfi": {
        "name": "RFI",
        "urls": ["https://www.rfi.fr/fr/afrique/rss"],
    },
    "cgtn": {
        "name": "CGTN",
        "urls": ["https://www.cgtn.com/subscribe/rss/section/world.xml"],
    },
    "euronews": {
        "name": "Euronews",
        "urls": ["https://www.euronews.com/rss?format=mrss"],
    },
}

# HTML pages scraped when the scrape pass is enabled
WEB_PAGES: List[Dict[str, str]] = [
    {"name": "BBC Africa Fallback", "url": "https://www.bbc.com/news/world/africa"},
]


@dataclass(frozen=True)
class FeedSpec:
    name: str
    url: str


@dataclass(frozen=True)
class FeedCatalog:
    feeds: List[FeedSpec] = field(default_factory=list)
    web_pages: List[FeedSpec] = field(default_factory=list)


def _flatten_feeds(feeds: Dict[str, Dict], source: str = "built-in") -> List[FeedSpec]:
    if not isinstance(feeds, dict):
        raise ValueError(f"Feeds file {source}: 'feeds' must be a mapping of feed key to entry")
    out: List[FeedSpec] = []
    for key, cfg in feeds.items():
        if not isinstance(cfg, dict):
            raise ValueError(f"Feeds file {source}: feed {key!r} must be a mapping with 'name' and 'urls'")
        urls = cfg.get("urls") or []
        if not isinstance(urls, list) or not all(isinstance(u, str) for u in urls):
            raise ValueError(f"Feeds file {source}: 'urls' of feed {key!r} must be a list of strings")
        name = cfg.get("name") or key
        for url in urls:
            out.append(FeedSpec(name=str(name), url=url))
    return out


def _web_pages(pages: List[Dict], source: str = "built-in") -> List[FeedSpec]:
    if not isinstance(pages, list):
        raise ValueError(f"Feeds file {source}: 'web_pages' must be a list")
    out: List[FeedSpec] = []
    for idx, pg in enumerate(pages):
        if not isinstance(pg, dict) or not isinstance(pg.get("name"), str) or not isinstance(pg.get("url"), str):
            raise ValueError(f"Feeds file {source}: web_pages[{idx}] needs string 'name' and 'url'")
        out.append(FeedSpec(name=pg["name"], url=pg["url"]))
    return out


def load_feeds(path: Optional[Union[str, Path]] = None) -> FeedCatalog:
    """
    Build the feed catalog from the built-in lists, or from a YAML file with
    ``feeds`` (same shape as RSS_FEEDS) and ``web_pages`` (list of name/url).
    A malformed entry raises ValueError.
    """
    feeds = RSS_FEEDS
    pages = WEB_PAGES
    source = "built-in"
    if path:
        p = Path(path)
        source = str(p)
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Feeds file {p} must contain a mapping, got {type(data).__name__}")
        feeds = data.get("feeds") or RSS_FEEDS
        pages = data.get("web_pages") or WEB_PAGES
        logger.info(f"Loaded feed configuration from {p}")

    return FeedCatalog(
        feeds=_flatten_feeds(feeds, source),
        web_pages=_web_pages(pages, source),
    )
