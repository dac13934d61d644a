# SPDX-License-Identifier: MIT
# src/news_alert/filtering/matcher.py
"""
Keyword filter deciding whether a candidate item is alert-worthy.

Matching is plain case-insensitive substring containment. A short keyword can
therefore hit inside an unrelated word; the keyword lists are curated to live
with that rather than switching to word-boundary matching.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..keywords import KeywordSet
from ..models import CandidateItem

logger = logging.getLogger(__name__)


def contains_any(text: Optional[str], keywords: Iterable[str]) -> bool:
    """True if any keyword occurs in text, ignoring case."""
    if not text:
        return False
    upper = text.upper()
    return any(kw.upper() in upper for kw in keywords if kw)


def matches(
    text: Optional[str],
    breaking_keywords: Sequence[str],
    region_keywords: Sequence[str],
) -> bool:
    """True only if text holds a breaking keyword AND a region keyword."""
    if not text:
        return False
    return contains_any(text, breaking_keywords) and contains_any(text, region_keywords)


class KeywordMatcher:
    """
    Applies a KeywordSet to candidate items.

    With require_breaking=False only the region condition is checked; the web
    scrape pass can be configured that way.
    """

    def __init__(self, keywords: KeywordSet, require_breaking: bool = True):
        self.keywords = keywords
        self.require_breaking = require_breaking

    def is_match(self, text: Optional[str]) -> bool:
        if self.require_breaking:
            return matches(text, self.keywords.breaking, self.keywords.regions)
        return contains_any(text, self.keywords.regions)

    def filter_item(self, item: CandidateItem) -> bool:
        text = item.text
        has_breaking = contains_any(text, self.keywords.breaking)
        has_region = contains_any(text, self.keywords.regions)
        short = (item.title or "")[:60]

        if has_region and (has_breaking or not self.require_breaking):
            logger.debug(f"Item matches criteria: {short}")
            return True

        if has_breaking:
            logger.debug(f"Breaking news but no target region: {short}")
        elif has_region:
            logger.debug(f"Target region but not breaking: {short}")
        return False
