# SPDX-License-Identifier: MIT
# src/news_alert/alerts/identity.py
"""
Deterministic deduplication keys for candidate items.

Keys only need to be stable for identical input across runs; they are not a
security boundary.
"""
from __future__ import annotations

import hashlib
from typing import Optional

from ..models import CandidateItem, KIND_WEB

ID_LENGTH = 32
POST_TEXT_PREFIX = 100


def compute_id(*fields: Optional[str], n: int = ID_LENGTH) -> str:
    """Hash the ordered fields (None counts as empty) to a fixed-length hex key."""
    h = hashlib.sha256()
    for f in fields:
        h.update((f or "").encode("utf-8"))
        h.update(b"|")
    return h.hexdigest()[:n]


def article_id(title: Optional[str], link: Optional[str], timestamp: Optional[str]) -> str:
    return compute_id(title, link, timestamp)


def post_id(platform: str, account: Optional[str], text: Optional[str], timestamp: Optional[str]) -> str:
    return compute_id(platform, account, (text or "")[:POST_TEXT_PREFIX], timestamp)


def item_id(item: CandidateItem) -> str:
    """Key for an item, chosen by its kind."""
    if item.kind == KIND_WEB:
        return post_id(item.platform, item.account or item.source_label, item.title, item.timestamp)
    return article_id(item.title, item.link, item.timestamp)
