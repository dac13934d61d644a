# SPDX-License-Identifier: MIT
# src/news_alert/pipeline/monitor.py
"""
One fetch pass: sources -> identity/dedup -> keyword filter -> store.

Every unseen item is marked processed whether or not it matched, so a
rejected item is never re-evaluated even if the keyword lists change later.
The store is saved once at the end of the pass.
"""
from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field, asdict
from typing import Callable, Dict, Any, List, Sequence

from ..alerts.identity import item_id
from ..alerts.store import ProcessedStore
from ..filtering.matcher import KeywordMatcher
from ..models import CandidateItem
from ..sources.base import BaseSource

logger = logging.getLogger(__name__)


@dataclass
class PassResult:
    items: List[CandidateItem] = field(default_factory=list)
    sources_checked: int = 0
    sources_failed: int = 0
    fetched: int = 0
    already_seen: int = 0
    rejected: int = 0
    duration_secs: float = 0.0

    @property
    def matched(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d.pop("items")
        d["matched"] = self.matched
        return d


class FeedMonitor:
    """
    Runs fetch passes over a fixed list of sources against one store.

    Args:
        name: Label used in logs ("rss", "web")
        sources: Sources, read in order
        store: Processed-item store for this pass kind
        matcher: Keyword filter
        source_delay: Pause (seconds) between two sources
        sleep: Sleep function (injectable for tests)
    """

    def __init__(
        self,
        name: str,
        sources: Sequence[BaseSource],
        store: ProcessedStore,
        matcher: KeywordMatcher,
        source_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.name = name
        self.sources = list(sources)
        self.store = store
        self.matcher = matcher
        self.source_delay = source_delay
        self._sleep = sleep

    def run_pass(self) -> PassResult:
        logger.info(f"[{self.name}] Checking {len(self.sources)} source(s)...")
        started = time.monotonic()
        result = PassResult()

        for idx, source in enumerate(self.sources):
            if idx > 0 and self.source_delay > 0:
                self._sleep(self.source_delay)

            try:
                fetched = source.fetch()
            except Exception as e:
                # sources already swallow their own errors; this is a last guard
                logger.error(f"[{self.name}] Source {source.name} failed: {e}", exc_info=True)
                fetched = []
                result.sources_failed += 1
            result.sources_checked += 1
            result.fetched += len(fetched)

            new_matches = 0
            for item in fetched:
                key = item_id(item)
                item.item_id = key
                if not self.store.add(key):
                    result.already_seen += 1
                    continue
                if self.matcher.filter_item(item):
                    result.items.append(item)
                    new_matches += 1
                    logger.info(f"[{self.name}] Found matching item: {item.title[:80]} ({source.name})")
                else:
                    result.rejected += 1

            if fetched:
                logger.debug(f"[{self.name}] {source.name}: {len(fetched)} fetched, {new_matches} new match(es)")

        self.store.save()
        result.duration_secs = round(time.monotonic() - started, 2)
        logger.info(
            f"[{self.name}] Pass complete in {result.duration_secs}s: {result.fetched} fetched, "
            f"{result.already_seen} already seen, {result.matched} matching"
        )
        return result

    def get_stats(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "sources": len(self.sources),
            **self.store.get_stats(),
        }
