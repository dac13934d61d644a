# SPDX-License-Identifier: MIT
# src/news_alert/alerts/orchestration.py
"""
Alert orchestration - rate-limit gate, fan-out to channels, pacing, stats.
"""
from __future__ import annotations
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, asdict
from typing import Callable, Dict, Any, Iterable, List, Optional, Sequence

from ..models import CandidateItem
from . import formatting
from .delivery import DeliveryResult, NotificationChannel
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


@dataclass
class AlertOutcome:
    item: CandidateItem
    success: bool
    results: List[DeliveryResult] = field(default_factory=list)
    console_only: bool = False

    @property
    def error(self) -> Optional[str]:
        if self.success:
            return None
        errors = [r.error for r in self.results if r.error]
        return "; ".join(errors) or "All notification methods failed"


@dataclass
class DispatchStats:
    items_received: int = 0
    alerts_attempted: int = 0
    alerts_sent: int = 0
    alerts_failed: int = 0
    rate_limited: int = 0
    channel_success: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AlertOrchestrator:
    """
    Dispatches qualifying, already-deduplicated items in order:

    1. Ask the rate limiter; on refusal stop the pass (remaining items stay
       marked as processed upstream and are not retried).
    2. Send to every enabled channel concurrently and wait for all of them.
       The item counts as sent if at least one channel succeeded.
    3. Record exactly one attempt with the rate limiter per item.
    4. Pause between items so providers are not hit in bursts.

    With no channel enabled, alerts degrade to a console log.
    """

    def __init__(
        self,
        channels: Sequence[NotificationChannel],
        rate_limiter: RateLimiter,
        inter_item_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            channels: Notification channels (disabled ones are skipped)
            rate_limiter: Shared rate limiter
            inter_item_delay: Default pause (seconds) between two dispatches
            sleep: Sleep function (injectable for tests)
        """
        self.channels = list(channels)
        self.rate_limiter = rate_limiter
        self.inter_item_delay = inter_item_delay
        self._sleep = sleep
        self._counter_lock = threading.Lock()
        self.channel_success: Dict[str, int] = {ch.name: 0 for ch in self.channels}
        self.channel_failure: Dict[str, int] = {ch.name: 0 for ch in self.channels}
        self.total_alerts_attempted = 0
        self.total_alerts_sent = 0

    @property
    def enabled_channels(self) -> List[NotificationChannel]:
        return [ch for ch in self.channels if ch.enabled]

    # ----------------------------------------------------------- single item
    def _deliver_one(self, channel: NotificationChannel, item: CandidateItem) -> DeliveryResult:
        try:
            result = channel.send_alert(item)
        except Exception as e:
            logger.error(f"{channel.name} alert error: {e}", exc_info=True)
            result = DeliveryResult(channel.name, False, error=str(e))

        with self._counter_lock:
            if result.success:
                self.channel_success[channel.name] = self.channel_success.get(channel.name, 0) + 1
            else:
                self.channel_failure[channel.name] = self.channel_failure.get(channel.name, 0) + 1

        if result.success:
            logger.info(f"{channel.name} alert sent successfully")
        else:
            logger.error(f"{channel.name} alert failed: {result.error}")
        return result

    def send_alert(self, item: CandidateItem) -> AlertOutcome:
        """Send one item to all enabled channels; no rate-limit check here."""
        logger.info(f"Sending alert: {item.display_title[:60]}")
        channels = self.enabled_channels

        if not channels:
            logger.info("BREAKING NEWS ALERT (Console Only):")
            logger.info("-" * 50)
            logger.info(formatting.render_console_alert(item))
            logger.info("-" * 50)
            return AlertOutcome(item=item, success=True, console_only=True)

        if len(channels) == 1:
            results = [self._deliver_one(channels[0], item)]
        else:
            with ThreadPoolExecutor(max_workers=len(channels), thread_name_prefix="alert") as pool:
                futures = [pool.submit(self._deliver_one, ch, item) for ch in channels]
                results = [f.result() for f in futures]

        success_count = sum(1 for r in results if r.success)
        logger.info(
            f"Alert delivery summary: {success_count}/{len(results)} notifications sent successfully"
        )
        return AlertOutcome(item=item, success=success_count > 0, results=results)

    # ------------------------------------------------------------------ pass
    def dispatch(self, items: Iterable[CandidateItem], delay: Optional[float] = None) -> DispatchStats:
        """
        Dispatch items in order under the rate limit.

        Args:
            items: Qualifying, unseen items in fetch order
            delay: Pause between dispatches (defaults to inter_item_delay)

        Returns:
            Per-pass statistics
        """
        items = list(items)
        delay = self.inter_item_delay if delay is None else delay
        stats = DispatchStats(
            items_received=len(items),
            channel_success={ch.name: 0 for ch in self.enabled_channels},
        )

        for idx, item in enumerate(items):
            if not self.rate_limiter.can_send_alert():
                stats.rate_limited = len(items) - idx
                logger.warning(
                    f"Rate limit reached, {stats.rate_limited} remaining item(s) not alerted this pass"
                )
                break

            if stats.alerts_attempted > 0 and delay > 0:
                self._sleep(delay)

            outcome = self.send_alert(item)
            self.rate_limiter.record_alert()
            stats.alerts_attempted += 1
            with self._counter_lock:
                self.total_alerts_attempted += 1
                if outcome.success:
                    self.total_alerts_sent += 1

            if outcome.success:
                stats.alerts_sent += 1
            else:
                stats.alerts_failed += 1
                logger.error(f"Alert not delivered: {outcome.error}")
            for r in outcome.results:
                if r.success:
                    stats.channel_success[r.channel] = stats.channel_success.get(r.channel, 0) + 1

        logger.info(
            f"Dispatch complete: {stats.alerts_sent}/{stats.alerts_attempted} alerts sent, "
            f"{stats.rate_limited} rate-limited, {stats.items_received} received"
        )
        return stats

    def get_stats(self) -> Dict[str, Any]:
        with self._counter_lock:
            return {
                "total_alerts_attempted": self.total_alerts_attempted,
                "total_alerts_sent": self.total_alerts_sent,
                "channel_success": dict(self.channel_success),
                "channel_failure": dict(self.channel_failure),
            }
