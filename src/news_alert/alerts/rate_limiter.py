# SPDX-License-Identifier: MIT
# src/news_alert/alerts/rate_limiter.py
"""
Gate on alert dispatch: a rolling one-hour cap plus a minimum cooldown.

State lives in memory only and resets on restart.
"""
from __future__ import annotations
import logging
import math
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Any, List, Optional

logger = logging.getLogger(__name__)

WINDOW_SECS = 60 * 60


class RateLimiter:
    """
    Tracks dispatch timestamps over the last hour and the time of the last
    dispatch.

    The limiter gates attempts, not confirmed deliveries: record_alert() is
    called once per item that passed can_send_alert(), whatever the channels
    later report.
    """

    def __init__(
        self,
        max_per_hour: int = 12,
        cooldown_minutes: float = 5,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            max_per_hour: Max alerts within any rolling 60 minutes
            cooldown_minutes: Minimum gap between two alerts
            clock: Returns the current time in epoch seconds (injectable for tests)
        """
        self.max_per_hour = max_per_hour
        self.cooldown_minutes = cooldown_minutes
        self._clock = clock
        self._alerts: List[float] = []
        self.last_alert_time: Optional[float] = None
        self._lock = threading.Lock()

    @property
    def cooldown_secs(self) -> float:
        return self.cooldown_minutes * 60

    def _prune_locked(self, now: float) -> None:
        cutoff = now - WINDOW_SECS
        self._alerts = [t for t in self._alerts if t > cutoff]

    def can_send_alert(self) -> bool:
        """Prune the window, then check the hourly cap and the cooldown."""
        with self._lock:
            now = self._clock()
            self._prune_locked(now)

            if len(self._alerts) >= self.max_per_hour:
                logger.warning(
                    f"Rate limit exceeded: {len(self._alerts)}/{self.max_per_hour} alerts in the last hour"
                )
                return False

            if self.last_alert_time is not None and (now - self.last_alert_time) < self.cooldown_secs:
                remaining = math.ceil((self.cooldown_secs - (now - self.last_alert_time)) / 60)
                logger.debug(f"Cooldown active: {remaining} minutes remaining")
                return False

            return True

    def record_alert(self) -> None:
        with self._lock:
            now = self._clock()
            self._alerts.append(now)
            self.last_alert_time = now
            logger.debug(f"Alert recorded. Total in last hour: {len(self._alerts)}/{self.max_per_hour}")

    def get_stats(self) -> Dict[str, Any]:
        """Read-only snapshot; never records and never mutates the window."""
        with self._lock:
            now = self._clock()
            recent = [t for t in self._alerts if t > now - WINDOW_SECS]
            in_cooldown = (
                self.last_alert_time is not None
                and (now - self.last_alert_time) < self.cooldown_secs
            )
            last = (
                datetime.fromtimestamp(self.last_alert_time, tz=timezone.utc).isoformat()
                if self.last_alert_time is not None
                else None
            )
            return {
                "alerts_in_last_hour": len(recent),
                "max_per_hour": self.max_per_hour,
                "can_send_now": len(recent) < self.max_per_hour and not in_cooldown,
                "last_alert_time": last,
            }
