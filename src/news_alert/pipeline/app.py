# SPDX-License-Identifier: MIT
# src/news_alert/pipeline/app.py
"""
NewsAlertSystem wires the pieces together and owns their lifecycle:

    construct -> initialize() (load stores, test channels, prime RSS store)
              -> process_new_articles() / process_social_posts() per schedule
              -> shutdown() (save stores, close channels)

Everything is built from Settings unless injected, so tests can swap in fake
channels, sources and a no-op sleep.
"""
from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Any, List, Optional, Sequence

from ..alerts.delivery import DeliveryResult, EmailChannel, NotificationChannel, TelegramChannel
from ..alerts.orchestration import AlertOrchestrator
from ..alerts.rate_limiter import RateLimiter
from ..alerts.store import ProcessedStore
from ..config import Settings
from ..feeds import FeedCatalog, load_feeds
from ..filtering.matcher import KeywordMatcher
from ..keywords import KeywordSet, load_keywords
from ..models import KIND_WEB
from ..sources.base import BaseSource
from ..sources.rss import RSSSource
from ..sources.web import WebPageSource
from ..utils.time_utils import format_duration, now_utc_iso
from .monitor import FeedMonitor

logger = logging.getLogger(__name__)

STATUS_INTERVAL_SECS = 6 * 3600
CLEANUP_HOUR = 2
FIRST_RSS_DELAY_SECS = 5
FIRST_SOCIAL_DELAY_SECS = 15
SCRAPE_FEED_LIMIT = 20
SCRAPE_MIN_TITLE_LENGTH = 10


def build_channels(settings: Settings) -> List[NotificationChannel]:
    return [
        TelegramChannel(settings.telegram_bot_token, settings.telegram_chat_id),
        EmailChannel(
            settings.email_user,
            settings.email_pass,
            settings.email_to,
            host=settings.email_smtp_host,
            port=settings.email_smtp_port,
        ),
    ]


def build_rss_sources(settings: Settings, catalog: FeedCatalog) -> List[BaseSource]:
    return [
        RSSSource(f.name, f.url, timeout=settings.rss_timeout_secs, user_agent=settings.rss_user_agent)
        for f in catalog.feeds
    ]


def build_scrape_sources(settings: Settings, catalog: FeedCatalog) -> List[BaseSource]:
    """The RSS feeds read as web posts, then the HTML fallback pages."""
    sources: List[BaseSource] = [
        RSSSource(
            f.name,
            f.url,
            timeout=settings.scrape_timeout_secs,
            user_agent=settings.scrape_user_agent,
            kind=KIND_WEB,
            limit=SCRAPE_FEED_LIMIT,
            min_title_length=SCRAPE_MIN_TITLE_LENGTH,
        )
        for f in catalog.feeds
    ]
    sources += [
        WebPageSource(
            p.name,
            p.url,
            timeout=settings.scrape_timeout_secs,
            user_agent=settings.scrape_user_agent,
            min_title_length=SCRAPE_MIN_TITLE_LENGTH,
        )
        for p in catalog.web_pages
    ]
    return sources


def next_daily_run(now: float, hour: int = CLEANUP_HOUR, minute: int = 0) -> float:
    """Epoch seconds of the next local hour:minute strictly after now."""
    current = datetime.fromtimestamp(now)
    target = current.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= current:
        target += timedelta(days=1)
    return target.timestamp()


@dataclass
class _Job:
    name: str
    func: Callable[[], Any]
    next_run: float
    reschedule: Callable[[float], float]


class NewsAlertSystem:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        keywords: Optional[KeywordSet] = None,
        catalog: Optional[FeedCatalog] = None,
        channels: Optional[Sequence[NotificationChannel]] = None,
        rss_sources: Optional[Sequence[BaseSource]] = None,
        scrape_sources: Optional[Sequence[BaseSource]] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ):
        s = settings or Settings()
        self.settings = s
        self.keywords = keywords or load_keywords(s.keywords_file)
        self.catalog = catalog or load_feeds(s.feeds_file)
        self._clock = clock

        self.store = ProcessedStore(
            s.processed_file, max_size=s.store_max_size, target_size=s.store_target_size, list_key="articles"
        )
        self.social_store = ProcessedStore(
            s.processed_social_file,
            max_size=s.social_store_max_size,
            target_size=s.social_store_target_size,
            list_key="posts",
        )
        self.rate_limiter = RateLimiter(s.max_alerts_per_hour, s.alert_cooldown_minutes, clock=clock)
        self.channels = list(channels) if channels is not None else build_channels(s)
        self.orchestrator = AlertOrchestrator(
            self.channels, self.rate_limiter, inter_item_delay=s.rss_alert_delay_secs, sleep=sleep
        )

        self.rss_monitor = FeedMonitor(
            "rss",
            rss_sources if rss_sources is not None else build_rss_sources(s, self.catalog),
            self.store,
            KeywordMatcher(self.keywords),
            source_delay=s.feed_delay_secs,
            sleep=sleep,
        )
        self.social_monitor = FeedMonitor(
            "web",
            scrape_sources if scrape_sources is not None else build_scrape_sources(s, self.catalog),
            self.social_store,
            KeywordMatcher(self.keywords, require_breaking=s.scrape_require_breaking),
            source_delay=s.scrape_delay_secs,
            sleep=sleep,
        )

        self._pass_lock = threading.Lock()
        self._stop_event = threading.Event()
        self.is_running = False
        self.start_time = clock()
        self.total_articles_processed = 0
        self.total_social_posts_processed = 0
        self.last_run_time: Optional[str] = None
        self.last_social_run_time: Optional[str] = None

    # ------------------------------------------------------------ lifecycle
    def initialize(self, test_connections: bool = True, initial_check: bool = True) -> None:
        s = self.settings
        logger.info("Initializing West African News Alert System...")
        logger.info("Configuration:")
        logger.info(f"   - RSS Check Interval: {s.rss_interval_minutes} minutes")
        logger.info(f"   - Social Check Interval: {s.social_interval_minutes} minutes")
        logger.info(f"   - Telegram Enabled: {s.telegram_enabled}")
        logger.info(f"   - Email Enabled: {s.email_enabled}")
        logger.info(f"   - Web Scraping Enabled: {s.scraping_enabled}")
        logger.info(f"   - Rate Limit: {s.max_alerts_per_hour} alerts/hour")
        logger.info(f"   - Environment: {s.app_env}")

        if not self.orchestrator.enabled_channels:
            logger.warning("No notification methods configured. Alerts go to the console only.")

        self.store.load()
        self.social_store.load()

        if test_connections:
            self.test_connections()

        if initial_check:
            # primes the store: items already live at startup are not alerted
            logger.info("Running initial RSS feed check...")
            with self._pass_lock:
                result = self.rss_monitor.run_pass()
            logger.info(f"Initial check completed. Found {result.matched} matching article(s).")
            for n, item in enumerate(result.items[:3], start=1):
                logger.info(f"   {n}. {item.title[:80]}... ({item.source_label})")

        self.is_running = True
        logger.info("West African News Alert System initialized")

    def test_connections(self) -> Dict[str, DeliveryResult]:
        results: Dict[str, DeliveryResult] = {}
        for ch in self.orchestrator.enabled_channels:
            logger.info(f"Testing {ch.name} connection...")
            try:
                res = ch.test_connection()
            except Exception as e:
                logger.error(f"{ch.name} connection test raised: {e}", exc_info=True)
                res = DeliveryResult(ch.name, False, error=str(e))
            if res.success:
                logger.info(f"{ch.name} connected successfully")
            else:
                logger.error(f"{ch.name} connection failed: {res.error}")
            results[ch.name] = res
        return results

    def stop(self) -> None:
        self.is_running = False
        self._stop_event.set()
        logger.info("News Alert System stopped.")

    def shutdown(self) -> None:
        logger.info("Shutting down West African News Alert System...")
        self.stop()
        with self._pass_lock:
            self.store.save()
            self.social_store.save()
        for ch in self.channels:
            try:
                ch.close()
            except Exception as e:
                logger.error(f"Error closing {ch.name}: {e}")
        logger.info("All services shut down")

    # --------------------------------------------------------------- passes
    def process_new_articles(self) -> Optional[Dict[str, Any]]:
        if not self.is_running:
            logger.debug("System not running, skipping article processing")
            return None
        try:
            with self._pass_lock:
                logger.info("Starting scheduled news check...")
                self.last_run_time = now_utc_iso()
                result = self.rss_monitor.run_pass()
                self.total_articles_processed += result.matched
                if not result.items:
                    logger.info("No new West African breaking news found.")
                    return {"pass": result.to_dict(), "dispatch": None}
                logger.info(f"Found {result.matched} new West African news article(s)")
                stats = self.orchestrator.dispatch(result.items, delay=self.settings.rss_alert_delay_secs)
            return {"pass": result.to_dict(), "dispatch": stats.to_dict()}
        except Exception as e:
            logger.error(f"Error processing articles: {e}", exc_info=True)
            return None

    def process_social_posts(self) -> Optional[Dict[str, Any]]:
        if not self.is_running or not self.settings.scraping_enabled:
            logger.debug("Web scraping pass skipped - disabled or system not running")
            return None
        try:
            with self._pass_lock:
                logger.info("Starting web scraping pass...")
                self.last_social_run_time = now_utc_iso()
                result = self.social_monitor.run_pass()
                self.total_social_posts_processed += result.matched
                if not result.items:
                    logger.info("No new web news found.")
                    return {"pass": result.to_dict(), "dispatch": None}
                logger.info(f"Found {result.matched} new web news alert(s)")
                stats = self.orchestrator.dispatch(result.items, delay=self.settings.social_alert_delay_secs)
            return {"pass": result.to_dict(), "dispatch": stats.to_dict()}
        except Exception as e:
            logger.error(f"Error processing web posts: {e}", exc_info=True)
            return None

    def run_cleanup(self) -> Dict[str, int]:
        logger.info("Running daily cleanup...")
        with self._pass_lock:
            dropped = {"articles": self.store.cleanup()}
            if self.settings.scraping_enabled:
                dropped["posts"] = self.social_store.cleanup()
        return dropped

    # --------------------------------------------------------------- status
    def get_status(self) -> Dict[str, Any]:
        orch = self.orchestrator.get_stats()
        return {
            "is_running": self.is_running,
            "uptime": format_duration(self._clock() - self.start_time),
            "total_alerts_sent": orch["total_alerts_sent"],
            "total_alerts_attempted": orch["total_alerts_attempted"],
            "channel_alerts_sent": orch["channel_success"],
            "total_articles_processed": self.total_articles_processed,
            "total_social_posts_processed": self.total_social_posts_processed,
            "total_processed": len(self.store),
            "total_social_processed": len(self.social_store),
            "rate_limiter": self.rate_limiter.get_stats(),
            "channels": [ch.get_stats() for ch in self.channels],
            "scraping_enabled": self.settings.scraping_enabled,
            "last_run_time": self.last_run_time,
            "last_social_run_time": self.last_social_run_time,
        }

    def print_status(self) -> Dict[str, Any]:
        st = self.get_status()
        rl = st["rate_limiter"]
        logger.info("SYSTEM STATUS REPORT")
        logger.info("-" * 50)
        logger.info(f"Uptime: {st['uptime']}")
        logger.info(f"Total Alerts Sent: {st['total_alerts_sent']}")
        for name, count in st["channel_alerts_sent"].items():
            logger.info(f"{name.capitalize()} Alerts: {count}")
        logger.info(f"RSS Articles Processed: {st['total_articles_processed']}")
        logger.info(f"Web Posts Processed: {st['total_social_posts_processed']}")
        logger.info(f"Total RSS Articles in DB: {st['total_processed']}")
        logger.info(f"Total Web Posts in DB: {st['total_social_processed']}")
        logger.info(f"Rate Limiter: {rl['alerts_in_last_hour']}/{rl['max_per_hour']} alerts/hour")
        logger.info(f"Can Send Alert: {'Yes' if rl['can_send_now'] else 'No'}")
        for ch in st["channels"]:
            logger.info(f"{ch['name'].capitalize()} Status: {'Enabled' if ch['enabled'] else 'Disabled'}")
        logger.info(f"Web Scraping: {'Enabled' if st['scraping_enabled'] else 'Disabled'}")
        logger.info(f"Last RSS Run: {st['last_run_time'] or 'Never'}")
        logger.info(f"Last Web Run: {st['last_social_run_time'] or 'Never'}")
        logger.info("-" * 50)
        return st

    def send_status_update(self) -> Dict[str, DeliveryResult]:
        stats = self.get_status()
        results: Dict[str, DeliveryResult] = {}
        for ch in self.orchestrator.enabled_channels:
            results[ch.name] = ch.send_status_update(stats)
        if not results:
            logger.info("No channel enabled; status only logged")
            self.print_status()
        return results

    # ------------------------------------------------------------ scheduler
    def build_schedule(self, now: float) -> List[_Job]:
        s = self.settings
        rss_every = s.rss_interval_minutes * 60
        jobs = [
            _Job("rss", self.process_new_articles, now + FIRST_RSS_DELAY_SECS, lambda t: t + rss_every),
            _Job("cleanup", self.run_cleanup, next_daily_run(now), next_daily_run),
            _Job("status", self.print_status, now + STATUS_INTERVAL_SECS, lambda t: t + STATUS_INTERVAL_SECS),
        ]
        if s.scraping_enabled:
            social_every = s.social_interval_minutes * 60
            jobs.append(
                _Job("web", self.process_social_posts, now + FIRST_SOCIAL_DELAY_SECS, lambda t: t + social_every)
            )
        return jobs

    def run_forever(self, poll_secs: float = 1.0) -> None:
        """Block and run the schedule until stop() is called."""
        if not self.is_running:
            logger.error("System not initialized. Call initialize() first.")
            return

        jobs = self.build_schedule(self._clock())
        logger.info(f"RSS monitoring scheduled every {self.settings.rss_interval_minutes} minutes")
        if self.settings.scraping_enabled:
            logger.info(f"Web scraping scheduled every {self.settings.social_interval_minutes} minutes")
        logger.info("News Alert System is now running. Press Ctrl+C to stop...")

        while not self._stop_event.is_set():
            now = self._clock()
            for job in jobs:
                if self._stop_event.is_set():
                    break
                if now >= job.next_run:
                    try:
                        job.func()
                    except Exception as e:
                        logger.error(f"Scheduled job {job.name} failed: {e}", exc_info=True)
                    job.next_run = job.reschedule(self._clock())
            wait = min(j.next_run for j in jobs) - self._clock()
            self._stop_event.wait(max(0.0, min(wait, poll_secs)))
