# SPDX-License-Identifier: MIT
# src/news_alert/config.py
from dataclasses import dataclass, asdict, field
import os
from pathlib import Path
from typing import Optional, Dict, Any

from dotenv import load_dotenv

# a local .env never overrides the real environment
load_dotenv(override=False)

DEFAULT_RSS_USER_AGENT = "West African Breaking News Alert System 1.0"
DEFAULT_SCRAPE_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default)


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        return float(v)
    except ValueError:
        return default


def _env_bool(name, default=False):
    v = os.getenv(name)
    if v is None: return default
    return str(v).strip().lower() in {"1","true","yes","y","on"}


def _default_log_level() -> str:
    explicit = os.getenv("LOG_LEVEL")
    if explicit:
        return explicit.upper()
    return "INFO" if _env("APP_ENV", "development") == "production" else "DEBUG"


@dataclass(frozen=True)
class Settings:
    # -------- General ----------
    app_env: str   = field(default_factory=lambda: _env("APP_ENV", "development"))
    log_level: str = field(default_factory=_default_log_level)

    # -------- Telegram ---------
    telegram_bot_token: str = field(default_factory=lambda: _env("TELEGRAM_BOT_TOKEN"))
    telegram_chat_id: str   = field(default_factory=lambda: _env("TELEGRAM_CHAT_ID"))

    # -------- Email ------------
    email_user: str      = field(default_factory=lambda: _env("EMAIL_USER"))
    email_pass: str      = field(default_factory=lambda: _env("EMAIL_PASS"))
    email_to: str        = field(default_factory=lambda: _env("EMAIL_TO"))
    email_smtp_host: str = field(default_factory=lambda: _env("EMAIL_SMTP_HOST", "localhost"))
    email_smtp_port: int = field(default_factory=lambda: _env_int("EMAIL_SMTP_PORT", 587))

    # -------- Intervals (minutes) -----
    rss_interval_minutes: int    = field(default_factory=lambda: _env_int("RSS_CHECK_INTERVAL", 30))
    social_interval_minutes: int = field(default_factory=lambda: _env_int("SOCIAL_CHECK_INTERVAL", 20))

    # -------- Rate limiting ----
    max_alerts_per_hour: int    = field(default_factory=lambda: _env_int("MAX_ALERTS_PER_HOUR", 12))
    alert_cooldown_minutes: int = field(default_factory=lambda: _env_int("ALERT_COOLDOWN_MINUTES", 5))

    # -------- Processed stores -
    data_dir: str                 = field(default_factory=lambda: _env("DATA_DIR", "./data"))
    store_max_size: int           = field(default_factory=lambda: _env_int("STORE_MAX_SIZE", 10000))
    store_target_size: int        = field(default_factory=lambda: _env_int("STORE_TARGET_SIZE", 5000))
    social_store_max_size: int    = field(default_factory=lambda: _env_int("SOCIAL_STORE_MAX_SIZE", 5000))
    social_store_target_size: int = field(default_factory=lambda: _env_int("SOCIAL_STORE_TARGET_SIZE", 2500))

    # -------- Fetching ---------
    rss_timeout_secs: float = field(default_factory=lambda: _env_float("RSS_TIMEOUT_SECS", 10.0))
    rss_user_agent: str     = field(default_factory=lambda: _env("RSS_USER_AGENT", DEFAULT_RSS_USER_AGENT))
    feed_delay_secs: float  = field(default_factory=lambda: _env_float("FEED_DELAY_SECS", 1.0))

    scraping_enabled: bool        = field(default_factory=lambda: _env_bool("ENABLE_SCRAPING", False))
    scrape_timeout_secs: float    = field(default_factory=lambda: _env_float("SCRAPE_TIMEOUT_SECS", 15.0))
    scrape_user_agent: str        = field(default_factory=lambda: _env("SCRAPE_USER_AGENT", DEFAULT_SCRAPE_USER_AGENT))
    scrape_delay_secs: float      = field(default_factory=lambda: _env_float("SCRAPE_DELAY_SECS", 2.0))
    scrape_require_breaking: bool = field(default_factory=lambda: _env_bool("SCRAPE_REQUIRE_BREAKING", True))

    # -------- Dispatch pacing --
    rss_alert_delay_secs: float    = field(default_factory=lambda: _env_float("RSS_ALERT_DELAY_SECS", 2.0))
    social_alert_delay_secs: float = field(default_factory=lambda: _env_float("SOCIAL_ALERT_DELAY_SECS", 3.0))

    # -------- Overrides --------
    keywords_file: Optional[str] = field(default_factory=lambda: os.getenv("KEYWORDS_FILE") or None)
    feeds_file: Optional[str]    = field(default_factory=lambda: os.getenv("FEEDS_FILE") or None)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    @property
    def email_enabled(self) -> bool:
        return bool(self.email_user and self.email_pass and self.email_to)

    @property
    def any_channel_enabled(self) -> bool:
        return self.telegram_enabled or self.email_enabled

    @property
    def processed_file(self) -> Path:
        return Path(self.data_dir) / "processed.json"

    @property
    def processed_social_file(self) -> Path:
        return Path(self.data_dir) / "processed_social.json"

    # helper: convert to dict (useful for logging)
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_safe_dict(self) -> Dict[str, Any]:
        """Like to_dict(), with credentials masked."""
        d = self.to_dict()
        for k in ("telegram_bot_token", "email_pass"):
            if d.get(k):
                d[k] = "***"
        return d

    @staticmethod
    def from_overrides(**kwargs) -> "Settings":
        """
        Build Settings and apply runtime overrides (e.g., parsed CLI flags).
        Only keys that match fields will be overridden.
        """
        base = Settings()
        current = base.to_dict()
        current.update({k: v for k, v in kwargs.items() if k in current and v is not None})
        # rebuild frozen dataclass with updates
        return Settings(**current)  # type: ignore[arg-type]
