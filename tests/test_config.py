# tests/test_config.py
from pathlib import Path

from news_alert.config import Settings

ENV_KEYS = [
    "APP_ENV", "LOG_LEVEL", "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID", "EMAIL_USER", "EMAIL_PASS",
    "EMAIL_TO", "MAX_ALERTS_PER_HOUR", "ENABLE_SCRAPING", "DATA_DIR", "FEED_DELAY_SECS",
]


def _clean_env(monkeypatch):
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)


def test_defaults(monkeypatch):
    _clean_env(monkeypatch)
    s = Settings()
    assert s.app_env == "development"
    assert s.log_level == "DEBUG"
    assert s.max_alerts_per_hour == 12
    assert s.alert_cooldown_minutes == 5
    assert s.rss_interval_minutes == 30
    assert s.social_interval_minutes == 20
    assert (s.store_max_size, s.store_target_size) == (10000, 5000)
    assert (s.social_store_max_size, s.social_store_target_size) == (5000, 2500)
    assert s.scraping_enabled is False
    assert s.scrape_require_breaking is True
    assert not s.any_channel_enabled
    assert s.processed_file == Path("./data") / "processed.json"
    assert s.processed_social_file == Path("./data") / "processed_social.json"


def test_environment_values(monkeypatch):
    _clean_env(monkeypatch)
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("MAX_ALERTS_PER_HOUR", "3")
    monkeypatch.setenv("ENABLE_SCRAPING", "true")
    monkeypatch.setenv("FEED_DELAY_SECS", "0.5")
    monkeypatch.setenv("DATA_DIR", "/tmp/alerts")
    s = Settings()
    assert s.is_production
    assert s.log_level == "INFO"
    assert s.max_alerts_per_hour == 3
    assert s.scraping_enabled is True
    assert s.feed_delay_secs == 0.5
    assert s.processed_file == Path("/tmp/alerts/processed.json")


def test_bad_numbers_fall_back(monkeypatch):
    _clean_env(monkeypatch)
    monkeypatch.setenv("MAX_ALERTS_PER_HOUR", "lots")
    assert Settings().max_alerts_per_hour == 12


def test_channel_flags_need_all_credentials(monkeypatch):
    _clean_env(monkeypatch)
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "t")
    assert not Settings().telegram_enabled
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "c")
    assert Settings().telegram_enabled

    monkeypatch.setenv("EMAIL_USER", "u")
    monkeypatch.setenv("EMAIL_PASS", "p")
    assert not Settings().email_enabled
    monkeypatch.setenv("EMAIL_TO", "to@example.com")
    assert Settings().email_enabled


def test_overrides_and_masking(monkeypatch):
    _clean_env(monkeypatch)
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "secret-token")
    s = Settings.from_overrides(data_dir="/var/lib/alerts", log_level=None, unknown="x")
    assert s.data_dir == "/var/lib/alerts"
    assert s.log_level == "DEBUG"
    assert s.to_safe_dict()["telegram_bot_token"] == "***"
    assert s.to_dict()["telegram_bot_token"] == "secret-token"
