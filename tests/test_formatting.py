# tests/test_formatting.py
from datetime import datetime

from news_alert.alerts import formatting
from news_alert.models import KIND_WEB

from conftest import make_item

NOW = datetime(2024, 1, 1, 12, 0, 0)


def test_telegram_alert_layout():
    item = make_item(title="BREAKING: Nigeria_news *update*", source="Al Jazeera",
                     link="https://www.aljazeera.com/news/1")
    text = formatting.render_telegram_alert(item, NOW)

    assert text.startswith("🚨 *BREAKING: WEST AFRICAN NEWS ALERT*")
    assert "Nigeria\\_news \\*update\\*" in text
    assert "🌍 *Source:* AL JAZEERA" in text
    assert "*Domain:* aljazeera.com" in text
    assert "*Alert Time:* 2024-01-01 12:00:00" in text
    assert "[Read Full Article](https://www.aljazeera.com/news/1)" in text
    assert text.endswith("#BreakingNews #WestAfrica #AlJazeera")


def test_web_items_render_with_platform():
    item = make_item(kind=KIND_WEB, platform="web", account="BBC", timestamp="")
    text = formatting.render_telegram_alert(item, NOW)
    assert "WEB: BREAKING: Nigeria declares emergency" in text
    assert "BBC (WEB)" in text
    assert "Unknown time" in text


def test_email_subject_and_bodies():
    item = make_item(body="<b>Troops</b> deployed & curfew set")
    assert formatting.render_email_subject(item) == (
        "🚨 BREAKING: BREAKING: Nigeria declares emergency - West African News Alert"
    )
    plain = formatting.render_email_text(item, NOW)
    assert "Troops deployed & curfew set" in plain
    assert "Read the full article: http://x/1" in plain
    html = formatting.render_email_html(item, NOW)
    assert "Troops deployed &amp; curfew set" in html
    assert 'href="http://x/1"' in html


def test_status_renderings():
    stats = {
        "uptime": "1h 5m",
        "total_alerts_sent": 4,
        "total_articles_processed": 10,
        "total_processed": 250,
        "rate_limiter": {"alerts_in_last_hour": 2, "max_per_hour": 12, "can_send_now": False},
        "last_run_time": None,
    }
    tg = formatting.render_telegram_status(stats)
    assert "*Uptime:* 1h 5m" in tg
    assert "2/12 alerts/hour" in tg
    assert "Rate Limited" in tg
    assert "*Last Check:* Never" in tg
    assert "Alerts sent:         4" in formatting.render_status_text(stats)


def test_console_alert_truncates_description():
    text = formatting.render_console_alert(make_item(body="x" * 300), NOW)
    assert "x" * 200 + "..." in text
    assert "#News #WestAfrica #BBC" in text
