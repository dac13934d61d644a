# SPDX-License-Identifier: MIT
# src/news_alert/alerts/formatting.py
"""
Rendering of alerts and status reports for each channel.
"""
from __future__ import annotations
import html
import re
from datetime import datetime
from typing import Dict, Any, Optional

from ..models import CandidateItem
from ..utils.text import clean_text, domain_from_url, escape_markdown, format_timestamp

SOURCE_EMOJIS = {
    "BBC": "📺",
    "CNN": "📻",
    "Al Jazeera": "🌍",
    "Deutsche Welle": "📡",
    "RFI": "🛰️",
}


def source_emoji(source: str) -> str:
    return SOURCE_EMOJIS.get(source, "📰")


def _hashtag(source: str) -> str:
    return re.sub(r"[^0-9A-Za-z]", "", source or "") or "News"


def _alert_time(now: Optional[datetime]) -> str:
    return (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")


# ---------------------------------------------------------------- Telegram
def render_telegram_alert(item: CandidateItem, now: Optional[datetime] = None) -> str:
    """
    Telegram Markdown (not V2): *bold*, [links](url).
    Total stays well below Telegram's 4096-char message limit.
    """
    source = item.display_source
    lines = [
        "🚨 *BREAKING: WEST AFRICAN NEWS ALERT*",
        "",
        f"📰 *{escape_markdown(clean_text(item.display_title, 200))}*",
        "",
        f"{source_emoji(item.source_label)} *Source:* {escape_markdown(source.upper())}",
        f"🌐 *Domain:* {escape_markdown(domain_from_url(item.link))}",
        f"⏰ *Published:* {format_timestamp(item.timestamp)}",
        f"🕐 *Alert Time:* {_alert_time(now)}",
        "",
        f"📝 {escape_markdown(clean_text(item.body, 300)) or 'No description available'}",
        "",
        f"🔗 [Read Full Article]({item.link})",
        "",
        f"#BreakingNews #WestAfrica #{_hashtag(item.source_label)}",
    ]
    return "\n".join(lines)


def render_telegram_status(stats: Dict[str, Any]) -> str:
    rl = stats.get("rate_limiter", {})
    lines = [
        "📊 *West African News Alert System Status*",
        "",
        f"⏰ *Uptime:* {stats.get('uptime', 'Unknown')}",
        f"📤 *Alerts Sent:* {stats.get('total_alerts_sent', 0)}",
        f"📄 *Articles Processed:* {stats.get('total_articles_processed', 0)}",
        f"💾 *Total in Database:* {stats.get('total_processed', 0)}",
        f"🚦 *Rate Limit:* {rl.get('alerts_in_last_hour', 0)}/{rl.get('max_per_hour', 0)} alerts/hour",
        f"🟢 *Status:* {'Active' if rl.get('can_send_now') else 'Rate Limited'}",
        f"📅 *Last Check:* {stats.get('last_run_time') or 'Never'}",
        "",
        "#SystemStatus #WestAfricanNews",
    ]
    return "\n".join(lines)


TELEGRAM_TEST_MESSAGE = (
    "🧪 West African Breaking News Alert System - Connection Test\n\n"
    "Bot is working correctly!"
)


# ------------------------------------------------------------------- Email
def render_email_subject(item: CandidateItem) -> str:
    return f"🚨 BREAKING: {clean_text(item.display_title, 100)} - West African News Alert"


def render_email_text(item: CandidateItem, now: Optional[datetime] = None) -> str:
    description = clean_text(item.body, 500) if item.body else "No description available"
    return "\n".join([
        "BREAKING NEWS ALERT - West African News Alert System",
        "",
        clean_text(item.display_title),
        "",
        f"Source:     {item.display_source.upper()}",
        f"Domain:     {domain_from_url(item.link)}",
        f"Published:  {format_timestamp(item.timestamp)}",
        f"Alert Time: {_alert_time(now)}",
        "",
        description,
        "",
        f"Read the full article: {item.link}",
        "",
        "---",
        "This is an automated alert from the West African News Alert System.",
    ])


def render_email_html(item: CandidateItem, now: Optional[datetime] = None) -> str:
    e = html.escape
    description = clean_text(item.body, 500) if item.body else "No description available"
    return f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>West African Breaking News Alert</title></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="background: #ee5a24; color: white; padding: 20px; text-align: center; border-radius: 8px;">
    <div style="font-weight: bold;">🚨 BREAKING NEWS ALERT</div>
    <h1>West African News Alert System</h1>
  </div>
  <h2>{e(clean_text(item.display_title))}</h2>
  <table style="background: #ecf0f1; padding: 15px; width: 100%;">
    <tr><td><b>📰 Source:</b></td><td>{e(item.display_source.upper())}</td></tr>
    <tr><td><b>🌐 Domain:</b></td><td>{e(domain_from_url(item.link))}</td></tr>
    <tr><td><b>⏰ Published:</b></td><td>{e(format_timestamp(item.timestamp))}</td></tr>
    <tr><td><b>🕐 Alert Time:</b></td><td>{e(_alert_time(now))}</td></tr>
  </table>
  <div style="background: #f8f9fa; padding: 20px; border-left: 4px solid #3498db; margin: 20px 0;">{e(description)}</div>
  <div style="text-align: center; margin: 30px 0;">
    <a href="{e(item.link, quote=True)}" style="background: #54a0ff; color: white; padding: 15px 30px; text-decoration: none; border-radius: 5px;">Read Full Article</a>
  </div>
  <div style="color: #7f8c8d; font-size: 14px; text-align: center;">This is an automated alert from the West African News Alert System.</div>
</body>
</html>"""


def render_status_text(stats: Dict[str, Any]) -> str:
    rl = stats.get("rate_limiter", {})
    return "\n".join([
        "West African News Alert System - Status Report",
        "",
        f"Uptime:              {stats.get('uptime', 'Unknown')}",
        f"Alerts sent:         {stats.get('total_alerts_sent', 0)}",
        f"Articles processed:  {stats.get('total_articles_processed', 0)}",
        f"Social posts:        {stats.get('total_social_posts_processed', 0)}",
        f"Total in database:   {stats.get('total_processed', 0)}",
        f"Rate limit:          {rl.get('alerts_in_last_hour', 0)}/{rl.get('max_per_hour', 0)} alerts/hour",
        f"Status:              {'Active' if rl.get('can_send_now') else 'Rate Limited'}",
        f"Last check:          {stats.get('last_run_time') or 'Never'}",
    ])


# ----------------------------------------------------------------- Console
def render_console_alert(item: CandidateItem, now: Optional[datetime] = None) -> str:
    description = item.body or ""
    if description:
        description = description[:200] + ("..." if len(description) > 200 else "")
    else:
        description = "No description available"
    source = item.display_source.upper()
    return "\n".join([
        "📰 WEST AFRICAN NEWS ALERT",
        "",
        f"📰 {item.display_title}",
        "",
        f"📍 Source: {source}",
        f"🔗 Link: {item.link}",
        f"⏰ Published: {item.timestamp or 'Unknown'}",
        f"🕐 Alert Time: {_alert_time(now)}",
        "",
        f"📝 {description}",
        "",
        f"#News #WestAfrica #{_hashtag(item.source_label)}",
    ])
