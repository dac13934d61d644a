# SPDX-License-Identifier: MIT
# src/news_alert/alerts/delivery.py
"""
Notification channels (Telegram, email).

Each channel owns its formatting and transport, decides for itself whether it
is enabled (from the credentials it was given) and never raises from its
public methods: failures come back as DeliveryResult(success=False, error=...).
"""
from __future__ import annotations
import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Callable, Dict, Any, Optional

import requests

from ..models import CandidateItem
from ..utils.retry import retry
from ..utils.text import strip_markdown
from . import formatting

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"


@dataclass
class DeliveryResult:
    channel: str
    success: bool
    error: Optional[str] = None
    message_id: Optional[str] = None
    fallback: bool = False
    details: Dict[str, Any] = field(default_factory=dict)


class NotificationChannel(ABC):
    """Contract every notification channel implements."""

    name: str = "channel"

    @property
    @abstractmethod
    def enabled(self) -> bool:
        ...

    @abstractmethod
    def send_alert(self, item: CandidateItem) -> DeliveryResult:
        ...

    @abstractmethod
    def test_connection(self) -> DeliveryResult:
        ...

    def send_status_update(self, stats: Dict[str, Any]) -> DeliveryResult:
        return DeliveryResult(self.name, False, error="Status updates not supported")

    def close(self) -> None:
        pass

    def get_stats(self) -> Dict[str, Any]:
        return {"name": self.name, "enabled": self.enabled}

    def _disabled(self) -> DeliveryResult:
        logger.debug(f"{self.name} notification skipped - channel not enabled")
        return DeliveryResult(self.name, False, error=f"{self.name} not enabled")


# ---------------------------------------------------------------- Telegram
class TelegramAPIError(Exception):
    def __init__(self, description: str, status_code: Optional[int] = None):
        super().__init__(description)
        self.description = description
        self.status_code = status_code

    @property
    def is_parse_error(self) -> bool:
        return "parse" in self.description.lower()


class TelegramTransientError(TelegramAPIError):
    """429 / 5xx answers, worth retrying."""


class TelegramChannel(NotificationChannel):
    """
    Sends alerts through the Telegram Bot API (sendMessage).

    Markdown rendering is tried first; if Telegram rejects the entities the
    message is re-sent as plain text.
    """

    name = "telegram"

    def __init__(
        self,
        bot_token: Optional[str],
        chat_id: Optional[str],
        timeout: float = 10,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        api_base: str = TELEGRAM_API_BASE,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.bot_token = bot_token or ""
        self.chat_id = chat_id or ""
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.api_base = api_base.rstrip("/")
        self._sleep = sleep
        self.bot_username: Optional[str] = None
        if not self.enabled:
            logger.debug("Telegram notifications disabled - no token/chat ID configured")

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def _call(self, method: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.api_base}/bot{self.bot_token}/{method}"
        response = requests.post(url, json=payload or {}, timeout=self.timeout)
        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.status_code == 429 or response.status_code >= 500:
            raise TelegramTransientError(
                data.get("description") or f"HTTP {response.status_code}", response.status_code
            )
        if not response.ok or not data.get("ok", False):
            raise TelegramAPIError(
                data.get("description") or f"HTTP {response.status_code}", response.status_code
            )
        return data.get("result") or {}

    def _send_message(self, text: str, parse_mode: Optional[str] = "Markdown") -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "chat_id": self.chat_id,
            "text": text,
            "disable_web_page_preview": False,
            "disable_notification": False,
        }
        if parse_mode:
            payload["parse_mode"] = parse_mode
        kwargs = {"sleep": self._sleep} if self._sleep else {}
        return retry(
            lambda: self._call("sendMessage", payload),
            max_retries=self.max_retries,
            delay=self.retry_delay,
            exceptions=(requests.RequestException, TelegramTransientError),
            **kwargs,
        )

    def send_alert(self, item: CandidateItem) -> DeliveryResult:
        if not self.enabled:
            return self._disabled()

        text = formatting.render_telegram_alert(item)
        try:
            result = self._send_message(text)
            logger.info(f"Telegram alert sent: {item.display_title[:60]}")
            return DeliveryResult(self.name, True, message_id=str(result.get("message_id", "")))
        except TelegramAPIError as e:
            if not e.is_parse_error:
                logger.error(f"Failed to send Telegram alert: {e}", exc_info=True)
                return DeliveryResult(self.name, False, error=str(e))
            logger.warning(f"Telegram rejected Markdown ({e}); retrying as plain text")
        except requests.RequestException as e:
            logger.error(f"Failed to send Telegram alert: {e}", exc_info=True)
            return DeliveryResult(self.name, False, error=str(e))

        try:
            result = self._send_message(strip_markdown(text), parse_mode=None)
            logger.info("Telegram alert sent as plain text (markdown failed)")
            return DeliveryResult(
                self.name, True, message_id=str(result.get("message_id", "")), fallback=True
            )
        except (TelegramAPIError, requests.RequestException) as e:
            logger.error(f"Plain text Telegram fallback also failed: {e}", exc_info=True)
            return DeliveryResult(self.name, False, error=str(e))

    def test_connection(self) -> DeliveryResult:
        if not self.enabled:
            return DeliveryResult(self.name, False, error="Bot not initialized")
        try:
            me = self._call("getMe")
            self.bot_username = me.get("username")
            logger.info(f"Telegram bot connected: @{self.bot_username} ({me.get('first_name')})")
            self._send_message(formatting.TELEGRAM_TEST_MESSAGE, parse_mode=None)
            return DeliveryResult(self.name, True, details={"bot": me})
        except (TelegramAPIError, requests.RequestException) as e:
            logger.error(f"Telegram connection test failed: {e}")
            return DeliveryResult(self.name, False, error=str(e))

    def send_status_update(self, stats: Dict[str, Any]) -> DeliveryResult:
        if not self.enabled:
            return self._disabled()
        try:
            result = self._send_message(formatting.render_telegram_status(stats))
            logger.info("Telegram status update sent")
            return DeliveryResult(self.name, True, message_id=str(result.get("message_id", "")))
        except (TelegramAPIError, requests.RequestException) as e:
            logger.error(f"Failed to send Telegram status: {e}")
            return DeliveryResult(self.name, False, error=str(e))

    def get_stats(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "enabled": self.enabled,
            "chat_id": f"{self.chat_id[:8]}..." if self.chat_id else None,
            "bot_username": self.bot_username or "Unknown",
        }


# ------------------------------------------------------------------- Email
class EmailChannel(NotificationChannel):
    """Sends alerts over SMTP with STARTTLS (plain-text and HTML parts)."""

    name = "email"

    def __init__(
        self,
        user: Optional[str],
        password: Optional[str],
        to_address: Optional[str],
        host: str = "localhost",
        port: int = 587,
        from_address: Optional[str] = None,
        timeout: float = 30,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.user = user or ""
        self.password = password or ""
        self.to_address = to_address or ""
        self.host = host
        self.port = int(port)
        self.from_address = from_address or self.user
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep
        if not self.enabled:
            logger.debug("Email notifications disabled - no email credentials configured")

    @property
    def enabled(self) -> bool:
        return bool(self.user and self.password and self.to_address)

    def _build_message(self, subject: str, text_body: str, html_body: Optional[str] = None) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"West African News Alert <{self.from_address}>"
        msg["To"] = self.to_address
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        if html_body:
            msg.attach(MIMEText(html_body, "html", "utf-8"))
        return msg

    def _smtp_send(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            server.starttls()
            server.login(self.user, self.password)
            server.send_message(msg)

    def _send(self, msg: MIMEMultipart) -> None:
        kwargs = {"sleep": self._sleep} if self._sleep else {}
        retry(
            lambda: self._smtp_send(msg),
            max_retries=self.max_retries,
            delay=self.retry_delay,
            exceptions=(smtplib.SMTPException, OSError),
            **kwargs,
        )

    def send_alert(self, item: CandidateItem) -> DeliveryResult:
        if not self.enabled:
            return self._disabled()
        now = datetime.now()
        msg = self._build_message(
            formatting.render_email_subject(item),
            formatting.render_email_text(item, now),
            formatting.render_email_html(item, now),
        )
        try:
            self._send(msg)
            logger.info(f"Email alert sent to {self.to_address}: {item.display_title[:60]}")
            return DeliveryResult(self.name, True)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email alert: {e}", exc_info=True)
            return DeliveryResult(self.name, False, error=str(e))

    def test_connection(self) -> DeliveryResult:
        if not self.enabled:
            return DeliveryResult(self.name, False, error="Email not initialized")
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.user, self.password)
            logger.info("Email connection verified successfully")
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email connection test failed: {e}")
            return DeliveryResult(self.name, False, error=str(e))

        test = self._build_message(
            "🧪 Test Email - West African Breaking News Alert System",
            "This is a test message to verify email notifications are working correctly.\n\n"
            f"Test time: {datetime.now():%Y-%m-%d %H:%M:%S}",
        )
        try:
            self._send(test)
            return DeliveryResult(self.name, True, details={"test_email_sent": True})
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"Email verified but test email failed: {e}")
            return DeliveryResult(self.name, True, details={"test_email_sent": False})

    def send_status_update(self, stats: Dict[str, Any]) -> DeliveryResult:
        if not self.enabled:
            return self._disabled()
        msg = self._build_message(
            "📊 West African News Alert System - Status Report",
            formatting.render_status_text(stats),
        )
        try:
            self._send(msg)
            logger.info("Email status update sent")
            return DeliveryResult(self.name, True)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email status: {e}")
            return DeliveryResult(self.name, False, error=str(e))

    def get_stats(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "enabled": self.enabled,
            "host": self.host,
            "to": self.to_address or None,
        }
