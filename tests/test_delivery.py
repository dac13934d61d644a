# tests/test_delivery.py
import smtplib

import pytest
import requests

from news_alert.alerts import delivery
from news_alert.alerts.delivery import EmailChannel, TelegramChannel

from conftest import make_item


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {"ok": True, "result": {"message_id": 42}}

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._payload


class _CallLog(list):
    """List of recorded calls that can also carry the response queue."""


@pytest.fixture
def telegram_calls(monkeypatch):
    """Queue responses for requests.post; records (url, json) per call."""
    calls = _CallLog()
    queue = []

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json))
        nxt = queue.pop(0) if queue else FakeResponse()
        if isinstance(nxt, Exception):
            raise nxt
        return nxt

    monkeypatch.setattr(delivery.requests, "post", fake_post)
    calls.queue = queue
    return calls


def _telegram(no_sleep):
    return TelegramChannel("TOKEN", "CHAT", retry_delay=2.0, sleep=no_sleep)


def test_telegram_send_markdown(telegram_calls, no_sleep):
    res = _telegram(no_sleep).send_alert(make_item())

    assert res.success
    assert res.message_id == "42"
    url, payload = telegram_calls[0]
    assert url.endswith("/botTOKEN/sendMessage")
    assert payload["chat_id"] == "CHAT"
    assert payload["parse_mode"] == "Markdown"
    assert "BREAKING: WEST AFRICAN NEWS ALERT" in payload["text"]
    assert "(http://x/1)" in payload["text"]


def test_telegram_falls_back_to_plain_text(telegram_calls, no_sleep):
    telegram_calls.queue.append(
        FakeResponse(400, {"ok": False, "description": "Bad Request: can't parse entities"})
    )
    res = _telegram(no_sleep).send_alert(make_item())

    assert res.success
    assert res.fallback
    assert len(telegram_calls) == 2
    plain = telegram_calls[1][1]
    assert "parse_mode" not in plain
    assert "*" not in plain["text"]
    assert "http://x/1" in plain["text"]


def test_telegram_retries_transient_errors(telegram_calls, no_sleep):
    telegram_calls.queue.extend([FakeResponse(502, {}), FakeResponse(429, {"ok": False})])
    res = _telegram(no_sleep).send_alert(make_item())

    assert res.success
    assert len(telegram_calls) == 3
    assert no_sleep.calls == [2.0, 4.0]


def test_telegram_network_failure_reported(telegram_calls, no_sleep):
    telegram_calls.queue.extend([requests.ConnectionError("down")] * 3)
    res = _telegram(no_sleep).send_alert(make_item())

    assert not res.success
    assert "down" in res.error
    assert len(telegram_calls) == 3


def test_telegram_other_api_error_not_retried(telegram_calls, no_sleep):
    telegram_calls.queue.append(FakeResponse(403, {"ok": False, "description": "Forbidden: bot was blocked"}))
    res = _telegram(no_sleep).send_alert(make_item())
    assert not res.success
    assert "blocked" in res.error
    assert len(telegram_calls) == 1


def test_telegram_disabled_without_credentials(telegram_calls, no_sleep):
    ch = TelegramChannel("", "CHAT", sleep=no_sleep)
    assert not ch.enabled
    assert not ch.send_alert(make_item()).success
    assert telegram_calls == []


def test_telegram_connection_test(telegram_calls, no_sleep):
    telegram_calls.queue.append(FakeResponse(200, {"ok": True, "result": {"username": "alertbot", "first_name": "A"}}))
    ch = _telegram(no_sleep)
    res = ch.test_connection()
    assert res.success
    assert ch.bot_username == "alertbot"
    assert telegram_calls[0][0].endswith("/getMe")
    assert telegram_calls[1][0].endswith("/sendMessage")


class FakeSMTP:
    instances = []
    fail_login = False
    fail_send = False

    def __init__(self, host, port, timeout=None):
        self.host, self.port = host, port
        self.sent = []
        self.logged_in = False
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        if FakeSMTP.fail_login:
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")
        self.logged_in = True

    def send_message(self, msg):
        if FakeSMTP.fail_send:
            raise smtplib.SMTPException("rejected")
        self.sent.append(msg)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_login = False
    FakeSMTP.fail_send = False
    monkeypatch.setattr(delivery.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def _email(no_sleep):
    return EmailChannel("me@example.com", "secret", "you@example.com", host="smtp.example.com", sleep=no_sleep)


def test_email_send_alert(fake_smtp, no_sleep):
    res = _email(no_sleep).send_alert(make_item())

    assert res.success
    smtp = fake_smtp.instances[0]
    assert (smtp.host, smtp.port) == ("smtp.example.com", 587)
    msg = smtp.sent[0]
    assert msg["To"] == "you@example.com"
    assert msg["Subject"].startswith("🚨 BREAKING: BREAKING: Nigeria declares emergency")
    assert msg.is_multipart()
    assert [p.get_content_type() for p in msg.get_payload()] == ["text/plain", "text/html"]


def test_email_failure_retried_then_reported(fake_smtp, no_sleep):
    fake_smtp.fail_login = True
    res = _email(no_sleep).send_alert(make_item())

    assert not res.success
    assert len(fake_smtp.instances) == 3
    assert no_sleep.calls == [2.0, 4.0]


def test_email_connection_ok_even_if_test_mail_fails(fake_smtp, no_sleep):
    fake_smtp.fail_send = True
    res = _email(no_sleep).test_connection()
    assert res.success
    assert res.details == {"test_email_sent": False}


def test_email_disabled_without_recipient(fake_smtp, no_sleep):
    ch = EmailChannel("me@example.com", "secret", None, sleep=no_sleep)
    assert not ch.enabled
    assert not ch.send_alert(make_item()).success
    assert fake_smtp.instances == []
