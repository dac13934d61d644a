# Ensure `src/` is on sys.path so tests can import `news_alert` without requiring editable install
import os
import sys

import pytest

HERE = os.path.dirname(__file__)
SRC = os.path.abspath(os.path.join(HERE, "..", "src"))
if os.path.isdir(SRC) and SRC not in sys.path:
    sys.path.insert(0, SRC)

from news_alert.alerts.delivery import DeliveryResult, NotificationChannel  # noqa: E402
from news_alert.models import CandidateItem  # noqa: E402


class FakeClock:
    """Settable epoch clock."""
    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, secs):
        self.now += secs


class FakeChannel(NotificationChannel):
    """Records alerts instead of sending them. mode: ok | fail | raise"""
    def __init__(self, name="fake", enabled=True, mode="ok"):
        self.name = name
        self._enabled = enabled
        self.mode = mode
        self.sent = []
        self.status_updates = []

    @property
    def enabled(self):
        return self._enabled

    def send_alert(self, item):
        if self.mode == "raise":
            raise RuntimeError("boom")
        self.sent.append(item)
        if self.mode == "fail":
            return DeliveryResult(self.name, False, error="nope")
        return DeliveryResult(self.name, True)

    def test_connection(self):
        return DeliveryResult(self.name, self.mode == "ok")

    def send_status_update(self, stats):
        self.status_updates.append(stats)
        return DeliveryResult(self.name, True)


def make_item(title="BREAKING: Nigeria declares emergency", body="Details follow.",
              link="http://x/1", timestamp="2024-01-01T00:00:00Z", source="BBC", **kw):
    return CandidateItem(title=title, body=body, link=link, timestamp=timestamp, source_label=source, **kw)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def no_sleep():
    calls = []
    def _sleep(secs):
        calls.append(secs)
    _sleep.calls = calls
    return _sleep
