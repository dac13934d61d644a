# tests/test_orchestration.py
from news_alert.alerts.orchestration import AlertOrchestrator
from news_alert.alerts.rate_limiter import RateLimiter

from conftest import FakeChannel, make_item


def _items(n):
    return [make_item(title=f"BREAKING: Nigeria story {i}", link=f"http://x/{i}") for i in range(n)]


def test_dispatches_all_items_with_delay_between(clock, no_sleep):
    ch = FakeChannel("telegram")
    rl = RateLimiter(max_per_hour=10, cooldown_minutes=0, clock=clock)
    orch = AlertOrchestrator([ch], rl, inter_item_delay=2.0, sleep=no_sleep)

    stats = orch.dispatch(_items(3))

    assert stats.items_received == 3
    assert stats.alerts_attempted == 3
    assert stats.alerts_sent == 3
    assert stats.channel_success == {"telegram": 3}
    assert len(ch.sent) == 3
    assert no_sleep.calls == [2.0, 2.0]


def test_explicit_delay_overrides_default(clock, no_sleep):
    rl = RateLimiter(max_per_hour=10, cooldown_minutes=0, clock=clock)
    orch = AlertOrchestrator([FakeChannel()], rl, inter_item_delay=2.0, sleep=no_sleep)
    orch.dispatch(_items(2), delay=3.0)
    assert no_sleep.calls == [3.0]


def test_rate_limit_stops_the_pass(clock, no_sleep):
    ch = FakeChannel()
    rl = RateLimiter(max_per_hour=1, cooldown_minutes=0, clock=clock)
    orch = AlertOrchestrator([ch], rl, sleep=no_sleep)

    stats = orch.dispatch(_items(3))

    assert stats.alerts_attempted == 1
    assert stats.rate_limited == 2
    assert len(ch.sent) == 1
    assert rl.get_stats()["alerts_in_last_hour"] == 1


def test_cooldown_allows_one_alert_per_pass(clock, no_sleep):
    rl = RateLimiter(max_per_hour=12, cooldown_minutes=5, clock=clock)
    orch = AlertOrchestrator([FakeChannel()], rl, sleep=no_sleep)
    stats = orch.dispatch(_items(2))
    assert stats.alerts_sent == 1
    assert stats.rate_limited == 1


def test_one_record_per_item_not_per_channel(clock, no_sleep):
    a, b = FakeChannel("telegram"), FakeChannel("email")
    rl = RateLimiter(max_per_hour=10, cooldown_minutes=0, clock=clock)
    orch = AlertOrchestrator([a, b], rl, sleep=no_sleep)

    stats = orch.dispatch(_items(2))

    assert rl.get_stats()["alerts_in_last_hour"] == 2
    assert stats.channel_success == {"telegram": 2, "email": 2}
    assert len(a.sent) == 2 and len(b.sent) == 2


def test_raising_channel_does_not_block_others(clock, no_sleep):
    bad, good = FakeChannel("telegram", mode="raise"), FakeChannel("email")
    rl = RateLimiter(max_per_hour=10, cooldown_minutes=0, clock=clock)
    orch = AlertOrchestrator([bad, good], rl, sleep=no_sleep)

    outcome = orch.send_alert(make_item())
    assert outcome.success
    by_channel = {r.channel: r for r in outcome.results}
    assert by_channel["telegram"].success is False
    assert "boom" in by_channel["telegram"].error
    assert by_channel["email"].success is True
    assert orch.get_stats()["channel_failure"]["telegram"] == 1


def test_failed_item_still_counts_as_attempt(clock, no_sleep):
    rl = RateLimiter(max_per_hour=10, cooldown_minutes=0, clock=clock)
    orch = AlertOrchestrator([FakeChannel(mode="fail")], rl, sleep=no_sleep)

    stats = orch.dispatch(_items(2))

    assert stats.alerts_attempted == 2
    assert stats.alerts_sent == 0
    assert stats.alerts_failed == 2
    assert rl.get_stats()["alerts_in_last_hour"] == 2
    totals = orch.get_stats()
    assert totals["total_alerts_attempted"] == 2
    assert totals["total_alerts_sent"] == 0


def test_disabled_channels_are_skipped(clock, no_sleep):
    off, on = FakeChannel("telegram", enabled=False), FakeChannel("email")
    rl = RateLimiter(max_per_hour=10, cooldown_minutes=0, clock=clock)
    orch = AlertOrchestrator([off, on], rl, sleep=no_sleep)
    orch.dispatch(_items(1))
    assert off.sent == []
    assert len(on.sent) == 1


def test_console_fallback_without_channels(clock, no_sleep):
    rl = RateLimiter(max_per_hour=10, cooldown_minutes=0, clock=clock)
    orch = AlertOrchestrator([FakeChannel(enabled=False)], rl, sleep=no_sleep)

    outcome = orch.send_alert(make_item())
    assert outcome.success and outcome.console_only

    stats = orch.dispatch(_items(1))
    assert stats.alerts_sent == 1
    assert rl.get_stats()["alerts_in_last_hour"] == 1


def test_empty_input(clock, no_sleep):
    rl = RateLimiter(clock=clock)
    stats = AlertOrchestrator([FakeChannel()], rl, sleep=no_sleep).dispatch([])
    assert stats.to_dict()["alerts_attempted"] == 0
    assert no_sleep.calls == []
