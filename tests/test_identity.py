# tests/test_identity.py
from news_alert.alerts.identity import article_id, compute_id, item_id, post_id
from news_alert.models import KIND_WEB

from conftest import make_item


def test_compute_id_is_deterministic_and_fixed_length():
    a = compute_id("BREAKING: Nigeria", "http://x/1", "2024-01-01T00:00:00Z")
    b = compute_id("BREAKING: Nigeria", "http://x/1", "2024-01-01T00:00:00Z")
    assert a == b
    assert len(a) == 32
    int(a, 16)  # hex


def test_changing_any_field_changes_the_key():
    base = article_id("t", "http://x/1", "2024-01-01")
    assert article_id("t2", "http://x/1", "2024-01-01") != base
    assert article_id("t", "http://x/2", "2024-01-01") != base
    assert article_id("t", "http://x/1", "2024-01-02") != base


def test_field_boundaries_matter():
    assert compute_id("ab", "c") != compute_id("a", "bc")


def test_none_is_treated_as_empty():
    assert article_id("t", "l", None) == article_id("t", "l", "")


def test_post_id_uses_text_prefix():
    long_a = "x" * 100 + "tail one"
    long_b = "x" * 100 + "tail two"
    assert post_id("web", "BBC", long_a, "") == post_id("web", "BBC", long_b, "")
    assert post_id("web", "BBC", "short", "") != post_id("web", "CNN", "short", "")


def test_item_id_dispatches_on_kind():
    feed = make_item()
    assert item_id(feed) == article_id(feed.title, feed.link, feed.timestamp)

    web = make_item(kind=KIND_WEB, platform="web", account="BBC", timestamp="")
    assert item_id(web) == post_id("web", "BBC", web.title, "")
    assert item_id(web) != item_id(feed)
