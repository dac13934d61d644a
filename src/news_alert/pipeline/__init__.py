# SPDX-License-Identifier: MIT
# src/news_alert/pipeline/__init__.py
from .monitor import FeedMonitor, PassResult
from .app import NewsAlertSystem

__all__ = ["FeedMonitor", "PassResult", "NewsAlertSystem"]
