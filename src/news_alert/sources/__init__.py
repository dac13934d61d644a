# SPDX-License-Identifier: MIT
# src/news_alert/sources/__init__.py
from .base import BaseSource
from .rss import RSSSource
from .web import WebPageSource

__all__ = ["BaseSource", "RSSSource", "WebPageSource"]
