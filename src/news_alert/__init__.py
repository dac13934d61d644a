# SPDX-License-Identifier: MIT
# src/news_alert/__init__.py
"""
Breaking-news alerts for West Africa: RSS and web sources, keyword filtering,
persisted deduplication and rate-limited Telegram/email delivery.
"""

__version__ = "0.1.0"
