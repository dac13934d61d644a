# SPDX-License-Identifier: MIT
# src/news_alert/alerts/__init__.py
"""
Alert side of the pipeline.

This module provides:
- Identity keys for deduplication
- The persisted processed-item store
- Rate limiting of alert attempts
- Multi-channel delivery (Telegram, email) and its orchestration
"""

from .identity import compute_id, item_id
from .store import ProcessedStore
from .rate_limiter import RateLimiter
from .delivery import DeliveryResult, EmailChannel, NotificationChannel, TelegramChannel
from .orchestration import AlertOrchestrator, DispatchStats

__all__ = [
    "compute_id",
    "item_id",
    "ProcessedStore",
    "RateLimiter",
    "DeliveryResult",
    "NotificationChannel",
    "TelegramChannel",
    "EmailChannel",
    "AlertOrchestrator",
    "DispatchStats",
]
