# SPDX-License-Identifier: MIT
# src/news_alert/filtering/__init__.py
from .matcher import KeywordMatcher, contains_any, matches

__all__ = ["KeywordMatcher", "contains_any", "matches"]
