# SPDX-License-Identifier: MIT
# src/news_alert/sources/base.py
from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import requests

from ..models import CandidateItem

logger = logging.getLogger(__name__)


class BaseSource(ABC):
    """
    A fetchable content source. fetch() never raises for network or parse
    problems: it logs them and returns an empty list so a pass can move on
    to the next source.
    """

    def __init__(self, name: str, url: str, timeout: float = 10, user_agent: Optional[str] = None):
        self.name = name
        self.url = url
        self.timeout = timeout
        self.user_agent = user_agent

    def headers(self) -> Dict[str, str]:
        h = {"Accept-Language": "en", "Connection": "close"}
        if self.user_agent:
            h["User-Agent"] = self.user_agent
        return h

    def http_get(self) -> requests.Response:
        r = requests.get(self.url, headers=self.headers(), timeout=self.timeout, allow_redirects=True)
        r.raise_for_status()
        return r

    @abstractmethod
    def parse(self, content: bytes) -> List[CandidateItem]:
        ...

    def fetch(self) -> List[CandidateItem]:
        try:
            response = self.http_get()
        except requests.RequestException as e:
            logger.error(f"[{self.name}] Error fetching {self.url}: {e}")
            return []
        try:
            items = self.parse(response.content)
        except Exception as e:
            logger.error(f"[{self.name}] Error parsing {self.url}: {e}", exc_info=True)
            return []
        logger.debug(f"[{self.name}] {len(items)} item(s) from {self.url}")
        return items

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, url={self.url!r})"
