# SPDX-License-Identifier: MIT
# src/news_alert/alerts/store.py
"""
Persisted set of identity keys for items that were already evaluated.
"""
from __future__ import annotations
import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

# keys the file format has used for the key list
KNOWN_LIST_KEYS = ("articles", "posts")


class ProcessedStore:
    """
    Ordered, deduplicated set of identity keys backed by a JSON file.

    File format::

        {"articles": ["<key>", ...], "lastUpdated": "<ISO-8601>", "totalCount": 123}

    Keys keep insertion order (newest last). When the set grows past max_size,
    save() keeps only the newest target_size keys before writing.

    All mutations go through one lock, so passes running on different threads
    can share a store without losing updates.
    """

    def __init__(
        self,
        path: Union[str, Path],
        max_size: int = 10000,
        target_size: int = 5000,
        list_key: str = "articles",
    ):
        """
        Initialize the store (nothing is read until load()).

        Args:
            path: JSON file holding the persisted state
            max_size: Size above which the set is truncated on save
            target_size: Number of newest keys kept after truncation
            list_key: Name of the key list in the JSON document
        """
        if target_size > max_size:
            raise ValueError(f"target_size ({target_size}) must not exceed max_size ({max_size})")
        self.path = Path(path)
        self.max_size = max_size
        self.target_size = target_size
        self.list_key = list_key
        self._keys: Dict[str, None] = {}
        self._lock = threading.RLock()
        self.last_saved_at: Optional[str] = None

    # ------------------------------------------------------------------ load
    def _read_keys(self) -> Optional[List[str]]:
        """Read the persisted key list; None if the file is absent or unusable."""
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read processed store {self.path}: {e}. Starting fresh.")
            return None

        if isinstance(data, list):
            raw = data
        elif isinstance(data, dict):
            raw = data.get(self.list_key)
            if raw is None:
                raw = next((data[k] for k in KNOWN_LIST_KEYS if k in data), [])
        else:
            logger.warning(f"Unexpected processed store layout in {self.path}. Starting fresh.")
            return None

        if not isinstance(raw, list):
            logger.warning(f"Key list in {self.path} is not a list. Starting fresh.")
            return None
        return [str(k) for k in raw]

    def load(self) -> set:
        """Replace the in-memory set with the persisted one; empty on any read problem."""
        keys = self._read_keys()
        with self._lock:
            self._keys = dict.fromkeys(keys or [])
            if keys is None:
                logger.warning(f"No processed list at {self.path.name}, starting empty")
            else:
                logger.info(f"Loaded {len(self._keys)} previously processed keys from {self.path.name}")
            return set(self._keys)

    # --------------------------------------------------------------- queries
    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._keys

    __contains__ = contains

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def keys(self) -> List[str]:
        """Snapshot of keys, oldest first."""
        with self._lock:
            return list(self._keys)

    # ------------------------------------------------------------- mutation
    def add(self, key: str) -> bool:
        """Insert key; returns False (and keeps the original position) if already present."""
        with self._lock:
            if key in self._keys:
                return False
            self._keys[key] = None
            return True

    def add_many(self, keys: Iterable[str]) -> int:
        added = 0
        with self._lock:
            for k in keys:
                if k not in self._keys:
                    self._keys[k] = None
                    added += 1
        return added

    def _truncate_locked(self) -> int:
        """Drop the oldest keys if over max_size. Caller holds the lock."""
        count = len(self._keys)
        if count <= self.max_size:
            return 0
        keep = list(self._keys)[-self.target_size:] if self.target_size > 0 else []
        self._keys = dict.fromkeys(keep)
        dropped = count - len(self._keys)
        logger.info(f"Trimmed processed list {self.path.name}: dropped {dropped}, kept {len(self._keys)}")
        return dropped

    def save(self) -> bool:
        """
        Persist the set (truncating first if needed).

        Write failures are logged and swallowed; the in-memory set stays
        authoritative until the next successful save.

        Returns:
            True if the file was written
        """
        with self._lock:
            self._truncate_locked()
            now = datetime.now(timezone.utc).isoformat()
            data = {
                self.list_key: list(self._keys),
                "lastUpdated": now,
                "totalCount": len(self._keys),
            }
            tmp = self.path.with_name(self.path.name + ".tmp")
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with tmp.open("w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp, self.path)
            except (OSError, TypeError) as e:
                logger.error(f"Error saving processed store {self.path}: {e}")
                return False
            self.last_saved_at = now
            logger.debug(f"Saved {len(self._keys)} processed keys to {self.path.name}")
            return True

    def cleanup(self) -> int:
        """
        Re-apply the size bound to the persisted state (daily housekeeping).

        Returns:
            Number of keys dropped
        """
        persisted = self._read_keys()
        if persisted is None or len(persisted) <= self.max_size:
            return 0
        with self._lock:
            # keep keys added in memory since the last save
            merged = dict.fromkeys(persisted)
            for k in self._keys:
                merged.setdefault(k, None)
            self._keys = merged
            before = len(self._keys)
            self._truncate_locked()
            dropped = before - len(self._keys)
        self.save()
        logger.info(f"Cleaned up {self.path.name}: kept {len(self)} recent keys")
        return dropped

    def clear(self):
        """Clear all in-memory state (useful for testing)."""
        with self._lock:
            self._keys.clear()

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "total_processed": len(self._keys),
                "max_size": self.max_size,
                "target_size": self.target_size,
                "last_saved_at": self.last_saved_at,
                "path": str(self.path),
            }
