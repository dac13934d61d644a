# SPDX-License-Identifier: MIT
# src/news_alert/keywords.py
"""
Keyword vocabularies for the content filter.

An item is alert-worthy when it contains at least one BREAKING keyword and at
least one REGION keyword. Matching is a case-insensitive substring test, so
entries are kept specific ("BREAKING UPDATE" rather than "UPDATE", "Republic of
Niger" rather than "Niger") to keep false positives down.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

BREAKING_NEWS_KEYWORDS: List[str] = [
    "BREAKING",
    "URGENT",
    "ALERT",
    "JUST IN",
    "DEVELOPING",
    "LIVE",
    "FLASH",
    "EMERGENCY",
    "BREAKING UPDATE",
    "URGENT UPDATE",
    "LATEST",
    "NEWS FLASH",
    "BREAKING NEWS",
]

# Nigeria, Niger, Burkina Faso, Benin, Togo
REGION_KEYWORDS: List[str] = [
    # Nigeria
    "Nigeria", "Nigerian", "Nigerians", "Federal Republic of Nigeria",
    # Niger (no bare "Niger", it matches the river)
    "Republic of Niger", "Nigerien", "Nigeriens", "Niger Republic", "Niger country",
    # Burkina Faso
    "Burkina Faso", "Burkinabé", "Burkinabe",
    # Benin
    "Benin", "Beninese", "Republic of Benin",
    # Togo
    "Togo", "Togolese", "Republic of Togo",
]


@dataclass(frozen=True)
class KeywordSet:
    breaking: List[str] = field(default_factory=lambda: list(BREAKING_NEWS_KEYWORDS))
    regions: List[str] = field(default_factory=lambda: list(REGION_KEYWORDS))


def _string_list(value, key: str, p: Path) -> List[str]:
    """A YAML list of strings; a scalar or mapping here is a config error."""
    if not isinstance(value, list) or not all(isinstance(k, str) for k in value):
        raise ValueError(f"Keyword file {p}: '{key}' must be a list of strings")
    return [k for k in value if k.strip()]


def load_keywords(path: Optional[Union[str, Path]] = None) -> KeywordSet:
    """
    Load keyword lists, optionally overridden by a YAML file of the form::

        breaking: [BREAKING, URGENT]
        regions: [Nigeria, Togo]

    Keys missing from the file keep the built-in list. Read and parse errors
    propagate, as does ValueError for a malformed list; a bad keyword file is
    a startup configuration error.
    """
    if not path:
        return KeywordSet()

    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Keyword file {p} must contain a mapping, got {type(data).__name__}")

    breaking = data.get("breaking")
    regions = data.get("regions")
    ks = KeywordSet(
        breaking=_string_list(breaking, "breaking", p) if breaking is not None else list(BREAKING_NEWS_KEYWORDS),
        regions=_string_list(regions, "regions", p) if regions is not None else list(REGION_KEYWORDS),
    )
    if not ks.breaking or not ks.regions:
        raise ValueError(f"Keyword file {p}: 'breaking' and 'regions' must not be empty")
    logger.info(
        f"Loaded keywords from {p}: {len(ks.breaking)} breaking, {len(ks.regions)} region"
    )
    return ks
