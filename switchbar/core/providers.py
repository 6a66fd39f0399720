"""Candidate providers: turn raw browser records into searchable candidates.

Raw records use the browser extension API shapes (camelCase keys):
- tabs: ``id``, ``title``, ``url``, ``lastAccessed``, ``active``, ``favIconUrl``
- bookmarks: ``title``, ``url``
- history: ``title``, ``url``, ``lastVisitTime``, ``visitCount``
"""

import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from loguru import logger

from .config import HistoryConfig
from .documents import split_url
from .errors import InvalidURLError
from .models import CandidateRecord, SourceType
from .tokenizer import tokenize

UNTITLED = "Untitled"

SYSTEM_PROTOCOLS = (
    "chrome://",
    "chrome-extension://",
    "edge://",
    "brave://",
    "about:",
    "chrome-search://",
    "chrome-untrusted://",
    "browser://",
    "moz-extension://",
    "firefox:",
)

ACTION_TEXT = {
    SourceType.TAB: "Switch to Tab",
    SourceType.HISTORY: "Open Page",
    SourceType.BOOKMARK: "Open Bookmark",
}

DAY_MS = 86400 * 1000


def is_system_page(url: Optional[str]) -> bool:
    """Browser-internal pages cannot be switched to from the command bar."""
    return bool(url) and url.lower().startswith(SYSTEM_PROTOCOLS)


def _has_valid_url(raw: Dict[str, Any]) -> bool:
    url = raw.get("url")
    if not url:
        return False
    try:
        split_url(url)
    except InvalidURLError as e:
        logger.debug(f"Dropping record with bad URL: {e}")
        return False
    return True


def _record(raw: Dict[str, Any], source_type: SourceType, **extra) -> CandidateRecord:
    return CandidateRecord(
        id=str(uuid.uuid4()),
        title=raw.get("title") or UNTITLED,
        url=raw["url"],
        source_type=source_type,
        action_text=ACTION_TEXT[source_type],
        **extra,
    )


def tab_options(raw_tabs: Iterable[Dict[str, Any]]) -> List[CandidateRecord]:
    """Most recently used tabs first, skipping system pages and id-less tabs."""
    tabs = sorted(raw_tabs, key=lambda t: t.get("lastAccessed") or 0, reverse=True)
    return [
        _record(tab, SourceType.TAB, tab_id=tab["id"])
        for tab in tabs
        if tab.get("id") and not is_system_page(tab.get("url")) and _has_valid_url(tab)
    ]


def bookmark_options(raw_bookmarks: Iterable[Dict[str, Any]]) -> List[CandidateRecord]:
    """Bookmarks that point at a URL; folders are dropped."""
    return [
        _record(bookmark, SourceType.BOOKMARK)
        for bookmark in raw_bookmarks
        if _has_valid_url(bookmark)
    ]


def history_options(raw_items: Iterable[Dict[str, Any]]) -> List[CandidateRecord]:
    """Most recent, then most visited history entries first."""
    items = sorted(
        raw_items,
        key=lambda h: (h.get("lastVisitTime") or 0, h.get("visitCount") or 0),
        reverse=True,
    )
    return [_record(item, SourceType.HISTORY) for item in items if _has_valid_url(item)]


def history_queries(term: str,
                    config: Optional[HistoryConfig] = None,
                    now_ms: Optional[float] = None) -> List[Dict[str, Any]]:
    """
    Browser history lookups needed for a search term, one per token.

    Numeric tokens are kept here, unlike title indexing, so typing a
    version number or ticket id still pulls matching pages out of history.
    """
    config = config or HistoryConfig()
    if now_ms is None:
        now_ms = time.time() * 1000
    start_time = now_ms - config.lookback_days * DAY_MS
    return [
        {"text": token, "maxResults": config.max_results_per_token, "startTime": start_time}
        for token in tokenize(term)
    ]


class CandidateSource(ABC):
    """Supplies the candidates for one command bar query."""

    @abstractmethod
    async def tabs(self) -> List[CandidateRecord]:
        """Open tabs in the current window, excluding the active one."""

    @abstractmethod
    async def bookmarks(self, term: str) -> List[CandidateRecord]:
        """All bookmarks with a URL."""

    @abstractmethod
    async def history(self, term: str) -> List[CandidateRecord]:
        """Recent history entries related to the term."""

    async def tab_favicon_url(self, tab_id: int) -> Optional[str]:
        """The browser's own favicon URL for a tab, if known."""
        return None


class StaticCandidateSource(CandidateSource):
    """
    Candidate source backed by a snapshot of raw browser records.

    History lookups mimic the browser's text search: an entry matches a
    token when its title or URL contains it.
    """

    def __init__(self,
                 snapshot: Dict[str, List[Dict[str, Any]]],
                 history_config: Optional[HistoryConfig] = None,
                 now_ms: Optional[float] = None):
        self.raw_tabs = list(snapshot.get("tabs") or [])
        self.raw_bookmarks = list(snapshot.get("bookmarks") or [])
        self.raw_history = list(snapshot.get("history") or [])
        self.history_config = history_config or HistoryConfig()
        self.now_ms = now_ms

    @classmethod
    def from_file(cls, path: Path, **kwargs) -> "StaticCandidateSource":
        """Load a JSON or YAML snapshot with ``tabs``/``bookmarks``/``history`` lists."""
        with open(path, 'r', encoding='utf-8') as f:
            snapshot = yaml.safe_load(f) or {}
        logger.debug(
            f"Loaded snapshot {path}: {len(snapshot.get('tabs') or [])} tabs, "
            f"{len(snapshot.get('bookmarks') or [])} bookmarks, "
            f"{len(snapshot.get('history') or [])} history entries"
        )
        return cls(snapshot, **kwargs)

    async def tabs(self) -> List[CandidateRecord]:
        return tab_options(t for t in self.raw_tabs if not t.get("active"))

    async def bookmarks(self, term: str) -> List[CandidateRecord]:
        return bookmark_options(self.raw_bookmarks)

    async def history(self, term: str) -> List[CandidateRecord]:
        found = []
        for query in history_queries(term, self.history_config, self.now_ms):
            text = query["text"]
            hits = [
                item for item in self.raw_history
                if (item.get("lastVisitTime") or 0) >= query["startTime"]
                and (text in (item.get("title") or "").lower() or text in (item.get("url") or "").lower())
            ]
            found.extend(hits[:query["maxResults"]])
        return history_options(found)

    async def tab_favicon_url(self, tab_id: int) -> Optional[str]:
        for tab in self.raw_tabs:
            if tab.get("id") == tab_id:
                return tab.get("favIconUrl")
        return None
