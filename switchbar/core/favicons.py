"""Favicon loading and caching as base64 data URLs.

Favicons are looked up per hostname: cache first, then the favicon
service, then cached. They are only resolved for results that are
actually displayed.
"""

import asyncio
import base64
import json
import time
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import quote

import aiofiles
import httpx
from loguru import logger

from .config import FaviconConfig
from .documents import url_host
from .errors import FaviconFetchError, InvalidURLError, RetryPolicy

DEFAULT_FAVICON = (
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAABAAAAAQCAYAAAAf8/9hAAAACXBIWXMAAAsTAAALEwEAmpwYAAAA4UlEQVR4nM3TMUoDQRTG8d8KNmIRLLMpBARvYCOWqQSvYG1pY2FjLbY2WlkoWNh4Ai0UC0GwEIuAwTStJpvAuMzKbuEaycIW/uHBvO/7z5vHkEZmVDxCE9c4wQIm+fiCIbYxiyaeNSTwiiVs4EM1pjHAfc7YwRD3GPXSsIV0O8EdTrGSOW5wkc+9cMRLnLplSJfwi+Kf4Vt7t8hyevnSawZjviQ40HeZnVzOJpYzJ9lvBk6zwivquMJZ5lTwkDmPmZeKb6XUcZk7vFXf+4hzbBcLi7ReJibYzxzYw3vV/ATnWMdvc56UFw7pPIoAAAAASUVORK5CYII="
)

DAY_SECONDS = 86400


class FaviconCache:
    """
    Hostname -> data URL cache with a time to live and optional JSON file.

    Lookups and inserts only touch memory. The file is read on first
    :meth:`load` and rewritten by :meth:`save` when entries changed.
    """

    def __init__(self,
                 ttl_seconds: float,
                 path: Optional[Path] = None,
                 clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self.path = Path(path) if path else None
        self.clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._dirty = False
        self._load_task: Optional[asyncio.Task] = None

    async def load(self):
        """Read the cache file once; later calls wait for the same read."""
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._read())
        await self._load_task

    async def _read(self):
        if not self.path or not self.path.exists():
            return
        try:
            async with aiofiles.open(self.path, 'r', encoding='utf-8') as f:
                data = json.loads(await f.read())
            loaded = {
                host: (entry['base64'], float(entry['timestamp']))
                for host, entry in data.items()
            }
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable favicon cache {self.path}: {e}")
            return
        # Entries added while the file was being read win
        loaded.update(self._entries)
        self._entries = loaded
        logger.debug(f"Loaded {len(loaded)} cached favicons from {self.path}")

    async def save(self):
        if not self.path or not self._dirty:
            return
        payload = {
            host: {'base64': data, 'timestamp': ts}
            for host, (data, ts) in self._entries.items()
        }
        self._dirty = False
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.path, 'w', encoding='utf-8') as f:
                await f.write(json.dumps(payload))
        except OSError as e:
            self._dirty = True
            logger.warning(f"Failed to save favicon cache {self.path}: {e}")

    def get(self, host: str) -> Optional[str]:
        entry = self._entries.get(host)
        if entry is None:
            return None
        data, timestamp = entry
        if self.clock() - timestamp >= self.ttl_seconds:
            del self._entries[host]
            self._dirty = True
            return None
        return data

    def put(self, host: str, data: str):
        self._entries[host] = (data, self.clock())
        self._dirty = True

    def __len__(self) -> int:
        return len(self._entries)


class FaviconResolver:
    """Resolves a page URL to its site favicon as a base64 data URL."""

    def __init__(self,
                 config: Optional[FaviconConfig] = None,
                 client: Optional[httpx.AsyncClient] = None,
                 cache: Optional[FaviconCache] = None):
        self.config = config or FaviconConfig()
        self.cache = cache or FaviconCache(
            ttl_seconds=self.config.ttl_days * DAY_SECONDS,
            path=self.config.cache_path,
        )
        self._client = client
        self._owns_client = client is None
        self.retry_policy = RetryPolicy(
            max_retries=self.config.max_retries,
            retry_on=(httpx.TransportError,),
        )
        self._inflight: Dict[str, asyncio.Task] = {}

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                follow_redirects=True,
            )
        return self._client

    async def resolve(self, url: str) -> str:
        """
        Get the favicon for the site hosting ``url``.

        Returns:
            A ``data:`` URL, or an empty string when no icon could be obtained
        """
        if not url:
            return ""
        try:
            host = url_host(url)
        except InvalidURLError as e:
            logger.debug(f"No favicon for {url!r}: {e}")
            return ""
        if not host:
            return ""

        await self.cache.load()
        cached = self.cache.get(host)
        if cached:
            return cached

        # Concurrent results on the same host share one download
        task = self._inflight.get(host)
        if task is None:
            task = asyncio.ensure_future(self._download(host))
            self._inflight[host] = task
            task.add_done_callback(lambda _t, h=host: self._inflight.pop(h, None))

        try:
            data = await asyncio.shield(task)
        except (httpx.HTTPError, FaviconFetchError) as e:
            logger.warning(f"Error getting favicon for {host}: {e}")
            return ""
        return data

    async def _download(self, host: str) -> str:
        data = await self.retry_policy.execute(self._fetch, host)
        self.cache.put(host, data)
        return data

    async def _fetch(self, host: str) -> str:
        service_url = self.config.service_url.format(host=quote(host, safe=':'))
        response = await self.client.get(service_url)
        if response.status_code != 200:
            raise FaviconFetchError(f"Failed to fetch image: {response.status_code}")
        if not response.content:
            raise FaviconFetchError("Empty favicon response")
        content_type = response.headers.get('content-type', 'image/png').split(';')[0].strip()
        encoded = base64.b64encode(response.content).decode('ascii')
        return f"data:{content_type};base64,{encoded}"

    async def save(self):
        """Persist cache changes made since the last save."""
        await self.cache.save()

    async def aclose(self):
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "FaviconResolver":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
