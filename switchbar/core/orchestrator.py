"""Command bar pipeline: fetch candidates, search, cap, then decorate with favicons."""

import asyncio
import time
from typing import List, Optional

from loguru import logger

from .config import SwitchbarConfig
from .favicons import DEFAULT_FAVICON, FaviconResolver
from .models import CandidateRecord, CommandOption, SourceType, SwitchOption
from .providers import CandidateSource
from .search import search


def build_search_command(search_term: str) -> CommandOption:
    return CommandOption(search_term=search_term)


class SwitchOptionsPipeline:
    """
    Produces the options shown for one keystroke in the command bar.

    Each call is independent: candidates are fetched fresh, a new index is
    built and thrown away. Callers that fire queries while typing should
    only render the response to their latest request.
    """

    def __init__(self,
                 source: CandidateSource,
                 config: Optional[SwitchbarConfig] = None,
                 favicons: Optional[FaviconResolver] = None):
        self.source = source
        self.config = config or SwitchbarConfig()
        if favicons is None and self.config.favicons.enabled:
            favicons = FaviconResolver(self.config.favicons)
        self.favicons = favicons

    async def fetch_candidates(self, search_term: str) -> List[CandidateRecord]:
        """Tabs, then bookmarks, then history, fetched concurrently."""
        tabs, bookmarks, history = await asyncio.gather(
            self.source.tabs(),
            self.source.bookmarks(search_term),
            self.source.history(search_term),
        )
        logger.debug(
            f"Fetched {len(tabs)} tabs, {len(bookmarks)} bookmarks, {len(history)} history entries"
        )
        return [*tabs, *bookmarks, *history]

    async def get_results(self, search_term: str = "") -> List[SwitchOption]:
        """
        Ranked options for ``search_term``.

        Args:
            search_term: Text typed into the command bar

        Returns:
            At most ``display_cap`` options; a web search command is added when
            fewer results than that were found for a non-blank term
        """
        start = time.perf_counter()
        search_term = search_term or ""
        display_cap = self.config.pipeline.display_cap

        candidates = await self.fetch_candidates(search_term)
        results: List[SwitchOption] = list(search(
            search_term,
            candidates,
            self.config.pipeline.intermediate_cap,
            self.config.search,
        ))

        if len(results) < display_cap and search_term.strip():
            results.append(build_search_command(search_term))
        results = results[:display_cap]

        await self.populate_favicons(results)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"Options for {search_term!r}: {len(results)} in {elapsed_ms:.1f}ms")
        return results

    async def populate_favicons(self, options: List[SwitchOption]) -> None:
        """Fill ``favicon_data`` on displayed candidates, then persist the cache once."""
        if self.favicons is None:
            return
        await asyncio.gather(*(
            self._populate_favicon(option)
            for option in options
            if option.source_type is not SourceType.COMMAND
        ))
        await self.favicons.save()

    async def _populate_favicon(self, option: CandidateRecord) -> None:
        try:
            favicon = await self.favicons.resolve(option.url)
            if not favicon and option.source_type is SourceType.TAB and option.tab_id is not None:
                tab_icon_url = await self.source.tab_favicon_url(option.tab_id)
                if tab_icon_url:
                    favicon = await self.favicons.resolve(tab_icon_url)
            option.favicon_data = favicon or DEFAULT_FAVICON
        except Exception as e:
            logger.error(f"Error loading favicon for {option.url}: {e}")
            option.favicon_data = DEFAULT_FAVICON

    async def aclose(self):
        if self.favicons is not None:
            await self.favicons.aclose()


async def get_results(search_term: str,
                      source: CandidateSource,
                      config: Optional[SwitchbarConfig] = None,
                      favicons: Optional[FaviconResolver] = None) -> List[SwitchOption]:
    """One-shot convenience wrapper around :class:`SwitchOptionsPipeline`."""
    pipeline = SwitchOptionsPipeline(source, config, favicons)
    try:
        return await pipeline.get_results(search_term)
    finally:
        if favicons is None:
            await pipeline.aclose()
