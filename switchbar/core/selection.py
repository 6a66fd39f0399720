"""Carry out the effect of choosing an option in the command bar."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from .models import CandidateRecord, CommandOption, SourceType, SwitchOption


@dataclass
class SessionContext:
    """Command bar state for one browser window."""
    popup_open: bool = False
    current_tab_id: Optional[int] = None
    previous_tab_id: Optional[int] = None

    def tab_activated(self, tab_id: int) -> None:
        if tab_id == self.current_tab_id:
            return
        self.previous_tab_id = self.current_tab_id
        self.current_tab_id = tab_id

    def open_popup(self) -> None:
        self.popup_open = True

    def close_popup(self) -> None:
        self.popup_open = False


class BrowserActions(ABC):
    """Browser operations the selection handler needs."""

    @abstractmethod
    async def focus_tab(self, tab_id: int) -> None:
        ...

    @abstractmethod
    async def current_tab_index(self) -> Optional[int]:
        """Position of the active tab in the current window."""

    @abstractmethod
    async def open_tab(self, url: str, index: int) -> None:
        ...

    @abstractmethod
    async def web_search(self, text: str) -> None:
        """Run a web search in a new tab with the default engine."""


class SelectionHandler:
    """Dispatches a chosen option to the matching browser action."""

    def __init__(self, browser: BrowserActions):
        self.browser = browser

    async def handle(self, option: SwitchOption, session: SessionContext) -> bool:
        """
        Perform the option's effect and close the command bar.

        Returns:
            True if an action was taken
        """
        source_type = option.source_type
        if source_type is SourceType.TAB:
            handled = await self._switch_to_tab(option, session)
        elif source_type in (SourceType.HISTORY, SourceType.BOOKMARK):
            handled = await self._open_page(option)
        elif source_type is SourceType.COMMAND:
            handled = await self._run_command(option)
        else:
            raise ValueError(f"Unknown option type: {source_type}")

        session.close_popup()
        return handled

    async def _switch_to_tab(self, option: CandidateRecord, session: SessionContext) -> bool:
        if option.tab_id is None:
            logger.warning(f"Tab option {option.id} has no tab id")
            return False
        await self.browser.focus_tab(option.tab_id)
        session.tab_activated(option.tab_id)
        return True

    async def _open_page(self, option: CandidateRecord) -> bool:
        index = await self.browser.current_tab_index()
        if index is None:
            logger.warning("No active tab to open the page next to")
            return False
        await self.browser.open_tab(option.url, index + 1)
        return True

    async def _run_command(self, option: CommandOption) -> bool:
        if option.action == "search" and option.search_term:
            await self.browser.web_search(option.search_term)
            return True
        logger.warning(f"Ignoring command {option.action!r} without search term")
        return False
