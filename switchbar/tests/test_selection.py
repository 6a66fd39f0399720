"""Tests for option selection."""

from typing import Optional

import pytest

from switchbar.core.models import CandidateRecord, CommandOption, SourceType
from switchbar.core.selection import BrowserActions, SelectionHandler, SessionContext


class FakeBrowser(BrowserActions):
    def __init__(self, active_index: Optional[int] = 2):
        self.active_index = active_index
        self.calls = []

    async def focus_tab(self, tab_id: int) -> None:
        self.calls.append(("focus", tab_id))

    async def current_tab_index(self) -> Optional[int]:
        return self.active_index

    async def open_tab(self, url: str, index: int) -> None:
        self.calls.append(("open", url, index))

    async def web_search(self, text: str) -> None:
        self.calls.append(("search", text))


@pytest.fixture
def session():
    return SessionContext(popup_open=True, current_tab_id=1)


class TestSelectionHandler:
    """Test dispatch per option type."""

    @pytest.mark.asyncio
    async def test_tab_switches_and_tracks_previous(self, session):
        browser = FakeBrowser()
        option = CandidateRecord(id="x", title="T", url="https://t.example/",
                                 source_type=SourceType.TAB, tab_id=9)
        assert await SelectionHandler(browser).handle(option, session)
        assert browser.calls == [("focus", 9)]
        assert session.current_tab_id == 9
        assert session.previous_tab_id == 1
        assert not session.popup_open

    @pytest.mark.asyncio
    async def test_tab_without_id(self, session):
        browser = FakeBrowser()
        option = CandidateRecord(id="x", title="T", url="https://t.example/", source_type=SourceType.TAB)
        assert not await SelectionHandler(browser).handle(option, session)
        assert browser.calls == []
        assert not session.popup_open

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", [SourceType.HISTORY, SourceType.BOOKMARK])
    async def test_page_opens_next_to_active_tab(self, session, kind):
        browser = FakeBrowser(active_index=2)
        option = CandidateRecord(id="x", title="P", url="https://p.example/", source_type=kind)
        assert await SelectionHandler(browser).handle(option, session)
        assert browser.calls == [("open", "https://p.example/", 3)]

    @pytest.mark.asyncio
    async def test_page_without_active_tab(self, session):
        browser = FakeBrowser(active_index=None)
        option = CandidateRecord(id="x", title="P", url="https://p.example/", source_type=SourceType.HISTORY)
        assert not await SelectionHandler(browser).handle(option, session)
        assert browser.calls == []

    @pytest.mark.asyncio
    async def test_command_runs_web_search(self, session):
        browser = FakeBrowser()
        assert await SelectionHandler(browser).handle(CommandOption(search_term="rust traits"), session)
        assert browser.calls == [("search", "rust traits")]
        assert not session.popup_open

    @pytest.mark.asyncio
    async def test_command_without_term(self, session):
        browser = FakeBrowser()
        assert not await SelectionHandler(browser).handle(CommandOption(search_term=""), session)
        assert browser.calls == []


class TestSessionContext:
    """Test tab tracking."""

    def test_same_tab_keeps_previous(self):
        session = SessionContext(current_tab_id=1, previous_tab_id=5)
        session.tab_activated(1)
        assert session.previous_tab_id == 5

    def test_popup_toggle(self):
        session = SessionContext()
        session.open_popup()
        assert session.popup_open
        session.close_popup()
        assert not session.popup_open
