"""Data models shared by the search core, providers and selection handling."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class SourceType(Enum):
    """Kind of option shown in the command bar."""
    TAB = "tab"
    HISTORY = "history"
    BOOKMARK = "bookmark"
    COMMAND = "command"

    @property
    def precedence(self) -> int:
        """Sort rank; lower wins. Commands always sort last."""
        return TYPE_ORDER.get(self, len(TYPE_ORDER))


TYPE_ORDER = {
    SourceType.TAB: 0,
    SourceType.HISTORY: 1,
    SourceType.BOOKMARK: 2,
}


@dataclass
class CandidateRecord:
    """A tab, bookmark or history entry eligible to be searched."""
    id: str
    title: str
    url: str
    source_type: SourceType
    tab_id: Optional[int] = None
    action_text: str = ""
    favicon_data: str = ""  # filled only for displayed results

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'type': self.source_type.value,
            'title': self.title,
            'url': self.url,
            'actionText': self.action_text,
            'faviconData': self.favicon_data,
        }
        if self.tab_id is not None:
            data['tabId'] = self.tab_id
        return data


@dataclass
class CommandOption:
    """Synthesized "search the web" option. Never indexed."""
    search_term: str
    name: str = ""
    icon: str = "🔍"
    action: str = "search"
    action_text: str = "Search"
    source_type: SourceType = SourceType.COMMAND

    def __post_init__(self):
        if not self.name:
            self.name = f'Search for "{self.search_term}"'

    def to_dict(self) -> dict:
        return {
            'type': self.source_type.value,
            'name': self.name,
            'icon': self.icon,
            'action': self.action,
            'actionText': self.action_text,
            'searchTerm': self.search_term,
        }


SwitchOption = Union[CandidateRecord, CommandOption]


@dataclass(frozen=True)
class IndexedDocument:
    """Indexable view of a candidate, split into separately weighted fields."""
    id: str
    title: str
    url_base: str
    url_query: str
    url_hash: str
    source_type: SourceType


@dataclass
class ScoredMatch:
    """A document matched by the index with its relevance score."""
    id: str
    score: float
    source_type: SourceType
    url: str
    title: str
