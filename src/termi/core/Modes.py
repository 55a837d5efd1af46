# termi/core/Modes.py
"""Input modes of the editor.

Each mode is its own small dataclass carrying only the state that is meaningful while it is
active. The editor holds exactly one of them in ``Editor.mode``; the key binder dispatches on its
type.
"""

from dataclasses import dataclass, field
from typing import Union

from termi.core.TextBuffer import Position


@dataclass
class NormalMode:
    # Set after a Ctrl+Q on a dirty document; a second Ctrl+Q quits.
    quit_pending: bool = False


@dataclass
class SearchMode:
    query: str = ""
    matches: list[Position] = field(default_factory=list)
    current: int = 0

    @property
    def current_match(self) -> Union[Position, None]:
        if not self.matches:
            return None
        return self.matches[self.current]


@dataclass
class GoToLineMode:
    entry: str = ""


@dataclass
class AutocompleteMode:
    prefix: str
    suggestions: list[str]
    index: int = 0

    @property
    def selected(self) -> str:
        return self.suggestions[self.index]


InputMode = Union[NormalMode, SearchMode, GoToLineMode, AutocompleteMode]
