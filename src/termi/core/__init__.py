# src/termi/core/__init__.py
"""Public facade for termi.core: re-export main classes from CamelCase modules."""

from .BracketMatcher import find_match, match_at_cursor  # noqa: F401
from .History import History  # noqa: F401
from .Languages import LANGUAGES, PLAIN, Language, detect_language  # noqa: F401
from .Selection import Selection  # noqa: F401
from .TextBuffer import TextBuffer  # noqa: F401
from .Tokenizer import Token, TokenKind, tokenize  # noqa: F401


__all__ = [
    "History",
    "Language",
    "LANGUAGES",
    "PLAIN",
    "Selection",
    "TextBuffer",
    "Token",
    "TokenKind",
    "detect_language",
    "find_match",
    "match_at_cursor",
    "tokenize",
]
