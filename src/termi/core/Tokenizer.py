# termi/core/Tokenizer.py
"""Tokenizer Module for the termi Editor
=======================================
Approximate, single-pass syntax classification of one line of text.

The tokenizer never looks at neighbouring lines: block comments and multi-line strings are not
recognised. Output spans are half-open ``[start, end)`` character ranges in the order they appear.
Characters not covered by any span (whitespace, for example) are rendered with the default style.
"""

import enum
from typing import NamedTuple

from termi.core.Languages import Language


class TokenKind(enum.Enum):
    KEYWORD = "keyword"
    STRING = "string"
    COMMENT = "comment"
    NUMBER = "number"
    NORMAL = "normal"


class Token(NamedTuple):
    start: int
    end: int
    kind: TokenKind


_QUOTES = ('"', "'")
_NUMBER_CHARS = frozenset("0123456789.eE+-")


def _is_ident_start(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == "_")


def _is_ident_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


def tokenize(line: str, language: Language) -> list[Token]:
    """Splits ``line`` into classified spans for ``language``.

    Rules are tried in priority order at every position: quoted string, line comment, number,
    identifier/keyword, then a one-character NORMAL token. A plain-text language yields a single
    NORMAL token covering the whole line.

    Args:
        line: The text of one buffer line.
        language: Table entry providing keywords and comment markers.

    Returns:
        list[Token]: Spans in left-to-right order.
    """
    if language.is_plain:
        return [Token(0, len(line), TokenKind.NORMAL)] if line else []

    tokens: list[Token] = []
    keywords = language.keywords
    markers = language.comment_markers
    length = len(line)
    i = 0

    while i < length:
        ch = line[i]

        if ch in _QUOTES:
            start = i
            i += 1
            while i < length and line[i] != ch:
                # A backslash escapes whatever follows it.
                i += 2 if line[i] == "\\" and i + 1 < length else 1
            if i < length:
                i += 1  # closing quote
            tokens.append(Token(start, i, TokenKind.STRING))
            continue

        if any(line.startswith(marker, i) for marker in markers):
            tokens.append(Token(i, length, TokenKind.COMMENT))
            break

        if ch.isascii() and ch.isdigit():
            start = i
            while i < length and line[i] in _NUMBER_CHARS:
                i += 1
            tokens.append(Token(start, i, TokenKind.NUMBER))
            continue

        if _is_ident_start(ch):
            start = i
            while i < length and _is_ident_char(line[i]):
                i += 1
            word = line[start:i]
            kind = TokenKind.KEYWORD if word in keywords else TokenKind.NORMAL
            tokens.append(Token(start, i, kind))
            continue

        tokens.append(Token(i, i + 1, TokenKind.NORMAL))
        i += 1

    return tokens
