# termi/core/TextBuffer.py
"""TextBuffer Module for the termi Editor
========================================
This module provides the `TextBuffer` class, the owner of the document's lines, together with the
character classification used by every word-aware operation.

The buffer is a list of Python strings, one per line, addressed by (row, col) where ``col`` counts
code points. It always holds at least one line. Edit primitives take the position they act on and
return the cursor position that results from the edit, so the caller (the editor context) stays in
charge of cursor, selection, history and dirty tracking.

Key Features:
-------------
- Character and multi-line text insertion, with auto-closing of opening delimiters.
- Backward/forward deletion that joins lines at the boundaries.
- Line splitting with language-aware automatic indentation.
- Range extraction and deletion over normalized (start, end) positions.
- Word motions and word deletions over three character classes.
- Snapshots (`clone`/`restore`) used by the undo history.
"""

import enum
import logging
from typing import Iterable, Optional

from termi.core.Languages import INDENT_WIDTH, PLAIN, Language, next_line_indent


Position = tuple[int, int]

PUNCTUATION_CHARS = frozenset(".,[]{}$();:!?@#%^&*+-=/\\|<>`'\"")

AUTO_CLOSE_PAIRS: dict[str, str] = {"(": ")", "[": "]", "{": "}", '"': '"', "'": "'"}


class CharClass(enum.Enum):
    WHITESPACE = "whitespace"
    PUNCTUATION = "punctuation"
    WORD = "word"


def char_class(ch: str) -> CharClass:
    """Classifies one character for word motions.

    Symbols outside the fixed punctuation set are treated like punctuation, so every
    non-whitespace character belongs to some word.
    """
    if ch in (" ", "\t") or ch.isspace():
        return CharClass.WHITESPACE
    if ch.isalnum() or ch == "_":
        return CharClass.WORD
    return CharClass.PUNCTUATION


def is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


# ==================== TextBuffer Class ====================
class TextBuffer:
    """Class TextBuffer
    ====================
    Mutable, line-oriented document storage.

    Attributes:
        lines (list[str]): The document, one string per line. Never empty.
    """

    def __init__(self, lines: Optional[Iterable[str]] = None):
        self.lines: list[str] = list(lines) if lines is not None else []
        if not self.lines:
            self.lines = [""]

    def __len__(self) -> int:
        return len(self.lines)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TextBuffer):
            return self.lines == other.lines
        return NotImplemented

    def __repr__(self) -> str:
        return f"TextBuffer({self.lines!r})"

    @property
    def last_row(self) -> int:
        return len(self.lines) - 1

    def line_length(self, row: int) -> int:
        return len(self.lines[row])

    def to_text(self) -> str:
        return "\n".join(self.lines)

    # --------------------- Snapshots ---------------------
    def clone(self) -> tuple[str, ...]:
        """Returns an immutable copy of the current lines."""
        return tuple(self.lines)

    def restore(self, snapshot: Iterable[str]) -> None:
        self.lines = list(snapshot) or [""]

    def clamp(self, pos: Position) -> Position:
        """Pulls a position back inside the buffer."""
        row = min(max(pos[0], 0), self.last_row)
        col = min(max(pos[1], 0), len(self.lines[row]))
        return row, col

    @property
    def end(self) -> Position:
        return self.last_row, len(self.lines[-1])

    # --------------------- Insertion ---------------------
    def insert_char(self, pos: Position, ch: str, auto_close: bool = True) -> Position:
        """Inserts one character; opening delimiters also get their closer.

        The closer is always inserted, whether or not the text is already balanced, and the
        returned cursor sits between the pair.
        """
        row, col = pos
        line = self.lines[row]
        closer = AUTO_CLOSE_PAIRS.get(ch, "") if auto_close else ""
        self.lines[row] = line[:col] + ch + closer + line[col:]
        return row, col + 1

    def insert_text(self, pos: Position, text: str) -> Position:
        """Inserts text that may span several lines.

        Line breaks are normalized first. The current line is split at the cursor: the first
        piece joins the left half, interior pieces become whole lines, the last piece is followed by
        the original remainder. The returned cursor is at the end of the inserted content.
        """
        row, col = pos
        pieces = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        line = self.lines[row]
        left, rest = line[:col], line[col:]

        if len(pieces) == 1:
            self.lines[row] = left + text + rest
            return row, col + len(text)

        new_lines = [left + pieces[0], *pieces[1:-1], pieces[-1] + rest]
        self.lines[row:row + 1] = new_lines
        return row + len(pieces) - 1, len(pieces[-1])

    def split_line(self, pos: Position, language: Language = PLAIN) -> Position:
        """Splits the line at ``pos``; the new line is auto-indented from the left half."""
        row, col = pos
        line = self.lines[row]
        left, right = line[:col], line[col:]
        indent = next_line_indent(left, language)
        self.lines[row] = left
        self.lines.insert(row + 1, " " * indent + right)
        return row + 1, indent

    def indent(self, pos: Position) -> Position:
        row, col = pos
        line = self.lines[row]
        self.lines[row] = line[:col] + " " * INDENT_WIDTH + line[col:]
        return row, col + INDENT_WIDTH

    def unindent(self, pos: Position) -> Optional[Position]:
        """Removes up to one indent unit of leading whitespace from the line.

        Returns:
            The adjusted cursor, or None when the line had no leading whitespace.
        """
        row, col = pos
        line = self.lines[row]
        removed_cols = 0
        removed_chars = 0
        while removed_chars < len(line) and removed_cols < INDENT_WIDTH:
            ch = line[removed_chars]
            if ch == " ":
                removed_cols += 1
            elif ch == "\t":
                removed_cols += INDENT_WIDTH
            else:
                break
            removed_chars += 1
        if not removed_chars:
            return None
        self.lines[row] = line[removed_chars:]
        return row, max(0, col - removed_chars)

    # --------------------- Deletion ---------------------
    def delete_backward(self, pos: Position) -> Optional[Position]:
        """Backspace. Returns the new cursor, or None at the start of the buffer."""
        row, col = pos
        if col > 0:
            line = self.lines[row]
            self.lines[row] = line[:col - 1] + line[col:]
            return row, col - 1
        if row > 0:
            return self._join_with_next(row - 1)
        return None

    def delete_forward(self, pos: Position) -> Optional[Position]:
        """Delete key. Returns the new cursor, or None at the end of the buffer."""
        row, col = pos
        line = self.lines[row]
        if col < len(line):
            self.lines[row] = line[:col] + line[col + 1:]
            return row, col
        if row < self.last_row:
            return self._join_with_next(row)
        return None

    def _join_with_next(self, row: int) -> Position:
        join_col = len(self.lines[row])
        self.lines[row] += self.lines.pop(row + 1)
        return row, join_col

    def text_range(self, start: Position, end: Position) -> str:
        """Text between two normalized positions, newline-joined."""
        (r1, c1), (r2, c2) = start, end
        if r1 == r2:
            return self.lines[r1][c1:c2]
        parts = [self.lines[r1][c1:], *self.lines[r1 + 1:r2], self.lines[r2][:c2]]
        return "\n".join(parts)

    def delete_range(self, start: Position, end: Position) -> Position:
        """Removes the text between two normalized positions; the cursor lands on ``start``."""
        (r1, c1), (r2, c2) = start, end
        head = self.lines[r1][:c1]
        tail = self.lines[r2][c2:]
        self.lines[r1:r2 + 1] = [head + tail]
        return r1, c1

    def replace_span(self, row: int, start: int, end: int, text: str) -> Position:
        line = self.lines[row]
        self.lines[row] = line[:start] + text + line[end:]
        return row, start + len(text)

    # --------------------- Words ---------------------
    def word_right(self, pos: Position) -> Position:
        row, col = pos
        line = self.lines[row]
        if col >= len(line):
            return (row + 1, 0) if row < self.last_row else pos
        col = self._skip_whitespace_forward(line, col)
        if col < len(line):
            col = self._run_end(line, col)
        return row, col

    def word_left(self, pos: Position) -> Position:
        row, col = pos
        if col == 0:
            return (row - 1, len(self.lines[row - 1])) if row > 0 else pos
        line = self.lines[row]
        col = self._skip_whitespace_backward(line, col)
        if col > 0:
            col = self._run_start(line, col)
        return row, col

    def delete_word_backward(self, pos: Position) -> Optional[Position]:
        """Deletes whitespace left of the cursor if any, otherwise the word or symbol before it."""
        row, col = pos
        if col == 0:
            return self._join_with_next(row - 1) if row > 0 else None
        line = self.lines[row]
        start = self._skip_whitespace_backward(line, col)
        if start == col:
            start = self._run_start(line, col)
        self.lines[row] = line[:start] + line[col:]
        return row, start

    def delete_word_forward(self, pos: Position) -> Optional[Position]:
        """Deletes whitespace right of the cursor if any, otherwise the next word and its trailing blanks."""
        row, col = pos
        line = self.lines[row]
        if col >= len(line):
            return self._join_with_next(row) if row < self.last_row else None
        end = self._skip_whitespace_forward(line, col)
        if end == col:
            end = self._skip_whitespace_forward(line, self._run_end(line, col))
        self.lines[row] = line[:col] + line[end:]
        return row, col

    def word_bounds(self, row: int, col: int) -> tuple[int, int]:
        """Bounds of the whitespace run, symbol, or word run at ``col``."""
        line = self.lines[row]
        if not line:
            return 0, 0
        col = min(col, len(line) - 1)
        cls = char_class(line[col])
        if cls is CharClass.PUNCTUATION:
            return col, col + 1
        start, end = col, col + 1
        while start > 0 and char_class(line[start - 1]) is cls:
            start -= 1
        while end < len(line) and char_class(line[end]) is cls:
            end += 1
        return start, end

    def word_prefix(self, pos: Position) -> tuple[str, int]:
        """Word characters immediately left of ``pos`` and the column they start at."""
        row, col = pos
        line = self.lines[row]
        start = col
        while start > 0 and is_word_char(line[start - 1]):
            start -= 1
        return line[start:col], start

    def collect_words(self, min_length: int = 2) -> set[str]:
        words: set[str] = set()
        for line in self.lines:
            current = []
            for ch in line:
                if is_word_char(ch):
                    current.append(ch)
                    continue
                if len(current) >= min_length:
                    words.add("".join(current))
                current = []
            if len(current) >= min_length:
                words.add("".join(current))
        return words

    def find_all(self, query: str) -> list[Position]:
        """All (row, col) occurrences of ``query``, overlapping ones included."""
        if not query:
            return []
        matches: list[Position] = []
        for row, line in enumerate(self.lines):
            col = line.find(query)
            while col != -1:
                matches.append((row, col))
                col = line.find(query, col + 1)
        logging.debug(f"TextBuffer: '{query}' found {len(matches)} time(s).")
        return matches

    # --------------------- helpers ---------------------
    @staticmethod
    def _skip_whitespace_forward(line: str, col: int) -> int:
        while col < len(line) and char_class(line[col]) is CharClass.WHITESPACE:
            col += 1
        return col

    @staticmethod
    def _skip_whitespace_backward(line: str, col: int) -> int:
        while col > 0 and char_class(line[col - 1]) is CharClass.WHITESPACE:
            col -= 1
        return col

    @staticmethod
    def _run_end(line: str, col: int) -> int:
        """End of the word run (or single symbol) starting at ``col``."""
        if char_class(line[col]) is CharClass.PUNCTUATION:
            return col + 1
        while col < len(line) and char_class(line[col]) is CharClass.WORD:
            col += 1
        return col

    @staticmethod
    def _run_start(line: str, col: int) -> int:
        """Start of the word run (or single symbol) ending at ``col``."""
        if char_class(line[col - 1]) is CharClass.PUNCTUATION:
            return col - 1
        while col > 0 and char_class(line[col - 1]) is CharClass.WORD:
            col -= 1
        return col
