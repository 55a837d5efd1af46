# termi/core/Selection.py
"""Cursor and selection model.

A selection is stored exactly as the user made it: ``anchor`` is where it started and ``active``
follows the cursor. Consumers ask for the normalized ``(start, end)`` pair instead of reordering
the stored ends, so a drag can grow or shrink from either side.
"""

from dataclasses import dataclass
from typing import Optional

from termi.core.TextBuffer import Position, TextBuffer


@dataclass
class Selection:
    anchor: Position
    active: Position

    @property
    def is_empty(self) -> bool:
        return self.anchor == self.active

    def normalized(self) -> tuple[Position, Position]:
        """Returns (start, end) in document order."""
        if self.anchor <= self.active:
            return self.anchor, self.active
        return self.active, self.anchor

    def columns_on_row(self, row: int, line_length: int) -> Optional[tuple[int, int]]:
        """Selected column span ``[start, end)`` on one row, or None."""
        start, end = self.normalized()
        if self.is_empty or not start[0] <= row <= end[0]:
            return None
        col_start = start[1] if row == start[0] else 0
        col_end = end[1] if row == end[0] else line_length
        if col_end <= col_start:
            return None
        return col_start, col_end

    def clamped(self, buffer: TextBuffer) -> "Selection":
        return Selection(buffer.clamp(self.anchor), buffer.clamp(self.active))

    def text(self, buffer: TextBuffer) -> Optional[str]:
        """The covered text, or None for an empty selection."""
        if self.is_empty:
            return None
        start, end = self.normalized()
        return buffer.text_range(start, end) or None


def word_selection(buffer: TextBuffer, row: int, col: int) -> Selection:
    start, end = buffer.word_bounds(row, col)
    return Selection((row, start), (row, end))


def line_selection(buffer: TextBuffer, row: int) -> Selection:
    return Selection((row, 0), (row, buffer.line_length(row)))


def full_selection(buffer: TextBuffer) -> Selection:
    return Selection((0, 0), buffer.end)
