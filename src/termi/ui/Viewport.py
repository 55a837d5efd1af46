# termi/ui/Viewport.py
"""Viewport: which part of the buffer is on screen.

`scroll_row`/`scroll_col` are the first buffer row and column shown in the text area. The values
of the previous frame are kept so the renderer can tell a pure scroll from other changes.
Wheel scrolling sets `cursor_locked`, which stops the scroll from snapping back to the cursor
until the cursor moves again.
"""

import logging


class Viewport:
    SCROLL_STEP = 3

    def __init__(self, height: int = 0, width: int = 0):
        self.height = height
        self.width = width
        self.scroll_row = 0
        self.scroll_col = 0
        self.cursor_locked = False
        self.last_scroll_row = 0
        self.last_scroll_col = 0

    def resize(self, height: int, width: int) -> None:
        self.height = max(0, height)
        self.width = max(0, width)

    def reset(self) -> None:
        self.scroll_row = self.scroll_col = 0
        self.cursor_locked = False

    @property
    def scroll_changed(self) -> bool:
        return (self.scroll_row, self.scroll_col) != (self.last_scroll_row, self.last_scroll_col)

    def commit_frame(self) -> None:
        """Remembers the scroll position that was just drawn."""
        self.last_scroll_row = self.scroll_row
        self.last_scroll_col = self.scroll_col

    def clamp_to_cursor(self, row: int, col: int) -> bool:
        """Scrolls the minimum amount needed to show (row, col).

        Does nothing while the cursor is locked by wheel scrolling.

        Returns:
            bool: True if the scroll position changed.
        """
        if self.cursor_locked:
            return False
        before = (self.scroll_row, self.scroll_col)

        if row < self.scroll_row:
            self.scroll_row = row
        elif self.height > 0 and row >= self.scroll_row + self.height:
            self.scroll_row = row - self.height + 1

        if col < self.scroll_col:
            self.scroll_col = col
        elif self.width > 0 and col >= self.scroll_col + self.width:
            self.scroll_col = col - self.width + 1

        return (self.scroll_row, self.scroll_col) != before

    def scroll_lines(self, delta: int, line_count: int) -> bool:
        """Scrolls by ``delta`` rows without moving the cursor.

        Returns:
            bool: True if the scroll position changed.
        """
        self.cursor_locked = True
        max_scroll = max(0, line_count - self.height)
        new_row = min(max(self.scroll_row + delta, 0), max_scroll)
        if new_row == self.scroll_row:
            return False
        logging.debug(f"Viewport: wheel scroll {self.scroll_row} -> {new_row}")
        self.scroll_row = new_row
        return True

    def unlock(self) -> None:
        self.cursor_locked = False

    def visible_rows(self, line_count: int) -> range:
        return range(self.scroll_row, min(line_count, self.scroll_row + self.height))

    def to_buffer(self, screen_row: int, screen_col: int) -> tuple[int, int]:
        """Maps a text-area cell to an unclamped buffer position."""
        return self.scroll_row + screen_row, self.scroll_col + screen_col
