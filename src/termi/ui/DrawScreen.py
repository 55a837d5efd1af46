# termi/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen renders the termi editor with curses.

It is responsible for:
- displaying text with token colors, selection, search and bracket highlights,
- drawing the line-number gutter and the status bar,
- the autocomplete popup,
- positioning the terminal cursor.

Frames are incremental. A full redraw happens on resize, on a mode switch, or when the editor
flags a structural change; when only the scroll position moved every visible text row is
rewritten; otherwise only rows whose content or styling differ from the previous frame are
touched. Output is staged with `noutrefresh`; the editor calls `curses.doupdate` once per frame.
"""

import curses
import functools
import logging
import os
from typing import TYPE_CHECKING, Any, Optional

from wcwidth import wcwidth

from termi.core.Languages import Language
from termi.core.Modes import AutocompleteMode, GoToLineMode, SearchMode
from termi.core.Tokenizer import Token, TokenKind, tokenize

if TYPE_CHECKING:
    from termi.core.Editor import Editor


COLOR_NAMES = {
    "black": "COLOR_BLACK",
    "red": "COLOR_RED",
    "green": "COLOR_GREEN",
    "yellow": "COLOR_YELLOW",
    "blue": "COLOR_BLUE",
    "magenta": "COLOR_MAGENTA",
    "cyan": "COLOR_CYAN",
    "white": "COLOR_WHITE",
}
COLOR_PAIRS = {"keyword": 1, "string": 2, "comment": 3, "number": 4, "bracket": 5, "line_number": 6}
POPUP_MAX_ITEMS = 8
POPUP_MIN_WIDTH = 10


@functools.lru_cache(maxsize=4096)
def tokenize_cached(line: str, language: Language) -> tuple[Token, ...]:
    return tuple(tokenize(line, language))


def char_width(ch: str) -> int:
    """Cells taken by ``ch``; control characters are drawn as one cell."""
    w = wcwidth(ch)
    return 1 if w < 0 else w


def displayable(ch: str) -> str:
    if ch == "\t":
        return " "
    if wcwidth(ch) < 0:
        return "?"
    return ch


## ================= class DrawScreen ==============================
class DrawScreen:
    """DrawScreen Class
    =========================
    Attributes:
        MIN_WINDOW_WIDTH (int): Narrowest window the editor draws into.
        MIN_WINDOW_HEIGHT (int): Lowest window the editor draws into.
        GUTTER_WIDTH (int): Width of the line-number gutter.
        editor (Editor): The owning editor.
        stdscr (curses.window): The main curses window object.
        colors (dict[str, int]): Style name -> curses attribute.
        last_redraw_kind (str): "full", "scroll" or "lines", describing the previous frame.
    """

    MIN_WINDOW_WIDTH = 20
    MIN_WINDOW_HEIGHT = 3
    GUTTER_WIDTH = 6

    def __init__(self, editor: "Editor", config: dict[str, Any]) -> None:
        self.editor = editor
        self.config = config
        self.stdscr = editor.stdscr
        self.show_line_numbers = bool(config.get("editor", {}).get("show_line_numbers", True))
        self.colors: dict[str, int] = self._monochrome_colors()

        self.last_window_size: tuple[int, int] = (0, 0)
        self.last_redraw_kind = ""
        self._last_mode_type: Optional[type] = None
        self._row_cache: dict[int, tuple] = {}
        self._last_status: Optional[tuple[str, int]] = None

    # ---------------------- colors ----------------------
    @staticmethod
    def _monochrome_colors() -> dict[str, int]:
        return {
            "normal": curses.A_NORMAL,
            "keyword": curses.A_BOLD,
            "string": curses.A_NORMAL,
            "comment": curses.A_DIM,
            "number": curses.A_NORMAL,
            "bracket": curses.A_BOLD | curses.A_UNDERLINE,
            "line_number": curses.A_DIM,
            "selection": curses.A_REVERSE,
            "search_current": curses.A_REVERSE,
            "search": curses.A_BOLD,
            "status": curses.A_REVERSE,
            "popup": curses.A_REVERSE,
            "popup_selected": curses.A_REVERSE | curses.A_BOLD,
        }

    def init_colors(self) -> None:
        """Creates color pairs from the `[colors]` config; keeps monochrome styles on failure."""
        color_config = self.config.get("colors", {})
        try:
            if not curses.has_colors():
                logging.info("Terminal has no color support; using monochrome styles.")
                return
            curses.start_color()
            try:
                curses.use_default_colors()
                background = -1
            except curses.error:
                background = curses.COLOR_BLACK

            for name, pair in COLOR_PAIRS.items():
                const_name = COLOR_NAMES.get(str(color_config.get(name, "white")).lower(), "COLOR_WHITE")
                curses.init_pair(pair, getattr(curses, const_name), background)
        except curses.error as e:
            logging.warning(f"Color initialization failed ({e}); using monochrome styles.")
            return

        self.colors.update(
            keyword=curses.color_pair(COLOR_PAIRS["keyword"]),
            string=curses.color_pair(COLOR_PAIRS["string"]),
            comment=curses.color_pair(COLOR_PAIRS["comment"]) | curses.A_DIM,
            number=curses.color_pair(COLOR_PAIRS["number"]),
            bracket=curses.color_pair(COLOR_PAIRS["bracket"]) | curses.A_BOLD,
            line_number=curses.color_pair(COLOR_PAIRS["line_number"]) | curses.A_DIM,
        )

    # ---------------------- geometry ----------------------
    @property
    def gutter_width(self) -> int:
        return self.GUTTER_WIDTH if self.show_line_numbers else 0

    def text_area_size(self) -> tuple[int, int]:
        """Height and width of the text area (screen minus gutter and status row)."""
        height, width = self.stdscr.getmaxyx()
        return max(0, height - 1), max(0, width - self.gutter_width)

    def update_viewport_geometry(self) -> None:
        self.editor.viewport.resize(*self.text_area_size())

    def screen_to_buffer(self, screen_y: int, screen_x: int) -> Optional[tuple[int, int]]:
        """Maps a screen cell inside the text area to an unclamped buffer position."""
        text_height, _ = self.text_area_size()
        if screen_y < 0 or screen_y >= text_height or screen_x < self.gutter_width:
            return None
        return self.editor.viewport.to_buffer(screen_y, screen_x - self.gutter_width)

    # ---------------------- redraw policy ----------------------
    def _needs_full_redraw(self) -> bool:
        if self.stdscr.getmaxyx() != self.last_window_size:
            return True
        if type(self.editor.mode) is not self._last_mode_type:
            return True
        return bool(self.editor._force_full_redraw)

    def draw(self) -> None:
        """Renders one frame into the curses virtual screen."""
        height, width = self.stdscr.getmaxyx()
        if height < self.MIN_WINDOW_HEIGHT or width < self.MIN_WINDOW_WIDTH:
            self._show_small_window_error(height, width)
            return

        viewport = self.editor.viewport
        if self._needs_full_redraw():
            kind = "full"
            self.stdscr.erase()
            self._row_cache.clear()
            self._last_status = None
        elif viewport.scroll_changed:
            kind = "scroll"
            self._row_cache.clear()
        else:
            kind = "lines"

        self._draw_text_rows(kind)
        if isinstance(self.editor.mode, AutocompleteMode):
            self._draw_autocomplete_popup()
        self._draw_status_bar()
        self._position_cursor()

        try:
            self.stdscr.noutrefresh()
        except curses.error as e:
            logging.error(f"Curses error during noutrefresh: {e}")

        viewport.commit_frame()
        self.last_window_size = (height, width)
        self._last_mode_type = type(self.editor.mode)
        self.last_redraw_kind = kind

    def _show_small_window_error(self, height: int, width: int) -> None:
        msg = f"Window too small ({width}x{height})"
        try:
            self.stdscr.erase()
            self.stdscr.addstr(0, 0, self.truncate_string(msg, max(0, width - 1)))
            self.stdscr.noutrefresh()
        except curses.error:
            pass
        self.last_window_size = (0, 0)
        self._row_cache.clear()

    # ---------------------- text area ----------------------
    def _line_styles(self, row: int, line: str) -> list[int]:
        """Per-character attributes for one buffer line, lowest precedence applied first."""
        editor = self.editor
        attrs = [self.colors["normal"]] * len(line)

        for token in tokenize_cached(line, editor.language):
            if token.kind is TokenKind.NORMAL:
                continue
            attr = self.colors[token.kind.name.lower()]
            for i in range(token.start, token.end):
                attrs[i] = attr

        if editor.selection is not None and not editor.selection.is_empty:
            span = editor.selection.columns_on_row(row, len(line))
            if span is not None:
                for i in range(span[0], min(span[1], len(line))):
                    attrs[i] = self.colors["selection"]

        if editor.matched_bracket is not None:
            for b_row, b_col in editor.matched_bracket:
                if b_row == row and b_col < len(line):
                    attrs[b_col] = self.colors["bracket"]

        mode = editor.mode
        if isinstance(mode, SearchMode) and mode.query:
            q_len = len(mode.query)
            for idx, (m_row, m_col) in enumerate(mode.matches):
                if m_row != row:
                    continue
                attr = self.colors["search_current"] if idx == mode.current else self.colors["search"]
                for i in range(m_col, min(m_col + q_len, len(line))):
                    attrs[i] = attr
        return attrs

    def _visible_segments(self, line: str, attrs: list[int], width: int) -> tuple[tuple[str, int], ...]:
        """Cuts the horizontally visible part of a line into (text, attr) runs."""
        start = self.editor.viewport.scroll_col
        segments: list[tuple[str, int]] = []
        used = 0
        for i in range(start, len(line)):
            ch = line[i]
            w = char_width(ch)
            if used + w > width:
                break
            used += w
            text = displayable(ch)
            if segments and segments[-1][1] == attrs[i]:
                segments[-1] = (segments[-1][0] + text, attrs[i])
            else:
                segments.append((text, attrs[i]))
        return tuple(segments)

    def _draw_text_rows(self, kind: str) -> None:
        editor = self.editor
        text_height, text_width = self.text_area_size()
        scroll_row = editor.viewport.scroll_row
        lines = editor.buffer.lines

        for screen_y in range(text_height):
            row = scroll_row + screen_y
            if row < len(lines):
                line = lines[row]
                gutter = f"{row + 1:>4} │" if self.show_line_numbers else ""
                segments = self._visible_segments(line, self._line_styles(row, line), text_width)
                signature: tuple = (gutter, segments)
            else:
                gutter, segments = "", ()
                signature = ("", ())

            if kind == "lines" and self._row_cache.get(screen_y) == signature:
                continue
            self._draw_row(screen_y, gutter, segments)
            self._row_cache[screen_y] = signature

    def _draw_row(self, screen_y: int, gutter: str, segments: tuple[tuple[str, int], ...]) -> None:
        try:
            self.stdscr.move(screen_y, 0)
            self.stdscr.clrtoeol()
            if gutter:
                self.stdscr.addstr(screen_y, 0, gutter, self.colors["line_number"])
            x = self.gutter_width
            for text, attr in segments:
                self.stdscr.addstr(screen_y, x, text, attr)
                x += sum(char_width(ch) for ch in text)
        except curses.error as e:
            logging.debug(f"DrawScreen: curses error on row {screen_y}: {e}")

    # ---------------------- popup ----------------------
    def _draw_autocomplete_popup(self) -> None:
        mode = self.editor.mode
        if not isinstance(mode, AutocompleteMode) or not mode.suggestions:
            return
        text_height, _ = self.text_area_size()
        _, screen_width = self.stdscr.getmaxyx()
        cursor_y, cursor_x = self._cursor_screen_position()

        first = max(0, mode.index - POPUP_MAX_ITEMS + 1)
        visible = mode.suggestions[first:first + POPUP_MAX_ITEMS]
        popup_width = max(POPUP_MIN_WIDTH, max(len(s) for s in visible) + 2)
        popup_x = max(0, min(cursor_x, screen_width - popup_width - 1))

        for offset, suggestion in enumerate(visible):
            y = cursor_y + 1 + offset
            if y >= text_height:
                break
            attr = self.colors["popup_selected"] if first + offset == mode.index else self.colors["popup"]
            label = self.truncate_string(f" {suggestion}".ljust(popup_width), screen_width - popup_x - 1)
            try:
                self.stdscr.addstr(y, popup_x, label, attr)
            except curses.error as e:
                logging.debug(f"DrawScreen: popup row {y} not drawn: {e}")
            # The popup covers text; repaint the row once it is gone.
            self._row_cache.pop(y, None)

    # ---------------------- status bar ----------------------
    def status_text(self) -> str:
        """Text of the status row for the current mode."""
        editor = self.editor
        mode = editor.mode
        if isinstance(mode, SearchMode):
            total = len(mode.matches)
            position = mode.current + 1 if total else 0
            return f"{self._prompt_text()} | {total} results found ({position}/{total})"
        if isinstance(mode, GoToLineMode):
            return self._prompt_text()
        if isinstance(mode, AutocompleteMode):
            return f"Complete '{mode.prefix}': {mode.index + 1}/{len(mode.suggestions)}"

        name = os.path.basename(editor.filename) if editor.filename else "No Name"
        return (
            f" {name}{'*' if editor.modified else ''} | {editor.language.tag} | "
            f"Ln {editor.cursor_y + 1}/{len(editor.buffer)} | Col {editor.cursor_x + 1} | "
            f"{editor.status_message}"
        )

    def _prompt_text(self) -> str:
        mode = self.editor.mode
        if isinstance(mode, SearchMode):
            return f"Search: {mode.query}"
        if isinstance(mode, GoToLineMode):
            return f"Go to line: {mode.entry}"
        return ""

    def _draw_status_bar(self) -> None:
        """Repaints the status row when its text changed since the last frame."""
        height, width = self.stdscr.getmaxyx()
        text = self.truncate_string(self.status_text(), width - 1)
        if self._last_status == (text, width):
            return
        padded = text + " " * (width - 1 - sum(char_width(ch) for ch in text))
        try:
            self.stdscr.addstr(height - 1, 0, padded, self.colors["status"])
        except curses.error as e:
            logging.debug(f"DrawScreen: status bar not drawn: {e}")
            return
        self._last_status = (text, width)

    def truncate_string(self, s: str, max_width: int) -> str:
        """Return `s` clipped to visual width `max_width`, counting wide glyphs as two cells."""
        result: list[str] = []
        consumed = 0
        for ch in s:
            w = char_width(ch)
            if consumed + w > max_width:
                break
            result.append(ch)
            consumed += w
        return "".join(result)

    # ---------------------- cursor ----------------------
    def _cursor_screen_position(self) -> tuple[int, int]:
        editor = self.editor
        viewport = editor.viewport
        line = editor.buffer.lines[editor.cursor_y]
        visible = line[viewport.scroll_col:max(viewport.scroll_col, editor.cursor_x)]
        x = self.gutter_width + sum(char_width(ch) for ch in visible)
        return editor.cursor_y - viewport.scroll_row, x

    def _position_cursor(self) -> None:
        """Places the terminal cursor; prompts keep it in the status row."""
        editor = self.editor
        height, width = self.stdscr.getmaxyx()
        text_height, _ = self.text_area_size()

        if isinstance(editor.mode, (SearchMode, GoToLineMode)):
            prompt = self._prompt_text()
            y, x = height - 1, min(width - 1, sum(char_width(ch) for ch in prompt))
        else:
            y, x = self._cursor_screen_position()
            if not (0 <= y < text_height and self.gutter_width <= x < width):
                self._set_cursor_visibility(0)
                return
        self._set_cursor_visibility(1)
        try:
            self.stdscr.move(y, x)
        except curses.error as e:
            logging.debug(f"DrawScreen: cannot move cursor to ({y}, {x}): {e}")

    @staticmethod
    def _set_cursor_visibility(visibility: int) -> None:
        try:
            curses.curs_set(visibility)
        except curses.error:
            pass
