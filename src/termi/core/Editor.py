# termi/core/Editor.py
"""Editor Module for the termi Editor
====================================
This module provides the `Editor` class, the single owner of all editing state: the text buffer,
cursor and selection, undo history, input mode, viewport, clipboard and file bookkeeping.

Every user action arrives here through the `KeyBinder` (keys and mouse) and runs to completion
before the next event is read, so no state is ever shared with another thread. Action methods
return ``True`` when the screen needs to be redrawn.

Edits follow one path (`_edit`): the text buffer applies the change and returns the new cursor,
the history records the resulting document, the selection is cleared, the cursor is clamped, and
the modified flag is recomputed against the last saved state.
"""

import curses
import logging
import os
import time
from typing import Any, Callable, Optional

import pyperclip

from termi.core.BracketMatcher import match_at_cursor
from termi.core.History import History
from termi.core.Languages import PLAIN, Language, detect_language
from termi.core.Modes import AutocompleteMode, GoToLineMode, InputMode, NormalMode, SearchMode
from termi.core.Selection import Selection, full_selection, line_selection, word_selection
from termi.core.TextBuffer import Position, TextBuffer
from termi.integrations.Presence import PresenceReporter
from termi.ui.DrawScreen import DrawScreen
from termi.ui.KeyBinder import KeyBinder
from termi.ui.Viewport import Viewport
from termi.utils import storage

logger = logging.getLogger("termi")

HELP_STATUS = (
    "Ctrl+S Save | Ctrl+F Find | Ctrl+G Go to line | Ctrl+Space Complete | "
    "Ctrl+Z/Y Undo/Redo | Ctrl+C/X/V Clipboard | Ctrl+Q Quit"
)
QUIT_WARNING = "File not saved! Press Ctrl+Q again to quit, any other key to cancel"
MULTI_CLICK_INTERVAL = 0.5


class Editor:
    """Class Editor
    ==================
    Owning context object of the termi editor.

    Attributes:
        stdscr: The curses window the editor draws on.
        config (dict): Merged application configuration.
        buffer (TextBuffer): The document being edited.
        cursor_y, cursor_x (int): Cursor row and column.
        selection (Selection | None): Current selection, if any.
        history (History): Snapshot undo/redo history.
        mode (InputMode): Active input mode.
        viewport (Viewport): Visible window over the buffer.
        language (Language): Language table entry of the current document.
        filename (str | None): Absolute path of the current document.
        root_dir (str): Working root chosen at start-up.
        modified (bool): True if the buffer differs from its last saved state.
        dirty_files (set[str]): Paths with unsaved changes, cached buffers included.
        matched_bracket (tuple | None): Bracket pair highlighted around the cursor.
        status_message (str): Transient message shown in the status bar.
    """

    def __init__(
        self,
        stdscr: Any,
        config: dict[str, Any],
        presence: Optional[PresenceReporter] = None,
    ):
        self.stdscr = stdscr
        self.config = config
        editor_config = config.get("editor", {})

        self.buffer = TextBuffer()
        self.cursor_y = 0
        self.cursor_x = 0
        self.selection: Optional[Selection] = None
        self.history = History(self, limit=editor_config.get("history_limit"))
        self.mode: InputMode = NormalMode()
        self.viewport = Viewport()
        self.language: Language = PLAIN
        self.matched_bracket: Optional[tuple[Position, Position]] = None

        self.filename: Optional[str] = None
        self.root_dir = os.getcwd()
        self.modified = False
        self.dirty_files: set[str] = set()
        self.file_buffers: dict[str, tuple[str, ...]] = {}
        self._saved_snapshots: dict[str, tuple[str, ...]] = {}
        self._saved_snapshot: tuple[str, ...] = self.buffer.clone()

        self.use_system_clipboard = bool(editor_config.get("use_system_clipboard", True))
        self.pyclip_available = self._check_pyclip_availability() if self.use_system_clipboard else False
        self.internal_clipboard = ""

        self.presence = presence or PresenceReporter()
        self.status_message = HELP_STATUS
        self.running = False
        self._force_full_redraw = True

        self._mouse_dragging = False
        self._drag_origin: Optional[Position] = None
        self._last_click_time = 0.0
        self._last_click_pos: Optional[Position] = None
        self._click_count = 0

        self.drawer = DrawScreen(self, config)
        self.keybinder = KeyBinder(self)
        logger.debug("Editor initialized.")

    # ---------------------- state helpers ----------------------
    @property
    def cursor(self) -> Position:
        return self.cursor_y, self.cursor_x

    def _set_cursor(self, pos: Position) -> None:
        self.cursor_y, self.cursor_x = self.buffer.clamp(pos)

    def _set_status_message(self, message: str) -> None:
        self.status_message = str(message)

    def _ensure_cursor_in_bounds(self) -> None:
        self._set_cursor(self.cursor)
        if self.selection is not None:
            self.selection = self.selection.clamped(self.buffer)

    def _update_bracket_match(self) -> None:
        self.matched_bracket = match_at_cursor(self.buffer.lines, self.cursor_y, self.cursor_x)

    def _refresh_modified(self) -> None:
        self.modified = self.buffer.clone() != self._saved_snapshot
        if self.filename:
            if self.modified:
                self.dirty_files.add(self.filename)
            else:
                self.dirty_files.discard(self.filename)

    def _after_history_restore(self) -> None:
        """Called by History after it swapped the buffer contents."""
        self.selection = None
        self._ensure_cursor_in_bounds()
        self._refresh_modified()
        self._update_bracket_match()
        self.viewport.unlock()
        self._force_full_redraw = True

    def is_dirty(self, path: str) -> bool:
        """Answers whether ``path`` has unsaved changes in this session."""
        return os.path.abspath(os.path.expanduser(path)) in self.dirty_files

    def set_mode(self, mode: InputMode) -> None:
        self.mode = mode
        self._force_full_redraw = True

    # ---------------------- edits ----------------------
    def _edit(self, operation: Callable[..., Optional[Position]], *args: Any) -> bool:
        """Runs one buffer mutation and records it.

        Args:
            operation: A TextBuffer method returning the new cursor, or None for "no change".
            *args: Arguments for ``operation``.

        Returns:
            bool: True if the buffer changed.
        """
        line_count = len(self.buffer)
        new_pos = operation(*args)
        if new_pos is None:
            return False
        self.history.record()
        self.selection = None
        self._set_cursor(new_pos)
        self._refresh_modified()
        self._update_bracket_match()
        self.viewport.unlock()
        if len(self.buffer) != line_count:
            self._force_full_redraw = True
        return True

    def insert_char(self, ch: str) -> bool:
        return self._edit(self.buffer.insert_char, self.cursor, ch)

    def insert_text(self, text: str) -> bool:
        if not text:
            return False
        return self._edit(self.buffer.insert_text, self.cursor, text)

    def handle_backspace(self) -> bool:
        return self._edit(self.buffer.delete_backward, self.cursor)

    def handle_delete(self) -> bool:
        return self._edit(self.buffer.delete_forward, self.cursor)

    def handle_enter(self) -> bool:
        return self._edit(self.buffer.split_line, self.cursor, self.language)

    def handle_tab(self) -> bool:
        return self._edit(self.buffer.indent, self.cursor)

    def handle_unindent(self) -> bool:
        return self._edit(self.buffer.unindent, self.cursor)

    def delete_word_backward(self) -> bool:
        return self._edit(self.buffer.delete_word_backward, self.cursor)

    def delete_word_forward(self) -> bool:
        return self._edit(self.buffer.delete_word_forward, self.cursor)

    def delete_selection(self) -> bool:
        """Removes the selected text as one undoable edit."""
        if self.selection is None or self.selection.is_empty:
            return False
        start, end = self.selection.normalized()
        return self._edit(self.buffer.delete_range, start, end)

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    # ---------------------- navigation & selection ----------------------
    def _move_cursor(self, pos: Position, extend: bool = False) -> bool:
        """Moves the cursor; ``extend`` grows the selection, otherwise it is cleared."""
        before = (self.cursor, self.selection)
        if extend:
            if self.selection is None:
                self.selection = Selection(self.cursor, self.cursor)
            self._set_cursor(pos)
            self.selection.active = self.cursor
        else:
            self.selection = None
            self._set_cursor(pos)
        self.viewport.unlock()
        self._update_bracket_match()
        return (self.cursor, self.selection) != before

    def move_left(self, extend: bool = False) -> bool:
        if self.cursor_x > 0:
            return self._move_cursor((self.cursor_y, self.cursor_x - 1), extend)
        if self.cursor_y > 0:
            return self._move_cursor((self.cursor_y - 1, self.buffer.line_length(self.cursor_y - 1)), extend)
        return self._move_cursor(self.cursor, extend)

    def move_right(self, extend: bool = False) -> bool:
        if self.cursor_x < self.buffer.line_length(self.cursor_y):
            return self._move_cursor((self.cursor_y, self.cursor_x + 1), extend)
        if self.cursor_y < self.buffer.last_row:
            return self._move_cursor((self.cursor_y + 1, 0), extend)
        return self._move_cursor(self.cursor, extend)

    def move_up(self, extend: bool = False) -> bool:
        return self._move_cursor((max(0, self.cursor_y - 1), self.cursor_x), extend)

    def move_down(self, extend: bool = False) -> bool:
        return self._move_cursor((self.cursor_y + 1, self.cursor_x), extend)

    def word_left(self, extend: bool = False) -> bool:
        return self._move_cursor(self.buffer.word_left(self.cursor), extend)

    def word_right(self, extend: bool = False) -> bool:
        return self._move_cursor(self.buffer.word_right(self.cursor), extend)

    def handle_home(self, extend: bool = False) -> bool:
        return self._move_cursor((self.cursor_y, 0), extend)

    def handle_end(self, extend: bool = False) -> bool:
        return self._move_cursor((self.cursor_y, self.buffer.line_length(self.cursor_y)), extend)

    def handle_page_up(self, extend: bool = False) -> bool:
        page = max(1, self.viewport.height)
        return self._move_cursor((max(0, self.cursor_y - page), self.cursor_x), extend)

    def handle_page_down(self, extend: bool = False) -> bool:
        page = max(1, self.viewport.height)
        return self._move_cursor((self.cursor_y + page, self.cursor_x), extend)

    def extend_selection_left(self) -> bool:
        return self.move_left(extend=True)

    def extend_selection_right(self) -> bool:
        return self.move_right(extend=True)

    def extend_selection_up(self) -> bool:
        return self.move_up(extend=True)

    def extend_selection_down(self) -> bool:
        return self.move_down(extend=True)

    def extend_word_left(self) -> bool:
        return self.word_left(extend=True)

    def extend_word_right(self) -> bool:
        return self.word_right(extend=True)

    def select_to_home(self) -> bool:
        return self.handle_home(extend=True)

    def select_to_end(self) -> bool:
        return self.handle_end(extend=True)

    def _select(self, selection: Selection) -> bool:
        self.selection = selection
        self._set_cursor(selection.active)
        self.viewport.unlock()
        self._update_bracket_match()
        return True

    def select_all(self) -> bool:
        return self._select(full_selection(self.buffer))

    def select_word_at(self, row: int, col: int) -> bool:
        row, col = self.buffer.clamp((row, col))
        return self._select(word_selection(self.buffer, row, col))

    def select_line_at(self, row: int) -> bool:
        row, _ = self.buffer.clamp((row, 0))
        return self._select(line_selection(self.buffer, row))

    def get_selected_text(self) -> Optional[str]:
        if self.selection is None:
            return None
        return self.selection.text(self.buffer)

    # ---------------------- clipboard ----------------------
    def _check_pyclip_availability(self) -> bool:
        """Checks whether pyperclip can reach a system clipboard."""
        try:
            pyperclip.paste()
        except pyperclip.PyperclipException as e:
            logger.warning(f"System clipboard unavailable via pyperclip: {e}. Using internal clipboard.")
            return False
        logger.debug("pyperclip and system clipboard utilities appear to be available.")
        return True

    def copy(self) -> bool:
        text = self.get_selected_text()
        if not text:
            self._set_status_message("Nothing to copy")
            return True
        self.internal_clipboard = text
        if self.use_system_clipboard and self.pyclip_available:
            try:
                pyperclip.copy(text)
            except pyperclip.PyperclipException as e:
                logger.warning(f"Could not write to system clipboard: {e}")
        self._set_status_message(f"Copied {len(text)} chars")
        return True

    def cut(self) -> bool:
        if not self.get_selected_text():
            self._set_status_message("Nothing to cut")
            return True
        self.copy()
        self.delete_selection()
        self._set_status_message(f"Cut {len(self.internal_clipboard)} chars")
        return True

    def paste(self) -> bool:
        text = ""
        if self.use_system_clipboard and self.pyclip_available:
            try:
                text = pyperclip.paste() or ""
            except pyperclip.PyperclipException as e:
                logger.warning(f"Could not read from system clipboard, falling back to internal. Error: {e}")
        if not text:
            text = self.internal_clipboard
        if not text:
            self._set_status_message("Clipboard is empty")
            return True
        self.selection = None
        self.insert_text(text)
        return True

    # ---------------------- search ----------------------
    def start_search(self) -> bool:
        self.set_mode(SearchMode())
        return True

    def _run_search(self, query: str) -> bool:
        matches = self.buffer.find_all(query)
        self.mode = SearchMode(query=query, matches=matches, current=0)
        if matches:
            self._move_cursor(matches[0])
        return True

    def search_append(self, ch: str) -> bool:
        if not isinstance(self.mode, SearchMode):
            return False
        return self._run_search(self.mode.query + ch)

    def search_backspace(self) -> bool:
        if not isinstance(self.mode, SearchMode) or not self.mode.query:
            return False
        return self._run_search(self.mode.query[:-1])

    def search_refresh(self) -> bool:
        if not isinstance(self.mode, SearchMode):
            return False
        return self._run_search(self.mode.query)

    def search_next(self) -> bool:
        mode = self.mode
        if not isinstance(mode, SearchMode) or not mode.matches:
            return False
        mode.current = (mode.current + 1) % len(mode.matches)
        return self._move_cursor(mode.matches[mode.current]) or True

    def cancel_search(self) -> bool:
        self.set_mode(NormalMode())
        return True

    # ---------------------- go to line ----------------------
    def start_goto_line(self) -> bool:
        self.set_mode(GoToLineMode())
        return True

    def goto_line_input(self, ch: str) -> bool:
        if not isinstance(self.mode, GoToLineMode) or not ch.isdigit():
            return False
        self.mode.entry += ch
        return True

    def goto_line_backspace(self) -> bool:
        if not isinstance(self.mode, GoToLineMode) or not self.mode.entry:
            return False
        self.mode.entry = self.mode.entry[:-1]
        return True

    def confirm_goto_line(self) -> bool:
        """Jumps to the entered 1-based line; invalid entries are ignored."""
        if not isinstance(self.mode, GoToLineMode) or not self.mode.entry:
            return False
        try:
            line_number = int(self.mode.entry)
        except ValueError:
            line_number = 0
        if 1 <= line_number <= len(self.buffer):
            self._move_cursor((line_number - 1, self.cursor_x))
        self.set_mode(NormalMode())
        return True

    def cancel_goto_line(self) -> bool:
        self.set_mode(NormalMode())
        return True

    # ---------------------- autocomplete ----------------------
    def start_autocomplete(self) -> bool:
        prefix, _ = self.buffer.word_prefix(self.cursor)
        if not prefix:
            return False
        candidates = self.buffer.collect_words() | self.language.keywords
        suggestions = sorted(w for w in candidates if w.startswith(prefix) and w != prefix)
        if not suggestions:
            self._set_status_message(f"No completions for '{prefix}'")
            return True
        self.set_mode(AutocompleteMode(prefix=prefix, suggestions=suggestions))
        return True

    def autocomplete_next(self) -> bool:
        mode = self.mode
        if not isinstance(mode, AutocompleteMode):
            return False
        mode.index = (mode.index + 1) % len(mode.suggestions)
        return True

    def autocomplete_prev(self) -> bool:
        mode = self.mode
        if not isinstance(mode, AutocompleteMode):
            return False
        mode.index = (mode.index - 1) % len(mode.suggestions)
        return True

    def apply_autocomplete(self) -> bool:
        mode = self.mode
        if not isinstance(mode, AutocompleteMode):
            return False
        _, start = self.buffer.word_prefix(self.cursor)
        self._edit(self.buffer.replace_span, self.cursor_y, start, self.cursor_x, mode.selected)
        self.set_mode(NormalMode())
        return True

    def cancel_autocomplete(self) -> bool:
        self.set_mode(NormalMode())
        return True

    # ---------------------- mouse ----------------------
    def handle_mouse_press(self, screen_y: int, screen_x: int, shift: bool = False) -> bool:
        """Left button pressed at a screen cell.

        Repeated presses on the same position within half a second select the word, then
        the line. Shift extends the selection; a plain press arms a drag.
        """
        target = self.drawer.screen_to_buffer(screen_y, screen_x)
        if target is None:
            return False
        pos = self.buffer.clamp(target)

        now = time.monotonic()
        if pos == self._last_click_pos and now - self._last_click_time < MULTI_CLICK_INTERVAL:
            self._click_count = min(self._click_count + 1, 3)
        else:
            self._click_count = 1
        self._last_click_time = now
        self._last_click_pos = pos

        if self._click_count == 2:
            self._mouse_dragging = False
            return self.select_word_at(*pos)
        if self._click_count == 3:
            self._mouse_dragging = False
            return self.select_line_at(pos[0])
        if shift:
            return self._move_cursor(pos, extend=True)

        self._move_cursor(pos)
        self._mouse_dragging = True
        self._drag_origin = pos
        return True

    def handle_mouse_drag(self, screen_y: int, screen_x: int) -> bool:
        if not self._mouse_dragging or self._drag_origin is None:
            return False
        target = self.drawer.screen_to_buffer(screen_y, screen_x)
        if target is None:
            return False
        pos = self.buffer.clamp(target)
        if self.selection is None:
            self.selection = Selection(self._drag_origin, self._drag_origin)
        self._set_cursor(pos)
        self.selection.active = self.cursor
        self.viewport.unlock()
        self._update_bracket_match()
        return True

    def handle_mouse_release(self) -> bool:
        self._mouse_dragging = False
        return False

    def handle_mouse_wheel(self, up: bool) -> bool:
        step = -Viewport.SCROLL_STEP if up else Viewport.SCROLL_STEP
        return self.viewport.scroll_lines(step, len(self.buffer))

    # ---------------------- files ----------------------
    def open_request(self, path: str) -> bool:
        """Opens a document (or selects a root directory) by path.

        The outgoing document is kept in an in-memory cache, so switching back to it restores its
        unsaved contents. A path that does not exist yet yields an empty buffer bound to it.
        Read failures leave the current document untouched.
        """
        abs_path = os.path.abspath(os.path.expanduser(path))
        if os.path.isdir(abs_path):
            self.root_dir = abs_path
            self._set_status_message(f"Root: {abs_path}")
            return True

        if self.filename:
            self.file_buffers[self.filename] = self.buffer.clone()
            self._saved_snapshots[self.filename] = self._saved_snapshot

        if abs_path in self.file_buffers:
            lines = self.file_buffers[abs_path]
            saved = self._saved_snapshots.get(abs_path, lines)
        elif os.path.exists(abs_path):
            try:
                lines = tuple(storage.read_text(abs_path))
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Open file failed for '{abs_path}': {e}")
                self._set_status_message(f"Error opening '{os.path.basename(abs_path)}': {e}")
                return True
            saved = lines
        else:
            lines = ("",)
            saved = lines

        self.buffer.restore(lines)
        self.filename = abs_path
        self._saved_snapshot = saved
        self.language = detect_language(abs_path)
        self.cursor_y = self.cursor_x = 0
        self.selection = None
        self.set_mode(NormalMode())
        self.viewport.reset()
        self.history.reset()
        self._refresh_modified()
        self._update_bracket_match()

        self._set_status_message(f"Opened '{os.path.basename(abs_path)}' ({len(self.buffer)} lines)")
        logger.info(f"File opened: '{abs_path}', language {self.language.tag}, {len(self.buffer)} lines")
        self.presence.report(os.path.basename(abs_path), self.language.tag, len(self.buffer), "open")
        return True

    def save_file(self) -> bool:
        if not self.filename:
            self._set_status_message("No file name: start termi with a path to save")
            return True
        try:
            storage.write_text(self.filename, self.buffer.lines)
        except OSError as e:
            logger.error(f"Save failed for '{self.filename}': {e}")
            self._set_status_message(f"Error saving '{os.path.basename(self.filename)}': {e}")
            return True

        self._saved_snapshot = self.buffer.clone()
        self._saved_snapshots[self.filename] = self._saved_snapshot
        self.file_buffers[self.filename] = self._saved_snapshot
        self._refresh_modified()
        self._set_status_message("Saved")
        logger.info(f"File saved: '{self.filename}'")
        self.presence.report(os.path.basename(self.filename), self.language.tag, len(self.buffer), "save")
        return True

    # ---------------------- quit ----------------------
    def request_quit(self) -> bool:
        """Quits, asking for confirmation first when there are unsaved changes."""
        pending = isinstance(self.mode, NormalMode) and self.mode.quit_pending
        if pending or not (self.modified or self.dirty_files):
            self.exit_editor()
            return False
        self.mode = NormalMode(quit_pending=True)
        self._set_status_message(QUIT_WARNING)
        return True

    def cancel_quit(self) -> None:
        self.mode = NormalMode()
        self._set_status_message(HELP_STATUS)

    def exit_editor(self) -> None:
        logger.info("Exit requested.")
        self.running = False

    # ---------------------- main loop ----------------------
    def handle_resize(self) -> bool:
        self._force_full_redraw = True
        return True

    def _clamp_scroll(self) -> bool:
        self.drawer.update_viewport_geometry()
        return self.viewport.clamp_to_cursor(self.cursor_y, self.cursor_x)

    def _setup_terminal(self) -> None:
        curses.raw()
        self.stdscr.keypad(True)
        self.stdscr.timeout(100)
        if self.config.get("editor", {}).get("mouse", True):
            curses.mousemask(curses.ALL_MOUSE_EVENTS | curses.REPORT_MOUSE_POSITION)
            curses.mouseinterval(0)
        self.drawer.init_colors()

    def run(self) -> None:
        """The main event loop: read one event, process it, redraw if needed."""
        logger.info("Editor main loop started.")
        self.running = True
        self._force_full_redraw = True
        self._setup_terminal()

        while self.running:
            try:
                redraw_needed = self._process_events_and_input()
                self._render_screen(redraw_needed)
            except KeyboardInterrupt:
                logger.info("Main loop interrupted by KeyboardInterrupt. Initiating exit sequence.")
                self.exit_editor()
                break
            except Exception as e:
                logger.critical("Unhandled exception in main loop: %s", e, exc_info=True)
                self.exit_editor()
                break

        logger.info("Editor main loop finished.")

    def _process_events_and_input(self) -> bool:
        key_input = self.keybinder.get_key_input()
        if key_input == curses.ERR:
            return False
        if key_input == curses.KEY_RESIZE:
            return self.handle_resize()
        if key_input == curses.KEY_MOUSE:
            return self.keybinder.handle_mouse()
        return self.keybinder.handle_input(key_input)

    def _render_screen(self, redraw_needed: bool) -> None:
        if not redraw_needed and not self._force_full_redraw:
            return
        self._clamp_scroll()
        self.drawer.draw()
        curses.doupdate()
        self._force_full_redraw = False
