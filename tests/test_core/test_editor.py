# tests/test_core/test_editor.py
"""Editor Editing Tests
========================

Tests for the `Editor` context: every edit goes through one path that records history, clears
the selection, clamps the cursor and keeps the modified flag honest. Navigation with and without
selection extension, and the clipboard, are covered here too.
"""

from unittest.mock import patch

import pyperclip

from termi.core.Languages import LANGUAGES
from termi.core.Selection import Selection


# --- edits -------------------------------------------------------------------
def test_insert_char_marks_modified_and_records(load_text):
    editor = load_text(["ab"], cursor=(0, 1))
    assert editor.insert_char("x") is True
    assert editor.buffer.lines == ["axb"]
    assert editor.cursor == (0, 2)
    assert editor.modified is True
    assert editor.history.index == 1


def test_backspace_at_buffer_start_changes_nothing(load_text):
    editor = load_text(["ab"])
    assert editor.handle_backspace() is False
    assert editor.history.index == 0
    assert editor.modified is False


def test_edit_clears_selection(load_text):
    editor = load_text(["hello world"], cursor=(0, 5))
    editor.selection = Selection((0, 0), (0, 5))
    editor.insert_char("!")
    assert editor.selection is None
    # The selected text is not replaced.
    assert editor.buffer.lines == ["hello! world"]


def test_enter_uses_language_indent(load_text):
    editor = load_text(["    if x:"], language=LANGUAGES["python"], cursor=(0, 9))
    editor.handle_enter()
    assert editor.buffer.lines == ["    if x:", "        "]
    assert editor.cursor == (1, 8)


def test_structural_edit_requests_full_redraw(load_text):
    editor = load_text(["ab"], cursor=(0, 1))
    editor._force_full_redraw = False
    editor.insert_char("x")
    assert editor._force_full_redraw is False
    editor.handle_enter()
    assert editor._force_full_redraw is True


def test_tab_and_shift_tab(load_text):
    editor = load_text(["x"])
    editor.handle_tab()
    assert editor.buffer.lines == ["    x"]
    assert editor.cursor == (0, 4)
    editor.handle_unindent()
    assert editor.buffer.lines == ["x"]
    assert editor.handle_unindent() is False


def test_word_deletes(load_text):
    editor = load_text(["foo bar baz"], cursor=(0, 7))
    editor.delete_word_backward()
    assert editor.buffer.lines == ["foo  baz"]
    editor.delete_word_forward()
    assert editor.buffer.lines == ["foo baz"]


def test_modified_flag_returns_to_clean_after_undo(load_text):
    editor = load_text(["x"], cursor=(0, 1))
    editor.insert_char("y")
    assert editor.modified
    editor.undo()
    assert not editor.modified
    editor.redo()
    assert editor.modified


# --- navigation ----------------------------------------------------------------
def test_horizontal_moves_wrap_lines(load_text):
    editor = load_text(["ab", "cd"], cursor=(0, 2))
    editor.move_right()
    assert editor.cursor == (1, 0)
    editor.move_left()
    assert editor.cursor == (0, 2)


def test_vertical_moves_clamp_column(load_text):
    editor = load_text(["long line", "ab"], cursor=(0, 8))
    editor.move_down()
    assert editor.cursor == (1, 2)
    editor.move_down()
    assert editor.cursor == (1, 2)
    editor.move_up()
    assert editor.cursor == (0, 2)


def test_shift_moves_extend_selection_from_anchor(load_text):
    editor = load_text(["hello", "world"], cursor=(0, 3))
    editor.extend_selection_right()
    editor.extend_selection_down()
    assert editor.selection == Selection((0, 3), (1, 4))
    assert editor.get_selected_text() == "lo\nworl"
    editor.move_left()
    assert editor.selection is None


def test_word_moves_and_extension(load_text):
    editor = load_text(["alpha beta"], cursor=(0, 0))
    editor.word_right()
    assert editor.cursor == (0, 5)
    editor.extend_word_right()
    assert editor.get_selected_text() == " beta"
    editor.extend_word_left()
    assert editor.get_selected_text() == " "


def test_home_end_and_select_to_end(load_text):
    editor = load_text(["abc"], cursor=(0, 1))
    editor.handle_end()
    assert editor.cursor == (0, 3)
    editor.handle_home()
    editor.select_to_end()
    assert editor.get_selected_text() == "abc"


def test_page_moves_use_viewport_height(load_text):
    editor = load_text([str(i) for i in range(100)])
    editor.viewport.resize(10, 70)
    editor.handle_page_down()
    assert editor.cursor == (10, 0)
    editor.handle_page_up()
    assert editor.cursor == (0, 0)


def test_cursor_motion_unlocks_viewport(load_text):
    editor = load_text(["a", "b"])
    editor.viewport.cursor_locked = True
    editor.move_down()
    assert editor.viewport.cursor_locked is False


def test_select_all_word_and_line(load_text):
    editor = load_text(["one two", "three"])
    editor.select_all()
    assert editor.get_selected_text() == "one two\nthree"
    assert editor.cursor == (1, 5)
    editor.select_word_at(0, 5)
    assert editor.get_selected_text() == "two"
    editor.select_line_at(1)
    assert editor.get_selected_text() == "three"


# --- clipboard ---------------------------------------------------------------
def test_copy_cut_paste_internal(load_text):
    editor = load_text(["hello world"])
    editor.select_word_at(0, 1)
    editor.copy()
    assert editor.internal_clipboard == "hello"
    assert editor.selection is not None

    editor.cut()
    assert editor.buffer.lines == [" world"]
    assert editor.cursor == (0, 0)

    editor.handle_end()
    editor.paste()
    assert editor.buffer.lines == [" worldhello"]
    # Cut and paste are single undo steps.
    editor.undo()
    assert editor.buffer.lines == [" world"]
    editor.undo()
    assert editor.buffer.lines == ["hello world"]


def test_copy_without_selection_reports(load_text):
    editor = load_text(["x"])
    editor.copy()
    assert editor.status_message == "Nothing to copy"
    assert editor.internal_clipboard == ""


def test_paste_multi_line(load_text):
    editor = load_text(["ab"], cursor=(0, 1))
    editor.internal_clipboard = "1\n2"
    editor.paste()
    assert editor.buffer.lines == ["a1", "2b"]
    assert editor.cursor == (1, 1)


def test_system_clipboard_preferred_when_available(load_text):
    editor = load_text(["ab"], cursor=(0, 2))
    editor.use_system_clipboard = True
    editor.pyclip_available = True
    with patch("termi.core.Editor.pyperclip.paste", return_value="SYS"):
        editor.paste()
    assert editor.buffer.lines == ["abSYS"]


def test_system_clipboard_failure_falls_back(load_text):
    editor = load_text(["ab"], cursor=(0, 2))
    editor.use_system_clipboard = True
    editor.pyclip_available = True
    editor.internal_clipboard = "int"
    with patch("termi.core.Editor.pyperclip.paste", side_effect=pyperclip.PyperclipException("no")):
        editor.paste()
    assert editor.buffer.lines == ["abint"]


def test_clipboard_probe(mock_stdscr, mock_config):
    from termi.core.Editor import Editor

    mock_config["editor"]["use_system_clipboard"] = True
    with patch("termi.core.Editor.pyperclip.paste", side_effect=pyperclip.PyperclipException("x")):
        editor = Editor(mock_stdscr, mock_config)
    assert editor.pyclip_available is False


def test_paste_empty_clipboard(load_text):
    editor = load_text(["ab"])
    editor.paste()
    assert editor.status_message == "Clipboard is empty"
    assert editor.buffer.lines == ["ab"]
