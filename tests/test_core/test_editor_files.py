# tests/test_core/test_editor_files.py
"""File handling: open/save, the per-path buffer cache, dirty tracking and presence snapshots."""

from unittest.mock import patch

from termi.core.Modes import NormalMode, SearchMode


def test_open_existing_file(editor, tmp_path):
    path = tmp_path / "a.py"
    path.write_text("def f():\n    return 1\n", encoding="utf-8")

    editor.open_request(str(path))

    assert editor.buffer.lines == ["def f():", "    return 1"]
    assert editor.filename == str(path)
    assert editor.language.tag == "python"
    assert editor.cursor == (0, 0)
    assert editor.modified is False
    assert len(editor.history) == 1
    assert editor.presence.last_snapshot == {"file_name": "a.py", "language": "python", "line_count": 2}


def test_open_resets_transient_state(editor, tmp_path):
    path = tmp_path / "b.txt"
    path.write_text("x\n", encoding="utf-8")
    editor.insert_text("one\ntwo")
    editor.select_all()
    editor.mode = SearchMode(query="o")
    editor.viewport.scroll_row = 5

    editor.open_request(str(path))

    assert editor.selection is None
    assert editor.mode == NormalMode()
    assert editor.viewport.scroll_row == 0
    assert not editor.history.can_undo


def test_edit_save_and_dirty_tracking(editor, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello\n", encoding="utf-8")
    editor.open_request(str(path))

    editor.handle_end()
    editor.insert_char("!")
    assert editor.is_dirty(str(path))

    editor.save_file()
    assert path.read_text(encoding="utf-8") == "hello!\n"
    assert not editor.is_dirty(str(path))
    assert editor.modified is False
    assert editor.status_message == "Saved"


def test_missing_path_gives_empty_buffer_bound_to_it(editor, tmp_path):
    path = tmp_path / "new.rs"
    editor.open_request(str(path))
    assert editor.buffer.lines == [""]
    assert editor.filename == str(path)
    assert editor.language.tag == "rust"
    assert not path.exists()

    editor.insert_text("fn main() {}")
    editor.save_file()
    assert path.read_text(encoding="utf-8") == "fn main() {}\n"


def test_directory_sets_root(editor, tmp_path):
    editor.insert_text("keep")
    editor.open_request(str(tmp_path))
    assert editor.root_dir == str(tmp_path)
    assert editor.buffer.lines == ["keep"]
    assert editor.filename is None


def test_switching_files_keeps_unsaved_edits(editor, tmp_path):
    first = tmp_path / "first.txt"
    second = tmp_path / "second.txt"
    first.write_text("one\n", encoding="utf-8")
    second.write_text("two\n", encoding="utf-8")

    editor.open_request(str(first))
    editor.insert_char("X")
    editor.open_request(str(second))
    assert editor.buffer.lines == ["two"]
    assert editor.is_dirty(str(first))
    assert not editor.is_dirty(str(second))

    editor.open_request(str(first))
    assert editor.buffer.lines == ["Xone"]
    assert editor.modified is True
    assert first.read_text(encoding="utf-8") == "one\n"


def test_reopening_current_file_keeps_unsaved_edits(editor, tmp_path):
    path = tmp_path / "a.py"
    path.write_text("x = 1\n", encoding="utf-8")
    editor.open_request(str(path))
    editor.handle_end()
    editor.insert_char("2")

    editor.open_request(str(path))

    assert editor.buffer.lines == ["x = 12"]
    assert editor.modified is True
    assert editor.is_dirty(str(path))
    assert path.read_text(encoding="utf-8") == "x = 1\n"

    editor.running = True
    editor.request_quit()
    assert editor.running is True
    assert editor.mode.quit_pending


def test_quit_warns_about_other_dirty_buffers(editor, tmp_path):
    first = tmp_path / "first.txt"
    second = tmp_path / "second.txt"
    first.write_text("one\n", encoding="utf-8")
    second.write_text("two\n", encoding="utf-8")
    editor.open_request(str(first))
    editor.insert_char("X")
    editor.open_request(str(second))

    editor.running = True
    editor.request_quit()
    assert editor.running is True
    assert editor.mode.quit_pending


def test_open_failure_keeps_current_document(editor, tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("x", encoding="utf-8")
    editor.insert_text("current")
    with patch("termi.core.Editor.storage.read_text", side_effect=OSError("denied")):
        editor.open_request(str(path))
    assert editor.buffer.lines == ["current"]
    assert editor.filename is None
    assert editor.status_message.startswith("Error opening 'bad.txt'")


def test_save_without_file_name(editor):
    editor.insert_text("x")
    editor.save_file()
    assert "No file name" in editor.status_message
    assert editor.modified is True


def test_save_failure_keeps_dirty(editor, tmp_path):
    path = tmp_path / "c.txt"
    editor.open_request(str(path))
    editor.insert_char("z")
    with patch("termi.core.Editor.storage.write_text", side_effect=OSError("disk full")):
        editor.save_file()
    assert editor.is_dirty(str(path))
    assert editor.status_message.startswith("Error saving 'c.txt'")


def test_save_reports_presence(editor, tmp_path):
    path = tmp_path / "d.js"
    editor.open_request(str(path))
    editor.insert_text("a\nb")
    with patch.object(editor.presence, "publish") as publish:
        editor.save_file()
    publish.assert_called_once_with({"file_name": "d.js", "language": "javascript", "line_count": 2}, "save")
