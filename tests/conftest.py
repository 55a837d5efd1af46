# tests/conftest.py
"""Pytest configuration with shared fixtures for the termi editor tests."""

from __future__ import annotations

import copy
from typing import Any, Callable, Optional
from unittest.mock import MagicMock

import pytest

from termi.core.Editor import Editor
from termi.core.Languages import PLAIN, Language
from termi.utils.utils import DEFAULT_CONFIG


# --- Base fixtures for curses and configuration ---
@pytest.fixture
def mock_stdscr() -> MagicMock:
    """A mocked `stdscr` with terminal size set to (24, 80)."""
    stdscr = MagicMock()
    stdscr.getmaxyx.return_value = (24, 80)
    return stdscr


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """The built-in defaults, with the system clipboard switched off."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["editor"]["use_system_clipboard"] = False
    return config


# --- Editor fixtures ---
@pytest.fixture
def editor(mock_stdscr: MagicMock, mock_config: dict[str, Any]) -> Editor:
    """A real `Editor` drawing into a mocked window."""
    return Editor(mock_stdscr, mock_config)


@pytest.fixture
def load_text(editor: Editor) -> Callable[..., Editor]:
    """Replaces the editor's document with the given lines as a clean, unnamed buffer.

    Returns:
        A function ``load(lines, language=PLAIN, cursor=(0, 0))`` returning the editor.
    """

    def load(lines: list[str], language: Language = PLAIN, cursor: Optional[tuple[int, int]] = None) -> Editor:
        editor.buffer.restore(lines)
        editor.language = language
        editor._saved_snapshot = editor.buffer.clone()
        editor.history.reset()
        editor.selection = None
        editor.cursor_y, editor.cursor_x = editor.buffer.clamp(cursor or (0, 0))
        editor._refresh_modified()
        return editor

    return load
