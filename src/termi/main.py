# termi/main.py
"""
termi Main Entry Point
======================

The `termi` console script lands in `start()`, which:
1) Environment Loading: reads ~/.config/termi/.env with python-dotenv.
2) Configuration & Logging: loads config and initializes logging before anything else runs.
3) Curses Wrapper: initializes/tears down curses safely to avoid terminal corruption.
4) Application Run: creates the Editor, opens the path given on the command line, and runs its loop.
"""

from __future__ import annotations

import curses
import locale
import logging
import os
import signal
import sys
from typing import Any, Optional

from dotenv import load_dotenv

from termi.utils.logging_config import setup_logging
from termi.utils.utils import get_config_dir, load_config

logger = logging.getLogger("termi")

# \x1b[?1h → application cursor keys, \x1b= → keypad application mode,
# \x1b[?1002h → report mouse motion while a button is held (drag selection).
TERMINAL_MODES_ON = "\x1b[?1h\x1b=\x1b[?1002h"
TERMINAL_MODES_OFF = "\x1b[?1002l\x1b[?1l\x1b>"


def _load_environment() -> None:
    dotenv_path = get_config_dir() / ".env"
    if dotenv_path.is_file():
        load_dotenv(dotenv_path=dotenv_path)


def main_app_runner(stdscr: Any, config: dict[str, Any], path_to_open: Optional[str]) -> None:
    """
    Target for `curses.wrapper`: builds the editor and runs it until it quits.

    Args:
        stdscr: Curses standard screen window provided by wrapper.
        config: Application configuration dict.
        path_to_open: Optional CLI path; a directory becomes the working root, a missing file an
            empty buffer bound to that path.
    """
    from termi.core.Editor import Editor

    # Keep Alt/ESC combos responsive.
    try:
        curses.set_escdelay(25)
    except curses.error:
        os.environ.setdefault("ESCDELAY", "25")

    editor = Editor(stdscr, config=config)

    # Ctrl+Z is undo, not terminal suspension.
    if hasattr(signal, "SIGTSTP"):
        signal.signal(signal.SIGTSTP, signal.SIG_IGN)

    if path_to_open:
        editor.open_request(path_to_open)

    editor.run()


def start() -> None:
    """
    Loads environment and configuration, sets the locale, and runs the editor under curses.wrapper.
    """
    try:
        _load_environment()
        config: dict[str, Any] = load_config()
        setup_logging(config)
    except Exception as e:
        print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("termi editor starting up...")

    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        logger.warning("Could not set system locale. Character rendering may be affected.")

    path_to_open = sys.argv[1] if len(sys.argv) > 1 and sys.argv[1].strip() else None

    try:
        sys.stdout.write(TERMINAL_MODES_ON)
        sys.stdout.flush()
        curses.wrapper(main_app_runner, config, path_to_open)
        logger.info("termi editor shut down gracefully.")
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)
    finally:
        sys.stdout.write(TERMINAL_MODES_OFF)
        sys.stdout.flush()


if __name__ == "__main__":
    start()
