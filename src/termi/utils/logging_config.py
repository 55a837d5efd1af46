# termi/utils/logging_config.py
"""termi.utils.logging_config
============================

Logging configuration for the termi editor. The application never logs to the terminal it draws
on by default; everything goes to rotating files.

Handlers installed by `setup_logging`:
    - editor.log: rotating main log, level ``file_level`` (default DEBUG).
    - stderr: optional console handler, level ``console_level`` (default WARNING).
    - error.log: optional rotating log with ERROR and CRITICAL records only.
    - keytrace.log: raw key events on the ``termi.keyevents`` logger, enabled by setting the
      ``TERMI_KEYTRACE`` environment variable to ``1``, ``true`` or ``yes``.

Log files are written to ``log_dir`` (default ``~/.cache/termi``). If that directory cannot be
created the system temp directory is used instead.

Globals:
    logger: Main application logger ("termi").
    KEY_LOGGER: Logger for raw key-press trace events ("termi.keyevents").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# ======================== Global loggers ========================
logger = logging.getLogger("termi")
KEY_LOGGER = logging.getLogger("termi.keyevents")

DEFAULT_LOG_DIR = os.path.join("~", ".cache", "termi")
FILE_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
CONSOLE_FORMAT = "%(levelname)-8s - %(name)-12s - %(message)s"


def _resolve_log_dir(configured: Optional[str]) -> str:
    log_dir = os.path.expanduser(configured or DEFAULT_LOG_DIR)
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError as e_mkdir:
        print(f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr)
        log_dir = tempfile.gettempdir()
        print(f"Logging to temporary directory: '{log_dir}'", file=sys.stderr)
    return log_dir


def _rotating_handler(
    path: str, max_bytes: int, backups: int, level: int, formatter: logging.Formatter
) -> Optional[logging.Handler]:
    try:
        handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
        )
    except OSError as e_fh:
        print(f"Error setting up file logger for '{path}': {e_fh}.", file=sys.stderr)
        return None
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def _configure_key_trace(log_dir: str) -> None:
    KEY_LOGGER.propagate = False
    KEY_LOGGER.setLevel(logging.DEBUG)
    KEY_LOGGER.handlers = []
    KEY_LOGGER.disabled = False

    if os.environ.get("TERMI_KEYTRACE", "").lower() not in {"1", "true", "yes"}:
        KEY_LOGGER.addHandler(logging.NullHandler())
        KEY_LOGGER.disabled = True
        logging.debug("Key event tracing is disabled.")
        return

    trace_path = os.path.join(log_dir, "keytrace.log")
    handler = _rotating_handler(
        trace_path, 1024 * 1024, 3, logging.DEBUG, logging.Formatter("%(asctime)s - %(message)s")
    )
    if handler is None:
        KEY_LOGGER.disabled = True
        return
    KEY_LOGGER.addHandler(handler)
    logging.info("Key event tracing enabled, logging to '%s'.", trace_path)


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and levels.

    Existing handlers on the root logger are replaced so repeated calls (as in tests) do not
    duplicate records. The function never raises; I/O problems are reported on stderr and logging
    continues with whatever handlers could be created.

    Args:
        config (dict | None): Application configuration. Only the ``["logging"]`` section is read:

            - ``file_level`` (str): level for editor.log. Default ``"DEBUG"``.
            - ``console_level`` (str): level for stderr output. Default ``"WARNING"``.
            - ``log_to_console`` (bool): enable the stderr handler. Default ``False``.
            - ``separate_error_log`` (bool): create error.log. Default ``False``.
            - ``log_dir`` (str): directory for the log files. Default ``~/.cache/termi``.

    Example:
        >>> setup_logging({"logging": {"file_level": "INFO", "log_to_console": False}})
    """
    logging_section = (config or {}).get("logging", {})
    log_dir = _resolve_log_dir(logging_section.get("log_dir"))

    file_level_name = str(logging_section.get("file_level", "DEBUG")).upper()
    file_level = getattr(logging, file_level_name, logging.DEBUG)
    file_formatter = logging.Formatter(FILE_FORMAT)

    handlers: list[logging.Handler] = []

    main_log_path = os.path.join(log_dir, "editor.log")
    file_handler = _rotating_handler(main_log_path, 2 * 1024 * 1024, 5, file_level, file_formatter)
    if file_handler:
        handlers.append(file_handler)

    console_handler = None
    if logging_section.get("log_to_console", False):
        console_level_name = str(logging_section.get("console_level", "WARNING")).upper()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        console_handler.setLevel(getattr(logging, console_level_name, logging.WARNING))
        handlers.append(console_handler)

    error_handler = None
    if logging_section.get("separate_error_log", False):
        error_handler = _rotating_handler(
            os.path.join(log_dir, "error.log"), 1024 * 1024, 3, logging.ERROR, file_formatter
        )
        if error_handler:
            handlers.append(error_handler)

    root_logger = logging.getLogger()
    for old_handler in root_logger.handlers:
        old_handler.close()
    root_logger.handlers = handlers
    # Root passes everything the most verbose file handler may want.
    root_logger.setLevel(file_level)

    _configure_key_trace(log_dir)

    logging.info(
        "Logging setup complete. Root logger level: %s.",
        logging.getLevelName(root_logger.level),
    )
    if file_handler:
        logging.info(f"File logging to '{main_log_path}' at level: {logging.getLevelName(file_handler.level)}.")
    if console_handler:
        logging.info(f"Console logging to stderr at level: {logging.getLevelName(console_handler.level)}.")
    if error_handler:
        logging.info("Error logging to 'error.log' at level: ERROR.")
