# termi/utils/utils.py
"""
termi.utils.utils
=================

Configuration helpers for the termi editor.

- Built-in defaults: `DEFAULT_CONFIG` is the complete configuration the editor can always run with.
- User overrides: `~/.config/termi/config.toml` is parsed with `toml` and deep-merged over the
  defaults. A broken file is logged and ignored.
- Environment: `~/.config/termi/.env` is created as a template on first run and loaded by the
  entry point with python-dotenv (it holds switches such as ``TERMI_KEYTRACE``).
"""

import logging
from pathlib import Path
from typing import Any, Dict

import toml

logger = logging.getLogger("termi")

ENV_TEMPLATE = """# Environment switches for termi
# Set to 1 to record raw key events in keytrace.log
TERMI_KEYTRACE=
"""

DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {
        "history_limit": 100,
        "use_system_clipboard": True,
        "show_line_numbers": True,
        "mouse": True,
    },
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
    },
    "colors": {
        "keyword": "cyan",
        "string": "green",
        "comment": "white",
        "number": "yellow",
        "bracket": "yellow",
        "line_number": "white",
    },
    # Overrides of KeyBinder defaults: action -> list of key specs or "spec|spec"; empty unbinds.
    "keybindings": {},
}


def get_config_dir() -> Path:
    return Path.home() / ".config" / "termi"


def ensure_user_config_exists() -> None:
    """Creates `~/.config/termi` and its `.env` template when missing."""
    try:
        config_dir = get_config_dir()
        config_dir.mkdir(parents=True, exist_ok=True)
        user_env_path = config_dir / ".env"
        if not user_env_path.exists():
            user_env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
            logger.info(f"Created user .env template at: {user_env_path}")
    except OSError as e:
        logger.error(f"Could not create user configuration files: {e}")


def load_config() -> Dict[str, Any]:
    """
    Returns the built-in defaults merged with the user's config.toml, if it parses.
    """
    final_config = deep_merge({}, DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    ensure_user_config_exists()

    user_config_path = get_config_dir() / "config.toml"
    if user_config_path.is_file():
        try:
            user_config = toml.load(user_config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {user_config_path}")
        except (toml.TomlDecodeError, OSError) as e:
            logger.error(f"Could not parse user config '{user_config_path}': {e}. Using defaults.")

    return final_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into a copy of `base`.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
