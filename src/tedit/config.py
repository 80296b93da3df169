"""tedit.config
=============

Configuration loading. The embedded ``DEFAULT_CONFIG`` is always the base; the
user's TOML file (``$TEDIT_CONFIG`` or ``~/.config/tedit/config.toml``) is
deep-merged on top of it. A missing or unparsable file leaves the defaults in
place, so the editor can always start.

Example ``config.toml``::

    [editor]
    tab_stop = 4
    quit_times = 2

    [syntax.go]
    filematch = [".go"]
    keywords = ["func", "package", "import", "return"]
    types = ["int", "string"]
    singleline_comment_start = "//"
    multiline_comment_start = "/*"
    multiline_comment_end = "*/"
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any

import toml

from .constants import TEDIT_QUIT_TIMES, TEDIT_STATUS_TIMEOUT, TEDIT_TAB_STOP

logger = logging.getLogger("tedit")

DEFAULT_CONFIG: dict[str, Any] = {
    "editor": {
        "tab_stop": TEDIT_TAB_STOP,
        "quit_times": TEDIT_QUIT_TIMES,
        "status_timeout": TEDIT_STATUS_TIMEOUT,
    },
    "logging": {
        "file": str(Path.home() / ".cache" / "tedit" / "tedit.log"),
        "file_level": "INFO",
        "console_level": "WARNING",
        "log_to_console": False,
    },
    "syntax": {},
}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def user_config_path() -> Path:
    env_path = os.environ.get("TEDIT_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".config" / "tedit" / "config.toml"


def _positive_number(section: dict[str, Any], key: str, kind: type, allow_zero: bool = False) -> None:
    value = section.get(key)
    default = DEFAULT_CONFIG["editor"][key]
    ok = isinstance(value, kind) and not isinstance(value, bool) and (value > 0 or (allow_zero and value == 0))
    if not ok:
        logger.warning("Invalid editor.%s=%r in config; using %r", key, value, default)
        section[key] = default


def load_config(path: str | os.PathLike[str] | None = None) -> dict[str, Any]:
    """Load the embedded defaults merged with the user's TOML config."""
    config = deep_merge({}, DEFAULT_CONFIG)

    config_path = Path(path) if path is not None else user_config_path()
    if config_path.is_file():
        try:
            user_config = toml.load(config_path)
            config = deep_merge(config, user_config)
            logger.info("Loaded user config from %s", config_path)
        except (toml.TomlDecodeError, OSError) as e:
            logger.error("Could not parse config %s: %s. Using defaults.", config_path, e)
    else:
        logger.debug("No user config at %s", config_path)

    editor = config.get("editor")
    if not isinstance(editor, dict):
        logger.warning("Invalid [editor] section in config; using defaults")
        editor = config["editor"] = dict(DEFAULT_CONFIG["editor"])
    _positive_number(editor, "tab_stop", int)
    _positive_number(editor, "quit_times", int, allow_zero=True)
    if isinstance(editor.get("status_timeout"), int) and not isinstance(editor["status_timeout"], bool):
        editor["status_timeout"] = float(editor["status_timeout"])
    _positive_number(editor, "status_timeout", float)

    if not isinstance(config.get("logging"), dict):
        logger.warning("Invalid [logging] section in config; using defaults")
        config["logging"] = dict(DEFAULT_CONFIG["logging"])
    return config
