"""tedit.logging_config
=====================

Logging setup for the editor.

The terminal is in raw mode while the editor runs, so log records go to a
rotating file by default; console output to stderr is opt-in. Raw key events
can be traced to a separate ``keytrace.log`` next to the main log by setting
``TEDIT_KEYTRACE=1``.

Globals:
    logger: Main application logger ("tedit").
    KEY_LOGGER: Logger for key-press trace events ("tedit.keyevents").
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional

logger = logging.getLogger("tedit")
KEY_LOGGER = logging.getLogger("tedit.keyevents")


def _ensure_log_dir(log_filename: str) -> str:
    log_dir = os.path.dirname(log_filename)
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError as e_mkdir:
            print(f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr)
            log_filename = os.path.join(tempfile.gettempdir(), "tedit.log")
            print(f"Logging to temporary file: '{log_filename}'", file=sys.stderr)
    return log_filename


def _drop_handlers(target: logging.Logger) -> None:
    for handler in list(target.handlers):
        target.removeHandler(handler)
        handler.close()


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configure the root logger from the ``[logging]`` config section.

    Recognised keys: ``file`` (path of the rotating log), ``file_level``,
    ``console_level`` and ``log_to_console``. Existing root handlers are
    replaced, so calling this twice does not duplicate records. Failures to
    open log files are reported on stderr and never raised.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})

    log_filename = _ensure_log_dir(os.path.expanduser(logging_config.get("file", "tedit.log")))
    log_file_level_str = str(logging_config.get("file_level", "INFO")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.INFO)

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
    )
    file_handler = None
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_filename, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)
    except OSError as e_fh:
        print(f"Error setting up file logger for '{log_filename}': {e_fh}.", file=sys.stderr)

    console_handler = None
    if logging_config.get("log_to_console", False):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s"))
        console_handler.setLevel(getattr(logging, console_level_str, logging.WARNING))

    root_logger = logging.getLogger()
    _drop_handlers(root_logger)
    if file_handler:
        root_logger.addHandler(file_handler)
    if console_handler:
        root_logger.addHandler(console_handler)
    root_logger.setLevel(log_file_level)

    KEY_LOGGER.propagate = False
    KEY_LOGGER.setLevel(logging.DEBUG)
    _drop_handlers(KEY_LOGGER)
    if os.environ.get("TEDIT_KEYTRACE", "").lower() in {"1", "true", "yes"}:
        key_trace_filename = os.path.join(os.path.dirname(log_filename), "keytrace.log")
        try:
            key_trace_handler = logging.handlers.RotatingFileHandler(
                key_trace_filename, maxBytes=1 * 1024 * 1024, backupCount=3, encoding="utf-8"
            )
            key_trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            KEY_LOGGER.addHandler(key_trace_handler)
            KEY_LOGGER.disabled = False
            logger.info("Key event tracing enabled, logging to '%s'.", key_trace_filename)
        except OSError as e_keytrace:
            logger.error("Failed to set up key trace logging: %s", e_keytrace)
            KEY_LOGGER.disabled = True
    else:
        KEY_LOGGER.addHandler(logging.NullHandler())
        KEY_LOGGER.disabled = True

    logger.info(
        "Logging setup complete. Root logger level: %s.", logging.getLevelName(root_logger.level)
    )
