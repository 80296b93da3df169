# tests/test_logging_config.py
"""Unit tests for ``tedit.logging_config.setup_logging``.

The function replaces the root logger's handlers, so each test removes and
closes the handlers it created and restores the root level. Pytest re-attaches
its own capture handlers for every test phase.
"""

from __future__ import annotations

import logging
import logging.handlers

import pytest

from tedit import logging_config


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    saved_level = root.level
    key_logger = logging_config.KEY_LOGGER
    saved_key = (list(key_logger.handlers), key_logger.disabled, key_logger.propagate)
    yield
    for handler in list(root.handlers):
        if isinstance(handler, logging.handlers.RotatingFileHandler) or type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(saved_level)
    for handler in key_logger.handlers:
        if handler not in saved_key[0]:
            handler.close()
    key_logger.handlers, key_logger.disabled, key_logger.propagate = saved_key


def test_file_handler_only_by_default(tmp_path, monkeypatch, restore_logging) -> None:
    """Console output is off unless requested; the log directory is created."""
    monkeypatch.delenv("TEDIT_KEYTRACE", raising=False)
    log_file = tmp_path / "logs" / "tedit.log"
    logging_config.setup_logging({"logging": {"file": str(log_file), "file_level": "DEBUG"}})

    root = logging.getLogger()
    assert len(root.handlers) == 1
    handler = root.handlers[0]
    assert isinstance(handler, logging.handlers.RotatingFileHandler)
    assert handler.level == logging.DEBUG
    assert root.level == logging.DEBUG

    logging.getLogger("tedit").info("hello log")
    handler.flush()
    assert "hello log" in log_file.read_text()


def test_console_handler_when_requested(tmp_path, monkeypatch, restore_logging) -> None:
    monkeypatch.delenv("TEDIT_KEYTRACE", raising=False)
    logging_config.setup_logging(
        {
            "logging": {
                "file": str(tmp_path / "tedit.log"),
                "file_level": "INFO",
                "console_level": "ERROR",
                "log_to_console": True,
            }
        }
    )
    root = logging.getLogger()
    assert len(root.handlers) == 2
    assert root.handlers[0].level == logging.INFO
    assert isinstance(root.handlers[1], logging.StreamHandler)
    assert root.handlers[1].level == logging.ERROR


def test_unknown_level_defaults_to_info(tmp_path, monkeypatch, restore_logging) -> None:
    monkeypatch.delenv("TEDIT_KEYTRACE", raising=False)
    logging_config.setup_logging({"logging": {"file": str(tmp_path / "t.log"), "file_level": "chatty"}})
    assert logging.getLogger().handlers[0].level == logging.INFO


def test_repeated_setup_does_not_duplicate(tmp_path, monkeypatch, restore_logging) -> None:
    monkeypatch.delenv("TEDIT_KEYTRACE", raising=False)
    config = {"logging": {"file": str(tmp_path / "t.log")}}
    logging_config.setup_logging(config)
    first = logging.getLogger().handlers[0]
    logging_config.setup_logging(config)
    assert len(logging.getLogger().handlers) == 1
    assert logging.getLogger().handlers[0] is not first
    # The replaced file handler released its file.
    assert first.stream is None


def test_repeated_setup_closes_key_trace_file(tmp_path, monkeypatch, restore_logging) -> None:
    monkeypatch.setenv("TEDIT_KEYTRACE", "1")
    config = {"logging": {"file": str(tmp_path / "t.log")}}
    logging_config.setup_logging(config)
    (trace,) = logging_config.KEY_LOGGER.handlers
    logging_config.setup_logging(config)
    assert trace not in logging_config.KEY_LOGGER.handlers
    assert trace.stream is None


def test_key_trace_disabled_by_default(tmp_path, monkeypatch, restore_logging) -> None:
    monkeypatch.delenv("TEDIT_KEYTRACE", raising=False)
    logging_config.setup_logging({"logging": {"file": str(tmp_path / "t.log")}})
    key_logger = logging_config.KEY_LOGGER
    assert key_logger.disabled
    assert not key_logger.propagate
    assert not (tmp_path / "keytrace.log").exists()


def test_key_trace_enabled_from_environment(tmp_path, monkeypatch, restore_logging) -> None:
    monkeypatch.setenv("TEDIT_KEYTRACE", "1")
    logging_config.setup_logging({"logging": {"file": str(tmp_path / "t.log")}})
    key_logger = logging_config.KEY_LOGGER
    assert not key_logger.disabled
    key_logger.debug("key 113")
    for handler in key_logger.handlers:
        handler.flush()
    assert "key 113" in (tmp_path / "keytrace.log").read_text()
