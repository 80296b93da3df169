# tests/test_config.py
"""Configuration loading tests."""

from __future__ import annotations

import logging

from tedit.config import DEFAULT_CONFIG, deep_merge, load_config, user_config_path
from tedit.constants import HL_KEYWORD1, HL_KEYWORD2
from tedit.editor import Editor


def test_deep_merge() -> None:
    base = {"a": 1, "b": {"x": 10, "y": 20}}
    override = {"b": {"y": 99, "z": 100}, "c": 3}
    result = deep_merge(base, override)
    assert result == {"a": 1, "b": {"x": 10, "y": 99, "z": 100}, "c": 3}
    assert base == {"a": 1, "b": {"x": 10, "y": 20}}


def test_missing_file_gives_defaults(tmp_path) -> None:
    config = load_config(tmp_path / "absent.toml")
    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG


def test_user_values_override_defaults(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[editor]\ntab_stop = 4\nstatus_timeout = 2\n")
    config = load_config(path)
    assert config["editor"]["tab_stop"] == 4
    assert config["editor"]["quit_times"] == DEFAULT_CONFIG["editor"]["quit_times"]
    assert config["editor"]["status_timeout"] == 2.0
    assert isinstance(config["editor"]["status_timeout"], float)
    assert config["logging"] == DEFAULT_CONFIG["logging"]


def test_invalid_values_fall_back(tmp_path, caplog) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[editor]\ntab_stop = 0\nquit_times = -1\nstatus_timeout = "soon"\n')
    with caplog.at_level(logging.WARNING, logger="tedit"):
        config = load_config(path)
    assert config["editor"] == DEFAULT_CONFIG["editor"]
    assert "editor.tab_stop" in caplog.text
    assert "editor.quit_times" in caplog.text


def test_zero_quit_times_is_allowed(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[editor]\nquit_times = 0\n")
    assert load_config(path)["editor"]["quit_times"] == 0


def test_wrong_section_types_are_replaced(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('editor = 3\nlogging = "loud"\n')
    config = load_config(path)
    assert config["editor"] == DEFAULT_CONFIG["editor"]
    assert config["logging"] == DEFAULT_CONFIG["logging"]


def test_unparsable_file_is_logged(tmp_path, caplog) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[editor\ntab_stop = = 3\n")
    with caplog.at_level(logging.ERROR, logger="tedit"):
        config = load_config(path)
    assert config == DEFAULT_CONFIG
    assert "Could not parse config" in caplog.text


def test_config_path_from_environment(tmp_path, monkeypatch) -> None:
    path = tmp_path / "alt.toml"
    path.write_text("[editor]\ntab_stop = 2\n")
    monkeypatch.setenv("TEDIT_CONFIG", str(path))
    assert user_config_path() == path
    assert load_config()["editor"]["tab_stop"] == 2


def test_default_path_under_home(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("TEDIT_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert user_config_path() == tmp_path / ".config" / "tedit" / "config.toml"


def test_editor_uses_configured_syntax(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        "[editor]\n"
        "tab_stop = 2\n"
        "[syntax.go]\n"
        'filematch = [".go"]\n'
        'keywords = ["func", "return"]\n'
        'types = ["int"]\n'
        'singleline_comment_start = "//"\n'
    )
    ed = Editor(load_config(path), -1, -1)
    ed.set_window_size(24, 80)
    ed.select_syntax_highlight("main.go")
    assert ed.doc.syntax.name == "go"
    assert ed.doc.tab_stop == 2

    ed.doc.insert_row(0, "func f() int")
    assert ed.doc.rows[0].hl[:4] == [HL_KEYWORD1] * 4
    assert ed.doc.rows[0].hl[9:12] == [HL_KEYWORD2] * 3

    ed.select_syntax_highlight("main.c")
    assert ed.doc.syntax.name == "c"
