# tests/conftest.py
"""Shared fixtures for the tedit test-suite."""

from __future__ import annotations

from typing import Any

import pytest

from tedit.config import DEFAULT_CONFIG, deep_merge
from tedit.document import Document
from tedit.editor import Editor
from tedit.models import SyntaxProfile
from tedit.syntax import HLDB


@pytest.fixture
def config() -> dict[str, Any]:
    """Default configuration with a tab stop of 4."""
    return deep_merge(DEFAULT_CONFIG, {"editor": {"tab_stop": 4}})


@pytest.fixture
def editor(config: dict[str, Any]) -> Editor:
    """An editor on a 24x80 screen (22 text rows) that never touches a terminal."""
    ed = Editor(config, stdin_fd=-1, stdout_fd=-1)
    ed.set_window_size(24, 80)
    return ed


@pytest.fixture
def c_syntax() -> SyntaxProfile:
    return HLDB[0]


def make_doc(lines: list[str], syntax: SyntaxProfile | None = None, tab_stop: int = 4) -> Document:
    doc = Document(tab_stop=tab_stop, syntax=syntax)
    for line in lines:
        doc.insert_row(doc.numrows, line)
    doc.dirty = 0
    return doc


def load(editor: Editor, lines: list[str], filename: str | None = None) -> Editor:
    editor.filename = filename
    editor.select_syntax_highlight(filename)
    for line in lines:
        editor.doc.insert_row(editor.doc.numrows, line)
    editor.doc.dirty = 0
    return editor
