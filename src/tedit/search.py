"""Prompt state machine and the incremental search session built on it.

The editor owns at most one active :class:`Prompt`. Each key read by the main
loop is fed to it; the prompt returns control after every key, so no nested
read loop is needed while a search is in progress.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from .constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_H,
    DEL_KEY,
    ENTER,
    ESC,
    HL_MATCH,
    TEDIT_QUERY_LEN,
)
from .models import SearchSnapshot

if TYPE_CHECKING:
    from .editor import Editor


class Prompt:
    """Line input shown in the message bar.

    ``template`` holds one ``%s`` for the current input. ``on_key`` is called
    with ``(buffer, key)`` after every key, ``on_done`` with the final input,
    or ``None`` when the prompt was cancelled with Escape.
    """

    def __init__(
        self,
        template: str,
        on_key: Callable[[str, int], None] | None = None,
        on_done: Callable[[str | None], None] | None = None,
    ) -> None:
        self.template = template
        self.on_key = on_key
        self.on_done = on_done
        self.buffer = ""
        self.done = False

    @property
    def message(self) -> str:
        return self.template % self.buffer

    def feed(self, key: int) -> bool:
        """Process one key; return True once the prompt has finished."""
        result: str | None = None
        if key in (DEL_KEY, CTRL_H, BACKSPACE):
            self.buffer = self.buffer[:-1]
        elif key == ESC:
            self.done = True
        elif key == ENTER:
            if self.buffer:
                self.done = True
                result = self.buffer
        elif 32 <= key < 127 and len(self.buffer) < TEDIT_QUERY_LEN:
            self.buffer += chr(key)

        if self.on_key is not None:
            self.on_key(self.buffer, key)
        if self.done and self.on_done is not None:
            self.on_done(result)
        return self.done


class Search:
    def __init__(self, editor: Editor) -> None:
        self.editor = editor
        self.last_match = -1
        self.direction = 1
        self.saved_hl_line = -1
        self.saved_hl: list[int] | None = None
        view = editor.view
        self.saved = SearchSnapshot(view.cx, view.cy, view.coloff, view.rowoff)

    def prompt(self) -> Prompt:
        return Prompt("Search: %s (Use ESC/Arrows/Enter)", on_key=self.on_key, on_done=self.finish)

    def restore_hl(self) -> None:
        doc = self.editor.doc
        if self.saved_hl is not None and 0 <= self.saved_hl_line < doc.numrows:
            doc.rows[self.saved_hl_line].hl = self.saved_hl
        self.saved_hl = None
        self.saved_hl_line = -1

    def on_key(self, query: str, key: int) -> None:
        self.restore_hl()

        if key in (ENTER, ESC):
            self.last_match = -1
            self.direction = 1
            return
        if key in (ARROW_RIGHT, ARROW_DOWN):
            self.direction = 1
        elif key in (ARROW_LEFT, ARROW_UP):
            self.direction = -1
        else:
            self.last_match = -1
            self.direction = 1

        if self.last_match == -1:
            self.direction = 1
        if query:
            self.find_next(query)

    def find_next(self, query: str) -> bool:
        doc = self.editor.doc
        view = self.editor.view
        current = self.last_match
        for _ in range(doc.numrows):
            current += self.direction
            if current == -1:
                current = doc.numrows - 1
            elif current == doc.numrows:
                current = 0

            row = doc.rows[current]
            offset = row.render.find(query)
            if offset == -1:
                continue

            self.last_match = current
            view.cy = current
            view.cx = doc.rx_to_cx(row, offset)
            # Past the end so the next scroll puts the match at the top.
            view.rowoff = doc.numrows

            self.saved_hl_line = current
            self.saved_hl = row.hl.copy()
            for i in range(offset, min(offset + len(query), row.rsize)):
                row.hl[i] = HL_MATCH
            return True
        return False

    def finish(self, query: str | None) -> None:
        self.restore_hl()
        if query is None:
            view = self.editor.view
            view.cx = self.saved.cx
            view.cy = self.saved.cy
            view.coloff = self.saved.coloff
            view.rowoff = self.saved.rowoff
