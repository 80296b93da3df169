from __future__ import annotations

import os
import time
from typing import TYPE_CHECKING

from .constants import (
    ANSI_CLEAR_LINE,
    ANSI_CURSOR_HOME,
    ANSI_DEFAULT_FG,
    ANSI_HIDE_CURSOR,
    ANSI_INVERT_ON,
    ANSI_RESET,
    ANSI_SHOW_CURSOR,
    HL_NORMAL,
    TEDIT_VERSION,
)
from .io_ops import ENCODING
from .syntax import syntax_to_color

if TYPE_CHECKING:
    from .editor import Editor


def scroll(editor: Editor) -> None:
    doc = editor.doc
    view = editor.view
    row = doc.row(view.cy)
    view.rx = doc.cx_to_rx(row, view.cx) if row is not None else 0

    if view.cy < view.rowoff:
        view.rowoff = view.cy
    if view.cy >= view.rowoff + view.screenrows:
        view.rowoff = view.cy - view.screenrows + 1
    if view.rx < view.coloff:
        view.coloff = view.rx
    if view.rx >= view.coloff + view.screencols:
        view.coloff = view.rx - view.screencols + 1
    view.rowoff = max(0, view.rowoff)
    view.coloff = max(0, view.coloff)


def draw_welcome(editor: Editor, out: list[str]) -> None:
    cols = editor.view.screencols
    welcome = f"tedit -- version {TEDIT_VERSION}"[:cols]
    pad = (cols - len(welcome)) // 2
    if pad:
        out.append("~")
        pad -= 1
    if pad > 0:
        out.append(" " * pad)
    out.append(welcome)


def draw_row(editor: Editor, filerow: int, out: list[str]) -> None:
    view = editor.view
    row = editor.doc.rows[filerow]
    chars = row.render[view.coloff : view.coloff + view.screencols]
    hl = row.hl[view.coloff : view.coloff + view.screencols]
    current_color = -1
    for ch, h in zip(chars, hl):
        code = ord(ch)
        if code < 32 or code == 127:
            sym = chr(ord("@") + code) if code <= 26 else "?"
            out.append(ANSI_INVERT_ON)
            out.append(sym)
            out.append(ANSI_RESET)
            if current_color != -1:
                out.append(f"\x1b[{current_color}m")
        elif h == HL_NORMAL:
            if current_color != -1:
                out.append(ANSI_DEFAULT_FG)
                current_color = -1
            out.append(ch)
        else:
            color = syntax_to_color(h)
            if color != current_color:
                out.append(f"\x1b[{color}m")
                current_color = color
            out.append(ch)
    out.append(ANSI_DEFAULT_FG)


def draw_rows(editor: Editor, out: list[str]) -> None:
    view = editor.view
    numrows = editor.doc.numrows
    for y in range(view.screenrows):
        filerow = view.rowoff + y
        if filerow < numrows:
            draw_row(editor, filerow, out)
        elif numrows == 0 and y == view.screenrows // 3:
            draw_welcome(editor, out)
        else:
            out.append("~")
        out.append(ANSI_CLEAR_LINE)
        out.append("\r\n")


def draw_status_bar(editor: Editor, out: list[str]) -> None:
    doc = editor.doc
    view = editor.view
    name = editor.filename or "[No Name]"
    mod = " (modified)" if editor.file_was_modified() else ""
    status = f"{name:.20} - {doc.numrows} lines{mod}"[: view.screencols]
    filetype = doc.syntax.name if doc.syntax else "no ft"
    rstatus = f"{filetype} | {view.cy + 1}/{doc.numrows}"
    out.append(ANSI_INVERT_ON)
    out.append(status)
    fill = len(status)
    while fill < view.screencols:
        if view.screencols - fill == len(rstatus):
            out.append(rstatus)
            break
        out.append(" ")
        fill += 1
    out.append(ANSI_RESET)
    out.append("\r\n")


def draw_message_bar(editor: Editor, out: list[str]) -> None:
    out.append(ANSI_CLEAR_LINE)
    if editor.statusmsg and time.time() - editor.statusmsg_time < editor.status_timeout:
        out.append(editor.statusmsg[: editor.view.screencols])


def cursor_escape(editor: Editor) -> str:
    view = editor.view
    return f"\x1b[{view.cy - view.rowoff + 1};{view.rx - view.coloff + 1}H"


def draw_frame(editor: Editor) -> str:
    out: list[str] = [ANSI_HIDE_CURSOR, ANSI_CURSOR_HOME]
    draw_rows(editor, out)
    draw_status_bar(editor, out)
    draw_message_bar(editor, out)
    out.append(cursor_escape(editor))
    out.append(ANSI_SHOW_CURSOR)
    return "".join(out)


def refresh_screen(editor: Editor) -> None:
    scroll(editor)
    frame = draw_frame(editor)
    os.write(editor.stdout_fd, frame.encode(ENCODING, errors="replace"))
