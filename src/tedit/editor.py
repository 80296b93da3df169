from __future__ import annotations

import errno
import logging
import os
import signal
import sys
import time
from typing import Any

from .config import DEFAULT_CONFIG, load_config
from .constants import (
    ANSI_CLEAR_SCREEN,
    ANSI_CURSOR_HOME,
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_F,
    CTRL_H,
    CTRL_L,
    CTRL_Q,
    CTRL_S,
    DEL_KEY,
    END_KEY,
    ENTER,
    ESC,
    HOME_KEY,
    PAGE_DOWN,
    PAGE_UP,
)
from .document import Document
from .io_ops import load_lines, save_text
from .logging_config import KEY_LOGGER, setup_logging
from .models import Viewport
from .render import refresh_screen
from .search import Prompt, Search
from .syntax import HLDB, profiles_from_config, select_syntax_highlight
from .terminal import RawMode, get_window_size, read_key

logger = logging.getLogger("tedit")


class Editor:
    def __init__(
        self,
        config: dict[str, Any] | None = None,
        stdin_fd: int = 0,
        stdout_fd: int = 1,
    ) -> None:
        config = config if config is not None else DEFAULT_CONFIG
        editor_config = config.get("editor", DEFAULT_CONFIG["editor"])
        self.quit_times_max = editor_config["quit_times"]
        self.status_timeout = editor_config["status_timeout"]
        self.profiles = profiles_from_config(config) + HLDB

        self.doc = Document(tab_stop=editor_config["tab_stop"])
        self.view = Viewport()
        self.filename: str | None = None
        self.statusmsg = ""
        self.statusmsg_time = 0.0
        self.quit_times = self.quit_times_max
        self.prompt: Prompt | None = None
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd

    def set_window_size(self, rows: int, cols: int) -> None:
        # Two lines are reserved for the status and message bars.
        self.view.screenrows = max(1, rows - 2)
        self.view.screencols = max(1, cols)

    def update_window_size(self) -> None:
        try:
            rows, cols = get_window_size(self.stdin_fd, self.stdout_fd)
        except OSError as exc:
            raise OSError(exc.errno, "Unable to query screen size") from exc
        self.set_window_size(rows, cols)
        logger.debug("Window size %dx%d", cols, rows)

    def handle_sigwinch(self, _signum: int, _frame) -> None:
        self.update_window_size()
        self.refresh_screen()

    def set_status_message(self, fmt: str, *args: object) -> None:
        self.statusmsg = fmt % args if args else fmt
        self.statusmsg_time = time.time()

    def expire_status_message(self) -> bool:
        """Drop the status message once it is older than the timeout."""
        if self.statusmsg and time.time() - self.statusmsg_time >= self.status_timeout:
            self.statusmsg = ""
            return True
        return False

    def select_syntax_highlight(self, filename: str | None) -> None:
        select_syntax_highlight(self.doc, filename, self.profiles)

    # File I/O

    def open_file(self, filename: str) -> None:
        self.filename = filename
        self.select_syntax_highlight(filename)
        for line in load_lines(filename):
            self.doc.insert_row(self.doc.numrows, line)
        self.doc.dirty = 0

    def save(self) -> None:
        if not self.filename:
            self.start_prompt(Prompt("Save as: %s (ESC to cancel)", on_done=self._save_as_done))
            return
        try:
            written = save_text(self.filename, self.doc.rows_to_string())
        except OSError as exc:
            logger.error("Saving %s failed: %s", self.filename, exc)
            self.set_status_message("Can't save! I/O error: %s", os.strerror(exc.errno or errno.EIO))
            return
        self.doc.dirty = 0
        self.set_status_message("%d bytes written to disk", written)

    def _save_as_done(self, filename: str | None) -> None:
        if filename is None:
            self.set_status_message("Save aborted")
            return
        self.filename = filename
        self.select_syntax_highlight(filename)
        self.save()

    # Prompts

    def start_prompt(self, prompt: Prompt) -> None:
        self.prompt = prompt
        self.set_status_message(prompt.message)

    def _feed_prompt(self, prompt: Prompt, key: int) -> None:
        # Cleared first so on_done may start a new prompt.
        self.prompt = None
        if prompt.feed(key):
            if self.prompt is None and self.statusmsg == prompt.message:
                self.set_status_message("")
            return
        self.prompt = prompt
        self.set_status_message(prompt.message)

    def find(self) -> None:
        self.start_prompt(Search(self).prompt())

    # Edit operations

    def insert_char(self, c: str) -> None:
        view = self.view
        if view.cy == self.doc.numrows:
            self.doc.insert_row(self.doc.numrows, "")
        self.doc.insert_char(view.cy, view.cx, c)
        view.cx += 1

    def insert_newline(self) -> None:
        view = self.view
        if view.cx == 0:
            self.doc.insert_row(view.cy, "")
        else:
            self.doc.split_row(view.cy, view.cx)
        view.cy += 1
        view.cx = 0

    def del_char(self) -> None:
        view = self.view
        if view.cy >= self.doc.numrows:
            return
        if view.cx == 0 and view.cy == 0:
            return

        if view.cx > 0:
            self.doc.delete_char(view.cy, view.cx - 1)
            view.cx -= 1
        else:
            prev = self.doc.rows[view.cy - 1]
            view.cx = prev.size
            self.doc.append_text(view.cy - 1, self.doc.rows[view.cy].chars)
            self.doc.delete_row(view.cy)
            view.cy -= 1

    # Cursor movement

    def move_cursor(self, key: int) -> None:
        view = self.view
        row = self.doc.row(view.cy)

        if key == ARROW_LEFT:
            if view.cx != 0:
                view.cx -= 1
            elif view.cy > 0:
                view.cy -= 1
                view.cx = self.doc.rows[view.cy].size
        elif key == ARROW_RIGHT:
            if row is not None and view.cx < row.size:
                view.cx += 1
            elif row is not None and view.cx == row.size:
                view.cy += 1
                view.cx = 0
        elif key == ARROW_UP:
            if view.cy != 0:
                view.cy -= 1
        elif key == ARROW_DOWN:
            if view.cy < self.doc.numrows:
                view.cy += 1

        row = self.doc.row(view.cy)
        rowlen = row.size if row is not None else 0
        if view.cx > rowlen:
            view.cx = rowlen

    def page(self, key: int) -> None:
        view = self.view
        if key == PAGE_UP:
            view.cy = view.rowoff
        else:
            view.cy = min(view.rowoff + view.screenrows - 1, self.doc.numrows)
        for _ in range(view.screenrows):
            self.move_cursor(ARROW_UP if key == PAGE_UP else ARROW_DOWN)

    # Key dispatch

    def process_key(self, c: int) -> None:
        KEY_LOGGER.debug("key %d", c)
        if self.prompt is not None:
            self._feed_prompt(self.prompt, c)
            self.quit_times = self.quit_times_max
            return

        if c == ENTER:
            self.insert_newline()
        elif c == CTRL_Q:
            if self.file_was_modified() and self.quit_times > 0:
                self.set_status_message(
                    "WARNING!!! File has unsaved changes. Press Ctrl-Q %d more times to quit.",
                    self.quit_times,
                )
                self.quit_times -= 1
                return
            logger.info("Quit requested")
            raise SystemExit(0)
        elif c == CTRL_S:
            self.save()
        elif c == CTRL_F:
            self.find()
        elif c in (BACKSPACE, CTRL_H, DEL_KEY):
            if c == DEL_KEY:
                self.move_cursor(ARROW_RIGHT)
            self.del_char()
        elif c in (PAGE_UP, PAGE_DOWN):
            self.page(c)
        elif c in (ARROW_UP, ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT):
            self.move_cursor(c)
        elif c == HOME_KEY:
            self.view.cx = 0
        elif c == END_KEY:
            row = self.doc.row(self.view.cy)
            if row is not None:
                self.view.cx = row.size
        elif c in (CTRL_L, ESC):
            pass
        else:
            self.insert_char(chr(c & 0xFF))

        self.quit_times = self.quit_times_max

    def refresh_screen(self) -> None:
        refresh_screen(self)

    def file_was_modified(self) -> bool:
        return bool(self.doc.dirty)


def run_session(editor: Editor) -> None:
    """Drive ``editor`` in raw mode until a key raises ``SystemExit``.

    The screen is cleared and the previous SIGWINCH handler reinstated on the
    way out, whatever ends the session.
    """
    with RawMode(editor.stdin_fd):
        editor.update_window_size()
        previous_winch = signal.signal(signal.SIGWINCH, editor.handle_sigwinch)
        editor.set_status_message("HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find")
        try:
            redraw = True
            while True:
                if redraw:
                    editor.refresh_screen()
                key = read_key(editor.stdin_fd, wait=False)
                if key is None:
                    redraw = editor.expire_status_message()
                    continue
                editor.process_key(key)
                redraw = True
        finally:
            if previous_winch is not None:
                signal.signal(signal.SIGWINCH, previous_winch)
            os.write(editor.stdout_fd, f"{ANSI_CLEAR_SCREEN}{ANSI_CURSOR_HOME}".encode())


def run(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) > 1:
        print("Usage: tedit [filename]", file=sys.stderr)
        return 1
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    if not os.isatty(stdin_fd) or not os.isatty(stdout_fd):
        print("tedit: stdin/stdout must be a tty", file=sys.stderr)
        return 1

    config = load_config()
    setup_logging(config)
    editor = Editor(config, stdin_fd, stdout_fd)
    if args:
        try:
            editor.open_file(args[0])
        except OSError as exc:
            logger.critical("%s", exc)
            print(f"tedit: {exc.strerror or exc}", file=sys.stderr)
            return 1

    try:
        run_session(editor)
    except OSError as exc:
        logger.critical("Terminal error: %s", exc, exc_info=True)
        print(f"tedit: {exc}", file=sys.stderr)
        return 1
    except SystemExit as exc:
        if isinstance(exc.code, int):
            return exc.code
        return 0
    return 0
