"""Raw-mode terminal access: key decoding and screen size detection."""

from __future__ import annotations

import errno
import fcntl
import logging
import os
import re
import shutil
import struct
import termios

from .constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    DEL_KEY,
    END_KEY,
    ESC,
    HOME_KEY,
    PAGE_DOWN,
    PAGE_UP,
)

logger = logging.getLogger("tedit")

# ESC [ <letter>
CSI_SIMPLE_MAP = {
    ord("A"): ARROW_UP,
    ord("B"): ARROW_DOWN,
    ord("C"): ARROW_RIGHT,
    ord("D"): ARROW_LEFT,
    ord("H"): HOME_KEY,
    ord("F"): END_KEY,
}
# ESC [ <digit> ~
CSI_TILDE_MAP = {
    ord("1"): HOME_KEY,
    ord("3"): DEL_KEY,
    ord("4"): END_KEY,
    ord("5"): PAGE_UP,
    ord("6"): PAGE_DOWN,
    ord("7"): HOME_KEY,
    ord("8"): END_KEY,
}
# ESC O <letter>
SS3_SIMPLE_MAP = {
    ord("H"): HOME_KEY,
    ord("F"): END_KEY,
}

CURSOR_REPLY = re.compile(rb"\x1b\[(\d+);(\d+)R")


def _next_byte(fd: int) -> int | None:
    """One byte from ``fd``, or None when the raw-mode read timed out."""
    try:
        data = os.read(fd, 1)
    except (InterruptedError, BlockingIOError):
        return None
    return data[0] if data else None


def _decode_escape(fd: int) -> int:
    first = _next_byte(fd)
    second = _next_byte(fd) if first is not None else None
    if second is None:
        return ESC

    if first == ord("O"):
        return SS3_SIMPLE_MAP.get(second, ESC)
    if first != ord("["):
        return ESC
    if not ord("0") <= second <= ord("9"):
        return CSI_SIMPLE_MAP.get(second, ESC)
    if _next_byte(fd) == ord("~"):
        return CSI_TILDE_MAP.get(second, ESC)
    return ESC


def read_key(fd: int, wait: bool = True) -> int | None:
    """Read one key, decoding escape sequences into the symbolic key codes.

    In raw mode each read times out after a tenth of a second. With
    ``wait=False`` a timeout returns ``None`` so the caller can refresh.
    """
    c = _next_byte(fd)
    while c is None:
        if not wait:
            return None
        c = _next_byte(fd)
    return _decode_escape(fd) if c == ESC else c


def _write_all(fd: int, data: bytes) -> None:
    if os.write(fd, data) != len(data):
        raise OSError(errno.EIO, f"short write of terminal query {data!r}")


def parse_cursor_reply(reply: bytes) -> tuple[int, int]:
    match = CURSOR_REPLY.match(reply)
    if match is None:
        raise OSError(errno.EIO, f"unexpected cursor position reply {reply!r}")
    return int(match.group(1)), int(match.group(2))


def get_cursor_position(ifd: int, ofd: int) -> tuple[int, int]:
    """Ask the terminal where the cursor is; returns ``(row, col)``, 1-based."""
    _write_all(ofd, b"\x1b[6n")
    reply = bytearray()
    while len(reply) < 31:
        c = _next_byte(ifd)
        if c is None:
            break
        reply.append(c)
        if c == ord("R"):
            break
    return parse_cursor_reply(bytes(reply))


def _ioctl_size(fd: int) -> tuple[int, int] | None:
    try:
        winsize = fcntl.ioctl(fd, termios.TIOCGWINSZ, b"\0" * 8)
    except OSError:
        return None
    rows, cols = struct.unpack("HHHH", winsize)[:2]
    return (rows, cols) if rows and cols else None


def get_window_size(ifd: int, ofd: int) -> tuple[int, int]:
    """Screen size as ``(rows, cols)``.

    Tries TIOCGWINSZ first, then moves the cursor to the bottom-right corner
    and asks for its position, and finally falls back to ``COLUMNS``/``LINES``.
    """
    size = _ioctl_size(ofd)
    if size is not None:
        return size

    try:
        home_row, home_col = get_cursor_position(ifd, ofd)
        _write_all(ofd, b"\x1b[999C\x1b[999B")
        size = get_cursor_position(ifd, ofd)
        os.write(ofd, f"\x1b[{home_row};{home_col}H".encode())
        return size
    except OSError as exc:
        logger.warning("Window size query failed (%s); falling back to COLUMNS/LINES", exc)

    fallback = shutil.get_terminal_size((80, 24))
    return fallback.lines, fallback.columns


def _raw_attrs(attrs: list) -> list:
    iflag, oflag, cflag, lflag, ispeed, ospeed, cc = attrs
    iflag &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
    oflag &= ~termios.OPOST
    cflag |= termios.CS8
    lflag &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
    cc = list(cc)
    # Reads return after at most 100 ms, even with no input.
    cc[termios.VMIN] = 0
    cc[termios.VTIME] = 1
    return [iflag, oflag, cflag, lflag, ispeed, ospeed, cc]


class RawMode:
    """Context manager that puts ``fd`` in raw mode and restores it on exit."""

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self.saved_attrs: list | None = None

    def __enter__(self) -> RawMode:
        if not os.isatty(self.fd):
            raise OSError(errno.ENOTTY, "Raw mode needs a terminal")
        self.saved_attrs = termios.tcgetattr(self.fd)
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, _raw_attrs(self.saved_attrs))
        logger.debug("Terminal switched to raw mode")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.saved_attrs is not None:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, self.saved_attrs)
            self.saved_attrs = None
