from __future__ import annotations

import errno
import logging
import os

logger = logging.getLogger("tedit")

# Rows hold one char per byte.
ENCODING = "latin-1"


def load_lines(filename: str) -> list[str]:
    """Return the lines of ``filename`` with line terminators stripped.

    A missing file yields no lines so the buffer starts empty under that name.
    Any other failure is raised as ``OSError`` with the filename attached.
    """
    lines: list[str] = []
    try:
        with open(filename, "rb") as f:
            for line in f:
                lines.append(line.rstrip(b"\r\n").decode(ENCODING))
    except FileNotFoundError:
        logger.info("%s does not exist yet, starting an empty buffer", filename)
        return []
    except OSError as exc:
        raise OSError(exc.errno, f"Opening file failed: {filename}") from exc
    logger.info("Loaded %d lines from %s", len(lines), filename)
    return lines


def save_text(filename: str, text: str) -> int:
    data = text.encode(ENCODING, errors="replace")
    fd = os.open(filename, os.O_RDWR | os.O_CREAT, 0o644)
    try:
        os.ftruncate(fd, len(data))
        written = 0
        while written < len(data):
            n = os.write(fd, data[written:])
            if n <= 0:
                raise OSError(errno.EIO, "short write")
            written += n
    finally:
        os.close(fd)
    logger.info("Wrote %d bytes to %s", len(data), filename)
    return len(data)
