"""Row store: the ordered rows of a buffer and their derived render/highlight data."""

from __future__ import annotations

from .constants import TEDIT_TAB_STOP
from .models import Row, SyntaxProfile
from .syntax import update_syntax


class Document:
    """Rows addressed by index.

    Every mutation keeps ``row.idx`` equal to the row's position, refreshes the
    render text and highlight of the touched row and bumps ``dirty``. Indices
    outside the valid range are ignored rather than raised.
    """

    def __init__(self, tab_stop: int = TEDIT_TAB_STOP, syntax: SyntaxProfile | None = None) -> None:
        self.rows: list[Row] = []
        self.dirty = 0
        self.syntax = syntax
        self.tab_stop = tab_stop

    @property
    def numrows(self) -> int:
        return len(self.rows)

    def row(self, idx: int) -> Row | None:
        if 0 <= idx < self.numrows:
            return self.rows[idx]
        return None

    def _reindex(self, start: int) -> None:
        for j in range(start, self.numrows):
            self.rows[j].idx = j

    def update_row(self, row: Row) -> None:
        out: list[str] = []
        col = 0
        for ch in row.chars:
            if ch == "\t":
                out.append(" ")
                col += 1
                while col % self.tab_stop != 0:
                    out.append(" ")
                    col += 1
            else:
                out.append(ch)
                col += 1
        row.render = "".join(out)
        update_syntax(self, row.idx)

    def insert_row(self, at: int, s: str) -> None:
        if at < 0 or at > self.numrows:
            return
        self.rows.insert(at, Row(idx=at, chars=s))
        self._reindex(at + 1)
        self.update_row(self.rows[at])
        # The following row is now seeded by the new one.
        if at + 1 < self.numrows:
            update_syntax(self, at + 1)
        self.dirty += 1

    def delete_row(self, at: int) -> None:
        if at < 0 or at >= self.numrows:
            return
        del self.rows[at]
        self._reindex(at)
        if at < self.numrows:
            update_syntax(self, at)
        self.dirty += 1

    def insert_char(self, row_idx: int, at: int, c: str) -> None:
        row = self.row(row_idx)
        if row is None:
            return
        at = min(max(at, 0), row.size)
        row.chars = row.chars[:at] + c + row.chars[at:]
        self.update_row(row)
        self.dirty += 1

    def delete_char(self, row_idx: int, at: int) -> None:
        row = self.row(row_idx)
        if row is None or at < 0 or at >= row.size:
            return
        row.chars = row.chars[:at] + row.chars[at + 1 :]
        self.update_row(row)
        self.dirty += 1

    def append_text(self, row_idx: int, s: str) -> None:
        row = self.row(row_idx)
        if row is None:
            return
        row.chars += s
        self.update_row(row)
        self.dirty += 1

    def split_row(self, row_idx: int, at: int) -> None:
        row = self.row(row_idx)
        if row is None:
            return
        at = min(max(at, 0), row.size)
        tail = row.chars[at:]
        row.chars = row.chars[:at]
        self.update_row(row)
        self.insert_row(row_idx + 1, tail)

    def rows_to_string(self) -> str:
        return "".join(f"{row.chars}\n" for row in self.rows)

    def cx_to_rx(self, row: Row, cx: int) -> int:
        rx = 0
        for ch in row.chars[:cx]:
            if ch == "\t":
                rx += (self.tab_stop - 1) - (rx % self.tab_stop)
            rx += 1
        return rx

    def rx_to_cx(self, row: Row, rx: int) -> int:
        cur_rx = 0
        for cx, ch in enumerate(row.chars):
            if ch == "\t":
                cur_rx += (self.tab_stop - 1) - (cur_rx % self.tab_stop)
            cur_rx += 1
            if cur_rx > rx:
                return cx
        return row.size
