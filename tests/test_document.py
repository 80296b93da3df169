# tests/test_document.py
"""Row store tests: tab expansion, index bookkeeping and bounds handling."""

from __future__ import annotations

import pytest

from conftest import make_doc
from tedit.constants import HL_NORMAL


def assert_consistent(doc) -> None:
    for i, row in enumerate(doc.rows):
        assert row.idx == i
        assert len(row.hl) == len(row.render)


def test_tab_expands_to_next_tab_stop() -> None:
    doc = make_doc(["a\tb"], tab_stop=4)
    assert doc.rows[0].render == "a   b"
    assert doc.rows[0].render.index("b") == 4


def test_tab_stop_eight() -> None:
    doc = make_doc(["\tx", "1234567\ty"], tab_stop=8)
    assert doc.rows[0].render == " " * 8 + "x"
    assert doc.rows[1].render == "1234567 y"


@pytest.mark.parametrize("text", ["a\tb", "\t\tx\ty", "plain", "", "abc\t"])
def test_cx_rx_are_inverse(text: str) -> None:
    doc = make_doc([text], tab_stop=4)
    row = doc.rows[0]
    for cx in range(row.size + 1):
        assert doc.rx_to_cx(row, doc.cx_to_rx(row, cx)) == cx


def test_cx_to_rx_counts_tab_width() -> None:
    doc = make_doc(["a\tb"], tab_stop=4)
    assert doc.cx_to_rx(doc.rows[0], 2) == 4


def test_insert_and_delete_rows_reindex() -> None:
    doc = make_doc(["zero", "one", "two"])
    doc.insert_row(1, "new")
    assert [r.chars for r in doc.rows] == ["zero", "new", "one", "two"]
    assert_consistent(doc)

    doc.delete_row(0)
    assert [r.chars for r in doc.rows] == ["new", "one", "two"]
    assert_consistent(doc)
    assert doc.dirty


def test_out_of_range_rows_are_noops() -> None:
    doc = make_doc(["only"])
    doc.insert_row(5, "x")
    doc.insert_row(-1, "x")
    doc.delete_row(3)
    doc.insert_char(7, 0, "x")
    doc.delete_char(7, 0)
    doc.append_text(-2, "x")
    doc.split_row(9, 0)
    assert [r.chars for r in doc.rows] == ["only"]
    assert doc.dirty == 0


def test_insert_char_clamps_position() -> None:
    doc = make_doc(["abc"])
    doc.insert_char(0, 100, "!")
    doc.insert_char(0, -3, "^")
    assert doc.rows[0].chars == "^abc!"


def test_delete_char_out_of_row_is_noop() -> None:
    doc = make_doc(["abc"])
    doc.delete_char(0, 3)
    doc.delete_char(0, -1)
    assert doc.rows[0].chars == "abc"
    assert doc.dirty == 0


@pytest.mark.parametrize("col", [0, 1, 2, 3])
def test_insert_then_delete_restores_row(col: int) -> None:
    doc = make_doc(["a\tc"])
    doc.insert_char(0, col, "x")
    doc.delete_char(0, col)
    assert doc.rows[0].chars == "a\tc"
    assert doc.rows[0].render == "a   c"
    assert_consistent(doc)


def test_split_row_moves_suffix_to_new_row() -> None:
    doc = make_doc(["hello world", "tail"])
    doc.split_row(0, 5)
    assert [r.chars for r in doc.rows] == ["hello", " world", "tail"]
    assert_consistent(doc)


def test_split_row_clamps_column() -> None:
    doc = make_doc(["abc"])
    doc.split_row(0, 99)
    assert [r.chars for r in doc.rows] == ["abc", ""]


def test_append_text_updates_render() -> None:
    doc = make_doc(["a"])
    doc.append_text(0, "\tb")
    assert doc.rows[0].render == "a   b"
    assert doc.rows[0].hl == [HL_NORMAL] * 5


def test_rows_to_string_terminates_every_row() -> None:
    doc = make_doc(["one", "", "three"])
    assert doc.rows_to_string() == "one\n\nthree\n"
    assert make_doc([]).rows_to_string() == ""


def test_highlight_length_matches_render_after_edits(c_syntax) -> None:
    doc = make_doc(["int\tx = 1;", "/* c", "*/"], syntax=c_syntax)
    doc.insert_char(0, 1, "\t")
    doc.split_row(1, 2)
    doc.append_text(3, " \"str\"")
    doc.delete_row(2)
    assert_consistent(doc)
