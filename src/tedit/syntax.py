from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from .constants import (
    C_HL_EXTENSIONS,
    C_HL_KEYWORDS,
    DIGITS,
    HL_COMMENT,
    HL_HIGHLIGHT_NUMBERS,
    HL_HIGHLIGHT_STRINGS,
    HL_KEYWORD1,
    HL_KEYWORD2,
    HL_MATCH,
    HL_MLCOMMENT,
    HL_NORMAL,
    HL_NUMBER,
    HL_STRING,
    PY_HL_EXTENSIONS,
    PY_HL_KEYWORDS,
    SEPARATORS,
    WHITESPACE,
)
from .models import Row, SyntaxProfile

if TYPE_CHECKING:
    from .document import Document

logger = logging.getLogger("tedit")


HLDB: tuple[SyntaxProfile, ...] = (
    SyntaxProfile(
        name="c",
        filematch=C_HL_EXTENSIONS,
        keywords=C_HL_KEYWORDS,
        singleline_comment_start="//",
        multiline_comment_start="/*",
        multiline_comment_end="*/",
        flags=HL_HIGHLIGHT_STRINGS | HL_HIGHLIGHT_NUMBERS,
    ),
    SyntaxProfile(
        name="python",
        filematch=PY_HL_EXTENSIONS,
        keywords=PY_HL_KEYWORDS,
        singleline_comment_start="#",
        multiline_comment_start=None,
        multiline_comment_end=None,
        flags=HL_HIGHLIGHT_STRINGS | HL_HIGHLIGHT_NUMBERS,
    ),
)


def is_separator(c: str) -> bool:
    return not c or c == "\0" or c in WHITESPACE or c in SEPARATORS


def syntax_to_color(hl: int) -> int:
    if hl in (HL_COMMENT, HL_MLCOMMENT):
        return 36
    if hl == HL_KEYWORD1:
        return 33
    if hl == HL_KEYWORD2:
        return 32
    if hl == HL_STRING:
        return 35
    if hl == HL_NUMBER:
        return 31
    if hl == HL_MATCH:
        return 34
    return 37


def _matches_filename(pattern: str, filename: str) -> bool:
    if pattern.startswith("."):
        dot = filename.rfind(".")
        return dot != -1 and filename[dot:] == pattern
    return pattern in filename


def find_syntax(filename: str, profiles: Iterable[SyntaxProfile] = HLDB) -> SyntaxProfile | None:
    for syntax in profiles:
        for pattern in syntax.filematch:
            if _matches_filename(pattern, filename):
                return syntax
    return None


def select_syntax_highlight(
    doc: Document, filename: str | None, profiles: Iterable[SyntaxProfile] = HLDB
) -> None:
    doc.syntax = find_syntax(filename, profiles) if filename else None
    logger.debug("Syntax for %r: %s", filename, doc.syntax.name if doc.syntax else "none")
    for row in doc.rows:
        _highlight_row(doc, row)


def _match_keyword(render: str, i: int, keywords: tuple[str, ...]) -> tuple[int, int]:
    """Longest keyword at ``i`` followed by a separator, as ``(length, class)``."""
    best_len = 0
    best_hl = HL_NORMAL
    for kw in keywords:
        kw2 = kw.endswith("|")
        token = kw[:-1] if kw2 else kw
        klen = len(token)
        if klen <= best_len or not render.startswith(token, i):
            continue
        tail = render[i + klen] if i + klen < len(render) else ""
        if is_separator(tail):
            best_len = klen
            best_hl = HL_KEYWORD2 if kw2 else HL_KEYWORD1
    return best_len, best_hl


def _highlight_row(doc: Document, row: Row) -> bool:
    """Recompute ``row.hl``; return whether its open-comment state changed."""
    row.hl = [HL_NORMAL] * row.rsize
    syntax = doc.syntax
    if syntax is None:
        changed = row.hl_open_comment
        row.hl_open_comment = False
        return changed

    scs = syntax.singleline_comment_start or ""
    mcs = syntax.multiline_comment_start or ""
    mce = syntax.multiline_comment_end or ""
    p = row.render
    hl = row.hl

    prev_sep = True
    in_string = ""
    in_comment = row.idx > 0 and doc.rows[row.idx - 1].hl_open_comment

    i = 0
    while i < len(p):
        ch = p[i]
        prev_hl = hl[i - 1] if i > 0 else HL_NORMAL

        if scs and not in_string and not in_comment and p.startswith(scs, i):
            for h in range(i, len(p)):
                hl[h] = HL_COMMENT
            break

        if mcs and mce and not in_string:
            if in_comment:
                hl[i] = HL_MLCOMMENT
                if p.startswith(mce, i):
                    for h in range(i, i + len(mce)):
                        hl[h] = HL_MLCOMMENT
                    i += len(mce)
                    in_comment = False
                    prev_sep = True
                else:
                    i += 1
                continue
            if p.startswith(mcs, i):
                for h in range(i, i + len(mcs)):
                    hl[h] = HL_MLCOMMENT
                i += len(mcs)
                in_comment = True
                continue

        if syntax.flags & HL_HIGHLIGHT_STRINGS:
            # Quotes are not separators, so nothing glued to a string starts a token.
            if in_string:
                hl[i] = HL_STRING
                prev_sep = False
                if ch == "\\" and i + 1 < len(p):
                    hl[i + 1] = HL_STRING
                    i += 2
                    continue
                if ch == in_string:
                    in_string = ""
                i += 1
                continue
            if ch in ('"', "'"):
                in_string = ch
                hl[i] = HL_STRING
                prev_sep = False
                i += 1
                continue

        if syntax.flags & HL_HIGHLIGHT_NUMBERS:
            if (ch in DIGITS and (prev_sep or prev_hl == HL_NUMBER)) or (
                ch == "." and prev_hl == HL_NUMBER
            ):
                hl[i] = HL_NUMBER
                i += 1
                prev_sep = False
                continue

        if prev_sep:
            klen, mark = _match_keyword(p, i, syntax.keywords)
            if klen:
                for h in range(i, i + klen):
                    hl[h] = mark
                i += klen
                prev_sep = False
                continue

        prev_sep = is_separator(ch)
        i += 1

    changed = row.hl_open_comment != in_comment
    row.hl_open_comment = in_comment
    return changed


def update_syntax(doc: Document, idx: int) -> None:
    # Forward sweep: keep going while the open-comment state of a row changes.
    while 0 <= idx < doc.numrows:
        if not _highlight_row(doc, doc.rows[idx]):
            return
        idx += 1


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


def _token(entry: dict[str, Any], key: str) -> str | None:
    value = entry.get(key)
    return value if isinstance(value, str) and value else None


def profiles_from_config(config: dict[str, Any]) -> tuple[SyntaxProfile, ...]:
    """Build user syntax profiles from ``[syntax.<name>]`` config tables.

    Entries that are not tables or lack a usable ``filematch`` list are
    skipped with a warning. Other malformed fields fall back to "absent".
    """
    section = config.get("syntax", {})
    if not isinstance(section, dict):
        logger.warning("Ignoring [syntax] config: expected a table, got %s", type(section).__name__)
        return ()

    profiles: list[SyntaxProfile] = []
    for name, entry in section.items():
        if not isinstance(entry, dict):
            logger.warning("Ignoring syntax profile %r: not a table", name)
            continue
        filematch = _strings(entry.get("filematch"))
        if not filematch:
            logger.warning("Ignoring syntax profile %r: 'filematch' must be a list of strings", name)
            continue

        keywords = _strings(entry.get("keywords"))
        keywords += [f"{kw}|" for kw in _strings(entry.get("types"))]

        flags = 0
        if entry.get("highlight_strings", True):
            flags |= HL_HIGHLIGHT_STRINGS
        if entry.get("highlight_numbers", True):
            flags |= HL_HIGHLIGHT_NUMBERS

        start = _token(entry, "multiline_comment_start")
        end = _token(entry, "multiline_comment_end")
        if (start is None) != (end is None):
            logger.warning("Syntax profile %r: block comments need both start and end tokens", name)
            start = end = None

        profiles.append(
            SyntaxProfile(
                name=str(name),
                filematch=tuple(filematch),
                keywords=tuple(keywords),
                singleline_comment_start=_token(entry, "singleline_comment_start"),
                multiline_comment_start=start,
                multiline_comment_end=end,
                flags=flags,
            )
        )
        logger.debug("Loaded syntax profile %r from config", name)
    return tuple(profiles)
