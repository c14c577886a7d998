"""PR本文のセクション単位パッチ。

本文中のマーカー行の対でセクションを識別し、指定セクションの中身だけを
差し替える（無ければ末尾に追加する）。マーカーの外側は1バイトも変えない。

    <!-- This is an auto-generated comment: created by prdesc -->

    <!-- coverage -->
    ...
    <!-- end: coverage -->

I/O は一切行わない。取得/書き戻しは adapter 側の責務。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from prdesc.errors import MalformedSection
from prdesc.markers import (
    DEFAULT_TOOL_IDENTITY,
    end_marker,
    header_marker,
    parse_marker,
    start_marker,
    validate_section_id,
)

log = logging.getLogger(__name__)

_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")


@dataclass(frozen=True)
class SectionSpan:
    section_id: str
    start_line: int  # 0-based index of the start marker line
    end_line: int  # 0-based index of the end marker line
    content: str


def _split_lines(text: str) -> list[str]:
    # "".join(_split_lines(t)) == t
    return _LINE_RE.findall(text)


def _newline(document: str) -> str:
    return "\r\n" if "\r\n" in document else "\n"


def _content_block(content: str, nl: str) -> str:
    if not content:
        return ""
    if content.endswith("\n"):
        return content
    return content + nl


def _locate(lines: list[str], section_id: str) -> tuple[int, int] | None:
    """Return (start, end) line indexes of the first marker pair, or None.

    Every marker of `section_id` must be paired; otherwise MalformedSection.
    """

    start = start_marker(section_id)
    end = end_marker(section_id)
    pairs: list[tuple[int, int]] = []
    opened: int | None = None
    for i, line in enumerate(lines):
        s = line.strip()
        if s == start:
            if opened is not None:
                raise MalformedSection(
                    section_id, f"nested start marker (line {i + 1}) inside section"
                )
            opened = i
        elif s == end:
            if opened is None:
                raise MalformedSection(
                    section_id, f"end marker without start marker (line {i + 1})"
                )
            pairs.append((opened, i))
            opened = None
    if opened is not None:
        raise MalformedSection(
            section_id, f"start marker without end marker (line {opened + 1})"
        )

    if not pairs:
        return None
    if len(pairs) > 1:
        log.warning(
            "section %r appears %d times; updating the first one (line %d)",
            section_id,
            len(pairs),
            pairs[0][0] + 1,
        )
    return pairs[0]


def _append(document: str, section_id: str, content: str, nl: str, tool_identity: str) -> str:
    header = header_marker(tool_identity)
    out = document
    if not any(line.strip() == header for line in _split_lines(document)):
        out = header + nl + nl + document if document else header + nl

    if not out.endswith("\n"):
        out += nl
    if _split_lines(out)[-1].strip() != "":
        out += nl

    return out + start_marker(section_id) + nl + _content_block(content, nl) + end_marker(section_id)


def patch(
    document: str,
    section_id: str,
    content: str,
    *,
    tool_identity: str = DEFAULT_TOOL_IDENTITY,
) -> tuple[str, bool]:
    """Replace or append the section `section_id`.

    Returns `(new_document, was_update)`. `was_update` is True when an existing
    section was replaced and False when a new one was appended.

    Raises InvalidIdentifier before touching the document, and
    MalformedSection when the markers for `section_id` do not pair up.
    """

    validate_section_id(section_id)
    document = document or ""
    nl = _newline(document)
    lines = _split_lines(document)

    span = _locate(lines, section_id)
    if span is None:
        log.debug("section %r not found; appending", section_id)
        return _append(document, section_id, content, nl, tool_identity), False

    first, closing = span
    new_document = (
        "".join(lines[: first + 1]) + _content_block(content, nl) + "".join(lines[closing:])
    )
    return new_document, True


def read_section(document: str, section_id: str) -> str | None:
    """Return the raw text between the markers of `section_id` (None if absent)."""

    validate_section_id(section_id)
    lines = _split_lines(document or "")
    span = _locate(lines, section_id)
    if span is None:
        return None
    first, closing = span
    return "".join(lines[first + 1 : closing])


def find_sections(document: str) -> list[SectionSpan]:
    """List every well-formed section in document order."""

    lines = _split_lines(document or "")
    opened: dict[str, int] = {}
    spans: list[SectionSpan] = []
    for i, line in enumerate(lines):
        m = parse_marker(line)
        if m is None:
            continue
        kind, sid = m
        if kind == "start":
            opened.setdefault(sid, i)
        elif sid in opened:
            start = opened.pop(sid)
            spans.append(
                SectionSpan(
                    section_id=sid,
                    start_line=start,
                    end_line=i,
                    content="".join(lines[start + 1 : i]),
                )
            )
    for sid, i in opened.items():
        log.debug("unterminated section %r at line %d", sid, i + 1)
    spans.sort(key=lambda s: s.start_line)
    return spans
