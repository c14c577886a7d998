"""マーカー行の書式。

書式は既存のPR本文との互換のため固定:

- header: `<!-- This is an auto-generated comment: created by <tool> -->`
- start:  `<!-- <section_id> -->`
- end:    `<!-- end: <section_id> -->`
"""

from __future__ import annotations

from prdesc.errors import InvalidIdentifier

DEFAULT_TOOL_IDENTITY = "prdesc"

END_TAG = "end:"

HEADER_PREFIX = "This is an auto-generated comment: created by "


def header_marker(tool_identity: str = DEFAULT_TOOL_IDENTITY) -> str:
    return f"<!-- {HEADER_PREFIX}{tool_identity} -->"


def start_marker(section_id: str) -> str:
    return f"<!-- {section_id} -->"


def end_marker(section_id: str) -> str:
    return f"<!-- {END_TAG} {section_id} -->"


def validate_section_id(section_id: str) -> str:
    """Return `section_id` unchanged, or raise InvalidIdentifier."""

    if not section_id:
        raise InvalidIdentifier(section_id, "empty")
    if section_id != section_id.strip():
        raise InvalidIdentifier(section_id, "leading or trailing whitespace")
    if "\n" in section_id or "\r" in section_id:
        raise InvalidIdentifier(section_id, "contains a line break")
    if "<!--" in section_id or "-->" in section_id:
        raise InvalidIdentifier(section_id, "contains comment delimiter")
    # `<!-- end: x -->` は x の終端マーカーと区別できない
    if section_id.startswith(END_TAG):
        raise InvalidIdentifier(section_id, f"starts with {END_TAG!r}")
    # 開始マーカーがヘッダ行と同じ書式になる
    if section_id.startswith(HEADER_PREFIX):
        raise InvalidIdentifier(section_id, "looks like the header marker")
    return section_id


def parse_marker(line: str) -> tuple[str, str] | None:
    """Classify a line as ("start", id) / ("end", id), or None.

    The header line is reported as None.
    """

    s = line.strip()
    if not (s.startswith("<!-- ") and s.endswith(" -->")):
        return None
    inner = s[len("<!-- ") : -len(" -->")]
    if not inner or inner != inner.strip():
        return None
    if inner.startswith(HEADER_PREFIX):
        return None
    if inner.startswith(END_TAG + " "):
        sid = inner[len(END_TAG) + 1 :]
        return ("end", sid) if sid and sid == sid.strip() else None
    if "<!--" in inner or "-->" in inner or inner.startswith(END_TAG):
        return None
    return ("start", inner)
