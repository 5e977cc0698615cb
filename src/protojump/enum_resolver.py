"""Enum value resolver: locate one enumerant line inside an enum block.

Generated code rarely spells an enumerant the way the schema does (Go emits
``Status_STATUS_ACTIVE``, other generators camel-case it), so the resolver
tries a short, ordered list of spellings against each ``NAME = N;`` entry
of the enum body.
"""

from __future__ import annotations

import re

from protojump.models import Definition

_UPPER_RE = re.compile(r"([A-Z])")


def _snake(name: str) -> str:
    """``ActvStateStart`` -> ``_Actv_State_Start`` (caller fixes case and lead)."""
    return _UPPER_RE.sub(r"_\1", name)


def upper_snake(name: str) -> str:
    return _snake(name).upper().removeprefix("_")


def lower_snake(name: str) -> str:
    return _snake(name).lower().removeprefix("_")


def enum_value_candidates(value_name: str, enum_name: str | None = None) -> list[str]:
    """Return de-duplicated spellings of *value_name*, most likely first.

    Order: as given, UPPER_SNAKE, UPPER, lower, lower_snake.  With
    *enum_name*, the style-guide prefixed forms ``<ENUM_NAME>_<VALUE>`` of
    the upper-case spellings follow.
    """
    candidates = [
        value_name,
        upper_snake(value_name),
        value_name.upper(),
        value_name.lower(),
        lower_snake(value_name),
    ]
    if enum_name:
        prefix = upper_snake(enum_name) + "_"
        candidates.extend(prefix + c for c in (upper_snake(value_name), value_name.upper()))
    return list(dict.fromkeys(c for c in candidates if c))


def _body_span(lines: list[str], header_index: int) -> tuple[int, int, int] | None:
    """Find the enum body for the header at *header_index* (0-based).

    Returns ``(open_line, start, end)``: the line holding the opening brace,
    and the half-open range of whole body lines after it.  None if no
    opening brace follows the header.
    """
    open_line = None
    for i in range(header_index, len(lines)):
        if "{" in lines[i]:
            open_line = i
            break
    if open_line is None:
        return None

    tail = lines[open_line][lines[open_line].index("{") + 1 :]
    depth = 1 + tail.count("{") - tail.count("}")
    if depth <= 0:
        return open_line, open_line + 1, open_line + 1

    end = len(lines)
    for i in range(open_line + 1, len(lines)):
        depth += lines[i].count("{") - lines[i].count("}")
        if depth <= 0:
            end = i
            break
    return open_line, open_line + 1, end


def _segments(line: str, start: int = 0) -> list[tuple[int, str]]:
    """Split *line* from *start* on ``;`` into ``(offset, text)`` pieces."""
    pieces: list[tuple[int, str]] = []
    offset = start
    for piece in line[start:].split(";"):
        pieces.append((offset, piece))
        offset += len(piece) + 1
    return pieces


def _is_skippable(text: str) -> bool:
    return not text or text.startswith("//") or text.startswith("/*")


def find_enum_value(
    content: str,
    enum_definition: Definition,
    value_name: str,
) -> Definition:
    """Resolve *value_name* inside *enum_definition*'s block in *content*.

    Falls back to *enum_definition* itself when the header is out of range
    or no body entry matches any candidate spelling.
    """
    lines = content.splitlines()
    header_index = enum_definition.line - 1
    if not 0 <= header_index < len(lines):
        return enum_definition
    span = _body_span(lines, header_index)
    if span is None:
        return enum_definition
    open_line, start, end = span

    # (line index, segment offset, segment text); the header line may carry
    # an inline body after its '{'.
    entries: list[tuple[int, int, str]] = []
    brace = lines[open_line].index("{") + 1
    for offset, piece in _segments(lines[open_line], brace):
        entries.append((open_line, offset, piece))
    for i in range(start, end):
        if _is_skippable(lines[i].strip()):
            continue
        for offset, piece in _segments(lines[i]):
            entries.append((i, offset, piece))

    patterns = [
        (candidate, re.compile(rf"^{re.escape(candidate)}\s*=\s*-?\d+", re.IGNORECASE))
        for candidate in enum_value_candidates(value_name, enum_definition.name)
    ]
    for line_index, offset, piece in entries:
        text = piece.strip()
        if _is_skippable(text):
            continue
        for candidate, pattern in patterns:
            if not pattern.match(text):
                continue
            original = lines[line_index]
            column = original.find(candidate, offset)
            if column == -1:
                # Case-insensitive hit; the name starts where the segment text does.
                column = offset + len(piece) - len(piece.lstrip())
            return Definition(
                name=value_name,
                kind="enum",
                file_path=enum_definition.file_path,
                line=line_index + 1,
                column=column,
                package_name=enum_definition.package_name,
            )

    return enum_definition
