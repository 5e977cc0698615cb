"""Text scanner: top-level message/enum headers and package name from proto text.

This is deliberately not a proto compiler.  It walks the file line by line,
blanking out comments and tracking brace depth, and only recognises
``message``/``enum`` headers at depth 0.
"""

from __future__ import annotations

import re

from protojump.models import Definition, DefinitionKind

_HEADER_RES: tuple[tuple[DefinitionKind, re.Pattern[str]], ...] = (
    ("message", re.compile(r"^message\s+(\w+)\s*{")),
    ("enum", re.compile(r"^enum\s+(\w+)\s*{")),
)
_PACKAGE_RE = re.compile(r"^package\s+([^;]+);", re.MULTILINE)


def parse_package(content: str) -> str | None:
    """Return the first line-anchored ``package x.y;`` name, or None."""
    match = _PACKAGE_RE.search(content)
    if not match:
        return None
    return match.group(1).strip() or None


def strip_comments(line: str, in_block: bool) -> tuple[str, bool]:
    """Blank out comment text in *line*, preserving column offsets.

    Block comment spans are replaced with spaces so that offsets into the
    returned text are offsets into the original line.  A ``//`` comment
    truncates the rest of the line.  Comment markers inside ``"..."`` or
    ``'...'`` string literals are left alone.

    Returns ``(text, in_block)`` where *in_block* tells whether a ``/*``
    comment is still open at the end of the line.
    """
    out: list[str] = []
    quote: str | None = None
    pos = 0
    length = len(line)
    while pos < length:
        if in_block:
            end = line.find("*/", pos)
            if end == -1:
                out.append(" " * (length - pos))
                return "".join(out), True
            out.append(" " * (end + 2 - pos))
            pos = end + 2
            in_block = False
            continue

        char = line[pos]
        if quote is not None:
            if char == "\\" and pos + 1 < length:
                out.append(line[pos : pos + 2])
                pos += 2
                continue
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif line.startswith("//", pos):
            return "".join(out), False
        elif line.startswith("/*", pos):
            out.append("  ")
            pos += 2
            in_block = True
            continue
        out.append(char)
        pos += 1

    return "".join(out), in_block


def scan(content: str, file_path: str) -> tuple[dict[str, Definition], str | None]:
    """Extract top-level declarations and the package name from *content*.

    Returns ``(definitions, package_name)`` where *definitions* maps each
    declaration name to its :class:`Definition`.  A later duplicate name in
    the same file replaces the earlier one.
    """
    package_name = parse_package(content)
    definitions: dict[str, Definition] = {}
    in_block = False
    brace_level = 0

    for index, original in enumerate(content.splitlines()):
        text, in_block = strip_comments(original, in_block)
        stripped = text.strip()
        if not stripped:
            continue

        if brace_level == 0:
            for kind, pattern in _HEADER_RES:
                match = pattern.match(stripped)
                if match is None:
                    continue
                name = match.group(1)
                definitions[name] = Definition(
                    name=name,
                    kind=kind,
                    file_path=file_path,
                    line=index + 1,
                    column=len(text) - len(text.lstrip()),
                    package_name=package_name,
                )
                break

        brace_level += stripped.count("{") - stripped.count("}")
        # A stray '}' must not hide every following top-level header.
        brace_level = max(0, brace_level)

    return definitions, package_name
