"""Generated-code symbol helpers: classify an identifier and pick the lookup.

These functions only look at text an editor hands over (the identifier,
its hover description, the file it was defined in); they never touch the
index except through :func:`lookup_symbol`.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable

    from protojump.index import ProtoIndex
    from protojump.models import Definition

SymbolCategory = Literal["struct", "enum", "enum_value", "unknown"]

_FENCE_RE = re.compile(r"```\w*\n?")
_STRUCT_RES = (
    re.compile(r"type\s+\w+\s+struct"),
    re.compile(r"struct\s*{"),
)
_EXPORTED_RE = re.compile(r"^[A-Z][a-zA-Z0-9_]*$")
_ENUM_PART_RE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")


def is_exported_identifier(identifier: str) -> bool:
    """True for Go-exported names, the only ones generated types use."""
    return bool(_EXPORTED_RE.match(identifier))


def is_generated_file(file_path: str, suffixes: Iterable[str]) -> bool:
    """True if *file_path* ends with one of *suffixes* (case-insensitive)."""
    name = file_path.lower()
    return any(name.endswith(suffix.lower()) for suffix in suffixes)


def classify_hover(text: str, identifier: str) -> SymbolCategory:
    """Classify *identifier* from the hover text an editor shows for it.

    Expected phrasings:
      ``type Foo struct {...}``  -> struct
      ``type Status int32``      -> enum
      ``const Status_ACTIVE ...`` -> enum_value
    """
    clean = _FENCE_RE.sub("", text).strip()
    if any(pattern.search(clean) for pattern in _STRUCT_RES):
        return "struct"
    name = re.escape(identifier)
    if re.search(rf"type\s+{name}\s+\w*int\d*", clean):
        return "enum"
    if clean.startswith("const"):
        return "enum_value"
    return "unknown"


def classify_hovers(texts: Iterable[str], identifier: str) -> SymbolCategory:
    """First non-unknown category across several hover blocks."""
    for text in texts:
        category = classify_hover(text, identifier)
        if category != "unknown":
            return category
    return "unknown"


def parse_enum_identifier(identifier: str) -> tuple[str, str] | None:
    """Split a generated enumerant name at its first underscore.

    ``Status_ACTIVE`` -> ``("Status", "ACTIVE")``.  Returns None when either
    half does not look like a generated name.
    """
    enum_name, sep, value_name = identifier.partition("_")
    if not sep:
        return None
    if not _ENUM_PART_RE.match(enum_name) or not _EXPORTED_RE.match(value_name):
        return None
    return enum_name, value_name


def lookup_symbol(
    index: ProtoIndex,
    identifier: str,
    category: SymbolCategory = "unknown",
) -> Definition | None:
    """Resolve a generated-code *identifier* to its schema declaration."""
    if category == "enum_value":
        parts = parse_enum_identifier(identifier)
        if parts is not None:
            return index.find_enum_value_definition(*parts)
    return index.find_definition(identifier)
