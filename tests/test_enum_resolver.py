"""Tests for protojump.enum_resolver — candidate spellings and body scanning."""

from __future__ import annotations

from protojump.enum_resolver import (
    enum_value_candidates,
    find_enum_value,
    lower_snake,
    upper_snake,
)
from protojump.models import Definition
from protojump.scanner import scan

STATUS_PROTO = """\
package demo;

enum Status {
  STATUS_UNSPECIFIED = 0;
  // STATUS_ACTIVE = 9;
  STATUS_ACTIVE = 1;
  STATUS_INACTIVE = 2;
}

enum Other {
  ACTIVE = 0;
}
"""


def _enum(content: str, name: str) -> Definition:
    definitions, _ = scan(content, "/p/status.proto")
    return definitions[name]


class TestCaseTransforms:
    def test_upper_snake(self) -> None:
        assert upper_snake("ActvStateStart") == "ACTV_STATE_START"

    def test_lower_snake(self) -> None:
        assert lower_snake("ActvStateStart") == "actv_state_start"

    def test_upper_snake_of_lowercase(self) -> None:
        assert upper_snake("active") == "ACTIVE"


class TestCandidates:
    def test_order_and_dedup(self) -> None:
        candidates = enum_value_candidates("ActvState")
        assert candidates == ["ActvState", "ACTV_STATE", "ACTVSTATE", "actvstate", "actv_state"]

    def test_duplicates_removed(self) -> None:
        candidates = enum_value_candidates("active")
        assert candidates == ["active", "ACTIVE"]

    def test_enum_prefix_candidates_last(self) -> None:
        candidates = enum_value_candidates("Active", "Status")
        assert candidates == ["Active", "ACTIVE", "active", "STATUS_ACTIVE"]

    def test_multiword_enum_prefix(self) -> None:
        assert "ORDER_STATE_PLACED" in enum_value_candidates("Placed", "OrderState")


class TestFindEnumValue:
    def test_exact_name(self) -> None:
        status = _enum(STATUS_PROTO, "Status")
        found = find_enum_value(STATUS_PROTO, status, "STATUS_INACTIVE")
        assert found.line == 7
        assert found.column == 2
        assert found.name == "STATUS_INACTIVE"
        assert found.kind == "enum"
        assert found.file_path == "/p/status.proto"
        assert found.package_name == "demo"

    def test_camel_case_value(self) -> None:
        """``StatusActive`` reaches ``STATUS_ACTIVE`` through upper snake case."""
        status = _enum(STATUS_PROTO, "Status")
        found = find_enum_value(STATUS_PROTO, status, "StatusActive")
        assert found.line == 6

    def test_commented_value_skipped(self) -> None:
        status = _enum(STATUS_PROTO, "Status")
        found = find_enum_value(STATUS_PROTO, status, "STATUS_ACTIVE")
        assert found.line == 6

    def test_prefix_stripped_value(self) -> None:
        """``Active`` in enum ``Status`` resolves to ``STATUS_ACTIVE``."""
        status = _enum(STATUS_PROTO, "Status")
        found = find_enum_value(STATUS_PROTO, status, "Active")
        assert found.line == 6
        assert found.column == 2

    def test_uppercase_value(self) -> None:
        status = _enum(STATUS_PROTO, "Status")
        assert find_enum_value(STATUS_PROTO, status, "ACTIVE").line == 6

    def test_search_limited_to_enum_body(self) -> None:
        """A value declared in a later enum is not picked up."""
        other = _enum(STATUS_PROTO, "Other")
        assert find_enum_value(STATUS_PROTO, other, "Active").line == 11

        status = _enum(STATUS_PROTO, "Status")
        found = find_enum_value(STATUS_PROTO, status, "Unspecified")
        assert found.line == 4

    def test_unknown_value_falls_back_to_enum(self) -> None:
        status = _enum(STATUS_PROTO, "Status")
        assert find_enum_value(STATUS_PROTO, status, "Missing") == status

    def test_inline_body(self) -> None:
        content = "enum Status { STATUS_ACTIVE = 0; STATUS_INACTIVE = 1; }\n"
        status = _enum(content, "Status")
        found = find_enum_value(content, status, "Inactive")
        assert found.line == 1
        assert found.column == content.index("STATUS_INACTIVE")

    def test_brace_on_following_line(self) -> None:
        content = "enum Late\n{\n  LATE_ONE = 0;\n}\n"
        late = Definition(name="Late", kind="enum", file_path="x.proto", line=1, column=0)
        found = find_enum_value(content, late, "One")
        assert found.line == 3

    def test_nested_braces_in_body(self) -> None:
        content = (
            "enum Opt {\n"
            "  OPT_A = 0 [(custom) = {a: 1}];\n"
            "  OPT_B = 1;\n"
            "}\n"
            "enum Next {\n"
            "  OPT_C = 0;\n"
            "}\n"
        )
        opt = _enum(content, "Opt")
        assert find_enum_value(content, opt, "B").line == 3
        assert find_enum_value(content, opt, "C") == opt

    def test_stale_header_line_falls_back(self) -> None:
        """A header line beyond the file end yields the enum itself."""
        ghost = Definition(name="Status", kind="enum", file_path="x.proto", line=99, column=0)
        assert find_enum_value("enum Status {\n}\n", ghost, "A") == ghost

    def test_negative_value(self) -> None:
        content = "enum Sign {\n  SIGN_NEG = -1;\n}\n"
        sign = _enum(content, "Sign")
        assert find_enum_value(content, sign, "Neg").line == 2

    def test_case_insensitive_match_column(self) -> None:
        content = "enum E {\n    Foo_Bar = 3;\n}\n"
        e = _enum(content, "E")
        found = find_enum_value(content, e, "FOO_BAR")
        assert found.line == 2
        assert found.column == 4
