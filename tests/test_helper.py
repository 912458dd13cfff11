"""Unit tests for the code building helpers."""

from __future__ import annotations

import pytest

from base_message_generator import helper


class TestNames:
    """Tests for name handling."""

    @pytest.mark.parametrize(("name", "expected"), [("lambda", "lambda_"), ("from", "from_"), ("role", "role")])
    def test_sanitize_name(self, name: str, expected: str):
        assert helper.sanitize_name(name) == expected

    @pytest.mark.parametrize(
        ("original", "expected"),
        [
            ("chat_messages.py", "chat_messages_derived"),
            ("chat.capnp", "chat_derived"),
            ("chat-schema.capnp", "chat_schema_derived"),
            ("notes", "notes_derived"),
        ],
    )
    def test_replace_declaration_suffix(self, original: str, expected: str):
        assert helper.replace_declaration_suffix(original) == expected


class TestCodeBuilders:
    """Tests for the line builders."""

    def test_join_parameters_skips_empty(self):
        assert helper.join_parameters(["cls", "", "content: str"]) == "cls, content: str"
        assert helper.join_parameters(None) == ""

    def test_indent_keeps_empty_lines_empty(self):
        assert helper.indent(["a", "", "b"], 2) == ["        a", "", "        b"]

    def test_class_declaration(self):
        assert helper.new_class_declaration("HumanMessage") == "class HumanMessage:"
        assert helper.new_class_declaration("HumanMessage", ["Base"]) == "class HumanMessage(Base):"

    def test_decorator(self):
        assert helper.new_decorator("dataclass") == "@dataclass"
        assert helper.new_decorator("dataclass", ["frozen=True"]) == "@dataclass(frozen=True)"

    def test_function_defaults(self):
        assert helper.new_function("f") == ["def f() -> None:", "    ..."]

    def test_classmethod(self):
        assert helper.new_classmethod("new", ["content: str"], "Self", ["return cls()"]) == [
            "@classmethod",
            "def new(cls, content: str) -> Self:",
            "    return cls()",
        ]

    def test_property(self):
        assert helper.new_property("content", "str", "self.base.content") == [
            "@property",
            "def content(self) -> str:",
            "    return self.base.content",
        ]

    def test_call_with_nested_argument(self):
        inner = "\n".join(helper.new_call("Inner", ["x=1"]))

        assert helper.new_call("cls", [f"inner={inner}", "y=2"]) == [
            "cls(",
            "    inner=Inner(",
            "        x=1,",
            "    ),",
            "    y=2,",
            ")",
        ]

    def test_call_without_arguments(self):
        assert helper.new_call("cls", []) == ["cls(", ")"]

    def test_separate(self):
        assert helper.separate(["a"], [], ["b", "c"]) == ["a", "", "b", "c"]
        assert helper.separate([], []) == []
