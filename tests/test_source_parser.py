"""Tests for reading declarations from Python source."""

from __future__ import annotations

import textwrap

import pytest

from base_message_generator.declaration import (
    DeclarationKind,
    Field,
    MalformedDeclarationError,
    MessageDefinition,
    TypeDeclaration,
)
from base_message_generator.source_parser import load_declarations, parse_declarations
from conftest import CHAT_MESSAGES_PATH


def _parse(text: str):
    return parse_declarations(textwrap.dedent(text), "test_messages.py")


def _single_declaration(text: str) -> TypeDeclaration:
    module = _parse(text)
    assert len(module.declarations) == 1
    return module.declarations[0]


class TestClassDeclarations:
    """Tests for classes marked with `derive_base_message`."""

    def test_record(self):
        declaration = _single_declaration("""
            @derive_base_message
            class HumanMessage:
                role: str
                base: BaseMessageFields
        """)

        assert declaration.name == "HumanMessage"
        assert declaration.kind is DeclarationKind.RECORD
        assert declaration.fields == (Field("role", "str"), Field("base", "BaseMessageFields"))
        assert declaration.source == "test_messages.py"
        assert declaration.line == 3

    def test_annotations_are_kept_as_text(self):
        declaration = _single_declaration("""
            @derive_base_message
            class ToolMessage:
                base: BaseMessageFields
                calls: dict[str, list[int | None]]
                when: 'datetime'
        """)

        assert declaration.fields[1] == Field("calls", "dict[str, list[int | None]]")
        assert declaration.fields[2] == Field("when", "'datetime'")

    def test_qualified_decorator(self):
        declaration = _single_declaration("""
            @messages.derive_base_message
            class HumanMessage:
                base: BaseMessageFields
        """)

        assert declaration.kind is DeclarationKind.RECORD

    def test_object_base_is_a_record(self):
        declaration = _single_declaration("""
            @derive_base_message
            class HumanMessage(object):
                base: BaseMessageFields
        """)

        assert declaration.kind is DeclarationKind.RECORD

    def test_docstring_and_pass_are_ignored(self):
        declaration = _single_declaration('''
            @derive_base_message
            class HumanMessage:
                """A message from the user."""

                base: BaseMessageFields
                pass
        ''')

        assert declaration.field_names == ["base"]

    def test_unmarked_classes_are_ignored(self):
        module = _parse("""
            class HumanMessage:
                base: BaseMessageFields

            @dataclass
            class Other:
                value: int
        """)

        assert module.entries == []

    @pytest.mark.parametrize(
        ("text", "kind", "reason"),
        [
            (
                """
                @derive_base_message
                class PairMessage(tuple):
                    pass
                """,
                DeclarationKind.TUPLE,
                "tuple",
            ),
            (
                """
                @derive_base_message
                class PointMessage(NamedTuple):
                    base: BaseMessageFields
                """,
                DeclarationKind.TUPLE,
                "tuple",
            ),
            (
                """
                @derive_base_message
                class ColorMessage(Enum):
                    RED = 1
                """,
                DeclarationKind.ENUM,
                "enum",
            ),
            (
                """
                @derive_base_message
                class EmptyMessage:
                    pass
                """,
                DeclarationKind.UNIT,
                "no fields",
            ),
            (
                """
                @derive_base_message
                class DefaultMessage:
                    base: BaseMessageFields
                    role: str = "user"
                """,
                DeclarationKind.OTHER,
                "default value",
            ),
            (
                """
                @derive_base_message
                class TwiceMessage:
                    base: BaseMessageFields
                    base: BaseMessageFields
                """,
                DeclarationKind.OTHER,
                "declared twice",
            ),
            (
                """
                @derive_base_message
                class MethodMessage:
                    base: BaseMessageFields

                    def helper(self):
                        return 1
                """,
                DeclarationKind.OTHER,
                "not a field declaration",
            ),
            (
                """
                @derive_base_message
                class ReplyMessage(ChatMessage):
                    base: BaseMessageFields
                """,
                DeclarationKind.OTHER,
                "derives from ChatMessage",
            ),
            (
                """
                @derive_base_message
                class CountedMessage:
                    base: BaseMessageFields
                    instances: ClassVar[int]
                """,
                DeclarationKind.OTHER,
                "'instances' is not an instance field",
            ),
            (
                """
                @derive_base_message
                class CountedMessage:
                    base: BaseMessageFields
                    instances: typing.ClassVar[int]
                """,
                DeclarationKind.OTHER,
                "not an instance field",
            ),
        ],
    )
    def test_non_record_shapes(self, text: str, kind: DeclarationKind, reason: str):
        declaration = _single_declaration(text)

        assert declaration.kind is kind
        assert reason in declaration.reason
        assert declaration.fields == ()


class TestMessageDefinitions:
    """Tests for top-level `define_message` calls."""

    @pytest.mark.parametrize("argument", ['"System"', "MessageType.System", "'MessageType.System'"])
    def test_argument_spellings(self, argument: str):
        module = _parse(f"define_message({argument})\n")

        assert module.definitions == [MessageDefinition("System", "test_messages.py", 1)]

    def test_qualified_call(self):
        module = _parse("messages.define_message('AI')\n")
        assert module.definitions[0].category == "AI"

    @pytest.mark.parametrize("call", ["define_message()", "define_message('A', 'B')", "define_message(t='System')"])
    def test_wrong_arguments(self, call: str):
        with pytest.raises(MalformedDeclarationError, match="exactly one message type"):
            _parse(f"\n{call}\n")

    def test_invalid_category_reports_line(self):
        with pytest.raises(MalformedDeclarationError) as excinfo:
            _parse("\n\ndefine_message('no such type')\n")

        assert excinfo.value.line == 3
        assert str(excinfo.value).startswith("test_messages.py:3: ")

    def test_other_calls_are_ignored(self):
        assert _parse("print('System')\n").entries == []


class TestModule:
    """Tests for whole declaration files."""

    def test_entries_keep_source_order(self):
        module = _parse("""
            define_message("System")

            @derive_base_message
            class HumanMessage:
                base: BaseMessageFields

            define_message("AI")
        """)

        assert [type(entry) for entry in module.entries] == [MessageDefinition, TypeDeclaration, MessageDefinition]

    def test_imports_are_carried_over(self):
        module = _parse("""
            from __future__ import annotations

            import uuid
            from datetime import datetime

            from base_message_generator.messages import BaseMessageFields, derive_base_message
        """)

        assert module.imports == ["import uuid", "from datetime import datetime"]

    def test_syntax_error(self):
        with pytest.raises(MalformedDeclarationError, match="invalid syntax") as excinfo:
            _parse("\n\nclass Broken(:\n")

        assert excinfo.value.source == "test_messages.py"
        assert excinfo.value.line == 3

    def test_load_declarations(self):
        module = load_declarations(CHAT_MESSAGES_PATH)

        assert module.path == str(CHAT_MESSAGES_PATH)
        assert [d.name for d in module.declarations] == ["HumanMessage", "ToolMessage"]
        assert [d.category for d in module.definitions] == ["System", "AI"]
        assert module.imports == ["from datetime import datetime"]
