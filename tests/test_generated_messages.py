"""Runtime behavior of generated message types."""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import datetime

import pytest

from base_message_generator.messages import BaseMessage, BaseMessageFields, MessageType
from conftest import generate_source


class TestConstructors:
    """Tests for `new` and `new_with_example`."""

    def test_new_is_not_an_example(self, chat_module):
        message = chat_module.HumanMessage.new("hello", "user")

        assert message == chat_module.HumanMessage.new_with_example("hello", False, "user")
        assert message.is_example is False

    def test_new_with_example(self, chat_module):
        message = chat_module.HumanMessage.new_with_example("hello", True, "user")

        assert message.is_example is True
        assert message.base == BaseMessageFields(
            content="hello",
            example=True,
            message_type=MessageType.Human,
            additional_kwargs={},
            response_metadata={},
            id=None,
            name=None,
        )

    def test_extra_fields_in_declaration_order(self, chat_module):
        when = datetime(2024, 1, 2, 3, 4, 5)

        message = chat_module.ToolMessage.new("done", "call-1", when)

        assert message.tool_call_id == "call-1"
        assert message.created_at == when
        assert message.message_type is MessageType.Tool

    def test_generated_types_are_dataclasses(self, chat_module):
        assert is_dataclass(chat_module.ToolMessage)
        assert [f.name for f in fields(chat_module.ToolMessage)] == ["base", "tool_call_id", "created_at"]

    def test_base_records_are_not_shared(self, chat_module):
        first = chat_module.SystemMessage.new("a")
        second = chat_module.SystemMessage.new("b")

        first.additional_kwargs["key"] = "value"

        assert second.additional_kwargs == {}


class TestRole:
    """Tests for the `role` accessor."""

    def test_stored_role(self, chat_module):
        assert chat_module.HumanMessage.new("hello", "user").role == "user"

    def test_role_from_message_type(self, chat_module):
        assert chat_module.ToolMessage.new("done", "call-1", None).role == "Tool"

    def test_declarative_types(self, chat_module):
        assert chat_module.SystemMessage.new("be brief").role == "System"
        assert chat_module.AIMessage.new("sure").role == "AI"

    def test_without_suffix(self, load_generated):
        module = load_generated(
            generate_source(
                "@derive_base_message\nclass Chat:\n    base: BaseMessageFields\n    topic: str\n",
            )
        )

        message = module.Chat.new("hi", "weather")

        assert message.message_type is MessageType.Chat
        assert message.role == "Chat"


class TestInterface:
    """Tests for the `BaseMessage` members."""

    @pytest.mark.parametrize(
        ("type_name", "extra_args"),
        [
            ("HumanMessage", ("user",)),
            ("ToolMessage", ("call-1", None)),
            ("SystemMessage", ()),
            ("AIMessage", ()),
        ],
    )
    def test_conforms_to_base_message(self, chat_module, type_name: str, extra_args: tuple):
        message = getattr(chat_module, type_name).new("x", *extra_args)

        assert isinstance(message, BaseMessage)

    def test_getters(self, chat_module):
        message = chat_module.SystemMessage.new("be brief")

        assert message.content == "be brief"
        assert message.message_type is MessageType.System
        assert message.additional_kwargs == {}
        assert message.response_metadata == {}
        assert message.id is None
        assert message.name is None

    def test_setters_write_through(self, chat_module):
        message = chat_module.HumanMessage.new("hello", "user")

        message.set_content("bye")
        message.set_example(True)
        message.set_id("msg-1")
        message.set_name("alice")

        assert (message.content, message.is_example, message.id, message.name) == ("bye", True, "msg-1", "alice")
        assert message.base.content == "bye"
        assert message.role == "user"

    def test_setters_keep_role(self, chat_module):
        message = chat_module.SystemMessage.new("x")
        message.set_name("bot")

        assert message.role == "System"
