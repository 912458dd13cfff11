"""Accessors and mutators for the base record that every message type carries."""

from __future__ import annotations

from base_message_generator import helper

# (accessor name, return type, expression on self)
BASE_GETTERS: tuple[tuple[str, str, str], ...] = (
    ("content", "str", "self.base.content"),
    ("message_type", "MessageType", "self.base.message_type"),
    ("is_example", "bool", "self.base.example"),
    ("additional_kwargs", "dict[str, str]", "self.base.additional_kwargs"),
    ("response_metadata", "dict[str, str]", "self.base.response_metadata"),
    ("id", "str | None", "self.base.id"),
    ("name", "str | None", "self.base.name"),
)

# (mutator name, parameter, assignment target, assigned expression)
BASE_SETTERS: tuple[tuple[str, str, str, str], ...] = (
    ("set_content", "new_content: str", "self.base.content", "new_content"),
    ("set_example", "example: bool", "self.base.example", "example"),
    ("set_id", "id: str | None", "self.base.id", "id"),
    ("set_name", "name: str | None", "self.base.name", "name"),
)


def implement_base_getters() -> list[str]:
    """Generate the read-only properties that pass through to the base record.

    Returns:
        list[str]: The property definitions, separated by empty lines.
    """
    return helper.separate(
        *(helper.new_property(name, return_type, expression) for name, return_type, expression in BASE_GETTERS)
    )


def implement_base_setters() -> list[str]:
    """Generate the mutators that write through to the base record.

    Returns:
        list[str]: The method definitions, separated by empty lines.
    """
    return helper.separate(
        *(
            helper.new_method(name, [parameter], None, [f"{target} = {value}"])
            for name, parameter, target, value in BASE_SETTERS
        )
    )
