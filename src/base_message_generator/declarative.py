"""Template-based generation of message types that carry nothing but the base record.

`define_message("System")` produces the same class that the derivation driver renders for

    @derive_base_message
    class SystemMessage:
        base: BaseMessageFields
"""

from __future__ import annotations

from base_message_generator.declaration import MalformedDeclarationError
from base_message_generator.message_types import MESSAGE_SUFFIX, MESSAGE_TYPE_ENUM_NAME

MESSAGE_TEMPLATE = """\
@dataclass
class {type_name}:
    base: BaseMessageFields

    @classmethod
    def new(cls, content: str) -> Self:
        return cls.new_with_example(content, False)

    @classmethod
    def new_with_example(cls, content: str, example: bool) -> Self:
        return cls(
            base=BaseMessageFields(
                content=content,
                example=example,
                message_type=MessageType.{category},
                additional_kwargs={{}},
                response_metadata={{}},
                id=None,
                name=None,
            ),
        )

    def set_content(self, new_content: str) -> None:
        self.base.content = new_content

    def set_example(self, example: bool) -> None:
        self.base.example = example

    def set_id(self, id: str | None) -> None:
        self.base.id = id

    def set_name(self, name: str | None) -> None:
        self.base.name = name

    @property
    def content(self) -> str:
        return self.base.content

    @property
    def message_type(self) -> MessageType:
        return self.base.message_type

    @property
    def is_example(self) -> bool:
        return self.base.example

    @property
    def additional_kwargs(self) -> dict[str, str]:
        return self.base.additional_kwargs

    @property
    def response_metadata(self) -> dict[str, str]:
        return self.base.response_metadata

    @property
    def id(self) -> str | None:
        return self.base.id

    @property
    def name(self) -> str | None:
        return self.base.name

    @property
    def role(self) -> str:
        return str(self.base.message_type)
"""


def normalize_category(message_type: str) -> str:
    """Accept either a bare category (`System`) or a qualified member (`MessageType.System`).

    Raises:
        MalformedDeclarationError: If what remains is not a valid identifier.
    """
    category = message_type.strip().removeprefix(f"{MESSAGE_TYPE_ENUM_NAME}.")
    if not category.isidentifier():
        raise MalformedDeclarationError(f"'{message_type}' does not name a {MESSAGE_TYPE_ENUM_NAME} member.")
    return category


def define_message(message_type: str) -> str:
    """Generate the complete class `<category>Message` for a message type without extra fields.

    Args:
        message_type (str): The category, e.g. `System` or `MessageType.System`.

    Raises:
        MalformedDeclarationError: If `message_type` does not name a `MessageType` member.

    Returns:
        str: The source code of the class.
    """
    category = normalize_category(message_type)
    return MESSAGE_TEMPLATE.format(type_name=f"{category}{MESSAGE_SUFFIX}", category=category)
