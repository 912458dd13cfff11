"""The shared message interface that generated message types implement.

Generated modules import `BaseMessageFields` and `MessageType` from here, and their classes conform to the
`BaseMessage` protocol.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, TypeVar, override, runtime_checkable

T = TypeVar("T")


class MessageType(Enum):
    """The kinds of messages. Member names are the categories derived from message type names."""

    System = "system"
    Human = "human"
    AI = "ai"
    Tool = "tool"
    Chat = "chat"
    Function = "function"

    def as_str(self) -> str:
        """The role string of this kind, e.g. `System`."""
        return self.name

    @override
    def __str__(self) -> str:
        return self.as_str()


@dataclass
class BaseMessageFields:
    """The fields that every message type carries in its `base` field."""

    content: str
    example: bool
    message_type: MessageType
    additional_kwargs: dict[str, str] = field(default_factory=dict)
    response_metadata: dict[str, str] = field(default_factory=dict)
    id: str | None = None
    name: str | None = None


@runtime_checkable
class BaseMessage(Protocol):
    """The interface of all message types."""

    @property
    def content(self) -> str: ...

    @property
    def message_type(self) -> MessageType: ...

    @property
    def is_example(self) -> bool: ...

    @property
    def additional_kwargs(self) -> dict[str, str]: ...

    @property
    def response_metadata(self) -> dict[str, str]: ...

    @property
    def id(self) -> str | None: ...

    @property
    def name(self) -> str | None: ...

    @property
    def role(self) -> str: ...


def derive_base_message(cls: type[T]) -> type[T]:
    """Mark a record class in a declaration file for derivation. The class is returned unchanged."""
    return cls


def define_message(message_type: MessageType | str) -> None:
    """Mark a base-only message type in a declaration file. Only the generator reads it."""
    return None
