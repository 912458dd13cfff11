"""The intermediate representation that sits between the declaration front-ends and code generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import override


class DerivationError(Exception):
    """Base class for failures while turning a declaration into generated code.

    Carries the location of the offending declaration, so that the error reads like a build diagnostic.
    """

    def __init__(self, message: str, source: str | None = None, line: int | None = None):
        """Initialize the error.

        Args:
            message (str): What went wrong.
            source (str | None): The file that holds the declaration, if known.
            line (int | None): The line of the declaration within `source`, if known.
        """
        super().__init__(message)
        self.message = message
        self.source = source
        self.line = line

    @override
    def __str__(self) -> str:
        if self.source is None:
            return self.message

        if self.line is None:
            return f"{self.source}: {self.message}"

        return f"{self.source}:{self.line}: {self.message}"


class ShapeError(DerivationError):
    """Raised when a declaration is not a plain record with named fields."""

    pass


class MalformedDeclarationError(DerivationError):
    """Raised when a declaration source cannot be parsed at all."""

    pass


class DeclarationKind(Enum):
    """The structural shape of a declared type."""

    RECORD = "record"
    TUPLE = "tuple"
    UNIT = "unit"
    ENUM = "enum"
    UNION = "union"
    OTHER = "other"


@dataclass(frozen=True)
class Field:
    """A named field. The type is kept as annotation text and is never interpreted."""

    name: str
    type: str


@dataclass(frozen=True)
class TypeDeclaration:
    """A declared type: its name, its fields in declaration order and its shape.

    For shapes other than `DeclarationKind.RECORD`, `reason` describes why the declaration is not a plain record.
    """

    name: str
    fields: tuple[Field, ...] = ()
    kind: DeclarationKind = DeclarationKind.RECORD
    reason: str = ""
    source: str | None = None
    line: int | None = None

    @property
    def field_names(self) -> list[str]:
        """The names of all fields, in declaration order."""
        return [f.name for f in self.fields]


@dataclass(frozen=True)
class MessageDefinition:
    """A request for the declarative path: a message type that has nothing but the base record."""

    category: str
    source: str | None = None
    line: int | None = None


@dataclass
class DeclarationModule:
    """Everything that one declaration file contributes to its generated module."""

    path: str
    imports: list[str] = field(default_factory=list)
    entries: list[TypeDeclaration | MessageDefinition] = field(default_factory=list)

    @property
    def declarations(self) -> list[TypeDeclaration]:
        """The entries that go through the derivation driver."""
        return [entry for entry in self.entries if isinstance(entry, TypeDeclaration)]

    @property
    def definitions(self) -> list[MessageDefinition]:
        """The entries that go through the declarative path."""
        return [entry for entry in self.entries if isinstance(entry, MessageDefinition)]
