"""Derive the `BaseMessage` implementation for a declared message type.

A derivation turns one `TypeDeclaration` into one `GeneratedCode`. It is a pure function of the declaration:
nothing is cached between derivations, so they can run in any order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from base_message_generator import helper
from base_message_generator.declaration import Field, ShapeError, TypeDeclaration
from base_message_generator.fields import extract_fields, field_args, field_initializers, field_names
from base_message_generator.message_types import (
    BASE_FIELD_NAME,
    BASE_FIELDS_TYPE_NAME,
    CONSTRUCTOR_PARAMETER_NAMES,
    EXCLUDED_FIELD_NAMES,
    GENERATED_MEMBER_NAMES,
    MESSAGE_SUFFIX,
    MESSAGE_TYPE_ENUM_NAME,
    ROLE_FIELD_NAME,
)
from base_message_generator.methods import implement_base_getters, implement_base_setters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WithRole:
    """The type stores its own role in the given field."""

    field: Field


@dataclass(frozen=True)
class WithoutRole:
    """The type has no role field; the role is the string form of its message type."""

    category: str


RoleShape = WithRole | WithoutRole


@dataclass
class GeneratedCode:
    """The members generated for one message type, in emission order."""

    type_name: str
    constructors: list[str] = field(default_factory=list)
    mutators: list[str] = field(default_factory=list)
    interface: list[str] = field(default_factory=list)

    def lines(self) -> list[str]:
        """All generated lines: constructors, then mutators, then the interface implementation."""
        return helper.separate(self.constructors, self.mutators, self.interface)


def has_role_field(declaration: TypeDeclaration) -> bool:
    """Whether the declaration has a field that is named exactly `role`.

    Declarations that are not plain records have no role field. Their shape error is reported by whoever
    needs the field list.
    """
    try:
        fields = extract_fields(declaration)
    except ShapeError:
        return False

    return any(f.name == ROLE_FIELD_NAME for f in fields)


def detect_role_shape(declaration: TypeDeclaration, category: str) -> RoleShape:
    """Resolve how the `role` accessor of a type is implemented.

    Args:
        declaration (TypeDeclaration): The declared type.
        category (str): The category name of the type, see `extract_message_type_name`.

    Returns:
        RoleShape: `WithRole` holding the role field if there is one, `WithoutRole` otherwise.
    """
    if has_role_field(declaration):
        return WithRole(next(f for f in declaration.fields if f.name == ROLE_FIELD_NAME))

    return WithoutRole(category)


def extract_message_type_name(type_name: str) -> str:
    """Derive the category of a message type from its name.

    E.g. `HumanMessage` becomes `Human`. Names without the `Message` suffix are returned unchanged,
    so `FooBarBaz` stays `FooBarBaz`.

    Args:
        type_name (str): The name of the declared type.

    Returns:
        str: The name of the matching `MessageType` member.
    """
    return type_name.removesuffix(MESSAGE_SUFFIX)


def _message_type_member(category: str) -> str:
    return f"{MESSAGE_TYPE_ENUM_NAME}.{category}"


def _base_initializer(category: str) -> str:
    base_fields = helper.new_call(
        BASE_FIELDS_TYPE_NAME,
        [
            "content=content",
            "example=example",
            f"message_type={_message_type_member(category)}",
            "additional_kwargs={}",
            "response_metadata={}",
            "id=None",
            "name=None",
        ],
    )
    return "\n".join([f"{BASE_FIELD_NAME}={base_fields[0]}", *base_fields[1:]])


def implement_struct_new(declaration: TypeDeclaration, category: str, role_shape: RoleShape) -> list[str]:
    """Generate the constructor pair of a message type.

    `new` takes the content and every extra field, and delegates to `new_with_example` with `example=False`.
    `new_with_example` builds the base record first, then passes the extra fields in declaration order.

    A `role` field is an ordinary extra field here. Without one, the role is derived from the base record's
    message type (see `implement_base_message`), so it needs no initializer.

    Args:
        declaration (TypeDeclaration): The declared type.
        category (str): The category name, which selects the `MessageType` member.
        role_shape (RoleShape): How the type implements its role.

    Raises:
        ShapeError: If the declaration is not a plain record with named fields.

    Returns:
        list[str]: The two classmethods.
    """
    fields = extract_fields(declaration)
    args = field_args(fields, EXCLUDED_FIELD_NAMES)
    initializers = field_initializers(fields, EXCLUDED_FIELD_NAMES)

    if isinstance(role_shape, WithRole):
        logger.debug(f"'{declaration.name}' takes its role as the '{role_shape.field.name}' parameter.")

    passed = helper.join_parameters(["content", "False", *field_names(fields, EXCLUDED_FIELD_NAMES)])
    new_impl = helper.new_classmethod(
        "new", ["content: str", *args], "Self", [f"return cls.new_with_example({passed})"]
    )

    construction = helper.new_call("cls", [_base_initializer(category), *initializers])
    construction[0] = f"return {construction[0]}"

    new_with_example_impl = helper.new_classmethod(
        "new_with_example",
        ["content: str", "example: bool", *args],
        "Self",
        construction,
    )

    return helper.separate(new_impl, new_with_example_impl)


def implement_role(role_shape: RoleShape) -> list[str]:
    """Generate the `role` accessor for the given shape.

    With a role field, the stored dataclass field is the accessor and nothing is generated.
    """
    if isinstance(role_shape, WithRole):
        return []

    return helper.new_property(ROLE_FIELD_NAME, "str", f"str(self.{BASE_FIELD_NAME}.message_type)")


def implement_base_message(declaration: TypeDeclaration, role_shape: RoleShape) -> list[str]:
    """Generate the `BaseMessage` members of a type: the base record getters and the role accessor.

    Args:
        declaration (TypeDeclaration): The declared type.
        role_shape (RoleShape): How the type implements its role.

    Returns:
        list[str]: The interface members.
    """
    logger.debug(f"Implementing BaseMessage for '{declaration.name}' as {type(role_shape).__name__}.")
    return helper.separate(implement_base_getters(), implement_role(role_shape))


def _check_fields(declaration: TypeDeclaration, fields: list[Field]) -> None:
    names = [f.name for f in fields]

    if BASE_FIELD_NAME not in names:
        raise ShapeError(
            f"'{declaration.name}' has no '{BASE_FIELD_NAME}' field of type {BASE_FIELDS_TYPE_NAME}.",
            declaration.source,
            declaration.line,
        )

    conflicts = sorted(GENERATED_MEMBER_NAMES.intersection(names))
    if conflicts:
        raise ShapeError(
            f"Fields of '{declaration.name}' conflict with generated members: {', '.join(conflicts)}.",
            declaration.source,
            declaration.line,
        )

    shadowed = sorted(CONSTRUCTOR_PARAMETER_NAMES.difference(GENERATED_MEMBER_NAMES).intersection(names))
    if shadowed:
        raise ShapeError(
            f"Fields of '{declaration.name}' repeat constructor parameters: {', '.join(shadowed)}.",
            declaration.source,
            declaration.line,
        )


def derive_message(declaration: TypeDeclaration) -> GeneratedCode:
    """Generate constructors, mutators and the `BaseMessage` implementation for a declared type.

    Args:
        declaration (TypeDeclaration): The declared type.

    Raises:
        ShapeError: If the declaration is not a plain record with named fields, has no base field, has fields
            that conflict with generated members or constructor parameters, or has no category name.

    Returns:
        GeneratedCode: The generated members.
    """
    fields = extract_fields(declaration)
    _check_fields(declaration, fields)

    category = extract_message_type_name(declaration.name)
    if not category:
        raise ShapeError(
            f"Cannot derive a message type from '{declaration.name}': the name is only the '{MESSAGE_SUFFIX}' suffix.",
            declaration.source,
            declaration.line,
        )
    if category == declaration.name:
        logger.warning(
            f"'{declaration.name}' does not end with '{MESSAGE_SUFFIX}', using {_message_type_member(category)}."
        )

    role_shape = detect_role_shape(declaration, category)

    return GeneratedCode(
        type_name=declaration.name,
        constructors=implement_struct_new(declaration, category, role_shape),
        mutators=implement_base_setters(),
        interface=implement_base_message(declaration, role_shape),
    )
