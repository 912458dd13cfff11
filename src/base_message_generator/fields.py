"""Field introspection for declared types."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from base_message_generator.declaration import DeclarationKind, Field, ShapeError, TypeDeclaration


def extract_fields(declaration: TypeDeclaration) -> list[Field]:
    """List the named fields of a declaration.

    Args:
        declaration (TypeDeclaration): The declaration to inspect.

    Raises:
        ShapeError: If the declaration is not a plain record with named fields.

    Returns:
        list[Field]: The fields, in declaration order.
    """
    if declaration.kind is not DeclarationKind.RECORD:
        detail = f" ({declaration.reason})" if declaration.reason else ""
        raise ShapeError(
            f"'{declaration.name}' is a {declaration.kind.value} type, expected a record with named fields{detail}.",
            declaration.source,
            declaration.line,
        )

    return list(declaration.fields)


def _included(fields: Iterable[Field], excluded: Iterable[str]) -> list[Field]:
    excluded_names = set(excluded)
    return [f for f in fields if f.name not in excluded_names]


def field_args(fields: Sequence[Field], excluded: Iterable[str]) -> list[str]:
    """Build function parameters for all fields that are not excluded.

    E.g. a field `role` of type `str` becomes `role: str`.

    Args:
        fields (Sequence[Field]): The fields, in declaration order.
        excluded (Iterable[str]): Field names to leave out.

    Returns:
        list[str]: One parameter per remaining field, in the same order.
    """
    return [f"{f.name}: {f.type}" for f in _included(fields, excluded)]


def field_initializers(fields: Sequence[Field], excluded: Iterable[str]) -> list[str]:
    """Build keyword initializers that pass each parameter to the field of the same name.

    The order matches `field_args` for the same inputs.

    Args:
        fields (Sequence[Field]): The fields, in declaration order.
        excluded (Iterable[str]): Field names to leave out.

    Returns:
        list[str]: One `name=name` initializer per remaining field.
    """
    return [f"{f.name}={f.name}" for f in _included(fields, excluded)]


def field_names(fields: Sequence[Field], excluded: Iterable[str]) -> list[str]:
    """The names of all fields that are not excluded, for passing arguments positionally."""
    return [f.name for f in _included(fields, excluded)]
