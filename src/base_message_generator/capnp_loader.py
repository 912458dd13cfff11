"""Read message declarations from *.capnp schemas.

A schema marks its message structs with an annotation named `deriveBaseMessage`:

    @0xd4f2a3b1c0e9f876;

    annotation deriveBaseMessage(*) :Void;

    struct BaseMessageFields {}

    struct HumanMessage $deriveBaseMessage {
        role @0 :Text;
        base @1 :BaseMessageFields;
    }

Note: This loader requires pycapnp >= 2.0.0.
"""

from __future__ import annotations

import logging
from pathlib import Path

import capnp
from capnp.lib.capnp import _DynamicStructReader, _ParsedSchema

from base_message_generator import helper
from base_message_generator.declaration import (
    DeclarationKind,
    DeclarationModule,
    Field,
    MalformedDeclarationError,
    TypeDeclaration,
)
from base_message_generator.message_types import (
    CAPNP_TYPE_TO_PYTHON,
    DERIVE_ANNOTATION_NAME,
    CapnpElementType,
    CapnpFieldType,
)

if hasattr(capnp, "remove_import_hook"):
    capnp.remove_import_hook()

logger = logging.getLogger(__name__)

# Python annotation for types that have no counterpart in the generated module.
FALLBACK_TYPE = "object"


def get_display_name(schema: _ParsedSchema) -> str:
    """Extract the display name from a schema, without the file prefix.

    Args:
        schema (_ParsedSchema): The schema to get the display name from.

    Returns:
        str: The display name of the schema.
    """
    return schema.node.displayName[schema.node.displayNamePrefixLength :]


def get_type_name(type_reader: _DynamicStructReader, names_by_id: dict[int, str]) -> str:
    """Translate a capnp type into a Python annotation.

    Args:
        type_reader (_DynamicStructReader): The type reader of a field slot.
        names_by_id (dict[int, str]): Names of the top-level nodes of the schema, by node id.

    Returns:
        str: The annotation text.
    """
    try:
        return CAPNP_TYPE_TO_PYTHON[type_reader.which()]

    except KeyError:
        pass

    type_reader_type = type_reader.which()

    if type_reader_type == CapnpElementType.LIST:
        return f"list[{get_type_name(type_reader.list.elementType, names_by_id)}]"

    if type_reader_type == CapnpElementType.STRUCT:
        return names_by_id.get(type_reader.struct.typeId, FALLBACK_TYPE)

    if type_reader_type == CapnpElementType.ENUM:
        return names_by_id.get(type_reader.enum.typeId, FALLBACK_TYPE)

    logger.debug(f"No Python type for capnp type '{type_reader_type}', using '{FALLBACK_TYPE}'.")
    return FALLBACK_TYPE


def declaration_from_schema(schema: _ParsedSchema, names_by_id: dict[int, str], source: str) -> TypeDeclaration:
    """Build the declaration of a top-level schema node.

    Args:
        schema (_ParsedSchema): The node's schema.
        names_by_id (dict[int, str]): Names of the top-level nodes of the schema, by node id.
        source (str): The schema file, for diagnostics.

    Returns:
        TypeDeclaration: The declaration. Its kind tells whether it is a plain record.
    """
    name = get_display_name(schema)
    node_type = schema.node.which()

    if node_type == CapnpElementType.ENUM:
        return TypeDeclaration(name, kind=DeclarationKind.ENUM, reason="it is a capnp enum", source=source)

    if node_type != CapnpElementType.STRUCT:
        return TypeDeclaration(name, kind=DeclarationKind.OTHER, reason=f"it is a capnp {node_type}", source=source)

    if schema.node.struct.discriminantCount:
        return TypeDeclaration(name, kind=DeclarationKind.UNION, reason="it contains a union", source=source)

    fields: list[Field] = []
    for field in schema.node.struct.fields:
        if field.which() == CapnpFieldType.GROUP:
            return TypeDeclaration(
                name, kind=DeclarationKind.OTHER, reason=f"field '{field.name}' is a group", source=source
            )

        fields.append(Field(helper.sanitize_name(field.name), get_type_name(field.slot.type, names_by_id)))

    if not fields:
        return TypeDeclaration(name, kind=DeclarationKind.UNIT, reason="it declares no fields", source=source)

    return TypeDeclaration(name, tuple(fields), source=source)


def load_declarations(path: str | Path, import_paths: list[str] | None = None) -> DeclarationModule:
    """Load a schema and collect the nodes that are marked for derivation.

    Args:
        path (str | Path): The *.capnp schema.
        import_paths (list[str] | None, optional): Additional import paths for resolving absolute imports.

    Raises:
        MalformedDeclarationError: If the schema cannot be compiled.

    Returns:
        DeclarationModule: The marked declarations, in schema order.
    """
    source = str(path)
    parser = capnp.SchemaParser()

    try:
        module = parser.load(source, imports=import_paths or [])
    except capnp.KjException as e:
        raise MalformedDeclarationError(f"invalid schema: {e}", source) from e

    declarations = DeclarationModule(path=source)
    nested_nodes = list(module.schema.node.nestedNodes)
    names_by_id = {node.id: node.name for node in nested_nodes}

    annotation_ids = [node.id for node in nested_nodes if node.name == DERIVE_ANNOTATION_NAME]
    if not annotation_ids:
        logger.warning(f"{source} declares no '{DERIVE_ANNOTATION_NAME}' annotation, nothing to derive.")
        return declarations

    for node in nested_nodes:
        schema = module.schema.get_nested(node.name)
        if any(annotation.id in annotation_ids for annotation in schema.node.annotations):
            declarations.entries.append(declaration_from_schema(schema, names_by_id, source))

    logger.debug(f"Found {len(declarations.entries)} message declaration(s) in {source}.")
    return declarations
