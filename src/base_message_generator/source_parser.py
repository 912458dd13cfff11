"""Read message declarations from Python source files.

A declaration file is an ordinary Python module:

    from base_message_generator.messages import BaseMessageFields, define_message, derive_base_message

    @derive_base_message
    class HumanMessage:
        role: str
        base: BaseMessageFields

    define_message("System")

Top-level classes decorated with `derive_base_message` become `TypeDeclaration`s, top-level `define_message`
calls become `MessageDefinition`s. The file is parsed, never imported.
"""

from __future__ import annotations

import ast
import logging
from pathlib import Path

from base_message_generator.declaration import (
    DeclarationKind,
    DeclarationModule,
    Field,
    MalformedDeclarationError,
    MessageDefinition,
    TypeDeclaration,
)
from base_message_generator.declarative import normalize_category
from base_message_generator.message_types import DEFINE_MESSAGE_CALL_NAME, DERIVE_DECORATOR_NAME, RUNTIME_MODULE

logger = logging.getLogger(__name__)

ENUM_BASES = frozenset({"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"})
TUPLE_BASES = frozenset({"tuple", "Tuple", "NamedTuple"})
CLASS_VARIABLE_NAMES = frozenset({"ClassVar", "InitVar"})


def name_of_ast_expression(expression_node: ast.expr) -> str | None:
    """Return the identifier name for AST Name/Attribute nodes, looking through calls."""
    if isinstance(expression_node, ast.Call):
        return name_of_ast_expression(expression_node.func)
    if isinstance(expression_node, ast.Name):
        return expression_node.id
    if isinstance(expression_node, ast.Attribute):
        return expression_node.attr
    return None


def _is_derive_decorated(class_node: ast.ClassDef) -> bool:
    return any(name_of_ast_expression(decorator) == DERIVE_DECORATOR_NAME for decorator in class_node.decorator_list)


def _is_class_variable(annotation: ast.expr) -> bool:
    if isinstance(annotation, ast.Subscript):
        annotation = annotation.value
    return name_of_ast_expression(annotation) in CLASS_VARIABLE_NAMES


def _is_docstring_or_placeholder(statement: ast.stmt) -> bool:
    if isinstance(statement, ast.Pass):
        return True
    return isinstance(statement, ast.Expr) and isinstance(statement.value, ast.Constant)


def _classify(class_node: ast.ClassDef) -> tuple[DeclarationKind, str, list[Field]]:
    """Determine the shape of a class and collect its fields.

    Returns:
        tuple[DeclarationKind, str, list[Field]]: The shape, the reason if it is not a record, and the fields.
    """
    base_names = {name_of_ast_expression(base) for base in class_node.bases}

    if base_names & ENUM_BASES:
        return DeclarationKind.ENUM, "it derives from an enum class", []

    if base_names & TUPLE_BASES:
        return DeclarationKind.TUPLE, "it derives from a tuple class", []

    # Inherited fields are not visible to the parser
    other_bases = [ast.unparse(base) for base in class_node.bases if name_of_ast_expression(base) != "object"]
    if other_bases:
        return DeclarationKind.OTHER, f"it derives from {', '.join(other_bases)}", []

    fields: list[Field] = []
    seen: set[str] = set()

    for statement in class_node.body:
        if _is_docstring_or_placeholder(statement):
            continue

        if not isinstance(statement, ast.AnnAssign) or not isinstance(statement.target, ast.Name):
            return DeclarationKind.OTHER, f"line {statement.lineno} is not a field declaration", []

        if _is_class_variable(statement.annotation):
            return DeclarationKind.OTHER, f"'{statement.target.id}' is not an instance field", []

        if statement.value is not None:
            return DeclarationKind.OTHER, f"field '{statement.target.id}' has a default value", []

        if statement.target.id in seen:
            return DeclarationKind.OTHER, f"field '{statement.target.id}' is declared twice", []

        seen.add(statement.target.id)
        fields.append(Field(statement.target.id, ast.unparse(statement.annotation)))

    if not fields:
        return DeclarationKind.UNIT, "it declares no fields", []

    return DeclarationKind.RECORD, "", fields


def declaration_from_class(class_node: ast.ClassDef, source: str | None = None) -> TypeDeclaration:
    """Build the declaration of a class definition.

    Args:
        class_node (ast.ClassDef): The class definition.
        source (str | None, optional): The file that contains the class. Defaults to None.

    Returns:
        TypeDeclaration: The declaration. Its kind tells whether it is a plain record.
    """
    kind, reason, fields = _classify(class_node)
    return TypeDeclaration(
        name=class_node.name,
        fields=tuple(fields),
        kind=kind,
        reason=reason,
        source=source,
        line=class_node.lineno,
    )


def _definition_from_call(call_node: ast.Call, source: str | None) -> MessageDefinition:
    if len(call_node.args) != 1 or call_node.keywords:
        raise MalformedDeclarationError(
            f"{DEFINE_MESSAGE_CALL_NAME}() takes exactly one message type.", source, call_node.lineno
        )

    argument = call_node.args[0]
    if isinstance(argument, ast.Constant) and isinstance(argument.value, str):
        message_type = argument.value
    else:
        message_type = ast.unparse(argument)

    try:
        category = normalize_category(message_type)
    except MalformedDeclarationError as e:
        raise MalformedDeclarationError(e.message, source, call_node.lineno) from e

    return MessageDefinition(category, source, call_node.lineno)


def parse_declarations(text: str, source: str = "<declarations>") -> DeclarationModule:
    """Parse the message declarations of a Python source text.

    Args:
        text (str): The source text.
        source (str, optional): The file name used for diagnostics. Defaults to "<declarations>".

    Raises:
        MalformedDeclarationError: If the text is not valid Python, or a `define_message` call is malformed.

    Returns:
        DeclarationModule: The declarations and definitions in source order, and the imports to carry over.
    """
    try:
        module_node = ast.parse(text, filename=source)
    except SyntaxError as e:
        raise MalformedDeclarationError(f"invalid syntax: {e.msg}", source, e.lineno) from e

    module = DeclarationModule(path=source)

    for top_level_node in module_node.body:
        if isinstance(top_level_node, (ast.Import, ast.ImportFrom)):
            if isinstance(top_level_node, ast.ImportFrom) and top_level_node.module in ("__future__", RUNTIME_MODULE):
                continue
            module.imports.append(ast.unparse(top_level_node))

        elif isinstance(top_level_node, ast.ClassDef) and _is_derive_decorated(top_level_node):
            module.entries.append(declaration_from_class(top_level_node, source))

        elif (
            isinstance(top_level_node, ast.Expr)
            and isinstance(top_level_node.value, ast.Call)
            and name_of_ast_expression(top_level_node.value.func) == DEFINE_MESSAGE_CALL_NAME
        ):
            module.entries.append(_definition_from_call(top_level_node.value, source))

    logger.debug(f"Found {len(module.entries)} message declaration(s) in {source}.")
    return module


def load_declarations(path: str | Path) -> DeclarationModule:
    """Read and parse a declaration file.

    Args:
        path (str | Path): The file to read.

    Returns:
        DeclarationModule: The parsed declarations.
    """
    with open(path, encoding="utf8") as f:
        text = f.read()

    return parse_declarations(text, str(path))
