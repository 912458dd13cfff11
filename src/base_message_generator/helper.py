"""Helper functionality that is used in other modules of this package."""

from __future__ import annotations

import keyword
import os.path
from collections.abc import Sequence

INDENT = "    "

GENERATED_SUFFIX = "_derived"
CAPNP_SUFFIX = ".capnp"
PY_SUFFIX = ".py"


def sanitize_name(name: str) -> str:
    """Sanitize a name to avoid Python keywords.

    If the name is a Python keyword, append an underscore.
    E.g. 'lambda' becomes 'lambda_', 'class' becomes 'class_'.

    Args:
        name (str): The original name.

    Returns:
        str: The sanitized name.
    """
    if keyword.iskeyword(name):
        return f"{name}_"
    return name


def replace_declaration_suffix(original: str) -> str:
    """Derive the name of a generated module from the name of its declaration file.

    For example, `chat_messages.py` becomes `chat_messages_derived` and `chat-schema.capnp` becomes
    `chat_schema_derived`. Hyphens are converted to underscores to create valid Python identifiers.

    Args:
        original (str): The declaration file name.

    Returns:
        str: The module name of the generated output, without file extension.
    """
    stem, extension = os.path.splitext(original)
    if extension not in (CAPNP_SUFFIX, PY_SUFFIX):
        stem = original

    return f"{stem.replace('-', '_')}{GENERATED_SUFFIX}"


def join_parameters(parameters: Sequence[str] | None) -> str:
    """Joins parameters by means of ', '.

    Empty parameters are skipped.

    Args:
        parameters (Sequence[str] | None): The parameters to join.

    Returns:
        str: The joined parameters.
    """
    if parameters:
        return ", ".join(p for p in parameters if p)

    else:
        return ""


def indent(lines: Sequence[str], levels: int = 1) -> list[str]:
    """Indent lines of code, leaving empty lines empty.

    Args:
        lines (Sequence[str]): The lines to indent.
        levels (int, optional): How many indentation levels to add. Defaults to 1.

    Returns:
        list[str]: The indented lines.
    """
    prefix = INDENT * levels
    return [f"{prefix}{line}" if line else "" for line in lines]


def new_class_declaration(name: str, parameters: Sequence[str] | None = None) -> str:
    """Creates a string for declaring a class.

    For example, for a name of 'SomeClass' and a list of parameters that is 'Base, Protocol', the output
    will be 'class SomeClass(Base, Protocol):'.

    If no parameters are provided, the output is just 'class SomeClass:'.

    Args:
        name (str): The class name.
        parameters (Sequence[str] | None, optional):
            A list of parameters that are part of the class declaration. Defaults to None.

    Returns:
        str: The class declaration.
    """
    if parameters:
        return f"class {name}({join_parameters(parameters)}):"
    else:
        return f"class {name}:"


def new_decorator(name: str, parameters: Sequence[str] | None = None) -> str:
    """Create a new decorator.

    Args:
        name (str): The name of the decorator.
        parameters (Sequence[str] | None, optional): The parameters (args, kwargs) of the decorator,
            if any. Defaults to None.

    Returns:
        str: The decorator string.
    """
    if parameters:
        return f"@{name}({join_parameters(parameters)})"

    else:
        return f"@{name}"


def new_function(
    name: str,
    parameters: Sequence[str] | None = None,
    return_type: str | None = None,
    body: Sequence[str] = ("...",),
) -> list[str]:
    """Create the lines of a function definition.

    Args:
        name (str): The function name.
        parameters (Sequence[str] | None, optional): The function parameters, if any. Defaults to None.
        return_type (str | None, optional): The function's return type. Defaults to None.
        body (Sequence[str], optional): The body lines, without indentation. Defaults to `...`.

    Returns:
        list[str]: The function header, followed by its indented body.
    """
    if return_type is None:
        return_type = "None"

    arguments = join_parameters(parameters)
    return [f"def {name}({arguments}) -> {return_type}:", *indent(body)]


def new_classmethod(
    name: str, parameters: Sequence[str] | None, return_type: str, body: Sequence[str]
) -> list[str]:
    """Create a classmethod, taking `cls` before the given parameters."""
    return [new_decorator("classmethod"), *new_function(name, ["cls", *(parameters or [])], return_type, body)]


def new_method(name: str, parameters: Sequence[str] | None, return_type: str | None, body: Sequence[str]) -> list[str]:
    """Create an instance method, taking `self` before the given parameters."""
    return new_function(name, ["self", *(parameters or [])], return_type, body)


def new_property(name: str, return_type: str, expression: str) -> list[str]:
    """Create a read-only property that returns a single expression.

    Args:
        name (str): The property name.
        return_type (str): The property's return type.
        expression (str): The expression the property returns.

    Returns:
        list[str]: Lines to be added (decorator + function).
    """
    return [new_decorator("property"), *new_method(name, None, return_type, [f"return {expression}"])]


def new_call(callee: str, arguments: Sequence[str]) -> list[str]:
    """Create a call that places every argument on its own line.

    Arguments may span several lines themselves, in which case they are given as already split lines:
    only the first line of each argument is joined with the previous one.

    Args:
        callee (str): The callable expression.
        arguments (Sequence[str]): The arguments, possibly containing line breaks.

    Returns:
        list[str]: The call, e.g. `cls(`, `    base=...,`, `)`.
    """
    lines = [f"{callee}("]
    for argument in arguments:
        argument_lines = argument.split("\n")
        argument_lines[-1] = f"{argument_lines[-1]},"
        lines.extend(indent(argument_lines))
    lines.append(")")
    return lines


def separate(*blocks: Sequence[str]) -> list[str]:
    """Join blocks of lines, with an empty line between consecutive non-empty blocks."""
    lines: list[str] = []
    for block in blocks:
        if not block:
            continue
        if lines:
            lines.append("")
        lines.extend(block)
    return lines
