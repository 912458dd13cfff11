"""Write the generated module for a declaration file."""

from __future__ import annotations

import logging
import pathlib
from typing import Literal

from base_message_generator import helper
from base_message_generator.declaration import DeclarationModule, MessageDefinition, TypeDeclaration
from base_message_generator.declarative import define_message
from base_message_generator.derive import GeneratedCode, derive_message
from base_message_generator.message_types import BASE_FIELDS_TYPE_NAME, MESSAGE_TYPE_ENUM_NAME, RUNTIME_MODULE

logger = logging.getLogger(__name__)


class Writer:
    """A class that handles writing the generated module, based on the declarations of one file."""

    VALID_TYPING_IMPORTS = Literal["Self"]

    def __init__(self, module: DeclarationModule):
        """Initialize the writer with the declarations of one file.

        Args:
            module (DeclarationModule): The declarations to generate code for.
        """
        self._module = module
        self._module_path = pathlib.Path(module.path)

        self._imports: list[str] = []
        self._typing_imports: set[Writer.VALID_TYPING_IMPORTS] = set()
        self._definitions: list[list[str]] = []
        self.type_names: list[str] = []

        self.docstring = f'"""This is an automatically generated module for `{self._module_path.name}`."""'

    def _add_typing_import(self, module_name: Writer.VALID_TYPING_IMPORTS):
        """Add an import for a name from the 'typing' package.

        Args:
            module_name (Writer.VALID_TYPING_IMPORTS): The name to import from `typing`.
        """
        self._typing_imports.add(module_name)

    def _add_import(self, import_line: str):
        """Add a full import line.

        E.g. 'from datetime import datetime'.

        Args:
            import_line (str): The import line to add.
        """
        # Preserve insertion order while avoiding duplicates
        if import_line not in self._imports:
            self._imports.append(import_line)

    @staticmethod
    def render_class(declaration: TypeDeclaration, code: GeneratedCode) -> list[str]:
        """Render a derived type as a dataclass: its declared fields, followed by the generated members.

        Args:
            declaration (TypeDeclaration): The declared type.
            code (GeneratedCode): The members derived for it.

        Returns:
            list[str]: The lines of the class definition.
        """
        field_lines = [f"{f.name}: {f.type}" for f in declaration.fields]
        return [
            helper.new_decorator("dataclass"),
            helper.new_class_declaration(declaration.name),
            *helper.indent(helper.separate(field_lines, code.lines())),
        ]

    def gen_declaration(self, declaration: TypeDeclaration):
        """Derive a declared type and add its class to the module.

        Args:
            declaration (TypeDeclaration): The declared type.

        Raises:
            ShapeError: If the declaration cannot be derived.
        """
        code = derive_message(declaration)
        self._definitions.append(self.render_class(declaration, code))
        self.type_names.append(declaration.name)

    def gen_definition(self, definition: MessageDefinition):
        """Generate the class of a base-only message type through the declarative path.

        Args:
            definition (MessageDefinition): The requested message type.
        """
        text = define_message(definition.category)
        self._definitions.append(text.rstrip("\n").split("\n"))
        self.type_names.append(f"{definition.category}Message")

    def generate_all(self):
        """Generate classes for all entries of the module, in source order."""
        for entry in self._module.entries:
            if isinstance(entry, TypeDeclaration):
                self.gen_declaration(entry)
            else:
                self.gen_definition(entry)

        if self._definitions:
            self._add_import("from dataclasses import dataclass")
            self._add_typing_import("Self")
            self._add_import(f"from {RUNTIME_MODULE} import {BASE_FIELDS_TYPE_NAME}, {MESSAGE_TYPE_ENUM_NAME}")
            for import_line in self._module.imports:
                self._add_import(import_line)

        logger.debug(f"Generated {len(self._definitions)} class(es) for {self._module_path.name}.")

    @property
    def imports(self) -> list[str]:
        """Get the full list of imports."""
        imports = ["from __future__ import annotations", *self._imports]
        if self._typing_imports:
            imports.append(f"from typing import {helper.join_parameters(sorted(self._typing_imports))}")
        return imports

    def dumps(self) -> str:
        """Generate the output module.

        Returns:
            str: The unformatted module source.
        """
        out: list[str] = [self.docstring, "", *self.imports]

        for definition in self._definitions:
            out.extend(["", "", *definition])

        return "\n".join(out) + "\n"
