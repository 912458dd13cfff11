"""Pytest configuration and fixtures for message generator tests."""

from __future__ import annotations

import importlib.util
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from types import ModuleType

import pytest

from base_message_generator.source_parser import parse_declarations
from base_message_generator.writer import Writer

# Test directory structure
TESTS_DIR = Path(__file__).parent
DECLARATIONS_DIR = TESTS_DIR / "declarations"

CHAT_MESSAGES_PATH = DECLARATIONS_DIR / "chat_messages.py"
CHAT_SCHEMA_PATH = DECLARATIONS_DIR / "chat.capnp"


def generate_source(text: str, source: str = "test_messages.py") -> str:
    """Run a declaration text through the parser and the writer, without formatting."""
    writer = Writer(parse_declarations(text, source))
    writer.generate_all()
    return writer.dumps()


@pytest.fixture
def load_generated(tmp_path) -> Iterator[Callable[[str, str], ModuleType]]:
    """Write generated source to a file and import it as a module.

    Modules are registered in `sys.modules` while the test runs, since dataclasses look up their module there.
    """
    loaded: list[str] = []

    def _load(source_code: str, module_name: str = "generated_messages") -> ModuleType:
        unique_name = f"{module_name}_{len(loaded)}_{tmp_path.name}"
        module_path = tmp_path / f"{unique_name}.py"
        module_path.write_text(source_code, encoding="utf8")

        spec = importlib.util.spec_from_file_location(unique_name, module_path)
        assert spec is not None and spec.loader is not None
        module = importlib.util.module_from_spec(spec)
        sys.modules[unique_name] = module
        loaded.append(unique_name)
        spec.loader.exec_module(module)
        return module

    yield _load

    for name in loaded:
        sys.modules.pop(name, None)


@pytest.fixture
def chat_module(load_generated) -> ModuleType:
    """The generated module for the chat declarations."""
    text = CHAT_MESSAGES_PATH.read_text(encoding="utf8")
    return load_generated(generate_source(text, str(CHAT_MESSAGES_PATH)), "chat_messages_derived")
