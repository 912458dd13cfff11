"""Names and type tables that are shared by the generator modules."""

from __future__ import annotations

BASE_FIELD_NAME = "base"
ROLE_FIELD_NAME = "role"
MESSAGE_SUFFIX = "Message"

# Fields that never become constructor parameters.
EXCLUDED_FIELD_NAMES = frozenset({BASE_FIELD_NAME})

DERIVE_DECORATOR_NAME = "derive_base_message"
DEFINE_MESSAGE_CALL_NAME = "define_message"
DERIVE_ANNOTATION_NAME = "deriveBaseMessage"

MESSAGE_TYPE_ENUM_NAME = "MessageType"
BASE_FIELDS_TYPE_NAME = "BaseMessageFields"
RUNTIME_MODULE = "base_message_generator.messages"

# Members emitted on every generated type. Extra fields with these names would shadow them.
GENERATED_MEMBER_NAMES = frozenset(
    {
        "new",
        "new_with_example",
        "content",
        "message_type",
        "is_example",
        "additional_kwargs",
        "response_metadata",
        "id",
        "name",
        "set_content",
        "set_example",
        "set_id",
        "set_name",
    }
)

# Parameters of the generated constructors. Extra fields become parameters too, so they must not repeat these.
CONSTRUCTOR_PARAMETER_NAMES = frozenset({"cls", "content", "example"})

CAPNP_TYPE_TO_PYTHON = {
    "void": "None",
    "bool": "bool",
    "int8": "int",
    "int16": "int",
    "int32": "int",
    "int64": "int",
    "uint8": "int",
    "uint16": "int",
    "uint32": "int",
    "uint64": "int",
    "float32": "float",
    "float64": "float",
    "text": "str",
    "data": "bytes",
}


class CapnpFieldType:
    """Types of capnproto fields."""

    GROUP = "group"
    SLOT = "slot"


class CapnpElementType:
    """Types of capnproto elements."""

    ENUM = "enum"
    STRUCT = "struct"
    CONST = "const"
    LIST = "list"
    INTERFACE = "interface"
    ANNOTATION = "annotation"
