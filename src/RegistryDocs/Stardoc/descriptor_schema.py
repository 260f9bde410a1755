# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.descriptor_schema",
#   "purpose": "Declare the Stardoc output protobuf schema and expose its message classes",
#   "sections": [
#     {"id": "constants", "name": "Schema constants", "anchor": "CONST", "kind": "constants"},
#     {"id": "builders", "name": "Descriptor builders", "anchor": "BLD", "kind": "helpers"},
#     {"id": "api", "name": "Message classes", "anchor": "API", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Stardoc output schema (``stardoc_output.proto``) declared at runtime.

Only the messages and fields the browser renders are declared. Field numbers
follow the upstream schema, so payloads written by Stardoc decode with these
classes; fields not declared here (origin keys, provider groups, module
extensions, ...) are preserved by protobuf as unknown fields and ignored.

The schema lives in a private :class:`~google.protobuf.descriptor_pool.DescriptorPool`
so it never clashes with another copy of ``stardoc_output.proto`` registered
in the default pool by an unrelated import.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

__all__ = [
    "PACKAGE",
    "ATTRIBUTE_TYPE_NAMES",
    "POOL",
    "ModuleInfo",
    "StarlarkFunctionInfo",
    "FunctionParamInfo",
    "FunctionReturnInfo",
    "FunctionDeprecationInfo",
    "RuleInfo",
    "AttributeInfo",
    "ProviderInfo",
    "ProviderFieldInfo",
    "AspectInfo",
]

# --- Schema constants ----------------------------------------------------------

PACKAGE = "stardoc_output"
_FILE_NAME = "registrydocs/stardoc_output.proto"

# Wire order matters: the index is the enum number.
ATTRIBUTE_TYPE_NAMES: Tuple[str, ...] = (
    "UNKNOWN",
    "NAME",
    "INT",
    "LABEL",
    "STRING",
    "STRING_LIST",
    "INT_LIST",
    "LABEL_LIST",
    "BOOLEAN",
    "LABEL_STRING_DICT",
    "STRING_DICT",
    "STRING_LIST_DICT",
    "OUTPUT",
    "OUTPUT_LIST",
)

_F = descriptor_pb2.FieldDescriptorProto
_STRING = _F.TYPE_STRING
_BOOL = _F.TYPE_BOOL
_ENUM = _F.TYPE_ENUM
_MESSAGE = _F.TYPE_MESSAGE
_OPTIONAL = _F.LABEL_OPTIONAL
_REPEATED = _F.LABEL_REPEATED

# (name, number, type, label, type_name)
_FieldSpec = Tuple[str, int, int, int, str]

_MESSAGES: Tuple[Tuple[str, Sequence[_FieldSpec]], ...] = (
    (
        "ModuleInfo",
        (
            ("rule_info", 1, _MESSAGE, _REPEATED, "RuleInfo"),
            ("provider_info", 2, _MESSAGE, _REPEATED, "ProviderInfo"),
            ("func_info", 3, _MESSAGE, _REPEATED, "StarlarkFunctionInfo"),
            ("aspect_info", 4, _MESSAGE, _REPEATED, "AspectInfo"),
            ("module_docstring", 5, _STRING, _OPTIONAL, ""),
            ("file", 6, _STRING, _OPTIONAL, ""),
        ),
    ),
    (
        "RuleInfo",
        (
            ("rule_name", 1, _STRING, _OPTIONAL, ""),
            ("doc_string", 2, _STRING, _OPTIONAL, ""),
            ("attribute", 3, _MESSAGE, _REPEATED, "AttributeInfo"),
        ),
    ),
    (
        "AttributeInfo",
        (
            ("name", 1, _STRING, _OPTIONAL, ""),
            ("doc_string", 2, _STRING, _OPTIONAL, ""),
            ("type", 3, _ENUM, _OPTIONAL, "AttributeType"),
            ("mandatory", 4, _BOOL, _OPTIONAL, ""),
            ("default_value", 6, _STRING, _OPTIONAL, ""),
        ),
    ),
    (
        "StarlarkFunctionInfo",
        (
            ("function_name", 1, _STRING, _OPTIONAL, ""),
            ("parameter", 2, _MESSAGE, _REPEATED, "FunctionParamInfo"),
            ("doc_string", 3, _STRING, _OPTIONAL, ""),
            ("return", 4, _MESSAGE, _OPTIONAL, "FunctionReturnInfo"),
            ("deprecated", 5, _MESSAGE, _OPTIONAL, "FunctionDeprecationInfo"),
        ),
    ),
    (
        "FunctionParamInfo",
        (
            ("name", 1, _STRING, _OPTIONAL, ""),
            ("doc_string", 2, _STRING, _OPTIONAL, ""),
            ("default_value", 3, _STRING, _OPTIONAL, ""),
            ("mandatory", 4, _BOOL, _OPTIONAL, ""),
        ),
    ),
    ("FunctionReturnInfo", (("doc_string", 1, _STRING, _OPTIONAL, ""),)),
    ("FunctionDeprecationInfo", (("doc_string", 1, _STRING, _OPTIONAL, ""),)),
    (
        "ProviderInfo",
        (
            ("provider_name", 1, _STRING, _OPTIONAL, ""),
            ("doc_string", 2, _STRING, _OPTIONAL, ""),
            ("field_info", 3, _MESSAGE, _REPEATED, "ProviderFieldInfo"),
        ),
    ),
    (
        "ProviderFieldInfo",
        (
            ("name", 1, _STRING, _OPTIONAL, ""),
            ("doc_string", 2, _STRING, _OPTIONAL, ""),
        ),
    ),
    (
        "AspectInfo",
        (
            ("aspect_name", 1, _STRING, _OPTIONAL, ""),
            ("doc_string", 2, _STRING, _OPTIONAL, ""),
            ("aspect_attribute", 3, _STRING, _REPEATED, ""),
            ("attribute", 4, _MESSAGE, _REPEATED, "AttributeInfo"),
        ),
    ),
)

# --- Descriptor builders -------------------------------------------------------


def _build_file_proto() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=_FILE_NAME, package=PACKAGE, syntax="proto3"
    )
    enum_proto = file_proto.enum_type.add(name="AttributeType")
    for number, name in enumerate(ATTRIBUTE_TYPE_NAMES):
        enum_proto.value.add(name=name, number=number)

    for message_name, fields in _MESSAGES:
        message_proto = file_proto.message_type.add(name=message_name)
        for name, number, field_type, label, type_name in fields:
            field_proto = message_proto.field.add(
                name=name, number=number, type=field_type, label=label
            )
            if type_name:
                field_proto.type_name = f".{PACKAGE}.{type_name}"
    return file_proto


def _build_pool() -> descriptor_pool.DescriptorPool:
    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(_build_file_proto().SerializeToString())
    return pool


def _message_class(name: str):
    return message_factory.GetMessageClass(POOL.FindMessageTypeByName(f"{PACKAGE}.{name}"))


# --- Message classes -----------------------------------------------------------

POOL = _build_pool()

ModuleInfo = _message_class("ModuleInfo")
RuleInfo = _message_class("RuleInfo")
AttributeInfo = _message_class("AttributeInfo")
StarlarkFunctionInfo = _message_class("StarlarkFunctionInfo")
FunctionParamInfo = _message_class("FunctionParamInfo")
FunctionReturnInfo = _message_class("FunctionReturnInfo")
FunctionDeprecationInfo = _message_class("FunctionDeprecationInfo")
ProviderInfo = _message_class("ProviderInfo")
ProviderFieldInfo = _message_class("ProviderFieldInfo")
AspectInfo = _message_class("AspectInfo")
