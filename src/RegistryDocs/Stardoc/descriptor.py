# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.descriptor",
#   "purpose": "Decode Stardoc binary descriptors and normalize them into plain value trees",
#   "sections": [
#     {"id": "is-descriptor-entry", "name": "is_descriptor_entry", "anchor": "function-is-descriptor-entry", "kind": "function"},
#     {"id": "to-plain", "name": "to_plain", "anchor": "function-to-plain", "kind": "function"},
#     {"id": "decode-module-info", "name": "decode_module_info", "anchor": "function-decode-module-info", "kind": "function"},
#     {"id": "decode-document", "name": "decode_document", "anchor": "function-decode-document", "kind": "function"},
#     {"id": "encode-document", "name": "encode_document", "anchor": "function-encode-document", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Stardoc descriptor decoding and normalization.

A descriptor is one ``*.binaryproto`` archive member holding a serialized
``stardoc_output.ModuleInfo``. Decoding happens in two steps: protobuf parsing
into a message object, then :func:`to_plain`, a depth-first copy into dicts,
lists, strings, numbers, and booleans. The plain tree is what
:class:`~RegistryDocs.Stardoc.models.DocumentInfo` validates, so nothing
protobuf-specific survives past this module.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Iterable

from google.protobuf.descriptor import FieldDescriptor
from google.protobuf.message import DecodeError, Message
from pydantic import ValidationError

from . import descriptor_schema as schema
from .errors import DescriptorDecodeError
from .models import AspectInfo, AttributeInfo, DocumentInfo, FunctionInfo

__all__ = [
    "DESCRIPTOR_SUFFIX",
    "INTERNAL_KEY_PREFIXES",
    "is_descriptor_entry",
    "to_plain",
    "decode_module_info",
    "decode_document",
    "encode_document",
]

DESCRIPTOR_SUFFIX = ".binaryproto"
INTERNAL_KEY_PREFIXES = ("_", "$")
UNRECOGNIZED = "UNRECOGNIZED"


def is_descriptor_entry(name: str, *, suffix: str = DESCRIPTOR_SUFFIX) -> bool:
    """Return ``True`` when an archive member name denotes a descriptor."""

    return name.endswith(suffix)


def _is_internal(key: str) -> bool:
    return key.startswith(INTERNAL_KEY_PREFIXES)


def _plain_field_value(field: FieldDescriptor, value: Any) -> Any:
    if field.type == FieldDescriptor.TYPE_ENUM:
        enum_value = field.enum_type.values_by_number.get(int(value))
        return enum_value.name if enum_value is not None else UNRECOGNIZED
    return to_plain(value)


def _message_to_plain(message: Message) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for field in message.DESCRIPTOR.fields:
        if _is_internal(field.name):
            continue
        value = getattr(message, field.name)
        if field.label == FieldDescriptor.LABEL_REPEATED:
            result[field.name] = [_plain_field_value(field, item) for item in value]
        else:
            result[field.name] = _plain_field_value(field, value)
    return result


def to_plain(value: Any) -> Any:
    """Return a depth-first, JSON-safe copy of ``value``.

    Messages become dicts keyed by field name (every declared field is
    present, unset ones with their proto3 default), enums become member names,
    ``bytes`` become lists of ints, and mapping keys carrying an internal
    prefix (``_`` or ``$``) are dropped.

    Examples:
        >>> to_plain({"a": b"\\x01\\x02", "_cache": 1, "b": (1, 2)})
        {'a': [1, 2], 'b': [1, 2]}
    """

    if value is None or isinstance(value, (bool, int, float, str)):
        if isinstance(value, Enum):
            return value.value
        return value
    if isinstance(value, Message):
        return _message_to_plain(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return list(bytes(value))
    if isinstance(value, Enum):
        return to_plain(value.value)
    if isinstance(value, Mapping):
        return {str(k): to_plain(v) for k, v in value.items() if not _is_internal(str(k))}
    if isinstance(value, Iterable):
        return [to_plain(item) for item in value]
    raise TypeError(f"Cannot normalize value of type {type(value).__name__}")


def decode_module_info(payload: bytes) -> Message:
    """Parse a serialized ``ModuleInfo`` message."""

    message = schema.ModuleInfo()
    try:
        message.ParseFromString(bytes(payload))
    except (DecodeError, ValueError, TypeError) as exc:
        raise DescriptorDecodeError(f"Invalid Stardoc descriptor payload: {exc}") from exc
    return message


def decode_document(payload: bytes) -> DocumentInfo:
    """Decode and normalize one descriptor payload into a :class:`DocumentInfo`.

    Raises:
        DescriptorDecodeError: If the payload is not a valid descriptor or the
            normalized tree does not satisfy the document schema.
    """

    plain = to_plain(decode_module_info(payload))
    try:
        return DocumentInfo.model_validate(plain)
    except ValidationError as exc:
        raise DescriptorDecodeError(f"Descriptor failed schema validation: {exc}") from exc


def _attribute_type_number(attribute: AttributeInfo) -> int:
    enum_value = schema.POOL.FindEnumTypeByName(f"{schema.PACKAGE}.AttributeType")
    value = enum_value.values_by_name.get(attribute.type.value)
    if value is None:
        raise ValueError(f"Attribute '{attribute.name}' has unencodable type {attribute.type.value}")
    return value.number


def _encode_attribute(attribute: AttributeInfo, target: Message) -> None:
    target.name = attribute.name
    target.doc_string = attribute.doc_string or ""
    target.type = _attribute_type_number(attribute)
    target.mandatory = attribute.mandatory
    target.default_value = attribute.default_value or ""


def _encode_function(function: FunctionInfo, target: Message) -> None:
    target.function_name = function.name
    target.doc_string = function.doc_string or ""
    for parameter in function.parameters:
        param = target.parameter.add()
        param.name = parameter.name
        param.doc_string = parameter.doc_string or ""
        param.mandatory = parameter.mandatory
        param.default_value = parameter.default_value or ""
    if function.returns is not None:
        getattr(target, "return").doc_string = function.returns
    if function.deprecated is not None:
        target.deprecated.doc_string = function.deprecated


def _encode_aspect(aspect: AspectInfo, target: Message) -> None:
    target.aspect_name = aspect.name
    target.doc_string = aspect.doc_string or ""
    target.aspect_attribute.extend(aspect.aspect_attributes)
    for attribute in aspect.attributes:
        _encode_attribute(attribute, target.attribute.add())


def encode_document(document: DocumentInfo) -> bytes:
    """Serialize ``document`` back into the Stardoc binary descriptor format."""

    message = schema.ModuleInfo()
    message.file = document.file
    message.module_docstring = document.module_docstring or ""
    for function in document.functions:
        _encode_function(function, message.func_info.add())
    for rule in document.rules:
        target = message.rule_info.add()
        target.rule_name = rule.name
        target.doc_string = rule.doc_string or ""
        for attribute in rule.attributes:
            _encode_attribute(attribute, target.attribute.add())
    for provider in document.providers:
        target = message.provider_info.add()
        target.provider_name = provider.name
        target.doc_string = provider.doc_string or ""
        for field in provider.fields:
            entry = target.field_info.add()
            entry.name = field.name
            entry.doc_string = field.doc_string or ""
    for aspect in document.aspects:
        _encode_aspect(aspect, message.aspect_info.add())
    return message.SerializeToString()
