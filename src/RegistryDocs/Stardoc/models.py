# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.models",
#   "purpose": "Pydantic models for normalized Stardoc documentation records",
#   "sections": [
#     {"id": "attributetype", "name": "AttributeType", "anchor": "class-attributetype", "kind": "class"},
#     {"id": "record", "name": "_Record", "anchor": "class-record", "kind": "class"},
#     {"id": "parameterinfo", "name": "ParameterInfo", "anchor": "class-parameterinfo", "kind": "class"},
#     {"id": "functioninfo", "name": "FunctionInfo", "anchor": "class-functioninfo", "kind": "class"},
#     {"id": "attributeinfo", "name": "AttributeInfo", "anchor": "class-attributeinfo", "kind": "class"},
#     {"id": "ruleinfo", "name": "RuleInfo", "anchor": "class-ruleinfo", "kind": "class"},
#     {"id": "fieldinfo", "name": "FieldInfo", "anchor": "class-fieldinfo", "kind": "class"},
#     {"id": "providerinfo", "name": "ProviderInfo", "anchor": "class-providerinfo", "kind": "class"},
#     {"id": "aspectinfo", "name": "AspectInfo", "anchor": "class-aspectinfo", "kind": "class"},
#     {"id": "documentinfo", "name": "DocumentInfo", "anchor": "class-documentinfo", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""
Stardoc Documentation Models

Strict, immutable schemas for the documentation records produced by the
descriptor decoder. The models validate directly from the plain tree built by
:func:`RegistryDocs.Stardoc.descriptor.to_plain` (Stardoc wire field names such
as ``func_info`` or ``rule_name``) and serialize with camelCase aliases
(``moduleDocstring``, ``docString``, ``defaultValue``) for the JSON
interchange artifact. Dumping with ``mode="json", by_alias=True`` and
validating the result yields an equal model.

Usage:
    from RegistryDocs.Stardoc.models import DocumentInfo

    doc = DocumentInfo.model_validate({"file": "//pkg:defs.bzl", "rule_info": [...]})
    payload = doc.model_dump(mode="json", by_alias=True)
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Optional, Tuple

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "AttributeType",
    "ParameterInfo",
    "FunctionInfo",
    "AttributeInfo",
    "RuleInfo",
    "FieldInfo",
    "ProviderInfo",
    "AspectInfo",
    "DocumentInfo",
]


class AttributeType(str, Enum):
    """Closed set of rule attribute types.

    ``UNKNOWN`` (wire value 0) and ``UNRECOGNIZED`` (a wire value outside this
    set) are accepted at decode time but refused at render time.
    """

    UNKNOWN = "UNKNOWN"
    NAME = "NAME"
    INT = "INT"
    LABEL = "LABEL"
    STRING = "STRING"
    STRING_LIST = "STRING_LIST"
    INT_LIST = "INT_LIST"
    LABEL_LIST = "LABEL_LIST"
    BOOLEAN = "BOOLEAN"
    LABEL_STRING_DICT = "LABEL_STRING_DICT"
    STRING_DICT = "STRING_DICT"
    STRING_LIST_DICT = "STRING_LIST_DICT"
    OUTPUT = "OUTPUT"
    OUTPUT_LIST = "OUTPUT_LIST"
    UNRECOGNIZED = "UNRECOGNIZED"

    @property
    def is_valid(self) -> bool:
        return self not in (AttributeType.UNKNOWN, AttributeType.UNRECOGNIZED)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value == "":
        return None
    return value


def _nested_doc_string(value: Any) -> Any:
    # FunctionReturnInfo / FunctionDeprecationInfo arrive as {"doc_string": ...}.
    if isinstance(value, dict):
        value = value.get("doc_string", value.get("docString"))
    return _blank_to_none(value)


OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
NestedDocText = Annotated[Optional[str], BeforeValidator(_nested_doc_string)]


class _Record(BaseModel):
    """Shared configuration for all documentation records."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class ParameterInfo(_Record):
    """A function parameter in declaration order."""

    name: str = ""
    doc_string: OptionalText = None
    mandatory: bool = False
    default_value: OptionalText = None


class FunctionInfo(_Record):
    """A Starlark function or macro."""

    name: str = Field("", validation_alias=AliasChoices("name", "function_name", "functionName"))
    doc_string: OptionalText = None
    parameters: Tuple[ParameterInfo, ...] = Field(
        (), validation_alias=AliasChoices("parameters", "parameter")
    )
    returns: NestedDocText = Field(None, validation_alias=AliasChoices("returns", "return"))
    deprecated: NestedDocText = None


class AttributeInfo(_Record):
    """A rule or aspect attribute."""

    name: str = ""
    doc_string: OptionalText = None
    mandatory: bool = False
    default_value: OptionalText = None
    type: AttributeType = AttributeType.UNKNOWN


class RuleInfo(_Record):
    """A rule with its attributes in declaration order."""

    name: str = Field("", validation_alias=AliasChoices("name", "rule_name", "ruleName"))
    doc_string: OptionalText = None
    attributes: Tuple[AttributeInfo, ...] = Field(
        (), validation_alias=AliasChoices("attributes", "attribute")
    )


class FieldInfo(_Record):
    """A provider field."""

    name: str = ""
    doc_string: OptionalText = None


class ProviderInfo(_Record):
    """A provider with its documented fields."""

    name: str = Field(
        "", validation_alias=AliasChoices("name", "provider_name", "providerName")
    )
    doc_string: OptionalText = None
    fields: Tuple[FieldInfo, ...] = Field(
        (), validation_alias=AliasChoices("fields", "field_info", "fieldInfo")
    )


class AspectInfo(_Record):
    """An aspect, the attributes it declares, and the attributes it propagates along."""

    name: str = Field("", validation_alias=AliasChoices("name", "aspect_name", "aspectName"))
    doc_string: OptionalText = None
    aspect_attributes: Tuple[str, ...] = Field(
        (),
        validation_alias=AliasChoices("aspectAttributes", "aspect_attributes", "aspect_attribute"),
        serialization_alias="aspectAttributes",
    )
    attributes: Tuple[AttributeInfo, ...] = Field(
        (), validation_alias=AliasChoices("attributes", "attribute")
    )


class DocumentInfo(_Record):
    """Documentation extracted from one Starlark source file.

    Attributes:
        file: Canonical label of the documented file; identity and sort key.
        module_docstring: Module-level docstring, if any.
        functions: Functions and macros in declaration order.
        rules: Rules in declaration order.
        providers: Providers in declaration order.
        aspects: Aspects in declaration order.
    """

    file: str = ""
    module_docstring: OptionalText = None
    functions: Tuple[FunctionInfo, ...] = Field(
        (), validation_alias=AliasChoices("functions", "func_info", "funcInfo")
    )
    rules: Tuple[RuleInfo, ...] = Field(
        (), validation_alias=AliasChoices("rules", "rule_info", "ruleInfo")
    )
    providers: Tuple[ProviderInfo, ...] = Field(
        (), validation_alias=AliasChoices("providers", "provider_info", "providerInfo")
    )
    aspects: Tuple[AspectInfo, ...] = Field(
        (), validation_alias=AliasChoices("aspects", "aspect_info", "aspectInfo")
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Return the camelCase, JSON-safe value tree for this document."""

        return self.model_dump(mode="json", by_alias=True)
