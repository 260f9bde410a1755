# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.renderer",
#   "purpose": "Turn documentation records into anchorable presentation structures",
#   "sections": [
#     {"id": "type-tables", "name": "Attribute type tables", "anchor": "TYPES", "kind": "constants"},
#     {"id": "describe-attribute-type", "name": "describe_attribute_type", "anchor": "function-describe-attribute-type", "kind": "function"},
#     {"id": "attribute-type-link", "name": "attribute_type_link", "anchor": "function-attribute-type-link", "kind": "function"},
#     {"id": "rendered", "name": "Rendered* dataclasses", "anchor": "RENDERED", "kind": "class"},
#     {"id": "render-document", "name": "render_document", "anchor": "function-render-document", "kind": "function"},
#     {"id": "render-collection", "name": "render_collection", "anchor": "function-render-collection", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""
Document Renderer

Converts a :class:`~RegistryDocs.Stardoc.models.DocumentInfo` into a tree of
small frozen dataclasses that the page template walks. All decisions about
what appears (module section only with a docstring, groups only when
non-empty), which anchor each entity gets, and how attribute types are
described live here; the template only lays the result out.

Attribute types outside the known set abort rendering with
:class:`~RegistryDocs.Stardoc.errors.UnknownAttributeTypeError` rather than
print a wrong description.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple, Union

from markupsafe import Markup

from .anchors import AnchorIndex, AnchorKind
from .errors import UnknownAttributeTypeError
from .markup import MarkupRenderer
from .models import AttributeInfo, AttributeType, DocumentInfo, ParameterInfo

__all__ = [
    "ATTRIBUTE_TYPE_DESCRIPTIONS",
    "ATTRIBUTE_TYPE_LINKS",
    "LABELS_REFERENCE_URL",
    "NAME_REFERENCE_URL",
    "DICT_REFERENCE_URL",
    "SECTION_TITLES",
    "describe_attribute_type",
    "attribute_type_link",
    "RenderedRow",
    "RenderedItem",
    "RenderedSection",
    "RenderedDocument",
    "render_document",
    "render_collection",
]

# --- Attribute type tables -------------------------------------------------------

LABELS_REFERENCE_URL = "https://bazel.build/concepts/labels"
NAME_REFERENCE_URL = "https://bazel.build/concepts/labels#target-names"
DICT_REFERENCE_URL = "https://bazel.build/rules/lib/dict"

ATTRIBUTE_TYPE_DESCRIPTIONS: Dict[AttributeType, str] = {
    AttributeType.NAME: "name",
    AttributeType.INT: "integer",
    AttributeType.LABEL: "label",
    AttributeType.STRING: "string",
    AttributeType.STRING_LIST: "list of strings",
    AttributeType.INT_LIST: "list of integers",
    AttributeType.LABEL_LIST: "list of labels",
    AttributeType.BOOLEAN: "boolean",
    AttributeType.LABEL_STRING_DICT: "dictionary: Label → String",
    AttributeType.STRING_DICT: "dictionary: String → String",
    AttributeType.STRING_LIST_DICT: "dictionary: String → List of strings",
    AttributeType.OUTPUT: "label",
    AttributeType.OUTPUT_LIST: "list of labels",
}

ATTRIBUTE_TYPE_LINKS: Dict[AttributeType, str] = {
    AttributeType.LABEL: LABELS_REFERENCE_URL,
    AttributeType.LABEL_LIST: LABELS_REFERENCE_URL,
    AttributeType.OUTPUT: LABELS_REFERENCE_URL,
    AttributeType.NAME: NAME_REFERENCE_URL,
    AttributeType.STRING_DICT: DICT_REFERENCE_URL,
    AttributeType.STRING_LIST_DICT: DICT_REFERENCE_URL,
    AttributeType.LABEL_STRING_DICT: DICT_REFERENCE_URL,
}

SECTION_TITLES: Dict[AnchorKind, str] = {
    AnchorKind.FUNCTION: "Functions & Macros",
    AnchorKind.RULE: "Rules",
    AnchorKind.PROVIDER: "Providers",
    AnchorKind.ASPECT: "Aspects",
}


def _coerce_type(value: Union[AttributeType, str, None]) -> AttributeType:
    try:
        return AttributeType(value)
    except ValueError:
        return AttributeType.UNRECOGNIZED


def describe_attribute_type(
    value: Union[AttributeType, str], *, attribute: Optional[str] = None
) -> str:
    """Return the human-readable description of an attribute type.

    Raises:
        UnknownAttributeTypeError: For ``UNKNOWN``, ``UNRECOGNIZED`` or any
            value outside the enum.
    """

    attribute_type = _coerce_type(value)
    try:
        return ATTRIBUTE_TYPE_DESCRIPTIONS[attribute_type]
    except KeyError:
        raise UnknownAttributeTypeError(str(value), attribute=attribute) from None


def attribute_type_link(
    value: Union[AttributeType, str], *, attribute: Optional[str] = None
) -> Optional[str]:
    """Return the reference URL for an attribute type, or ``None`` when unlinked.

    Invalid types raise exactly like :func:`describe_attribute_type`.
    """

    describe_attribute_type(value, attribute=attribute)
    return ATTRIBUTE_TYPE_LINKS.get(_coerce_type(value))


# --- Rendered structures -----------------------------------------------------------


@dataclass(frozen=True)
class RenderedRow:
    """One parameter, attribute, or provider field row."""

    name: str
    doc: Markup
    required: bool = False
    default_value: Optional[str] = None
    type_description: Optional[str] = None
    type_link: Optional[str] = None


@dataclass(frozen=True)
class RenderedItem:
    """A function, rule, provider, or aspect with its anchor and table."""

    id: str
    kind: AnchorKind
    name: str
    doc: Markup
    rows_title: Optional[str] = None
    rows: Tuple[RenderedRow, ...] = ()
    returns: Markup = Markup("")
    deprecated: Markup = Markup("")
    aspect_attributes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RenderedSection:
    kind: AnchorKind
    title: str
    items: Tuple[RenderedItem, ...]


@dataclass(frozen=True)
class RenderedDocument:
    """Presentation of one documented file.

    ``module_doc`` is ``None`` when the file has no module docstring; in that
    case no element carries ``anchor`` in the page.
    """

    file: str
    anchor: str
    module_doc: Optional[Markup]
    sections: Tuple[RenderedSection, ...]

    @property
    def is_empty(self) -> bool:
        return self.module_doc is None and not self.sections


# --- Rendering -----------------------------------------------------------------------


def _parameter_row(parameter: ParameterInfo, markup: MarkupRenderer) -> RenderedRow:
    return RenderedRow(
        name=parameter.name,
        doc=markup.render(parameter.doc_string),
        required=parameter.mandatory,
        default_value=parameter.default_value,
    )


def _attribute_row(attribute: AttributeInfo, markup: MarkupRenderer) -> RenderedRow:
    return RenderedRow(
        name=attribute.name,
        doc=markup.render(attribute.doc_string),
        required=attribute.mandatory,
        default_value=attribute.default_value,
        type_description=describe_attribute_type(attribute.type, attribute=attribute.name),
        type_link=attribute_type_link(attribute.type, attribute=attribute.name),
    )


def render_document(
    doc: DocumentInfo,
    *,
    index: int,
    anchors: AnchorIndex,
    markup: MarkupRenderer,
) -> RenderedDocument:
    """Render one document of a collection.

    Args:
        doc: Document to render.
        index: Position of ``doc`` in its collection (anchor lookup key).
        anchors: Anchor assignment for the whole collection.
        markup: Docstring renderer; not shared across threads.

    Returns:
        The presentation tree for the template.

    Raises:
        UnknownAttributeTypeError: If any rule or aspect attribute carries an
            unknown type.
    """

    sections = []

    functions = tuple(
        RenderedItem(
            id=anchors.lookup(index, AnchorKind.FUNCTION, position),
            kind=AnchorKind.FUNCTION,
            name=function.name,
            doc=markup.render(function.doc_string),
            rows_title="Parameters",
            rows=tuple(_parameter_row(p, markup) for p in function.parameters),
            returns=markup.render(function.returns),
            deprecated=markup.render(function.deprecated),
        )
        for position, function in enumerate(doc.functions)
    )
    rules = tuple(
        RenderedItem(
            id=anchors.lookup(index, AnchorKind.RULE, position),
            kind=AnchorKind.RULE,
            name=rule.name,
            doc=markup.render(rule.doc_string),
            rows_title="Attributes",
            rows=tuple(_attribute_row(a, markup) for a in rule.attributes),
        )
        for position, rule in enumerate(doc.rules)
    )
    providers = tuple(
        RenderedItem(
            id=anchors.lookup(index, AnchorKind.PROVIDER, position),
            kind=AnchorKind.PROVIDER,
            name=provider.name,
            doc=markup.render(provider.doc_string),
            rows_title="Fields",
            rows=tuple(
                RenderedRow(name=field.name, doc=markup.render(field.doc_string))
                for field in provider.fields
            ),
        )
        for position, provider in enumerate(doc.providers)
    )
    aspects = tuple(
        RenderedItem(
            id=anchors.lookup(index, AnchorKind.ASPECT, position),
            kind=AnchorKind.ASPECT,
            name=aspect.name,
            doc=markup.render(aspect.doc_string),
            rows_title="Attributes",
            rows=tuple(_attribute_row(a, markup) for a in aspect.attributes),
            aspect_attributes=aspect.aspect_attributes,
        )
        for position, aspect in enumerate(doc.aspects)
    )

    for kind, items in (
        (AnchorKind.FUNCTION, functions),
        (AnchorKind.RULE, rules),
        (AnchorKind.PROVIDER, providers),
        (AnchorKind.ASPECT, aspects),
    ):
        if items:
            sections.append(RenderedSection(kind=kind, title=SECTION_TITLES[kind], items=items))

    return RenderedDocument(
        file=doc.file,
        anchor=anchors.lookup(index, AnchorKind.FILE),
        module_doc=markup.render(doc.module_docstring) if doc.module_docstring else None,
        sections=tuple(sections),
    )


def render_collection(
    collection: Sequence[DocumentInfo],
    *,
    anchors: Optional[AnchorIndex] = None,
    markup: Optional[MarkupRenderer] = None,
) -> Tuple[RenderedDocument, ...]:
    """Render every document of a collection with one shared anchor index."""

    if anchors is None:
        anchors = AnchorIndex.build(collection)
    markup = markup or MarkupRenderer()
    return tuple(
        render_document(doc, index=position, anchors=anchors, markup=markup)
        for position, doc in enumerate(collection)
    )
