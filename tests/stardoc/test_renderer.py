"""Attribute type descriptions, document rendering, and page assembly."""

from __future__ import annotations

import pytest

from RegistryDocs.Stardoc.anchors import AnchorIndex, AnchorKind
from RegistryDocs.Stardoc.errors import UnknownAttributeTypeError
from RegistryDocs.Stardoc.markup import MarkupRenderer
from RegistryDocs.Stardoc.models import AttributeInfo, AttributeType, DocumentInfo, RuleInfo
from RegistryDocs.Stardoc.page import iter_static_assets, render_page
from RegistryDocs.Stardoc.renderer import (
    ATTRIBUTE_TYPE_DESCRIPTIONS,
    DICT_REFERENCE_URL,
    LABELS_REFERENCE_URL,
    NAME_REFERENCE_URL,
    attribute_type_link,
    describe_attribute_type,
    render_collection,
    render_document,
)
from RegistryDocs.Stardoc.settings import RenderCfg


def test_every_valid_type_has_a_description():
    valid = {t for t in AttributeType if t.is_valid}

    assert set(ATTRIBUTE_TYPE_DESCRIPTIONS) == valid
    assert len(valid) == 13


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (AttributeType.NAME, "name"),
        (AttributeType.INT, "integer"),
        ("LABEL", "label"),
        (AttributeType.STRING_LIST, "list of strings"),
        (AttributeType.LABEL_STRING_DICT, "dictionary: Label → String"),
        (AttributeType.STRING_LIST_DICT, "dictionary: String → List of strings"),
        (AttributeType.OUTPUT, "label"),
        (AttributeType.OUTPUT_LIST, "list of labels"),
    ],
)
def test_describe_attribute_type(value, expected):
    assert describe_attribute_type(value) == expected


@pytest.mark.parametrize("value", [AttributeType.UNKNOWN, AttributeType.UNRECOGNIZED, "BOGUS"])
def test_unknown_types_are_rejected(value):
    with pytest.raises(UnknownAttributeTypeError) as excinfo:
        describe_attribute_type(value, attribute="deps")

    assert excinfo.value.error_code == "UNKNOWN_ATTRIBUTE_TYPE"
    with pytest.raises(UnknownAttributeTypeError):
        attribute_type_link(value)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (AttributeType.LABEL, LABELS_REFERENCE_URL),
        (AttributeType.LABEL_LIST, LABELS_REFERENCE_URL),
        (AttributeType.OUTPUT, LABELS_REFERENCE_URL),
        (AttributeType.NAME, NAME_REFERENCE_URL),
        (AttributeType.STRING_DICT, DICT_REFERENCE_URL),
        (AttributeType.STRING_LIST_DICT, DICT_REFERENCE_URL),
        (AttributeType.LABEL_STRING_DICT, DICT_REFERENCE_URL),
        (AttributeType.STRING, None),
        (AttributeType.OUTPUT_LIST, None),
        (AttributeType.BOOLEAN, None),
    ],
)
def test_attribute_type_link(value, expected):
    assert attribute_type_link(value) == expected


def _render_one(document: DocumentInfo):
    collection = (document,)
    return render_document(
        document, index=0, anchors=AnchorIndex.build(collection), markup=MarkupRenderer()
    )


def test_rule_document_renders_required_label_row(rule_document):
    rendered = _render_one(rule_document)

    assert rendered.anchor == "pkg-defs-binaryproto"
    assert rendered.module_doc is None
    (section,) = rendered.sections
    assert section.kind is AnchorKind.RULE
    assert section.title == "Rules"
    (item,) = section.items
    assert item.id == "rule-my_rule"
    assert item.rows_title == "Attributes"
    (row,) = item.rows
    assert row.name == "name"
    assert row.required is True
    assert row.type_description == "label"
    assert row.type_link == LABELS_REFERENCE_URL


def test_full_document_sections(full_document):
    rendered = _render_one(full_document)

    assert "<strong>foo</strong>" in rendered.module_doc
    assert [s.title for s in rendered.sections] == [
        "Functions & Macros",
        "Rules",
        "Providers",
        "Aspects",
    ]
    function = rendered.sections[0].items[0]
    assert function.rows_title == "Parameters"
    assert [row.default_value for row in function.rows] == [None, "[]"]
    assert all(row.type_description is None for row in function.rows)
    assert "created target" in function.returns
    assert "<code>foo_lib</code>" in function.deprecated
    provider = rendered.sections[2].items[0]
    assert provider.rows_title == "Fields"
    assert provider.rows[0].required is False
    aspect = rendered.sections[3].items[0]
    assert aspect.aspect_attributes == ("deps",)


def test_empty_groups_are_omitted():
    rendered = _render_one(DocumentInfo(file="a.bzl"))

    assert rendered.sections == ()
    assert rendered.is_empty


def test_unknown_attribute_type_aborts_rendering():
    document = DocumentInfo(
        rules=(RuleInfo(name="r", attributes=(AttributeInfo(name="a", type="UNKNOWN"),)),)
    )

    with pytest.raises(UnknownAttributeTypeError) as excinfo:
        render_collection((document,))

    assert excinfo.value.attribute == "a"


def test_page_for_rule_document(rule_document):
    html = render_page("rules_foo", "1.0.0", (rule_document,), versions=("1.0.0",))

    assert "<title>rules_foo API docs @1.0.0</title>" in html
    assert 'id="rule-my_rule"' in html
    assert 'data-id="rule-my_rule"' in html
    assert 'data-id="pkg-defs-binaryproto"' in html
    # no module docstring: nothing on the page carries the file anchor as id
    assert 'id="pkg-defs-binaryproto"' not in html
    assert 'class="required-marker"' in html
    assert f'href="{LABELS_REFERENCE_URL}"' in html
    assert "No API Documentation Available" not in html


def test_page_escapes_names():
    document = DocumentInfo(file="<b>.bzl", rules=(RuleInfo(name="r<x>"),))

    html = render_page("m<1>", "1.0", (document,))

    assert "<b>.bzl" not in html
    assert "&lt;b&gt;.bzl" in html
    assert "m&lt;1&gt;" in html


def test_page_without_documents_shows_instructions():
    cfg = RenderCfg()

    html = render_page("rules_foo", "0.1.0", (), render_cfg=cfg)

    assert "No API Documentation Available" in html
    assert cfg.instructions_url in html
    assert "stardoc-nav" not in html


def test_page_passes_timings_and_static_paths(full_document):
    cfg = RenderCfg(header_offset_px=80, settle_delay_ms=500)

    html = render_page("rules_foo", "2.0.0", (full_document,), render_cfg=cfg)

    assert 'data-header-offset="80"' in html
    assert 'data-settle-delay="500"' in html
    assert 'data-hash-delay="100"' in html
    assert 'data-copy-feedback="2000"' in html
    assert 'src="../../static/stardoc.js"' in html
    assert 'id="lib-defs-bzl"' in html
    assert 'data-anchor="function-foo_library"' in html


def test_version_switcher_links_other_versions(rule_document):
    html = render_page(
        "rules_foo", "1.0.0", (rule_document,), versions=("2.0.0", "1.0.0"), root_prefix="../"
    )

    assert 'href="../2.0.0/index.html"' in html
    assert "<strong>1.0.0</strong>" in html


def test_static_assets():
    assets = dict(iter_static_assets("default"))

    assert set(assets) == {"stardoc.js", "stardoc.css", "pygments.css"}
    assert "ScrollSync" in assets["stardoc.js"]
    assert ".codehilite" in assets["pygments.css"]
