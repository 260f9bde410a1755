"""Anchor derivation and collision handling."""

from __future__ import annotations

import re

import pytest
from hypothesis import given
from hypothesis import strategies as st

from RegistryDocs.Stardoc.anchors import AnchorIndex, AnchorKind, anchor, clean_name
from RegistryDocs.Stardoc.models import DocumentInfo, ProviderInfo, RuleInfo

_SAFE = re.compile(r"^[a-z0-9_-]+$")


@pytest.mark.parametrize(
    ("kind", "raw_name", "expected"),
    [
        ("file", "pkg/defs.binaryproto", "pkg-defs-binaryproto"),
        ("file", "//lib:defs.bzl", "lib-defs-bzl"),
        ("rule", "my_rule", "rule-my_rule"),
        ("function", "Foo.Bar", "function-foo-bar"),
        ("provider", "FooInfo", "provider-fooinfo"),
        ("aspect", "my-aspect", "aspect-my-aspect"),
    ],
)
def test_anchor_examples(kind, raw_name, expected):
    assert anchor(kind, raw_name) == expected


def test_leading_slashes_are_ignored():
    assert anchor(AnchorKind.FILE, "//a/b.bzl") == anchor(AnchorKind.FILE, "a/b.bzl")
    assert clean_name("///x") == "x"


def test_empty_names_get_placeholders():
    assert anchor("file", "") == "module"
    assert anchor("file", "//") == "module"
    assert anchor("rule", "") == "rule-unnamed"


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        anchor("macro", "x")


@given(st.sampled_from(list(AnchorKind)), st.text(max_size=30))
def test_anchor_is_deterministic_and_fragment_safe(kind, raw_name):
    first = anchor(kind, raw_name)

    assert first == anchor(kind, raw_name)
    assert _SAFE.match(first)


def test_index_suffixes_colliding_ids_in_navigation_order():
    collection = (
        DocumentInfo(file="a.bzl", rules=(RuleInfo(name="Foo"), RuleInfo(name="foo"))),
        DocumentInfo(file="b.bzl", rules=(RuleInfo(name="FOO"),)),
    )

    index = AnchorIndex.build(collection)

    assert index.lookup(0, "rule", 0) == "rule-foo"
    assert index.lookup(0, "rule", 1) == "rule-foo-2"
    assert index.lookup(1, AnchorKind.RULE, 0) == "rule-foo-3"


def test_index_ids_are_unique_and_ordered():
    collection = (
        DocumentInfo(
            file="//pkg:defs.bzl",
            rules=(RuleInfo(name="r"),),
            providers=(ProviderInfo(name="P"),),
        ),
        DocumentInfo(file="pkg/defs.bzl"),
    )

    index = AnchorIndex.build(collection)

    assert index.ids() == ("pkg-defs-bzl", "rule-r", "provider-p", "pkg-defs-bzl-2")
    assert len(index) == 4
    assert len(set(index.ids())) == len(index)
