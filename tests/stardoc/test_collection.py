"""Collection building: ordering, resilience, and the fetch entry point."""

from __future__ import annotations

import logging

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from RegistryDocs.Stardoc.archive import ArchiveEntry, EntryType
from RegistryDocs.Stardoc.collection import build_collection, build_doc_page, ingest_archive
from RegistryDocs.Stardoc.descriptor import encode_document
from RegistryDocs.Stardoc.errors import ArchiveCorruptError
from RegistryDocs.Stardoc.models import DocumentInfo, FunctionInfo

DOCS_URL = "https://registry.example/rules_foo/1.0.0/docs.tar.gz"


def _entry(name: str, document: DocumentInfo) -> ArchiveEntry:
    return ArchiveEntry(name=name, type=EntryType.FILE, content=encode_document(document))


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_collection_sorted_by_file():
    entries = [
        _entry("c.binaryproto", DocumentInfo(file="//pkg:c.bzl")),
        _entry("a.binaryproto", DocumentInfo(file="//pkg:a.bzl")),
        _entry("b.binaryproto", DocumentInfo(file="//pkg:B.bzl")),
    ]

    collection = build_collection(entries)

    # ordinal comparison: upper case sorts before lower case
    assert [doc.file for doc in collection] == ["//pkg:B.bzl", "//pkg:a.bzl", "//pkg:c.bzl"]


def test_non_descriptor_and_non_file_entries_are_ignored():
    entries = [
        ArchiveEntry(name="docs", type=EntryType.OTHER),
        ArchiveEntry(name="README.md", type=EntryType.FILE, content=b"# hi"),
        _entry("docs/a.binaryproto", DocumentInfo(file="a")),
    ]

    assert [doc.file for doc in build_collection(entries)] == ["a"]


def test_one_corrupt_entry_does_not_block_siblings():
    entries = [
        _entry("a.binaryproto", DocumentInfo(file="a")),
        ArchiveEntry(name="bad.binaryproto", type=EntryType.FILE, content=b"\x0a\xff"),
        _entry("b.binaryproto", DocumentInfo(file="b")),
    ]

    collection = build_collection(entries)

    assert [doc.file for doc in collection] == ["a", "b"]


def test_empty_input_gives_empty_collection():
    assert build_collection([]) == ()


_files = st.lists(st.text(alphabet="/:_abcAB.", max_size=8), max_size=6)


@settings(max_examples=50, deadline=None)
@given(_files.flatmap(lambda files: st.permutations(list(enumerate(files)))))
def test_order_independent_of_arrival(indexed_files):
    documents = [
        DocumentInfo(file=name, functions=(FunctionInfo(name=f"f{i}"),)) for i, name in indexed_files
    ]
    canonical = sorted(documents, key=lambda doc: doc.functions[0].name)

    shuffled = build_collection(_entry(f"{i}.binaryproto", doc) for i, doc in enumerate(documents))
    ordered = build_collection(_entry(f"{i}.binaryproto", doc) for i, doc in enumerate(canonical))

    assert shuffled == ordered
    assert [doc.file for doc in shuffled] == sorted(doc.file for doc in documents)


def test_ingest_archive_end_to_end(archive_factory, rule_document):
    payload = archive_factory(
        [
            ("docs", None),
            ("docs/defs.binaryproto", encode_document(rule_document)),
            ("docs/notes.txt", b"ignored"),
        ]
    )

    assert ingest_archive(payload) == (rule_document,)


def test_ingest_archive_propagates_corruption():
    with pytest.raises(ArchiveCorruptError):
        ingest_archive(b"not an archive")


def test_build_doc_page_fetches_and_decodes(archive_factory, rule_document):
    payload = archive_factory([("defs.binaryproto", encode_document(rule_document))])
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, content=payload)

    with _client(handler) as client:
        collection = build_doc_page(DOCS_URL, client=client)

    assert seen == [DOCS_URL]
    assert collection == (rule_document,)


def test_build_doc_page_returns_empty_on_http_error(caplog):
    with _client(lambda request: httpx.Response(404)) as client:
        with caplog.at_level(logging.WARNING, logger="RegistryDocs.Stardoc.collection"):
            collection = build_doc_page(DOCS_URL, client=client)

    assert collection == ()
    record = next(r for r in caplog.records if r.levelno == logging.WARNING)
    assert record.extra_fields["error_code"] == "FETCH_FAILED"
    assert record.extra_fields["status_code"] == 404


def test_build_doc_page_returns_empty_on_transport_error(caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    with _client(handler) as client:
        with caplog.at_level(logging.WARNING, logger="RegistryDocs.Stardoc.collection"):
            assert build_doc_page(DOCS_URL, client=client) == ()

    assert any(r.stage == "fetch" for r in caplog.records)


def test_build_doc_page_downgrades_corrupt_archive(caplog):
    with _client(lambda request: httpx.Response(200, content=b"garbage")) as client:
        with caplog.at_level(logging.WARNING, logger="RegistryDocs.Stardoc.collection"):
            assert build_doc_page(DOCS_URL, client=client) == ()

    record = next(r for r in caplog.records if r.levelno == logging.WARNING)
    assert record.extra_fields["error_code"] == "ARCHIVE_CORRUPT"
