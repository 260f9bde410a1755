"""Archive decoding: entry classification, size guard, and structural failures."""

from __future__ import annotations

import gzip
import io
import logging

import pytest

from RegistryDocs.Stardoc.archive import EntryType, iter_archive_entries, read_archive
from RegistryDocs.Stardoc.errors import ArchiveCorruptError


def test_entries_preserve_archive_order(archive_factory):
    payload = archive_factory(
        [("docs", None), ("docs/b.binaryproto", b"bb"), ("docs/a.binaryproto", b"a")]
    )

    entries = read_archive(payload)

    assert [entry.name for entry in entries] == ["docs", "docs/b.binaryproto", "docs/a.binaryproto"]
    assert entries[0].type is EntryType.OTHER
    assert entries[0].content == b""
    assert entries[1].type is EntryType.FILE
    assert entries[1].content == b"bb"


def test_iter_archive_entries_is_lazy(archive_factory):
    payload = archive_factory([("one.txt", b"1"), ("two.txt", b"2")])

    iterator = iter_archive_entries(io.BytesIO(payload))

    assert next(iterator).name == "one.txt"
    assert next(iterator).name == "two.txt"
    with pytest.raises(StopIteration):
        next(iterator)


def test_empty_archive_yields_nothing(archive_factory):
    assert read_archive(archive_factory([])) == []


def test_oversized_members_are_skipped(archive_factory, caplog):
    payload = archive_factory([("big.binaryproto", b"x" * 64), ("small.binaryproto", b"y")])

    with caplog.at_level(logging.WARNING, logger="RegistryDocs.Stardoc.archive"):
        entries = read_archive(payload, max_member_bytes=16)

    assert [entry.name for entry in entries] == ["small.binaryproto"]
    assert any("oversized" in record.getMessage() for record in caplog.records)


@pytest.mark.parametrize(
    "payload",
    [
        b"",
        b"definitely not gzip",
        gzip.compress(b"\x7fnot-a-tar-header" * 64),
    ],
    ids=["empty", "bad-magic", "bad-tar-header"],
)
def test_structural_corruption_raises(payload):
    with pytest.raises(ArchiveCorruptError) as excinfo:
        read_archive(payload)

    assert excinfo.value.error_code == "ARCHIVE_CORRUPT"
