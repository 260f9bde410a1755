# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.archive",
#   "purpose": "Stream gzip-compressed tar archives into in-memory entries",
#   "sections": [
#     {"id": "entrytype", "name": "EntryType", "anchor": "class-entrytype", "kind": "class"},
#     {"id": "archiveentry", "name": "ArchiveEntry", "anchor": "class-archiveentry", "kind": "class"},
#     {"id": "read-member", "name": "_read_member", "anchor": "function-read-member", "kind": "function"},
#     {"id": "iter-archive-entries", "name": "iter_archive_entries", "anchor": "function-iter-archive-entries", "kind": "function"},
#     {"id": "read-archive", "name": "read_archive", "anchor": "function-read-archive", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Streaming decoder for gzip-compressed tar documentation archives.

Archives are read with :mod:`tarfile` in stream mode (``r|gz``) so members are
produced in arrival order without seeking. Structural damage (bad gzip magic,
invalid headers, truncated data) aborts the whole archive with
:class:`~RegistryDocs.Stardoc.errors.ArchiveCorruptError`; a member whose
content cannot be read is skipped and the remaining members are still
produced.
"""

from __future__ import annotations

import io
import logging
import tarfile
import zlib
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Iterator, List, Optional

from .errors import ArchiveCorruptError
from .logging_utils import log_event

__all__ = ["EntryType", "ArchiveEntry", "iter_archive_entries", "read_archive"]

LOGGER = logging.getLogger("RegistryDocs.Stardoc.archive")

_STRUCTURAL_ERRORS = (tarfile.TarError, EOFError, zlib.error, OSError)


class EntryType(str, Enum):
    """Coarse member classification; only regular files carry content."""

    FILE = "file"
    OTHER = "other"


@dataclass(frozen=True)
class ArchiveEntry:
    """One archive member with its fully buffered content."""

    name: str
    type: EntryType
    content: bytes = b""


def _read_member(archive: tarfile.TarFile, member: tarfile.TarInfo) -> Optional[bytes]:
    """Return member content, or ``None`` when it cannot be read."""

    try:
        handle = archive.extractfile(member)
        if handle is None:
            return None
        with handle:
            return handle.read()
    except (OSError, tarfile.TarError) as exc:
        LOGGER.debug(
            "skipping unreadable archive member",
            extra={"stage": "archive", "extra_fields": {"member": member.name, "error": str(exc)}},
        )
        return None


def iter_archive_entries(
    stream: BinaryIO, *, max_member_bytes: Optional[int] = None
) -> Iterator[ArchiveEntry]:
    """Yield entries of the gzip-compressed tar archive read from ``stream``.

    The generator is one-shot: the underlying stream is consumed as entries are
    produced.

    Args:
        stream: Readable binary stream positioned at the gzip header.
        max_member_bytes: Regular files larger than this are skipped with a
            warning instead of being buffered.

    Yields:
        :class:`ArchiveEntry` objects in archive order. Non-file members are
        reported with :attr:`EntryType.OTHER` and empty content.

    Raises:
        ArchiveCorruptError: If decompression or tar demultiplexing fails.
    """

    try:
        with tarfile.open(fileobj=stream, mode="r|gz") as archive:
            for member in archive:
                if not member.isfile():
                    yield ArchiveEntry(name=member.name, type=EntryType.OTHER)
                    continue
                if max_member_bytes is not None and member.size > max_member_bytes:
                    log_event(
                        LOGGER,
                        "warning",
                        "skipping oversized archive member",
                        stage="archive",
                        error_code="MEMBER_TOO_LARGE",
                        member=member.name,
                        size=member.size,
                        limit=max_member_bytes,
                    )
                    continue
                content = _read_member(archive, member)
                if content is None:
                    continue
                yield ArchiveEntry(name=member.name, type=EntryType.FILE, content=content)
    except _STRUCTURAL_ERRORS as exc:
        raise ArchiveCorruptError(f"Failed to decode documentation archive: {exc}") from exc


def read_archive(payload: bytes, *, max_member_bytes: Optional[int] = None) -> List[ArchiveEntry]:
    """Decode an in-memory archive payload into a list of entries."""

    return list(iter_archive_entries(io.BytesIO(payload), max_member_bytes=max_member_bytes))
