# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.collection",
#   "purpose": "Aggregate decoded descriptors into the sorted documentation set of a module version",
#   "sections": [
#     {"id": "sort-key", "name": "_sort_key", "anchor": "function-sort-key", "kind": "function"},
#     {"id": "build-collection", "name": "build_collection", "anchor": "function-build-collection", "kind": "function"},
#     {"id": "ingest-archive", "name": "ingest_archive", "anchor": "function-ingest-archive", "kind": "function"},
#     {"id": "build-doc-page", "name": "build_doc_page", "anchor": "function-build-doc-page", "kind": "function"},
#     {"id": "collection-to-json", "name": "collection_to_json", "anchor": "function-collection-to-json", "kind": "function"},
#     {"id": "collection-from-json", "name": "collection_from_json", "anchor": "function-collection-from-json", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""
Document Collection Builder

Turns the entries of one documentation archive into the sorted, immutable
documentation set of a module version. Ordering is by ``file`` under plain
ordinal string comparison; documents that share a ``file`` are ordered by
their canonical JSON form, so the result never depends on archive arrival
order.

Failure policy:
- an entry that is not a descriptor is ignored;
- a descriptor that fails to decode is skipped (debug log);
- a corrupt archive raises from :func:`ingest_archive` but is downgraded to an
  empty result (warning) by :func:`build_doc_page`;
- an unavailable archive yields an empty result (warning).
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import httpx

from .archive import ArchiveEntry, EntryType, read_archive
from .descriptor import DESCRIPTOR_SUFFIX, decode_document, is_descriptor_entry
from .errors import ArchiveCorruptError, DescriptorDecodeError, FetchError
from .logging_utils import log_event
from .models import DocumentInfo
from .net import download_archive
from .settings import StardocSettings

__all__ = [
    "DocumentCollection",
    "build_collection",
    "ingest_archive",
    "build_doc_page",
    "collection_to_json",
    "collection_from_json",
]

LOGGER = logging.getLogger("RegistryDocs.Stardoc.collection")

DocumentCollection = Tuple[DocumentInfo, ...]


def _sort_key(document: DocumentInfo) -> Tuple[str, str]:
    return document.file, document.model_dump_json(by_alias=True)


def build_collection(
    entries: Iterable[ArchiveEntry], *, suffix: str = DESCRIPTOR_SUFFIX
) -> DocumentCollection:
    """Decode descriptor entries and return them sorted by ``file``.

    Args:
        entries: Archive entries in arrival order.
        suffix: Name suffix identifying descriptor entries.

    Returns:
        Sorted tuple of documents; empty when nothing decodes.
    """

    documents: List[DocumentInfo] = []
    skipped = 0
    for entry in entries:
        if entry.type is not EntryType.FILE or not is_descriptor_entry(entry.name, suffix=suffix):
            continue
        try:
            documents.append(decode_document(entry.content))
        except DescriptorDecodeError as exc:
            skipped += 1
            LOGGER.debug(
                "skipping undecodable descriptor",
                extra={"stage": "decode", "extra_fields": {"member": entry.name, "error": str(exc)}},
            )
            continue
    if skipped:
        LOGGER.info(
            "decoded %d descriptors, skipped %d",
            len(documents),
            skipped,
            extra={"stage": "decode"},
        )
    return tuple(sorted(documents, key=_sort_key))


def ingest_archive(
    payload: bytes, *, settings: Optional[StardocSettings] = None
) -> DocumentCollection:
    """Decode a compressed archive payload into a document collection.

    Raises:
        ArchiveCorruptError: If the archive itself cannot be decoded.
    """

    cfg = settings or StardocSettings()
    entries = read_archive(payload, max_member_bytes=cfg.archive.max_member_bytes)
    return build_collection(entries, suffix=cfg.archive.descriptor_suffix)


def build_doc_page(
    docs_url: str,
    *,
    client: Optional[httpx.Client] = None,
    settings: Optional[StardocSettings] = None,
) -> DocumentCollection:
    """Fetch and decode the documentation archive at ``docs_url``.

    This is the entry point used by page generation. It never raises for
    unavailable or corrupt archives: both are logged as warnings and produce
    an empty collection, so a module without usable docs still gets a page.

    Args:
        docs_url: Location of the ``.tar.gz`` documentation archive.
        client: Optional HTTPX client (tests inject a ``MockTransport`` client).
        settings: Effective settings; defaults are used when omitted.

    Returns:
        Sorted documentation set, possibly empty.
    """

    cfg = settings or StardocSettings()
    try:
        payload = download_archive(docs_url, client=client, config=cfg.http)
    except FetchError as exc:
        log_event(
            LOGGER,
            "warning",
            "failed to fetch docs archive",
            stage="fetch",
            error_code=exc.error_code,
            url=docs_url,
            status_code=exc.status_code,
            error=str(exc),
        )
        return ()
    try:
        collection = ingest_archive(payload, settings=cfg)
    except ArchiveCorruptError as exc:
        log_event(
            LOGGER,
            "warning",
            "docs archive is corrupt",
            stage="archive",
            error_code=exc.error_code,
            url=docs_url,
            error=str(exc),
        )
        return ()
    LOGGER.info(
        "ingested %d documents from %s",
        len(collection),
        docs_url,
        extra={"stage": "ingest", "extra_fields": {"url": docs_url, "documents": len(collection)}},
    )
    return collection


def collection_to_json(collection: Sequence[DocumentInfo]) -> List[dict[str, Any]]:
    """Return the JSON interchange form (camelCase value trees) of a collection."""

    return [document.to_json_dict() for document in collection]


def collection_from_json(data: Iterable[Any]) -> DocumentCollection:
    """Rebuild a collection from :func:`collection_to_json` output."""

    return tuple(DocumentInfo.model_validate(item) for item in data)
