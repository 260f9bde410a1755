# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc",
#   "purpose": "Public API for Stardoc archive ingestion and API page rendering",
#   "sections": []
# }
# === /NAVMAP ===

"""Public API for the RegistryDocs Stardoc pipeline.

Fetches a module version's documentation archive, decodes the Stardoc
descriptors inside it, and renders them into an anchorable API page with a
synchronized navigation sidebar.

Example:
    >>> from RegistryDocs.Stardoc import build_doc_page, render_page
    >>> docs = build_doc_page("https://example.org/docs.tar.gz")  # doctest: +SKIP
    >>> html = render_page("rules_foo", "1.0.0", docs)  # doctest: +SKIP
"""

from __future__ import annotations

from .anchors import AnchorIndex, AnchorKind, anchor
from .archive import ArchiveEntry, EntryType, iter_archive_entries, read_archive
from .collection import (
    build_collection,
    build_doc_page,
    collection_from_json,
    collection_to_json,
    ingest_archive,
)
from .descriptor import decode_document, decode_module_info, encode_document, to_plain
from .errors import (
    ArchiveCorruptError,
    DescriptorDecodeError,
    FetchError,
    StardocError,
    UnknownAttributeTypeError,
    UserConfigError,
    VersionNotFoundError,
)
from .models import AttributeType, DocumentInfo
from .navigation import NavNode, build_nav_index, flatten_nav
from .page import render_page
from .renderer import attribute_type_link, describe_attribute_type, render_document
from .settings import StardocSettings, load_settings
from .site import build_module_site, select_version

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AnchorIndex",
    "AnchorKind",
    "anchor",
    "ArchiveEntry",
    "EntryType",
    "iter_archive_entries",
    "read_archive",
    "build_collection",
    "build_doc_page",
    "collection_from_json",
    "collection_to_json",
    "ingest_archive",
    "decode_document",
    "decode_module_info",
    "encode_document",
    "to_plain",
    "ArchiveCorruptError",
    "DescriptorDecodeError",
    "FetchError",
    "StardocError",
    "UnknownAttributeTypeError",
    "UserConfigError",
    "VersionNotFoundError",
    "AttributeType",
    "DocumentInfo",
    "NavNode",
    "build_nav_index",
    "flatten_nav",
    "render_page",
    "attribute_type_link",
    "describe_attribute_type",
    "render_document",
    "StardocSettings",
    "load_settings",
    "build_module_site",
    "select_version",
]
