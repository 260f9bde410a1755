# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.errors",
#   "purpose": "Define the exception hierarchy used across Stardoc ingestion and rendering",
#   "sections": [
#     {"id": "base", "name": "Base Exceptions", "anchor": "BAS", "kind": "api"},
#     {"id": "ingestion", "name": "Fetch, Archive & Descriptor Errors", "anchor": "ING", "kind": "api"},
#     {"id": "rendering", "name": "Rendering Errors", "anchor": "REN", "kind": "api"},
#     {"id": "configuration", "name": "Configuration & Routing Errors", "anchor": "CFG", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Exception hierarchy shared across Stardoc ingestion, rendering, and site builds.

The pipeline spans HTTP retrieval, archive demultiplexing, descriptor
decoding, and HTML rendering. Each failure mode carries a stable upper-case
``error_code`` so structured logs and CLI output can be grouped without
parsing messages. Only some of these errors ever leave the pipeline: fetch
failures and corrupt archives are downgraded to empty documentation by
:func:`RegistryDocs.Stardoc.collection.build_doc_page`, and descriptor decode
failures are recovered per archive entry.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "StardocError",
    "FetchError",
    "ArchiveCorruptError",
    "DescriptorDecodeError",
    "UnknownAttributeTypeError",
    "VersionNotFoundError",
    "UserConfigError",
]


class StardocError(RuntimeError):
    """Base exception for Stardoc ingestion, rendering, and build failures."""

    error_code = "STARDOC"


class FetchError(StardocError):
    """Raised when a documentation archive cannot be retrieved."""

    error_code = "FETCH_FAILED"

    def __init__(self, message: str, *, url: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ArchiveCorruptError(StardocError):
    """Raised when the gzip stream or tar headers of an archive are invalid."""

    error_code = "ARCHIVE_CORRUPT"


class DescriptorDecodeError(StardocError):
    """Raised when a single descriptor payload cannot be decoded or validated."""

    error_code = "DESCRIPTOR_DECODE"


class UnknownAttributeTypeError(StardocError):
    """Raised when an attribute carries an UNKNOWN or unrecognized type."""

    error_code = "UNKNOWN_ATTRIBUTE_TYPE"

    def __init__(self, attribute_type: object, *, attribute: Optional[str] = None) -> None:
        label = getattr(attribute_type, "value", attribute_type)
        where = f" on attribute '{attribute}'" if attribute else ""
        super().__init__(f"Cannot describe attribute type {label}{where}")
        self.attribute_type = attribute_type
        self.attribute = attribute


class VersionNotFoundError(StardocError):
    """Raised when a requested module version has no version information."""

    error_code = "VERSION_NOT_FOUND"


class UserConfigError(StardocError):
    """Raised when CLI arguments or YAML configuration inputs are invalid."""

    error_code = "CONFIG"
