# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.anchors",
#   "purpose": "Derive URL-fragment anchors for documented entities",
#   "sections": [
#     {"id": "anchorkind", "name": "AnchorKind", "anchor": "class-anchorkind", "kind": "class"},
#     {"id": "clean-name", "name": "clean_name", "anchor": "function-clean-name", "kind": "function"},
#     {"id": "anchor", "name": "anchor", "anchor": "function-anchor", "kind": "function"},
#     {"id": "anchorindex", "name": "AnchorIndex", "anchor": "class-anchorindex", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Anchor resolution shared by the navigation index and the renderer.

:func:`anchor` is the pure mapping from ``(kind, name)`` to a fragment id.
Because two entities can clean to the same id (``Foo`` and ``foo``), pages
never call it directly; they go through an :class:`AnchorIndex` built once per
collection, which hands out the first occurrence its natural id and suffixes
later duplicates with ``-2``, ``-3`` and so on. The navigation tree and the
rendered sections therefore always agree on every id.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Iterable, Iterator, Set, Tuple, Union

from .models import DocumentInfo

__all__ = ["AnchorKind", "clean_name", "anchor", "AnchorIndex", "iter_entities"]

_LEADING_SLASHES = re.compile(r"^/+")
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")

EMPTY_FILE_ANCHOR = "module"
EMPTY_NAME_PLACEHOLDER = "unnamed"


class AnchorKind(str, Enum):
    """Kinds of anchorable entities, in navigation order after ``FILE``."""

    FILE = "file"
    FUNCTION = "function"
    RULE = "rule"
    PROVIDER = "provider"
    ASPECT = "aspect"


def clean_name(raw_name: str) -> str:
    """Strip leading slashes, replace unsafe characters with ``-``, lowercase.

    Examples:
        >>> clean_name("//foo/bar.bzl")
        'foo-bar-bzl'
    """

    stripped = _LEADING_SLASHES.sub("", raw_name or "")
    return _UNSAFE_CHARS.sub("-", stripped).lower()


def anchor(kind: Union[AnchorKind, str], raw_name: str) -> str:
    """Return the canonical fragment id for an entity.

    Files use the cleaned name itself; other kinds are prefixed with the kind.
    A name that cleans to the empty string is replaced by ``module`` for files
    and ``unnamed`` for other kinds.

    Examples:
        >>> anchor("file", "//pkg/defs.bzl")
        'pkg-defs-bzl'
        >>> anchor("rule", "My_Rule")
        'rule-my_rule'
    """

    kind = AnchorKind(kind)
    cleaned = clean_name(raw_name)
    if kind is AnchorKind.FILE:
        return cleaned or EMPTY_FILE_ANCHOR
    return f"{kind.value}-{cleaned or EMPTY_NAME_PLACEHOLDER}"


# (document position, kind, item position); item position is 0 for files.
EntityKey = Tuple[int, AnchorKind, int]


def iter_entities(collection: Iterable[DocumentInfo]) -> Iterator[Tuple[EntityKey, str]]:
    """Yield ``(key, raw_name)`` for every anchorable entity in navigation order."""

    for doc_index, document in enumerate(collection):
        yield (doc_index, AnchorKind.FILE, 0), document.file
        groups = (
            (AnchorKind.FUNCTION, document.functions),
            (AnchorKind.RULE, document.rules),
            (AnchorKind.PROVIDER, document.providers),
            (AnchorKind.ASPECT, document.aspects),
        )
        for kind, items in groups:
            for item_index, item in enumerate(items):
                yield (doc_index, kind, item_index), item.name


class AnchorIndex:
    """Collision-free anchor assignment for one document collection."""

    def __init__(self, assignments: Dict[EntityKey, str]) -> None:
        self._assignments = dict(assignments)

    @classmethod
    def build(cls, collection: Iterable[DocumentInfo]) -> "AnchorIndex":
        """Assign ids in navigation order; later duplicates get numeric suffixes."""

        taken: Set[str] = set()
        assignments: Dict[EntityKey, str] = {}
        for key, raw_name in iter_entities(collection):
            base = anchor(key[1], raw_name)
            candidate = base
            suffix = 2
            while candidate in taken:
                candidate = f"{base}-{suffix}"
                suffix += 1
            taken.add(candidate)
            assignments[key] = candidate
        return cls(assignments)

    def lookup(self, doc_index: int, kind: Union[AnchorKind, str], item_index: int = 0) -> str:
        """Return the id assigned to an entity."""

        return self._assignments[(doc_index, AnchorKind(kind), item_index)]

    def ids(self) -> Tuple[str, ...]:
        """Return every assigned id in navigation order."""

        return tuple(self._assignments.values())

    def __len__(self) -> int:
        return len(self._assignments)
