# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.navigation",
#   "purpose": "Build the two-level table of contents for a document collection",
#   "sections": [
#     {"id": "navnode", "name": "NavNode", "anchor": "class-navnode", "kind": "class"},
#     {"id": "build-nav-index", "name": "build_nav_index", "anchor": "function-build-nav-index", "kind": "function"},
#     {"id": "flatten-nav", "name": "flatten_nav", "anchor": "function-flatten-nav", "kind": "function"},
#     {"id": "nav-to-json", "name": "nav_to_json", "anchor": "function-nav-to-json", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Navigation index: one file node per document, one child per entity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .anchors import AnchorIndex, AnchorKind
from .models import DocumentInfo

__all__ = ["NavNode", "build_nav_index", "flatten_nav", "nav_to_json"]

FALLBACK_FILE_LABEL = "Module"


@dataclass(frozen=True)
class NavNode:
    """A table-of-contents entry.

    Attributes:
        id: Anchor id of the section this entry points at.
        label: Text shown in the sidebar.
        kind: Entity kind.
        level: ``0`` for files, ``1`` for their children.
        children: Child entries; always empty below level 0.
    """

    id: str
    label: str
    kind: AnchorKind
    level: int
    children: Tuple["NavNode", ...] = ()

    @property
    def has_children(self) -> bool:
        return bool(self.children)


def build_nav_index(
    collection: Sequence[DocumentInfo], anchors: Optional[AnchorIndex] = None
) -> Tuple[NavNode, ...]:
    """Build the navigation tree in collection order.

    Children of a file node follow the fixed order functions, rules,
    providers, aspects, each group in declaration order. Parameters and
    attributes are not navigable.

    Args:
        collection: Sorted documents of one module version.
        anchors: Anchor assignment shared with the renderer; built from
            ``collection`` when omitted.

    Returns:
        Top-level file nodes.
    """

    if anchors is None:
        anchors = AnchorIndex.build(collection)
    nodes: List[NavNode] = []
    for doc_index, document in enumerate(collection):
        children: List[NavNode] = []
        groups = (
            (AnchorKind.FUNCTION, document.functions),
            (AnchorKind.RULE, document.rules),
            (AnchorKind.PROVIDER, document.providers),
            (AnchorKind.ASPECT, document.aspects),
        )
        for kind, items in groups:
            for item_index, item in enumerate(items):
                children.append(
                    NavNode(
                        id=anchors.lookup(doc_index, kind, item_index),
                        label=item.name,
                        kind=kind,
                        level=1,
                    )
                )
        nodes.append(
            NavNode(
                id=anchors.lookup(doc_index, AnchorKind.FILE),
                label=document.file or FALLBACK_FILE_LABEL,
                kind=AnchorKind.FILE,
                level=0,
                children=tuple(children),
            )
        )
    return tuple(nodes)


def flatten_nav(nodes: Iterable[NavNode]) -> List[NavNode]:
    """Return nodes depth-first (each file followed by its children)."""

    flat: List[NavNode] = []
    for node in nodes:
        flat.append(node)
        flat.extend(flatten_nav(node.children))
    return flat


def nav_to_json(nodes: Iterable[NavNode]) -> List[Dict[str, Any]]:
    """Return a JSON-safe representation of the navigation tree."""

    return [
        {
            "id": node.id,
            "label": node.label,
            "kind": node.kind.value,
            "level": node.level,
            "children": nav_to_json(node.children),
        }
        for node in nodes
    ]
