# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.page",
#   "purpose": "Assemble the full API documentation page and its static assets",
#   "sections": [
#     {"id": "environment", "name": "template_environment", "anchor": "function-template-environment", "kind": "function"},
#     {"id": "render-page", "name": "render_page", "anchor": "function-render-page", "kind": "function"},
#     {"id": "static-assets", "name": "iter_static_assets", "anchor": "function-iter-static-assets", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""HTML page assembly.

One page per module version: a title header, the navigation sidebar, and the
rendered documents, or a notice pointing at the registry's Stardoc
instructions when the version ships no API documentation. Navigation and
content share one :class:`~RegistryDocs.Stardoc.anchors.AnchorIndex`. The
scroll-sync timings from :class:`~RegistryDocs.Stardoc.settings.RenderCfg`
are handed to ``stardoc.js`` as ``data-*`` attributes on ``<body>``.
"""

from __future__ import annotations

import functools
import logging
from importlib import resources
from typing import Iterator, Optional, Sequence, Tuple

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from .anchors import AnchorIndex, AnchorKind
from .markup import MarkupRenderer, pygments_css
from .models import DocumentInfo
from .navigation import build_nav_index
from .renderer import render_collection
from .settings import RenderCfg

__all__ = [
    "PAGE_TEMPLATE",
    "STATIC_FILES",
    "PYGMENTS_CSS",
    "template_environment",
    "render_page",
    "iter_static_assets",
]

LOGGER = logging.getLogger("RegistryDocs.Stardoc.page")

PAGE_TEMPLATE = "page.html.j2"
STATIC_FILES = ("stardoc.js", "stardoc.css")
PYGMENTS_CSS = "pygments.css"

KIND_ICONS = {
    AnchorKind.FILE: "",
    AnchorKind.FUNCTION: "⚙",
    AnchorKind.RULE: "🔧",
    AnchorKind.PROVIDER: "📦",
    AnchorKind.ASPECT: "🔍",
}


@functools.lru_cache(maxsize=1)
def template_environment() -> Environment:
    """Return the (cached, thread-safe) Jinja2 environment for page templates."""

    env = Environment(
        loader=PackageLoader("RegistryDocs.Stardoc", "templates"),
        autoescape=select_autoescape(enabled_extensions=("html", "j2")),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.globals["kind_icons"] = {kind.value: icon for kind, icon in KIND_ICONS.items()}
    return env


def render_page(
    module_name: str,
    version: str,
    collection: Sequence[DocumentInfo],
    *,
    versions: Sequence[str] = (),
    render_cfg: Optional[RenderCfg] = None,
    root_prefix: str = "../",
    markup: Optional[MarkupRenderer] = None,
) -> str:
    """Render the documentation page of one module version.

    Args:
        module_name: Registry module name shown in the header.
        version: Version being rendered.
        collection: Sorted documents for ``version``; may be empty.
        versions: All versions (latest first) for the version switcher.
        render_cfg: Highlighting and client-side timing settings.
        root_prefix: Relative path from the page to the module directory
            (``"../"`` for version pages, ``""`` for the module index).
        markup: Docstring renderer; a fresh one is created when omitted.

    Returns:
        The complete HTML document.

    Raises:
        UnknownAttributeTypeError: Propagated from the renderer.
    """

    cfg = render_cfg or RenderCfg()
    anchors = AnchorIndex.build(collection)
    nav = build_nav_index(collection, anchors)
    documents = render_collection(collection, anchors=anchors, markup=markup or MarkupRenderer())
    LOGGER.debug(
        "rendering page",
        extra={
            "stage": "render",
            "extra_fields": {
                "module": module_name,
                "version": version,
                "documents": len(documents),
                "anchors": len(anchors),
            },
        },
    )
    template = template_environment().get_template(PAGE_TEMPLATE)
    return template.render(
        module_name=module_name,
        version=version,
        versions=list(versions),
        documents=documents,
        nav=nav,
        render=cfg,
        root_prefix=root_prefix,
        static_prefix=f"{root_prefix}../static/",
    )


def _static_text(name: str) -> str:
    return (resources.files("RegistryDocs.Stardoc") / "static" / name).read_text(encoding="utf-8")


def iter_static_assets(pygments_style: str = "monokai") -> Iterator[Tuple[str, str]]:
    """Yield ``(file name, text)`` for every asset the page references."""

    for name in STATIC_FILES:
        yield name, _static_text(name)
    yield PYGMENTS_CSS, pygments_css(pygments_style)
