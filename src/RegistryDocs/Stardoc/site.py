# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.site",
#   "purpose": "Build the static API documentation site of a registry module",
#   "sections": [
#     {"id": "select-version", "name": "select_version", "anchor": "function-select-version", "kind": "function"},
#     {"id": "atomic-write", "name": "_atomic_write_text", "anchor": "function-atomic-write-text", "kind": "function"},
#     {"id": "build-version-page", "name": "build_version_page", "anchor": "function-build-version-page", "kind": "function"},
#     {"id": "write-static-assets", "name": "write_static_assets", "anchor": "function-write-static-assets", "kind": "function"},
#     {"id": "build-module-site", "name": "build_module_site", "anchor": "function-build-module-site", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""
Site Build Glue

Connects the routing inputs (module name, versions latest-first, optional
docs URL per version) to the ingestion pipeline and writes immutable build
artifacts::

    <output>/static/{stardoc.js, stardoc.css, pygments.css}
    <output>/<module>/index.html                 # selected (default: latest) version
    <output>/<module>/<version>/index.html
    <output>/<module>/<version>/docs.json        # normalized document collection
    <output>/<module>/<version>/nav.json         # navigation tree

Versions are ingested independently on a thread pool; the only shared object
is the HTTP client. Every file is written through a temporary sibling and
``Path.replace`` so readers never observe partial artifacts.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

import httpx

from .collection import DocumentCollection, build_doc_page, collection_to_json
from .errors import UserConfigError, VersionNotFoundError
from .executors import create_executor
from .navigation import build_nav_index, nav_to_json
from .page import iter_static_assets, render_page
from .settings import StardocSettings

__all__ = [
    "VersionPage",
    "SiteBuildResult",
    "select_version",
    "build_version_page",
    "write_static_assets",
    "build_module_site",
]

LOGGER = logging.getLogger("RegistryDocs.Stardoc.site")

STATIC_DIR = "static"
INDEX_HTML = "index.html"
DOCS_JSON = "docs.json"
NAV_JSON = "nav.json"


@dataclass(frozen=True)
class VersionPage:
    """Artifacts produced for one module version."""

    version: str
    directory: Path
    collection: DocumentCollection

    @property
    def has_docs(self) -> bool:
        return bool(self.collection)


@dataclass(frozen=True)
class SiteBuildResult:
    module_name: str
    selected_version: str
    module_dir: Path
    pages: Tuple[VersionPage, ...]


def select_version(versions: Sequence[str], selected: Optional[str] = None) -> str:
    """Return ``selected`` if listed, else the latest (first) version.

    Raises:
        VersionNotFoundError: If ``versions`` is empty or ``selected`` is not
            one of them.
    """

    if not versions:
        raise VersionNotFoundError("Module has no versions")
    if selected is None:
        return versions[0]
    if selected not in versions:
        raise VersionNotFoundError(f"Version {selected} not found")
    return selected


def _check_segment(value: str, what: str) -> str:
    if not value or value in {".", ".."} or "/" in value or "\\" in value:
        raise UserConfigError(f"Invalid {what} for an output path: {value!r}")
    return value


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        delete=False,
    ) as handle:
        handle.write(content)
        handle.flush()
        os.fsync(handle.fileno())
        temp_name = handle.name
    try:
        Path(temp_name).replace(path)
    except OSError:
        Path(temp_name).unlink(missing_ok=True)
        raise


def _atomic_write_json(path: Path, payload: object) -> None:
    _atomic_write_text(path, json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


def build_version_page(
    module_name: str,
    version: str,
    docs_url: Optional[str],
    *,
    module_dir: Path,
    versions: Sequence[str] = (),
    settings: Optional[StardocSettings] = None,
    client: Optional[httpx.Client] = None,
) -> VersionPage:
    """Ingest and render one version into ``module_dir/<version>/``.

    A version without ``docs_url`` gets the no-documentation page.
    """

    cfg = settings or StardocSettings()
    directory = module_dir / _check_segment(version, "version")
    collection: DocumentCollection = ()
    if docs_url:
        collection = build_doc_page(docs_url, client=client, settings=cfg)
    html = render_page(
        module_name,
        version,
        collection,
        versions=versions,
        render_cfg=cfg.render,
        root_prefix="../",
    )
    _atomic_write_text(directory / INDEX_HTML, html)
    _atomic_write_json(directory / DOCS_JSON, collection_to_json(collection))
    _atomic_write_json(directory / NAV_JSON, nav_to_json(build_nav_index(collection)))
    LOGGER.info(
        "built %s@%s (%d documents)",
        module_name,
        version,
        len(collection),
        extra={
            "stage": "build",
            "extra_fields": {"module": module_name, "version": version, "documents": len(collection)},
        },
    )
    return VersionPage(version=version, directory=directory, collection=collection)


def write_static_assets(output_dir: Path, *, pygments_style: str = "monokai") -> List[Path]:
    """Write the page scripts and stylesheets under ``output_dir/static``."""

    written = []
    for name, text in iter_static_assets(pygments_style):
        path = output_dir / STATIC_DIR / name
        _atomic_write_text(path, text)
        written.append(path)
    return written


def build_module_site(
    module_name: str,
    docs: Mapping[str, Optional[str]],
    *,
    selected: Optional[str] = None,
    settings: Optional[StardocSettings] = None,
    client: Optional[httpx.Client] = None,
    output_dir: Optional[Path] = None,
) -> SiteBuildResult:
    """Build every version page of a module plus its index page.

    Args:
        module_name: Registry module name.
        docs: Version to docs URL (``None`` when a version has no docs), in
            descending version order; the first key is the latest version.
        selected: Version rendered at ``<module>/index.html``; latest if omitted.
        settings: Effective settings (output dir, workers, render options).
        client: Optional HTTPX client shared by all version builds.
        output_dir: Overrides ``settings.build.output_dir``.

    Returns:
        Summary of written version pages in ``docs`` order.

    Raises:
        VersionNotFoundError: If ``selected`` is unknown or ``docs`` is empty.
        UnknownAttributeTypeError: If any version has an unrenderable attribute.
    """

    cfg = settings or StardocSettings()
    versions = list(docs)
    target = select_version(versions, selected)
    root = Path(output_dir or cfg.build.output_dir)
    module_dir = root / _check_segment(module_name, "module name")

    def build(version: str) -> VersionPage:
        return build_version_page(
            module_name,
            version,
            docs[version],
            module_dir=module_dir,
            versions=versions,
            settings=cfg,
            client=client,
        )

    executor, needs_shutdown = create_executor(min(cfg.build.workers, len(versions)))
    try:
        if executor is None:
            pages = [build(version) for version in versions]
        else:
            submitted = [executor.submit(build, version) for version in versions]
            pages = [future.result() for future in submitted]
    finally:
        if needs_shutdown and executor is not None:
            executor.shutdown(wait=True, cancel_futures=True)

    write_static_assets(root, pygments_style=cfg.render.pygments_style)
    by_version = {page.version: page for page in pages}
    _atomic_write_text(
        module_dir / INDEX_HTML,
        render_page(
            module_name,
            target,
            by_version[target].collection,
            versions=versions,
            render_cfg=cfg.render,
            root_prefix="",
        ),
    )
    LOGGER.info(
        "module site written to %s",
        module_dir,
        extra={
            "stage": "build",
            "extra_fields": {
                "module": module_name,
                "versions": len(pages),
                "selected": target,
                "with_docs": sum(1 for page in pages if page.has_docs),
            },
        },
    )
    return SiteBuildResult(
        module_name=module_name,
        selected_version=target,
        module_dir=module_dir,
        pages=tuple(pages),
    )
