# === NAVMAP v1 ===
# {
#   "module": "tests.conftest",
#   "purpose": "Shared pytest fixtures for the Stardoc suite",
#   "sections": [
#     {"id": "build-archive", "name": "build_archive", "anchor": "function-build-archive", "kind": "function"},
#     {"id": "fixtures", "name": "Fixtures", "anchor": "FIX", "kind": "fixtures"}
#   ]
# }
# === /NAVMAP ===

"""
Pytest Configuration

Puts ``src`` on ``sys.path``, provides in-memory archive builders and sample
documentation records, and restores global logging and HTTP client state
after every test.
"""

from __future__ import annotations

import io
import logging
import sys
import tarfile
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Tuple

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from RegistryDocs.Stardoc import net  # noqa: E402
from RegistryDocs.Stardoc.logging_utils import LOGGER_NAME  # noqa: E402
from RegistryDocs.Stardoc.models import (  # noqa: E402
    AspectInfo,
    AttributeInfo,
    AttributeType,
    DocumentInfo,
    FieldInfo,
    FunctionInfo,
    ParameterInfo,
    ProviderInfo,
    RuleInfo,
)

# (name, content) for files; (name, None) for directories.
ArchiveMember = Tuple[str, Optional[bytes]]


def build_archive(members: Iterable[ArchiveMember]) -> bytes:
    """Return a ``.tar.gz`` payload containing ``members`` in order."""

    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, content in members:
            info = tarfile.TarInfo(name)
            if content is None:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                archive.addfile(info)
                continue
            info.size = len(content)
            archive.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def _rule_document() -> DocumentInfo:
    return DocumentInfo(
        file="pkg/defs.binaryproto",
        rules=(
            RuleInfo(
                name="my_rule",
                attributes=(AttributeInfo(name="name", mandatory=True, type=AttributeType.LABEL),),
            ),
        ),
    )


def _full_document() -> DocumentInfo:
    return DocumentInfo(
        file="//lib:defs.bzl",
        module_docstring="Helpers for **foo** rules.\n\nSee https://example.org/foo.",
        functions=(
            FunctionInfo(
                name="foo_library",
                doc_string="Declares a foo library.",
                parameters=(
                    ParameterInfo(name="name", doc_string="Target name.", mandatory=True),
                    ParameterInfo(name="srcs", doc_string="Sources.", default_value="[]"),
                ),
                returns="The created target label.",
                deprecated="Use `foo_lib` instead.",
            ),
        ),
        rules=(
            RuleInfo(
                name="foo_binary",
                doc_string="Builds a foo binary.",
                attributes=(
                    AttributeInfo(name="name", mandatory=True, type=AttributeType.NAME),
                    AttributeInfo(
                        name="deps",
                        doc_string="Dependencies.",
                        default_value="[]",
                        type=AttributeType.LABEL_LIST,
                    ),
                    AttributeInfo(name="env", type=AttributeType.STRING_DICT, default_value="{}"),
                ),
            ),
        ),
        providers=(
            ProviderInfo(
                name="FooInfo",
                doc_string="Information about foo targets.",
                fields=(FieldInfo(name="srcs", doc_string="Transitive sources."),),
            ),
        ),
        aspects=(
            AspectInfo(
                name="foo_aspect",
                doc_string="Collects foo sources.",
                aspect_attributes=("deps",),
                attributes=(AttributeInfo(name="_tool", type=AttributeType.LABEL),),
            ),
        ),
    )


@pytest.fixture(scope="session")
def archive_factory() -> Callable[[Iterable[ArchiveMember]], bytes]:
    """Factory building in-memory ``.tar.gz`` payloads."""

    return build_archive


@pytest.fixture(scope="session")
def rule_document() -> DocumentInfo:
    """One rule ``my_rule`` with a mandatory LABEL attribute ``name``."""

    return _rule_document()


@pytest.fixture(scope="session")
def full_document() -> DocumentInfo:
    """A document exercising every entity kind and optional field."""

    return _full_document()


@pytest.fixture(autouse=True)
def _reset_global_state() -> Iterator[None]:
    """Undo logger configuration and shared HTTP clients left by a test."""

    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_stardoc_managed", False):
            logger.removeHandler(handler)
            handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    net.reset_http_client()
