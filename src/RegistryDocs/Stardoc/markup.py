# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.markup",
#   "purpose": "Render Stardoc docstrings (Markdown) into safe HTML fragments",
#   "sections": [
#     {"id": "extension", "name": "StardocMarkdownExtension", "anchor": "class-stardocmarkdownextension", "kind": "class"},
#     {"id": "markuprenderer", "name": "MarkupRenderer", "anchor": "class-markuprenderer", "kind": "class"},
#     {"id": "pygments-css", "name": "pygments_css", "anchor": "function-pygments-css", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Docstring markup rendering.

Docstrings are GitHub-flavoured Markdown as written by rule authors. The
renderer is Python-Markdown with tables, fenced code, Pygments highlighting
and hard line breaks, plus :class:`StardocMarkdownExtension`, which adds the
pieces the stock extensions lack:

* ``~~text~~`` strikethrough;
* bare ``http(s)://`` autolinks;
* ``target="_blank" rel="noopener noreferrer"`` on external links (an
  ``http``, ``https`` or ``mailto`` href, or a protocol-relative ``//`` one);
* link and image targets with any other scheme (``javascript:``, ``data:``)
  dropped, leaving the text or alt in place;
* ``starlark``/``bazel``/``bzl`` code fences highlighted as Python;
* raw HTML in docstrings rendered as text.

A :class:`markdown.Markdown` instance keeps per-document state, so one
:class:`MarkupRenderer` must not be shared between threads.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as etree
from typing import List, Optional

import markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor, SimpleTagInlineProcessor
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor
from markdown.util import AtomicString
from markupsafe import Markup
from pygments.formatters import HtmlFormatter

__all__ = [
    "CODE_CSS_CLASS",
    "LANGUAGE_ALIASES",
    "StardocMarkdownExtension",
    "MarkupRenderer",
    "is_external_href",
    "is_safe_href",
    "pygments_css",
]

CODE_CSS_CLASS = "codehilite"
LANGUAGE_ALIASES = {"starlark": "python", "bazel": "python", "bzl": "python"}

SAFE_SCHEMES = frozenset({"http", "https", "mailto"})

_SCHEME = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):")
# browsers ignore these while reading a scheme
_URL_NOISE = re.compile(r"[\x00-\x20\x7f]+")
_STRIKE_RE = r"(~~)(.+?)~~"
_BARE_URL_RE = r"(?<![\w/\"'=<(])(https?://[^\s<>()\[\]]*[^\s<>()\[\].,;:!?'\"])"
_FENCE_LANG = re.compile(
    r"^(?P<fence>[ \t]*(?:`{3,}|~{3,})[ \t]*\{?[ \t]*\.?)(?P<lang>starlark|bazel|bzl)\b",
    re.IGNORECASE,
)


def _scheme(href: str) -> Optional[str]:
    match = _SCHEME.match(_URL_NOISE.sub("", href))
    return match.group(1).lower() if match else None


def is_safe_href(href: Optional[str]) -> bool:
    """Return ``True`` for relative/fragment URLs and :data:`SAFE_SCHEMES` URLs."""

    if not href:
        return True
    scheme = _scheme(href)
    return scheme is None or scheme in SAFE_SCHEMES


def is_external_href(href: Optional[str]) -> bool:
    """Return ``True`` when ``href`` is a safe URL that leaves the page."""

    if not href:
        return False
    if href.startswith("//"):
        return True
    return _scheme(href) in SAFE_SCHEMES


class _BareUrlInlineProcessor(InlineProcessor):
    ANCESTOR_EXCLUDES = ("a",)

    def handleMatch(self, m, data):  # noqa: N802 - Python-Markdown API
        url = m.group(1)
        element = etree.Element("a")
        element.set("href", url)
        element.text = AtomicString(url)
        return element, m.start(0), m.end(0)


class _LinkTreeprocessor(Treeprocessor):
    def run(self, root):
        for element in root.iter("a"):
            href = element.get("href")
            if not is_safe_href(href):
                del element.attrib["href"]
            elif is_external_href(href):
                element.set("target", "_blank")
                element.set("rel", "noopener noreferrer")
        for element in root.iter("img"):
            if not is_safe_href(element.get("src")):
                del element.attrib["src"]
        return None


class _FenceLanguagePreprocessor(Preprocessor):
    def run(self, lines: List[str]) -> List[str]:
        return [_FENCE_LANG.sub(self._alias, line) for line in lines]

    @staticmethod
    def _alias(match: "re.Match[str]") -> str:
        return match.group("fence") + LANGUAGE_ALIASES[match.group("lang").lower()]


class StardocMarkdownExtension(Extension):
    """Docstring dialect additions on top of the stock extensions."""

    def extendMarkdown(self, md):  # noqa: N802 - Python-Markdown API
        # after whitespace normalization (30), before fenced_code_block (25)
        md.preprocessors.register(_FenceLanguagePreprocessor(md), "stardoc_fence_alias", 28)
        md.inlinePatterns.register(SimpleTagInlineProcessor(_STRIKE_RE, "del"), "stardoc_del", 65)
        md.inlinePatterns.register(_BareUrlInlineProcessor(_BARE_URL_RE, md), "stardoc_bare_url", 15)
        # after inline (20) so every <a> exists
        md.treeprocessors.register(_LinkTreeprocessor(md), "stardoc_links", 8)
        md.preprocessors.deregister("html_block")
        md.inlinePatterns.deregister("html")


class MarkupRenderer:
    """Convert docstrings into :class:`markupsafe.Markup` HTML fragments."""

    def __init__(self) -> None:
        self._md = markdown.Markdown(
            extensions=[
                "markdown.extensions.tables",
                "markdown.extensions.fenced_code",
                "markdown.extensions.codehilite",
                "markdown.extensions.nl2br",
                StardocMarkdownExtension(),
            ],
            extension_configs={
                "markdown.extensions.codehilite": {
                    "css_class": CODE_CSS_CLASS,
                    "guess_lang": False,
                    "use_pygments": True,
                }
            },
            output_format="html",
        )

    def render(self, text: Optional[str]) -> Markup:
        """Render ``text``; ``None`` and empty strings give an empty fragment."""

        if not text:
            return Markup("")
        self._md.reset()
        return Markup(self._md.convert(text))

    __call__ = render


def pygments_css(style: str = "monokai", selector: str = f".{CODE_CSS_CLASS}") -> str:
    """Return the Pygments stylesheet matching highlighted code blocks."""

    return HtmlFormatter(style=style).get_style_defs(selector)
