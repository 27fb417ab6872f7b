"""
Link Extraction and Resolution
==============================

Finds the links in a document body and decides whether the internal ones
point at something the generator will actually produce.

Recognised link syntax
----------------------
- inline markdown links and images: ``[text](/cv/)``, ``![alt](/img.png "t")``
- reference definitions: ``[cv]: /cv/``
- HTML attributes: ``<a href="...">``, ``<img src="...">``
- Liquid tags: ``{% link _pages/cv.md %}`` (by source path) and
  ``{% post_url 2024-03-01-qaoa %}`` (by post name)

Code blocks (fenced, indented or Liquid ``highlight``), code spans and HTML
comments are masked first, so the Python snippets in a walkthrough post
are never mistaken for links. Kramdown footnote definitions (``[^1]: ...``)
are not reference links.

Liquid variables ``{{ site.url }}`` and ``{{ site.baseurl }}`` are accepted
as prefixes of internal links; any other ``{{ ... }}`` expression cannot be
resolved statically and is skipped.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from typing import List, Tuple, TYPE_CHECKING
from urllib.parse import unquote

from .config import SiteConfig
from .documents import output_path

if TYPE_CHECKING:
    from .documents import Document, Site


# Link kinds
INTERNAL = "internal"
EXTERNAL = "external"
ANCHOR = "anchor"
MAIL = "mail"
TEMPLATE = "template"

# Resolution statuses
OK = "ok"
MISSING = "missing"
UNPUBLISHED = "unpublished"
SKIPPED = "skipped"

FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
CODE_SPAN_RE = re.compile(r"(`+)(?:(?!\1).)+?\1")
INDENTED_RE = re.compile(r"^(?: {4}|\t)")
LIST_ITEM_RE = re.compile(r"^ {0,3}(?:[-*+]|\d+[.)])\s")
# Liquid blocks whose contents are never rendered as markdown links
LIQUID_BLOCK_RE = re.compile(
    r"\{%-?\s*(highlight|raw|comment)\b.*?-?%\}.*?\{%-?\s*end\1\s*-?%\}", re.DOTALL
)
HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
LIQUID_VAR_RE = re.compile(r"\{\{\s*site\.(url|baseurl)\s*\}\}")
LIQUID_TAG_RE = re.compile(r"\{%-?\s*(link|post_url)\s+(\S+?)\s*-?%\}")

_LINK_TEXT = r"\[(?:[^\[\]]|\[[^\[\]]*\])*\]"
_DESTINATION = r"(<[^>\n]*>|(?:[^()\s]|\([^()\s]*\))+)"
_TITLE = r"(?:\s+(?:\"[^\"]*\"|'[^']*'|\([^)]*\)))?"
INLINE_RE = re.compile(r"(!?)" + _LINK_TEXT + r"\(\s*" + _DESTINATION + _TITLE + r"\s*\)")
REFERENCE_RE = re.compile(r"^ {0,3}\[(?!\^)[^\]]+\]:\s*<?([^\s>]+)>?")
HTML_ATTR_RE = re.compile(r"\b(?:href|src)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')", re.IGNORECASE)

SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")

SITE_URL_MARK = "{{site.url}}"
BASEURL_MARK = "{{site.baseurl}}"


@dataclass
class Link:
    """
    A link found in a document body.

    Attributes
    ----------
    target : str
        Link destination as written (Liquid site variables normalised to
        ``{{site.url}}``/``{{site.baseurl}}``).
    line : int
        Line number in the source file.
    kind : str
        Syntax it was found in: ``inline``, ``image``, ``reference``,
        ``html``, ``liquid_link`` or ``post_url``.
    """
    target: str
    line: int
    kind: str


def _blank_out(match: "re.Match[str]") -> str:
    return re.sub(r"[^\n]", " ", match.group(0))


def _mask_code(body: str) -> List[str]:
    """
    Body lines with everything that is not rendered as markdown blanked.

    Covers fenced and indented code blocks, code spans, HTML comments and
    Liquid ``highlight``/``raw``/``comment`` blocks. Line count is preserved.
    """
    masked = []
    fence = None
    in_indented = False
    in_list = False
    prev_blank = True
    for line in body.splitlines():
        blank = not line.strip()
        indented = INDENTED_RE.match(line) is not None
        match = FENCE_RE.match(line)

        if fence is not None:
            if match and match.group(1)[0] == fence[0] and len(match.group(1)) >= len(fence):
                fence = None
            masked.append("")
            prev_blank = False
            continue
        if in_indented and (blank or indented):
            masked.append("")
            prev_blank = blank
            continue
        in_indented = False

        if match:
            fence = match.group(1)
            masked.append("")
            continue
        # an indented block cannot interrupt a paragraph or continue a list item
        if indented and not blank and prev_blank and not in_list:
            in_indented = True
            masked.append("")
            prev_blank = False
            continue
        if not blank and not indented:
            in_list = LIST_ITEM_RE.match(line) is not None or (in_list and not prev_blank)

        masked.append(CODE_SPAN_RE.sub(lambda m: " " * len(m.group(0)), line))
        prev_blank = blank

    text = "\n".join(masked)
    text = LIQUID_BLOCK_RE.sub(_blank_out, text)
    text = HTML_COMMENT_RE.sub(_blank_out, text)
    return text.split("\n")


def extract_links(body: str, first_line: int = 1) -> List[Link]:
    """
    Find every link in a markdown/HTML body.

    Parameters
    ----------
    body : str
        Document body (front-matter already removed).
    first_line : int
        Line number of the first body line, so that reported lines match
        the source file.

    Returns
    -------
    List[Link]
        In order of appearance.
    """
    links = []
    for offset, line in enumerate(_mask_code(body)):
        lineno = first_line + offset
        line = LIQUID_VAR_RE.sub(lambda m: "{{site.%s}}" % m.group(1), line)

        found = []
        for match in LIQUID_TAG_RE.finditer(line):
            kind = "liquid_link" if match.group(1) == "link" else "post_url"
            found.append((match.start(), Link(match.group(2), lineno, kind)))
        line = LIQUID_TAG_RE.sub(lambda m: " " * len(m.group(0)), line)

        ref = REFERENCE_RE.match(line)
        if ref:
            found.append((ref.start(1), Link(ref.group(1), lineno, "reference")))
        else:
            for match in INLINE_RE.finditer(line):
                target = match.group(2).strip()
                if target.startswith("<") and target.endswith(">"):
                    target = target[1:-1].strip()
                if target:
                    kind = "image" if match.group(1) else "inline"
                    found.append((match.start(2), Link(target, lineno, kind)))

        for match in HTML_ATTR_RE.finditer(line):
            target = match.group(1) if match.group(1) is not None else match.group(2)
            found.append((match.start(), Link(target.strip(), lineno, "html")))

        links.extend(link for _, link in sorted(found, key=lambda item: item[0]))
    return links


# =============================================================================
# CLASSIFICATION
# =============================================================================

def _split_site_prefix(target: str, config: SiteConfig) -> Tuple[bool, str]:
    """Strip site url/baseurl prefixes; return (was_prefixed, remainder)."""
    prefixed = False
    if target.startswith(SITE_URL_MARK):
        target = target[len(SITE_URL_MARK):]
        prefixed = True
    if target.startswith(BASEURL_MARK):
        target = target[len(BASEURL_MARK):]
        prefixed = True
    if config.url and (target == config.url or target.startswith(config.url + "/")):
        target = target[len(config.url):] or "/"
        prefixed = True
    return prefixed, target


def classify(target: str, config: SiteConfig) -> str:
    """
    Classify a link target.

    Returns
    -------
    str
        One of ``internal``, ``external``, ``anchor``, ``mail``, ``template``.
    """
    prefixed, rest = _split_site_prefix(target.strip(), config)
    if "{{" in rest or "{%" in rest:
        return TEMPLATE
    if prefixed:
        return INTERNAL
    if rest == "" or rest.startswith("#"):
        return ANCHOR
    if rest.lower().startswith(("mailto:", "tel:")):
        return MAIL
    if rest.startswith("//") or SCHEME_RE.match(rest):
        return EXTERNAL
    return INTERNAL


def internal_path(target: str, config: SiteConfig) -> str:
    """The URL path of an internal target, without site prefixes, query or fragment."""
    _, path = _split_site_prefix(target.strip(), config)
    path = path.split("#", 1)[0].split("?", 1)[0]
    if config.baseurl and (path == config.baseurl or path.startswith(config.baseurl + "/")):
        path = path[len(config.baseurl):] or "/"
    return unquote(path)


def _join(permalink: str, path: str) -> str:
    if path.startswith("/"):
        joined = path
    else:
        base = permalink if permalink.endswith("/") else posixpath.dirname(permalink) + "/"
        joined = base + path
    trailing = joined.endswith("/") or joined.endswith("/.")
    joined = posixpath.normpath(joined)
    if joined.startswith("//"):
        joined = joined[1:]
    if trailing and not joined.endswith("/"):
        joined += "/"
    return joined


def _candidates(path: str) -> List[str]:
    out = output_path(path)
    candidates = [out, path.lstrip("/")]
    if not path.endswith("/"):
        candidates.append(path.strip("/") + "/index.html")
    return candidates


def resolve(link: Link, document: "Document", site: "Site") -> Tuple[str, str]:
    """
    Decide whether a link points at something the generator produces.

    Returns
    -------
    status : str
        ``ok``, ``missing``, ``unpublished`` (the target exists but is not
        published) or ``skipped`` (not an internal link).
    detail : str
        The resolved path that was looked up.
    """
    if link.kind == "liquid_link":
        rel = link.target.lstrip("/")
        doc = site.find_source(rel)
        if doc is not None:
            return (OK if doc.published else UNPUBLISHED), rel
        return (OK if rel in site.static_files else MISSING), rel

    if link.kind == "post_url":
        doc = site.find_post(link.target)
        if doc is None:
            return MISSING, link.target
        return (OK if doc.published else UNPUBLISHED), link.target

    if classify(link.target, site.config) != INTERNAL:
        return SKIPPED, link.target

    path = internal_path(link.target, site.config)
    if path == "":
        return OK, document.permalink
    path = _join(document.permalink, path)

    published = site.by_output_path(published_only=True)
    every = site.by_output_path(published_only=False)
    static = set(site.static_files)

    candidates = _candidates(path)
    if any(c in published or c in static for c in candidates):
        return OK, path
    if any(c in every for c in candidates):
        return UNPUBLISHED, path
    return MISSING, path
