"""
Front-Matter Parsing
====================

A content file opens with a YAML block fenced by ``---`` lines. The block
is a mapping of string keys to scalars or nested values; everything after
the closing fence is the body handed to the markdown renderer::

    ---
    layout: about
    title: about
    permalink: /
    profile:
      align: right
      image: prof_pic.jpg
    ---
    Body text...

Only files that *start* with a fence have front-matter. A file without one
is copied verbatim by the generator (a static file), so ``split_front_matter``
returns ``None`` for the YAML text in that case rather than raising.

Recognised keys
---------------
=============  ==========================================================
layout         name of the template that wraps the body
permalink      URL path the page is published at (must start with ``/``)
profile        nested mapping used by the landing page (image, address...)
published      ``false`` keeps the page out of the built site
title          page title
description    one-line summary used in listings and meta tags
date           post date, overrides the date in the post file name
categories     string (space separated) or list of strings
tags           string (space separated) or list of strings
=============  ==========================================================

Any other key is kept untouched in ``FrontMatter.extra``.
"""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml


KNOWN_KEYS = (
    "layout", "permalink", "profile", "published", "title",
    "description", "date", "categories", "category", "tags",
)

FENCE_OPEN = "---"
FENCE_CLOSE = ("---", "...")

# Jekyll accepts "YYYY-MM-DD", optionally followed by a time and a UTC offset
DATE_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"(?:[ T]\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?\s*(?:Z|[+-]\d{2}:?\d{2})?)?$"
)


class FrontMatterError(ValueError):
    """Raised when a front-matter block cannot be parsed."""

    def __init__(self, message: str, source: Optional[str] = None, line: Optional[int] = None):
        self.message = message
        self.source = source
        self.line = line
        where = ""
        if source is not None:
            where = f"{source}:{line}: " if line is not None else f"{source}: "
        elif line is not None:
            where = f"line {line}: "
        super().__init__(f"{where}{message}")


@dataclass
class FrontMatter:
    """
    Parsed front-matter of one document.

    Attributes
    ----------
    data : Dict[str, Any]
        The raw mapping as loaded by ``yaml.safe_load``.

    The typed properties return ``None`` (or a documented default) when a
    key is absent; they do not validate. Use :func:`check_front_matter` for
    that.
    """
    data: Dict[str, Any] = field(default_factory=dict)

    def __contains__(self, key: str) -> bool:
        return key in self.data

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def keys(self):
        return self.data.keys()

    @property
    def layout(self) -> Optional[str]:
        return self.data.get("layout")

    @property
    def permalink(self) -> Optional[str]:
        return self.data.get("permalink")

    @property
    def title(self) -> Optional[str]:
        return self.data.get("title")

    @property
    def description(self) -> Optional[str]:
        return self.data.get("description")

    @property
    def profile(self) -> Optional[Dict[str, Any]]:
        return self.data.get("profile")

    @property
    def published(self) -> bool:
        """Pages are published unless ``published: false`` is given."""
        return self.data.get("published", True) is not False

    @property
    def date(self) -> Any:
        return self.data.get("date")

    @property
    def categories(self) -> List[str]:
        """Categories as a list; ``category`` is accepted as a single-value alias."""
        value = self.data.get("categories")
        if value is None:
            value = self.data.get("category")
        return _as_word_list(value)

    @property
    def tags(self) -> List[str]:
        return _as_word_list(self.data.get("tags"))

    @property
    def extra(self) -> Dict[str, Any]:
        return {k: v for k, v in self.data.items() if k not in KNOWN_KEYS}


def _as_word_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


# =============================================================================
# SPLITTING AND PARSING
# =============================================================================

def split_front_matter(text: str, source: Optional[str] = None) -> Tuple[Optional[str], str, int]:
    """
    Split a document into its YAML block and body.

    Parameters
    ----------
    text : str
        Full file contents.
    source : str, optional
        Path used in error messages.

    Returns
    -------
    yaml_text : str or None
        Text between the fences, or ``None`` when the file has no
        front-matter.
    body : str
        Everything after the closing fence (the whole text if there is no
        block).
    body_line : int
        1-based line number of the first body line in the original file.

    Raises
    ------
    FrontMatterError
        If the opening fence is never closed.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != FENCE_OPEN:
        return None, text, 1

    for i in range(1, len(lines)):
        if lines[i].rstrip() in FENCE_CLOSE:
            yaml_text = "".join(lines[1:i])
            body = "".join(lines[i + 1:])
            return yaml_text, body, i + 2

    raise FrontMatterError("front-matter block is never closed", source=source, line=1)


def parse_front_matter(text: str, source: Optional[str] = None) -> Tuple[Optional[FrontMatter], str]:
    """
    Parse the front-matter of a document.

    Returns ``(None, text)`` for a file without a block. An empty block
    (``---`` immediately followed by ``---``) is valid and yields an empty
    ``FrontMatter``.

    Raises
    ------
    FrontMatterError
        On YAML syntax errors, a block that is not a mapping, or non-string
        keys. ``line`` points into the original file.
    """
    yaml_text, body, _ = split_front_matter(text, source=source)
    if yaml_text is None:
        return None, body

    try:
        data = yaml.safe_load(yaml_text)
    except yaml.YAMLError as exc:
        line = None
        mark = getattr(exc, "problem_mark", None)
        if mark is not None:
            # +1 for 0-based marks, +1 for the opening fence
            line = mark.line + 2
        problem = getattr(exc, "problem", None) or str(exc)
        raise FrontMatterError(f"invalid YAML: {problem}", source=source, line=line) from exc
    except ValueError as exc:
        # well-formed but impossible timestamps, e.g. 2024-02-30
        raise FrontMatterError(f"invalid value: {exc}", source=source, line=2) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError(
            f"front-matter must be a key/value mapping, got {type(data).__name__}",
            source=source, line=2,
        )
    bad_keys = [k for k in data if not isinstance(k, str)]
    if bad_keys:
        raise FrontMatterError(
            f"front-matter keys must be strings, got {bad_keys!r}",
            source=source, line=2,
        )

    return FrontMatter(data=data), body


# =============================================================================
# TYPE RULES
# =============================================================================

def _is_word_list(value: Any) -> bool:
    if isinstance(value, str):
        return True
    return isinstance(value, list) and all(isinstance(v, (str, int, float)) for v in value)


def check_front_matter(fm: FrontMatter) -> List[str]:
    """
    Check the recognised keys against their expected types.

    Returns
    -------
    List[str]
        One human-readable message per violation, each starting with the
        offending key. Empty if the block is well-formed.
    """
    problems = []

    for key in ("layout", "title", "description", "permalink"):
        if key in fm and not isinstance(fm[key], str):
            problems.append(f"{key}: expected a string, got {type(fm[key]).__name__}")

    permalink = fm.get("permalink")
    if isinstance(permalink, str):
        if not permalink.startswith("/"):
            problems.append(f"permalink: must start with '/', got {permalink!r}")
        elif "://" in permalink or " " in permalink:
            problems.append(f"permalink: must be a URL path, got {permalink!r}")

    if "published" in fm and not isinstance(fm["published"], bool):
        problems.append(f"published: expected true or false, got {fm['published']!r}")

    if "profile" in fm and not isinstance(fm["profile"], dict):
        problems.append(f"profile: expected a mapping, got {type(fm['profile']).__name__}")

    for key in ("categories", "category", "tags"):
        if key in fm and not _is_word_list(fm[key]):
            problems.append(f"{key}: expected a string or a list of strings")

    if "date" in fm:
        value = fm["date"]
        if isinstance(value, (dt.date, dt.datetime)):
            pass
        elif not (isinstance(value, str) and DATE_RE.match(value.strip())):
            problems.append(f"date: expected YYYY-MM-DD [HH:MM:SS [+ZZZZ]], got {value!r}")

    return problems


def dump_front_matter(mapping: Dict[str, Any]) -> str:
    """Serialise a mapping to a fenced front-matter block, keeping key order."""
    yaml_text = yaml.safe_dump(
        dict(mapping), allow_unicode=True, sort_keys=False,
        default_flow_style=False, width=1000,
    )
    return f"{FENCE_OPEN}\n{yaml_text}{FENCE_OPEN}\n"
