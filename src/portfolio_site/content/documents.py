"""
Site Documents and Permalinks
=============================

Walks a site tree the way a Jekyll-style generator does and works out the
URL each document will be published at.

What counts as a document?
--------------------------
A text file whose first line is a ``---`` fence. Everything else that is
not skipped is a *static file*: copied to the output unchanged, at its
relative path.

Skipped entirely:

- names starting with ``_`` or ``.`` (unless listed in ``include``),
  except ``_posts`` directories, which hold dated posts
- reserved directories (``_layouts``, ``_includes``, ``_site``, ...)
- anything listed in ``exclude``

Posts
-----
Files under a ``_posts`` directory named ``YYYY-MM-DD-slug.ext``. The date
and slug come from the file name (a front-matter ``date`` overrides the
date). Directories above ``_posts`` become categories, in addition to any
front-matter ``categories``.

Permalinks
----------
1. An explicit front-matter ``permalink`` always wins.
2. Posts expand the site permalink pattern (see ``config.PERMALINK_STYLES``).
3. Pages use their source path: ``cv.md`` -> ``/cv.html`` (``/cv/`` under a
   pretty style), ``blog/index.md`` -> ``/blog/``.

``output_path`` maps a permalink to the file the generator writes, which is
what two documents actually collide on.
"""

from __future__ import annotations

import datetime as dt
import os
import posixpath
import re
import warnings
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union
from urllib.parse import unquote

from .config import SiteConfig, RESERVED_DIRS, load_site_config
from .front_matter import FrontMatter, FrontMatterError, parse_front_matter, DATE_RE


POSTS_DIR = "_posts"

POST_NAME_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(.+)\.([A-Za-z0-9]+)$")

# Extensions worth opening to look for a front-matter fence
TEXT_EXT = ("html", "htm", "xml", "txt", "json", "css", "js")

DateLike = Union[dt.date, dt.datetime]


class MisnamedPostError(ValueError):
    """A file under ``_posts`` whose name is not ``YYYY-MM-DD-slug.ext``."""


@dataclass
class Document:
    """
    One page or post.

    Attributes
    ----------
    path : str
        Source path relative to the site root, with ``/`` separators.
    front_matter : FrontMatter or None
        ``None`` only for a post file that has no front-matter block.
    body : str
        Content after the front-matter.
    body_line : int
        Line number (1-based) of the first body line in the source file.
    kind : str
        ``"page"`` or ``"post"``.
    date, slug : optional
        Post date and slug (``None`` for pages).
    categories : List[str]
        Path-derived categories followed by front-matter categories.
    permalink : str
        URL path the document is published at.
    """
    path: str
    front_matter: Optional[FrontMatter]
    body: str = ""
    body_line: int = 1
    kind: str = "page"
    date: Optional[DateLike] = None
    slug: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    permalink: str = "/"

    @property
    def published(self) -> bool:
        return self.front_matter is None or self.front_matter.published

    @property
    def title(self) -> Optional[str]:
        return self.front_matter.title if self.front_matter is not None else None

    @property
    def output_path(self) -> str:
        return output_path(self.permalink)

    @property
    def post_name(self) -> Optional[str]:
        """``YYYY-MM-DD-slug`` for posts, the key used by ``{% post_url %}``."""
        if self.kind != "post":
            return None
        return os.path.splitext(posixpath.basename(self.path))[0]


@dataclass
class Site:
    """A loaded site tree: documents, static files and problems found on the way."""
    root: str
    config: SiteConfig
    documents: List[Document] = field(default_factory=list)
    static_files: List[str] = field(default_factory=list)
    load_errors: List[FrontMatterError] = field(default_factory=list)
    misnamed_posts: List[str] = field(default_factory=list)

    def published_documents(self) -> List[Document]:
        return [d for d in self.documents if d.published]

    def by_output_path(self, published_only: bool = True) -> Dict[str, List[Document]]:
        """Group documents by the file they would be written to."""
        groups: Dict[str, List[Document]] = {}
        docs = self.published_documents() if published_only else self.documents
        for doc in docs:
            groups.setdefault(doc.output_path, []).append(doc)
        return groups

    def find_source(self, rel_path: str) -> Optional[Document]:
        rel_path = posixpath.normpath(rel_path.lstrip("/"))
        for doc in self.documents:
            if doc.path == rel_path:
                return doc
        return None

    def find_post(self, name: str) -> Optional[Document]:
        """Look a post up by ``YYYY-MM-DD-slug``, optionally prefixed by a category dir."""
        name = name.strip().strip("/")
        for doc in self.documents:
            if doc.kind != "post":
                continue
            if doc.post_name == name:
                return doc
            prefix = posixpath.dirname(posixpath.dirname(doc.path))
            if prefix and f"{prefix}/{doc.post_name}" == name:
                return doc
        return None


# =============================================================================
# PERMALINKS
# =============================================================================

def _slugify_category(value: str) -> str:
    return re.sub(r"\s+", "-", value.strip().lower())


def expand_permalink(
    pattern: str,
    slug: str,
    date: Optional[DateLike] = None,
    categories: Optional[List[str]] = None,
    output_ext: str = ".html",
) -> str:
    """
    Expand a permalink pattern.

    Unknown placeholders are left in place. Empty segments (for example
    ``:categories`` on an uncategorised post) collapse, so the result never
    contains ``//``.

    Examples
    --------
    >>> expand_permalink("/blog/:year/:title/", "qaoa", dt.date(2024, 3, 1))
    '/blog/2024/qaoa/'
    >>> expand_permalink("/:categories/:title:output_ext", "qaoa", categories=["Quantum"])
    '/quantum/qaoa.html'
    """
    values = {
        "title": slug,
        "slug": slug,
        "categories": "/".join(_slugify_category(c) for c in (categories or [])),
        "output_ext": output_ext,
    }
    if date is not None:
        values.update({
            "year": f"{date.year:04d}",
            "short_year": f"{date.year % 100:02d}",
            "month": f"{date.month:02d}",
            "i_month": str(date.month),
            "day": f"{date.day:02d}",
            "i_day": str(date.day),
            "y_day": f"{date.timetuple().tm_yday:03d}",
        })

    def substitute(match: "re.Match[str]") -> str:
        return values.get(match.group(1), match.group(0))

    url = re.sub(r":([a-z_]+)", substitute, pattern)
    url = re.sub(r"/{2,}", "/", url)
    if not url.startswith("/"):
        url = "/" + url
    return url


def output_path(permalink: str) -> str:
    """
    File path (relative to the output directory) written for a permalink.

    >>> output_path("/cv/")
    'cv/index.html'
    >>> output_path("/about")
    'about.html'
    >>> output_path("/feed.xml")
    'feed.xml'
    """
    path = unquote(permalink.split("?", 1)[0].split("#", 1)[0])
    path = re.sub(r"/{2,}", "/", path).lstrip("/")
    if path == "" or path.endswith("/"):
        return path + "index.html"
    if "." not in posixpath.basename(path):
        return path + ".html"
    return path


def _page_permalink(rel_path: str, config: SiteConfig) -> str:
    stem, ext = posixpath.splitext(rel_path)
    ext = ext.lstrip(".").lower()
    out_ext = ".html" if ext in config.markdown_ext or ext in ("html", "htm") else f".{ext}"
    directory, name = posixpath.split(stem)
    prefix = f"/{directory}/" if directory else "/"
    if name == "index" and out_ext == ".html":
        return prefix
    if config.pretty_pages and out_ext == ".html":
        return f"{prefix}{name}/"
    return f"{prefix}{name}{out_ext}"


def _coerce_date(value) -> Optional[DateLike]:
    if isinstance(value, (dt.date, dt.datetime)):
        return value
    if isinstance(value, str) and DATE_RE.match(value.strip()):
        try:
            return dt.date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


# =============================================================================
# LOADING
# =============================================================================

def load_document(root: str, rel_path: str, config: Optional[SiteConfig] = None) -> Optional[Document]:
    """
    Load one file as a document.

    Returns ``None`` when the file is not a document: it has no front-matter
    and is not a post.

    Raises
    ------
    FrontMatterError
        If the front-matter cannot be parsed.
    MisnamedPostError
        If a file under ``_posts`` is not named ``YYYY-MM-DD-slug.ext`` or
        its name carries an impossible date.
    """
    config = config or SiteConfig()
    rel_path = rel_path.replace(os.sep, "/")
    with open(os.path.join(root, rel_path), "r", encoding="utf-8") as f:
        text = f.read()

    front_matter, body = parse_front_matter(text, source=rel_path)
    body_line = 1 + (text.count("\n") - body.count("\n")) if front_matter is not None else 1

    parts = rel_path.split("/")
    if POSTS_DIR in parts[:-1]:
        match = POST_NAME_RE.match(parts[-1])
        if match is None:
            raise MisnamedPostError(f"{rel_path}: post file names must look like YYYY-MM-DD-title.ext")
        year, month, day, slug, ext = match.groups()
        try:
            date: DateLike = dt.date(int(year), int(month), int(day))
        except ValueError as exc:
            raise MisnamedPostError(f"{rel_path}: {exc}") from exc

        fm = front_matter or FrontMatter()
        override = _coerce_date(fm.date)
        if override is not None:
            date = override
        if isinstance(fm.get("slug"), str):
            slug = fm["slug"]

        path_categories = [p for p in parts[:parts.index(POSTS_DIR)]]
        categories = path_categories + [c for c in fm.categories if c not in path_categories]
        out_ext = ".html" if ext.lower() in config.markdown_ext or ext.lower() == "html" else f".{ext}"
        pattern = fm.permalink if isinstance(fm.permalink, str) else config.permalink_pattern
        permalink = expand_permalink(pattern, slug, date=date, categories=categories, output_ext=out_ext)
        return Document(
            path=rel_path, front_matter=front_matter, body=body, body_line=body_line,
            kind="post", date=date, slug=slug, categories=categories, permalink=permalink,
        )

    if front_matter is None:
        return None

    if isinstance(front_matter.permalink, str):
        permalink = front_matter.permalink
    else:
        permalink = _page_permalink(rel_path, config)
    return Document(
        path=rel_path, front_matter=front_matter, body=body, body_line=body_line,
        kind="page", categories=front_matter.categories, permalink=permalink,
    )


def _is_skipped(rel_path: str, name: str, config: SiteConfig, is_dir: bool) -> bool:
    if rel_path in config.exclude or name in config.exclude:
        return True
    top = rel_path.split("/", 1)[0]
    if top in RESERVED_DIRS:
        return True
    if name in config.include or rel_path in config.include:
        return False
    if is_dir and name == POSTS_DIR:
        return False
    return name.startswith(("_", "."))


def _could_be_document(name: str, config: SiteConfig) -> bool:
    ext = os.path.splitext(name)[1].lstrip(".").lower()
    return ext in config.markdown_ext or ext in TEXT_EXT


def load_site(root: str, config: Optional[SiteConfig] = None, verbose: bool = False) -> Site:
    """
    Load every document and static file under ``root``.

    Parse failures do not abort loading: they are collected in
    ``Site.load_errors`` (and misnamed posts in ``Site.misnamed_posts``) so
    that one broken page does not hide problems in the others.

    Parameters
    ----------
    root : str
        Site root directory (the one holding ``_config.yml``).
    config : SiteConfig, optional
        Defaults to ``load_site_config(root)``.
    verbose : bool
        Print a one-line summary when done.
    """
    if not os.path.isdir(root):
        raise ValueError(f"Site root does not exist or is not a directory: {root}")
    config = config or load_site_config(root)
    site = Site(root=root, config=config)

    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root).replace(os.sep, "/")
        rel_dir = "" if rel_dir == "." else rel_dir

        kept_dirs = []
        for d in sorted(dirnames):
            rel = f"{rel_dir}/{d}" if rel_dir else d
            if not _is_skipped(rel, d, config, is_dir=True):
                kept_dirs.append(d)
        dirnames[:] = kept_dirs

        for name in sorted(filenames):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if _is_skipped(rel, name, config, is_dir=False):
                continue
            if not _could_be_document(name, config):
                site.static_files.append(rel)
                continue

            try:
                doc = load_document(root, rel, config)
            except FrontMatterError as exc:
                site.load_errors.append(exc)
                continue
            except UnicodeDecodeError:
                warnings.warn(f"{rel}: not UTF-8 text, treating as a static file")
                site.static_files.append(rel)
                continue
            except MisnamedPostError:
                site.misnamed_posts.append(rel)
                continue

            if doc is None:
                site.static_files.append(rel)
            else:
                site.documents.append(doc)

    if verbose:
        n_posts = sum(1 for d in site.documents if d.kind == "post")
        print(f"Loaded {len(site.documents)} documents ({n_posts} posts), "
              f"{len(site.static_files)} static files from {root}")
    return site
