"""
Site Content Checks
===================

Tools for checking the markdown content under ``site/`` the way the site
generator will consume it.

Every content file starts with a YAML front-matter block::

    ---
    layout: post
    title: A QAOA walkthrough
    permalink: /blog/qaoa/
    ---

The generator reads the block, decides the URL (the *permalink*) and renders
the body. Nothing enforces that permalinks are unique or that internal links
point at pages which exist; this subpackage does.

Modules
-------
- front_matter: split, parse and type-check the YAML block
- config: ``_config.yml`` settings (url, baseurl, permalink style)
- documents: walk the site tree, classify pages/posts, compute permalinks
- links: find links in a body and resolve internal ones
- validation: run all checks and report issues (``portfolio-check`` CLI)
"""

from .front_matter import (
    FrontMatter,
    FrontMatterError,
    split_front_matter,
    parse_front_matter,
    check_front_matter,
    dump_front_matter,
)

from .config import (
    SiteConfig,
    load_site_config,
    PERMALINK_STYLES,
)

from .documents import (
    Document,
    Site,
    MisnamedPostError,
    load_site,
    load_document,
    output_path,
    expand_permalink,
)

from .links import (
    Link,
    extract_links,
    classify,
    resolve,
)

from .validation import (
    Issue,
    ValidationReport,
    validate_site,
)

__all__ = [
    "FrontMatter",
    "FrontMatterError",
    "split_front_matter",
    "parse_front_matter",
    "check_front_matter",
    "dump_front_matter",
    "SiteConfig",
    "load_site_config",
    "PERMALINK_STYLES",
    "Document",
    "Site",
    "MisnamedPostError",
    "load_site",
    "load_document",
    "output_path",
    "expand_permalink",
    "Link",
    "extract_links",
    "classify",
    "resolve",
    "Issue",
    "ValidationReport",
    "validate_site",
]
