"""
Site Configuration
==================

Settings read from ``<site root>/_config.yml``. Only the keys that affect
URLs and document discovery are modelled; everything else in the file is
left for the site generator and kept in ``SiteConfig.extra``.

Permalink styles
----------------
``permalink`` is either the name of a built-in style or a pattern using the
placeholders ``:year :month :day :i_month :i_day :y_day :title :slug
:categories :output_ext``.

=========  ===================================================
date       /:categories/:year/:month/:day/:title:output_ext
pretty     /:categories/:year/:month/:day/:title/
ordinal    /:categories/:year/:y_day/:title:output_ext
none       /:categories/:title:output_ext
=========  ===================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

import yaml


PERMALINK_STYLES: Dict[str, str] = {
    "date": "/:categories/:year/:month/:day/:title:output_ext",
    "pretty": "/:categories/:year/:month/:day/:title/",
    "ordinal": "/:categories/:year/:y_day/:title:output_ext",
    "none": "/:categories/:title:output_ext",
}

CONFIG_FILENAME = "_config.yml"

# Directories the generator never treats as content
RESERVED_DIRS = ("_layouts", "_includes", "_sass", "_data", "_site", "_plugins")

DEFAULT_EXCLUDE = (
    "Gemfile", "Gemfile.lock", "node_modules", "vendor", ".sass-cache",
    ".jekyll-cache", "README.md", "LICENSE",
)


@dataclass
class SiteConfig:
    """
    Site-wide settings.

    Attributes
    ----------
    title, description : str
        Site metadata (not used by the checks, kept for completeness).
    url : str
        Absolute site origin, e.g. ``"https://example.github.io"``. Links
        starting with it are treated as internal.
    baseurl : str
        Sub-path the site is served under (``""`` for a user site).
    permalink : str
        Style name from ``PERMALINK_STYLES`` or an explicit pattern; applies
        to posts without an explicit ``permalink``.
    include, exclude : tuple of str
        Jekyll ``include``/``exclude`` lists (names relative to the root).
    required_keys : tuple of str
        Front-matter keys every document must define.
    markdown_ext : tuple of str
        File extensions treated as markdown.
    """
    title: str = ""
    description: str = ""
    url: str = ""
    baseurl: str = ""
    permalink: str = "date"
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = DEFAULT_EXCLUDE
    required_keys: Tuple[str, ...] = ("layout", "title")
    markdown_ext: Tuple[str, ...] = ("md", "markdown")
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def permalink_pattern(self) -> str:
        """The post permalink pattern with style names expanded."""
        return PERMALINK_STYLES.get(self.permalink, self.permalink)

    @property
    def pretty_pages(self) -> bool:
        """Under ``pretty`` (or any pattern ending in '/') pages get directory URLs."""
        return self.permalink_pattern.endswith("/")

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "SiteConfig":
        """Build a config from a parsed ``_config.yml`` mapping."""
        known = {}
        for key in ("title", "description", "url", "baseurl", "permalink"):
            if data.get(key) is not None:
                known[key] = str(data[key])
        for key in ("include", "exclude", "required_keys", "markdown_ext"):
            if data.get(key) is not None:
                value = data[key]
                if isinstance(value, str):
                    value = [v.strip() for v in value.split(",")]
                known[key] = tuple(str(v) for v in value)

        config = cls(**known)
        # Jekyll's exclude list replaces the defaults; keep the defaults too
        if "exclude" in known:
            config.exclude = tuple(dict.fromkeys(DEFAULT_EXCLUDE + known["exclude"]))
        config.baseurl = config.baseurl.rstrip("/")
        config.url = config.url.rstrip("/")
        config.extra = {k: v for k, v in data.items() if k not in known}
        return config


def load_site_config(root: str) -> SiteConfig:
    """
    Load ``_config.yml`` from a site root.

    Returns the default ``SiteConfig`` when the file does not exist.

    Raises
    ------
    ValueError
        If the file is not valid YAML or is not a mapping.
    """
    path = os.path.join(root, CONFIG_FILENAME)
    if not os.path.exists(path):
        return SiteConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ValueError(f"{path}: invalid YAML: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ValueError(f"{path}: not UTF-8 text: {exc.reason}") from exc
    except ValueError as exc:
        # impossible timestamps and similar constructor failures
        raise ValueError(f"{path}: invalid value: {exc}") from exc

    if data is None:
        return SiteConfig()
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping, got {type(data).__name__}")
    return SiteConfig.from_mapping(data)
