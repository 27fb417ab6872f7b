"""
Site Validation
===============

Runs every content check over a loaded site and collects the problems in a
``ValidationReport`` instead of stopping at the first one.

Checks
------
==========================  ========  ===========================================
code                        severity  meaning
==========================  ========  ===========================================
front-matter-syntax         error     YAML block cannot be parsed
missing-front-matter        error     a post has no front-matter block
missing-key                 error     a required key (``required_keys``) is absent
front-matter-type           error     a recognised key has the wrong type
misnamed-post               error     file in ``_posts`` not named YYYY-MM-DD-slug
duplicate-permalink         error     two published documents write the same file
broken-link                 error     internal link resolves to nothing
unpublished-link            warning   internal link to a ``published: false`` page
unknown-layout              warning   layout missing from ``_layouts/``
==========================  ========  ===========================================

Command line
------------
::

    portfolio-check site/            # report, exit 1 on errors
    portfolio-check site/ --strict   # warnings fail too
    portfolio-check site/ --quiet    # summary line only
"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .documents import Site, load_site
from .front_matter import check_front_matter
from .links import extract_links, resolve, MISSING, UNPUBLISHED, SKIPPED


ERROR = "error"
WARNING = "warning"


@dataclass
class Issue:
    """One problem found in the site."""
    severity: str
    path: str
    line: Optional[int]
    code: str
    message: str

    def __str__(self) -> str:
        where = f"{self.path}:{self.line}" if self.line is not None else self.path
        return f"{where}: {self.severity}: [{self.code}] {self.message}"


@dataclass
class ValidationReport:
    """Issues collected from one run of ``validate_site``."""
    issues: List[Issue] = field(default_factory=list)
    n_documents: int = 0
    n_links_checked: int = 0

    def add(self, severity: str, path: str, line: Optional[int], code: str, message: str):
        self.issues.append(Issue(severity, path, line, code, message))

    @property
    def errors(self) -> List[Issue]:
        return [i for i in self.issues if i.severity == ERROR]

    @property
    def warnings(self) -> List[Issue]:
        return [i for i in self.issues if i.severity == WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def codes(self) -> List[str]:
        return [i.code for i in self.issues]

    def summary(self) -> str:
        status = "OK" if self.ok else "FAILED"
        return (f"{status}: {self.n_documents} documents, {self.n_links_checked} internal links, "
                f"{len(self.errors)} errors, {len(self.warnings)} warnings")


# =============================================================================
# CHECKS
# =============================================================================

def _check_documents(site: Site, report: ValidationReport):
    for exc in site.load_errors:
        report.add(ERROR, exc.source or "?", exc.line, "front-matter-syntax", exc.message)

    for rel in site.misnamed_posts:
        report.add(ERROR, rel, None, "misnamed-post",
                   "post file names must look like YYYY-MM-DD-title.ext")

    layouts_dir = os.path.join(site.root, "_layouts")
    layouts = None
    if os.path.isdir(layouts_dir):
        layouts = {os.path.splitext(n)[0] for n in os.listdir(layouts_dir)}

    for doc in site.documents:
        fm = doc.front_matter
        if fm is None:
            report.add(ERROR, doc.path, 1, "missing-front-matter",
                       "posts must start with a front-matter block")
            continue

        for key in site.config.required_keys:
            if key not in fm:
                report.add(ERROR, doc.path, 2, "missing-key", f"required key '{key}' is missing")

        for message in check_front_matter(fm):
            report.add(ERROR, doc.path, 2, "front-matter-type", message)

        if layouts is not None and isinstance(fm.layout, str) and fm.layout not in layouts:
            report.add(WARNING, doc.path, 2, "unknown-layout",
                       f"layout '{fm.layout}' not found in _layouts/")


def _check_permalinks(site: Site, report: ValidationReport):
    for out, docs in sorted(site.by_output_path(published_only=True).items()):
        if len(docs) < 2:
            continue
        sources = ", ".join(d.path for d in docs)
        for doc in docs:
            report.add(ERROR, doc.path, None, "duplicate-permalink",
                       f"permalink '{doc.permalink}' writes {out}, shared by: {sources}")


def _check_links(site: Site, report: ValidationReport):
    for doc in site.published_documents():
        for link in extract_links(doc.body, first_line=doc.body_line):
            status, detail = resolve(link, doc, site)
            if status == MISSING:
                report.add(ERROR, doc.path, link.line, "broken-link",
                           f"'{link.target}' does not resolve (looked for {detail})")
            elif status == UNPUBLISHED:
                report.add(WARNING, doc.path, link.line, "unpublished-link",
                           f"'{link.target}' points at an unpublished page")
            if status != SKIPPED:
                report.n_links_checked += 1


def validate_site(site: Site) -> ValidationReport:
    """
    Run all checks over a loaded site.

    Links are only checked in published documents: unpublished pages are
    not built, so their links never reach a reader.
    """
    report = ValidationReport(n_documents=len(site.documents))
    _check_documents(site, report)
    _check_permalinks(site, report)
    _check_links(site, report)
    report.issues.sort(key=lambda i: (i.path, i.line or 0, i.code))
    return report


# =============================================================================
# COMMAND LINE
# =============================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Check a site tree and print the report."""
    parser = argparse.ArgumentParser(
        prog="portfolio-check",
        description="Check front-matter, permalinks and internal links of a site",
    )
    parser.add_argument("root", nargs="?", default="site",
                        help="Site root directory (default: site)")
    parser.add_argument("--strict", action="store_true",
                        help="Treat warnings as errors")
    parser.add_argument("--quiet", action="store_true",
                        help="Only print the summary line")
    args = parser.parse_args(argv)

    try:
        site = load_site(args.root, verbose=not args.quiet)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    report = validate_site(site)
    if not args.quiet:
        for issue in report.issues:
            print(f"  {issue}")
    print(report.summary())

    if not report.ok or (args.strict and report.warnings):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
