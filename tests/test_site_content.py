"""Checks over the site tree shipped in ``site/``."""

import pytest

from portfolio_site.content import load_site, validate_site, extract_links

from .conftest import SITE_ROOT


@pytest.fixture(scope="module")
def site():
    return load_site(SITE_ROOT)


def test_no_issues(site):
    report = validate_site(site)
    assert report.issues == [], "\n".join(str(i) for i in report.issues)
    assert report.n_links_checked > 0


def test_permalinks(site):
    permalinks = {d.path: d.permalink for d in site.documents}
    assert permalinks == {
        "_pages/about.md": "/",
        "_pages/blog.md": "/blog/",
        "_pages/cv.md": "/cv/",
        "_posts/2024-02-12-quantum-simulation-libraries.md": "/blog/2024/quantum-simulation-libraries/",
        "_posts/2024-05-20-qaoa-walkthrough.md": "/blog/2024/qaoa-walkthrough/",
        "_posts/2025-01-10-tensor-network-notes.md": "/blog/2025/tensor-network-notes/",
    }


def test_draft_is_not_published(site):
    draft = site.find_post("2025-01-10-tensor-network-notes")
    assert draft is not None and not draft.published
    assert draft.output_path not in site.by_output_path()


def test_static_files(site):
    assert site.static_files == ["assets/bib/references.bib"]


def test_walkthrough_code_is_not_linked(site):
    post = site.find_post("2024-05-20-qaoa-walkthrough")
    found = [link.target for link in extract_links(post.body, post.body_line)]
    assert "target" not in found
    assert all("gamma" not in t for t in found)
    assert "/assets/bib/references.bib" in found


def test_about_profile(site):
    about = site.find_source("_pages/about.md")
    assert about.front_matter.profile["align"] == "right"
    assert about.front_matter.extra["social"] is True
