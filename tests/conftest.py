import os
import textwrap

import matplotlib
matplotlib.use("Agg")

import pytest


REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SITE_ROOT = os.path.join(REPO_ROOT, "site")


@pytest.fixture
def site_root():
    return SITE_ROOT


@pytest.fixture
def make_site(tmp_path):
    """Write a dict of {relative path: text} under a temporary site root."""
    def _make(files):
        for rel, text in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(text, bytes):
                path.write_bytes(text)
            else:
                path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
        return str(tmp_path)
    return _make


def page(front_matter, body=""):
    """Build page text from a front-matter string and a body."""
    return f"---\n{textwrap.dedent(front_matter).strip()}\n---\n{textwrap.dedent(body)}"
