import datetime as dt

import pytest

from portfolio_site.content.front_matter import (
    FrontMatter,
    FrontMatterError,
    split_front_matter,
    parse_front_matter,
    check_front_matter,
    dump_front_matter,
)


ABOUT = """---
layout: about
title: about
permalink: /
profile:
  align: right
  image: prof_pic.jpg
---
Hello.
"""


class TestSplit:
    def test_no_front_matter(self):
        yaml_text, body, line = split_front_matter("just text\n")
        assert yaml_text is None
        assert body == "just text\n"
        assert line == 1

    def test_block_and_body_line(self):
        yaml_text, body, line = split_front_matter(ABOUT)
        assert "layout: about" in yaml_text
        assert body == "Hello.\n"
        assert line == 9

    def test_dots_close_block(self):
        yaml_text, body, _ = split_front_matter("---\ntitle: x\n...\nbody\n")
        assert yaml_text == "title: x\n"
        assert body == "body\n"

    def test_byte_order_mark_is_ignored(self):
        yaml_text, _, _ = split_front_matter("\ufeff---\ntitle: x\n---\n")
        assert yaml_text == "title: x\n"

    def test_fence_must_be_first_line(self):
        yaml_text, _, _ = split_front_matter("\n---\ntitle: x\n---\n")
        assert yaml_text is None

    def test_unclosed_block(self):
        with pytest.raises(FrontMatterError) as info:
            split_front_matter("---\ntitle: x\n", source="a.md")
        assert info.value.source == "a.md"
        assert info.value.line == 1


class TestParse:
    def test_recognised_keys(self):
        fm, body = parse_front_matter(ABOUT)
        assert fm.layout == "about"
        assert fm.permalink == "/"
        assert fm.profile == {"align": "right", "image": "prof_pic.jpg"}
        assert fm.published is True
        assert body == "Hello.\n"

    def test_empty_block_is_empty_mapping(self):
        fm, body = parse_front_matter("---\n---\nbody")
        assert isinstance(fm, FrontMatter)
        assert fm.data == {}
        assert body == "body"

    def test_no_block(self):
        fm, body = parse_front_matter("plain")
        assert fm is None
        assert body == "plain"

    def test_published_false(self):
        fm, _ = parse_front_matter("---\npublished: false\n---\n")
        assert fm.published is False

    def test_yaml_error_reports_file_line(self):
        text = "---\ntitle: ok\nlayout: [unclosed\n---\n"
        with pytest.raises(FrontMatterError) as info:
            parse_front_matter(text, source="broken.md")
        assert info.value.source == "broken.md"
        assert info.value.line is not None and info.value.line >= 3
        assert "broken.md" in str(info.value)

    @pytest.mark.parametrize("date", ["2024-13-45", "2024-02-30", "2023-06-31 10:00:00"])
    def test_impossible_date_is_front_matter_error(self, date):
        text = f"---\nlayout: page\ntitle: a\ndate: {date}\n---\nbody\n"
        with pytest.raises(FrontMatterError) as info:
            parse_front_matter(text, source="a.md")
        assert info.value.source == "a.md"
        assert info.value.line == 2

    def test_list_block_is_rejected(self):
        with pytest.raises(FrontMatterError, match="mapping"):
            parse_front_matter("---\n- a\n- b\n---\n")

    def test_non_string_keys_rejected(self):
        with pytest.raises(FrontMatterError, match="strings"):
            parse_front_matter("---\n1: one\n---\n")

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_front_matter("---\n: : :\n---\n")

    def test_categories_and_tags(self):
        fm, _ = parse_front_matter("---\ncategories: physics quantum\ntags: [qaoa, vqe]\n---\n")
        assert fm.categories == ["physics", "quantum"]
        assert fm.tags == ["qaoa", "vqe"]

    def test_category_alias(self):
        fm, _ = parse_front_matter("---\ncategory: research\n---\n")
        assert fm.categories == ["research"]

    def test_extra_keys(self):
        fm, _ = parse_front_matter("---\ntitle: x\nnav: true\nnav_order: 2\n---\n")
        assert fm.extra == {"nav": True, "nav_order": 2}


class TestCheck:
    def test_valid_block_has_no_problems(self):
        fm, _ = parse_front_matter(ABOUT)
        assert check_front_matter(fm) == []

    def test_wrong_types(self):
        fm = FrontMatter({
            "title": 3,
            "published": "no",
            "profile": "me.jpg",
            "tags": {"a": 1},
        })
        problems = check_front_matter(fm)
        keys = sorted(p.split(":")[0] for p in problems)
        assert keys == ["profile", "published", "tags", "title"]

    def test_permalink_must_be_absolute_path(self):
        assert check_front_matter(FrontMatter({"permalink": "cv/"}))
        assert check_front_matter(FrontMatter({"permalink": "https://x.org/cv/"}))
        assert check_front_matter(FrontMatter({"permalink": "/cv/"})) == []

    def test_dates(self):
        assert check_front_matter(FrontMatter({"date": dt.date(2024, 5, 20)})) == []
        assert check_front_matter(FrontMatter({"date": "2024-05-20 09:30:00 +0100"})) == []
        assert check_front_matter(FrontMatter({"date": "20 May 2024"}))


def test_dump_keeps_order_and_parses_back():
    text = dump_front_matter({"layout": "post", "title": "QAOA", "tags": ["a", "b"]})
    assert text.startswith("---\nlayout: post\ntitle: QAOA\n")
    assert text.endswith("---\n")
    fm, body = parse_front_matter(text + "body")
    assert fm.tags == ["a", "b"]
    assert body == "body"
