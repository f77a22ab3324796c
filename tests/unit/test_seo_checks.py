"""Unit tests for deterministic SEO checks."""

from __future__ import annotations

from postanalyzer.services.seo_checks import (
    check_seo_fields,
    count_words,
    parse_robots,
    split_keywords,
)


def test_missing_fields_are_reported() -> None:
    assert check_seo_fields("", None) == ["Missing SEO title", "Missing meta description"]


def test_length_bounds_are_checked() -> None:
    issues = check_seo_fields("Too short", "d" * 321)

    assert issues == [
        "SEO title is short (<30 chars)",
        "Meta description is long (>320 chars)",
    ]
    assert check_seo_fields("t" * 71, "d" * 119) == [
        "SEO title is long (>70 chars)",
        "Meta description is short (<120 chars)",
    ]


def test_fields_within_bounds_have_no_issues() -> None:
    assert check_seo_fields("t" * 30, "d" * 120) == []
    assert check_seo_fields("t" * 70, "d" * 320) == []


def test_title_length_counts_characters_not_bytes() -> None:
    assert check_seo_fields("é" * 30, "d" * 150) == []


def test_parse_robots_accepts_string_and_list() -> None:
    robots = parse_robots("index, nofollow ,")

    assert robots.directives == ["index", "nofollow"]
    assert not robots.is_noindex
    assert robots.is_nofollow

    listed = parse_robots(["noindex", "nofollow"])
    assert listed.is_noindex
    assert listed.is_nofollow
    assert parse_robots(None).directives == []


def test_split_keywords() -> None:
    assert split_keywords(" python, wordpress ,, seo ") == ["python", "wordpress", "seo"]
    assert split_keywords("") == []
    assert split_keywords(None) == []


def test_count_words_ignores_markup_and_shortcodes() -> None:
    content = (
        '<!-- wp:paragraph --><p>Hello <strong>brave</strong> new world.</p><!-- /wp:paragraph -->'
        '[gallery ids="1,2,3"]'
        "<p>It's well-known.</p>"
        "[caption id=\"x\"]<img src=\"a.jpg\"> Sunset[/caption]"
    )

    assert count_words(content) == 7


def test_count_words_skips_numbers() -> None:
    assert count_words("<p>Top 10 tips for 2024</p>") == 3
    assert count_words("") == 0
