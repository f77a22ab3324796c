"""Unit tests for image URL normalization."""

from __future__ import annotations

from postanalyzer.services.images.url_normalizer import normalize_image_url, urls_match


def test_normalize_strips_resize_suffix_and_query() -> None:
    url = "https://example.com/wp-content/uploads/2024/05/photo-300x200.jpg?ver=2#top"

    assert normalize_image_url(url) == "https://example.com/wp-content/uploads/2024/05/photo.jpg"


def test_normalize_strips_repeated_resize_suffixes() -> None:
    url = "https://example.com/uploads/photo-1024x768-300x200.png"

    assert normalize_image_url(url) == "https://example.com/uploads/photo.png"


def test_normalize_keeps_dimension_like_text_not_at_the_end() -> None:
    url = "https://example.com/uploads/banner-300x200-final.jpg"

    assert normalize_image_url(url) == url


def test_normalize_is_idempotent() -> None:
    urls = [
        "https://example.com/uploads/photo-300x200.jpg?x=1",
        "/wp-content/uploads/photo-150x150.jpg",
        "photo.jpg",
        "",
        "http://[::1",
    ]

    for url in urls:
        once = normalize_image_url(url)
        assert normalize_image_url(once) == once


def test_normalize_never_raises_on_malformed_input() -> None:
    assert normalize_image_url("http://[::1/photo-10x10.jpg") == "http://[::1/photo.jpg"
    assert normalize_image_url("   ") == ""


def test_relative_urls_reduce_to_their_path() -> None:
    assert normalize_image_url("/uploads/photo-640x480.webp?v=3") == "/uploads/photo.webp"


def test_urls_match_renditions_of_the_same_file() -> None:
    assert urls_match(
        "https://example.com/uploads/photo.jpg",
        "https://example.com/uploads/photo-768x512.jpg?resize=1",
    )
    assert not urls_match(
        "https://example.com/uploads/photo.jpg",
        "https://cdn.example.com/uploads/photo.jpg",
    )


def test_normalize_drops_port_and_credentials() -> None:
    url = "https://user:pw@example.com:443/u/photo-300x200.jpg"

    assert normalize_image_url(url) == "https://example.com/u/photo.jpg"
    assert urls_match(
        "https://example.com:8080/u/photo.jpg",
        "https://example.com/u/photo-300x200.jpg",
    )


def test_normalize_keeps_ipv6_hosts_bracketed() -> None:
    normalized = normalize_image_url("http://[::1]:8080/uploads/photo-150x150.jpg")

    assert normalized == "http://[::1]/uploads/photo.jpg"
    assert normalize_image_url(normalized) == normalized
