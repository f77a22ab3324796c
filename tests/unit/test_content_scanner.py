"""Unit tests for the raw-HTML image scanner."""

from __future__ import annotations

from postanalyzer.services.images.content_scanner import (
    RawImageRef,
    extract_src,
    scan_content_images,
)


def test_scan_returns_images_in_document_order_with_duplicates() -> None:
    content = (
        '<p><img src="https://example.com/a.jpg" alt="A"></p>'
        "<p><IMG class='x' SRC='https://example.com/b.png'/></p>"
        '<img src="https://example.com/a.jpg">'
    )

    refs = list(scan_content_images(content))

    assert refs == [
        RawImageRef(src="https://example.com/a.jpg"),
        RawImageRef(src="https://example.com/b.png"),
        RawImageRef(src="https://example.com/a.jpg"),
    ]


def test_scan_skips_tags_without_usable_src() -> None:
    content = '<img alt="no source"><img src=""><img data-src="https://example.com/lazy.jpg">'

    assert list(scan_content_images(content)) == []


def test_scan_prefers_src_over_data_src() -> None:
    content = '<img data-src="https://example.com/lazy.jpg" src="https://example.com/real.jpg">'

    assert [ref.src for ref in scan_content_images(content)] == ["https://example.com/real.jpg"]


def test_scan_can_be_iterated_twice() -> None:
    scan = scan_content_images('<img src="https://example.com/a.jpg">')

    assert list(scan) == list(scan)
    assert len(list(scan)) == 1


def test_extract_src_decodes_entities() -> None:
    tag = '<img src="https://example.com/photo.jpg?a=1&amp;b=2" alt="">'

    assert extract_src(tag) == "https://example.com/photo.jpg?a=1&b=2"


def test_scan_handles_empty_content() -> None:
    assert list(scan_content_images("")) == []
