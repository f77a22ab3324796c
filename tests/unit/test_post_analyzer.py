"""Unit tests for the post report service."""

from __future__ import annotations

import pytest

from postanalyzer.core.exceptions import PostNotFoundError
from postanalyzer.integrations.wordpress import WordPressPost
from postanalyzer.services.images.stores import AttachmentMetadata
from postanalyzer.services.post_analyzer import (
    PostAnalysisService,
    decode_entities,
    format_wp_date,
)

UPLOADS = "https://blog.example.com/wp-content/uploads/2024/05"


class _FakeWordPress:
    def __init__(self, post: WordPressPost | None, children: list[int] | None = None) -> None:
        self.post = post
        self.children = children or []

    async def get_post(self, post_id: int) -> WordPressPost | None:
        return self.post

    async def get_post_content(self, post_id: int) -> str:
        return self.post.content if self.post else ""

    async def get_featured_image_id(self, post_id: int) -> int | None:
        return self.post.featured_media if self.post else None

    async def get_attachment_children(self, post_id: int) -> list[int]:
        return self.children

    async def get_attachment_metadata(self, attachment_id: int) -> AttachmentMetadata | None:
        return AttachmentMetadata(
            id=attachment_id,
            url=f"{UPLOADS}/photo-{attachment_id}.jpg",
            title=f"Photo &amp; {attachment_id}",
            created_at="2024-05-01T09:05:00",
        )

    async def resolve_url_to_attachment_id(self, url: str) -> int | None:
        return None


def _post(**overrides: object) -> WordPressPost:
    values: dict[str, object] = {
        "id": 42,
        "title": "Tips &amp; Tricks",
        "link": "https://blog.example.com/tips-and-tricks/",
        "content": (
            "<p>Five handy tips for everyone.</p>"
            '<p><img src="https://cdn.other.com/chart.png"></p>'
        ),
        "date": "2024-05-01T09:05:00",
        "modified": "2024-05-02T18:30:00",
        "author_name": "Jane Doe",
        "featured_media": 11,
        "categories": ["News", "Guides"],
        "tags": ["python"],
        "meta": {
            "rank_math_title": "Tips &amp; Tricks for WordPress image audits",
            "rank_math_focus_keyword": "wordpress, images",
            "rank_math_robots": ["index", "nofollow"],
        },
    }
    values.update(overrides)
    return WordPressPost(**values)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_analyze_builds_full_report() -> None:
    service = PostAnalysisService(_FakeWordPress(_post(), children=[11, 12]))  # type: ignore[arg-type]

    report = await service.analyze(42)

    assert report.title == "Tips & Tricks"
    assert report.author == "Jane Doe"
    assert report.published_date == "May 1, 2024 9:05 AM"
    assert report.updated_date == "May 2, 2024 6:30 PM"
    assert report.categories == "News, Guides"
    assert report.tags == "python"
    assert report.word_count == 5

    assert report.seo.title == "Tips & Tricks for WordPress image audits"
    assert report.seo.keywords == ["wordpress", "images"]
    assert report.seo.is_noindex == "no"
    assert report.seo.is_nofollow == "yes"
    assert report.seo.issues == ["Missing meta description"]

    assert report.featured_image is not None
    assert report.featured_image.id == 11
    assert report.featured_image.title == "Photo & 11"
    assert list(report.attached_images) == ["12", "external-0"]
    assert report.attached_images["external-0"].src == "https://cdn.other.com/chart.png"

    assert report.url_suggestions[0] == (
        "https://blog.example.com/tips-tricks-for-wordpress-image-audits"
    )


@pytest.mark.asyncio
async def test_analyze_without_featured_image_or_seo_meta() -> None:
    post = _post(featured_media=None, meta={}, content="")
    service = PostAnalysisService(_FakeWordPress(post))  # type: ignore[arg-type]

    report = await service.analyze(42)

    assert report.featured_image is None
    assert report.attached_images == {}
    assert report.word_count == 0
    assert report.seo.issues == ["Missing SEO title", "Missing meta description"]
    assert report.url_suggestions[-1] == "https://blog.example.com/tips-tricks-optimized"


@pytest.mark.asyncio
async def test_unknown_post_raises_not_found() -> None:
    service = PostAnalysisService(_FakeWordPress(None))  # type: ignore[arg-type]

    with pytest.raises(PostNotFoundError):
        await service.analyze(404)


def test_format_wp_date() -> None:
    assert format_wp_date("2024-12-31T00:15:00") == "December 31, 2024 12:15 AM"
    assert format_wp_date(None) is None
    assert format_wp_date("yesterday") == "yesterday"


def test_decode_entities_recurses_into_containers() -> None:
    payload = {"a": "Fish &amp; Chips", "b": ["&quot;quoted&quot;", {"c": "&#8217;"}], "d": 3}

    assert decode_entities(payload) == {"a": "Fish & Chips", "b": ['"quoted"', {"c": "’"}], "d": 3}
