"""Assemble the QA/SEO report for a single post."""

from __future__ import annotations

import html
import logging
from datetime import datetime
from typing import Any

from postanalyzer.core.exceptions import PostNotFoundError
from postanalyzer.integrations.wordpress import WordPressClient, WordPressPost
from postanalyzer.schemas.analysis import PostAnalysisReport
from postanalyzer.services.images.aggregator import ImageAggregator
from postanalyzer.services.images.attachment_resolver import AttachmentResolver
from postanalyzer.services.seo_checks import (
    check_seo_fields,
    count_words,
    parse_robots,
    split_keywords,
)
from postanalyzer.services.slug_suggestions import suggest_urls

logger = logging.getLogger(__name__)

SEO_TITLE_META_KEY = "rank_math_title"
SEO_DESCRIPTION_META_KEY = "rank_math_description"
SEO_KEYWORDS_META_KEY = "rank_math_focus_keyword"
SEO_ROBOTS_META_KEY = "rank_math_robots"


class PostAnalysisService:
    """Builds a :class:`PostAnalysisReport` from the WordPress site.

    The post itself must exist. Every other lookup degrades: a missing
    featured image is ``None`` and unresolvable images are dropped or
    reported as external.
    """

    def __init__(self, wp_client: WordPressClient) -> None:
        self.wp_client = wp_client
        self.resolver = AttachmentResolver(wp_client)
        self.aggregator = ImageAggregator(wp_client, wp_client)

    async def analyze(self, post_id: int) -> PostAnalysisReport:
        post = await self.wp_client.get_post(post_id)
        if post is None:
            raise PostNotFoundError(post_id)

        seo_title = _meta_text(post, SEO_TITLE_META_KEY)
        seo_description = _meta_text(post, SEO_DESCRIPTION_META_KEY)
        robots = parse_robots(post.meta.get(SEO_ROBOTS_META_KEY))

        featured_image = None
        if post.featured_media:
            featured_image = await self.resolver.resolve(post.featured_media)

        aggregation = await self.aggregator.aggregate(post_id)

        report: dict[str, Any] = {
            "url": post.link,
            "title": post.title,
            "author": post.author_name,
            "published_date": format_wp_date(post.date),
            "updated_date": format_wp_date(post.modified),
            "categories": ", ".join(post.categories),
            "tags": ", ".join(post.tags),
            "word_count": count_words(post.content),
            "seo": {
                "title": seo_title,
                "description": seo_description,
                "keywords": split_keywords(post.meta.get(SEO_KEYWORDS_META_KEY)),
                "robots": robots.directives,
                "is_noindex": "yes" if robots.is_noindex else "no",
                "is_nofollow": "yes" if robots.is_nofollow else "no",
                "issues": check_seo_fields(seo_title, seo_description),
            },
            "featured_image": featured_image.model_dump() if featured_image else None,
            "attached_images": {
                key: image.model_dump() for key, image in aggregation.keyed().items()
            },
            "url_suggestions": suggest_urls(seo_title, post.title, post.link),
        }

        logger.info(
            "Post analyzed",
            extra={
                "post_id": post_id,
                "images": len(aggregation),
                "has_featured_image": featured_image is not None,
                "seo_issues": len(report["seo"]["issues"]),
            },
        )
        return PostAnalysisReport.model_validate(decode_entities(report))


def decode_entities(value: Any) -> Any:
    """HTML-unescape every string in a nested structure."""
    if isinstance(value, str):
        return html.unescape(value)
    if isinstance(value, dict):
        return {key: decode_entities(item) for key, item in value.items()}
    if isinstance(value, list):
        return [decode_entities(item) for item in value]
    return value


def format_wp_date(value: str | None) -> str | None:
    """Render a REST API timestamp as ``May 1, 2024 9:05 AM``."""
    if not value:
        return None
    try:
        moment = datetime.fromisoformat(value)
    except ValueError:
        logger.debug("Unparseable post date", extra={"value": value})
        return value
    hour = moment.hour % 12 or 12
    return f"{moment:%B} {moment.day}, {moment.year} {hour}:{moment:%M} {moment:%p}"


def _meta_text(post: WordPressPost, key: str) -> str:
    value = post.meta.get(key)
    return value.strip() if isinstance(value, str) else ""
