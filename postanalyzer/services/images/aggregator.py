"""Collect every image of a post into one de-duplicated inventory.

Three sources are merged, in this order:

1. media-library attachments whose parent is the post,
2. ``<img>`` tags in the raw content,
3. image, gallery and media-text nodes of the block tree.

The featured image is then removed and the rest de-duplicated, first by
attachment id and then by normalized URL, keeping the first occurrence.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from postanalyzer.core.exceptions import PostAnalyzerError
from postanalyzer.schemas.image import ImageRecord
from postanalyzer.services.blocks.parser import has_blocks, parse_blocks
from postanalyzer.services.images.attachment_resolver import AttachmentResolver
from postanalyzer.services.images.block_walker import walk_blocks_for_images
from postanalyzer.services.images.content_scanner import scan_content_images
from postanalyzer.services.images.stores import ContentStore, MediaStore
from postanalyzer.services.images.url_normalizer import normalize_image_url

logger = logging.getLogger(__name__)

EXTERNAL_KEY_PREFIX = "external-"


@dataclass(slots=True)
class ImageAggregation:
    """Result of one aggregation: unique images plus the normalized URLs seen."""

    images: list[ImageRecord] = field(default_factory=list)
    seen_srcs: list[str] = field(default_factory=list)

    def keyed(self) -> dict[str, ImageRecord]:
        """Ordered mapping of attachment id (or a synthetic key) to image.

        Images without an id each get their own ``external-<n>`` key so they
        never collapse onto one another.
        """
        mapping: dict[str, ImageRecord] = {}
        external_count = 0
        for image in self.images:
            if image.id is not None:
                mapping[str(image.id)] = image
            else:
                mapping[f"{EXTERNAL_KEY_PREFIX}{external_count}"] = image
                external_count += 1
        return mapping

    def __len__(self) -> int:
        return len(self.images)


class ImageAggregator:
    """Builds the attached-image inventory for a post."""

    def __init__(self, content_store: ContentStore, media_store: MediaStore) -> None:
        self.content_store = content_store
        self.resolver = AttachmentResolver(media_store)

    async def aggregate(self, post_id: int) -> ImageAggregation:
        """Collect, merge and de-duplicate the images of a post.

        The post must exist; everything else degrades to a partial result.
        """
        content = await self._load_content(post_id)
        featured_id = await self._load_featured_id(post_id)

        attached = await self.fetch_attached_images(post_id)
        attachment_urls = {normalize_image_url(image.src) for image in attached}

        embedded = await self.fetch_content_images(content, attachment_urls)

        block_images: list[ImageRecord] = []
        if has_blocks(content):
            block_images = await walk_blocks_for_images(parse_blocks(content), self.resolver)

        candidates = [*attached, *embedded, *block_images]
        if featured_id is not None:
            candidates = [image for image in candidates if image.id != featured_id]

        aggregation = deduplicate_images(candidates)

        logger.info(
            "Aggregated post images",
            extra={
                "post_id": post_id,
                "attached": len(attached),
                "embedded": len(embedded),
                "blocks": len(block_images),
                "unique": len(aggregation),
            },
        )
        return aggregation

    async def fetch_attached_images(self, post_id: int) -> list[ImageRecord]:
        """Media-library images whose parent is the post, in display order."""
        try:
            attachment_ids = await self.content_store.get_attachment_children(post_id)
        except PostAnalyzerError as e:
            logger.warning(
                "Failed to list attached images",
                extra={"post_id": post_id, "error": str(e)},
            )
            return []

        images: list[ImageRecord] = []
        for attachment_id in attachment_ids:
            record = await self.resolver.resolve(attachment_id)
            if record is not None:
                images.append(record)
        return images

    async def fetch_content_images(
        self,
        content: str,
        attachment_urls: set[str],
    ) -> list[ImageRecord]:
        """Images embedded in the raw HTML that are not already attachments.

        URLs that map back to the media library yield full records; anything
        else becomes an ``external`` record.
        """
        images: list[ImageRecord] = []
        for ref in scan_content_images(content):
            if normalize_image_url(ref.src) in attachment_urls:
                continue

            record: ImageRecord | None = None
            attachment_id = await self.resolver.resolve_url(ref.src)
            if attachment_id:
                record = await self.resolver.resolve(attachment_id)
            else:
                record = _external_record(ref.src)

            if record is not None:
                images.append(record)
        return images

    async def _load_content(self, post_id: int) -> str:
        try:
            return await self.content_store.get_post_content(post_id) or ""
        except PostAnalyzerError as e:
            logger.warning(
                "Failed to load post content",
                extra={"post_id": post_id, "error": str(e)},
            )
            return ""

    async def _load_featured_id(self, post_id: int) -> int | None:
        try:
            featured_id = await self.content_store.get_featured_image_id(post_id)
        except PostAnalyzerError as e:
            logger.warning(
                "Failed to load featured image id",
                extra={"post_id": post_id, "error": str(e)},
            )
            return None
        return featured_id or None


def deduplicate_images(images: Iterable[ImageRecord]) -> ImageAggregation:
    """Keep the first image per attachment id and per normalized URL."""
    aggregation = ImageAggregation()
    seen_ids: set[int] = set()
    seen_srcs: set[str] = set()

    for image in images:
        if image.id is not None and image.id in seen_ids:
            continue

        normalized_src = normalize_image_url(image.src)
        if normalized_src in seen_srcs:
            continue

        aggregation.images.append(image)
        if image.id is not None:
            seen_ids.add(image.id)
        seen_srcs.add(normalized_src)
        aggregation.seen_srcs.append(normalized_src)

    return aggregation


def _external_record(src: str) -> ImageRecord | None:
    try:
        return ImageRecord.external(src)
    except ValueError:
        logger.debug("Skipping unusable image source", extra={"src": src})
        return None
