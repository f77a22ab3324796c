"""Find image-bearing nodes in a block tree."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from postanalyzer.schemas.image import ImageRecord
from postanalyzer.services.blocks.parser import Block
from postanalyzer.services.images.attachment_resolver import (
    AttachmentResolver,
    as_attachment_id,
)
from postanalyzer.services.images.content_scanner import extract_src

WP_IMAGE_CLASS_PATTERN = re.compile(r"wp-image-(\d+)")

IMAGE_BLOCK = "core/image"
GALLERY_BLOCK = "core/gallery"
MEDIA_TEXT_BLOCK = "core/media-text"


@dataclass(frozen=True, slots=True)
class BlockImageRef:
    """An image pointed at by a block: an attachment id, or failing that a URL."""

    attachment_id: int | None = None
    src: str = ""


def collect_block_image_refs(blocks: Sequence[Block]) -> list[BlockImageRef]:
    """Image references in a block tree, depth-first in document order."""
    refs: list[BlockImageRef] = []
    for block in blocks:
        if block.name == IMAGE_BLOCK:
            ref = _image_block_ref(block)
            if ref is not None:
                refs.append(ref)
        elif block.name == GALLERY_BLOCK:
            ids = block.attrs.get("ids")
            if isinstance(ids, list):
                refs.extend(BlockImageRef(attachment_id=as_attachment_id(value)) for value in ids)
            # Newer galleries nest one image block per picture
            refs.extend(collect_block_image_refs(block.inner_blocks))
        elif block.name == MEDIA_TEXT_BLOCK and "mediaId" in block.attrs:
            refs.append(BlockImageRef(attachment_id=as_attachment_id(block.attrs["mediaId"])))
        elif block.inner_blocks:
            refs.extend(collect_block_image_refs(block.inner_blocks))
    return refs


async def walk_blocks_for_images(
    blocks: Sequence[Block],
    resolver: AttachmentResolver,
) -> list[ImageRecord]:
    """Resolve every image in a block tree to its media-library record.

    Each attachment appears once, at its first position. References that do
    not resolve are skipped.
    """
    images: list[ImageRecord] = []
    seen_ids: set[int] = set()

    for ref in collect_block_image_refs(blocks):
        attachment_id = ref.attachment_id
        if attachment_id is None and ref.src:
            attachment_id = await resolver.resolve_url(ref.src)
        if attachment_id is None or attachment_id in seen_ids:
            continue

        record = await resolver.resolve(attachment_id)
        if record is None or record.id in seen_ids:
            continue
        images.append(record)
        seen_ids.add(record.id)  # type: ignore[arg-type]

    return images


def _image_block_ref(block: Block) -> BlockImageRef | None:
    attachment_id = as_attachment_id(block.attrs.get("id"))
    if attachment_id:
        return BlockImageRef(attachment_id=attachment_id)

    if block.inner_html:
        match = WP_IMAGE_CLASS_PATTERN.search(block.inner_html)
        if match:
            return BlockImageRef(attachment_id=int(match.group(1)))

    src = extract_src(block.inner_html)
    if src:
        return BlockImageRef(src=src)
    return None

