"""Resolve media-library attachments into image records."""

from __future__ import annotations

import logging
from posixpath import basename
from urllib.parse import urlsplit

from pydantic import ValidationError

from postanalyzer.core.exceptions import PostAnalyzerError
from postanalyzer.schemas.image import ImageRecord
from postanalyzer.services.images.stores import AttachmentMetadata, MediaStore

logger = logging.getLogger(__name__)


class AttachmentResolver:
    """Turns attachment ids (or URLs) from the media store into ImageRecords.

    Lookups that fail for any reason resolve to ``None``: callers treat a
    missing attachment as "not an image we know about", never as an error.
    """

    def __init__(self, media_store: MediaStore) -> None:
        self.media_store = media_store

    async def resolve(self, attachment_id: object) -> ImageRecord | None:
        """Return the full image record for an attachment id, or None.

        Block attributes are loosely typed, so digit strings are accepted too.
        """
        attachment_id = as_attachment_id(attachment_id)
        if attachment_id is None:
            return None

        try:
            metadata = await self.media_store.get_attachment_metadata(attachment_id)
        except PostAnalyzerError as e:
            logger.warning(
                "Attachment lookup failed",
                extra={"attachment_id": attachment_id, "error": str(e)},
            )
            return None

        if metadata is None or not metadata.url:
            logger.debug("Not an attachment", extra={"attachment_id": attachment_id})
            return None

        try:
            return build_image_record(metadata)
        except ValidationError as e:
            logger.warning(
                "Attachment metadata rejected",
                extra={"attachment_id": attachment_id, "error": str(e)},
            )
            return None

    async def resolve_url(self, url: str) -> int | None:
        """Map an image URL back to its attachment id, or None."""
        if not url:
            return None
        try:
            return await self.media_store.resolve_url_to_attachment_id(url)
        except PostAnalyzerError as e:
            logger.warning(
                "Attachment URL lookup failed",
                extra={"url": url, "error": str(e)},
            )
            return None


def build_image_record(metadata: AttachmentMetadata) -> ImageRecord:
    """Map stored attachment metadata onto a media-library ImageRecord."""
    filename = basename(metadata.file_path) if metadata.file_path else ""
    if not filename:
        filename = basename(urlsplit(metadata.url).path)

    return ImageRecord(
        id=metadata.id,
        src=metadata.url,
        alt=metadata.alt or "",
        title=metadata.title or "",
        caption=metadata.caption or "",
        description=metadata.description or "",
        filename=filename,
        width=metadata.width,
        height=metadata.height,
        type="media-library",
        mime_type=metadata.mime_type or None,
        file_size=metadata.file_size,
        upload_date=metadata.created_at,
        image_meta=metadata.image_meta,
        sizes=list(metadata.renditions.keys()),
    )


def as_attachment_id(value: object) -> int | None:
    """Coerce a loosely typed attachment id to a positive int, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip()) or None
    return None
